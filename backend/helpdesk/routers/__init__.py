from . import auth, categories, priorities, roles, tickets, users

__all__ = ["auth", "categories", "priorities", "roles", "tickets", "users"]
