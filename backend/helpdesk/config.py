from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # --- DB ---
    DB_USER: str = "helpdesk"
    DB_PASSWORD: str = ""
    DB_HOST: str = "127.0.0.1"
    DB_PORT: int = 3306
    DB_NAME: str = "helpdesk"
    DATABASE_URL: Optional[str] = None    # si viene, tiene prioridad sobre DB_*
    DB_AUTO_CREATE: bool = False          # create_all al arrancar (sólo dev)

    # --- Cache de respuestas ---
    CACHE_BACKEND: str = "redis"          # "redis" o "memory"
    REDIS_HOST: str = "127.0.0.1"
    REDIS_PORT: int = 6379
    REDIS_USERNAME: Optional[str] = None
    REDIS_PASSWORD: Optional[str] = None
    REDIS_DB: int = 0
    CACHE_TTL_SECONDS: int = 30
    CACHE_MAXSIZE: int = 1024

    # --- Tokens ---
    APP_SECRET: str                       # firma de access tokens (HS256)
    SECRET_JWT_REFRESH: str
    SECRET_JWT_REGISTER: str              # tokens de un solo uso (verificación / reset)

    # Identificadores del API (coinciden con el JWT emitido)
    API_AUDIENCE: str = "helpdesk.api"
    API_ISSUER: str = "helpdesk.local"

    ACCESS_TOKEN_EXPIRE_MINUTES: int = 15
    REFRESH_TOKEN_EXPIRE_DAYS: int = 14
    VERIFY_TOKEN_EXPIRE_HOURS: int = 24
    RESET_TOKEN_EXPIRE_MINUTES: int = 60

    # --- Login ---
    MAX_PASS_FAILURES: int = 3

    # Roles que ven todos los tickets
    PRIVILEGED_ROLES: str = "admin,soporte"

    # --- Servicio de correo ---
    URL_MAIL_SERVICE: Optional[str] = None
    APP_EXCHANGE: str = "helpdesk"
    APP_FRONT_HOST: str = "http://localhost:5173"
    APP_MAIL: str = ""
    APP_IMG: str = ""
    APP_COLOR: str = "#1d4ed8"
    APP_EMAIL_FROM: str = ""
    MAIL_TIMEOUT_SECONDS: int = 10

    # --- Seed ---
    SEED_ON_STARTUP: bool = True
    ADMIN_EMAIL: Optional[str] = None
    ADMIN_PASSWORD: Optional[str] = None
    ADMIN_FIRST_NAME: str = "Admin"
    ADMIN_LAST_NAME: str = "Helpdesk"

    # --- HTTP ---
    API_PREFIX: str = "/api/v1"
    CORS_ORIGINS: str = "http://localhost:5173,http://127.0.0.1:5173"

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"mysql+pymysql://{self.DB_USER}:{self.DB_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}?charset=utf8mb4"
        )

    @property
    def privileged_roles(self) -> set[str]:
        return {r.strip() for r in self.PRIVILEGED_ROLES.split(",") if r.strip()}

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()
