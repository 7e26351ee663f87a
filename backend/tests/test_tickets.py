import re

import pytest
from fastapi import HTTPException
from sqlalchemy import func, select

from conftest import API, auth_headers

from helpdesk import models
from helpdesk.messages import (
    CategoryMessagesError,
    PriorityMessagesError,
    TicketErrorMessages,
    TicketsMessages,
    UserMessagesError,
)
from helpdesk.schemas import TicketCreate
from helpdesk.services import tickets as ticket_service


def _payload(category, priority, title="No enciende el monitor"):
    return {
        "title": title,
        "description": "Desde esta mañana no da imagen",
        "category_id": category.id,
        "priority_id": priority.id,
    }


def _create(client, headers, category, priority, title="No enciende el monitor"):
    r = client.post(f"{API}/tickets", json=_payload(category, priority, title), headers=headers)
    assert r.status_code == 201, r.json()
    return r


def _ticket_count(test_db):
    return test_db.execute(select(func.count()).select_from(models.Ticket)).scalar_one()


def _only_ticket(test_db):
    return test_db.execute(select(models.Ticket)).scalar_one()


class TestCreate:
    def test_create_ticket(self, client, test_db, user_headers, normal_user, category, priority):
        r = _create(client, user_headers, category, priority)
        assert r.json() == {"ok": True, "message": TicketsMessages.TICKET_CREATED}

        ticket = _only_ticket(test_db)
        assert re.fullmatch(r"[a-z0-9]{15}", ticket.ticket_code)
        assert ticket.status == "Abierto"
        assert ticket.creator_id == normal_user.id
        assert ticket.comments == "El usuario: Ana Pérez abrió un nuevo ticket"

    def test_codes_are_distinct(self, client, test_db, user_headers, category, priority):
        for i in range(5):
            _create(client, user_headers, category, priority, title=f"Ticket {i}")
        codes = test_db.execute(select(models.Ticket.ticket_code)).scalars().all()
        assert len(set(codes)) == 5

    def test_colliding_code_is_regenerated(self, client, test_db, user_headers, category, priority, monkeypatch):
        _create(client, user_headers, category, priority, title="Primero")
        existing = _only_ticket(test_db).ticket_code
        codes = iter([existing, "b" * 15])
        monkeypatch.setattr(ticket_service, "generate_random_word", lambda length: next(codes))

        _create(client, user_headers, category, priority, title="Segundo")
        stored = test_db.execute(select(models.Ticket.ticket_code)).scalars().all()
        assert sorted(stored) == sorted([existing, "b" * 15])

    def test_code_that_always_collides_fails(self, client, test_db, user_headers, category, priority, monkeypatch):
        _create(client, user_headers, category, priority, title="Primero")
        existing = _only_ticket(test_db).ticket_code
        monkeypatch.setattr(ticket_service, "generate_random_word", lambda length: existing)

        r = client.post(f"{API}/tickets", json=_payload(category, priority, "Segundo"), headers=user_headers)
        assert r.status_code == 500
        assert r.json()["message"] == TicketErrorMessages.TICKET_ERROR
        assert _ticket_count(test_db) == 1

    def test_missing_category(self, client, test_db, user_headers, category, priority):
        body = _payload(category, priority)
        body["category_id"] = "no-existe"
        r = client.post(f"{API}/tickets", json=body, headers=user_headers)
        assert r.status_code == 404
        assert r.json()["message"] == CategoryMessagesError.CATEGORY_NOT_FOUND
        assert _ticket_count(test_db) == 0

    def test_missing_priority(self, client, test_db, user_headers, category, priority):
        body = _payload(category, priority)
        body["priority_id"] = "no-existe"
        r = client.post(f"{API}/tickets", json=body, headers=user_headers)
        assert r.status_code == 404
        assert r.json()["message"] == PriorityMessagesError.PRIORITY_NOT_FOUND
        assert _ticket_count(test_db) == 0

    def test_subcategory_is_not_a_ticket_category(self, client, test_db, user_headers, subcategory, priority):
        r = client.post(f"{API}/tickets", json=_payload(subcategory, priority), headers=user_headers)
        assert r.status_code == 404
        assert r.json()["message"] == CategoryMessagesError.CATEGORY_NOT_FOUND
        assert _ticket_count(test_db) == 0

    def test_deleted_priority_is_not_found(self, client, test_db, user_headers, category, priority):
        priority.deleted_at = models.base.utcnow()
        test_db.commit()
        r = client.post(f"{API}/tickets", json=_payload(category, priority), headers=user_headers)
        assert r.status_code == 404

    def test_missing_creator(self, test_db, cache, category, priority):
        body = TicketCreate(**_payload(category, priority))
        with pytest.raises(HTTPException) as exc:
            ticket_service.create_ticket(test_db, cache, body, "no-existe")
        assert exc.value.status_code == 404
        assert exc.value.detail == UserMessagesError.USER_NOT_FOUND
        assert _ticket_count(test_db) == 0


class TestVisibility:
    def test_ordinary_user_sees_only_own_tickets(
        self, client, make_user, user_headers, normal_user, category, priority
    ):
        other = make_user(email="otro@example.com")
        _create(client, user_headers, category, priority, title="Mío")
        _create(client, auth_headers(other), category, priority, title="Ajeno")

        tickets = client.get(f"{API}/tickets", headers=user_headers).json()["tickets"]
        assert [t["title"] for t in tickets] == ["Mío"]
        assert all(t["creator"]["id"] == normal_user.id for t in tickets)

    @pytest.mark.parametrize("role", ["admin", "soporte"])
    def test_privileged_roles_see_everything(self, client, make_user, user_headers, category, priority, role):
        staff = make_user(role)
        _create(client, user_headers, category, priority, title="Uno")
        _create(client, auth_headers(make_user()), category, priority, title="Dos")

        body = client.get(f"{API}/tickets", headers=auth_headers(staff, role)).json()
        assert {t["title"] for t in body["tickets"]} == {"Uno", "Dos"}
        assert body["meta"]["total_count"] == 2

    def test_list_never_exposes_password(self, client, user_headers, category, priority):
        _create(client, user_headers, category, priority)
        ticket = client.get(f"{API}/tickets", headers=user_headers).json()["tickets"][0]
        assert "password_hash" not in ticket["creator"]

    def test_list_requires_authentication(self, client):
        assert client.get(f"{API}/tickets").status_code == 401


class TestCacheVisibility:
    def test_create_is_visible_after_cached_list(self, client, user_headers, category, priority):
        _create(client, user_headers, category, priority, title="Primero")
        assert len(client.get(f"{API}/tickets", headers=user_headers).json()["tickets"]) == 1

        _create(client, user_headers, category, priority, title="Segundo")
        assert len(client.get(f"{API}/tickets", headers=user_headers).json()["tickets"]) == 2

    def test_status_change_is_visible_to_other_callers(
        self, client, test_db, user_headers, support_headers, category, priority
    ):
        _create(client, user_headers, category, priority)
        ticket_id = _only_ticket(test_db).id
        assert client.get(f"{API}/tickets", headers=user_headers).json()["tickets"][0]["status"] == "Abierto"

        client.put(f"{API}/tickets/status/{ticket_id}", json={"status": "En proceso"}, headers=support_headers)
        assert client.get(f"{API}/tickets", headers=user_headers).json()["tickets"][0]["status"] == "En proceso"

    def test_delete_and_restore_are_visible(self, client, test_db, user_headers, admin_headers, category, priority):
        _create(client, user_headers, category, priority)
        ticket_id = _only_ticket(test_db).id
        assert len(client.get(f"{API}/tickets", headers=user_headers).json()["tickets"]) == 1

        client.delete(f"{API}/tickets/{ticket_id}", headers=admin_headers)
        assert client.get(f"{API}/tickets", headers=user_headers).json()["tickets"] == []
        deleted = client.get(f"{API}/tickets", params={"deleted": True}, headers=user_headers).json()
        assert len(deleted["tickets"]) == 1

        client.post(f"{API}/tickets/{ticket_id}", headers=admin_headers)
        assert len(client.get(f"{API}/tickets", headers=user_headers).json()["tickets"]) == 1


class TestLookups:
    def test_get_by_id_and_code(self, client, test_db, user_headers, support_headers, category, priority):
        _create(client, user_headers, category, priority)
        ticket = _only_ticket(test_db)

        r = client.get(f"{API}/tickets/{ticket.id}", headers=support_headers)
        assert r.status_code == 200
        assert r.json()["category"]["name"] == "Hardware"
        assert r.json()["priority"]["name"] == "Alta"

        r = client.get(f"{API}/tickets/code/{ticket.ticket_code}", headers=support_headers)
        assert r.json()["id"] == ticket.id

    def test_unknown_ticket(self, client, support_headers):
        r = client.get(f"{API}/tickets/no-existe", headers=support_headers)
        assert r.status_code == 404
        assert r.json()["message"] == TicketErrorMessages.TICKET_NOT_FOUND

    def test_ordinary_user_cannot_lookup(self, client, user_headers):
        assert client.get(f"{API}/tickets/code/abc", headers=user_headers).status_code == 403


class TestStatusAndAssignment:
    def test_close_ticket_sets_closed_date(self, client, test_db, user_headers, support_headers, category, priority):
        _create(client, user_headers, category, priority)
        ticket_id = _only_ticket(test_db).id

        r = client.put(
            f"{API}/tickets/status/{ticket_id}",
            json={"status": "Cerrado", "comments": "Se cambió el cable"},
            headers=support_headers,
        )
        assert r.json()["message"] == TicketsMessages.TICKET_CHANGE_STATUS

        body = client.get(f"{API}/tickets/{ticket_id}", headers=support_headers).json()
        assert body["status"] == "Cerrado"
        assert body["comments"] == "Se cambió el cable"
        assert body["closed_date"] is not None

    def test_status_change_on_unknown_ticket(self, client, support_headers):
        r = client.put(f"{API}/tickets/status/no-existe", json={"status": "Cerrado"}, headers=support_headers)
        assert r.status_code == 404

    def test_ordinary_user_cannot_change_status(self, client, test_db, user_headers, category, priority):
        _create(client, user_headers, category, priority)
        ticket_id = _only_ticket(test_db).id
        r = client.put(f"{API}/tickets/status/{ticket_id}", json={"status": "Cerrado"}, headers=user_headers)
        assert r.status_code == 403

    def test_assign_technician(
        self, client, test_db, user_headers, support_headers, support_user, category, priority
    ):
        _create(client, user_headers, category, priority)
        ticket_id = _only_ticket(test_db).id

        r = client.put(
            f"{API}/tickets/assign/tech/{ticket_id}",
            json={"assigned_tech_id": support_user.id},
            headers=support_headers,
        )
        assert r.status_code == 200
        body = client.get(f"{API}/tickets/{ticket_id}", headers=support_headers).json()
        assert body["assigned_technician"]["id"] == support_user.id
        assert body["assigned_date"] is not None

    def test_assign_unknown_technician(self, client, test_db, user_headers, support_headers, category, priority):
        _create(client, user_headers, category, priority)
        ticket_id = _only_ticket(test_db).id
        r = client.put(
            f"{API}/tickets/assign/tech/{ticket_id}",
            json={"assigned_tech_id": "no-existe"},
            headers=support_headers,
        )
        assert r.status_code == 404
        assert r.json()["message"] == UserMessagesError.USER_NOT_FOUND


class TestDeleteRestore:
    def test_restore_not_deleted_ticket_is_not_found(
        self, client, test_db, user_headers, admin_headers, category, priority
    ):
        _create(client, user_headers, category, priority)
        ticket_id = _only_ticket(test_db).id
        r = client.post(f"{API}/tickets/{ticket_id}", headers=admin_headers)
        assert r.status_code == 404

    def test_restore_unknown_ticket(self, client, admin_headers):
        assert client.post(f"{API}/tickets/no-existe", headers=admin_headers).status_code == 404

    def test_delete_twice(self, client, test_db, user_headers, admin_headers, category, priority):
        _create(client, user_headers, category, priority)
        ticket_id = _only_ticket(test_db).id
        r = client.delete(f"{API}/tickets/{ticket_id}", headers=admin_headers)
        assert r.json()["message"] == TicketsMessages.TICKET_REMOVED
        assert client.delete(f"{API}/tickets/{ticket_id}", headers=admin_headers).status_code == 404

    def test_support_cannot_delete(self, client, test_db, user_headers, support_headers, category, priority):
        _create(client, user_headers, category, priority)
        ticket_id = _only_ticket(test_db).id
        assert client.delete(f"{API}/tickets/{ticket_id}", headers=support_headers).status_code == 403
