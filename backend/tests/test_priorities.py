from conftest import API

from helpdesk import models
from helpdesk.messages import PriorityMessages, PriorityMessagesError


def _seed_priorities(test_db, n):
    for i in range(n):
        test_db.add(models.Priority(name=f"P{i:02d}"))
    test_db.commit()


class TestPagination:
    def test_25_priorities_in_pages_of_10(self, client, test_db, admin_headers):
        _seed_priorities(test_db, 25)

        first = client.get(f"{API}/priorities", params={"limit": 10}, headers=admin_headers).json()
        assert len(first["priorities"]) == 10
        assert first["meta"]["total_pages"] == 3
        assert first["meta"]["total_count"] == 25

        third = client.get(f"{API}/priorities", params={"limit": 10, "page": 3}, headers=admin_headers).json()
        assert len(third["priorities"]) == 5
        assert third["meta"]["current_page"] == 3

    def test_pages_do_not_overlap(self, client, test_db, admin_headers):
        _seed_priorities(test_db, 25)
        ids = set()
        for page in (1, 2, 3):
            body = client.get(f"{API}/priorities", params={"limit": 10, "page": page}, headers=admin_headers).json()
            ids.update(p["id"] for p in body["priorities"])
        assert len(ids) == 25

    def test_default_page_size(self, client, test_db, admin_headers):
        _seed_priorities(test_db, 12)
        body = client.get(f"{API}/priorities", headers=admin_headers).json()
        assert len(body["priorities"]) == 10
        assert body["meta"]["limit"] == 10


class TestCrud:
    def test_create_duplicate(self, client, admin_headers, priority):
        r = client.post(f"{API}/priorities", json={"name": "Alta"}, headers=admin_headers)
        assert r.status_code == 400
        assert r.json()["message"] == PriorityMessagesError.PRIORITY_ALREADY_EXIST

    def test_create_is_visible_in_cached_list(self, client, admin_headers, priority):
        assert client.get(f"{API}/priorities", headers=admin_headers).json()["meta"]["total_count"] == 1
        r = client.post(f"{API}/priorities", json={"name": "Baja"}, headers=admin_headers)
        assert r.json()["message"] == PriorityMessages.PRIORITY_CREATED
        assert client.get(f"{API}/priorities", headers=admin_headers).json()["meta"]["total_count"] == 2

    def test_update(self, client, admin_headers, priority):
        r = client.put(f"{API}/priorities/{priority.id}", json={"name": "Urgente"}, headers=admin_headers)
        assert r.json()["message"] == PriorityMessages.PRIORITY_UPDATED
        assert client.get(f"{API}/priorities/{priority.id}", headers=admin_headers).json()["name"] == "Urgente"

    def test_update_unknown(self, client, admin_headers):
        r = client.put(f"{API}/priorities/no-existe", json={"name": "Urgente"}, headers=admin_headers)
        assert r.status_code == 404
        assert r.json()["message"] == PriorityMessagesError.PRIORITY_NOT_FOUND

    def test_change_status_messages(self, client, admin_headers, priority):
        url = f"{API}/priorities/{priority.id}/change-status"
        assert client.put(url, json={"status": False}, headers=admin_headers).json()["message"] == (
            PriorityMessages.PRIORITY_DESACTIVED
        )
        assert client.put(url, json={"status": True}, headers=admin_headers).json()["message"] == (
            PriorityMessages.PRIORITY_ACTIVED
        )

    def test_restore_not_deleted(self, client, admin_headers, priority):
        assert client.post(f"{API}/priorities/{priority.id}", headers=admin_headers).status_code == 404

    def test_delete_and_restore(self, client, admin_headers, priority):
        r = client.delete(f"{API}/priorities/{priority.id}", headers=admin_headers)
        assert r.json()["message"] == PriorityMessages.PRIORITY_REMOVED
        assert client.get(f"{API}/priorities/{priority.id}", headers=admin_headers).status_code == 404
        r = client.post(f"{API}/priorities/{priority.id}", headers=admin_headers)
        assert r.json()["message"] == PriorityMessages.PRIORITY_RESTORED


class TestByStatus:
    def test_filters_by_status(self, client, test_db, support_headers, priority):
        test_db.add(models.Priority(name="Baja", status=False))
        test_db.commit()
        active = client.get(f"{API}/priorities/status/true", headers=support_headers).json()
        inactive = client.get(f"{API}/priorities/status/false", headers=support_headers).json()
        assert [p["name"] for p in active] == ["Alta"]
        assert [p["name"] for p in inactive] == ["Baja"]

    def test_invalid_status(self, client, support_headers):
        r = client.get(f"{API}/priorities/status/quizas", headers=support_headers)
        assert r.status_code == 400
        assert r.json()["message"] == PriorityMessagesError.INVALID_STATUS


class TestRoleGate:
    def test_support_cannot_list_but_can_read(self, client, support_headers, priority):
        assert client.get(f"{API}/priorities", headers=support_headers).status_code == 403
        assert client.get(f"{API}/priorities/{priority.id}", headers=support_headers).status_code == 200

    def test_ordinary_user_cannot_read(self, client, user_headers, priority):
        assert client.get(f"{API}/priorities/{priority.id}", headers=user_headers).status_code == 403
