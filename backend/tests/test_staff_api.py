"""
Tests for the staff order queue endpoints.
"""

import pytest


@pytest.fixture
def order_id(active_session, latte, place_order):
    return place_order([{"menu_item_id": latte.id, "quantity": 1}])["order"]["id"]


class TestQueueAccess:

    def test_requires_authentication(self, client, active_session):
        response = client.get("/api/orders/active")
        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_rejects_garbage_token(self, client, active_session):
        response = client.get("/api/orders/active", headers={"Authorization": "Bearer nope"})
        assert response.status_code == 401

    def test_deleted_user_loses_access(self, client, db_session, worker_user, worker_headers, active_session):
        db_session.delete(worker_user)
        db_session.commit()

        response = client.get("/api/orders/active", headers=worker_headers)
        assert response.status_code == 401

    def test_no_active_session_is_400(self, client, worker_headers):
        response = client.get("/api/orders/active", headers=worker_headers)
        assert response.status_code == 400
        assert response.json()["detail"] == "No active session."

    def test_list_queue(self, client, worker_headers, order_id):
        response = client.get("/api/orders/active", headers=worker_headers)
        assert response.status_code == 200
        orders = response.json()["orders"]
        assert [o["id"] for o in orders] == [order_id]
        assert orders[0]["items"][0]["menu_item_name"] == "Oat Latte"


class TestAssignFlow:

    def test_full_lifecycle(self, client, worker_headers, worker_user, order_id):
        assigned = client.post(f"/api/orders/{order_id}/assign", headers=worker_headers)
        assert assigned.status_code == 200
        assert assigned.json()["order"]["assigned_worker_id"] == worker_user.id

        for status in ("MAKING", "READY"):
            response = client.patch(
                f"/api/orders/{order_id}/status",
                json={"status": status},
                headers=worker_headers,
            )
            assert response.status_code == 200
            assert response.json()["order"]["status"] == status

        assert client.get("/api/orders/active", headers=worker_headers).json()["orders"][0]["fulfilled_at"]

    def test_second_worker_gets_conflict(self, client, worker_headers, other_worker_headers, order_id):
        client.post(f"/api/orders/{order_id}/assign", headers=worker_headers)

        response = client.post(f"/api/orders/{order_id}/assign", headers=other_worker_headers)
        assert response.status_code == 409
        assert response.json()["detail"] == "Order already assigned to another user."

    def test_assign_twice_is_idempotent(self, client, worker_headers, order_id):
        first = client.post(f"/api/orders/{order_id}/assign", headers=worker_headers)
        second = client.post(f"/api/orders/{order_id}/assign", headers=worker_headers)
        assert second.status_code == 200
        assert second.json()["order"]["assigned_at"] == first.json()["order"]["assigned_at"]

    def test_status_by_non_assignee_forbidden(self, client, worker_headers, other_worker_headers, order_id):
        client.post(f"/api/orders/{order_id}/assign", headers=worker_headers)

        response = client.patch(
            f"/api/orders/{order_id}/status",
            json={"status": "MAKING"},
            headers=other_worker_headers,
        )
        assert response.status_code == 403

    def test_admin_updates_any_order(self, client, worker_headers, admin_headers, order_id):
        client.post(f"/api/orders/{order_id}/assign", headers=worker_headers)

        response = client.patch(
            f"/api/orders/{order_id}/status",
            json={"status": "READY"},
            headers=admin_headers,
        )
        assert response.status_code == 200

    def test_invalid_status(self, client, admin_headers, order_id):
        response = client.patch(
            f"/api/orders/{order_id}/status",
            json={"status": "SHIPPED"},
            headers=admin_headers,
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid status."

    def test_unassign(self, client, worker_headers, order_id):
        client.post(f"/api/orders/{order_id}/assign", headers=worker_headers)

        response = client.post(f"/api/orders/{order_id}/unassign", headers=worker_headers)
        assert response.status_code == 200
        assert response.json()["order"]["assigned_worker_id"] is None

    def test_admin_cannot_unassign_workers_order(self, client, worker_headers, admin_headers, order_id):
        client.post(f"/api/orders/{order_id}/assign", headers=worker_headers)

        response = client.post(f"/api/orders/{order_id}/unassign", headers=admin_headers)
        assert response.status_code == 403
        assert response.json()["detail"] == "Only the assigned worker can unassign this order."

    def test_unknown_order(self, client, worker_headers, active_session):
        response = client.post("/api/orders/999999/assign", headers=worker_headers)
        assert response.status_code == 404

    def test_order_from_previous_session(self, client, admin_headers, worker_headers, order_id, inactive_session):
        client.post(f"/api/sessions/{inactive_session.id}/activate", headers=admin_headers)

        response = client.post(f"/api/orders/{order_id}/assign", headers=worker_headers)
        assert response.status_code == 404
        assert response.json()["detail"] == "Order not found in active session."
