"""HTTP tests for member administration, the admin gate and CSRF enforcement."""

from helpers import MEMBER_PASSWORD, create_member, login


class TestCsrfGate:
    """Tests for the CSRF check on state-changing requests."""

    def test_missing_header_reaches_handler(self, admin_client):
        client, _ = admin_client
        response = client.post("/api/v1/admin/expired-check")
        assert response.status_code == 200
        assert response.json() == []

    def test_invalid_header_forbidden(self, admin_client, database):
        client, _ = admin_client
        response = client.post(
            "/api/v1/members",
            json={"email": "bob@example.com", "username": "bob", "full_name": "Bob", "password": MEMBER_PASSWORD},
            headers={"X-CSRF-Token": "forged"},
        )
        assert response.status_code == 403
        assert response.json()["message"] == "Forbidden"
        assert len(database.get_collection("members").documents) == 1

    def test_safe_methods_need_no_token(self, admin_client):
        client, _ = admin_client
        assert client.get("/api/v1/members", headers={"X-CSRF-Token": "forged"}).status_code == 200


class TestAdminGate:
    def test_regular_member_forbidden(self, admin_client):
        client, csrf_token = admin_client
        member = create_member(client, csrf_token, "bob")
        client.post(f"/api/v1/members/{member['id']}/activate", headers={"X-CSRF-Token": csrf_token})
        client.cookies.clear()

        member_csrf = login(client, "bob", MEMBER_PASSWORD)

        assert client.get("/api/v1/members").status_code == 200
        response = client.post(f"/api/v1/members/{member['id']}/expire", headers={"X-CSRF-Token": member_csrf})
        assert response.status_code == 403
        assert client.get("/api/v1/admin/integrations").status_code == 403

    def test_anonymous_unauthorized(self, admin_client):
        client, csrf_token = admin_client
        client.cookies.clear()
        response = client.post("/api/v1/admin/maintenance", headers={"X-CSRF-Token": csrf_token})
        assert response.status_code == 401


class TestMemberLifecycle:
    """Tests for the member administration endpoints."""

    def test_create_activate_expire(self, admin_client, recorder):
        client, csrf_token = admin_client
        headers = {"X-CSRF-Token": csrf_token}
        member = create_member(client, csrf_token, "carol")
        assert member["status"] == "pending"

        activated = client.post(f"/api/v1/members/{member['id']}/activate", headers=headers).json()
        assert activated["status"] == "active"

        expired = client.post(f"/api/v1/members/{member['id']}/expire", headers=headers).json()
        assert expired["status"] == "expired"
        assert expired["expires_at"] is not None

        event_types = [event.type for event in recorder.events]
        assert event_types[-3:] == ["member_created", "member_activated", "member_expired"]

    def test_duplicate_username_conflicts(self, admin_client):
        client, csrf_token = admin_client
        create_member(client, csrf_token, "dave")
        response = client.post(
            "/api/v1/members",
            json={"email": "dave2@example.com", "username": "dave", "full_name": "Dave", "password": MEMBER_PASSWORD},
            headers={"X-CSRF-Token": csrf_token},
        )
        assert response.status_code == 409

    def test_expiring_exempt_member_rejected(self, admin_client):
        client, csrf_token = admin_client
        admin_id = client.get("/api/v1/profile").json()["id"]
        response = client.post(f"/api/v1/members/{admin_id}/expire", headers={"X-CSRF-Token": csrf_token})
        assert response.status_code == 400

    def test_update_and_extend_dues(self, admin_client):
        client, csrf_token = admin_client
        headers = {"X-CSRF-Token": csrf_token}
        member = create_member(client, csrf_token, "erin")

        updated = client.patch(f"/api/v1/members/{member['id']}", json={"membership_type": "student"}, headers=headers)
        assert updated.json()["membership_type"] == "student"

        rejected = client.patch(f"/api/v1/members/{member['id']}", json={"status": "active"}, headers=headers)
        assert rejected.status_code == 400

        extended = client.post(f"/api/v1/members/{member['id']}/extend-dues", json={"days": 30}, headers=headers)
        assert extended.json()["dues_paid_until"] is not None

    def test_suspend_and_delete(self, admin_client):
        client, csrf_token = admin_client
        headers = {"X-CSRF-Token": csrf_token}
        member = create_member(client, csrf_token, "frank")

        suspended = client.post(f"/api/v1/members/{member['id']}/suspend", headers=headers)
        assert suspended.json()["status"] == "suspended"

        assert client.delete(f"/api/v1/members/{member['id']}", headers=headers).status_code == 204
        assert client.get(f"/api/v1/members/{member['id']}").status_code == 404

    def test_admin_cannot_delete_self(self, admin_client):
        client, csrf_token = admin_client
        admin_id = client.get("/api/v1/profile").json()["id"]
        assert client.delete(f"/api/v1/members/{admin_id}", headers={"X-CSRF-Token": csrf_token}).status_code == 400

    def test_integration_health(self, admin_client):
        client, _ = admin_client
        assert client.get("/api/v1/admin/integrations").json() == {"recorder": None}

    def test_null_for_required_field_rejected(self, admin_client):
        """Test that nulling a required field is refused and leaves the member readable."""
        client, csrf_token = admin_client
        headers = {"X-CSRF-Token": csrf_token}
        member = create_member(client, csrf_token, "grace")

        for field in ("status", "full_name", "role", "bypass_dues", "membership_type"):
            response = client.patch(f"/api/v1/members/{member['id']}", json={field: None}, headers=headers)
            assert response.status_code == 422

        assert client.get("/api/v1/members").status_code == 200
        assert client.get(f"/api/v1/members/{member['id']}").json()["status"] == "pending"

    def test_null_clears_optional_field(self, admin_client):
        client, csrf_token = admin_client
        headers = {"X-CSRF-Token": csrf_token}
        member = create_member(client, csrf_token, "heidi")
        client.post(f"/api/v1/members/{member['id']}/extend-dues", json={"days": 30}, headers=headers)

        response = client.patch(f"/api/v1/members/{member['id']}", json={"dues_paid_until": None}, headers=headers)

        assert response.status_code == 200
        assert response.json()["dues_paid_until"] is None
