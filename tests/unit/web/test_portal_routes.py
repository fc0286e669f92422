"""HTTP tests for the browser portal and public pages."""

from helpers import MEMBER_PASSWORD, create_member, login


class TestLoginRedirect:
    """Tests for the redirecting gate."""

    def test_anonymous_redirected_with_return_path(self, admin_client):
        client, _ = admin_client
        client.cookies.clear()

        response = client.get("/portal/dashboard?tab=dues", follow_redirects=False)

        assert response.status_code == 303
        assert response.headers["location"] == "/login?redirect=%2Fportal%2Fdashboard%3Ftab%3Ddues"

    def test_pending_member_redirected(self, admin_client):
        client, csrf_token = admin_client
        create_member(client, csrf_token, "pending")
        client.cookies.clear()
        login(client, "pending", MEMBER_PASSWORD)

        response = client.get("/portal/dashboard", follow_redirects=False)

        assert response.status_code == 303
        assert response.headers["location"].startswith("/login?redirect=")


class TestDashboard:
    def test_dashboard_issues_csrf_token(self, admin_client):
        client, _ = admin_client
        response = client.get("/portal/dashboard")
        assert response.status_code == 200
        assert response.json()["member"]["username"] == "admin"
        assert response.json()["csrf_token"]


class TestProfileForm:
    """Tests for the body-token CSRF check."""

    def test_body_token_accepted(self, admin_client):
        client, _ = admin_client
        form_token = client.get("/portal/dashboard").json()["csrf_token"]

        response = client.post("/portal/profile", data={"full_name": "Ada Admin", "csrf_token": form_token})

        assert response.status_code == 200
        assert response.json()["full_name"] == "Ada Admin"

    def test_header_token_accepted(self, admin_client):
        client, csrf_token = admin_client
        response = client.post("/portal/profile", data={"full_name": "Ada"}, headers={"X-CSRF-Token": csrf_token})
        assert response.status_code == 200

    def test_missing_token_forbidden(self, admin_client):
        client, _ = admin_client
        response = client.post("/portal/profile", data={"full_name": "Mallory"})
        assert response.status_code == 403

    def test_wrong_body_token_forbidden(self, admin_client):
        client, _ = admin_client
        response = client.post("/portal/profile", data={"full_name": "Mallory", "csrf_token": "forged"})
        assert response.status_code == 403

    def test_empty_header_does_not_skip_body_check(self, admin_client):
        """Test that a blank header counts as no header, so the body token is still required."""
        client, _ = admin_client

        response = client.post("/portal/profile", data={"full_name": "Forged"}, headers={"X-CSRF-Token": ""})

        assert response.status_code == 403
        assert client.get("/api/v1/profile").json()["full_name"] == "Admin"


class TestWelcome:
    def test_anonymous_greeted_as_guest(self, admin_client):
        client, _ = admin_client
        client.cookies.clear()
        assert client.get("/events/welcome").json() == {"message": "Welcome, guest!", "authenticated": False}

    def test_known_member_greeted_by_name(self, admin_client):
        client, _ = admin_client
        assert client.get("/events/welcome").json() == {"message": "Welcome back, Admin!", "authenticated": True}

    def test_invalid_session_treated_as_anonymous(self, admin_client):
        client, _ = admin_client
        client.cookies.clear()
        response = client.get("/events/welcome", headers={"Cookie": "session=" + "0" * 64})
        assert response.json()["authenticated"] is False

    def test_pending_member_treated_as_anonymous(self, admin_client):
        """Test that only members in good standing are attached on public pages."""
        client, csrf_token = admin_client
        create_member(client, csrf_token, "pending")
        client.cookies.clear()
        login(client, "pending", MEMBER_PASSWORD)

        assert client.get("/events/welcome").json() == {"message": "Welcome, guest!", "authenticated": False}


class TestLoginPage:
    """Tests for the page the redirecting gate points at."""

    def test_redirect_lands_on_login_page(self, admin_client):
        client, _ = admin_client
        client.cookies.clear()

        response = client.get("/portal/dashboard?tab=dues")

        assert response.status_code == 200
        assert response.json() == {
            "login_endpoint": "/api/v1/auth/login",
            "redirect": "/portal/dashboard?tab=dues",
            "authenticated": False,
        }

    def test_login_then_return(self, admin_client):
        client, _ = admin_client
        page = client.get("/login", params={"redirect": "/portal/dashboard"}).json()
        assert page["authenticated"] is True
        assert client.get(page["redirect"]).status_code == 200

    def test_offsite_redirect_replaced(self, admin_client):
        client, _ = admin_client
        for target in ("https://evil.example.com/", "//evil.example.com/", "portal"):
            assert client.get("/login", params={"redirect": target}).json()["redirect"] == "/portal/dashboard"
