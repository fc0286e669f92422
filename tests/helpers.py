"""HTTP helpers shared by the web tests."""

from fastapi.testclient import TestClient

ADMIN_PASSWORD = "admin-password"
MEMBER_PASSWORD = "member-password"


def complete_setup(client: TestClient) -> dict:
    response = client.post(
        "/setup",
        json={
            "org_name": "Hackerspace",
            "email": "admin@example.com",
            "username": "admin",
            "full_name": "Admin",
            "password": ADMIN_PASSWORD,
            "password_confirm": ADMIN_PASSWORD,
        },
    )
    assert response.status_code == 201
    return response.json()


def login(client: TestClient, identifier: str, password: str) -> str:
    """Log in and return the CSRF token; the session cookie stays in the client."""
    response = client.post("/api/v1/auth/login", json={"identifier": identifier, "password": password})
    assert response.status_code == 200
    return response.json()["csrf_token"]


def create_member(client: TestClient, csrf_token: str, username: str, password: str = MEMBER_PASSWORD) -> dict:
    """Create a pending member through the admin API."""
    response = client.post(
        "/api/v1/members",
        json={"email": f"{username}@example.com", "username": username, "full_name": username.title(), "password": password},
        headers={"X-CSRF-Token": csrf_token},
    )
    assert response.status_code == 201
    return response.json()
