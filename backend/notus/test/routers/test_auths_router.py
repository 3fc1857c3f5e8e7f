import pytest
from fastapi.testclient import TestClient

from notus.config import AppConfig
from notus.main import create_app

PASSWORD = "correct-horse"


@pytest.fixture
def client(database, notifier, clock):
    app = create_app(
        database=database, config=AppConfig(), notifier=notifier, clock=clock
    )
    return TestClient(app)


def signup(client, email, **fields):
    response = client.post(
        "/api/v1/auths/signup", json={"email": email, "password": PASSWORD, **fields}
    )
    assert response.status_code == 200, response.text
    return response.json()


def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


class TestSignup:
    """Tests for /api/v1/auths/signup."""

    def test_signup_returns_token(self, client):
        data = signup(client, "alice@example.com", first_name="Alice")

        assert data["token_type"] == "Bearer"
        assert data["user"]["username"] == "alice"
        assert "password_hash" not in data["user"]

    def test_first_user_is_admin(self, client):
        assert signup(client, "admin@example.com")["user"]["is_admin"] is True
        assert signup(client, "bob@example.com")["user"]["is_admin"] is False

    def test_invalid_email(self, client):
        response = client.post(
            "/api/v1/auths/signup", json={"email": "not-an-email", "password": PASSWORD}
        )

        assert response.status_code == 400

    def test_short_password(self, client):
        response = client.post(
            "/api/v1/auths/signup", json={"email": "a@example.com", "password": "short"}
        )

        assert response.status_code == 400

    def test_duplicate_email(self, client):
        signup(client, "alice@example.com")

        response = client.post(
            "/api/v1/auths/signup",
            json={"email": "alice@example.com", "password": PASSWORD},
        )

        assert response.status_code == 409


class TestAccountLifecycle:
    """End to end: delete, sign-in prompt, reactivate."""

    def test_delete_then_reactivate(self, client, notifier):
        token = signup(client, "alice@example.com", first_name="Alice")["token"]
        created = client.post(
            "/api/v1/documents/",
            json={"title": "Journal", "content": "day one"},
            headers=auth_headers(token),
        )
        assert created.status_code == 200

        deleted = client.post(
            "/api/v1/auths/delete",
            json={"password": PASSWORD},
            headers=auth_headers(token),
        )
        assert deleted.status_code == 200
        assert ("deleted", "alice@example.com", "Alice") in notifier.sent

        # The old session no longer resolves to a user
        response = client.get("/api/v1/documents/", headers=auth_headers(token))
        assert response.status_code == 401

        signin = client.post(
            "/api/v1/auths/signin",
            json={"email": "alice@example.com", "password": PASSWORD},
        )
        assert signin.status_code == 409
        assert signin.json()["detail"]["reactivation_available"] is True
        assert signin.json()["detail"]["expires_at"] == deleted.json()["expires_at"]

        check = client.post(
            "/api/v1/auths/archived/check", json={"email": "alice@example.com"}
        )
        assert check.json() == {
            "found": True,
            "expired": False,
            "expires_at": deleted.json()["expires_at"],
        }

        reactivated = client.post(
            "/api/v1/auths/reactivate",
            json={"email": "alice@example.com", "password": PASSWORD},
        )
        assert reactivated.status_code == 200
        new_token = reactivated.json()["token"]

        documents = client.get("/api/v1/documents/", headers=auth_headers(new_token))
        assert [d["title"] for d in documents.json()] == ["Journal"]

    def test_delete_requires_password(self, client):
        token = signup(client, "alice@example.com")["token"]

        response = client.post(
            "/api/v1/auths/delete", json={}, headers=auth_headers(token)
        )

        assert response.status_code == 401

    def test_delete_with_wrong_password(self, client):
        token = signup(client, "alice@example.com")["token"]

        response = client.post(
            "/api/v1/auths/delete",
            json={"password": "wrong-password"},
            headers=auth_headers(token),
        )

        assert response.status_code == 401

    def test_reactivate_after_expiry(self, client, clock):
        token = signup(client, "alice@example.com")["token"]
        client.post(
            "/api/v1/auths/delete",
            json={"password": PASSWORD},
            headers=auth_headers(token),
        )
        clock.advance(days=31)

        response = client.post(
            "/api/v1/auths/reactivate",
            json={"email": "alice@example.com", "password": PASSWORD},
        )

        assert response.status_code == 410

    def test_check_expired_archive(self, client, clock):
        token = signup(client, "alice@example.com")["token"]
        client.post(
            "/api/v1/auths/delete",
            json={"password": PASSWORD},
            headers=auth_headers(token),
        )
        clock.advance(days=31)

        check = client.post(
            "/api/v1/auths/archived/check", json={"email": "alice@example.com"}
        )

        assert check.json()["found"] is False
        assert check.json()["expired"] is True

    def test_reactivate_wrong_password(self, client):
        token = signup(client, "alice@example.com")["token"]
        client.post(
            "/api/v1/auths/delete",
            json={"password": PASSWORD},
            headers=auth_headers(token),
        )

        response = client.post(
            "/api/v1/auths/reactivate",
            json={"email": "alice@example.com", "password": "wrong-password"},
        )

        assert response.status_code == 401

    def test_reactivate_unknown_email(self, client):
        response = client.post(
            "/api/v1/auths/reactivate",
            json={"email": "ghost@example.com", "password": PASSWORD},
        )

        assert response.status_code == 404

    def test_reactivate_banned_account(self, client, archiver, make_user):
        """A suspended account comes back suspended and gets no token."""
        archiver.archive(make_user("mallory@example.com", is_banned=True))

        response = client.post(
            "/api/v1/auths/reactivate",
            json={"email": "mallory@example.com", "password": PASSWORD},
        )

        assert response.status_code == 403
        assert "token" not in response.json()


class TestArchivesAdmin:
    """Tests for the admin archive endpoints."""

    def test_admin_can_list_and_purge(self, client):
        admin_token = signup(client, "admin@example.com")["token"]
        user_token = signup(client, "bob@example.com")["token"]
        client.post(
            "/api/v1/auths/delete",
            json={"password": PASSWORD},
            headers=auth_headers(user_token),
        )

        listing = client.get("/api/v1/archives/", headers=auth_headers(admin_token))
        assert listing.status_code == 200
        assert listing.json()["total"] == 1
        archive_id = listing.json()["items"][0]["id"]

        detail = client.get(
            f"/api/v1/archives/{archive_id}", headers=auth_headers(admin_token)
        )
        assert detail.json()["has_password"] is True
        assert "snapshot" not in detail.json()

        purged = client.delete(
            f"/api/v1/archives/{archive_id}", headers=auth_headers(admin_token)
        )
        assert purged.status_code == 200

        signin = client.post(
            "/api/v1/auths/signin",
            json={"email": "bob@example.com", "password": PASSWORD},
        )
        assert signin.status_code == 401

    def test_non_admin_is_rejected(self, client):
        signup(client, "admin@example.com")
        user_token = signup(client, "bob@example.com")["token"]

        response = client.get("/api/v1/archives/", headers=auth_headers(user_token))

        assert response.status_code == 403
