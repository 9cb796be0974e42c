from datetime import timedelta

from flask_jwt_extended import create_access_token


def test_login_sets_session_cookie(client, admin_user):
    response = client.post("/api/v1/auth/login", json={"username": "alice", "password": "password123"})

    assert response.status_code == 200
    body = response.get_json()
    assert body["success"] is True
    assert body["data"]["user"]["username"] == "alice"
    assert "password_hash" not in body["data"]["user"]
    cookie = client.get_cookie("session_token")
    assert cookie is not None
    assert cookie.http_only


def test_login_by_email(client, admin_user):
    response = client.post("/api/v1/auth/login", json={"email": "alice@example.com", "password": "password123"})
    assert response.status_code == 200


def test_login_rejects_bad_password(client, admin_user):
    response = client.post("/api/v1/auth/login", json={"username": "alice", "password": "nope"})
    assert response.status_code == 401
    assert response.get_json() == {"success": False, "error": "Invalid credentials"}
    assert client.get_cookie("session_token") is None


def test_login_requires_fields(client):
    response = client.post("/api/v1/auth/login", json={"username": "alice"})
    assert response.status_code == 400


def test_session_reports_current_user(admin_client):
    response = admin_client.get("/api/v1/auth/session")
    assert response.status_code == 200
    body = response.get_json()
    assert body["authenticated"] is True
    assert body["user"]["username"] == "alice"
    assert body["user"]["role"] == "admin"


def test_session_without_cookie(client):
    response = client.get("/api/v1/auth/session")
    assert response.status_code == 401
    assert response.get_json() == {"authenticated": False}


def test_logout_clears_session(admin_client):
    admin_client.post("/api/v1/auth/logout")
    assert admin_client.get("/api/v1/auth/session").status_code == 401


def test_expired_session_is_rejected(app, client, admin_user):
    token = create_access_token(
        identity=str(admin_user.id),
        additional_claims={"username": "alice", "email": "alice@example.com", "role": "admin"},
        expires_delta=timedelta(seconds=-1),
    )
    client.set_cookie("session_token", token)

    response = client.get("/api/v1/reminders?applicationId=1")

    assert response.status_code == 401
    assert response.get_json()["success"] is False


def test_tampered_session_is_rejected(client):
    client.set_cookie("session_token", "not-a-jwt")
    response = client.get("/api/v1/applications")
    assert response.status_code == 401


def test_login_rejects_non_string_credentials(client, admin_user):
    response = client.post("/api/v1/auth/login", json={"username": "alice", "password": 123})
    assert response.status_code == 400
