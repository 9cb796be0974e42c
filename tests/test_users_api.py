from access_admin.extensions import db
from access_admin.models import User


def test_list_users_admin_only(admin_client, readonly_user):
    data = admin_client.get("/api/v1/users").get_json()["data"]
    assert [u["username"] for u in data] == ["alice", "bob"]
    assert all("password_hash" not in u for u in data)


def test_list_users_forbidden_for_readonly(readonly_client):
    assert readonly_client.get("/api/v1/users").status_code == 403


def test_create_user(admin_client):
    response = admin_client.post("/api/v1/users", json={
        "username": "carol", "email": "carol@example.com", "password": "secret99",
    })
    assert response.status_code == 201
    assert response.get_json()["data"]["role"] == "readonly"
    user = User.query.filter_by(username="carol").one()
    assert user.check_password("secret99")
    assert user.password_hash != "secret99"


def test_create_user_duplicate(admin_client, readonly_user):
    response = admin_client.post("/api/v1/users", json={
        "username": "bob", "email": "other@example.com", "password": "secret99",
    })
    assert response.status_code == 409


def test_create_user_rejects_unknown_role(admin_client):
    response = admin_client.post("/api/v1/users", json={
        "username": "carol", "email": "carol@example.com", "password": "secret99", "role": "root",
    })
    assert response.status_code == 400


def test_create_user_missing_fields(admin_client):
    assert admin_client.post("/api/v1/users", json={"username": "carol"}).status_code == 400


def test_readonly_user_updates_self(readonly_client, readonly_user):
    response = readonly_client.put(f"/api/v1/users/{readonly_user.id}", json={"email": "bobby@example.com"})
    assert response.status_code == 200
    assert response.get_json()["data"]["email"] == "bobby@example.com"


def test_readonly_user_cannot_change_own_role(readonly_client, readonly_user):
    response = readonly_client.put(f"/api/v1/users/{readonly_user.id}", json={"role": "admin"})
    assert response.status_code == 403
    assert db.session.get(User, readonly_user.id).role == "readonly"


def test_readonly_user_cannot_edit_others(readonly_client, admin_user):
    assert readonly_client.put(f"/api/v1/users/{admin_user.id}", json={"email": "x@example.com"}).status_code == 403


def test_admin_changes_role(admin_client, readonly_user):
    response = admin_client.put(f"/api/v1/users/{readonly_user.id}", json={"role": "admin"})
    assert response.status_code == 200
    assert response.get_json()["data"]["role"] == "admin"


def test_admin_cannot_delete_self(admin_client, admin_user):
    response = admin_client.delete(f"/api/v1/users/{admin_user.id}")
    assert response.status_code == 400
    assert response.get_json()["error"] == "Cannot delete your own account"


def test_admin_deletes_user(admin_client, readonly_user):
    assert admin_client.delete(f"/api/v1/users/{readonly_user.id}").status_code == 200
    assert User.query.filter_by(username="bob").count() == 0


def test_create_user_rejects_non_string_fields(admin_client):
    response = admin_client.post("/api/v1/users", json={
        "username": "carol", "email": "carol@example.com", "password": 12345678,
    })
    assert response.status_code == 400
    assert response.get_json()["error"] == "password must be a string"


def test_update_user_rejects_non_string_username(admin_client, readonly_user):
    response = admin_client.put(f"/api/v1/users/{readonly_user.id}", json={"username": ["bob"]})
    assert response.status_code == 400
    assert db.session.get(User, readonly_user.id).username == "bob"


def test_demoted_admin_loses_access_immediately(admin_client, admin_user):
    admin_user.role = "readonly"
    db.session.commit()

    assert admin_client.get("/api/v1/users").status_code == 403
    assert admin_client.get("/api/v1/auth/session").get_json()["user"]["role"] == "readonly"


def test_deleted_user_session_is_rejected(admin_client, admin_user):
    db.session.delete(admin_user)
    db.session.commit()

    assert admin_client.get("/api/v1/users").status_code == 401
