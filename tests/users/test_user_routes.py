from __future__ import annotations

import pytest

from account_service.core.constants import JWT_TOKEN_HEADER
from account_service.core.enums import PersonKind
from account_service.main import create_app


@pytest.fixture
def client(container):
    app = create_app(container, settings_module="config.testing")
    return app.test_client()


def test_register_then_unlock_then_login(client, profile_repos, gateway):
    profile_repos[PersonKind.STUDENT].add("2024-00001", "ana@example.com")

    resp = client.post(
        "/user/register",
        json={"user": {"username": "ana", "password": "p@ssword"}, "student": {"studentNumber": "2024-00001"}},
    )
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["username"] == "ana"
    assert body["locked"] is True
    assert body["role"] == "ROLE_STUDENT"
    assert "otp" not in body and "passwordHash" not in body
    assert body["profile"]["studentNumber"] == "2024-00001"

    locked = client.post("/user/login", json={"username": "ana", "password": "p@ssword"})
    assert locked.status_code == 401

    unlock = client.post("/user/verify-otp", json={"username": "ana", "otp": gateway.last_code})
    assert unlock.status_code == 200

    login = client.post("/user/login", json={"username": "ana", "password": "p@ssword"})
    assert login.status_code == 200
    assert login.get_json()["message"] == "login success...."
    assert login.headers[JWT_TOKEN_HEADER]
    assert login.headers["Access-Control-Allow-Origin"] == "http://localhost:3000"


def test_register_weak_password_is_bad_request(client, profile_repos):
    profile_repos[PersonKind.EMPLOYEE].add("EMP-1", "emp@example.com")

    resp = client.post(
        "/user/register",
        json={"user": {"username": "emp", "password": "weak"}, "employee": {"employeeNumber": "EMP-1"}},
    )

    assert resp.status_code == 400
    assert "stronger password" in resp.get_json()["error"]


def test_login_unknown_user_is_not_found(client):
    resp = client.post("/user/login", json={"username": "ghost", "password": "x!"})
    assert resp.status_code == 404


def test_verify_otp_requires_both_fields(client):
    resp = client.post("/user/verify-otp", json={"username": "alice"})
    assert resp.status_code == 400


def test_verify_otp_wrong_code_is_unauthorized(client, make_user):
    make_user("alice", otp="AB12CD34EF", locked=True)

    resp = client.post("/user/verify-otp", json={"username": "alice", "otp": "WRONGCODE1"})

    assert resp.status_code == 401
    assert resp.get_json()["error"] == "Invalid OTP"


def test_forgot_password_flow(client, profile_repos, make_user, gateway):
    user = make_user("alice", password="old#pass")
    profile_repos[PersonKind.EMPLOYEE].add("EMP-1", "alice@example.com", user_id=user.user_id)

    resp = client.post("/user/forgot-password", json={"username": "alice"})
    assert resp.status_code == 200

    bad = client.post(
        "/user/verify-forgot-password",
        json={"username": "alice", "otp": "WRONGCODE1", "password": "new#pass"},
    )
    assert bad.status_code == 400

    ok = client.post(
        "/user/verify-forgot-password",
        json={"username": "alice", "otp": gateway.last_code, "password": "new#pass"},
    )
    assert ok.status_code == 200
    assert client.post("/user/login", json={"username": "alice", "password": "new#pass"}).status_code == 200


def test_forgot_password_status_codes(client, make_user, gateway):
    assert client.post("/user/forgot-password", json={"username": "ghost"}).status_code == 404

    make_user("alice")
    assert client.post("/user/forgot-password", json={"username": "alice"}).status_code == 500


def test_forgot_username_flow(client, profile_repos, make_user, gateway):
    user = make_user("alice")
    profile_repos[PersonKind.GUEST].add("G-1", "alice@example.com", user_id=user.user_id)

    assert client.post("/user/forgot-username", json={}).status_code == 400
    assert client.post("/user/forgot-username", json={"email": "ghost@example.com"}).status_code == 404
    assert client.post("/user/forgot-username", json={"email": "alice@example.com"}).status_code == 200

    bad = client.post("/user/verify-otp-forgot-username", json={"otp": "WRONGCODE1", "username": "alicia"})
    assert bad.status_code == 400

    ok = client.post("/user/verify-otp-forgot-username", json={"otp": gateway.last_code, "username": "alicia"})
    assert ok.status_code == 200
    assert ok.get_json()["message"] == "Username: alicia"


def test_list_requires_bearer_token(client, make_user, token_issuer):
    alice = make_user("alice")

    assert client.get("/user/list").status_code == 401
    assert client.get("/user/list", headers={"Authorization": "Bearer nonsense"}).status_code == 401

    token = token_issuer.issue(alice)
    resp = client.get("/user/list", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 200
    assert [u["username"] for u in resp.get_json()] == ["alice"]


def test_verify_otp_non_string_code_is_bad_request(client, make_user):
    make_user("carol", otp="AB12CD34EF", locked=True)

    resp = client.post("/user/verify-otp", json={"username": "carol", "otp": 12345})

    assert resp.status_code == 400


def test_register_profile_already_linked_is_bad_request(client, profile_repos, make_user):
    owner = make_user("owner")
    profile_repos[PersonKind.EMPLOYEE].add("EMP-1", "emp@example.com", user_id=owner.user_id)

    resp = client.post(
        "/user/register",
        json={"user": {"username": "emp", "password": "p@ssword"}, "employee": {"employeeNumber": "EMP-1"}},
    )

    assert resp.status_code == 400
    assert client.post("/user/login", json={"username": "emp", "password": "p@ssword"}).status_code == 404
