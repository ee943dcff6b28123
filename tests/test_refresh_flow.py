"""
Refresh Token 재발급 테스트.
- 정상 재발급, access 토큰으로 재발급 시도, 위조 토큰, 미승인/탈퇴 사용자 차단,
  refresh 토큰을 access 용도로 쓰는 경우를 검증한다.

"""

from datetime import timedelta

from app.core.security import issue_tokens
from app.models.user import ApprovalStatus
from tests.helpers import auth_header, create_user_in_db, login_via_otp


def test_refresh_issues_new_pair(client, db_session):
    user = create_user_in_db(db_session)
    body = login_via_otp(client, user.mobile_number)

    r = client.post("/api/auth/refresh-token", json={"refreshToken": body["refreshToken"]})
    assert r.status_code == 200, r.text
    data = r.json()
    assert data["success"] is True
    assert data["accessToken"]
    assert data["refreshToken"]

    me = client.get("/api/users/me", headers=auth_header(data["accessToken"]))
    assert me.status_code == 200


def test_refresh_requires_token(client):
    r = client.post("/api/auth/refresh-token", json={})
    assert r.status_code == 400
    assert r.json()["message"] == "Refresh token is required"


def test_access_token_cannot_refresh(client, db_session):
    user = create_user_in_db(db_session)
    body = login_via_otp(client, user.mobile_number)

    r = client.post("/api/auth/refresh-token", json={"refreshToken": body["accessToken"]})
    assert r.status_code == 401
    assert r.json()["message"] == "Invalid or expired refresh token"


def test_refresh_token_cannot_access_api(client, db_session):
    user = create_user_in_db(db_session)
    body = login_via_otp(client, user.mobile_number)

    r = client.get("/api/users/me", headers=auth_header(body["refreshToken"]))
    assert r.status_code == 401


def test_garbage_and_expired_refresh_token(client, db_session):
    r = client.post("/api/auth/refresh-token", json={"refreshToken": "not-a-jwt"})
    assert r.status_code == 401

    user = create_user_in_db(db_session)
    expired = issue_tokens(user.id, [user.role], refresh_delta=timedelta(seconds=-10))
    r = client.post("/api/auth/refresh-token", json={"refreshToken": expired.refresh_token})
    assert r.status_code == 401
    assert r.json()["message"] == "Invalid or expired refresh token"


def test_refresh_blocked_after_status_change(client, db_session):
    user = create_user_in_db(db_session)
    body = login_via_otp(client, user.mobile_number)

    user.status = ApprovalStatus.PENDING
    db_session.commit()

    r = client.post("/api/auth/refresh-token", json={"refreshToken": body["refreshToken"]})
    assert r.status_code == 401
    assert r.json()["message"] == "User not found or not approved"


def test_expired_access_token_rejected(client, db_session):
    user = create_user_in_db(db_session)
    expired = issue_tokens(user.id, [user.role], access_delta=timedelta(seconds=-10))

    r = client.get("/api/users/me", headers=auth_header(expired.access_token))
    assert r.status_code == 401
    assert r.json()["message"] == "Invalid or expired token"
