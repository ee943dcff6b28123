"""
관리자 기능 통합 테스트.
- 회원 목록/검색, 관리자 계정 생성, 권한 변경 정책(본인/마지막 관리자/SUPER_ADMIN 전용),
  소프트 삭제, 대시보드 통계, 사이트 설정, 관리자 행위 로그를 검증한다.

"""

from app.models.user import ApprovalStatus, Role
from tests.helpers import create_user_in_db, get_user, login_as, random_mobile


def test_list_and_search_users(client, db_session):
    _, admin_headers = login_as(client, db_session, role=Role.ADMIN, name="ADMIN")
    create_user_in_db(db_session, name="Pending Kim", status=ApprovalStatus.PENDING)
    create_user_in_db(db_session, name="Approved Lee")

    pending = client.get("/api/users?status=pending", headers=admin_headers).json()
    assert [u["name"] for u in pending["data"]] == ["Pending Kim"]

    found = client.get("/api/users?search=lee", headers=admin_headers).json()
    assert [u["name"] for u in found["data"]] == ["Approved Lee"]

    bad = client.get("/api/users?status=unknown", headers=admin_headers)
    assert bad.status_code == 400


def test_member_cannot_use_admin_endpoints(client, db_session):
    _, headers = login_as(client, db_session)
    assert client.get("/api/users", headers=headers).status_code == 403
    assert client.get("/api/users/stats", headers=headers).status_code == 403
    assert client.get("/api/admin/logs", headers=headers).status_code == 403


def test_admin_creates_approved_user(client, db_session):
    _, admin_headers = login_as(client, db_session, role=Role.ADMIN, name="ADMIN")
    mobile = random_mobile()

    r = client.post("/api/users", json={"name": "New Member", "mobileNumber": mobile}, headers=admin_headers)
    assert r.status_code == 201, r.text
    assert r.json()["user"]["status"] == "approved"

    # 일반 ADMIN 은 관리자 계정 생성 불가
    r = client.post(
        "/api/users",
        json={"name": "Another Admin", "mobileNumber": random_mobile(), "role": "admin"},
        headers=admin_headers,
    )
    assert r.status_code == 403

    # 바로 로그인 가능
    otp = client.post("/api/auth/request-otp", json={"mobileNumber": mobile})
    assert otp.status_code == 200


def test_role_change_rules(client, db_session):
    root, root_headers = login_as(client, db_session, role=Role.SUPER_ADMIN, name="ROOT")
    admin, admin_headers = login_as(client, db_session, role=Role.ADMIN, name="ADMIN")
    member = create_user_in_db(db_session, name="멤버")

    r = client.patch(f"/api/users/{root.id}", json={"role": "user"}, headers=root_headers)
    assert r.status_code == 400
    assert r.json()["message"] == "Cannot change your own role"

    r = client.patch(f"/api/users/{member.id}", json={"role": "admin"}, headers=admin_headers)
    assert r.status_code == 403

    r = client.patch(f"/api/users/{member.id}", json={"role": "admin"}, headers=root_headers)
    assert r.status_code == 200, r.text
    assert get_user(db_session, str(member.id)).role == Role.ADMIN

    logs = client.get("/api/admin/logs", headers=root_headers).json()["data"]
    assert logs[0]["action"] == "SET_ROLE"


def test_cannot_delete_self(client, db_session):
    root, root_headers = login_as(client, db_session, role=Role.SUPER_ADMIN, name="ROOT")

    r = client.delete(f"/api/users/{root.id}", headers=root_headers)
    assert r.status_code == 400
    assert r.json()["message"] == "Cannot delete yourself"


def test_soft_delete_blocks_login(client, db_session):
    _, admin_headers = login_as(client, db_session, role=Role.ADMIN, name="ADMIN")
    member, member_headers = login_as(client, db_session, name="멤버")

    r = client.delete(f"/api/users/{member.id}", headers=admin_headers)
    assert r.status_code == 200, r.text
    assert get_user(db_session, str(member.id)).is_deleted is True

    assert client.get("/api/users/me", headers=member_headers).status_code == 401
    listed = client.get("/api/users", headers=admin_headers).json()["data"]
    assert str(member.id) not in [u["id"] for u in listed]


def test_reject_user_with_reason(client, db_session):
    _, admin_headers = login_as(client, db_session, role=Role.ADMIN, name="ADMIN")
    pending = create_user_in_db(db_session, status=ApprovalStatus.PENDING)

    r = client.patch(
        f"/api/users/{pending.id}/status",
        json={"status": "rejected", "reason": "Not an alumnus"},
        headers=admin_headers,
    )
    assert r.status_code == 200, r.text
    assert r.json()["message"] == "User rejected"
    assert get_user(db_session, str(pending.id)).rejection_reason == "Not an alumnus"


def test_dashboard_stats(client, db_session):
    _, admin_headers = login_as(client, db_session, role=Role.ADMIN, name="ADMIN")
    create_user_in_db(db_session, status=ApprovalStatus.PENDING)

    stats = client.get("/api/users/stats", headers=admin_headers).json()["stats"]
    assert stats == {"pendingUsers": 1, "totalUsers": 2, "pendingPosts": 0, "totalGroups": 0}


def test_site_settings(client, db_session):
    _, admin_headers = login_as(client, db_session, role=Role.ADMIN, name="ADMIN")

    assert client.get("/api/settings/welcome").json() == {"success": True, "key": "welcome", "value": None}

    r = client.put("/api/users/settings/welcome", json={"value": "Hello!"}, headers=admin_headers)
    assert r.status_code == 200, r.text

    assert client.get("/api/settings/welcome").json()["value"] == "Hello!"
    assert client.get("/api/users/settings/welcome", headers=admin_headers).json()["value"] == "Hello!"


def test_update_me(client, db_session):
    _, headers = login_as(client, db_session)
    r = client.patch("/api/users/me", json={"name": "바뀐이름", "email": "me@example.com"}, headers=headers)
    assert r.status_code == 200, r.text
    assert r.json()["user"]["name"] == "바뀐이름"
    assert r.json()["user"]["email"] == "me@example.com"

    bad = client.patch("/api/users/me", json={"email": "not-an-email"}, headers=headers)
    assert bad.status_code == 400


def test_status_change_rules(client, db_session):
    root, root_headers = login_as(client, db_session, role=Role.SUPER_ADMIN, name="ROOT")
    admin, admin_headers = login_as(client, db_session, role=Role.ADMIN, name="ADMIN")

    # 일반 ADMIN 은 SUPER_ADMIN 을 거절/대기 상태로 바꿀 수 없음
    r = client.patch(f"/api/users/{root.id}/status", json={"status": "rejected"}, headers=admin_headers)
    assert r.status_code == 403
    r = client.patch(f"/api/users/{root.id}", json={"status": "pending"}, headers=admin_headers)
    assert r.status_code == 403
    assert get_user(db_session, str(root.id)).status == ApprovalStatus.APPROVED

    r = client.patch(f"/api/users/{admin.id}/status", json={"status": "rejected"}, headers=admin_headers)
    assert r.status_code == 400
    assert r.json()["message"] == "Cannot change your own status"

    # SUPER_ADMIN 계정은 여전히 로그인 가능
    assert client.post("/api/auth/request-otp", json={"mobileNumber": root.mobile_number}).status_code == 200

    r = client.patch(f"/api/users/{admin.id}/status", json={"status": "rejected"}, headers=root_headers)
    assert r.status_code == 200, r.text


def test_last_approved_admin_cannot_be_suspended(client, db_session):
    actor, actor_headers = login_as(client, db_session, role=Role.ADMIN, name="ACTOR")
    last = create_user_in_db(db_session, role=Role.ADMIN, name="LAST")

    # 토큰 발급 이후 DB 에서 권한이 회수된 관리자
    stale = get_user(db_session, str(actor.id))
    stale.role = Role.USER
    db_session.commit()

    r = client.patch(f"/api/users/{last.id}/status", json={"status": "rejected"}, headers=actor_headers)
    assert r.status_code == 400
    assert r.json()["message"] == "Cannot suspend the last admin"
    assert get_user(db_session, str(last.id)).status == ApprovalStatus.APPROVED
