"""
인증 기본 플로우 통합 테스트.
- 회원가입(PENDING) → 승인 전 OTP 차단 → 관리자 승인 → OTP 로그인 성공,
  OTP 오입력 한도, 미가입 번호, 탈퇴 후 재가입(복구) 흐름까지 검증한다.

"""

from sqlalchemy import func, select

from app.core.config import settings
from app.models.otp import OtpVerification
from app.models.user import ApprovalStatus, Role
from tests.helpers import auth_header, create_user_in_db, login_as, login_via_otp, random_mobile


def test_signup_approve_login_flow(client, db_session):
    _, admin_headers = login_as(client, db_session, role=Role.ADMIN, name="ADMIN")

    mobile = random_mobile()
    reg = client.post("/api/users/signup", json={"name": "테스트유저", "mobileNumber": mobile})
    assert reg.status_code == 201, reg.text
    user_id = reg.json()["user"]["id"]
    assert reg.json()["user"]["status"] == "pending"
    assert reg.json()["user"]["role"] == "user"

    # 상태 확인
    st = client.post("/api/auth/check-status", json={"mobileNumber": mobile})
    assert st.status_code == 200
    assert st.json()["exists"] is True
    assert st.json()["status"] == "pending"

    # 승인 전 OTP 차단(403)
    pending = client.post("/api/auth/request-otp", json={"mobileNumber": mobile})
    assert pending.status_code == 403
    assert pending.json() == {"success": False, "message": "Your account is pending approval"}

    # 승인
    approve = client.patch(
        f"/api/users/{user_id}/status", json={"status": "approved"}, headers=admin_headers
    )
    assert approve.status_code == 200, approve.text
    assert approve.json()["user"]["status"] == "approved"

    # 승인 후 로그인 OK
    body = login_via_otp(client, mobile)
    assert body["success"] is True
    assert body["user"]["id"] == user_id
    assert body["expiresIn"] == settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60

    me = client.get("/api/users/me", headers=auth_header(body["accessToken"]))
    assert me.status_code == 200, me.text
    assert me.json()["user"]["mobileNumber"] == mobile


def test_signup_duplicate_mobile_conflict(client, db_session):
    user = create_user_in_db(db_session)
    r = client.post("/api/users/signup", json={"name": "중복", "mobileNumber": user.mobile_number})
    assert r.status_code == 409
    assert r.json()["success"] is False


def test_check_status_unknown_number(client):
    r = client.post("/api/auth/check-status", json={"mobileNumber": random_mobile()})
    assert r.status_code == 200
    assert r.json()["exists"] is False
    assert r.json()["status"] is None


def test_short_mobile_number_rejected(client):
    r = client.post("/api/auth/request-otp", json={"mobileNumber": "12345"})
    assert r.status_code == 400
    assert r.json()["message"] == "Valid mobile number is required"

    r = client.post("/api/auth/request-otp", json={})
    assert r.status_code == 400


def test_signup_strips_mobile_before_length_check(client):
    # 공백 포함 11자지만 실제 번호는 9자리
    r = client.post("/api/users/signup", json={"name": "공백", "mobileNumber": " 123456789 "})
    assert r.status_code == 400

    mobile = random_mobile()
    r = client.post("/api/users/signup", json={"name": "공백", "mobileNumber": f"  {mobile}  "})
    assert r.status_code == 201, r.text
    assert r.json()["user"]["mobileNumber"] == mobile


def test_rejected_account_blocked(client, db_session):
    user = create_user_in_db(db_session, status=ApprovalStatus.REJECTED)
    r = client.post("/api/auth/request-otp", json={"mobileNumber": user.mobile_number})
    assert r.status_code == 403
    assert r.json()["message"] == "Your account has been rejected"


def test_verify_unknown_number_requires_signup(client):
    mobile = random_mobile()
    r = client.post("/api/auth/request-otp", json={"mobileNumber": mobile})
    assert r.status_code == 200, r.text

    v = client.post("/api/auth/verify-otp", json={"mobileNumber": mobile, "otp": r.json()["otp"]})
    assert v.status_code == 404
    assert v.json()["message"] == "User not found. Please sign up first."


def test_wrong_otp_attempt_limit(client, db_session):
    user = create_user_in_db(db_session)
    r = client.post("/api/auth/request-otp", json={"mobileNumber": user.mobile_number})
    otp = r.json()["otp"]
    wrong = "0000" if otp != "0000" else "1111"

    for _ in range(settings.OTP_MAX_ATTEMPTS - 1):
        bad = client.post("/api/auth/verify-otp", json={"mobileNumber": user.mobile_number, "otp": wrong})
        assert bad.status_code == 400
        assert bad.json()["message"] == "Invalid OTP"

    last = client.post("/api/auth/verify-otp", json={"mobileNumber": user.mobile_number, "otp": wrong})
    assert last.status_code == 400
    assert last.json()["message"] == "Too many failed attempts. Please request a new OTP."

    # 한도 도달 후에는 올바른 코드도 사용 불가
    after = client.post("/api/auth/verify-otp", json={"mobileNumber": user.mobile_number, "otp": otp})
    assert after.status_code == 400
    assert after.json()["message"] == "OTP expired or not found. Please request a new one."


def test_otp_is_single_use_and_reissue_replaces_old(client, db_session):
    user = create_user_in_db(db_session)
    first = client.post("/api/auth/request-otp", json={"mobileNumber": user.mobile_number}).json()["otp"]
    second = client.post("/api/auth/request-otp", json={"mobileNumber": user.mobile_number}).json()["otp"]

    if first != second:
        old = client.post("/api/auth/verify-otp", json={"mobileNumber": user.mobile_number, "otp": first})
        assert old.status_code == 400

    ok = client.post("/api/auth/verify-otp", json={"mobileNumber": user.mobile_number, "otp": second})
    assert ok.status_code == 200, ok.text

    again = client.post("/api/auth/verify-otp", json={"mobileNumber": user.mobile_number, "otp": second})
    assert again.status_code == 400
    assert again.json()["message"] == "OTP expired or not found. Please request a new one."


def test_deleted_user_can_signup_again_as_pending(client, db_session):
    _, admin_headers = login_as(client, db_session, role=Role.SUPER_ADMIN, name="ADMIN")
    user = create_user_in_db(db_session, name="탈퇴테스트유저")

    d = client.delete(f"/api/users/{user.id}", headers=admin_headers)
    assert d.status_code == 200, d.text

    st = client.post("/api/auth/check-status", json={"mobileNumber": user.mobile_number})
    assert st.json()["exists"] is False

    rereg = client.post("/api/users/signup", json={"name": "복구된유저", "mobileNumber": user.mobile_number})
    assert rereg.status_code == 201, rereg.text
    assert rereg.json()["user"]["id"] == str(user.id)
    assert rereg.json()["user"]["status"] == "pending"
    assert rereg.json()["user"]["name"] == "복구된유저"


def test_logout_without_token(client):
    r = client.post("/api/auth/logout")
    assert r.status_code == 200
    assert r.json() == {"success": True, "message": "Logged out successfully"}


def test_pending_request_otp_creates_no_row(client, db_session):
    user = create_user_in_db(db_session, status=ApprovalStatus.PENDING)

    r = client.post("/api/auth/request-otp", json={"mobileNumber": user.mobile_number})
    assert r.status_code == 403
    assert "otp" not in r.json()

    db_session.expire_all()
    rows = db_session.scalar(
        select(func.count()).select_from(OtpVerification)
        .where(OtpVerification.mobile_number == user.mobile_number)
    )
    assert rows == 0
