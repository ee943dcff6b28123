"""
OTP 서비스 단위 테스트 (라우터 없이 services.otp 직접 호출).

"""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import func, select

from app.core.config import settings
from app.core.errors import (
    ForbiddenError, InvalidOtpError, OtpNotFoundError, TooManyAttemptsError, ValidationError,
)
from app.core.security import hash_otp, verify_otp_hash
from app.models.otp import OtpVerification
from app.models.user import ApprovalStatus
from app.services import otp as otp_service
from tests.helpers import create_user_in_db


def _otp_rows(db, mobile_number: str) -> int:
    db.expire_all()
    return db.scalar(
        select(func.count()).select_from(OtpVerification).where(OtpVerification.mobile_number == mobile_number)
    )


def test_generate_otp_shape():
    code = otp_service.generate_otp()
    assert len(code) == settings.OTP_LENGTH
    assert code.isdigit()
    assert len(otp_service.generate_otp(6)) == 6


def test_otp_is_stored_hashed(db_session):
    user = create_user_in_db(db_session)
    issue = otp_service.request_otp(db_session, user.mobile_number)

    row = db_session.scalar(select(OtpVerification).where(OtpVerification.mobile_number == user.mobile_number))
    assert row.code_hash != issue.code
    assert verify_otp_hash(issue.code, row.code_hash)
    assert row.attempts == 0


def test_request_replaces_previous_rows(db_session):
    user = create_user_in_db(db_session)
    otp_service.request_otp(db_session, user.mobile_number)
    otp_service.request_otp(db_session, user.mobile_number)
    assert _otp_rows(db_session, user.mobile_number) == 1


def test_verify_success_deletes_row(db_session):
    user = create_user_in_db(db_session)
    issue = otp_service.request_otp(db_session, user.mobile_number)

    verified = otp_service.verify_otp(db_session, user.mobile_number, issue.code)
    assert verified.id == user.id
    assert _otp_rows(db_session, user.mobile_number) == 0


def test_verify_wrong_code_counts_attempts(db_session):
    user = create_user_in_db(db_session)
    issue = otp_service.request_otp(db_session, user.mobile_number)
    wrong = "9" * settings.OTP_LENGTH if issue.code != "9" * settings.OTP_LENGTH else "1" * settings.OTP_LENGTH

    with pytest.raises(InvalidOtpError):
        otp_service.verify_otp(db_session, user.mobile_number, wrong)

    db_session.expire_all()
    row = db_session.scalar(select(OtpVerification).where(OtpVerification.mobile_number == user.mobile_number))
    assert row.attempts == 1


def test_verify_exhausted_row(db_session):
    user = create_user_in_db(db_session)
    db_session.add(OtpVerification(
        mobile_number=user.mobile_number,
        code_hash=hash_otp("1234"),
        attempts=settings.OTP_MAX_ATTEMPTS,
        expires_at=datetime.now(timezone.utc) + timedelta(minutes=5),
    ))
    db_session.commit()

    with pytest.raises(TooManyAttemptsError):
        otp_service.verify_otp(db_session, user.mobile_number, "1234")
    assert _otp_rows(db_session, user.mobile_number) == 0


def test_verify_expired_row(db_session):
    user = create_user_in_db(db_session)
    db_session.add(OtpVerification(
        mobile_number=user.mobile_number,
        code_hash=hash_otp("1234"),
        attempts=0,
        expires_at=datetime.now(timezone.utc) - timedelta(minutes=1),
    ))
    db_session.commit()

    with pytest.raises(OtpNotFoundError):
        otp_service.verify_otp(db_session, user.mobile_number, "1234")


def test_verify_requires_both_fields(db_session):
    with pytest.raises(ValidationError):
        otp_service.verify_otp(db_session, "", "1234")
    with pytest.raises(ValidationError):
        otp_service.verify_otp(db_session, "9876543210", None)


@pytest.mark.parametrize("status", [ApprovalStatus.PENDING, ApprovalStatus.REJECTED])
def test_request_for_unapproved_user_stores_nothing(db_session, status):
    user = create_user_in_db(db_session, status=status)

    with pytest.raises(ForbiddenError):
        otp_service.request_otp(db_session, user.mobile_number)
    assert _otp_rows(db_session, user.mobile_number) == 0


@pytest.mark.parametrize("status", [ApprovalStatus.PENDING, ApprovalStatus.REJECTED])
def test_verify_rechecks_status_after_correct_code(db_session, status):
    # 승인 이후 발급된 OTP 가 남아 있는 상태에서 계정이 다시 미승인으로 바뀐 경우
    user = create_user_in_db(db_session, status=status)
    db_session.add(OtpVerification(
        mobile_number=user.mobile_number,
        code_hash=hash_otp("1234"),
        attempts=0,
        expires_at=datetime.now(timezone.utc) + timedelta(minutes=5),
    ))
    db_session.commit()

    with pytest.raises(ForbiddenError):
        otp_service.verify_otp(db_session, user.mobile_number, "1234")
    # 코드는 이미 소비됨
    assert _otp_rows(db_session, user.mobile_number) == 0
