"""
services/otp.py

휴대폰 OTP 발급 / 검증 서비스.

로그인은 비밀번호 없이 OTP로만 이루어지며,
이 파일은 OTP 행(OtpVerification)의 생명주기를 담당한다.

OTP 행 상태 흐름:
    CREATED → (오답 시 attempts 증가)* → {CONSUMED | EXPIRED | ATTEMPTS_EXHAUSTED}
  세 종료 상태 모두 행을 삭제한다. (만료 행은 조회에서 제외되고 다음 발급 시 삭제)

설계 원칙:
- 번호당 살아 있는 OTP 는 최대 1개 (발급 시 기존 행 전부 삭제)
- 승인 대기 / 거절 계정에는 OTP 를 만들지 않음
- 코드가 맞아도 계정 상태를 다시 확인 (발급과 검증 사이에 상태가 바뀔 수 있음)
- 시도 횟수 증가 / 행 삭제는 예외를 던지기 전에 이 함수에서 commit

관련 파일:
- app.models.otp         : OtpVerification 모델
- app.core.security      : OTP 해시
- app.services.sms       : OTP 문자 발송(로그)
- app.routers.auth       : 인증 API

"""

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from sqlalchemy import select, delete
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import (
    ForbiddenError,
    InvalidOtpError,
    NotFoundError,
    OtpNotFoundError,
    TooManyAttemptsError,
    ValidationError,
)
from app.core.security import hash_otp, verify_otp_hash
from app.models.otp import OtpVerification
from app.models.user import User, ApprovalStatus
from app.services import sms

logger = logging.getLogger(__name__)

MIN_MOBILE_LENGTH = 10


@dataclass(frozen=True)
class OtpIssue:
    code: str
    expires_at: datetime


def generate_otp(length: int | None = None) -> str:
    length = length or settings.OTP_LENGTH
    return "".join(str(secrets.randbelow(10)) for _ in range(length))


def normalize_mobile(mobile_number: str | None) -> str:
    value = (mobile_number or "").strip()
    if len(value) < MIN_MOBILE_LENGTH:
        raise ValidationError("Valid mobile number is required")
    return value


def find_user_by_mobile(db: Session, mobile_number: str) -> User | None:
    return db.scalar(
        select(User).where(User.mobile_number == mobile_number, User.is_deleted.is_(False))
    )


# 승인되지 않은 계정은 OTP 발급/검증 모두 차단
def ensure_login_allowed(user: User) -> None:
    if user.status == ApprovalStatus.PENDING:
        raise ForbiddenError("Your account is pending approval")
    if user.status == ApprovalStatus.REJECTED:
        raise ForbiddenError("Your account has been rejected")


"""
OTP 발급

- 가입된 계정이 있으면 승인 상태 확인 (미가입 번호는 발급 허용)
- 기존 OTP 전부 삭제 후 새 OTP 1건 저장
- 문자 발송은 로그로 대체

"""

def request_otp(db: Session, mobile_number: str) -> OtpIssue:
    mobile_number = normalize_mobile(mobile_number)

    user = find_user_by_mobile(db, mobile_number)
    if user:
        ensure_login_allowed(user)

    code = generate_otp()
    expires_at = datetime.now(timezone.utc) + timedelta(minutes=settings.OTP_EXPIRE_MINUTES)

    try:
        db.execute(delete(OtpVerification).where(OtpVerification.mobile_number == mobile_number))
        db.add(OtpVerification(
            mobile_number=mobile_number,
            code_hash=hash_otp(code),
            attempts=0,
            expires_at=expires_at,
        ))
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("OTP issued for %s", mobile_number)
    sms.send_templated_sms(
        mobile_number,
        "otp_login",
        {"otp": code, "minutes": settings.OTP_EXPIRE_MINUTES},
    )
    return OtpIssue(code=code, expires_at=expires_at)


"""
OTP 검증

1) 만료되지 않은 최신 OTP 조회 (없으면 OtpNotFoundError)
2) 이미 시도 한도에 도달했으면 삭제 후 TooManyAttemptsError
3) 코드 불일치 → attempts 증가, 한도 도달 시 삭제 후 TooManyAttemptsError,
   아니면 InvalidOtpError
4) 일치 → 행 삭제 (1회용)
5) 사용자 존재 + 승인 상태 재확인

"""

def verify_otp(db: Session, mobile_number: str, code: str) -> User:
    mobile_number = (mobile_number or "").strip()
    code = (code or "").strip()
    if not mobile_number or not code:
        raise ValidationError("Mobile number and OTP are required")

    now = datetime.now(timezone.utc)
    record = db.scalar(
        select(OtpVerification)
        .where(
            OtpVerification.mobile_number == mobile_number,
            OtpVerification.expires_at > now,
        )
        .order_by(OtpVerification.created_at.desc(), OtpVerification.id.desc())
        .limit(1)
    )
    if not record:
        raise OtpNotFoundError()

    if record.attempts >= settings.OTP_MAX_ATTEMPTS:
        db.delete(record)
        db.commit()
        raise TooManyAttemptsError()

    if not verify_otp_hash(code, record.code_hash):
        attempts = record.attempts + 1
        exhausted = attempts >= settings.OTP_MAX_ATTEMPTS
        if exhausted:
            db.delete(record)
        else:
            record.attempts = attempts
        db.commit()
        logger.warning("Wrong OTP for %s (attempt %d)", mobile_number, attempts)
        if exhausted:
            raise TooManyAttemptsError()
        raise InvalidOtpError()

    db.delete(record)
    db.commit()

    user = find_user_by_mobile(db, mobile_number)
    if not user:
        raise NotFoundError("User not found. Please sign up first.")
    ensure_login_allowed(user)
    return user
