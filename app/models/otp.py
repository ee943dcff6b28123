"""
otp.py

OTP 인증 기록(OtpVerification) 모델 정의 파일.

휴대폰 번호당 살아 있는 OTP 는 최대 1개이며,
새 OTP 요청 시 기존 행은 모두 삭제된다.

행의 종료 상태:
- 사용됨 (검증 성공 → 삭제)
- 만료됨 (expires_at 경과 → 조회 대상에서 제외)
- 시도 초과 (attempts >= OTP_MAX_ATTEMPTS → 삭제)

"""

import datetime

from sqlalchemy import String, Integer, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, utcnow


class OtpVerification(Base):
    __tablename__ = "otp_verifications"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    mobile_number: Mapped[str] = mapped_column(String(15), index=True, nullable=False)
    # 평문 코드가 아닌 해시 저장
    code_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    expires_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
