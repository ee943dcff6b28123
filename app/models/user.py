"""
user.py

사용자(User), 권한(Role), 승인 상태(ApprovalStatus) 모델 정의 파일.

이 파일은 회원의 기본 정보(이름, 휴대폰 번호 등)와
권한(Role), 승인 상태, 탈퇴 상태(Soft Delete)를 관리한다.
비밀번호는 없으며 로그인은 휴대폰 OTP로만 이루어진다.

모든 인증, 권한, 가시성(visibility) 판단의 기준이 되는 핵심 모델이다.

"""

import uuid
import datetime
from enum import Enum

from sqlalchemy import String, Boolean, DateTime, Text, Uuid, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base, utcnow



"""
사용자 권한(Role) 정의

- USER         : 일반 회원 (가입 시 기본값)
- ADMIN        : 관리자
- SUPER_ADMIN  : 최고 관리자

권한별로 가능한 행위는 app.core.permissions.ROLE_CAPABILITIES 에서 관리

"""

class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"


"""
승인 상태 정의 (회원 / 게시글 공통)

- PENDING   : 관리자 승인 대기
- APPROVED  : 승인됨
- REJECTED  : 거절됨

"""

class ApprovalStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


# Enum 의 value(소문자)를 그대로 DB에 저장
def enum_column(enum_cls, name: str) -> SAEnum:
    return SAEnum(enum_cls, name=name, values_callable=lambda e: [m.value for m in e])



"""
사용자(User) 모델

- mobile_number 는 로그인 식별자 (고유)
- role 은 가입 시 USER 로 채워지며 비어 있는 경우가 없음
- status 로 로그인 가능 여부 결정 (APPROVED 만 로그인 가능)
- is_deleted / deleted_at 으로 Soft Delete 지원

"""

class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    mobile_number: Mapped[str] = mapped_column(String(15), unique=True, index=True, nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    profile_picture_url: Mapped[str | None] = mapped_column(String(500), nullable=True)

    status: Mapped[ApprovalStatus] = mapped_column(
        enum_column(ApprovalStatus, "approval_status"), nullable=False, default=ApprovalStatus.PENDING
    )
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    role: Mapped[Role] = mapped_column(enum_column(Role, "user_role"), nullable=False, default=Role.USER)

    created_by_admin: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    first_login_complete: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)
    deleted_at: Mapped[datetime.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    groups = relationship("Group", secondary="user_groups", back_populates="members")
