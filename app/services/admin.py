"""
services/admin.py

관리자 관련 비즈니스 로직(Service) 모음.

이 파일은 관리자 기능에서 공통으로 사용되는
순수 비즈니스 로직을 담당한다.
라우터에서는 이 파일의 함수를 호출하여
DB 조회/검증/정책 판단을 수행한다.

주요 기능:
- 현재 관리자 계정 수 계산
- 관리자 권한·상태 변경/삭제 시 안전장치 제공
- 대시보드 통계 집계

설계 원칙:
- HTTP / FastAPI 의존성 없음
- 트랜잭션 제어는 라우터에서 수행
- 관리자 정책(마지막 관리자 보호 등)을 중앙에서 관리

관련 파일:
- app.models.user        : User / Role 모델
- app.routers.users      : 회원 관리 API

"""

from sqlalchemy.orm import Session
from sqlalchemy import select, func

from app.core.errors import ForbiddenError, ValidationError
from app.models.group import Group
from app.models.post import Post
from app.models.user import User, Role, ApprovalStatus

ADMIN_ROLES = (Role.ADMIN, Role.SUPER_ADMIN)


"""
현재 활성 관리자 계정 수를 반환

- ADMIN / SUPER_ADMIN 이면서 탈퇴하지 않은 사용자만 집계
- 마지막 관리자 보호 로직에서 사용

"""

def count_admins(db: Session) -> int:
    return db.scalar(
        select(func.count()).select_from(User).where(
            User.role.in_(ADMIN_ROLES),
            User.is_deleted.is_(False),
        )
    ) or 0


"""
권한 변경 가능 여부 검증

- 자기 자신 권한 변경 금지
- 관리자 권한 부여 / SUPER_ADMIN 변경은 SUPER_ADMIN 만 가능
- 마지막 관리자 강등 금지

"""

def ensure_role_change_allowed(db: Session, actor: User, target: User, new_role: Role) -> None:
    if target.id == actor.id:
        raise ValidationError("Cannot change your own role")

    if (new_role in ADMIN_ROLES or target.role == Role.SUPER_ADMIN) and actor.role != Role.SUPER_ADMIN:
        raise ForbiddenError("Only SUPER_ADMIN can grant or revoke admin roles")

    if target.role in ADMIN_ROLES and new_role not in ADMIN_ROLES and count_admins(db) <= 1:
        raise ValidationError("Cannot demote the last admin")


def ensure_delete_allowed(db: Session, actor: User, target: User) -> None:
    if target.id == actor.id:
        raise ValidationError("Cannot delete yourself")
    if target.role == Role.SUPER_ADMIN and actor.role != Role.SUPER_ADMIN:
        raise ForbiddenError("Cannot delete SUPER_ADMIN user")
    if target.role in ADMIN_ROLES and count_admins(db) <= 1:
        raise ValidationError("Cannot delete the last admin")


"""
승인 상태 변경 가능 여부 검증

- 자기 자신 상태 변경 금지
- SUPER_ADMIN 계정의 상태는 SUPER_ADMIN 만 변경 가능
- 승인된 마지막 관리자를 pending / rejected 로 바꾸면 로그인 불가 → 금지

"""

def ensure_status_change_allowed(db: Session, actor: User, target: User, new_status: ApprovalStatus) -> None:
    if target.id == actor.id:
        raise ValidationError("Cannot change your own status")

    if target.role == Role.SUPER_ADMIN and actor.role != Role.SUPER_ADMIN:
        raise ForbiddenError("Only SUPER_ADMIN can change SUPER_ADMIN status")

    if (
        target.role in ADMIN_ROLES
        and target.status == ApprovalStatus.APPROVED
        and new_status != ApprovalStatus.APPROVED
        and count_approved_admins(db) <= 1
    ):
        raise ValidationError("Cannot suspend the last admin")


def count_approved_admins(db: Session) -> int:
    return _count(
        db, User,
        User.role.in_(ADMIN_ROLES),
        User.status == ApprovalStatus.APPROVED,
        User.is_deleted.is_(False),
    )


def _count(db: Session, model, *conditions) -> int:
    return db.scalar(select(func.count()).select_from(model).where(*conditions)) or 0


def dashboard_stats(db: Session) -> dict:
    active = User.is_deleted.is_(False)
    return {
        "pendingUsers": _count(db, User, active, User.status == ApprovalStatus.PENDING),
        "totalUsers": _count(db, User, active),
        "pendingPosts": _count(db, Post, Post.status == ApprovalStatus.PENDING),
        "totalGroups": _count(db, Group),
    }
