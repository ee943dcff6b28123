from typing import Generator

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from sqlalchemy import select

from app.core.errors import InvalidTokenError
from app.core.permissions import Capability, Identity
from app.core.security import decode_token
from app.db.session import SessionLocal
from app.models.group import user_groups
from app.models.user import User

# Swagger Authorize에서 "Bearer 토큰" 입력받는 스키마
bearer_scheme = HTTPBearer(auto_error=False)


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# 여러 단계 변경을 한 번에 반영, 실패 시 전체 rollback
def commit_or_500(db: Session) -> None:
    try:
        db.commit()
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=f"Database error: {type(e).__name__}")


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def load_group_ids(db: Session, user_id) -> frozenset:
    rows = db.scalars(select(user_groups.c.group_id).where(user_groups.c.user_id == user_id)).all()
    return frozenset(rows)


# access 토큰 검증 → 삭제되지 않은 사용자 + 현재 그룹 소속으로 Identity 구성
def resolve_identity(db: Session, token: str) -> tuple[User, Identity]:
    try:
        claims = decode_token(token, "access")
    except InvalidTokenError:
        raise _unauthorized("Invalid or expired token")

    user = db.scalar(select(User).where(User.id == claims.user_id, User.is_deleted.is_(False)))
    if not user:
        raise _unauthorized("User not found")

    identity = Identity(
        user_id=user.id,
        roles=claims.roles,
        group_ids=load_group_ids(db, user.id),
    )
    return user, identity


def _current(
    cred: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> tuple[User, Identity]:
    if cred is None:
        raise _unauthorized("No token provided")
    return resolve_identity(db, cred.credentials)


def get_current_user(current: tuple[User, Identity] = Depends(_current)) -> User:
    return current[0]


def get_identity(current: tuple[User, Identity] = Depends(_current)) -> Identity:
    return current[1]


def require_capability(capability: Capability):
    def _checker(identity: Identity = Depends(get_identity)) -> Identity:
        if not identity.can(capability):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return identity
    return _checker

get_moderator = require_capability(Capability.MODERATE_POSTS)
get_user_manager = require_capability(Capability.MANAGE_USERS)
get_group_manager = require_capability(Capability.MANAGE_GROUPS)
get_event_manager = require_capability(Capability.MANAGE_EVENTS)
