"""
users.py

회원 가입 / 내 정보 / 관리자 회원 관리 API 모음.

주요 기능:
- 회원 가입 (승인 대기 상태로 생성, 탈퇴 계정 복구 포함)
- 내 정보 조회 / 수정
- (관리자) 회원 목록 / 생성 / 수정 / 승인·거절 / 삭제
- (관리자) 대시보드 통계, 사이트 설정 조회·수정

설계 원칙:
- 관리자 변경 행위는 AdminActionLog 와 같은 트랜잭션에서 기록
- 회원 삭제는 Soft Delete (is_deleted=True)
- 정적 경로(/me, /stats, /settings)를 /{user_id} 보다 먼저 선언

관련 파일:
- app.services.admin       : 관리자 정책 / 통계
- app.services.admin_log   : 관리자 행위 로그
- app.services.sms         : 승인 / 거절 문자
- app.schemas.user         : 요청 모델 / 응답 직렬화

"""

import uuid
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy import select, func, or_

from app.core.deps import get_db, get_current_user, get_identity, get_user_manager, commit_or_500
from app.core.permissions import Identity
from app.models.admin_log import AdminAction
from app.models.site_setting import SiteSetting
from app.models.user import User, Role, ApprovalStatus
from app.schemas.user import (
    SignupRequest, UpdateMeRequest,
    AdminCreateUserRequest, AdminUpdateUserRequest,
    StatusUpdateRequest, SettingUpdateRequest, user_out,
)
from app.services import sms
from app.services.admin import (
    dashboard_stats, ensure_role_change_allowed, ensure_delete_allowed, ensure_status_change_allowed,
)
from app.services.admin_log import write_admin_log
from app.services.pagination import PageParams, get_page_params, paginated

router = APIRouter(prefix="/users", tags=["users"])


def _get_active_user(db: Session, user_id: uuid.UUID) -> User:
    user = db.scalar(select(User).where(User.id == user_id, User.is_deleted.is_(False)))
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


def _parse_statuses(raw: str | None) -> list[ApprovalStatus] | None:
    if not raw or raw == "all":
        return None
    try:
        return [ApprovalStatus(s.strip()) for s in raw.split(",") if s.strip()]
    except ValueError:
        raise HTTPException(status_code=400, detail="Valid status is required (approved, rejected, pending)")


# 상태 변경 문자 발송 (게이트웨이 대신 로그)
def _send_status_sms(user: User, new_status: ApprovalStatus, reason: str | None) -> None:
    if new_status == ApprovalStatus.APPROVED:
        sms.send_templated_sms(user.mobile_number, "account_approved", {"user_name": user.name})
    elif new_status == ApprovalStatus.REJECTED:
        sms.send_templated_sms(
            user.mobile_number, "account_rejected",
            {"user_name": user.name, "reason": reason or "Not specified"},
        )
    else:
        sms.send_templated_sms(user.mobile_number, "account_pending", {"user_name": user.name})


"""
회원 가입 API

- 휴대폰 번호 기준으로 신규 회원 가입 (status=pending, role=user)
- 탈퇴한 계정이 존재할 경우 계정을 복구하여 재가입 처리 (다시 승인 대기)
- 활성 계정이 이미 있으면 409

"""

@router.post("/signup", status_code=status.HTTP_201_CREATED)
def signup(data: SignupRequest, db: Session = Depends(get_db)):
    mobile_number = data.mobile_number.strip()
    existing = db.scalar(select(User).where(User.mobile_number == mobile_number))

    if existing and not existing.is_deleted:
        raise HTTPException(status_code=409, detail="User with this mobile number already exists")

    try:
        if existing:
            # 탈퇴 계정 복구
            user = existing
            user.is_deleted = False
            user.deleted_at = None
            user.name = data.name
            user.email = data.email
            user.status = ApprovalStatus.PENDING
            user.role = Role.USER
            user.rejection_reason = None
        else:
            user = User(
                name=data.name,
                mobile_number=mobile_number,
                email=data.email,
                status=ApprovalStatus.PENDING,
                role=Role.USER,
                created_by_admin=False,
            )
            db.add(user)
        db.commit()
        db.refresh(user)
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="User with this mobile number already exists")
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=f"Database error: {type(e).__name__}")

    return {
        "success": True,
        "message": "Account created successfully. Please wait for admin approval.",
        "user": user_out(user),
    }


@router.get("/me")
def get_me(user: User = Depends(get_current_user)):
    return {"success": True, "user": user_out(user)}


"""
내 정보 수정 API

- 이름 / 이메일 / 프로필 사진 URL 부분 수정
- 프로필 사진을 등록하면 첫 로그인 설정 완료로 표시

"""

@router.patch("/me")
def update_me(
    data: UpdateMeRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    if data.name is not None:
        user.name = data.name
    if data.email is not None:
        user.email = data.email
    if data.profile_picture_url is not None:
        user.profile_picture_url = data.profile_picture_url
        user.first_login_complete = True

    commit_or_500(db)
    db.refresh(user)
    return {"success": True, "message": "Profile updated successfully", "user": user_out(user)}


@router.get("/stats")
def get_stats(
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_user_manager),
):
    return {"success": True, "stats": dashboard_stats(db)}


# 관리자용 사이트 설정 조회 / 수정
@router.get("/settings/{key}")
def get_setting(
    key: str,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_user_manager),
):
    setting = db.get(SiteSetting, key)
    return {"success": True, "key": key, "value": setting.value if setting else None}


@router.put("/settings/{key}")
def update_setting(
    key: str,
    data: SettingUpdateRequest,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_user_manager),
):
    setting = db.get(SiteSetting, key)
    if setting is None:
        setting = SiteSetting(key=key, value=data.value)
        db.add(setting)
    else:
        setting.value = data.value

    commit_or_500(db)
    return {"success": True, "message": "Setting updated successfully", "key": key, "value": data.value}


"""
회원 목록 API (관리자)

- status: 쉼표로 구분한 상태 목록 또는 all
- search: 이름 / 휴대폰 번호 / 이메일 부분 일치
- 탈퇴 회원 제외, 최신 가입 순

"""

@router.get("")
def list_users(
    status_filter: str | None = Query(None, alias="status"),
    search: str | None = Query(None),
    page: PageParams = Depends(get_page_params),
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_user_manager),
):
    conditions = [User.is_deleted.is_(False)]

    statuses = _parse_statuses(status_filter)
    if statuses:
        conditions.append(User.status.in_(statuses))

    if search and search.strip():
        pattern = f"%{search.strip()}%"
        conditions.append(or_(
            User.name.ilike(pattern),
            User.mobile_number.ilike(pattern),
            User.email.ilike(pattern),
        ))

    total = db.scalar(select(func.count()).select_from(User).where(*conditions)) or 0
    users = db.scalars(
        select(User)
        .where(*conditions)
        .order_by(User.created_at.desc())
        .offset(page.offset)
        .limit(page.limit)
    ).all()

    return paginated([user_out(u) for u in users], total, page)


@router.post("", status_code=status.HTTP_201_CREATED)
def create_user(
    data: AdminCreateUserRequest,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_user),
    identity: Identity = Depends(get_user_manager),
):
    mobile_number = data.mobile_number.strip()
    if db.scalar(select(User).where(User.mobile_number == mobile_number)):
        raise HTTPException(status_code=409, detail="User with this mobile number already exists")

    if data.role != Role.USER and current_admin.role != Role.SUPER_ADMIN:
        raise HTTPException(status_code=403, detail="Only SUPER_ADMIN can grant or revoke admin roles")

    user = User(
        name=data.name,
        mobile_number=mobile_number,
        email=data.email,
        status=ApprovalStatus.APPROVED,
        role=data.role,
        created_by_admin=True,
    )
    db.add(user)
    db.flush()
    write_admin_log(
        db,
        actor_id=current_admin.id,
        action=AdminAction.CREATE_USER,
        target_user_id=user.id,
        after=user.role,
    )
    commit_or_500(db)
    db.refresh(user)

    return {"success": True, "message": "User created successfully", "user": user_out(user)}


# 본인 또는 관리자만 조회 가능
@router.get("/{user_id}/groups")
def get_user_groups(
    user_id: uuid.UUID,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_identity),
):
    if user_id != identity.user_id and not identity.is_admin:
        raise HTTPException(status_code=403, detail="Insufficient permissions")

    user = _get_active_user(db, user_id)
    return {
        "success": True,
        "groups": [
            {"id": str(g.id), "name": g.name, "description": g.description}
            for g in sorted(user.groups, key=lambda g: g.name)
        ],
    }


"""
회원 정보 수정 API (관리자)

- 이름 / 이메일 / 권한 / 상태 부분 수정
- 권한 변경은 services.admin 정책 검증 후 SET_ROLE 로그
- 상태 변경은 services.admin 정책 검증 후 SET_STATUS 로그, 그 외 변경은 UPDATE_USER 로그

"""

@router.patch("/{user_id}")
def update_user(
    user_id: uuid.UUID,
    data: AdminUpdateUserRequest,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_user),
    identity: Identity = Depends(get_user_manager),
):
    user = _get_active_user(db, user_id)

    if data.role is not None and data.role != user.role:
        ensure_role_change_allowed(db, current_admin, user, data.role)
        write_admin_log(
            db, actor_id=current_admin.id, action=AdminAction.SET_ROLE,
            target_user_id=user.id, before=user.role, after=data.role,
        )
        user.role = data.role

    if data.status is not None and data.status != user.status:
        ensure_status_change_allowed(db, current_admin, user, data.status)
        write_admin_log(
            db, actor_id=current_admin.id, action=AdminAction.SET_STATUS,
            target_user_id=user.id, before=user.status, after=data.status,
        )
        user.status = data.status

    if data.name is not None or "email" in data.model_fields_set:
        if data.name is not None:
            user.name = data.name
        if "email" in data.model_fields_set:
            user.email = data.email
        write_admin_log(db, actor_id=current_admin.id, action=AdminAction.UPDATE_USER, target_user_id=user.id)

    commit_or_500(db)
    db.refresh(user)
    return {"success": True, "message": "User updated successfully", "user": user_out(user)}


"""
회원 승인 / 거절 API (관리자)

- 본인 / SUPER_ADMIN(일반 관리자가 요청한 경우) / 마지막 관리자 상태 변경 금지
- 거절 시 사유(reason) 저장
- 상태별 안내 문자 발송 (로그)

"""

@router.patch("/{user_id}/status")
def update_user_status(
    user_id: uuid.UUID,
    data: StatusUpdateRequest,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_user),
    identity: Identity = Depends(get_user_manager),
):
    user = _get_active_user(db, user_id)
    before = user.status
    ensure_status_change_allowed(db, current_admin, user, data.status)

    user.status = data.status
    if data.status == ApprovalStatus.REJECTED:
        user.rejection_reason = data.reason
    elif data.status == ApprovalStatus.APPROVED:
        user.rejection_reason = None

    write_admin_log(
        db, actor_id=current_admin.id, action=AdminAction.SET_STATUS,
        target_user_id=user.id, before=before, after=data.status,
    )
    commit_or_500(db)
    db.refresh(user)

    _send_status_sms(user, data.status, data.reason)

    messages = {
        ApprovalStatus.APPROVED: "User approved successfully",
        ApprovalStatus.REJECTED: "User rejected",
        ApprovalStatus.PENDING: "User status updated",
    }
    return {"success": True, "message": messages[data.status], "user": user_out(user)}


# 회원 삭제 (Soft Delete)
@router.delete("/{user_id}")
def delete_user(
    user_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_user),
    identity: Identity = Depends(get_user_manager),
):
    user = _get_active_user(db, user_id)
    ensure_delete_allowed(db, current_admin, user)

    write_admin_log(
        db, actor_id=current_admin.id, action=AdminAction.DELETE_USER,
        target_user_id=user.id, before=user.status, after="deleted",
    )
    user.is_deleted = True
    user.deleted_at = datetime.now(timezone.utc)
    commit_or_500(db)

    return {"success": True, "message": "User deleted successfully"}
