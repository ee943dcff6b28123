"""
groups.py

그룹 / 그룹 유형 / 그룹 멤버 API 모음.

그룹은 게시글·행사·앨범의 가시성 범위이므로
그룹 생성·수정·삭제와 멤버 관리는 관리자(MANAGE_GROUPS)만 가능하다.

주요 기능:
- 내 그룹 목록 / (관리자) 전체 그룹 목록 + 이름 검색
- 그룹 유형 조회 (로그인 사용자) / 생성·수정·삭제 (관리자)
- 그룹 생성·수정·삭제, 멤버 조회·추가·제거 (관리자)

설계 원칙:
- 그룹 삭제 시 네 연결 테이블 정리 + 그룹 삭제를 한 트랜잭션으로 처리
- 멤버 추가는 멱등 (이미 소속된 회원은 건너뜀)
- 사용 중인 그룹 유형은 삭제 불가 (400)

관련 파일:
- app.services.groups      : 그룹 조회 / 삭제 / 직렬화
- app.models.group         : Group / GroupType / 연결 테이블

"""

import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.core.deps import get_db, get_current_user, get_identity, get_group_manager, commit_or_500
from app.core.permissions import Identity
from app.models.group import Group, GroupType, user_groups
from app.models.user import User
from app.schemas.group import (
    GroupCreateRequest, GroupUpdateRequest, MembersAddRequest,
    GroupTypeCreateRequest, GroupTypeUpdateRequest,
)
from app.services.groups import delete_group, get_group, group_out
from app.services.pagination import PageParams, get_page_params, paginated

router = APIRouter(prefix="/groups", tags=["groups"])


def _require_group(db: Session, group_id: uuid.UUID) -> Group:
    group = get_group(db, group_id)
    if not group:
        raise HTTPException(status_code=404, detail="Group not found")
    return group


def _require_group_type(db: Session, type_id: uuid.UUID | None) -> GroupType | None:
    if type_id is None:
        return None
    group_type = db.get(GroupType, type_id)
    if not group_type:
        raise HTTPException(status_code=400, detail="Unknown group type")
    return group_type


def _member_counts(db: Session, group_ids: list[uuid.UUID]) -> dict[uuid.UUID, int]:
    if not group_ids:
        return {}
    rows = db.execute(
        select(user_groups.c.group_id, func.count())
        .where(user_groups.c.group_id.in_(group_ids))
        .group_by(user_groups.c.group_id)
    ).all()
    return dict(rows)


def _group_type_out(group_type: GroupType) -> dict:
    return {"id": str(group_type.id), "label": group_type.label, "description": group_type.description}


"""
그룹 목록 API

- 일반 회원 / ?all 없는 관리자: 내가 속한 그룹
- 관리자 + ?all=true: 전체 그룹 (페이지네이션, ?search= 이름 검색)

"""

@router.get("")
def list_groups(
    show_all: bool = Query(False, alias="all"),
    search: str | None = Query(None),
    page: PageParams = Depends(get_page_params),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    identity: Identity = Depends(get_identity),
):
    if identity.is_admin and show_all:
        conditions = []
        if search and search.strip():
            conditions.append(Group.name.ilike(f"%{search.strip()}%"))

        total = db.scalar(select(func.count()).select_from(Group).where(*conditions)) or 0
        groups = db.scalars(
            select(Group).where(*conditions).order_by(Group.name).offset(page.offset).limit(page.limit)
        ).all()
        counts = _member_counts(db, [g.id for g in groups])
        data = [{**group_out(g), "memberCount": counts.get(g.id, 0)} for g in groups]
        return paginated(data, total, page)

    groups = sorted(user.groups, key=lambda g: g.name)
    counts = _member_counts(db, [g.id for g in groups])
    return {
        "success": True,
        "data": [{**group_out(g), "memberCount": counts.get(g.id, 0)} for g in groups],
    }


# ------------------------------------------------------------------
# 그룹 유형
# ------------------------------------------------------------------

@router.get("/types")
def list_group_types(
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_identity),
):
    types = db.scalars(select(GroupType).order_by(GroupType.label)).all()
    return {"success": True, "data": [_group_type_out(t) for t in types]}


@router.post("/types", status_code=status.HTTP_201_CREATED)
def create_group_type(
    data: GroupTypeCreateRequest,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_group_manager),
):
    if db.scalar(select(GroupType).where(GroupType.label == data.label)):
        raise HTTPException(status_code=409, detail="Group type already exists")

    group_type = GroupType(label=data.label, description=data.description)
    db.add(group_type)
    commit_or_500(db)
    db.refresh(group_type)
    return {"success": True, "message": "Group type created successfully", "data": _group_type_out(group_type)}


@router.patch("/types/{type_id}")
def update_group_type(
    type_id: uuid.UUID,
    data: GroupTypeUpdateRequest,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_group_manager),
):
    group_type = db.get(GroupType, type_id)
    if not group_type:
        raise HTTPException(status_code=404, detail="Group type not found")

    if data.label is not None and data.label != group_type.label:
        if db.scalar(select(GroupType).where(GroupType.label == data.label)):
            raise HTTPException(status_code=409, detail="Group type already exists")
        group_type.label = data.label
    if "description" in data.model_fields_set:
        group_type.description = data.description

    commit_or_500(db)
    db.refresh(group_type)
    return {"success": True, "message": "Group type updated successfully", "data": _group_type_out(group_type)}


@router.delete("/types/{type_id}")
def delete_group_type(
    type_id: uuid.UUID,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_group_manager),
):
    group_type = db.get(GroupType, type_id)
    if not group_type:
        raise HTTPException(status_code=404, detail="Group type not found")

    in_use = db.scalar(select(func.count()).select_from(Group).where(Group.group_type_id == type_id)) or 0
    if in_use:
        raise HTTPException(status_code=400, detail=f"Cannot delete: {in_use} groups are using this type")

    db.delete(group_type)
    commit_or_500(db)
    return {"success": True, "message": "Group type deleted successfully"}


# ------------------------------------------------------------------
# 그룹
# ------------------------------------------------------------------

@router.post("", status_code=status.HTTP_201_CREATED)
def create_group(
    data: GroupCreateRequest,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_group_manager),
):
    _require_group_type(db, data.group_type_id)

    group = Group(
        name=data.name,
        description=data.description,
        group_type_id=data.group_type_id,
        created_by=identity.user_id,
    )
    db.add(group)
    commit_or_500(db)
    db.refresh(group)
    return {"success": True, "message": "Group created successfully", "group": group_out(group)}


@router.patch("/{group_id}")
def update_group(
    group_id: uuid.UUID,
    data: GroupUpdateRequest,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_group_manager),
):
    group = _require_group(db, group_id)

    if data.name is not None:
        group.name = data.name
    if "description" in data.model_fields_set:
        group.description = data.description
    if "group_type_id" in data.model_fields_set:
        _require_group_type(db, data.group_type_id)
        group.group_type_id = data.group_type_id

    commit_or_500(db)
    db.refresh(group)
    return {"success": True, "message": "Group updated successfully", "group": group_out(group)}


@router.delete("/{group_id}")
def remove_group(
    group_id: uuid.UUID,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_group_manager),
):
    group = _require_group(db, group_id)
    delete_group(db, group)
    commit_or_500(db)
    return {"success": True, "message": "Group deleted successfully"}


# ------------------------------------------------------------------
# 그룹 멤버
# ------------------------------------------------------------------

@router.get("/{group_id}/members")
def list_members(
    group_id: uuid.UUID,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_group_manager),
):
    group = _require_group(db, group_id)
    members = sorted((m for m in group.members if not m.is_deleted), key=lambda m: m.name)
    return {
        "success": True,
        "members": [
            {
                "id": str(m.id),
                "name": m.name,
                "mobileNumber": m.mobile_number,
                "email": m.email,
                "profilePictureUrl": m.profile_picture_url,
            }
            for m in members
        ],
    }


"""
멤버 추가 API

- 존재하지 않는 회원 ID 가 있으면 400 (아무것도 추가하지 않음)
- 이미 소속된 회원은 건너뜀

"""

@router.post("/{group_id}/members")
def add_members(
    group_id: uuid.UUID,
    data: MembersAddRequest,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_group_manager),
):
    group = _require_group(db, group_id)

    wanted = list(dict.fromkeys(data.user_ids))
    users = db.scalars(select(User).where(User.id.in_(wanted), User.is_deleted.is_(False))).all() if wanted else []
    found = {u.id for u in users}
    missing = [str(uid) for uid in wanted if uid not in found]
    if missing:
        raise HTTPException(status_code=400, detail=f"Unknown user id(s): {', '.join(missing)}")

    current = {m.id for m in group.members}
    added = 0
    for u in users:
        if u.id not in current:
            group.members.append(u)
            added += 1

    commit_or_500(db)
    return {"success": True, "message": f"{added} members added to group", "added": added}


@router.delete("/{group_id}/members/{user_id}")
def remove_member(
    group_id: uuid.UUID,
    user_id: uuid.UUID,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_group_manager),
):
    group = _require_group(db, group_id)

    member = next((m for m in group.members if m.id == user_id), None)
    if member is None:
        raise HTTPException(status_code=404, detail="User is not a member of this group")

    group.members.remove(member)
    commit_or_500(db)
    return {"success": True, "message": "Member removed from group"}
