"""
events.py

행사(Event) API 및 행사 하위 앨범 목록/생성 API 모음.

행사와 앨범에는 공개 플래그가 없으며,
관리자가 아닌 회원은 자신이 속한 그룹과 연결된 행사/앨범만 볼 수 있다.

주요 기능:
- 행사 목록 (관리자 ?all=true: 전체 / 그 외: 내 그룹 행사)
- 행사 상세 (하위 앨범은 앨범 가시성으로 다시 필터)
- 행사 생성 / 수정 / 삭제 (관리자)
- 행사별 앨범 목록 / 앨범 생성

설계 원칙:
- 그룹이 없는 일반 회원은 쿼리 없이 빈 페이지 반환
- 그룹 재지정, 행사 삭제(앨범·미디어·그룹 연결 포함)는 commit 한 번으로 처리
- 행사 생성 시 연결된 그룹 채널로 실시간 알림

관련 파일:
- app.services.visibility   : event / album 가시성
- app.schemas.event         : 요청 모델 / 응답 직렬화
- app.routers.albums        : 앨범 단건 API

"""

import uuid

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, status
from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from app.core.deps import get_db, get_identity, get_event_manager, commit_or_500
from app.core.permissions import Identity
from app.models.event import Album, Event
from app.models.interaction import TargetType
from app.schemas.event import (
    AlbumCreateRequest, EventCreateRequest, EventUpdateRequest,
    album_summary, event_brief, event_out,
)
from app.services.groups import resolve_groups
from app.services.interactions import purge_targets
from app.services.notifications import push_to_groups
from app.services.pagination import PageParams, get_page_params, paginated
from app.services.visibility import (
    album_visibility_clause, album_visible, can_view, ensure_visible,
    event_visibility_clause, event_visible, has_no_groups,
)

router = APIRouter(prefix="/events", tags=["events"])

_ALBUM_LOAD = (selectinload(Album.creator), selectinload(Album.groups), selectinload(Album.media))


def _get_event(db: Session, event_id: uuid.UUID) -> Event:
    event = db.scalar(
        select(Event)
        .options(
            selectinload(Event.creator),
            selectinload(Event.groups),
            selectinload(Event.albums).selectinload(Album.groups),
            selectinload(Event.albums).selectinload(Album.media),
            selectinload(Event.albums).selectinload(Album.creator),
        )
        .where(Event.id == event_id)
    )
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


# 행사별 "볼 수 있는" 앨범 수
def _visible_album_counts(db: Session, identity: Identity, event_ids: list[uuid.UUID]) -> dict[uuid.UUID, int]:
    if not event_ids:
        return {}
    rows = db.execute(
        select(Album.event_id, func.count())
        .where(Album.event_id.in_(event_ids), album_visibility_clause(identity))
        .group_by(Album.event_id)
    ).all()
    return dict(rows)


"""
행사 목록 API

- 관리자 ?all=true : 전체 행사 (그룹 포함)
- 그룹 없는 일반 회원 : 빈 페이지 (total=0)
- 그 외 : 내 그룹과 연결된 행사만
- 날짜 내림차순

"""

@router.get("")
def list_events(
    show_all: bool = Query(False, alias="all"),
    page: PageParams = Depends(get_page_params),
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_identity),
):
    if has_no_groups(identity):
        return paginated([], 0, page)

    clause = event_visibility_clause(identity)
    total = db.scalar(select(func.count()).select_from(Event).where(clause)) or 0
    events = db.scalars(
        select(Event)
        .options(selectinload(Event.creator), selectinload(Event.groups))
        .where(clause)
        .order_by(Event.date.desc(), Event.created_at.desc())
        .offset(page.offset)
        .limit(page.limit)
    ).all()

    counts = _visible_album_counts(db, identity, [e.id for e in events])
    data = [event_out(e, album_count=counts.get(e.id, 0)) for e in events]
    if not (identity.is_admin and show_all):
        # 일반 목록에는 그룹 구성 정보를 노출하지 않음
        for item in data:
            item.pop("groups")
    return paginated(data, total, page)


@router.get("/{event_id}")
def get_event(
    event_id: uuid.UUID,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_identity),
):
    event = _get_event(db, event_id)
    ensure_visible(identity, event_visible(event), "Event not found")

    albums = [a for a in event.albums if can_view(identity, album_visible(a))]
    data = event_out(event, album_count=len(albums))
    data["albums"] = [album_summary(a) for a in albums]
    return {"success": True, "event": data}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_event(
    data: EventCreateRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_event_manager),
):
    if data.end_date and data.end_date < data.date:
        raise HTTPException(status_code=400, detail="End date cannot be before start date")

    event = Event(
        name=data.name,
        date=data.date,
        end_date=data.end_date,
        start_time=data.start_time,
        end_time=data.end_time,
        description=data.description,
        created_by=identity.user_id,
    )
    event.groups = resolve_groups(db, data.group_ids)
    db.add(event)
    commit_or_500(db)

    event = _get_event(db, event.id)
    if event.groups:
        background_tasks.add_task(
            push_to_groups,
            [g.id for g in event.groups],
            {"type": "new_event", "title": "New event", "message": event.name, "referenceId": str(event.id)},
        )
    return {"success": True, "message": "Event created successfully", "event": event_out(event)}


"""
행사 수정 API (관리자)

- 보낸 필드만 수정 (null 로 보낸 선택 필드는 비움)
- groupIds 를 보내면 그룹 연결 전체 교체

"""

@router.patch("/{event_id}")
def update_event(
    event_id: uuid.UUID,
    data: EventUpdateRequest,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_event_manager),
):
    event = _get_event(db, event_id)
    fields = data.model_fields_set

    if data.name is not None:
        event.name = data.name
    if data.date is not None:
        event.date = data.date
    for attr in ("end_date", "start_time", "end_time", "description"):
        if attr in fields:
            setattr(event, attr, getattr(data, attr))
    if data.group_ids is not None:
        event.groups = resolve_groups(db, data.group_ids)

    if event.end_date and event.end_date < event.date:
        db.rollback()
        raise HTTPException(status_code=400, detail="End date cannot be before start date")

    commit_or_500(db)
    event = _get_event(db, event_id)
    return {"success": True, "message": "Event updated successfully", "event": event_out(event)}


# 행사 삭제: 앨범 → 미디어 → 그룹 연결 → 좋아요/댓글까지 한 번에 삭제
@router.delete("/{event_id}")
def delete_event(
    event_id: uuid.UUID,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_event_manager),
):
    event = _get_event(db, event_id)

    album_ids = [a.id for a in event.albums]
    media_ids = [m.id for a in event.albums for m in a.media]
    purge_targets(db, TargetType.EVENT, [event.id])
    purge_targets(db, TargetType.ALBUM, album_ids)
    purge_targets(db, TargetType.ALBUM_MEDIA, media_ids)

    db.delete(event)
    commit_or_500(db)
    return {"success": True, "message": "Event and all its albums deleted successfully"}


# ------------------------------------------------------------------
# 행사 하위 앨범
# ------------------------------------------------------------------

@router.get("/{event_id}/albums")
def list_event_albums(
    event_id: uuid.UUID,
    page: PageParams = Depends(get_page_params),
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_identity),
):
    event = db.get(Event, event_id)
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")

    body_event = event_brief(event)
    if has_no_groups(identity):
        return {**paginated([], 0, page), "event": body_event}

    conditions = (Album.event_id == event_id, album_visibility_clause(identity))
    total = db.scalar(select(func.count()).select_from(Album).where(*conditions)) or 0
    albums = db.scalars(
        select(Album)
        .options(*_ALBUM_LOAD)
        .where(*conditions)
        .order_by(Album.created_at.desc(), Album.id)
        .offset(page.offset)
        .limit(page.limit)
    ).all()

    return {**paginated([album_summary(a) for a in albums], total, page), "event": body_event}


@router.post("/{event_id}/albums", status_code=status.HTTP_201_CREATED)
def create_album(
    event_id: uuid.UUID,
    data: AlbumCreateRequest,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_event_manager),
):
    event = db.get(Event, event_id)
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")

    album = Album(
        event_id=event.id,
        name=data.name,
        description=data.description,
        created_by=identity.user_id,
    )
    album.groups = resolve_groups(db, data.group_ids)
    db.add(album)
    commit_or_500(db)

    album = db.scalar(select(Album).options(*_ALBUM_LOAD).where(Album.id == album.id))
    return {"success": True, "message": "Album created successfully", "album": album_summary(album)}
