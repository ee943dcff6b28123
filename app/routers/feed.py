"""
feed.py

행사 피드 API.

행사 → 앨범 → 사진 구조를 한 번에 내려주는 화면용 API로,
각 항목에 좋아요/댓글 수와 내 좋아요 여부를 함께 붙인다.

주요 기능:
- 피드 목록: 볼 수 있는 행사 (날짜 내림차순) + 볼 수 있는 앨범 + 앨범별 미리보기 사진 4장
- 행사 피드 상세: 행사 + 볼 수 있는 앨범 전체
- 앨범 피드 상세: 앨범 + 미디어별 좋아요/댓글 수

설계 원칙:
- 가시성은 services.visibility 의 clause / can_view 만 사용
- 좋아요/댓글 수는 타입별로 한 번씩 일괄 집계

"""

import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from app.core.deps import get_db, get_identity
from app.core.permissions import Identity
from app.models.event import Album, Event
from app.models.interaction import TargetType
from app.schemas.event import album_media_out, album_summary, event_brief, event_out
from app.services.interactions import stats_for
from app.services.pagination import PageParams, get_page_params, paginated
from app.services.visibility import (
    album_visibility_clause, album_visible, can_view, ensure_visible,
    event_visibility_clause, event_visible, has_no_groups,
)

router = APIRouter(prefix="/feed", tags=["feed"])

PREVIEW_PHOTOS = 4


def _album_card(album: Album, stats: dict) -> dict:
    data = album_summary(album)
    data["photos"] = [album_media_out(m) for m in album.media[:PREVIEW_PHOTOS]]
    data["photoCount"] = len(album.media)
    data.update(stats)
    return data


def _event_card(db: Session, identity: Identity, event: Event, albums: list[Album]) -> dict:
    album_stats = stats_for(db, identity.user_id, TargetType.ALBUM, [a.id for a in albums])
    data = event_out(event, album_count=len(albums))
    data["albums"] = [_album_card(a, album_stats[a.id]) for a in albums]
    return data


"""
피드 목록 API

- 그룹 없는 일반 회원은 빈 페이지
- 행사별 앨범은 앨범 가시성으로 다시 필터

"""

@router.get("")
def get_feed(
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

    event_ids = [e.id for e in events]
    albums_by_event: dict[uuid.UUID, list[Album]] = {i: [] for i in event_ids}
    if event_ids:
        albums = db.scalars(
            select(Album)
            .options(selectinload(Album.creator), selectinload(Album.groups), selectinload(Album.media))
            .where(Album.event_id.in_(event_ids), album_visibility_clause(identity))
            .order_by(Album.created_at.desc(), Album.id)
        ).all()
        for album in albums:
            albums_by_event[album.event_id].append(album)

    event_stats = stats_for(db, identity.user_id, TargetType.EVENT, event_ids)
    data = []
    for event in events:
        card = _event_card(db, identity, event, albums_by_event[event.id])
        card.update(event_stats[event.id])
        data.append(card)
    return paginated(data, total, page)


@router.get("/event/{event_id}")
def get_event_feed(
    event_id: uuid.UUID,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_identity),
):
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
    ensure_visible(identity, event_visible(event), "Event not found")

    albums = [a for a in event.albums if can_view(identity, album_visible(a))]
    data = _event_card(db, identity, event, albums)
    data.update(stats_for(db, identity.user_id, TargetType.EVENT, [event.id])[event.id])
    return {"success": True, "data": data}


@router.get("/album/{album_id}")
def get_album_feed(
    album_id: uuid.UUID,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_identity),
):
    album = db.scalar(
        select(Album)
        .options(
            selectinload(Album.event),
            selectinload(Album.creator),
            selectinload(Album.groups),
            selectinload(Album.media),
        )
        .where(Album.id == album_id)
    )
    if not album:
        raise HTTPException(status_code=404, detail="Album not found")
    ensure_visible(identity, album_visible(album), "Album not found")

    media_stats = stats_for(db, identity.user_id, TargetType.ALBUM_MEDIA, [m.id for m in album.media])
    data = album_summary(album)
    data["event"] = event_brief(album.event)
    data["media"] = [{**album_media_out(m), **media_stats[m.id]} for m in album.media]
    data.update(stats_for(db, identity.user_id, TargetType.ALBUM, [album.id])[album.id])
    return {"success": True, "data": data}
