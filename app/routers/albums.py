"""
albums.py

앨범 단건 API 및 앨범 미디어 API 모음.
앨범 생성/목록은 행사 하위 경로(/events/{id}/albums)에 있다.

주요 기능:
- 앨범 상세 (미디어 포함, 볼 수 없으면 404)
- 앨범 수정 / 삭제 (관리자)
- 앨범 미디어 추가 / 삭제 (관리자)

관련 파일:
- app.routers.events        : 행사별 앨범 목록 / 생성
- app.services.visibility   : album 가시성

"""

import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from app.core.deps import get_db, get_identity, get_event_manager, commit_or_500
from app.core.permissions import Identity
from app.models.event import Album, AlbumMedia
from app.models.interaction import TargetType
from app.schemas.event import (
    AlbumMediaRequest, AlbumUpdateRequest,
    album_media_out, album_out, guess_media_type,
)
from app.services.groups import resolve_groups
from app.services.interactions import purge_targets
from app.services.visibility import album_visible, ensure_visible

router = APIRouter(prefix="/albums", tags=["albums"])


def _get_album(db: Session, album_id: uuid.UUID) -> Album:
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
    return album


@router.get("/{album_id}")
def get_album(
    album_id: uuid.UUID,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_identity),
):
    album = _get_album(db, album_id)
    ensure_visible(identity, album_visible(album), "Album not found")
    return {"success": True, "album": album_out(album)}


@router.patch("/{album_id}")
def update_album(
    album_id: uuid.UUID,
    data: AlbumUpdateRequest,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_event_manager),
):
    album = _get_album(db, album_id)

    if data.name is not None:
        album.name = data.name
    if "description" in data.model_fields_set:
        album.description = data.description
    if data.group_ids is not None:
        album.groups = resolve_groups(db, data.group_ids)

    commit_or_500(db)
    album = _get_album(db, album_id)
    return {"success": True, "message": "Album updated successfully", "album": album_out(album)}


@router.delete("/{album_id}")
def delete_album(
    album_id: uuid.UUID,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_event_manager),
):
    album = _get_album(db, album_id)

    purge_targets(db, TargetType.ALBUM, [album.id])
    purge_targets(db, TargetType.ALBUM_MEDIA, [m.id for m in album.media])
    db.delete(album)
    commit_or_500(db)
    return {"success": True, "message": "Album deleted successfully"}


"""
앨범 미디어 추가 API

- displayOrder 는 현재 최대값 + 1 (맨 뒤에 추가, 중간 삭제 후에도 중복 없음)
- mediaType 미지정 시 URL 확장자로 추정

"""

@router.post("/{album_id}/media", status_code=status.HTTP_201_CREATED)
def add_album_media(
    album_id: uuid.UUID,
    data: AlbumMediaRequest,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_event_manager),
):
    if not db.get(Album, album_id):
        raise HTTPException(status_code=404, detail="Album not found")

    last = db.scalar(select(func.max(AlbumMedia.display_order)).where(AlbumMedia.album_id == album_id))
    order = 0 if last is None else last + 1
    media = AlbumMedia(
        album_id=album_id,
        media_url=data.media_url,
        media_type=data.media_type or guess_media_type(data.media_url),
        caption=data.caption,
        display_order=order,
    )
    db.add(media)
    commit_or_500(db)
    db.refresh(media)
    return {"success": True, "message": "Media added successfully", "media": album_media_out(media)}


@router.delete("/{album_id}/media/{media_id}")
def delete_album_media(
    album_id: uuid.UUID,
    media_id: uuid.UUID,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_event_manager),
):
    media = db.get(AlbumMedia, media_id)
    if not media or media.album_id != album_id:
        raise HTTPException(status_code=404, detail="Media not found")

    purge_targets(db, TargetType.ALBUM_MEDIA, [media.id])
    db.delete(media)
    commit_or_500(db)
    return {"success": True, "message": "Media deleted successfully"}
