import datetime
import uuid

from pydantic import Field

from app.models.event import Album, AlbumMedia, Event
from app.models.post import MediaType
from app.schemas.common import CamelModel
from app.services.groups import group_brief


class EventCreateRequest(CamelModel):
    name: str = Field(min_length=1, max_length=200)
    date: datetime.date
    end_date: datetime.date | None = None
    start_time: datetime.time | None = None
    end_time: datetime.time | None = None
    description: str | None = None
    group_ids: list[uuid.UUID] | None = None

# 보내지 않은 필드는 유지, null 로 보낸 필드는 비움 (model_fields_set 으로 구분)
class EventUpdateRequest(CamelModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    date: datetime.date | None = None
    end_date: datetime.date | None = None
    start_time: datetime.time | None = None
    end_time: datetime.time | None = None
    description: str | None = None
    group_ids: list[uuid.UUID] | None = None

class AlbumCreateRequest(CamelModel):
    name: str = Field(min_length=1, max_length=200)
    description: str | None = None
    group_ids: list[uuid.UUID] | None = None

class AlbumUpdateRequest(CamelModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None
    group_ids: list[uuid.UUID] | None = None

class AlbumMediaRequest(CamelModel):
    media_url: str = Field(min_length=1, max_length=500)
    media_type: MediaType | None = None
    caption: str | None = None


VIDEO_EXTENSIONS = (".mp4", ".mov", ".webm", ".m4v", ".avi")


# mediaType 이 없으면 URL 확장자로 추정
def guess_media_type(url: str) -> MediaType:
    path = url.split("?", 1)[0].lower()
    return MediaType.VIDEO if path.endswith(VIDEO_EXTENSIONS) else MediaType.IMAGE


def creator_brief(user) -> dict | None:
    if user is None:
        return None
    return {"id": str(user.id), "name": user.name}


def event_brief(event: Event) -> dict:
    return {"id": str(event.id), "name": event.name, "date": event.date}


def event_out(event: Event, *, album_count: int | None = None) -> dict:
    data = {
        "id": str(event.id),
        "name": event.name,
        "date": event.date,
        "endDate": event.end_date,
        "startTime": event.start_time,
        "endTime": event.end_time,
        "description": event.description,
        "creator": creator_brief(event.creator),
        "groups": [group_brief(g) for g in event.groups],
        "createdAt": event.created_at,
    }
    if album_count is not None:
        data["albumCount"] = album_count
    return data


def album_media_out(media: AlbumMedia) -> dict:
    return {
        "id": str(media.id),
        "albumId": str(media.album_id),
        "mediaUrl": media.media_url,
        "mediaType": media.media_type.value,
        "caption": media.caption,
        "displayOrder": media.display_order,
        "createdAt": media.created_at,
    }


def album_summary(album: Album) -> dict:
    return {
        "id": str(album.id),
        "name": album.name,
        "eventId": str(album.event_id),
        "description": album.description,
        "creator": creator_brief(album.creator),
        "coverImage": album.media[0].media_url if album.media else None,
        "mediaCount": len(album.media),
        "groups": [group_brief(g) for g in album.groups],
        "createdAt": album.created_at,
    }


def album_out(album: Album) -> dict:
    data = album_summary(album)
    data["event"] = event_brief(album.event) if album.event else None
    data["media"] = [album_media_out(m) for m in album.media]
    return data
