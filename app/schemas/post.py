import uuid
from typing import Any

from pydantic import Field

from app.models.post import MediaType, Post
from app.models.user import ApprovalStatus
from app.schemas.common import CamelModel
from app.services.groups import group_brief
from app.services.interactions import author_brief


class MediaIn(CamelModel):
    media_url: str = Field(min_length=1, max_length=500)
    media_type: MediaType = MediaType.IMAGE

# content 는 에디터 JSON 문서(dict/list) 또는 문자열
class PostCreateRequest(CamelModel):
    title: str | None = Field(default=None, max_length=255)
    content: Any = None
    group_ids: list[uuid.UUID] | None = None
    is_public: bool | None = None
    media: list[MediaIn] = Field(default_factory=list)

class PostStatusRequest(CamelModel):
    status: ApprovalStatus
    reason: str | None = None
    group_ids: list[uuid.UUID] | None = None


def media_out(media) -> dict:
    return {
        "id": str(media.id),
        "mediaUrl": media.media_url,
        "mediaType": media.media_type.value,
        "displayOrder": media.display_order,
    }


def post_out(post: Post, stats: dict | None = None) -> dict:
    stats = stats or {}
    return {
        "id": str(post.id),
        "title": post.title,
        "content": post.content,
        "status": post.status.value,
        "isPublic": post.is_public,
        "rejectionReason": post.rejection_reason,
        "author": author_brief(post.author),
        "media": [media_out(m) for m in post.media],
        "groups": [group_brief(g) for g in post.groups],
        "likesCount": stats.get("likesCount", 0),
        "commentsCount": stats.get("commentsCount", 0),
        "liked": stats.get("liked", False),
        "createdAt": post.created_at,
    }
