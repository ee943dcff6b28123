"""
services/interactions.py

좋아요 / 댓글 공통 서비스.

게시글, 행사, 앨범, 앨범 미디어에 붙는 좋아요와 댓글을
(target_type, target_id) 쌍으로 다룬다.

주요 기능:
- URL 의 엔티티 타입(posts | events | albums | media) → TargetType 변환
- 대상 조회 + 가시성 확인 (미디어는 소속 앨범의 가시성을 따름)
- 여러 대상의 좋아요/댓글 수, 내가 누른 좋아요를 한 번의 쿼리로 집계
- 대상 삭제 시 딸린 좋아요/댓글 정리

설계 원칙:
- 존재하지 않거나 볼 수 없는 대상은 모두 404 (Entity not found)
- 목록 화면의 N+1 카운트 쿼리 대신 GROUP BY 일괄 집계
- commit 은 라우터에서 수행

관련 파일:
- app.models.interaction   : Like / Comment 모델
- app.services.visibility  : can_view
- app.routers.interactions : 좋아요 / 댓글 API

"""

import uuid
from typing import Iterable

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from app.core.errors import NotFoundError, ValidationError
from app.core.permissions import Identity
from app.models.event import Album, AlbumMedia, Event
from app.models.interaction import Comment, Like, TargetType
from app.models.post import Post
from app.services.visibility import album_visible, can_view, event_visible, post_visible

ENTITY_TYPES: dict[str, TargetType] = {
    "posts": TargetType.POST,
    "events": TargetType.EVENT,
    "albums": TargetType.ALBUM,
    "media": TargetType.ALBUM_MEDIA,
}


def parse_entity_type(entity_type: str) -> TargetType:
    target_type = ENTITY_TYPES.get(entity_type)
    if target_type is None:
        raise ValidationError("Invalid entity type")
    return target_type


def _load_target(db: Session, target_type: TargetType, target_id: uuid.UUID):
    if target_type == TargetType.POST:
        post = db.get(Post, target_id)
        return post, post_visible(post) if post else None
    if target_type == TargetType.EVENT:
        event = db.get(Event, target_id)
        return event, event_visible(event) if event else None
    if target_type == TargetType.ALBUM:
        album = db.get(Album, target_id)
        return album, album_visible(album) if album else None

    media = db.get(AlbumMedia, target_id)
    return media, album_visible(media.album) if media else None


def get_visible_target(db: Session, identity: Identity, target_type: TargetType, target_id: uuid.UUID):
    entity, visible = _load_target(db, target_type, target_id)
    if entity is None or not can_view(identity, visible):
        raise NotFoundError("Entity not found")
    return entity


"""
일괄 집계 함수

- ids 가 비어 있으면 쿼리 없이 빈 결과
- 좋아요/댓글이 없는 대상은 결과 dict 에 없음 → .get(id, 0) 로 사용

"""

def count_likes(db: Session, target_type: TargetType, ids: Iterable[uuid.UUID]) -> dict[uuid.UUID, int]:
    ids = list(ids)
    if not ids:
        return {}
    rows = db.execute(
        select(Like.target_id, func.count())
        .where(Like.target_type == target_type, Like.target_id.in_(ids))
        .group_by(Like.target_id)
    ).all()
    return {target_id: count for target_id, count in rows}


def count_comments(db: Session, target_type: TargetType, ids: Iterable[uuid.UUID]) -> dict[uuid.UUID, int]:
    ids = list(ids)
    if not ids:
        return {}
    rows = db.execute(
        select(Comment.target_id, func.count())
        .where(Comment.target_type == target_type, Comment.target_id.in_(ids))
        .group_by(Comment.target_id)
    ).all()
    return {target_id: count for target_id, count in rows}


def liked_ids(db: Session, user_id: uuid.UUID, target_type: TargetType,
              ids: Iterable[uuid.UUID]) -> set[uuid.UUID]:
    ids = list(ids)
    if not ids:
        return set()
    return set(db.scalars(
        select(Like.target_id).where(
            Like.user_id == user_id,
            Like.target_type == target_type,
            Like.target_id.in_(ids),
        )
    ).all())


def stats_for(db: Session, user_id: uuid.UUID, target_type: TargetType,
              ids: Iterable[uuid.UUID]) -> dict[uuid.UUID, dict]:
    ids = list(ids)
    likes = count_likes(db, target_type, ids)
    comments = count_comments(db, target_type, ids)
    mine = liked_ids(db, user_id, target_type, ids)
    return {
        i: {"likesCount": likes.get(i, 0), "commentsCount": comments.get(i, 0), "liked": i in mine}
        for i in ids
    }


def like_count(db: Session, target_type: TargetType, target_id: uuid.UUID) -> int:
    return count_likes(db, target_type, [target_id]).get(target_id, 0)


def find_like(db: Session, user_id: uuid.UUID, target_type: TargetType, target_id: uuid.UUID) -> Like | None:
    return db.scalar(select(Like).where(
        Like.user_id == user_id,
        Like.target_type == target_type,
        Like.target_id == target_id,
    ))


# 대상 삭제 시 함께 호출 (FK 가 없으므로 직접 정리)
def purge_targets(db: Session, target_type: TargetType, ids: Iterable[uuid.UUID]) -> None:
    ids = list(ids)
    if not ids:
        return
    db.execute(delete(Like).where(Like.target_type == target_type, Like.target_id.in_(ids)))
    db.execute(delete(Comment).where(Comment.target_type == target_type, Comment.target_id.in_(ids)))


def author_brief(user) -> dict | None:
    if user is None:
        return None
    return {"id": str(user.id), "name": user.name, "profilePictureUrl": user.profile_picture_url}


def comment_out(comment: Comment) -> dict:
    return {
        "id": str(comment.id),
        "content": comment.content,
        "author": author_brief(comment.author),
        "createdAt": comment.created_at,
        "updatedAt": comment.updated_at,
    }
