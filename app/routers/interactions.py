"""
interactions.py

좋아요 / 댓글 API 모음.

URL 형태: /api/{type}/{id}/like, /api/{type}/{id}/comments
type: posts | events | albums | media

주요 기능:
- 좋아요 추가 / 취소 (멱등, 현재 좋아요 수 반환)
- 좋아요 누른 회원 목록 (최근 50명)
- 댓글 목록 / 작성
- 댓글 수정 (작성자만) / 삭제 (작성자 또는 관리자)
- 남의 게시글에 좋아요/댓글 시 게시글 작성자에게 알림

설계 원칙:
- 존재하지 않거나 볼 수 없는 대상은 404 (Entity not found)
- /comments/{id} 경로를 /{type}/{id} 경로보다 먼저 선언
- 이 라우터는 경로 패턴이 넓으므로 main 에서 마지막에 등록

"""

import uuid

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Response, status
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from app.core.deps import get_db, get_identity, commit_or_500
from app.core.permissions import Identity
from app.models.interaction import Comment, Like, TargetType
from app.models.notification import NotificationType, ReferenceType
from app.models.post import Post
from app.schemas.interaction import CommentRequest
from app.services.interactions import (
    author_brief, comment_out, find_like, get_visible_target,
    like_count, parse_entity_type,
)
from app.services.notifications import notification_out, notify, push_to_user

router = APIRouter(tags=["interactions"])

LIKERS_LIMIT = 50


def _notify_post_author(
    db: Session,
    background_tasks: BackgroundTasks,
    identity: Identity,
    target,
    *,
    type: NotificationType,
    title: str,
    message: str,
) -> None:
    # 게시글이고, 작성자가 본인이 아닐 때만
    if not isinstance(target, Post) or target.author_id == identity.user_id:
        return

    notification = notify(
        db,
        user_id=target.author_id,
        type=type,
        title=title,
        message=message,
        reference_type=ReferenceType.POST,
        reference_id=target.id,
    )
    commit_or_500(db)
    background_tasks.add_task(push_to_user, target.author_id, notification_out(notification))


def _get_comment(db: Session, comment_id: uuid.UUID) -> Comment:
    comment = db.scalar(select(Comment).options(selectinload(Comment.author)).where(Comment.id == comment_id))
    if not comment:
        raise HTTPException(status_code=404, detail="Comment not found")
    return comment


def _clean_content(data: CommentRequest) -> str:
    content = (data.content or "").strip()
    if not content:
        raise HTTPException(status_code=400, detail="Comment content is required")
    return content


# ------------------------------------------------------------------
# 댓글 단건 (경로 충돌 방지를 위해 먼저 선언)
# ------------------------------------------------------------------

@router.patch("/comments/{comment_id}")
def update_comment(
    comment_id: uuid.UUID,
    data: CommentRequest,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_identity),
):
    comment = _get_comment(db, comment_id)
    if comment.user_id != identity.user_id:
        raise HTTPException(status_code=403, detail="Not authorized to edit this comment")

    comment.content = _clean_content(data)
    commit_or_500(db)
    comment = _get_comment(db, comment_id)
    return {"success": True, "message": "Comment updated", "comment": comment_out(comment)}


@router.delete("/comments/{comment_id}")
def delete_comment(
    comment_id: uuid.UUID,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_identity),
):
    comment = _get_comment(db, comment_id)
    if comment.user_id != identity.user_id and not identity.is_admin:
        raise HTTPException(status_code=403, detail="Not authorized to delete this comment")

    db.delete(comment)
    commit_or_500(db)
    return {"success": True, "message": "Comment deleted"}


# ------------------------------------------------------------------
# 좋아요
# ------------------------------------------------------------------

"""
좋아요 추가 API

- 이미 눌렀으면 200 + "Already liked" (중복 생성 없음)
- 새로 눌렀으면 201

"""

@router.post("/{entity_type}/{entity_id}/like")
def add_like(
    entity_type: str,
    entity_id: uuid.UUID,
    response: Response,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_identity),
):
    target_type = parse_entity_type(entity_type)
    target = get_visible_target(db, identity, target_type, entity_id)

    if find_like(db, identity.user_id, target_type, entity_id):
        count = like_count(db, target_type, entity_id)
        return {"success": True, "message": "Already liked", "liked": True, "likesCount": count}

    db.add(Like(user_id=identity.user_id, target_type=target_type, target_id=entity_id))
    commit_or_500(db)

    _notify_post_author(
        db, background_tasks, identity, target,
        type=NotificationType.LIKE,
        title="New like",
        message="Someone liked your post.",
    )

    count = like_count(db, target_type, entity_id)
    response.status_code = status.HTTP_201_CREATED
    return {"success": True, "message": "Liked successfully", "liked": True, "likesCount": count}


@router.delete("/{entity_type}/{entity_id}/like")
def remove_like(
    entity_type: str,
    entity_id: uuid.UUID,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_identity),
):
    target_type = parse_entity_type(entity_type)
    get_visible_target(db, identity, target_type, entity_id)

    like = find_like(db, identity.user_id, target_type, entity_id)
    if not like:
        count = like_count(db, target_type, entity_id)
        return {"success": True, "message": "Not liked", "liked": False, "likesCount": count}

    db.delete(like)
    commit_or_500(db)

    count = like_count(db, target_type, entity_id)
    return {"success": True, "message": "Like removed", "liked": False, "likesCount": count}


@router.get("/{entity_type}/{entity_id}/likes")
def list_likes(
    entity_type: str,
    entity_id: uuid.UUID,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_identity),
):
    target_type = parse_entity_type(entity_type)
    get_visible_target(db, identity, target_type, entity_id)

    likes = db.scalars(
        select(Like)
        .options(selectinload(Like.user))
        .where(Like.target_type == target_type, Like.target_id == entity_id)
        .order_by(Like.created_at.desc())
        .limit(LIKERS_LIMIT)
    ).all()

    return {
        "success": True,
        "likesCount": like_count(db, target_type, entity_id),
        "liked": find_like(db, identity.user_id, target_type, entity_id) is not None,
        "users": [author_brief(like.user) for like in likes],
    }


# ------------------------------------------------------------------
# 댓글
# ------------------------------------------------------------------

@router.get("/{entity_type}/{entity_id}/comments")
def list_comments(
    entity_type: str,
    entity_id: uuid.UUID,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_identity),
):
    target_type = parse_entity_type(entity_type)
    get_visible_target(db, identity, target_type, entity_id)

    comments = db.scalars(
        select(Comment)
        .options(selectinload(Comment.author))
        .where(Comment.target_type == target_type, Comment.target_id == entity_id)
        .order_by(Comment.created_at.desc())
    ).all()
    return {"success": True, "comments": [comment_out(c) for c in comments]}


@router.post("/{entity_type}/{entity_id}/comments", status_code=status.HTTP_201_CREATED)
def add_comment(
    entity_type: str,
    entity_id: uuid.UUID,
    data: CommentRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_identity),
):
    content = _clean_content(data)
    target_type = parse_entity_type(entity_type)
    target = get_visible_target(db, identity, target_type, entity_id)

    comment = Comment(
        user_id=identity.user_id,
        target_type=target_type,
        target_id=entity_id,
        content=content,
    )
    db.add(comment)
    commit_or_500(db)
    comment_id = comment.id

    _notify_post_author(
        db, background_tasks, identity, target,
        type=NotificationType.COMMENT,
        title="New comment",
        message=content if len(content) <= 100 else content[:100] + "...",
    )

    comment = _get_comment(db, comment_id)
    return {"success": True, "message": "Comment added", "comment": comment_out(comment)}
