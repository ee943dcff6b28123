"""
posts.py

게시글(Post) API 모음.

모든 게시글은 승인 대기(PENDING)로 생성되고
관리자 검토(승인/거절)를 거쳐 피드에 노출된다.

주요 기능:
- 게시글 목록: 내 글(?mine=true) / 관리자 검토 목록(?status, ?all) / 기본 피드
- 게시글 상세 (볼 수 없으면 404)
- 게시글 작성 (그룹 미지정 시 기본 공개)
- 게시글 승인/거절 (관리자, 승인 시 그룹 재지정)
- 게시글 삭제 (작성자 또는 관리자, 상태 무관)

설계 원칙:
- 피드 필터는 services.visibility 의 post_feed_clause 만 사용
- 그룹 재지정은 relationship 컬렉션 교체 + commit 한 번 (중간 상태 없음)
- 목록의 좋아요/댓글 수는 GROUP BY 일괄 집계

관련 파일:
- app.services.visibility   : 가시성 판단
- app.services.interactions : 좋아요/댓글 집계
- app.services.notifications: 작성자 알림
- app.schemas.post          : 요청 모델 / 응답 직렬화

"""

import json
import uuid
from datetime import datetime, timezone

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, status
from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from app.core.deps import get_db, get_identity, get_moderator, commit_or_500
from app.core.permissions import Identity
from app.models.admin_log import AdminAction
from app.models.interaction import TargetType
from app.models.notification import NotificationType, ReferenceType
from app.models.post import Post, PostMedia
from app.models.user import ApprovalStatus
from app.schemas.post import PostCreateRequest, PostStatusRequest, post_out
from app.services.admin_log import write_admin_log
from app.services.groups import resolve_groups
from app.services.interactions import purge_targets, stats_for
from app.services.notifications import notification_out, notify, push_to_groups, push_to_user
from app.services.pagination import PageParams, get_page_params, paginated
from app.services.visibility import ensure_visible, post_feed_clause, post_visible

router = APIRouter(prefix="/posts", tags=["posts"])

_POST_LOAD = (selectinload(Post.author), selectinload(Post.media), selectinload(Post.groups))


def _parse_statuses(raw: str | None) -> list[ApprovalStatus] | None:
    if not raw or raw == "all":
        return None
    try:
        return [ApprovalStatus(s.strip()) for s in raw.split(",") if s.strip()]
    except ValueError:
        raise HTTPException(status_code=400, detail="Valid status is required (approved, rejected, pending)")


def _page_of_posts(db: Session, identity: Identity, page: PageParams, *conditions) -> dict:
    total = db.scalar(select(func.count()).select_from(Post).where(*conditions)) or 0
    posts = db.scalars(
        select(Post)
        .options(*_POST_LOAD)
        .where(*conditions)
        .order_by(Post.created_at.desc(), Post.id)
        .offset(page.offset)
        .limit(page.limit)
    ).all()

    stats = stats_for(db, identity.user_id, TargetType.POST, [p.id for p in posts])
    return paginated([post_out(p, stats.get(p.id)) for p in posts], total, page)


def _get_post(db: Session, post_id: uuid.UUID) -> Post:
    post = db.scalar(select(Post).options(*_POST_LOAD).where(Post.id == post_id))
    if not post:
        raise HTTPException(status_code=404, detail="Post not found")
    return post


# dict / list 형태의 에디터 문서는 JSON 문자열로 저장
def _content_to_text(content) -> str:
    if content is None:
        return ""
    if isinstance(content, str):
        return content
    return json.dumps(content, ensure_ascii=False)


"""
게시글 목록 API

- ?mine=true        : 내가 쓴 글 (모든 상태)
- 관리자 ?status=... / ?all=true : 검토용 전체 목록
- 그 외              : 가시성 필터가 적용된 피드 (승인된 공개 글 + 내 그룹 글)

"""

@router.get("")
def list_posts(
    mine: bool = Query(False),
    status_filter: str | None = Query(None, alias="status"),
    show_all: bool = Query(False, alias="all"),
    page: PageParams = Depends(get_page_params),
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_identity),
):
    if mine:
        return _page_of_posts(db, identity, page, Post.author_id == identity.user_id)

    if identity.is_admin and (status_filter or show_all):
        statuses = _parse_statuses(status_filter)
        conditions = [Post.status.in_(statuses)] if statuses else []
        return _page_of_posts(db, identity, page, *conditions)

    return _page_of_posts(db, identity, page, post_feed_clause(identity))


@router.get("/{post_id}")
def get_post(
    post_id: uuid.UUID,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_identity),
):
    post = _get_post(db, post_id)
    ensure_visible(identity, post_visible(post), "Post not found")

    stats = stats_for(db, identity.user_id, TargetType.POST, [post.id])
    return {"success": True, "data": post_out(post, stats[post.id])}


"""
게시글 작성 API

- isPublic 미지정 시: groupIds 가 없으면 공개, 있으면 비공개
- 존재하지 않는 groupId 가 있으면 400
- 항상 PENDING 으로 생성

"""

@router.post("", status_code=status.HTTP_201_CREATED)
def create_post(
    data: PostCreateRequest,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_identity),
):
    content = _content_to_text(data.content)
    if not content.strip():
        raise HTTPException(status_code=400, detail="Post content is required")

    groups = resolve_groups(db, data.group_ids)
    is_public = data.is_public if data.is_public is not None else not data.group_ids

    post = Post(
        title=data.title or None,
        content=content,
        author_id=identity.user_id,
        status=ApprovalStatus.PENDING,
        is_public=is_public,
    )
    post.groups = groups
    post.media = [
        PostMedia(media_url=m.media_url, media_type=m.media_type, display_order=i)
        for i, m in enumerate(data.media)
    ]
    db.add(post)
    commit_or_500(db)

    post = _get_post(db, post.id)
    return {"success": True, "message": "Post submitted for approval", "post": post_out(post)}


"""
게시글 승인 / 거절 API (관리자)

- 검토자 / 검토 시각 기록, 거절 사유 저장
- 승인 + groupIds → 기존 그룹 연결을 새 목록으로 교체 (한 트랜잭션)
- 작성자에게 알림 저장 후 응답 이후 실시간 푸시

"""

@router.patch("/{post_id}/status")
def update_post_status(
    post_id: uuid.UUID,
    data: PostStatusRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_moderator),
):
    post = _get_post(db, post_id)
    before = post.status

    post.status = data.status
    post.reviewed_by = identity.user_id
    post.reviewed_at = datetime.now(timezone.utc)
    if data.status == ApprovalStatus.REJECTED:
        post.rejection_reason = data.reason
    elif data.status == ApprovalStatus.APPROVED:
        post.rejection_reason = None

    if data.status == ApprovalStatus.APPROVED and data.group_ids is not None:
        post.groups = resolve_groups(db, data.group_ids)

    write_admin_log(
        db,
        actor_id=identity.user_id,
        action=AdminAction.REVIEW_POST,
        target_user_id=post.author_id,
        target_post_id=post.id,
        before=before,
        after=data.status,
    )

    notification = None
    title = post.title or "your post"
    if data.status == ApprovalStatus.APPROVED:
        notification = notify(
            db,
            user_id=post.author_id,
            type=NotificationType.POST_APPROVED,
            title="Post approved",
            message=f'Your post "{title}" has been approved and published.',
            reference_type=ReferenceType.POST,
            reference_id=post.id,
        )
    elif data.status == ApprovalStatus.REJECTED:
        reason = f" Reason: {data.reason}" if data.reason else ""
        notification = notify(
            db,
            user_id=post.author_id,
            type=NotificationType.POST_REJECTED,
            title="Post rejected",
            message=f'Your post "{title}" was not approved.{reason}',
            reference_type=ReferenceType.POST,
            reference_id=post.id,
        )

    commit_or_500(db)

    if notification is not None:
        background_tasks.add_task(push_to_user, post.author_id, notification_out(notification))
    if data.status == ApprovalStatus.APPROVED and not post.is_public:
        background_tasks.add_task(
            push_to_groups,
            [g.id for g in post.groups],
            {"type": NotificationType.NEW_POST.value, "title": "New post", "referenceId": str(post.id)},
        )

    messages = {
        ApprovalStatus.APPROVED: "Post approved",
        ApprovalStatus.REJECTED: "Post rejected",
        ApprovalStatus.PENDING: "Post status updated",
    }
    return {"success": True, "message": messages[data.status]}


# 작성자 또는 관리자만 삭제 가능 (상태 무관)
@router.delete("/{post_id}")
def delete_post(
    post_id: uuid.UUID,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_identity),
):
    post = _get_post(db, post_id)
    if not identity.is_admin and post.author_id != identity.user_id:
        raise HTTPException(status_code=403, detail="You can only delete your own posts")

    purge_targets(db, TargetType.POST, [post.id])
    db.delete(post)
    commit_or_500(db)
    return {"success": True, "message": "Post deleted"}
