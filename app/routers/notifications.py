"""
notifications.py

내 알림 조회 / 읽음 처리 / 삭제 API.
본인 알림만 다루며, 남의 알림 ID 는 존재하지 않는 것과 같게 404 처리한다.

"""

import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from app.core.deps import get_db, get_identity, commit_or_500
from app.core.permissions import Identity
from app.models.notification import Notification
from app.services.notifications import notification_out
from app.services.pagination import PageParams, get_page_params, paginated

router = APIRouter(prefix="/notifications", tags=["notifications"])


def _get_own(db: Session, identity: Identity, notification_id: uuid.UUID) -> Notification:
    notification = db.get(Notification, notification_id)
    if not notification or notification.user_id != identity.user_id:
        raise HTTPException(status_code=404, detail="Notification not found")
    return notification


@router.get("")
def list_notifications(
    page: PageParams = Depends(get_page_params),
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_identity),
):
    mine = Notification.user_id == identity.user_id
    total = db.scalar(select(func.count()).select_from(Notification).where(mine)) or 0
    rows = db.scalars(
        select(Notification)
        .where(mine)
        .order_by(Notification.created_at.desc(), Notification.id)
        .offset(page.offset)
        .limit(page.limit)
    ).all()
    return paginated([notification_out(n) for n in rows], total, page)


@router.get("/unread-count")
def unread_count(
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_identity),
):
    count = db.scalar(
        select(func.count())
        .select_from(Notification)
        .where(Notification.user_id == identity.user_id, Notification.is_read.is_(False))
    ) or 0
    return {"success": True, "count": count}


@router.patch("/read-all")
def mark_all_read(
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_identity),
):
    result = db.execute(
        update(Notification)
        .where(Notification.user_id == identity.user_id, Notification.is_read.is_(False))
        .values(is_read=True)
    )
    commit_or_500(db)
    return {"success": True, "message": "All notifications marked as read", "updated": result.rowcount}


@router.patch("/{notification_id}/read")
def mark_read(
    notification_id: uuid.UUID,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_identity),
):
    notification = _get_own(db, identity, notification_id)
    notification.is_read = True
    commit_or_500(db)
    db.refresh(notification)
    return {"success": True, "message": "Notification marked as read", "notification": notification_out(notification)}


@router.delete("/{notification_id}")
def delete_notification(
    notification_id: uuid.UUID,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_identity),
):
    notification = _get_own(db, identity, notification_id)
    db.delete(notification)
    commit_or_500(db)
    return {"success": True, "message": "Notification deleted"}
