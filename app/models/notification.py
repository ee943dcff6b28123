"""
notification.py

회원 알림(Notification) 모델 정의 파일.

게시글 승인/거절, 내 게시글에 달린 댓글/좋아요 등
회원에게 전달되는 알림을 저장한다.
저장과 동시에 실시간 채널(WebSocket)로도 전달된다. (app.services.notifications)

"""

import uuid
import datetime
from enum import Enum

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, utcnow
from app.models.user import enum_column


class NotificationType(str, Enum):
    POST_APPROVED = "post_approved"
    POST_REJECTED = "post_rejected"
    NEW_POST = "new_post"
    COMMENT = "comment"
    LIKE = "like"


class ReferenceType(str, Enum):
    POST = "post"
    COMMENT = "comment"
    ALBUM = "album"


class Notification(Base):
    __tablename__ = "notifications"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    type: Mapped[NotificationType] = mapped_column(enum_column(NotificationType, "notification_type"), nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)

    reference_type: Mapped[ReferenceType | None] = mapped_column(
        enum_column(ReferenceType, "reference_type"), nullable=True
    )
    reference_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)

    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)

    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
