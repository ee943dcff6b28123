"""
post.py

게시글(Post) 및 게시글 미디어(PostMedia) 모델 정의 파일.

모든 게시글은 PENDING 으로 생성되어 관리자 검토를 거친다.
is_public=True 인 게시글은 그룹과 무관하게 승인 후 모든 회원에게 노출되고,
그렇지 않으면 post_groups 로 연결된 그룹 소속 회원에게만 노출된다.

"""

import uuid
import datetime
from enum import Enum

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base, utcnow
from app.models.user import ApprovalStatus, enum_column


class MediaType(str, Enum):
    IMAGE = "image"
    VIDEO = "video"


class Post(Base):
    __tablename__ = "posts"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    title: Mapped[str | None] = mapped_column(String(255), nullable=True)
    # 에디터 JSON 문서 또는 일반 문자열을 그대로 저장
    content: Mapped[str] = mapped_column(Text, nullable=False)

    author_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False, index=True)

    status: Mapped[ApprovalStatus] = mapped_column(
        enum_column(ApprovalStatus, "approval_status"), nullable=False, default=ApprovalStatus.PENDING, index=True
    )
    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    reviewed_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id"), nullable=True)
    reviewed_at: Mapped[datetime.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    author = relationship("User", foreign_keys=[author_id])
    groups = relationship("Group", secondary="post_groups")
    media = relationship(
        "PostMedia", cascade="all, delete-orphan", order_by="PostMedia.display_order"
    )


class PostMedia(Base):
    __tablename__ = "post_media"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    post_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False)

    media_url: Mapped[str] = mapped_column(String(500), nullable=False)
    media_type: Mapped[MediaType] = mapped_column(enum_column(MediaType, "media_type"), nullable=False)
    display_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
