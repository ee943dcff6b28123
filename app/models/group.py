"""
group.py

그룹(Group) / 그룹 유형(GroupType) 모델 및 그룹 연결 테이블 정의 파일.

그룹은 조직 계층이 아니라 "누가 무엇을 볼 수 있는가"를 결정하는
가시성(ACL) 범위로만 사용된다.

연결 테이블:
- user_groups  : 회원 ↔ 그룹 (소속)
- post_groups  : 게시글 ↔ 그룹
- event_groups : 행사 ↔ 그룹
- album_groups : 앨범 ↔ 그룹

"""

import uuid
import datetime

from sqlalchemy import Column, DateTime, ForeignKey, String, Table, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base, utcnow


def _link_table(name: str, left: str, left_fk: str) -> Table:
    return Table(
        name,
        Base.metadata,
        Column(left, Uuid, ForeignKey(left_fk, ondelete="CASCADE"), primary_key=True),
        Column("group_id", Uuid, ForeignKey("groups.id", ondelete="CASCADE"), primary_key=True),
        Column("created_at", DateTime(timezone=True), nullable=False, default=utcnow),
    )


user_groups = _link_table("user_groups", "user_id", "users.id")
post_groups = _link_table("post_groups", "post_id", "posts.id")
event_groups = _link_table("event_groups", "event_id", "events.id")
album_groups = _link_table("album_groups", "album_id", "albums.id")


# 그룹 분류 (Batch / Department / Club ...)
class GroupType(Base):
    __tablename__ = "group_types"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    label: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(String(255), nullable=True)

    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)


class Group(Base):
    __tablename__ = "groups"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    group_type_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("group_types.id", ondelete="SET NULL"), nullable=True
    )
    created_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id"), nullable=True)

    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    group_type = relationship("GroupType")
    members = relationship("User", secondary=user_groups, back_populates="groups")
