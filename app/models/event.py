"""
event.py

행사(Event), 앨범(Album), 앨범 미디어(AlbumMedia) 모델 정의 파일.

행사/앨범에는 공개 플래그가 없다.
관리자가 아닌 회원은 event_groups / album_groups 로 연결된
그룹에 소속된 경우에만 볼 수 있다.

행사 삭제 시 소속 앨범 → 앨범 미디어 → 그룹 연결이 한 트랜잭션에서 함께 삭제된다.

"""

import uuid
import datetime

from sqlalchemy import Date, DateTime, ForeignKey, Integer, String, Text, Time, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base, utcnow
from app.models.post import MediaType
from app.models.user import enum_column


class Event(Base):
    __tablename__ = "events"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    date: Mapped[datetime.date] = mapped_column(Date, nullable=False, index=True)
    end_date: Mapped[datetime.date | None] = mapped_column(Date, nullable=True)
    start_time: Mapped[datetime.time | None] = mapped_column(Time, nullable=True)
    end_time: Mapped[datetime.time | None] = mapped_column(Time, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_by: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    creator = relationship("User")
    groups = relationship("Group", secondary="event_groups")
    albums = relationship(
        "Album", back_populates="event", cascade="all, delete-orphan", order_by="Album.created_at.desc()"
    )


class Album(Base):
    __tablename__ = "albums"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    event_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True
    )

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_by: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    event = relationship("Event", back_populates="albums")
    creator = relationship("User")
    groups = relationship("Group", secondary="album_groups")
    media = relationship(
        "AlbumMedia", back_populates="album", cascade="all, delete-orphan", order_by="AlbumMedia.display_order"
    )


class AlbumMedia(Base):
    __tablename__ = "album_media"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    album_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("albums.id", ondelete="CASCADE"), nullable=False, index=True
    )

    media_url: Mapped[str] = mapped_column(String(500), nullable=False)
    media_type: Mapped[MediaType] = mapped_column(enum_column(MediaType, "media_type"), nullable=False)
    caption: Mapped[str | None] = mapped_column(Text, nullable=True)
    display_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    album = relationship("Album", back_populates="media")
