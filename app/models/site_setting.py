"""
site_setting.py

사이트 설정(SiteSetting) 키-값 모델.

홈 화면 문구, 공지 배너 등 프론트엔드가 읽어 가는 단순 설정 값을 저장한다.
조회는 공개, 수정은 관리자 전용.

"""

import datetime

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, utcnow


class SiteSetting(Base):
    __tablename__ = "site_settings"

    key: Mapped[str] = mapped_column(String(100), primary_key=True)
    value: Mapped[str | None] = mapped_column(Text, nullable=True)

    updated_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )
