"""

admin_log.py

관리자(Admin) 행위 기록(Audit Log) 모델 정의 파일.

이 파일은 관리자에 의해 수행된 주요 관리 행위
(회원 승인/거절, 정보·권한 변경, 삭제, 게시글 검토 등)를
DB에 영구적으로 기록하기 위한 로그 테이블을 정의한다.

설계 원칙:
- 실제 데이터 변경과 같은 트랜잭션에서 기록 (둘 다 반영되거나 둘 다 취소)
- 로그 데이터는 수정/삭제하지 않는 것을 전제로 설계
- actor(행위자)와 target(대상)을 명확히 구분

"""

import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, utcnow
from app.models.user import enum_column



#  관리자 행위 유형 Enum

class AdminAction(str, Enum):
    CREATE_USER = "CREATE_USER"
    SET_STATUS = "SET_STATUS"
    UPDATE_USER = "UPDATE_USER"
    SET_ROLE = "SET_ROLE"
    DELETE_USER = "DELETE_USER"
    REVIEW_POST = "REVIEW_POST"


"""
관리자 행위 로그 모델

- actor_id       : 행위를 수행한 관리자 ID
- target_user_id : 행위 대상 사용자 ID (없을 수 있음)
- target_post_id : 행위 대상 게시글 ID (게시글 검토 시)
- action         : 수행된 관리자 행위 유형
- before_value   : 변경 전 값 (status / role)
- after_value    : 변경 후 값
- created_at     : 행위 발생 시각 (UTC)

"""

class AdminActionLog(Base):
    __tablename__ = "admin_action_logs"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    actor_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False)
    target_user_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id"), nullable=True)
    target_post_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)

    action: Mapped[AdminAction] = mapped_column(enum_column(AdminAction, "admin_action"), nullable=False)

    before_value: Mapped[str | None] = mapped_column(String(20), nullable=True)
    after_value: Mapped[str | None] = mapped_column(String(20), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
