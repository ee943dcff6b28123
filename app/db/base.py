"""
base.py

SQLAlchemy ORM Base 정의 파일.

모든 모델(User, Group, Post, Event, Album, Like, Comment 등)은
이 Base를 기준으로 테이블 메타데이터가 관리되며,
Alembic 마이그레이션과 테스트용 스키마 생성(create_all) 또한
이 Base.metadata 를 기준으로 동작한다.

관련 파일:
- app.models.*            : 모든 ORM 모델 (app.models 패키지 import 시 전부 등록)
- alembic/env.py          : 마이그레이션 메타데이터 로드

"""

from datetime import datetime, timezone

from sqlalchemy.orm import declarative_base

# 모든 ORM 모델이 상속받는 Base 클래스
Base = declarative_base()


# created_at / updated_at 기본값 (항상 UTC)
def utcnow() -> datetime:
    return datetime.now(timezone.utc)
