"""

기본 데이터 시드 스크립트.

- 기본 그룹 유형(Batch, Department, Club, Course, Event) 생성
- 기본 사이트 설정 값 생성
- 이미 있는 항목은 건너뛰므로 여러 번 실행해도 안전

사용 방법
- (.venv) ~\backend~$ python -m scripts.seed_defaults

"""

from dotenv import load_dotenv
load_dotenv()

from sqlalchemy import select
from app.core.config import settings
from app.db.session import SessionLocal
from app.models.group import GroupType
from app.models.site_setting import SiteSetting


DEFAULT_GROUP_TYPES = [
    ("Batch", "Academic batch groups (e.g., 2024 Batch)"),
    ("Department", "Department-wise groups"),
    ("Club", "Clubs and societies"),
    ("Course", "Course-specific groups"),
    ("Event", "Event-specific groups"),
]

DEFAULT_SETTINGS = {
    "site_name": settings.APP_NAME,
    "welcome_message": f"Welcome to {settings.APP_NAME}!",
}


def main():
    db = SessionLocal()
    try:
        existing = set(db.scalars(select(GroupType.label)).all())
        created_types = 0
        for label, description in DEFAULT_GROUP_TYPES:
            if label not in existing:
                db.add(GroupType(label=label, description=description))
                created_types += 1

        created_settings = 0
        for key, value in DEFAULT_SETTINGS.items():
            if db.get(SiteSetting, key) is None:
                db.add(SiteSetting(key=key, value=value))
                created_settings += 1

        db.commit()
        print(f"✅ Seeded {created_types} group types, {created_settings} site settings")

    finally:
        db.close()


if __name__ == "__main__":
    main()
