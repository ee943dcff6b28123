# tests/helpers.py
import uuid
from sqlalchemy.orm import Session
from sqlalchemy import select

from app.models.group import Group
from app.models.user import User, Role, ApprovalStatus


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def random_mobile() -> str:
    return "9" + str(uuid.uuid4().int)[:9]


def create_user_in_db(
    db: Session,
    *,
    name: str = "테스트유저",
    mobile_number: str | None = None,
    role: Role = Role.USER,
    status: ApprovalStatus = ApprovalStatus.APPROVED,
) -> User:
    user = User(
        name=name,
        mobile_number=mobile_number or random_mobile(),
        role=role,
        status=status,
        is_deleted=False,
        deleted_at=None,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def login_via_otp(client, mobile_number: str) -> dict:
    """
    개발 환경에서 응답에 포함된 OTP 로 로그인 → verify-otp 응답 본문 반환
    """
    r = client.post("/api/auth/request-otp", json={"mobileNumber": mobile_number})
    assert r.status_code == 200, r.text
    otp = r.json()["otp"]

    r = client.post("/api/auth/verify-otp", json={"mobileNumber": mobile_number, "otp": otp})
    assert r.status_code == 200, r.text
    return r.json()


def login_as(client, db: Session, *, role: Role = Role.USER, name: str = "테스트유저") -> tuple[User, dict]:
    """
    승인된 사용자 생성 + 로그인 → (User, Authorization 헤더)
    """
    user = create_user_in_db(db, name=name, role=role)
    body = login_via_otp(client, user.mobile_number)
    return user, auth_header(body["accessToken"])


def make_group(db: Session, name: str, members: list[User] = ()) -> Group:
    group = Group(name=name)
    group.members = list(members)
    db.add(group)
    db.commit()
    db.refresh(group)
    return group


def get_user(db: Session, user_id: str) -> User:
    db.expire_all()
    return db.scalar(select(User).where(User.id == uuid.UUID(user_id)))
