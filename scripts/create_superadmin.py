"""

SUPER_ADMIN 초기 계정 생성 스크립트.

- 서버 최초 세팅 시 단 한 번 실행하는 용도
- .env에 정의된 SUPERADMIN_* 환경 변수를 읽어
  SUPER_ADMIN 계정을 생성한다. (승인 완료 상태)
- 이미 SUPER_ADMIN 계정이 존재하면 생성하지 않고 종료한다.

사용 목적:
- 회원 승인/권한 관리 API에 접근할 수 있는
  최상위 관리자 계정을 안전하게 초기화하기 위함
- 비밀번호가 없으므로 생성 후 해당 휴대폰 번호로 OTP 로그인

사용 방법
- 가상환경 접속
- (.venv) ~\backend~$ python -m scripts.create_superadmin

"""

import os
from dotenv import load_dotenv
load_dotenv()

from sqlalchemy import select
from app.db.session import SessionLocal
from app.models.user import User, Role, ApprovalStatus
from app.services.otp import normalize_mobile



def main():
    db = SessionLocal()
    try:
        exists = db.scalar(
            select(User).where(User.role == Role.SUPER_ADMIN, User.is_deleted.is_(False))
        )
        if exists:
            print("✅ SUPER_ADMIN already exists. Skip creation.")
            return

        mobile_number = normalize_mobile(os.environ["SUPERADMIN_MOBILE"])
        name = os.environ.get("SUPERADMIN_NAME", "Super Admin")
        email = os.environ.get("SUPERADMIN_EMAIL")

        mobile_exists = db.scalar(
            select(User).where(User.mobile_number == mobile_number)
        )
        if mobile_exists:
            raise RuntimeError("Mobile number already exists but is not SUPER_ADMIN")

        user = User(
            name=name,
            mobile_number=mobile_number,
            email=email,
            role=Role.SUPER_ADMIN,
            status=ApprovalStatus.APPROVED,
            created_by_admin=True,
        )

        db.add(user)
        db.commit()

        print(f"🚀 SUPER_ADMIN created: {mobile_number}")

    finally:
        db.close()


if __name__ == "__main__":
    main()
