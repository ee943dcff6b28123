from pydantic import EmailStr, Field, field_validator

from app.models.user import User, Role, ApprovalStatus
from app.schemas.common import CamelModel


# 길이 검증 전에 휴대폰 번호 앞뒤 공백 제거
class MobileNumberModel(CamelModel):
    mobile_number: str = Field(min_length=10, max_length=15)

    @field_validator("mobile_number", mode="before")
    @classmethod
    def strip_mobile_number(cls, value):
        return value.strip() if isinstance(value, str) else value


class SignupRequest(MobileNumberModel):
    name: str = Field(min_length=1, max_length=100)
    email: EmailStr | None = None

class UpdateMeRequest(CamelModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    email: EmailStr | None = None
    profile_picture_url: str | None = Field(default=None, max_length=500)

# 관리자 생성 계정은 바로 승인 상태
class AdminCreateUserRequest(MobileNumberModel):
    name: str = Field(min_length=1, max_length=100)
    email: EmailStr | None = None
    role: Role = Role.USER

class AdminUpdateUserRequest(CamelModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    email: EmailStr | None = None
    role: Role | None = None
    status: ApprovalStatus | None = None

class StatusUpdateRequest(CamelModel):
    status: ApprovalStatus
    reason: str | None = None

class SettingUpdateRequest(CamelModel):
    value: str


# 🔹 유저 응답용 (필요한 필드만)
def user_out(user: User) -> dict:
    return {
        "id": str(user.id),
        "name": user.name,
        "mobileNumber": user.mobile_number,
        "email": user.email,
        "profilePictureUrl": user.profile_picture_url,
        "status": user.status.value,
        "firstLoginComplete": user.first_login_complete,
        "role": user.role.value,
        "createdAt": user.created_at,
    }
