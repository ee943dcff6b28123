from app.schemas.common import CamelModel


# 휴대폰 번호 형식 검증(10자 이상)은 services.otp 에서 수행
class MobileRequest(CamelModel):
    mobile_number: str | None = None

class VerifyOtpRequest(CamelModel):
    mobile_number: str | None = None
    otp: str | None = None

class RefreshRequest(CamelModel):
    refresh_token: str | None = None
