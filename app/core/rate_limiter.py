"""
rate_limiter.py

요청 제한(Rate Limiting) 설정 파일.

slowapi Limiter 하나를 애플리케이션 전역에서 공유하며,
main.py 에서 미들웨어와 429 응답 핸들러를 등록한다.

주요 기능:
- API 전체 기본 제한 (클라이언트 IP 기준)
- OTP 요청 제한 (휴대폰 번호 기준, 번호가 없으면 IP 기준)
- OTP 검증 제한 (IP 기준)
- 제한 초과 시 {"success": false, "message": ...} 형태의 429 응답

설계 원칙:
- 제한 값은 settings 의 RATE_LIMIT_* 로만 관리
- 데코레이터가 붙은 라우트는 기본 제한 대신 자신의 제한만 적용
- 기본 저장소는 프로세스 메모리 (다중 인스턴스는 RATE_LIMIT_STORAGE_URI 로 redis 지정)

관련 파일:
- app.main               : 미들웨어 / 핸들러 등록
- app.routers.auth       : OTP 요청 / 검증 제한
- app.core.config        : 제한 정책 값

"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from app.core.config import settings

logger = logging.getLogger(__name__)

DEFAULT_MESSAGE = "Too many requests, please try again later"
OTP_MESSAGE = "Too many OTP requests, please try again in 15 minutes"
AUTH_MESSAGE = "Too many authentication attempts"

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.RATE_LIMIT_API],
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    strategy="fixed-window",
    enabled=settings.RATE_LIMIT_ENABLED,
)


"""
OTP 요청 제한 키

- 요청 본문 의존성(remember_mobile_number)이 request.state 에 남긴 번호 사용
- 번호가 없으면 IP 로 대체

"""

def mobile_number_key(request: Request) -> str:
    mobile_number = getattr(request.state, "rate_limit_mobile", None)
    if mobile_number:
        return f"mobile:{mobile_number}"
    return f"ip:{get_remote_address(request)}"


def remember_mobile_number(request: Request, mobile_number: str | None) -> None:
    if isinstance(mobile_number, str) and mobile_number.strip():
        request.state.rate_limit_mobile = mobile_number.strip()


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    message = exc.detail if exc.limit.error_message else DEFAULT_MESSAGE
    logger.warning("Rate limit exceeded on %s %s (%s)", request.method, request.url.path, exc.limit.limit)
    return JSONResponse(status_code=429, content={"success": False, "message": message})
