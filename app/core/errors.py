"""
errors.py

애플리케이션 공통 예외(Error) 정의 및 응답 변환 파일.

서비스 계층은 HTTP를 모르는 상태로 이 파일의 예외만 발생시키고,
main.py에 등록된 핸들러가 이를 {"success": false, "message": ...}
형태의 JSON 응답으로 변환한다.

예외 분류:
- ValidationError   (400) : 필수 값 누락 / 형식 오류
- AuthError         (401) : 토큰 누락·만료·위조, 인증 실패
- ForbiddenError    (403) : 권한 부족, 소유자 불일치, 미승인 계정
- NotFoundError     (404) : 대상 없음 (또는 볼 수 없는 대상)
- ConflictError     (409) : 중복 휴대폰 번호 가입 등

설계 원칙:
- 서버 측 재시도 없음
- 예외 종류 = HTTP 상태 코드 (1:1 매핑)

"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class AppError(Exception):
    status_code = 500

    def __init__(self, message: str = "Something went wrong"):
        super().__init__(message)
        self.message = message


class ValidationError(AppError):
    status_code = 400


class AuthError(AppError):
    status_code = 401


class ForbiddenError(AppError):
    status_code = 403


class NotFoundError(AppError):
    status_code = 404


class ConflictError(AppError):
    status_code = 409


# 토큰 검증 실패 (형식 오류 / 만료 / 서명 불일치 모두 동일하게 취급)
class InvalidTokenError(AuthError):
    def __init__(self, message: str = "Invalid or expired token"):
        super().__init__(message)


# OTP 관련 오류는 기존 클라이언트 호환을 위해 400으로 응답
class OtpNotFoundError(ValidationError):
    def __init__(self):
        super().__init__("OTP expired or not found. Please request a new one.")


class TooManyAttemptsError(ValidationError):
    def __init__(self):
        super().__init__("Too many failed attempts. Please request a new OTP.")


class InvalidOtpError(ValidationError):
    def __init__(self):
        super().__init__("Invalid OTP")


def _error_body(message: str) -> dict:
    return {"success": False, "message": message}


"""
예외 핸들러 등록

- AppError            : 정의된 status_code 그대로 사용
- HTTPException       : detail 을 message 로 변환 (라우팅 404 / 405 포함)
- RequestValidationError : 요청 본문/쿼리 검증 실패 → 400

"""

def register_exception_handlers(app: FastAPI) -> None:

    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=_error_body(exc.message))

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        if errors:
            first = errors[0]
            field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
            message = f"{field}: {first.get('msg')}" if field else first.get("msg", "Invalid request")
        else:
            message = "Invalid request"
        return JSONResponse(status_code=400, content=_error_body(message))
