"""
auth.py

인증(Authentication) API 모음.

이 파일은 휴대폰 OTP 로그인, 토큰 재발급, 로그아웃과 같이
사용자 인증 흐름 전반을 담당한다.
JWT 기반 인증 방식을 사용하며, Access Token + Refresh Token 구조를 따른다.

주요 기능:
- 계정 상태 확인 (OTP 발송 전)
- OTP 요청 / 검증 및 토큰 발급
- Refresh Token 기반 토큰 쌍 재발급
- 로그아웃 (클라이언트 측 토큰 삭제 안내)

설계 원칙:
- Access Token은 Authorization Header로 전달
- Refresh Token은 요청 본문(refreshToken)으로 전달
- 서버 측 토큰 저장소가 없으므로 로그아웃 / 회전은 권고 사항
- 개발 환경에서만 OTP 를 응답에 포함

관련 파일:
- app.services.otp         : OTP 발급 / 검증
- app.core.security        : JWT 생성·검증
- app.models.user          : User / Role 모델
- app.schemas.auth         : 인증 관련 요청
- app.core.rate_limiter    : OTP 요청 / 검증 횟수 제한

"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session
from sqlalchemy import select

from app.core.config import settings
from app.core.deps import get_db
from app.core.errors import InvalidTokenError, ValidationError
from app.core.rate_limiter import AUTH_MESSAGE, OTP_MESSAGE, limiter, mobile_number_key, remember_mobile_number
from app.core.security import issue_tokens, decode_token
from app.models.user import User, ApprovalStatus
from app.schemas.auth import MobileRequest, VerifyOtpRequest, RefreshRequest
from app.schemas.user import user_out
from app.services import otp as otp_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

STATUS_MESSAGES = {
    ApprovalStatus.APPROVED: "Account is approved",
    ApprovalStatus.PENDING: "Your account is pending approval",
    ApprovalStatus.REJECTED: "Your account has been rejected",
}


"""
계정 상태 확인 API

- OTP 를 보내기 전에 가입 여부와 승인 상태를 알려줌
- 미가입 번호는 exists=false (오류 아님)

"""

@router.post("/check-status")
def check_status(data: MobileRequest, db: Session = Depends(get_db)):
    mobile_number = otp_service.normalize_mobile(data.mobile_number)

    user = otp_service.find_user_by_mobile(db, mobile_number)
    if not user:
        return {
            "success": True,
            "exists": False,
            "status": None,
            "message": "Account not found. Please sign up first.",
        }

    return {
        "success": True,
        "exists": True,
        "status": user.status.value,
        "message": STATUS_MESSAGES[user.status],
    }


"""
OTP 요청 API

- 승인 대기 / 거절 계정은 403 (OTP 생성 전 차단)
- 기존 OTP 는 모두 삭제되고 새 OTP 1건만 유효
- 같은 번호로 15분에 RATE_LIMIT_OTP 회를 넘으면 429

"""

# 제한 키를 만들 수 있도록 본문의 번호를 request.state 에 기록
def otp_request_body(request: Request, data: MobileRequest) -> MobileRequest:
    remember_mobile_number(request, data.mobile_number)
    return data


@router.post("/request-otp")
@limiter.limit(settings.RATE_LIMIT_OTP, key_func=mobile_number_key, error_message=OTP_MESSAGE)
def request_otp(request: Request, data: MobileRequest = Depends(otp_request_body), db: Session = Depends(get_db)):
    issue = otp_service.request_otp(db, data.mobile_number)

    body = {"success": True, "message": "OTP sent successfully"}
    if settings.is_dev:
        body["otp"] = issue.code
    return body


"""
OTP 검증 API

- OTP 일치 시 행 삭제 후 사용자 상태 재확인
- 성공 시 토큰 쌍 발급
- IP 당 15분에 RATE_LIMIT_AUTH 회를 넘으면 429

"""

@router.post("/verify-otp")
@limiter.limit(settings.RATE_LIMIT_AUTH, error_message=AUTH_MESSAGE)
def verify_otp(request: Request, data: VerifyOtpRequest, db: Session = Depends(get_db)):
    user = otp_service.verify_otp(db, data.mobile_number, data.otp)

    tokens = issue_tokens(user.id, [user.role])
    logger.info("User %s logged in", user.id)
    return {
        "success": True,
        "user": user_out(user),
        "accessToken": tokens.access_token,
        "refreshToken": tokens.refresh_token,
        "expiresIn": tokens.expires_in,
    }


"""
토큰 재발급 API

- refresh 토큰 검증 실패 / 사용자 없음 / 미승인 → 401, 새 토큰 없음
- 매 호출마다 새 refresh 토큰을 발급 (이전 토큰은 서버에서 무효화되지 않음)
- 권한은 토큰이 아닌 현재 DB 값을 기준으로 다시 담음

"""

@router.post("/refresh-token")
def refresh_token(data: RefreshRequest, db: Session = Depends(get_db)):
    if not data.refresh_token:
        raise ValidationError("Refresh token is required")

    try:
        claims = decode_token(data.refresh_token, "refresh")
    except InvalidTokenError:
        logger.warning("Rejected refresh token")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired refresh token")

    user = db.scalar(select(User).where(User.id == claims.user_id, User.is_deleted.is_(False)))
    if not user or user.status != ApprovalStatus.APPROVED:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found or not approved")

    tokens = issue_tokens(user.id, [user.role])
    return {
        "success": True,
        "accessToken": tokens.access_token,
        "refreshToken": tokens.refresh_token,
        "expiresIn": tokens.expires_in,
    }


"""
로그아웃 API

- 서버 측 상태 변경 없음 (클라이언트가 토큰 삭제)
- 만료된 access 토큰으로도 호출할 수 있도록 인증을 요구하지 않음

"""

@router.post("/logout")
def logout():
    return {"success": True, "message": "Logged out successfully"}
