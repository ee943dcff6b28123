"""
security.py

JWT 토큰 생성/검증 및 OTP 해싱을 담당하는 보안 유틸리티 모음.

이 파일은 인증(auth) 로직에서 사용하는
저수준(low-level) 보안 기능만을 제공하며,
라우터나 비즈니스 로직은 포함하지 않는다.

주요 기능:
- OTP 코드 해싱 및 검증 (pbkdf2_sha256)
- JWT Access / Refresh Token 발급 (issue_tokens)
- 토큰 디코딩 및 검증 (decode_token)

설계 원칙:
- Access Token과 Refresh Token을 명확히 분리 (type 클레임 + 서로 다른 시크릿)
- 토큰에는 {sub: user_id, roles: [...]} 만 담는다
- 검증 실패 사유(형식/만료/서명/타입)는 구분하지 않고 InvalidTokenError 하나로 처리
- 서버 측 토큰 저장소 없음 → 로그아웃/회전은 클라이언트 측 권고 사항

관련 파일:
- app.core.config        : JWT 시크릿 키 및 만료 설정
- app.core.deps          : 토큰을 실제로 검증하는 인증 의존성
- app.routers.auth       : OTP 로그인 / 재발급 API

"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Literal, Sequence

from jose import jwt, JWTError
from passlib.context import CryptContext

from app.core.config import settings
from app.core.errors import InvalidTokenError
from app.models.user import Role


# OTP 코드는 평문 대신 해시로 저장
otp_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

TokenType = Literal["access", "refresh"]


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str
    expires_in: int


@dataclass(frozen=True)
class TokenClaims:
    user_id: uuid.UUID
    roles: tuple[Role, ...]


def hash_otp(code: str) -> str:
    return otp_context.hash(code)


def verify_otp_hash(code: str, hashed: str) -> bool:
    return otp_context.verify(code, hashed)


# 클라이언트에 내려주는 access token 유효 시간(초)
def access_expires_in() -> int:
    return settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60


"""
JWT 토큰 생성 내부 공통 함수

- subject(sub): 사용자 식별자(user_id)
- roles: 사용자 권한 목록
- token_type: access 또는 refresh
- exp: 만료 시각 (UTC timestamp)

"""

def _create_token(*, subject: str, roles: Sequence[Role], token_type: TokenType,
                  expires_delta: timedelta, secret: str) -> str:
    expire = datetime.now(timezone.utc) + expires_delta
    payload = {
        "sub": subject,
        "roles": [Role(r).value for r in roles],
        "type": token_type,
        "exp": int(expire.timestamp()),
    }
    return jwt.encode(payload, secret, algorithm=settings.ALGORITHM)


def _secret_for(token_type: TokenType) -> str:
    return settings.SECRET_KEY if token_type == "access" else settings.REFRESH_SECRET_KEY


"""
토큰 쌍 발급 함수

- 로그인(OTP 검증 성공)과 refresh 호출 때마다 새 토큰 쌍을 발급
- 이전 refresh token 은 서버에서 무효화되지 않음

"""

def issue_tokens(user_id: uuid.UUID, roles: Sequence[Role],
                 access_delta: Optional[timedelta] = None,
                 refresh_delta: Optional[timedelta] = None) -> TokenPair:
    access = _create_token(
        subject=str(user_id),
        roles=roles,
        token_type="access",
        expires_delta=access_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
        secret=_secret_for("access"),
    )
    refresh = _create_token(
        subject=str(user_id),
        roles=roles,
        token_type="refresh",
        expires_delta=refresh_delta or timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
        secret=_secret_for("refresh"),
    )
    return TokenPair(access_token=access, refresh_token=refresh, expires_in=access_expires_in())


"""
토큰 디코딩 및 검증 함수

- 서명 / 만료 / 타입(access|refresh) 확인
- sub(UUID) 와 roles(Role enum) 추출
- 어떤 이유로든 실패하면 InvalidTokenError 발생

"""

def decode_token(token: str, expected_type: TokenType) -> TokenClaims:
    try:
        payload = jwt.decode(token, _secret_for(expected_type), algorithms=[settings.ALGORITHM])
        if payload.get("type") != expected_type:
            raise JWTError(f"Not an {expected_type} token")
        user_id = uuid.UUID(payload["sub"])
        roles = tuple(Role(r) for r in payload.get("roles") or [])
    except (JWTError, KeyError, TypeError, ValueError):
        raise InvalidTokenError()

    if not roles:
        raise InvalidTokenError()
    return TokenClaims(user_id=user_id, roles=roles)
