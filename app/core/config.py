"""
config.py

애플리케이션 전역 설정(Configuration) 관리 파일.

이 파일은 .env 환경 변수들을 Pydantic BaseSettings를 통해 로드하여
애플리케이션 전반에서 공통으로 사용하는 설정 값을 제공한다.

주요 설정 항목:
- 데이터베이스 연결 정보
- JWT 인증 관련 시크릿 및 만료 정책
- OTP 길이 / 만료 시간 / 최대 시도 횟수
- CORS 허용 도메인 목록
- 로그 레벨
- 요청 제한(rate limit) 정책

설계 원칙:
- 모든 환경 변수는 이 파일을 통해서만 접근
- 로컬 / 테스트 / 운영 환경을 .env로 분리하여 관리
- OTP 만료 시간과 시도 횟수는 코드에 하드코딩하지 않고 설정으로만 관리

관련 파일:
- app.main               : CORS / 로깅 초기화 시 설정 사용
- app.core.security      : JWT 시크릿 / 만료 설정 사용
- app.services.otp       : OTP 정책 값 사용
- app.db.session         : DATABASE_URL 사용
- app.core.rate_limiter  : 요청 제한 정책 사용

"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List

# .env 파일에 정의된 환경 변수를 로드하는 설정 클래스
# extra="ignore" 옵션으로 정의되지 않은 환경 변수는 무시
class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    DATABASE_URL: str
    TEST_DATABASE_URL: str | None = None

    # development 가 아니면 OTP를 응답에 노출하지 않음
    ENVIRONMENT: str = "development"
    APP_NAME: str = "Alumni Portal"

    SECRET_KEY: str
    REFRESH_SECRET_KEY: str
    ALGORITHM: str = "HS256"

    ACCESS_TOKEN_EXPIRE_MINUTES: int = 15
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7

    OTP_LENGTH: int = 4
    OTP_EXPIRE_MINUTES: int = 5
    OTP_MAX_ATTEMPTS: int = 3

    # CORS 허용 도메인 (프론트엔드 주소)
    CORS_ORIGINS: List[str] = ["http://localhost:5173", "http://127.0.0.1:5173"]

    LOG_LEVEL: str = "INFO"

    # 요청 제한 (slowapi / limits 표기법)
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_STORAGE_URI: str = "memory://"
    RATE_LIMIT_API: str = "1000 per 15 minutes"
    RATE_LIMIT_OTP: str = "10 per 15 minutes"
    RATE_LIMIT_AUTH: str = "20 per 15 minutes"

    @property
    def is_dev(self) -> bool:
        return self.ENVIRONMENT != "production"

# 애플리케이션 전역에서 import하여 사용하는 Settings 인스턴스
# 실행 시 한 번만 생성됨
settings = Settings()
