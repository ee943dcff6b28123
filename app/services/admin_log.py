"""
services/admin_log.py

관리자 행위 로그 기록 / 조회 서비스.

이 파일은 관리자(Admin)가 수행한 주요 행위
(회원 생성·승인·거절·수정·권한 변경·삭제, 게시글 검토)를
AdminActionLog 테이블에 기록하는 역할을 담당한다.

라우터에서 실제 변경과 같은 세션에 로그를 추가하고
한 번의 commit 으로 함께 반영한다.

설계 원칙:
- 로그 데이터는 수정/삭제하지 않는 것을 전제로 설계
- 변경 전/후 값은 문자열(Enum value)로 저장

"""

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.admin_log import AdminActionLog, AdminAction

logger = logging.getLogger(__name__)

MAX_LOG_LIMIT = 200


def _as_text(value) -> str | None:
    if value is None:
        return None
    return getattr(value, "value", str(value))


"""
관리자 행위 로그 기록 함수

- actor_id       : 행위를 수행한 관리자 ID
- action         : 수행된 관리자 행위 유형
- target_user_id : 행위 대상 사용자 ID (선택)
- target_post_id : 행위 대상 게시글 ID (선택)
- before / after : 변경 전후 값 (status, role 등)

NOTE:
- db.commit()은 호출 측(라우터)에서 수행

"""
def write_admin_log(
    db: Session,
    *,
    actor_id,
    action: AdminAction,
    target_user_id=None,
    target_post_id=None,
    before=None,
    after=None,
) -> AdminActionLog:
    log = AdminActionLog(
        actor_id=actor_id,
        action=action,
        target_user_id=target_user_id,
        target_post_id=target_post_id,
        before_value=_as_text(before),
        after_value=_as_text(after),
    )
    db.add(log)
    logger.info(
        "admin %s: %s target_user=%s target_post=%s (%s -> %s)",
        actor_id, action.value, target_user_id, target_post_id, log.before_value, log.after_value,
    )
    return log


def list_admin_logs(db: Session, limit: int = 50) -> list[AdminActionLog]:
    limit = min(MAX_LOG_LIMIT, max(1, limit))
    return list(db.scalars(
        select(AdminActionLog)
        .order_by(AdminActionLog.created_at.desc(), AdminActionLog.id)
        .limit(limit)
    ).all())


def admin_log_out(log: AdminActionLog) -> dict:
    return {
        "id": str(log.id),
        "actorId": str(log.actor_id),
        "targetUserId": str(log.target_user_id) if log.target_user_id else None,
        "targetPostId": str(log.target_post_id) if log.target_post_id else None,
        "action": log.action.value,
        "beforeValue": log.before_value,
        "afterValue": log.after_value,
        "createdAt": log.created_at,
    }
