from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.deps import get_db, get_user_manager
from app.core.permissions import Identity
from app.services.admin_log import list_admin_logs, admin_log_out


router = APIRouter(prefix="/admin", tags=["admin"])

# 관리자 행위 로그 조회 (최신순, limit 은 1~200 으로 보정)
@router.get("/logs")
def get_admin_logs(
    limit: int = Query(50),
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_user_manager),
):
    logs = list_admin_logs(db, limit)
    return {"success": True, "data": [admin_log_out(log) for log in logs]}
