from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.deps import get_db
from app.models.site_setting import SiteSetting

router = APIRouter(prefix="/settings", tags=["settings"])


# 공개 사이트 설정 조회 (로그인 불필요, 없는 키는 value=null)
@router.get("/{key}")
def get_public_setting(key: str, db: Session = Depends(get_db)):
    setting = db.get(SiteSetting, key)
    return {"success": True, "key": key, "value": setting.value if setting else None}
