"""
realtime.py

실시간 알림 WebSocket 엔드포인트.

접속: /api/ws?token=<access token>

주요 기능:
- access 토큰 검증 후 사용자 채널 등록 (실패 시 4401 로 종료)
- 클라이언트 메시지로 그룹 채널 참여 / 탈퇴
  {"action": "join:group" | "leave:group", "groupId": "<uuid>"}
- 연결 종료 시 허브에서 모든 채널 정리

설계 원칙:
- 허브는 이벤트 루프에서만 변경되므로 이 엔드포인트는 async
- 그룹 채널은 소속 회원(또는 관리자)만 참여 가능
- DB 세션은 인증 시에만 잠깐 열고 닫음

관련 파일:
- app.services.notifications : NotificationHub / push 함수

"""

import logging
import uuid

from fastapi import APIRouter, HTTPException, Query, WebSocket, WebSocketDisconnect
from fastapi.concurrency import run_in_threadpool

from app.core.deps import resolve_identity
from app.core.permissions import Identity
from app.db.session import SessionLocal
from app.services.notifications import hub

logger = logging.getLogger(__name__)

router = APIRouter(tags=["realtime"])

WS_UNAUTHORIZED = 4401


def _authenticate(token: str | None) -> Identity | None:
    if not token:
        return None
    db = SessionLocal()
    try:
        _, identity = resolve_identity(db, token)
        return identity
    except HTTPException:
        return None
    finally:
        db.close()


def _parse_group_id(raw) -> uuid.UUID | None:
    try:
        return uuid.UUID(str(raw))
    except ValueError:
        return None


async def _handle_message(websocket: WebSocket, identity: Identity, message) -> None:
    if not isinstance(message, dict):
        await websocket.send_json({"event": "error", "message": "Invalid message"})
        return

    action = message.get("action")
    group_id = _parse_group_id(message.get("groupId"))
    if action not in ("join:group", "leave:group") or group_id is None:
        await websocket.send_json({"event": "error", "message": "Invalid message"})
        return

    if action == "leave:group":
        hub.leave_group(group_id, websocket)
        await websocket.send_json({"event": "left", "groupId": str(group_id)})
        return

    if not identity.is_admin and group_id not in identity.group_ids:
        await websocket.send_json({"event": "error", "message": "Not a member of this group"})
        return

    hub.join_group(group_id, websocket)
    logger.info("User %s joined group room %s", identity.user_id, group_id)
    await websocket.send_json({"event": "joined", "groupId": str(group_id)})


@router.websocket("/ws")
async def notifications_socket(websocket: WebSocket, token: str | None = Query(None)):
    # 동기 DB 조회는 이벤트 루프 밖에서 실행
    identity = await run_in_threadpool(_authenticate, token)
    if identity is None:
        await websocket.close(code=WS_UNAUTHORIZED)
        return

    await websocket.accept()
    hub.connect(identity.user_id, websocket)
    try:
        while True:
            try:
                message = await websocket.receive_json()
            except ValueError:
                await websocket.send_json({"event": "error", "message": "Invalid message"})
                continue
            await _handle_message(websocket, identity, message)
    except WebSocketDisconnect:
        pass
    finally:
        hub.disconnect(identity.user_id, websocket)
