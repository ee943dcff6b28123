"""
services/notifications.py

알림 저장 및 실시간(WebSocket) 전달 서비스.

주요 기능:
- Notification 행 생성 (notify)
- 사용자별 / 그룹별 WebSocket 연결 관리 (NotificationHub)
- 저장된 알림을 응답 이후 실시간 채널로 푸시 (push_to_user / push_to_groups)

설계 원칙:
- 허브는 프로세스 내부 메모리 구조이며 이벤트 루프에서만 변경
  (WebSocket 엔드포인트와 BackgroundTasks 의 async 함수만 접근)
- 한 사용자가 여러 탭/기기에서 접속할 수 있으므로 user_id → 연결 집합
- 전송 실패한 연결은 허브에서 제거하고 나머지 연결에는 계속 전송
- 알림 행의 commit 은 라우터에서 수행

관련 파일:
- app.models.notification   : Notification 모델
- app.routers.realtime      : WebSocket 엔드포인트
- app.routers.notifications : 알림 조회 / 읽음 처리 API

"""

import logging
import uuid
from collections import defaultdict
from typing import Iterable

from fastapi import WebSocket
from sqlalchemy.orm import Session

from app.models.notification import Notification, NotificationType, ReferenceType

logger = logging.getLogger(__name__)


class NotificationHub:

    def __init__(self) -> None:
        self._user_sockets: dict[uuid.UUID, set[WebSocket]] = defaultdict(set)
        self._group_rooms: dict[uuid.UUID, set[WebSocket]] = defaultdict(set)

    def connect(self, user_id: uuid.UUID, websocket: WebSocket) -> None:
        self._user_sockets[user_id].add(websocket)
        logger.info("WebSocket connected: user=%s (connections=%d)", user_id, len(self._user_sockets[user_id]))

    def disconnect(self, user_id: uuid.UUID, websocket: WebSocket) -> None:
        sockets = self._user_sockets.get(user_id)
        if sockets is not None:
            sockets.discard(websocket)
            if not sockets:
                del self._user_sockets[user_id]

        for group_id in [g for g, room in self._group_rooms.items() if websocket in room]:
            self.leave_group(group_id, websocket)
        logger.info("WebSocket disconnected: user=%s", user_id)

    def join_group(self, group_id: uuid.UUID, websocket: WebSocket) -> None:
        self._group_rooms[group_id].add(websocket)

    def leave_group(self, group_id: uuid.UUID, websocket: WebSocket) -> None:
        room = self._group_rooms.get(group_id)
        if room is None:
            return
        room.discard(websocket)
        if not room:
            del self._group_rooms[group_id]

    def is_online(self, user_id: uuid.UUID) -> bool:
        return bool(self._user_sockets.get(user_id))

    def online_count(self) -> int:
        return len(self._user_sockets)

    def group_size(self, group_id: uuid.UUID) -> int:
        return len(self._group_rooms.get(group_id, ()))

    async def _broadcast(self, sockets: Iterable[WebSocket], payload: dict) -> list[WebSocket]:
        dead = []
        for websocket in list(sockets):
            try:
                await websocket.send_json(payload)
            except (RuntimeError, ConnectionError) as e:
                logger.warning("Dropping dead WebSocket: %s", type(e).__name__)
                dead.append(websocket)
        return dead

    async def send_to_user(self, user_id: uuid.UUID, payload: dict) -> None:
        dead = await self._broadcast(self._user_sockets.get(user_id, ()), payload)
        for websocket in dead:
            self.disconnect(user_id, websocket)

    async def send_to_group(self, group_id: uuid.UUID, payload: dict) -> None:
        dead = await self._broadcast(self._group_rooms.get(group_id, ()), payload)
        for websocket in dead:
            self.leave_group(group_id, websocket)


# 프로세스 전역 허브
hub = NotificationHub()


"""
알림 생성 함수

- 세션에 Notification 을 추가하고 flush 하여 id / created_at 을 확정
- 반환된 객체는 commit 이후 notification_out() 으로 직렬화해 푸시

"""

def notify(
    db: Session,
    *,
    user_id: uuid.UUID,
    type: NotificationType,
    title: str,
    message: str,
    reference_type: ReferenceType | None = None,
    reference_id: uuid.UUID | None = None,
) -> Notification:
    notification = Notification(
        user_id=user_id,
        type=type,
        title=title,
        message=message,
        reference_type=reference_type,
        reference_id=reference_id,
        is_read=False,
    )
    db.add(notification)
    db.flush()
    return notification


def notification_out(notification: Notification) -> dict:
    return {
        "id": str(notification.id),
        "type": notification.type.value,
        "title": notification.title,
        "message": notification.message,
        "referenceType": notification.reference_type.value if notification.reference_type else None,
        "referenceId": str(notification.reference_id) if notification.reference_id else None,
        "isRead": notification.is_read,
        "createdAt": notification.created_at.isoformat() if notification.created_at else None,
    }


# BackgroundTasks 에서 호출 (응답 전송 이후 이벤트 루프에서 실행)
async def push_to_user(user_id: uuid.UUID, payload: dict) -> None:
    await hub.send_to_user(user_id, {"event": "notification", "data": payload})


async def push_to_groups(group_ids: Iterable[uuid.UUID], payload: dict) -> None:
    for group_id in group_ids:
        await hub.send_to_group(group_id, {"event": "notification", "data": payload})
