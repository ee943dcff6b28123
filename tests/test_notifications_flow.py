"""
알림 API / 실시간 WebSocket 테스트.

"""

import pytest
from starlette.websockets import WebSocketDisconnect

from app.models.notification import NotificationType
from app.models.user import Role
from app.services.notifications import notify
from tests.helpers import login_as, make_group


def _seed(db, user, count: int):
    for i in range(count):
        notify(db, user_id=user.id, type=NotificationType.NEW_POST, title=f"title {i}", message=f"message {i}")
    db.commit()


def test_list_and_unread_count(client, db_session):
    user, headers = login_as(client, db_session)
    _seed(db_session, user, 3)

    body = client.get("/api/notifications?limit=2", headers=headers).json()
    assert body["pagination"]["total"] == 3
    assert len(body["data"]) == 2
    assert body["data"][0]["isRead"] is False

    assert client.get("/api/notifications/unread-count", headers=headers).json()["count"] == 3


def test_mark_read_and_delete(client, db_session):
    user, headers = login_as(client, db_session)
    _seed(db_session, user, 3)
    first, second, _ = client.get("/api/notifications", headers=headers).json()["data"]

    r = client.patch(f"/api/notifications/{first['id']}/read", headers=headers)
    assert r.status_code == 200
    assert r.json()["notification"]["isRead"] is True
    assert client.get("/api/notifications/unread-count", headers=headers).json()["count"] == 2

    r = client.delete(f"/api/notifications/{second['id']}", headers=headers)
    assert r.status_code == 200
    assert client.get("/api/notifications", headers=headers).json()["pagination"]["total"] == 2

    r = client.patch("/api/notifications/read-all", headers=headers)
    assert r.json()["updated"] == 1
    assert client.get("/api/notifications/unread-count", headers=headers).json()["count"] == 0


def test_cannot_touch_other_users_notification(client, db_session):
    owner, owner_headers = login_as(client, db_session, name="주인")
    _, other_headers = login_as(client, db_session, name="남")
    _seed(db_session, owner, 1)
    note = client.get("/api/notifications", headers=owner_headers).json()["data"][0]

    r = client.patch(f"/api/notifications/{note['id']}/read", headers=other_headers)
    assert r.status_code == 404
    assert r.json()["message"] == "Notification not found"
    assert client.delete(f"/api/notifications/{note['id']}", headers=other_headers).status_code == 404


def test_websocket_rejects_bad_token(client):
    with pytest.raises(WebSocketDisconnect) as exc:
        with client.websocket_connect("/api/ws?token=not-a-token"):
            pass
    assert exc.value.code == 4401


def test_websocket_group_rooms(client, db_session):
    member, member_headers = login_as(client, db_session, name="멤버")
    group = make_group(db_session, "Room", [member])
    other = make_group(db_session, "Elsewhere")
    token = member_headers["Authorization"].split()[1]

    with client.websocket_connect(f"/api/ws?token={token}") as ws:
        ws.send_json({"action": "join:group", "groupId": str(other.id)})
        assert ws.receive_json() == {"event": "error", "message": "Not a member of this group"}

        ws.send_json({"action": "join:group", "groupId": str(group.id)})
        assert ws.receive_json() == {"event": "joined", "groupId": str(group.id)}

        ws.send_json({"action": "dance"})
        assert ws.receive_json()["event"] == "error"

        ws.send_json({"action": "leave:group", "groupId": str(group.id)})
        assert ws.receive_json() == {"event": "left", "groupId": str(group.id)}


def test_websocket_receives_like_notification(client, db_session):
    author, author_headers = login_as(client, db_session, name="작성자")
    _, liker_headers = login_as(client, db_session, name="독자")
    _, admin_headers = login_as(client, db_session, role=Role.ADMIN, name="ADMIN")
    group = make_group(db_session, "Friends", [author])
    token = author_headers["Authorization"].split()[1]

    post = client.post("/api/posts", json={"content": "hi"}, headers=author_headers).json()["post"]
    client.patch(f"/api/posts/{post['id']}/status", json={"status": "approved"}, headers=admin_headers)

    with client.websocket_connect(f"/api/ws?token={token}") as ws:
        # 응답을 받으면 허브 등록이 끝난 상태
        ws.send_json({"action": "join:group", "groupId": str(group.id)})
        assert ws.receive_json()["event"] == "joined"

        assert client.post(f"/api/posts/{post['id']}/like", headers=liker_headers).status_code == 201

        pushed = ws.receive_json()
        assert pushed["event"] == "notification"
        assert pushed["data"]["type"] == "like"
        assert pushed["data"]["referenceId"] == post["id"]
