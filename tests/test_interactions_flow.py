"""
좋아요 / 댓글 통합 테스트.
- 좋아요 멱등성(201 → 200), 취소, 좋아요 회원 목록
- 댓글 작성 / 수정(작성자만) / 삭제(작성자 또는 관리자)
- 볼 수 없는 대상은 404, 잘못된 타입은 400
- 남의 게시글에 반응하면 작성자에게 알림

"""

import uuid

from sqlalchemy import select

from app.models.notification import Notification
from app.models.user import Role
from tests.helpers import login_as, make_group


def _approved_post(client, author_headers, admin_headers, **body):
    body.setdefault("content", "hello")
    post = client.post("/api/posts", json=body, headers=author_headers).json()["post"]
    r = client.patch(f"/api/posts/{post['id']}/status", json={"status": "approved"}, headers=admin_headers)
    assert r.status_code == 200, r.text
    return post


def test_like_is_idempotent(client, db_session):
    _, author_headers = login_as(client, db_session, name="작성자")
    liker, liker_headers = login_as(client, db_session, name="독자")
    _, admin_headers = login_as(client, db_session, role=Role.ADMIN, name="ADMIN")
    post = _approved_post(client, author_headers, admin_headers)
    url = f"/api/posts/{post['id']}/like"

    first = client.post(url, headers=liker_headers)
    assert first.status_code == 201
    assert first.json() == {"success": True, "message": "Liked successfully", "liked": True, "likesCount": 1}

    again = client.post(url, headers=liker_headers)
    assert again.status_code == 200
    assert again.json()["message"] == "Already liked"
    assert again.json()["likesCount"] == 1

    likes = client.get(f"/api/posts/{post['id']}/likes", headers=author_headers).json()
    assert likes["likesCount"] == 1
    assert likes["liked"] is False
    assert [u["id"] for u in likes["users"]] == [str(liker.id)]

    removed = client.delete(url, headers=liker_headers)
    assert removed.json()["message"] == "Like removed"
    assert removed.json()["likesCount"] == 0

    not_liked = client.delete(url, headers=liker_headers)
    assert not_liked.status_code == 200
    assert not_liked.json()["message"] == "Not liked"


def test_like_notifies_post_author_once(client, db_session):
    author, author_headers = login_as(client, db_session, name="작성자")
    _, liker_headers = login_as(client, db_session, name="독자")
    _, admin_headers = login_as(client, db_session, role=Role.ADMIN, name="ADMIN")
    post = _approved_post(client, author_headers, admin_headers)

    client.post(f"/api/posts/{post['id']}/like", headers=liker_headers)
    client.post(f"/api/posts/{post['id']}/like", headers=liker_headers)
    # 본인 게시글 좋아요는 알림 없음
    client.post(f"/api/posts/{post['id']}/like", headers=author_headers)

    db_session.expire_all()
    notes = db_session.scalars(select(Notification).where(Notification.user_id == author.id)).all()
    likes = [n for n in notes if n.type.value == "like"]
    assert len(likes) == 1
    assert likes[0].reference_id == uuid.UUID(post["id"])


def test_comment_lifecycle(client, db_session):
    author, author_headers = login_as(client, db_session, name="작성자")
    _, other_headers = login_as(client, db_session, name="다른회원")
    _, admin_headers = login_as(client, db_session, role=Role.ADMIN, name="ADMIN")
    post = _approved_post(client, author_headers, admin_headers)
    url = f"/api/posts/{post['id']}/comments"

    empty = client.post(url, json={"content": "   "}, headers=other_headers)
    assert empty.status_code == 400
    assert empty.json()["message"] == "Comment content is required"

    r = client.post(url, json={"content": "  nice post  "}, headers=other_headers)
    assert r.status_code == 201, r.text
    comment = r.json()["comment"]
    assert comment["content"] == "nice post"

    listed = client.get(url, headers=author_headers).json()["comments"]
    assert [c["id"] for c in listed] == [comment["id"]]

    # 수정은 작성자만 (관리자도 불가)
    r = client.patch(f"/api/comments/{comment['id']}", json={"content": "edited"}, headers=admin_headers)
    assert r.status_code == 403
    r = client.patch(f"/api/comments/{comment['id']}", json={"content": "edited"}, headers=other_headers)
    assert r.status_code == 200
    assert r.json()["comment"]["content"] == "edited"

    # 삭제는 작성자 또는 관리자
    r = client.delete(f"/api/comments/{comment['id']}", headers=author_headers)
    assert r.status_code == 403
    r = client.delete(f"/api/comments/{comment['id']}", headers=admin_headers)
    assert r.status_code == 200
    r = client.delete(f"/api/comments/{comment['id']}", headers=admin_headers)
    assert r.status_code == 404

    notes = client.get("/api/notifications", headers=author_headers).json()["data"]
    assert "comment" in [n["type"] for n in notes]


def test_invalid_entity_type(client, db_session):
    _, headers = login_as(client, db_session)
    r = client.post(f"/api/widgets/{uuid.uuid4()}/like", headers=headers)
    assert r.status_code == 400
    assert r.json()["message"] == "Invalid entity type"


def test_invisible_targets_are_not_found(client, db_session):
    member, member_headers = login_as(client, db_session, name="멤버")
    _, outsider_headers = login_as(client, db_session, name="외부인")
    _, admin_headers = login_as(client, db_session, role=Role.ADMIN, name="ADMIN")
    group = make_group(db_session, "Private", [member])

    post = _approved_post(client, member_headers, admin_headers, groupIds=[str(group.id)])
    event = client.post(
        "/api/events", json={"name": "Closed", "date": "2026-04-01", "groupIds": [str(group.id)]},
        headers=admin_headers,
    ).json()["event"]

    for url in (
        f"/api/posts/{post['id']}/like",
        f"/api/events/{event['id']}/like",
        f"/api/posts/{uuid.uuid4()}/like",
    ):
        r = client.post(url, headers=outsider_headers)
        assert r.status_code == 404, url
        assert r.json()["message"] == "Entity not found"

    r = client.get(f"/api/posts/{post['id']}/comments", headers=outsider_headers)
    assert r.status_code == 404

    assert client.post(f"/api/events/{event['id']}/like", headers=member_headers).status_code == 201


def test_pending_post_cannot_be_liked_by_others(client, db_session):
    _, author_headers = login_as(client, db_session, name="작성자")
    _, other_headers = login_as(client, db_session, name="독자")
    post = client.post("/api/posts", json={"content": "draft"}, headers=author_headers).json()["post"]

    assert client.post(f"/api/posts/{post['id']}/like", headers=other_headers).status_code == 404
    assert client.post(f"/api/posts/{post['id']}/like", headers=author_headers).status_code == 201
