"""
그룹 / 그룹 유형 / 멤버 관리 통합 테스트.

"""

import uuid

from sqlalchemy import func, select

from app.models.group import post_groups, user_groups
from app.models.user import Role
from tests.helpers import create_user_in_db, login_as, make_group


def test_group_crud_and_types(client, db_session):
    _, admin_headers = login_as(client, db_session, role=Role.ADMIN, name="ADMIN")

    t = client.post("/api/groups/types", json={"label": "Batch", "description": "batches"}, headers=admin_headers)
    assert t.status_code == 201, t.text
    type_id = t.json()["data"]["id"]

    dup = client.post("/api/groups/types", json={"label": "Batch"}, headers=admin_headers)
    assert dup.status_code == 409

    g = client.post(
        "/api/groups",
        json={"name": "Batch 2020", "groupTypeId": type_id},
        headers=admin_headers,
    )
    assert g.status_code == 201, g.text
    group = g.json()["group"]
    assert group["type"] == "Batch"

    untyped = client.post("/api/groups", json={"name": "Misc"}, headers=admin_headers).json()["group"]
    assert untyped["type"] == "General"

    bad = client.post("/api/groups", json={"name": "x", "groupTypeId": str(uuid.uuid4())}, headers=admin_headers)
    assert bad.status_code == 400

    # 사용 중인 유형은 삭제 불가
    r = client.delete(f"/api/groups/types/{type_id}", headers=admin_headers)
    assert r.status_code == 400

    r = client.patch(f"/api/groups/{group['id']}", json={"name": "Batch of 2020"}, headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["group"]["name"] == "Batch of 2020"

    listed = client.get("/api/groups?all=true&search=2020", headers=admin_headers).json()
    assert [x["id"] for x in listed["data"]] == [group["id"]]
    assert listed["data"][0]["memberCount"] == 0


def test_member_management(client, db_session):
    _, admin_headers = login_as(client, db_session, role=Role.ADMIN, name="ADMIN")
    member, member_headers = login_as(client, db_session, name="멤버")
    extra = create_user_in_db(db_session, name="추가")
    group = make_group(db_session, "Club")

    r = client.post(
        f"/api/groups/{group.id}/members",
        json={"userIds": [str(member.id), str(extra.id)]},
        headers=admin_headers,
    )
    assert r.status_code == 200, r.text
    assert r.json()["added"] == 2

    # 멱등: 이미 소속된 회원은 건너뜀
    r = client.post(f"/api/groups/{group.id}/members", json={"userIds": [str(member.id)]}, headers=admin_headers)
    assert r.json()["added"] == 0

    # 존재하지 않는 회원이 섞이면 아무것도 추가하지 않음
    r = client.post(
        f"/api/groups/{group.id}/members",
        json={"userIds": [str(uuid.uuid4())]},
        headers=admin_headers,
    )
    assert r.status_code == 400

    members = client.get(f"/api/groups/{group.id}/members", headers=admin_headers).json()["members"]
    assert {m["id"] for m in members} == {str(member.id), str(extra.id)}

    mine = client.get("/api/groups", headers=member_headers).json()["data"]
    assert [g["id"] for g in mine] == [str(group.id)]
    assert mine[0]["memberCount"] == 2

    own = client.get(f"/api/users/{member.id}/groups", headers=member_headers)
    assert own.status_code == 200
    other = client.get(f"/api/users/{extra.id}/groups", headers=member_headers)
    assert other.status_code == 403

    r = client.delete(f"/api/groups/{group.id}/members/{extra.id}", headers=admin_headers)
    assert r.status_code == 200
    r = client.delete(f"/api/groups/{group.id}/members/{extra.id}", headers=admin_headers)
    assert r.status_code == 404


def test_member_cannot_manage_groups(client, db_session):
    _, headers = login_as(client, db_session)
    assert client.post("/api/groups", json={"name": "x"}, headers=headers).status_code == 403
    assert client.get("/api/groups/types", headers=headers).status_code == 200


def test_delete_group_removes_links(client, db_session):
    _, admin_headers = login_as(client, db_session, role=Role.ADMIN, name="ADMIN")
    member, member_headers = login_as(client, db_session, name="멤버")
    group = make_group(db_session, "Temp", [member])
    group_id = group.id

    post = client.post(
        "/api/posts", json={"content": "group post", "groupIds": [str(group_id)]}, headers=member_headers
    ).json()["post"]

    r = client.delete(f"/api/groups/{group_id}", headers=admin_headers)
    assert r.status_code == 200, r.text

    db_session.expire_all()
    assert db_session.scalar(select(func.count()).select_from(user_groups)) == 0
    assert db_session.scalar(select(func.count()).select_from(post_groups)) == 0

    # 게시글 자체는 남아 있음
    assert client.get(f"/api/posts/{post['id']}", headers=admin_headers).status_code == 200
    assert client.get(f"/api/groups/{group_id}/members", headers=admin_headers).status_code == 404
