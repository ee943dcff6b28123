"""
services/groups.py

그룹 조회 / 검증 / 삭제 서비스.

게시글·행사·앨범의 groupIds 를 실제 Group 행으로 바꾸고,
그룹 삭제 시 네 개의 연결 테이블을 같은 트랜잭션에서 정리한다.

설계 원칙:
- 존재하지 않는 groupId 가 하나라도 있으면 ValidationError (부분 반영 없음)
- 연결 교체는 relationship 컬렉션 대입으로 처리 → 라우터의 commit 한 번에 반영
- commit 은 라우터에서 수행

"""

import uuid
from typing import Iterable

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from app.core.errors import ValidationError
from app.models.group import Group, album_groups, event_groups, post_groups, user_groups


def resolve_groups(db: Session, group_ids: Iterable[uuid.UUID] | None) -> list[Group]:
    wanted = list(dict.fromkeys(group_ids or []))
    if not wanted:
        return []

    found = {g.id: g for g in db.scalars(select(Group).where(Group.id.in_(wanted))).all()}
    missing = [str(gid) for gid in wanted if gid not in found]
    if missing:
        raise ValidationError(f"Unknown group id(s): {', '.join(missing)}")
    return [found[gid] for gid in wanted]


def get_group(db: Session, group_id: uuid.UUID) -> Group | None:
    return db.get(Group, group_id)


# 그룹 삭제: 회원/게시글/행사/앨범 연결을 먼저 지운 뒤 그룹 삭제
def delete_group(db: Session, group: Group) -> None:
    for table in (user_groups, post_groups, event_groups, album_groups):
        db.execute(delete(table).where(table.c.group_id == group.id))
    # 이미 로드된 members 컬렉션이 있으면 flush 시 중복 DELETE 가 나가므로 만료
    db.expire(group, ["members"])
    db.delete(group)


def group_brief(group: Group) -> dict:
    return {"id": str(group.id), "name": group.name}


def group_out(group: Group) -> dict:
    return {
        "id": str(group.id),
        "name": group.name,
        "description": group.description,
        "groupTypeId": str(group.group_type_id) if group.group_type_id else None,
        "type": group.group_type.label if group.group_type else "General",
        "createdAt": group.created_at,
    }
