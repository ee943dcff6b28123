"""
services/visibility.py

게시글 / 행사 / 앨범 가시성(Visibility) 판단 서비스.

"누가 무엇을 볼 수 있는가"에 대한 규칙을 한 곳에서만 정의하고,
상세 조회는 can_view(파이썬 판정), 목록 조회는 *_clause(SQL 조건)를 사용한다.
두 형태는 같은 규칙에서 나온 것이므로 규칙을 바꿀 때는 둘 다 수정한다.

판정 순서:
1) 관리자(VIEW_ALL_CONTENT) → 항상 볼 수 있음
2) 작성자 본인 → 항상 볼 수 있음
3) 게시글 → 승인(APPROVED) 상태이고, 공개(is_public)이거나 내 그룹과 겹칠 때
4) 행사 / 앨범 → 내 그룹과 겹칠 때만 (공개 플래그 없음)

설계 원칙:
- 볼 수 없는 대상은 403 이 아니라 404 로 응답 (존재 여부 비노출)
- 그룹이 하나도 없는 일반 회원은 행사/앨범 목록이 빈 페이지 (오류 아님)
- 목록 피드에는 작성자 본인 예외를 적용하지 않음 (내 글은 ?mine=true)

관련 파일:
- app.core.permissions   : Identity / Capability
- app.routers.posts      : 게시글 피드 / 상세
- app.routers.events     : 행사 목록 / 상세
- app.routers.albums     : 앨범 목록 / 상세
- app.routers.feed       : 행사 피드

"""

import uuid
from dataclasses import dataclass, field
from enum import Enum

from sqlalchemy import and_, exists, false, or_, select, true

from app.core.errors import NotFoundError
from app.core.permissions import Identity
from app.models.event import Album, Event
from app.models.group import album_groups, event_groups, post_groups
from app.models.post import Post
from app.models.user import ApprovalStatus


class ResourceKind(str, Enum):
    POST = "post"
    EVENT = "event"
    ALBUM = "album"


@dataclass(frozen=True)
class Visible:
    kind: ResourceKind
    group_ids: frozenset[uuid.UUID] = field(default_factory=frozenset)
    is_public: bool = False
    status: ApprovalStatus | None = None
    owner_id: uuid.UUID | None = None


def can_view(identity: Identity, resource: Visible) -> bool:
    if identity.is_admin:
        return True
    if resource.owner_id is not None and resource.owner_id == identity.user_id:
        return True

    shares_group = bool(identity.group_ids & resource.group_ids)

    if resource.kind == ResourceKind.POST:
        if resource.status != ApprovalStatus.APPROVED:
            return False
        return resource.is_public or shares_group

    # 행사 / 앨범은 그룹 교집합으로만 판단
    return shares_group


def ensure_visible(identity: Identity, resource: Visible, not_found_message: str) -> None:
    if not can_view(identity, resource):
        raise NotFoundError(not_found_message)


# ORM 객체 → Visible 변환
def post_visible(post: Post) -> Visible:
    return Visible(
        kind=ResourceKind.POST,
        group_ids=frozenset(g.id for g in post.groups),
        is_public=post.is_public,
        status=post.status,
        owner_id=post.author_id,
    )


def event_visible(event: Event) -> Visible:
    return Visible(
        kind=ResourceKind.EVENT,
        group_ids=frozenset(g.id for g in event.groups),
        owner_id=event.created_by,
    )


def album_visible(album: Album) -> Visible:
    return Visible(
        kind=ResourceKind.ALBUM,
        group_ids=frozenset(g.id for g in album.groups),
        owner_id=album.created_by,
    )


"""
목록용 SQL 조건

- 관리자는 true()
- 그룹이 없는 일반 회원: 게시글은 공개 글만, 행사/앨범은 false()
- 라우터는 has_no_groups() 로 행사/앨범 목록을 쿼리 없이 빈 페이지로 처리

"""

def has_no_groups(identity: Identity) -> bool:
    return not identity.is_admin and not identity.group_ids


def post_feed_clause(identity: Identity):
    if identity.is_admin:
        return true()

    approved = Post.status == ApprovalStatus.APPROVED
    if not identity.group_ids:
        return and_(approved, Post.is_public.is_(True))

    in_my_groups = exists(
        select(post_groups.c.post_id).where(
            post_groups.c.post_id == Post.id,
            post_groups.c.group_id.in_(identity.group_ids),
        )
    )
    return and_(approved, or_(Post.is_public.is_(True), in_my_groups))


def event_visibility_clause(identity: Identity):
    if identity.is_admin:
        return true()
    if not identity.group_ids:
        return false()
    return exists(
        select(event_groups.c.event_id).where(
            event_groups.c.event_id == Event.id,
            event_groups.c.group_id.in_(identity.group_ids),
        )
    )


def album_visibility_clause(identity: Identity):
    if identity.is_admin:
        return true()
    if not identity.group_ids:
        return false()
    return exists(
        select(album_groups.c.album_id).where(
            album_groups.c.album_id == Album.id,
            album_groups.c.group_id.in_(identity.group_ids),
        )
    )
