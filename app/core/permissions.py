"""
permissions.py

권한(Role) → 가능 행위(Capability) 매핑 및 요청 주체(Identity) 정의 파일.

권한 문자열을 직접 비교하지 않고,
닫힌 Enum(Role)과 Capability 조회 테이블로 권한을 판단한다.
새로운 Role 이 추가되면 ROLE_CAPABILITIES 에만 등록하면 된다.

관련 파일:
- app.core.deps          : require_capability 의존성
- app.services.visibility: 관리자 여부(VIEW_ALL_CONTENT) 판단

"""

import uuid
from dataclasses import dataclass, field
from enum import Enum

from app.models.user import Role


class Capability(str, Enum):
    VIEW_ALL_CONTENT = "view_all_content"
    MODERATE_POSTS = "moderate_posts"
    MANAGE_USERS = "manage_users"
    MANAGE_GROUPS = "manage_groups"
    MANAGE_EVENTS = "manage_events"


_ADMIN_CAPABILITIES = frozenset(Capability)

ROLE_CAPABILITIES: dict[Role, frozenset[Capability]] = {
    Role.USER: frozenset(),
    Role.ADMIN: _ADMIN_CAPABILITIES,
    Role.SUPER_ADMIN: _ADMIN_CAPABILITIES,
}


"""
요청 주체(Identity)

- user_id   : 토큰의 sub
- roles     : 토큰에 담긴 권한 목록
- group_ids : 요청 시점의 그룹 소속 (DB 조회 결과)

"""

@dataclass(frozen=True)
class Identity:
    user_id: uuid.UUID
    roles: tuple[Role, ...]
    group_ids: frozenset[uuid.UUID] = field(default_factory=frozenset)

    def can(self, capability: Capability) -> bool:
        return any(capability in ROLE_CAPABILITIES[r] for r in self.roles)

    @property
    def is_admin(self) -> bool:
        return self.can(Capability.VIEW_ALL_CONTENT)
