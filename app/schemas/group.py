import uuid

from pydantic import Field

from app.schemas.common import CamelModel


class GroupCreateRequest(CamelModel):
    name: str = Field(min_length=1, max_length=100)
    description: str | None = None
    group_type_id: uuid.UUID | None = None

class GroupUpdateRequest(CamelModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = None
    group_type_id: uuid.UUID | None = None

class MembersAddRequest(CamelModel):
    user_ids: list[uuid.UUID]

class GroupTypeCreateRequest(CamelModel):
    label: str = Field(min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=255)

class GroupTypeUpdateRequest(CamelModel):
    label: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=255)
