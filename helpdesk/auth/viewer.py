"""The identity a request is evaluated for."""

from typing import List
from pydantic import BaseModel, Field

from helpdesk.db.documents import User


class Viewer(BaseModel):
    id: str
    roles: List[str] = Field(default_factory=list)
    starred_conversation_ids: List[str] = Field(default_factory=list)
    # brands a scoped user is limited to; empty means unrestricted
    scope_brand_ids: List[str] = Field(default_factory=list)

    @classmethod
    def from_user(cls, user: User) -> "Viewer":
        return cls(
            id=user.id,
            roles=user.roles,
            starred_conversation_ids=user.starred_conversation_ids,
            scope_brand_ids=user.scope_brand_ids,
        )
