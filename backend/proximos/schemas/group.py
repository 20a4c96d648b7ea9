"""
Group and membership schemas.
"""
from datetime import datetime
from typing import Literal

from pydantic import BaseModel

from proximos.schemas.common import PageFields


class GroupCreateRequest(BaseModel):
    name: str
    description: str | None = None
    access_type: Literal["open", "closed"] = "closed"
    visibility_type: Literal["public", "private"] = "private"


class GroupResponse(BaseModel):
    id: str
    name: str
    description: str | None = None
    access_type: str
    visibility_type: str
    is_active: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None


class GroupListResponse(PageFields):
    data: list[GroupResponse]


class AddMemberRequest(BaseModel):
    user_id: str
    role: Literal["admin", "member"] = "member"


class MemberResponse(BaseModel):
    user_id: str
    name: str
    email: str
    role: str
    joined_at: datetime | None = None
