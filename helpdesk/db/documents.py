"""
Pydantic documents returned by the store. These are the read-side shape of
each entity; the ORM rows never leave a session.
"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field


class Brand(BaseModel):
    id: str
    name: str = ""
    code: str = ""
    created_at: Optional[datetime] = None


class Integration(BaseModel):
    id: str
    kind: str
    name: str = ""
    brand_id: Optional[str] = None
    tag_ids: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None


class Channel(BaseModel):
    id: str
    name: str
    description: str = ""
    user_id: Optional[str] = None
    member_ids: List[str] = Field(default_factory=list)
    integration_ids: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None


class Tag(BaseModel):
    id: str
    name: str
    type: str
    colour: str = ""
    created_at: Optional[datetime] = None


class Conversation(BaseModel):
    id: str
    content: str = ""
    integration_id: str
    customer_id: Optional[str] = None
    user_id: Optional[str] = None
    assigned_user_id: Optional[str] = None
    status: str
    message_count: int = 0
    tag_ids: List[str] = Field(default_factory=list)
    participated_user_ids: List[str] = Field(default_factory=list)
    read_user_ids: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ConversationMessage(BaseModel):
    id: str
    conversation_id: str
    content: str = ""
    user_id: Optional[str] = None
    customer_id: Optional[str] = None
    internal: bool = False
    created_at: Optional[datetime] = None


class EngageMessage(BaseModel):
    id: str
    kind: str
    title: str = ""
    method: str = "messenger"
    is_live: bool = False
    is_draft: bool = False
    from_user_id: Optional[str] = None
    tag_ids: List[str] = Field(default_factory=list)
    segment_ids: List[str] = Field(default_factory=list)
    brand_ids: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None


class Company(BaseModel):
    id: str
    name: str
    email: str = ""
    website: str = ""
    size: Optional[int] = None
    industry: str = ""
    plan: str = ""
    created_at: Optional[datetime] = None
    modified_at: Optional[datetime] = None


class User(BaseModel):
    id: str
    username: str
    email: str = ""
    roles: List[str] = Field(default_factory=list)
    starred_conversation_ids: List[str] = Field(default_factory=list)
    scope_brand_ids: List[str] = Field(default_factory=list)
    is_active: bool = True
