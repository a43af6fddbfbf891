"""
SQLAlchemy ORM models for the helpdesk store.

Array-valued document fields (tag ids, member ids, reader ids, ...) are kept
in small link tables with a uniform ``value`` column and exposed on the owner
through an association proxy, so ``ConversationModel(tag_ids=["t1"])`` and
``row.tag_ids`` read like document fields. ``array_fields`` maps each such
field to its link relationship for the predicate compiler.
"""
import uuid
from datetime import datetime

from sqlalchemy import String, Text, Integer, Boolean, DateTime, ForeignKey, Index
from sqlalchemy.ext.associationproxy import association_proxy
from sqlalchemy.orm import Mapped, mapped_column, relationship

from helpdesk.db.base import Base, JSONType


def _new_id() -> str:
    return uuid.uuid4().hex[:17]


# ── Brands & Integrations ──────────────────────────────────────────────────────

class BrandModel(Base):
    __tablename__ = "brands"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(256), default="")
    code: Mapped[str] = mapped_column(String(64), default="")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    array_fields = {}

    def __repr__(self) -> str:
        return f"<Brand id={self.id} name={self.name!r}>"


class IntegrationModel(Base):
    """A connected inbound source (messenger, form, facebook page, ...)."""
    __tablename__ = "integrations"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_id)
    kind: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(256), default="")
    brand_id: Mapped[str | None] = mapped_column(
        String(64), ForeignKey("brands.id"), nullable=True, index=True
    )
    # never filtered on, so stored inline
    tag_ids: Mapped[list] = mapped_column(JSONType, default=list)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    array_fields = {}

    def __repr__(self) -> str:
        return f"<Integration id={self.id} kind={self.kind}>"


# ── Channels ───────────────────────────────────────────────────────────────────

class ChannelMemberModel(Base):
    __tablename__ = "channel_members"

    owner_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("channels.id", ondelete="CASCADE"), primary_key=True
    )
    value: Mapped[str] = mapped_column(String(64), primary_key=True, index=True)


class ChannelIntegrationModel(Base):
    __tablename__ = "channel_integrations"

    owner_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("channels.id", ondelete="CASCADE"), primary_key=True
    )
    value: Mapped[str] = mapped_column(String(64), primary_key=True, index=True)


class ChannelModel(Base):
    """Groups integrations and the users that work them."""
    __tablename__ = "channels"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    description: Mapped[str] = mapped_column(Text, default="")
    user_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)

    member_links: Mapped[list[ChannelMemberModel]] = relationship(
        cascade="all, delete-orphan", lazy="selectin"
    )
    integration_links: Mapped[list[ChannelIntegrationModel]] = relationship(
        cascade="all, delete-orphan", lazy="selectin"
    )
    member_ids = association_proxy(
        "member_links", "value", creator=lambda v: ChannelMemberModel(value=v)
    )
    integration_ids = association_proxy(
        "integration_links", "value", creator=lambda v: ChannelIntegrationModel(value=v)
    )

    array_fields = {
        "member_ids": "member_links",
        "integration_ids": "integration_links",
    }

    def __repr__(self) -> str:
        return f"<Channel id={self.id} name={self.name!r}>"


# ── Tags ───────────────────────────────────────────────────────────────────────

class TagModel(Base):
    __tablename__ = "tags"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    type: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    colour: Mapped[str] = mapped_column(String(16), default="")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    array_fields = {}

    def __repr__(self) -> str:
        return f"<Tag id={self.id} type={self.type} name={self.name!r}>"


# ── Conversations ──────────────────────────────────────────────────────────────

class ConversationTagModel(Base):
    __tablename__ = "conversation_tags"

    owner_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("conversations.id", ondelete="CASCADE"), primary_key=True
    )
    value: Mapped[str] = mapped_column(String(64), primary_key=True, index=True)


class ConversationParticipantModel(Base):
    __tablename__ = "conversation_participants"

    owner_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("conversations.id", ondelete="CASCADE"), primary_key=True
    )
    value: Mapped[str] = mapped_column(String(64), primary_key=True, index=True)


class ConversationReaderModel(Base):
    __tablename__ = "conversation_readers"

    owner_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("conversations.id", ondelete="CASCADE"), primary_key=True
    )
    value: Mapped[str] = mapped_column(String(64), primary_key=True, index=True)


class ConversationModel(Base):
    """A customer conversation arriving through one integration."""
    __tablename__ = "conversations"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_id)
    content: Mapped[str] = mapped_column(Text, default="")
    integration_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    customer_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    # set when a staff user (engage message) opened the conversation
    user_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    assigned_user_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    status: Mapped[str] = mapped_column(String(16), default="new", index=True)
    message_count: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    tag_links: Mapped[list[ConversationTagModel]] = relationship(
        cascade="all, delete-orphan", lazy="selectin"
    )
    participant_links: Mapped[list[ConversationParticipantModel]] = relationship(
        cascade="all, delete-orphan", lazy="selectin"
    )
    reader_links: Mapped[list[ConversationReaderModel]] = relationship(
        cascade="all, delete-orphan", lazy="selectin"
    )
    tag_ids = association_proxy(
        "tag_links", "value", creator=lambda v: ConversationTagModel(value=v)
    )
    participated_user_ids = association_proxy(
        "participant_links", "value", creator=lambda v: ConversationParticipantModel(value=v)
    )
    read_user_ids = association_proxy(
        "reader_links", "value", creator=lambda v: ConversationReaderModel(value=v)
    )

    array_fields = {
        "tag_ids": "tag_links",
        "participated_user_ids": "participant_links",
        "read_user_ids": "reader_links",
    }

    __table_args__ = (
        Index("ix_conversations_status_updated", "status", "updated_at"),
    )

    def __repr__(self) -> str:
        return f"<Conversation id={self.id} status={self.status}>"


class ConversationMessageModel(Base):
    __tablename__ = "conversation_messages"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_id)
    conversation_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("conversations.id", ondelete="CASCADE"), nullable=False, index=True
    )
    content: Mapped[str] = mapped_column(Text, default="")
    user_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    customer_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    internal: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    array_fields = {}


# ── Engage Messages ────────────────────────────────────────────────────────────

class EngageMessageTagModel(Base):
    __tablename__ = "engage_message_tags"

    owner_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("engage_messages.id", ondelete="CASCADE"), primary_key=True
    )
    value: Mapped[str] = mapped_column(String(64), primary_key=True, index=True)


class EngageMessageSegmentModel(Base):
    __tablename__ = "engage_message_segments"

    owner_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("engage_messages.id", ondelete="CASCADE"), primary_key=True
    )
    value: Mapped[str] = mapped_column(String(64), primary_key=True, index=True)


class EngageMessageBrandModel(Base):
    __tablename__ = "engage_message_brands"

    owner_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("engage_messages.id", ondelete="CASCADE"), primary_key=True
    )
    value: Mapped[str] = mapped_column(String(64), primary_key=True, index=True)


class EngageMessageModel(Base):
    """Outbound campaign message (manual, auto or visitor auto)."""
    __tablename__ = "engage_messages"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_id)
    kind: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(256), default="")
    method: Mapped[str] = mapped_column(String(32), default="messenger")
    is_live: Mapped[bool] = mapped_column(Boolean, default=False)
    is_draft: Mapped[bool] = mapped_column(Boolean, default=False)
    from_user_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    tag_links: Mapped[list[EngageMessageTagModel]] = relationship(
        cascade="all, delete-orphan", lazy="selectin"
    )
    segment_links: Mapped[list[EngageMessageSegmentModel]] = relationship(
        cascade="all, delete-orphan", lazy="selectin"
    )
    brand_links: Mapped[list[EngageMessageBrandModel]] = relationship(
        cascade="all, delete-orphan", lazy="selectin"
    )
    tag_ids = association_proxy(
        "tag_links", "value", creator=lambda v: EngageMessageTagModel(value=v)
    )
    segment_ids = association_proxy(
        "segment_links", "value", creator=lambda v: EngageMessageSegmentModel(value=v)
    )
    brand_ids = association_proxy(
        "brand_links", "value", creator=lambda v: EngageMessageBrandModel(value=v)
    )

    array_fields = {
        "tag_ids": "tag_links",
        "segment_ids": "segment_links",
        "brand_ids": "brand_links",
    }

    def __repr__(self) -> str:
        return f"<EngageMessage id={self.id} kind={self.kind} title={self.title!r}>"


# ── Companies ──────────────────────────────────────────────────────────────────

class CompanyModel(Base):
    __tablename__ = "companies"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(256), nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(256), default="")
    website: Mapped[str] = mapped_column(String(512), default="")
    size: Mapped[int | None] = mapped_column(Integer, nullable=True)
    industry: Mapped[str] = mapped_column(String(128), default="")
    plan: Mapped[str] = mapped_column(String(64), default="")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    modified_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    array_fields = {}

    def __repr__(self) -> str:
        return f"<Company id={self.id} name={self.name!r}>"


# ── Users ──────────────────────────────────────────────────────────────────────

class UserModel(Base):
    """Staff user. Only read here; managed by the accounts subsystem."""
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_id)
    username: Mapped[str] = mapped_column(String(128), unique=True, nullable=False)
    email: Mapped[str] = mapped_column(String(256), default="")
    roles: Mapped[list] = mapped_column(JSONType, default=list)
    starred_conversation_ids: Mapped[list] = mapped_column(JSONType, default=list)
    scope_brand_ids: Mapped[list] = mapped_column(JSONType, default=list)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    array_fields = {}

    def __repr__(self) -> str:
        return f"<User id={self.id} username={self.username!r}>"
