"""
Filter predicate library — one dimension value in, one predicate out.

The synchronous filters are pure. The asynchronous ones resolve a relation
through the store first (channel → integrations, brand → integrations,
kind → integrations) and return an ``integration_id`` membership predicate.
Whenever a lookup finds nothing the result is ``MATCH_NONE``, never an
unrestricted predicate.
"""
import logging
from typing import Iterable, Optional

from helpdesk.queries.constants import ConversationStatus, IntegrationKind, TagType
from helpdesk.queries.predicates import (
    MATCH_NONE, FieldEquals, FieldExists, FieldGreaterThan, FieldNotEquals,
    FieldRange, Predicate, and_, field_in, or_,
)

logger = logging.getLogger(__name__)


# ── Pure filters ──────────────────────────────────────────────────

def tag_filter(tag_id: str) -> Predicate:
    return FieldEquals(field="tag_ids", value=tag_id)


def status_filter(statuses: Iterable[str]) -> Predicate:
    """Restrict to the given statuses; values outside the closed set are dropped."""
    statuses = list(statuses)
    valid = [s for s in statuses if ConversationStatus.is_valid(s)]
    if len(valid) != len(statuses):
        logger.debug(f"Ignoring unknown conversation statuses: {set(statuses) - set(valid)}")
    return field_in("status", [ConversationStatus(s).value for s in valid])


def unassigned_filter() -> Predicate:
    return FieldEquals(field="assigned_user_id", value=None)


def participating_filter(user_id: str) -> Predicate:
    return FieldEquals(field="participated_user_ids", value=user_id)


def starred_filter(starred_conversation_ids: Iterable[str]) -> Predicate:
    return field_in("id", starred_conversation_ids)


def unread_filter(user_id: str) -> Predicate:
    return FieldNotEquals(field="read_user_ids", value=user_id)


def customer_replied_filter() -> Predicate:
    """Excludes engage-initiated conversations the customer never answered."""
    return or_(
        and_(FieldExists(field="user_id", exists=True), FieldGreaterThan(field="message_count", value=1)),
        FieldExists(field="user_id", exists=False),
    )


def date_filter(start_date, end_date) -> Predicate:
    return FieldRange(field="created_at", gte=start_date, lte=end_date)


def integration_ids_filter(integration_ids: Iterable[str]) -> Predicate:
    return field_in("integration_id", integration_ids)


# ── Filters that need a lookup ────────────────────────────────────

async def channel_filter(store, channel_id: str) -> Predicate:
    channel = await store.channels.find_one(FieldEquals(field="id", value=channel_id))
    if channel is None:
        logger.debug(f"Channel {channel_id} not found")
        return MATCH_NONE
    return integration_ids_filter(channel.integration_ids)


async def brand_filter(store, brand_id: str) -> Predicate:
    ids = await store.integrations.find_ids(FieldEquals(field="brand_id", value=brand_id))
    return integration_ids_filter(ids)


async def integration_type_filter(store, kind: str) -> Predicate:
    if not IntegrationKind.is_valid(kind):
        logger.debug(f"Unknown integration kind '{kind}'")
        return MATCH_NONE
    ids = await store.integrations.find_ids(FieldEquals(field="kind", value=kind))
    return integration_ids_filter(ids)


async def conversation_tag_filter(store, tag_id: str) -> Predicate:
    """Tag filter limited to conversation tags; other tag types match nothing."""
    tag = await store.tags.find_one(
        and_(FieldEquals(field="id", value=tag_id), FieldEquals(field="type", value=TagType.CONVERSATION.value))
    )
    if tag is None:
        return MATCH_NONE
    return tag_filter(tag.id)


async def member_integrations_filter(store, user_id: Optional[str]) -> Predicate:
    """Integrations reachable through every channel the user is a member of."""
    if not user_id:
        return MATCH_NONE
    channels = await store.channels.find(FieldEquals(field="member_ids", value=user_id)).to_list()
    integration_ids = [i for channel in channels for i in channel.integration_ids]
    return integration_ids_filter(integration_ids)
