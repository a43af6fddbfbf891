"""
Conversation resolvers — listing, detail, messages and counts.
"""
from typing import List, Optional

from helpdesk.auth.viewer import Viewer
from helpdesk.config.settings import settings
from helpdesk.db.documents import Conversation, ConversationMessage
from helpdesk.db.store import Store
from helpdesk.queries import filters
from helpdesk.queries.aggregation import ConversationCounts, conversation_counts as aggregate_counts
from helpdesk.queries.constants import ACTIVE_CONVERSATION_STATUSES, SortDirection
from helpdesk.queries.conversation_query_builder import ConversationListArgs, ConversationQueryBuilder
from helpdesk.queries.predicates import FieldEquals, and_, field_in


async def _built_query_builder(store: Store, params: Optional[ConversationListArgs], viewer: Viewer):
    qb = ConversationQueryBuilder(store, params, viewer)
    await qb.build_all_queries()
    return qb


async def conversations(store: Store, params: ConversationListArgs, viewer: Viewer) -> List[Conversation]:
    """Conversations list. Explicit ids bypass every other filter."""
    if params.ids:
        return await (
            store.conversations.find(field_in("id", params.ids))
            .sort("created_at", SortDirection.DESC)
            .to_list()
        )

    qb = await _built_query_builder(store, params, viewer)
    return await (
        store.conversations.find(qb.main_query())
        .sort("updated_at", SortDirection.DESC)
        .limit(params.limit or 0)
        .to_list()
    )


async def conversation_messages(
    store: Store, conversation_id: str, skip: Optional[int] = None, limit: Optional[int] = None,
) -> List[ConversationMessage]:
    """Messages in chronological order; with ``limit`` the newest page is returned."""
    query = FieldEquals(field="conversation_id", value=conversation_id)

    if limit:
        messages = await (
            store.conversation_messages.find(query)
            .sort("created_at", SortDirection.DESC)
            .skip(skip or 0)
            .limit(limit)
            .to_list()
        )
        return list(reversed(messages))

    return await (
        store.conversation_messages.find(query)
        .sort("created_at", SortDirection.ASC)
        .limit(settings.message_page_limit)
        .to_list()
    )


async def conversation_messages_total_count(store: Store, conversation_id: str) -> int:
    return await store.conversation_messages.count_documents(
        FieldEquals(field="conversation_id", value=conversation_id)
    )


async def conversation_counts(store: Store, params: ConversationListArgs, viewer: Viewer) -> ConversationCounts:
    """Group conversation counts by brands, channels, integrations or tags."""
    qb = await _built_query_builder(store, params, viewer)
    return await aggregate_counts(qb, params.only)


async def conversation_detail(store: Store, conversation_id: str) -> Optional[Conversation]:
    return await store.conversations.find_one(FieldEquals(field="id", value=conversation_id))


async def conversations_total_count(store: Store, params: ConversationListArgs, viewer: Viewer) -> int:
    qb = await _built_query_builder(store, params, viewer)
    return await store.conversations.count_documents(qb.main_query())


async def conversations_get_last(store: Store, params: ConversationListArgs, viewer: Viewer) -> Optional[Conversation]:
    qb = await _built_query_builder(store, params, viewer)
    return await store.conversations.find_one(qb.main_query(), sort=("updated_at", SortDirection.DESC))


async def conversations_total_unread_count(store: Store, viewer: Viewer) -> int:
    """Unread conversations for the viewer, without building the full query set."""
    qb = ConversationQueryBuilder(store, None, viewer)
    integrations = await qb.integrations_filter()

    return await store.conversations.count_documents(
        and_(
            integrations,
            filters.status_filter(ACTIVE_CONVERSATION_STATUSES),
            filters.unread_filter(viewer.id),
            filters.customer_replied_filter(),
        )
    )
