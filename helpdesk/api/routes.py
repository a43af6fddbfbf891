"""
Helpdesk API — resolver routes.
Each route checks login and permission, then hands its query parameters to
the matching resolver.
"""

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import Depends, HTTPException, Query

from helpdesk.auth.dependencies import get_viewer, require_permission
from helpdesk.auth.rbac import Permission
from helpdesk.auth.viewer import Viewer
from helpdesk.db.store import Store, get_store
from helpdesk.queries.aggregation import AggregationError
from helpdesk.queries.constants import CountDimension, EngageCountName
from helpdesk.queries.conversation_query_builder import ConversationListArgs
from helpdesk.resolvers import channels as channel_resolvers
from helpdesk.resolvers import companies as company_resolvers
from helpdesk.resolvers import conversations as conversation_resolvers
from helpdesk.resolvers import engages as engage_resolvers
from helpdesk.resolvers.engages import EngageListArgs

logger = logging.getLogger(__name__)


# ── Query Parameter Models ────────────────────────────────────────

def conversation_list_args(
    limit: Optional[int] = Query(None, ge=0),
    ids: Optional[List[str]] = Query(None),
    channel_id: Optional[str] = None,
    brand_id: Optional[str] = None,
    tag: Optional[str] = None,
    integration_type: Optional[str] = None,
    status: Optional[str] = None,
    starred: bool = False,
    participating: bool = False,
    unassigned: bool = False,
    search: Optional[str] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    only: Optional[CountDimension] = None,
) -> ConversationListArgs:
    return ConversationListArgs(
        limit=limit, ids=ids, channel_id=channel_id, brand_id=brand_id, tag=tag,
        integration_type=integration_type, status=status, starred=starred,
        participating=participating, unassigned=unassigned, search=search,
        start_date=start_date, end_date=end_date, only=only,
    )


def engage_list_args(
    kind: Optional[str] = None,
    status: Optional[str] = None,
    tag: Optional[str] = None,
    ids: Optional[List[str]] = Query(None),
    brand_ids: Optional[List[str]] = Query(None),
    segment_ids: Optional[List[str]] = Query(None),
    tag_ids: Optional[List[str]] = Query(None),
    page: Optional[int] = Query(None, ge=1),
    per_page: Optional[int] = Query(None, ge=1),
) -> EngageListArgs:
    return EngageListArgs(
        kind=kind, status=status, tag=tag, ids=ids, brand_ids=brand_ids,
        segment_ids=segment_ids, tag_ids=tag_ids, page=page, per_page=per_page,
    )


def _found(document, what: str):
    if document is None:
        raise HTTPException(404, f"{what} not found")
    return document


# ── Route Registration ───────────────────────────────────────────

def register_routes(app_router):
    """Register the resolver routes onto the FastAPI app."""

    show_conversations = require_permission(Permission.SHOW_CONVERSATIONS)
    show_channels = require_permission(Permission.SHOW_CHANNELS)
    show_engages = require_permission(Permission.SHOW_ENGAGES_MESSAGES)
    show_companies = require_permission(Permission.SHOW_COMPANIES)

    # ══════════════════════════════════════════════════════════════
    # CONVERSATIONS
    # ══════════════════════════════════════════════════════════════

    @app_router.get("/conversations", tags=["Conversations"])
    async def list_conversations(
        args: ConversationListArgs = Depends(conversation_list_args),
        viewer: Viewer = Depends(show_conversations),
        store: Store = Depends(get_store),
    ):
        """Conversations visible to the viewer, latest activity first."""
        return await conversation_resolvers.conversations(store, args, viewer)

    @app_router.get("/conversations/counts", tags=["Conversations"])
    async def conversation_counts(
        args: ConversationListArgs = Depends(conversation_list_args),
        viewer: Viewer = Depends(show_conversations),
        store: Store = Depends(get_store),
    ):
        """Fixed category counts, plus the histogram named by ``only``."""
        try:
            return await conversation_resolvers.conversation_counts(store, args, viewer)
        except AggregationError as e:
            raise HTTPException(502, f"Conversation counts by {e.dimension} failed")

    @app_router.get("/conversations/total-count", tags=["Conversations"])
    async def conversations_total_count(
        args: ConversationListArgs = Depends(conversation_list_args),
        viewer: Viewer = Depends(show_conversations),
        store: Store = Depends(get_store),
    ):
        count = await conversation_resolvers.conversations_total_count(store, args, viewer)
        return {"count": count}

    @app_router.get("/conversations/last", tags=["Conversations"])
    async def conversations_get_last(
        args: ConversationListArgs = Depends(conversation_list_args),
        viewer: Viewer = Depends(show_conversations),
        store: Store = Depends(get_store),
    ):
        return _found(
            await conversation_resolvers.conversations_get_last(store, args, viewer),
            "Conversation",
        )

    @app_router.get("/conversations/unread-count", tags=["Conversations"])
    async def conversations_total_unread_count(
        viewer: Viewer = Depends(get_viewer),
        store: Store = Depends(get_store),
    ):
        """Login is enough here; the count is already limited to the viewer's channels."""
        count = await conversation_resolvers.conversations_total_unread_count(store, viewer)
        return {"count": count}

    @app_router.get("/conversations/{conversation_id}", tags=["Conversations"])
    async def conversation_detail(
        conversation_id: str,
        viewer: Viewer = Depends(show_conversations),
        store: Store = Depends(get_store),
    ):
        return _found(
            await conversation_resolvers.conversation_detail(store, conversation_id),
            "Conversation",
        )

    @app_router.get("/conversations/{conversation_id}/messages", tags=["Conversations"])
    async def conversation_messages(
        conversation_id: str,
        skip: Optional[int] = Query(None, ge=0),
        limit: Optional[int] = Query(None, ge=0),
        viewer: Viewer = Depends(show_conversations),
        store: Store = Depends(get_store),
    ):
        """Messages in chronological order; ``limit`` returns the newest page."""
        return await conversation_resolvers.conversation_messages(store, conversation_id, skip, limit)

    @app_router.get("/conversations/{conversation_id}/messages/total-count", tags=["Conversations"])
    async def conversation_messages_total_count(
        conversation_id: str,
        viewer: Viewer = Depends(show_conversations),
        store: Store = Depends(get_store),
    ):
        count = await conversation_resolvers.conversation_messages_total_count(store, conversation_id)
        return {"count": count}

    # ══════════════════════════════════════════════════════════════
    # CHANNELS
    # ══════════════════════════════════════════════════════════════

    @app_router.get("/channels", tags=["Channels"])
    async def list_channels(
        member_ids: Optional[List[str]] = Query(None),
        page: Optional[int] = Query(None, ge=1),
        per_page: Optional[int] = Query(None, ge=1),
        viewer: Viewer = Depends(show_channels),
        store: Store = Depends(get_store),
    ):
        return await channel_resolvers.channels(store, member_ids, page, per_page)

    @app_router.get("/channels/total-count", tags=["Channels"])
    async def channels_total_count(
        viewer: Viewer = Depends(show_channels),
        store: Store = Depends(get_store),
    ):
        return {"count": await channel_resolvers.channels_total_count(store)}

    @app_router.get("/channels/last", tags=["Channels"])
    async def channels_get_last(
        viewer: Viewer = Depends(show_channels),
        store: Store = Depends(get_store),
    ):
        return _found(await channel_resolvers.channels_get_last(store), "Channel")

    @app_router.get("/channels/{channel_id}", tags=["Channels"])
    async def channel_detail(
        channel_id: str,
        viewer: Viewer = Depends(show_channels),
        store: Store = Depends(get_store),
    ):
        return _found(await channel_resolvers.channel_detail(store, channel_id), "Channel")

    # ══════════════════════════════════════════════════════════════
    # ENGAGE MESSAGES
    # ══════════════════════════════════════════════════════════════

    @app_router.get("/engage-messages", tags=["Engage Messages"])
    async def list_engage_messages(
        args: EngageListArgs = Depends(engage_list_args),
        viewer: Viewer = Depends(show_engages),
        store: Store = Depends(get_store),
    ):
        return await engage_resolvers.engage_messages(store, args, viewer)

    @app_router.get("/engage-messages/counts", tags=["Engage Messages"])
    async def engage_message_counts(
        name: EngageCountName,
        kind: Optional[str] = None,
        status: Optional[str] = None,
        viewer: Viewer = Depends(show_engages),
        store: Store = Depends(get_store),
    ):
        """Counts grouped by kind, status or tag."""
        try:
            return await engage_resolvers.engage_message_counts(store, name, viewer, kind, status)
        except AggregationError as e:
            raise HTTPException(502, f"Engage message counts by {e.dimension} failed")

    @app_router.get("/engage-messages/total-count", tags=["Engage Messages"])
    async def engage_messages_total_count(
        args: EngageListArgs = Depends(engage_list_args),
        viewer: Viewer = Depends(show_engages),
        store: Store = Depends(get_store),
    ):
        return {"count": await engage_resolvers.engage_messages_total_count(store, args, viewer)}

    @app_router.get("/engage-messages/{message_id}", tags=["Engage Messages"])
    async def engage_message_detail(
        message_id: str,
        viewer: Viewer = Depends(show_engages),
        store: Store = Depends(get_store),
    ):
        return _found(await engage_resolvers.engage_message_detail(store, message_id), "Engage message")

    # ══════════════════════════════════════════════════════════════
    # COMPANIES
    # ══════════════════════════════════════════════════════════════

    @app_router.get("/companies", tags=["Companies"])
    async def list_companies(
        search_value: Optional[str] = None,
        ids: Optional[List[str]] = Query(None),
        page: Optional[int] = Query(None, ge=1),
        per_page: Optional[int] = Query(None, ge=1),
        viewer: Viewer = Depends(show_companies),
        store: Store = Depends(get_store),
    ):
        return await company_resolvers.companies(store, search_value, ids, page, per_page)

    @app_router.get("/companies/total-count", tags=["Companies"])
    async def companies_total_count(
        search_value: Optional[str] = None,
        ids: Optional[List[str]] = Query(None),
        viewer: Viewer = Depends(show_companies),
        store: Store = Depends(get_store),
    ):
        return {"count": await company_resolvers.companies_total_count(store, search_value, ids)}

    @app_router.get("/companies/{company_id}", tags=["Companies"])
    async def company_detail(
        company_id: str,
        viewer: Viewer = Depends(show_companies),
        store: Store = Depends(get_store),
    ):
        return _found(await company_resolvers.company_detail(store, company_id), "Company")
