"""
Conversation query builder.

Turns list arguments plus the viewer into named sub-predicates ("slots") and
composes them into the main query used for listing, counting and as the base
of every aggregation. Slots that need a lookup are resolved once, in
``build_all_queries()``, and cached on the instance for the rest of the
request.
"""
import asyncio
import logging
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel, Field, field_validator

from helpdesk.auth.viewer import Viewer
from helpdesk.queries import filters
from helpdesk.queries.constants import ACTIVE_CONVERSATION_STATUSES, CountDimension
from helpdesk.queries.predicates import (
    Predicate, TextSearch, and_, field_in, intersect_integration_ids,
)

logger = logging.getLogger(__name__)

# Composition order of the main query
QUERY_SLOTS = (
    "default",
    "integrations",
    "integration_type",
    "channel",
    "unassigned",
    "participating",
    "status",
    "starred",
    "tag",
    "created_at",
    "ids",
    "search",
)


class ConversationListArgs(BaseModel):
    """Arguments accepted by conversation list, count and aggregation queries."""
    limit: Optional[int] = Field(default=None, ge=0)
    ids: Optional[List[str]] = None
    channel_id: Optional[str] = None
    brand_id: Optional[str] = None
    tag: Optional[str] = None
    integration_type: Optional[str] = None
    status: Optional[str] = None
    starred: bool = False
    participating: bool = False
    unassigned: bool = False
    search: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    only: Optional[CountDimension] = None

    @field_validator("start_date", "end_date")
    @classmethod
    def to_naive_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        # Timestamp columns hold naive UTC
        if v is not None and v.tzinfo is not None:
            return v.astimezone(timezone.utc).replace(tzinfo=None)
        return v


class ConversationQueryBuilder:

    def __init__(self, store, params: Optional[ConversationListArgs], viewer: Viewer):
        self.store = store
        self.params = params or ConversationListArgs()
        self.viewer = viewer
        self.queries: Optional[Dict[str, Predicate]] = None

    # ── Filters ───────────────────────────────────────────────────

    async def integrations_filter(self) -> Predicate:
        """Floor restriction: integrations of the channels the viewer belongs to."""
        return await filters.member_integrations_filter(self.store, self.viewer.id)

    async def channel_filter(self, channel_id: str) -> Predicate:
        return await filters.channel_filter(self.store, channel_id)

    async def brand_filter(self, brand_id: str) -> Predicate:
        return await filters.brand_filter(self.store, brand_id)

    async def integration_type_filter(self, kind: str) -> Predicate:
        return await filters.integration_type_filter(self.store, kind)

    def tag_filter(self, tag_id: str) -> Predicate:
        return filters.tag_filter(tag_id)

    def status_filter(self, statuses: Iterable[str]) -> Predicate:
        return filters.status_filter(statuses)

    def unassigned_filter(self) -> Predicate:
        return filters.unassigned_filter()

    def participating_filter(self) -> Predicate:
        return filters.participating_filter(self.viewer.id)

    def starred_filter(self) -> Predicate:
        return filters.starred_filter(self.viewer.starred_conversation_ids)

    @staticmethod
    def intersect_integration_ids(first: Optional[Predicate], second: Optional[Predicate]) -> Predicate:
        return intersect_integration_ids(first, second)

    # ── Building ──────────────────────────────────────────────────

    async def _channel_and_brand(self) -> Optional[Predicate]:
        # both narrow integration_id, so they are intersected into one slot
        params = self.params
        channel = await self.channel_filter(params.channel_id) if params.channel_id else None
        if not params.brand_id:
            return channel
        return self.intersect_integration_ids(channel, await self.brand_filter(params.brand_id))

    async def _none(self) -> None:
        return None

    async def build_all_queries(self) -> Dict[str, Predicate]:
        params = self.params

        integrations, channel, integration_type, tag = await asyncio.gather(
            self.integrations_filter(),
            self._channel_and_brand(),
            self.integration_type_filter(params.integration_type) if params.integration_type else self._none(),
            filters.conversation_tag_filter(self.store, params.tag) if params.tag else self._none(),
        )

        queries: Dict[str, Predicate] = {
            "default": filters.customer_replied_filter(),
            "integrations": integrations,
            "status": self.status_filter([params.status] if params.status else ACTIVE_CONVERSATION_STATUSES),
        }
        if channel is not None:
            queries["channel"] = channel
        if integration_type is not None:
            queries["integration_type"] = integration_type
        if tag is not None:
            queries["tag"] = tag
        if params.unassigned:
            queries["unassigned"] = self.unassigned_filter()
        if params.participating:
            queries["participating"] = self.participating_filter()
        if params.starred:
            queries["starred"] = self.starred_filter()
        if params.start_date and params.end_date:
            queries["created_at"] = filters.date_filter(params.start_date, params.end_date)
        if params.ids:
            queries["ids"] = field_in("id", params.ids)
        if params.search:
            queries["search"] = TextSearch(field="content", text=params.search)

        self.queries = queries
        logger.debug(f"Built conversation queries for {self.viewer.id}: {sorted(queries)}")
        return queries

    def main_query(self, **overrides: Optional[Predicate]) -> Predicate:
        """
        AND of every active slot. Keyword overrides replace a slot for this
        call only; passing None drops the slot. The cached slots are never
        modified, so repeated calls give the same result.
        """
        if self.queries is None:
            raise RuntimeError("build_all_queries() must be awaited before main_query()")
        unknown = set(overrides) - set(QUERY_SLOTS)
        if unknown:
            raise ValueError(f"Unknown query slots: {sorted(unknown)}")
        queries = {**self.queries, **overrides}
        return and_(*(queries.get(name) for name in QUERY_SLOTS))
