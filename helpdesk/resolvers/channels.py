"""
Channel resolvers.
"""
from typing import List, Optional

from helpdesk.db.documents import Channel
from helpdesk.db.store import Store
from helpdesk.queries.constants import SortDirection
from helpdesk.queries.predicates import MATCH_ALL, FieldEquals, field_in
from helpdesk.resolvers.pagination import paginate


async def channels(
    store: Store,
    member_ids: Optional[List[str]] = None,
    page: Optional[int] = None,
    per_page: Optional[int] = None,
) -> List[Channel]:
    """Channels list, newest first."""
    query = field_in("member_ids", member_ids) if member_ids is not None else MATCH_ALL
    cursor = store.channels.find(query).sort("created_at", SortDirection.DESC)
    return await paginate(cursor, page, per_page).to_list()


async def channel_detail(store: Store, channel_id: str) -> Optional[Channel]:
    return await store.channels.find_one(FieldEquals(field="id", value=channel_id))


async def channels_total_count(store: Store) -> int:
    return await store.channels.count_documents()


async def channels_get_last(store: Store) -> Optional[Channel]:
    return await store.channels.find_one(sort=("created_at", SortDirection.DESC))
