"""
Engage message resolvers — list, detail, total count and grouped counts
by kind, status and tag.
"""
import logging
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from helpdesk.auth.viewer import Viewer
from helpdesk.db.documents import EngageMessage
from helpdesk.db.store import Store
from helpdesk.queries.aggregation import gather_counts
from helpdesk.queries.constants import EngageCountName, EngageKind, EngageStatus, SortDirection, TagType
from helpdesk.queries.predicates import MATCH_ALL, FieldEquals, Predicate, and_, field_in
from helpdesk.resolvers.pagination import paginate

logger = logging.getLogger(__name__)


class EngageListArgs(BaseModel):
    kind: Optional[str] = None
    status: Optional[str] = None
    tag: Optional[str] = None
    ids: Optional[List[str]] = None
    brand_ids: Optional[List[str]] = None
    segment_ids: Optional[List[str]] = None
    tag_ids: Optional[List[str]] = None
    page: Optional[int] = Field(default=None, ge=1)
    per_page: Optional[int] = Field(default=None, ge=1)


# ── Query helpers ─────────────────────────────────────────────────

def common_query_selector(viewer: Viewer) -> Predicate:
    """Brand-scoped users only see messages for their brands."""
    if viewer.scope_brand_ids:
        return field_in("brand_ids", viewer.scope_brand_ids)
    return MATCH_ALL


def tag_query(tag_id: str) -> Predicate:
    return FieldEquals(field="tag_ids", value=tag_id)


def kind_query(kind: Optional[str]) -> Predicate:
    return FieldEquals(field="kind", value=kind) if kind else MATCH_ALL


def status_query(status: Optional[str], viewer: Optional[Viewer] = None) -> Predicate:
    """Unknown statuses place no restriction."""
    if status == EngageStatus.LIVE:
        return FieldEquals(field="is_live", value=True)
    if status == EngageStatus.DRAFT:
        return FieldEquals(field="is_draft", value=True)
    if status == EngageStatus.PAUSED:
        return FieldEquals(field="is_live", value=False)
    if status == EngageStatus.YOURS and viewer:
        return FieldEquals(field="from_user_id", value=viewer.id)
    return MATCH_ALL


def list_query(common: Predicate, args: EngageListArgs, viewer: Viewer) -> Predicate:
    # id/segment/brand/tag lists are exclusive; the first one given wins
    if args.ids:
        return and_(common, field_in("id", args.ids))
    if args.segment_ids:
        return and_(common, field_in("segment_ids", args.segment_ids))
    if args.brand_ids:
        return and_(common, field_in("brand_ids", args.brand_ids))
    if args.tag_ids:
        return and_(common, field_in("tag_ids", args.tag_ids))

    return and_(
        common,
        kind_query(args.kind),
        status_query(args.status, viewer) if args.status else None,
        tag_query(args.tag) if args.tag else None,
    )


def _counter(store: Store, predicate: Predicate):
    async def job() -> int:
        return await store.engage_messages.count_documents(predicate)
    return job


# ── Counts ────────────────────────────────────────────────────────

async def counts_by_kind(store: Store, common: Predicate) -> Dict[str, int]:
    jobs = {"all": _counter(store, common)}
    for kind in EngageKind.values():
        jobs[kind] = _counter(store, and_(common, kind_query(kind)))
    return await gather_counts(jobs, "engage_kind")


async def counts_by_status(store: Store, common: Predicate, kind: Optional[str], viewer: Viewer) -> Dict[str, int]:
    query = and_(common, kind_query(kind))
    jobs = {
        status: _counter(store, and_(query, status_query(status, viewer)))
        for status in EngageStatus.values()
    }
    return await gather_counts(jobs, "engage_status")


async def counts_by_tag(
    store: Store, common: Predicate, kind: Optional[str], status: Optional[str], viewer: Viewer,
) -> Dict[str, int]:
    query = and_(common, kind_query(kind), status_query(status, viewer) if status else None)
    tags = await store.tags.find(FieldEquals(field="type", value=TagType.ENGAGE_MESSAGE.value)).to_list()
    jobs = {t.id: _counter(store, and_(query, tag_query(t.id))) for t in tags}
    return await gather_counts(jobs, "engage_tag")


# ── Resolvers ─────────────────────────────────────────────────────

async def engage_message_counts(
    store: Store,
    name: EngageCountName,
    viewer: Viewer,
    kind: Optional[str] = None,
    status: Optional[str] = None,
) -> Dict[str, int]:
    """Group engage message counts by kind, status or tag."""
    common = common_query_selector(viewer)
    name = EngageCountName(name)

    if name == EngageCountName.KIND:
        return await counts_by_kind(store, common)
    if name == EngageCountName.STATUS:
        return await counts_by_status(store, common, kind, viewer)
    return await counts_by_tag(store, common, kind, status, viewer)


async def engage_messages(store: Store, args: EngageListArgs, viewer: Viewer) -> List[EngageMessage]:
    query = list_query(common_query_selector(viewer), args, viewer)
    cursor = store.engage_messages.find(query).sort("created_at", SortDirection.DESC)
    return await paginate(cursor, args.page, args.per_page).to_list()


async def engage_message_detail(store: Store, message_id: str) -> Optional[EngageMessage]:
    return await store.engage_messages.find_one(FieldEquals(field="id", value=message_id))


async def engage_messages_total_count(store: Store, args: EngageListArgs, viewer: Viewer) -> int:
    return await store.engage_messages.count_documents(
        list_query(common_query_selector(viewer), args, viewer)
    )
