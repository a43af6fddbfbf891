"""
Aggregation engine — per-dimension conversation histograms.

Each histogram enumerates every entity of its dimension and counts the
conversations matching the builder's main query with that entity's
predicate in place of the dimension's own slot. Counts run concurrently
under a semaphore; the first failure cancels the rest and fails the whole
aggregation, so a partial histogram is never returned.

Base predicates differ by dimension, matching the long-standing product
behaviour:

- channels / integration types: main query, dimension slot replaced
- brands: main query, channel slot replaced by (channel filter ∩ brand)
- tags and the fixed unassigned / participating / starred / resolved
  counts: main query without the channel slot
"""
import asyncio
import logging
from typing import Awaitable, Callable, Dict, Mapping, Optional

from pydantic import BaseModel

from helpdesk.config.settings import settings
from helpdesk.queries.constants import ConversationStatus, CountDimension, IntegrationKind, TagType
from helpdesk.queries.conversation_query_builder import ConversationQueryBuilder
from helpdesk.queries.filters import integration_ids_filter
from helpdesk.queries.predicates import FieldEquals, Predicate

logger = logging.getLogger(__name__)

CountJob = Callable[[], Awaitable[int]]


class AggregationError(Exception):
    """A count inside an aggregation failed; the whole aggregation is void."""

    def __init__(self, dimension: str, key: str):
        self.dimension = dimension
        self.key = key
        super().__init__(f"Count for {dimension}[{key}] failed")


class ConversationCounts(BaseModel):
    by_channels: Optional[Dict[str, int]] = None
    by_integration_types: Optional[Dict[str, int]] = None
    by_brands: Optional[Dict[str, int]] = None
    by_tags: Optional[Dict[str, int]] = None
    unassigned: int = 0
    participating: int = 0
    starred: int = 0
    resolved: int = 0


async def gather_counts(
    jobs: Mapping[str, CountJob],
    dimension: str,
    concurrency: Optional[int] = None,
) -> Dict[str, int]:
    """Run every count job with bounded concurrency; all succeed or none are returned."""
    semaphore = asyncio.Semaphore(concurrency or settings.aggregation_concurrency)

    async def run(key: str, job: CountJob):
        async with semaphore:
            try:
                return key, await job()
            except Exception as exc:
                logger.error(f"Aggregation {dimension} failed on '{key}': {exc}")
                raise AggregationError(dimension, key) from exc

    tasks = [asyncio.ensure_future(run(key, job)) for key, job in jobs.items()]
    try:
        results = await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
    return dict(results)


def _counter(qb: ConversationQueryBuilder, predicate: Predicate) -> CountJob:
    async def job() -> int:
        return await qb.store.conversations.count_documents(predicate)
    return job


def _lazy_counter(qb: ConversationQueryBuilder, resolve: Callable[[], Awaitable[Predicate]]) -> CountJob:
    async def job() -> int:
        return await qb.store.conversations.count_documents(await resolve())
    return job


async def count_by_channels(qb: ConversationQueryBuilder) -> Dict[str, int]:
    channels = await qb.store.channels.find().to_list()
    logger.debug(f"Counting conversations across {len(channels)} channels")
    jobs = {
        c.id: _counter(qb, qb.main_query(channel=integration_ids_filter(c.integration_ids)))
        for c in channels
    }
    return await gather_counts(jobs, CountDimension.BY_CHANNELS.value)


async def count_by_integration_types(qb: ConversationQueryBuilder) -> Dict[str, int]:
    def resolver(kind: str):
        async def resolve() -> Predicate:
            return qb.main_query(integration_type=await qb.integration_type_filter(kind))
        return resolve

    jobs = {kind: _lazy_counter(qb, resolver(kind)) for kind in IntegrationKind.values()}
    return await gather_counts(jobs, CountDimension.BY_INTEGRATION_TYPES.value)


async def count_by_brands(qb: ConversationQueryBuilder) -> Dict[str, int]:
    brands = await qb.store.brands.find().to_list()
    channel = qb.queries.get("channel")

    def resolver(brand_id: str):
        async def resolve() -> Predicate:
            brand = await qb.brand_filter(brand_id)
            return qb.main_query(channel=qb.intersect_integration_ids(channel, brand))
        return resolve

    logger.debug(f"Counting conversations across {len(brands)} brands")
    jobs = {b.id: _lazy_counter(qb, resolver(b.id)) for b in brands}
    return await gather_counts(jobs, CountDimension.BY_BRANDS.value)


async def count_by_tags(qb: ConversationQueryBuilder) -> Dict[str, int]:
    tags = await qb.store.tags.find(
        FieldEquals(field="type", value=TagType.CONVERSATION.value)
    ).to_list()
    logger.debug(f"Counting conversations across {len(tags)} tags")
    jobs = {
        t.id: _counter(qb, qb.main_query(channel=None, tag=qb.tag_filter(t.id)))
        for t in tags
    }
    return await gather_counts(jobs, CountDimension.BY_TAGS.value)


_HISTOGRAMS = {
    CountDimension.BY_CHANNELS: count_by_channels,
    CountDimension.BY_INTEGRATION_TYPES: count_by_integration_types,
    CountDimension.BY_BRANDS: count_by_brands,
    CountDimension.BY_TAGS: count_by_tags,
}


async def conversation_counts(
    qb: ConversationQueryBuilder, only: Optional[CountDimension] = None,
) -> ConversationCounts:
    """Optional histogram for ``only`` plus the fixed category counts."""
    counts = ConversationCounts()

    if only is not None:
        dimension = CountDimension(only)
        setattr(counts, dimension.value, await _HISTOGRAMS[dimension](qb))

    fixed = await gather_counts(
        {
            "unassigned": _counter(qb, qb.main_query(channel=None, unassigned=qb.unassigned_filter())),
            "participating": _counter(qb, qb.main_query(channel=None, participating=qb.participating_filter())),
            "starred": _counter(qb, qb.main_query(channel=None, starred=qb.starred_filter())),
            "resolved": _counter(
                qb, qb.main_query(channel=None, status=qb.status_filter([ConversationStatus.CLOSED.value]))
            ),
        },
        "fixed",
    )
    for key, value in fixed.items():
        setattr(counts, key, value)
    return counts
