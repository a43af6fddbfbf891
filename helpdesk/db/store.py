"""
Store — document-style read access over the async SQLAlchemy models.

Each ``Collection`` offers find / find_one / count_documents over predicates
from ``helpdesk.queries.predicates``. Every operation opens its own short
session, so independent counts can run concurrently.
"""
import logging
from typing import Generic, List, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import async_sessionmaker

from helpdesk.db.documents import (
    Brand, Channel, Company, Conversation, ConversationMessage,
    EngageMessage, Integration, Tag, User,
)
from helpdesk.db.engine import get_session_factory
from helpdesk.db.models import (
    BrandModel, ChannelModel, CompanyModel, ConversationMessageModel,
    ConversationModel, EngageMessageModel, IntegrationModel, TagModel, UserModel,
)
from helpdesk.queries.compiler import column_for, compile_predicate
from helpdesk.queries.constants import SortDirection
from helpdesk.queries.predicates import MATCH_ALL, MatchNone, Predicate

logger = logging.getLogger(__name__)

D = TypeVar("D", bound=BaseModel)


def _row_to_document(row, document_cls: Type[D]) -> D:
    """Copy the document's fields off an ORM row; link proxies become lists."""
    data = {}
    for name in document_cls.model_fields:
        value = getattr(row, name)
        if name in row.array_fields:
            value = list(value)
        data[name] = value
    return document_cls(**data)


class Cursor(Generic[D]):
    """Lazy result set. Sort, skip and limit compose before ``to_list()`` runs it."""

    def __init__(self, collection: "Collection[D]", predicate: Predicate):
        self._collection = collection
        self._predicate = predicate
        self._order: List[Tuple[str, int]] = []
        self._skip = 0
        self._limit = 0

    def sort(self, field: str, direction: int = SortDirection.DESC) -> "Cursor[D]":
        self._order.append((field, int(direction)))
        return self

    def skip(self, n: Optional[int]) -> "Cursor[D]":
        self._skip = max(n or 0, 0)
        return self

    def limit(self, n: Optional[int]) -> "Cursor[D]":
        """Cap the result size; 0 means no limit."""
        self._limit = max(n or 0, 0)
        return self

    async def to_list(self) -> List[D]:
        return await self._collection._fetch(self._predicate, self._order, self._skip, self._limit)


class Collection(Generic[D]):
    """Read operations for one model, returning pydantic documents."""

    def __init__(self, session_factory: async_sessionmaker, model, document_cls: Type[D]):
        self._session_factory = session_factory
        self.model = model
        self.document_cls = document_cls

    def find(self, predicate: Predicate = MATCH_ALL) -> Cursor[D]:
        return Cursor(self, predicate)

    async def find_one(
        self, predicate: Predicate = MATCH_ALL, sort: Optional[Tuple[str, int]] = None,
    ) -> Optional[D]:
        cursor = self.find(predicate).limit(1)
        if sort:
            cursor.sort(*sort)
        docs = await cursor.to_list()
        return docs[0] if docs else None

    async def find_ids(self, predicate: Predicate = MATCH_ALL) -> List[str]:
        """Ids of every matching document, without loading the documents."""
        if isinstance(predicate, MatchNone):
            return []
        stmt = select(self.model.id).where(compile_predicate(predicate, self.model))
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())

    async def count_documents(self, predicate: Predicate = MATCH_ALL) -> int:
        if isinstance(predicate, MatchNone):
            return 0
        stmt = (
            select(func.count())
            .select_from(self.model)
            .where(compile_predicate(predicate, self.model))
        )
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return int(result.scalar_one())

    async def _fetch(
        self, predicate: Predicate, order: List[Tuple[str, int]], skip: int, limit: int,
    ) -> List[D]:
        if isinstance(predicate, MatchNone):
            return []
        stmt = select(self.model).where(compile_predicate(predicate, self.model))
        for field, direction in order:
            column = column_for(self.model, field)
            stmt = stmt.order_by(column.desc() if direction < 0 else column.asc())
        if skip:
            stmt = stmt.offset(skip)
        if limit:
            stmt = stmt.limit(limit)
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            rows = result.scalars().all()
            return [_row_to_document(r, self.document_cls) for r in rows]


class Store:
    """One collection per entity the helpdesk reads."""

    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory
        self.brands = Collection(session_factory, BrandModel, Brand)
        self.integrations = Collection(session_factory, IntegrationModel, Integration)
        self.channels = Collection(session_factory, ChannelModel, Channel)
        self.tags = Collection(session_factory, TagModel, Tag)
        self.conversations = Collection(session_factory, ConversationModel, Conversation)
        self.conversation_messages = Collection(
            session_factory, ConversationMessageModel, ConversationMessage
        )
        self.engage_messages = Collection(session_factory, EngageMessageModel, EngageMessage)
        self.companies = Collection(session_factory, CompanyModel, Company)
        self.users = Collection(session_factory, UserModel, User)


def get_store() -> Store:
    """FastAPI dependency — a store bound to the process-wide session factory."""
    return Store(get_session_factory())
