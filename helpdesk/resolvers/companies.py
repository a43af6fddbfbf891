"""
Company resolvers (read-only).
"""
from typing import List, Optional

from helpdesk.db.documents import Company
from helpdesk.db.store import Store
from helpdesk.queries.constants import SortDirection
from helpdesk.queries.predicates import FieldEquals, Predicate, TextSearch, and_, field_in, or_
from helpdesk.resolvers.pagination import paginate


def company_query(search_value: Optional[str] = None, ids: Optional[List[str]] = None) -> Predicate:
    search = None
    if search_value:
        search = or_(*(TextSearch(field=f, text=search_value) for f in ("name", "email", "website")))
    return and_(field_in("id", ids) if ids is not None else None, search)


async def companies(
    store: Store,
    search_value: Optional[str] = None,
    ids: Optional[List[str]] = None,
    page: Optional[int] = None,
    per_page: Optional[int] = None,
) -> List[Company]:
    cursor = store.companies.find(company_query(search_value, ids)).sort("created_at", SortDirection.DESC)
    return await paginate(cursor, page, per_page).to_list()


async def company_detail(store: Store, company_id: str) -> Optional[Company]:
    return await store.companies.find_one(FieldEquals(field="id", value=company_id))


async def companies_total_count(
    store: Store, search_value: Optional[str] = None, ids: Optional[List[str]] = None,
) -> int:
    return await store.companies.count_documents(company_query(search_value, ids))
