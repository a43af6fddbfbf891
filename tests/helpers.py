"""Small helpers shared by the DB-backed tests."""
from datetime import datetime


def day(n: int, hour: int = 0) -> datetime:
    return datetime(2024, 1, n, hour)


async def add_rows(store, *rows) -> None:
    """Insert ORM rows in one transaction."""
    async with store.session_factory() as session:
        session.add_all(rows)
        await session.commit()
