"""Page/per-page pagination over a store cursor."""
from typing import Optional

from helpdesk.config.settings import settings
from helpdesk.db.store import Cursor


def paginate(cursor: Cursor, page: Optional[int] = None, per_page: Optional[int] = None) -> Cursor:
    page = page or 1
    per_page = per_page or settings.default_per_page
    return cursor.skip((page - 1) * per_page).limit(per_page)
