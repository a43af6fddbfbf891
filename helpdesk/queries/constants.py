"""
Closed enumerations shared by validation, predicate construction and the
data model. Anything that filters on a status, kind or tag type goes
through these so the accepted value sets cannot drift apart.
"""

from enum import Enum
from typing import Any


class _ClosedEnum(str, Enum):

    @classmethod
    def values(cls) -> list[str]:
        return [m.value for m in cls]

    @classmethod
    def is_valid(cls, value: Any) -> bool:
        return value in cls._value2member_map_


class ConversationStatus(_ClosedEnum):
    NEW = "new"
    OPEN = "open"
    CLOSED = "closed"


class TagType(_ClosedEnum):
    CONVERSATION = "conversation"
    CUSTOMER = "customer"
    ENGAGE_MESSAGE = "engageMessage"
    COMPANY = "company"
    INTEGRATION = "integration"


class IntegrationKind(_ClosedEnum):
    MESSENGER = "messenger"
    FORM = "form"
    FACEBOOK = "facebook"
    GMAIL = "gmail"
    CALLPRO = "callpro"


class EngageKind(_ClosedEnum):
    MANUAL = "manual"
    AUTO = "auto"
    VISITOR_AUTO = "visitorAuto"


class EngageStatus(_ClosedEnum):
    LIVE = "live"
    DRAFT = "draft"
    PAUSED = "paused"
    YOURS = "yours"


class CountDimension(_ClosedEnum):
    """Dimension a conversation histogram is grouped by."""
    BY_CHANNELS = "by_channels"
    BY_INTEGRATION_TYPES = "by_integration_types"
    BY_BRANDS = "by_brands"
    BY_TAGS = "by_tags"


class EngageCountName(_ClosedEnum):
    KIND = "kind"
    STATUS = "status"
    TAG = "tag"


class SortDirection(int, Enum):
    ASC = 1
    DESC = -1


# Statuses a conversation list shows when no status is requested
ACTIVE_CONVERSATION_STATUSES = [ConversationStatus.NEW.value, ConversationStatus.OPEN.value]
