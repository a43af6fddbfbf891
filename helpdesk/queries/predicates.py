"""
Predicate algebra — composable, serialisable filter fragments.

Every filter the query layer produces is one of the node types below. Nodes
are frozen pydantic models discriminated by ``op``, so a composed query can
be logged or shipped as JSON with ``model_dump()`` and compared by value.

Array-valued document fields follow document-store semantics:
``FieldEquals`` means "contains", ``FieldIn`` means "contains any of" and
``FieldNotEquals`` means "does not contain".

Compose with ``and_`` / ``or_`` / ``field_in`` rather than building ``And``
and ``Or`` directly; they keep ``MatchAll`` and ``MatchNone`` normalised.
"""

from datetime import datetime
from typing import Annotated, Any, Iterable, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field


class _Node(BaseModel):
    model_config = ConfigDict(frozen=True)


class MatchAll(_Node):
    op: Literal["match_all"] = "match_all"


class MatchNone(_Node):
    """Matches zero documents. Produced whenever a lookup resolves nothing."""
    op: Literal["match_none"] = "match_none"


class FieldEquals(_Node):
    op: Literal["eq"] = "eq"
    field: str
    value: Any = None


class FieldNotEquals(_Node):
    op: Literal["ne"] = "ne"
    field: str
    value: Any = None


class FieldIn(_Node):
    op: Literal["in"] = "in"
    field: str
    values: Tuple[Any, ...]


class FieldExists(_Node):
    op: Literal["exists"] = "exists"
    field: str
    exists: bool = True


class FieldGreaterThan(_Node):
    op: Literal["gt"] = "gt"
    field: str
    value: Any


class FieldRange(_Node):
    op: Literal["range"] = "range"
    field: str
    gte: Optional[datetime] = None
    lte: Optional[datetime] = None


class TextSearch(_Node):
    """Case-insensitive substring match."""
    op: Literal["text"] = "text"
    field: str
    text: str


class And(_Node):
    op: Literal["and"] = "and"
    operands: Tuple["Predicate", ...]


class Or(_Node):
    op: Literal["or"] = "or"
    operands: Tuple["Predicate", ...]


Predicate = Annotated[
    Union[
        MatchAll, MatchNone, FieldEquals, FieldNotEquals, FieldIn, FieldExists,
        FieldGreaterThan, FieldRange, TextSearch, And, Or,
    ],
    Field(discriminator="op"),
]

And.model_rebuild()
Or.model_rebuild()

MATCH_ALL = MatchAll()
MATCH_NONE = MatchNone()


# ── Combinators ───────────────────────────────────────────────────

def and_(*predicates: Optional[Predicate]) -> Predicate:
    """Conjunction. ``None`` operands are ignored."""
    operands = []
    for p in predicates:
        if p is None or isinstance(p, MatchAll):
            continue
        if isinstance(p, MatchNone):
            return MATCH_NONE
        if isinstance(p, And):
            operands.extend(p.operands)
        else:
            operands.append(p)
    if not operands:
        return MATCH_ALL
    if len(operands) == 1:
        return operands[0]
    return And(operands=tuple(operands))


def or_(*predicates: Optional[Predicate]) -> Predicate:
    """Disjunction. ``None`` operands are ignored."""
    operands = []
    for p in predicates:
        if p is None or isinstance(p, MatchNone):
            continue
        if isinstance(p, MatchAll):
            return MATCH_ALL
        if isinstance(p, Or):
            operands.extend(p.operands)
        else:
            operands.append(p)
    if not operands:
        return MATCH_NONE
    if len(operands) == 1:
        return operands[0]
    return Or(operands=tuple(operands))


def field_in(field: str, values: Iterable[Any]) -> Predicate:
    """Membership predicate; an empty value set matches nothing."""
    unique = list(dict.fromkeys(values))
    if not unique:
        return MATCH_NONE
    return FieldIn(field=field, values=tuple(unique))


def membership_values(predicate: Predicate, field: str) -> Optional[list]:
    """Values a membership predicate on ``field`` admits, or None if it is not one."""
    if isinstance(predicate, MatchNone):
        return []
    if isinstance(predicate, FieldIn) and predicate.field == field:
        return list(predicate.values)
    if isinstance(predicate, FieldEquals) and predicate.field == field:
        return [predicate.value]
    return None


def is_absent(predicate: Optional[Predicate]) -> bool:
    return predicate is None or isinstance(predicate, MatchAll)


def intersect_integration_ids(
    first: Optional[Predicate], second: Optional[Predicate],
) -> Predicate:
    """
    Combine two integration-id membership predicates into one restricting to
    the ids both admit. An absent operand (None or MatchAll) places no
    restriction, so the other operand is returned unchanged.

    Accepts only absent operands and ``integration_id`` membership predicates
    (``FieldIn`` or ``FieldEquals`` on that field, or ``MATCH_NONE``). Any
    other shape is a caller error and raises ``ValueError``; the lookup
    filters feeding the query builder only produce accepted shapes.
    """
    if is_absent(first):
        return second if second is not None else MATCH_ALL
    if is_absent(second):
        return first

    first_ids = membership_values(first, "integration_id")
    second_ids = membership_values(second, "integration_id")
    if first_ids is None or second_ids is None:
        raise ValueError("intersect_integration_ids expects integration_id membership predicates")

    allowed = set(second_ids)
    return field_in("integration_id", [i for i in first_ids if i in allowed])
