"""
Predicate → SQLAlchemy compiler.

Scalar fields compile against the model's columns; array fields (listed in
the model's ``array_fields``) compile to EXISTS subqueries over their link
table via ``relationship.any()``.
"""
from sqlalchemy import and_, false, or_, true
from sqlalchemy.sql.elements import ColumnElement

from helpdesk.queries.predicates import (
    And, FieldEquals, FieldExists, FieldGreaterThan, FieldIn, FieldNotEquals,
    FieldRange, MatchAll, MatchNone, Or, Predicate, TextSearch,
)


def column_for(model, field: str):
    column = getattr(model, field, None)
    if column is None or not hasattr(column, "property"):
        raise ValueError(f"{model.__name__} has no queryable field '{field}'")
    return column


def _link(model, field: str):
    """Return (relationship attribute, link value column) for an array field."""
    relationship_attr = getattr(model, model.array_fields[field])
    link_model = relationship_attr.property.mapper.class_
    return relationship_attr, link_model.value


def compile_predicate(predicate: Predicate, model) -> ColumnElement[bool]:
    """Compile a predicate into a boolean clause over ``model``."""
    if isinstance(predicate, MatchAll):
        return true()
    if isinstance(predicate, MatchNone):
        return false()
    if isinstance(predicate, And):
        return and_(*(compile_predicate(p, model) for p in predicate.operands))
    if isinstance(predicate, Or):
        return or_(*(compile_predicate(p, model) for p in predicate.operands))

    field = predicate.field
    if field in model.array_fields:
        return _compile_array(predicate, model, field)

    column = column_for(model, field)
    if isinstance(predicate, FieldEquals):
        if predicate.value is None:
            return column.is_(None)
        return column == predicate.value
    if isinstance(predicate, FieldNotEquals):
        if predicate.value is None:
            return column.is_not(None)
        # document-store $ne also matches documents without the field
        return or_(column != predicate.value, column.is_(None))
    if isinstance(predicate, FieldIn):
        return column.in_(predicate.values)
    if isinstance(predicate, FieldExists):
        return column.is_not(None) if predicate.exists else column.is_(None)
    if isinstance(predicate, FieldGreaterThan):
        return column > predicate.value
    if isinstance(predicate, FieldRange):
        clauses = []
        if predicate.gte is not None:
            clauses.append(column >= predicate.gte)
        if predicate.lte is not None:
            clauses.append(column <= predicate.lte)
        return and_(true(), *clauses)
    if isinstance(predicate, TextSearch):
        return column.icontains(predicate.text, autoescape=True)

    raise ValueError(f"Unsupported predicate for scalar field '{field}': {predicate.op}")


def _compile_array(predicate: Predicate, model, field: str) -> ColumnElement[bool]:
    relationship_attr, value = _link(model, field)
    if isinstance(predicate, FieldEquals):
        return relationship_attr.any(value == predicate.value)
    if isinstance(predicate, FieldNotEquals):
        return ~relationship_attr.any(value == predicate.value)
    if isinstance(predicate, FieldIn):
        return relationship_attr.any(value.in_(predicate.values))
    if isinstance(predicate, FieldExists):
        return relationship_attr.any() if predicate.exists else ~relationship_attr.any()
    raise ValueError(f"Unsupported predicate for array field '{field}': {predicate.op}")
