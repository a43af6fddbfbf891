"""Predicate algebra, filters, the conversation query builder and aggregation."""
