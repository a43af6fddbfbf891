"""Resolver surface — thin list/detail/count operations over the query layer."""
