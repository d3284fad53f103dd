# (c) Nelen & Schuurmans

from collections.abc import Set

__all__ = ["DEFAULT_REQUESTED_FIELDS", "needed_queries"]


DEFAULT_REQUESTED_FIELDS = frozenset({"edges", "pageInfo"})


def needed_queries(requested_fields: Set[str]) -> tuple[bool, bool]:
    """Return (need_edges, need_count) for a set of requested connection fields"""
    need_edges = "pageInfo" in requested_fields or "edges" in requested_fields
    need_count = "count" in requested_fields
    return need_edges, need_count
