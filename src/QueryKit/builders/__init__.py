"""Fluent, immutable query builders.

Exports the relational and search builders along with their shortcut
constructors.
"""

from __future__ import annotations

from QueryKit.builders.relational import RelationalQueryBuilder, select, select_all
from QueryKit.builders.search import BoolQueryBuilder, SearchQueryBuilder, match_all, search

__all__ = [
    "RelationalQueryBuilder",
    "SearchQueryBuilder",
    "BoolQueryBuilder",
    "select",
    "select_all",
    "search",
    "match_all",
]
