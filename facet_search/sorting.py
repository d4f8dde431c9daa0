from __future__ import annotations

"""
Sort strategies for the filtered resource list.

Exactly one strategy applies at a time.  Every strategy relies on
Python's stable sort, so resources that compare equal keep the order the
filter produced them in (which is the fuzzy rank while a query is
active).
"""

from typing import Callable, Dict, List, Sequence

import pandas as pd
from loguru import logger

from .config import COLLATION_LANGUAGE, Resource
from .normalize import collation_key


def parse_timestamp(value) -> float:
    """
    Seconds since the epoch for ``value``; 0.0 when it is missing or
    cannot be parsed, so such resources sort as the oldest.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return 0.0
    try:
        ts = pd.to_datetime(value, utc=True, errors="coerce")
    except (TypeError, ValueError, OverflowError):
        return 0.0
    if ts is None or pd.isna(ts):
        return 0.0
    return float(ts.timestamp())


def rating_score(resource: Resource) -> float:
    """Mean of usefulness and correctness; 0 unless both are set."""
    if resource.avg_usefulness and resource.avg_correctness:
        return (resource.avg_usefulness + resource.avg_correctness) / 2
    return 0.0


def popularity_score(resource: Resource) -> int:
    return (resource.ratings_count or 0) + (resource.comments_count or 0)


def _newest(resources: List[Resource], language: str) -> List[Resource]:
    return sorted(resources, key=lambda r: parse_timestamp(r.created_at), reverse=True)


def _rating(resources: List[Resource], language: str) -> List[Resource]:
    return sorted(resources, key=rating_score, reverse=True)


def _popular(resources: List[Resource], language: str) -> List[Resource]:
    return sorted(resources, key=popularity_score, reverse=True)


def _alphabetical(resources: List[Resource], language: str) -> List[Resource]:
    return sorted(resources, key=lambda r: collation_key(r.title, language))


SORT_STRATEGIES: Dict[str, Callable[[List[Resource], str], List[Resource]]] = {
    "newest": _newest,
    "rating": _rating,
    "popular": _popular,
    "alphabetical": _alphabetical,
}


def sort_resources(
    resources: Sequence[Resource],
    sort_by: str,
    language: str = COLLATION_LANGUAGE,
) -> List[Resource]:
    """Return a new list ordered by ``sort_by``; the input is left untouched."""
    items = list(resources)
    strategy = SORT_STRATEGIES.get(sort_by)
    if strategy is None:
        logger.warning("Unknown sort strategy {!r}; keeping filter order", sort_by)
        return items
    return strategy(items, language)
