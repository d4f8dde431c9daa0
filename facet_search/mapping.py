from __future__ import annotations

"""
Mapping utilities from snapshot rows to schemas.

This module converts rows of the standardised snapshot DataFrames into
the strict Pydantic objects defined in :mod:`facet_search.config`.
Every field is coerced: the store is allowed to send NaN,
numbers where strings are expected, or timestamps as objects.
"""

import math
from typing import Any, Dict, Optional

import pandas as pd
from loguru import logger

from .config import Article, Level, Resource, ResourceLevel, ResourceTopic, Subject, Topic
from .normalize import basic_clean


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return value is pd.NaT


def _str(row: pd.Series, key: str, default: str = "") -> str:
    value = row.get(key)
    if _is_missing(value):
        return default
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def _opt_str(row: pd.Series, key: str) -> Optional[str]:
    value = _str(row, key)
    return value or None


def _opt_float(row: pd.Series, key: str) -> Optional[float]:
    value = row.get(key)
    if _is_missing(value) or value == "":
        return None
    try:
        out = float(value)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(out) else out


def _int(row: pd.Series, key: str, default: int = 0) -> int:
    value = _opt_float(row, key)
    if value is None:
        return default
    return int(value)


def _timestamp(row: pd.Series, key: str) -> Optional[str]:
    value = row.get(key)
    if _is_missing(value):
        return None
    if isinstance(value, pd.Timestamp):
        return value.isoformat()
    return str(value).strip() or None


def to_subject(row: pd.Series) -> Subject:
    return Subject(id=_str(row, "id"), name=_str(row, "name"), slug=_str(row, "slug"))


def to_topic(row: pd.Series) -> Topic:
    return Topic(
        id=_str(row, "id"),
        subject_id=_str(row, "subject_id"),
        name=_str(row, "name"),
        slug=_str(row, "slug"),
        parent_topic_id=_opt_str(row, "parent_topic_id"),
        order_index=_int(row, "order_index"),
    )


def to_level(row: pd.Series) -> Level:
    return Level(id=_str(row, "id"), name=_str(row, "name"), slug=_str(row, "slug"))


def to_resource(row: pd.Series) -> Resource:
    """Convert one snapshot row into a :class:`Resource`.

    Titles and descriptions go through :func:`basic_clean` so HTML from
    the editor never reaches the fuzzy index.
    """
    try:
        return Resource(
            id=_str(row, "id"),
            title=basic_clean(_str(row, "title")),
            description=basic_clean(_str(row, "description")),
            subject_id=_str(row, "subject_id"),
            language=(_opt_str(row, "language") or "").lower() or None,
            created_at=_timestamp(row, "created_at"),
            avg_usefulness=_opt_float(row, "avg_usefulness"),
            avg_correctness=_opt_float(row, "avg_correctness"),
            ratings_count=max(0, _int(row, "ratings_count")),
            comments_count=max(0, _int(row, "comments_count")),
            url=_str(row, "url"),
            type=_str(row, "type"),
        )
    except Exception as e:
        logger.exception("Error mapping row to resource: {}", e)
        raise


def to_resource_topic(row: pd.Series, topics: Dict[str, Topic]) -> ResourceTopic:
    """Association row -> :class:`ResourceTopic`, filling gaps from the topic list."""
    topic_id = _str(row, "topic_id")
    topic = topics.get(topic_id)
    return ResourceTopic(
        topic_id=topic_id,
        topic_name=_str(row, "topic_name") or (topic.name if topic else ""),
        topic_slug=_str(row, "topic_slug") or (topic.slug if topic else ""),
        parent_topic_id=_opt_str(row, "parent_topic_id") or (topic.parent_topic_id if topic else None),
    )


def to_resource_level(row: pd.Series, levels: Dict[str, Level]) -> ResourceLevel:
    level_id = _str(row, "level_id")
    level = levels.get(level_id)
    return ResourceLevel(
        id=level_id,
        name=_str(row, "name") or (level.name if level else ""),
        slug=_str(row, "slug") or (level.slug if level else ""),
    )


def to_article(row: pd.Series) -> Article:
    return Article(
        slug=_str(row, "slug"),
        title=basic_clean(_str(row, "title")),
        excerpt=basic_clean(_str(row, "excerpt")),
        date=_str(row, "date"),
        author=_str(row, "author"),
    )
