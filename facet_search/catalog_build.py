from __future__ import annotations

"""
Load a catalog snapshot exported from the resource and taxonomy stores.

A snapshot is either one JSON file holding a list of records per table,
or a directory with one ``<table>.csv`` per table.  The tables are:

- ``resources``, ``subjects``, ``topics``, ``levels``, ``articles``
- ``resource_topics`` and ``resource_levels`` (association rows keyed by
  ``resource_id``)

Column names vary between exports (the dashboard views say
``subject_slug`` where the subjects table says ``slug``), so each table
is standardised to a canonical schema before rows are mapped to
schemas.  The engine itself never fetches: callers load a snapshot and
hand its lists to the controller.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, TypeVar

import pandas as pd
from loguru import logger

from .config import (
    CATALOG_SNAPSHOT_PATH,
    Article,
    Level,
    Resource,
    ResourceLevel,
    ResourceTopic,
    Subject,
    Topic,
)
from .mapping import (
    to_article,
    to_level,
    to_resource,
    to_resource_level,
    to_resource_topic,
    to_subject,
    to_topic,
)

T = TypeVar("T")

TABLES = [
    "resources",
    "subjects",
    "topics",
    "levels",
    "resource_topics",
    "resource_levels",
    "articles",
]


# ---------------------------
# Column detection / standardisation
# ---------------------------

COLUMN_CANDIDATES: Dict[str, Dict[str, List[str]]] = {
    "resources": {
        "id": ["id", "resource_id"],
        "title": ["title", "name"],
        "description": ["description", "summary"],
        "subject_id": ["subject_id", "subject"],
        "language": ["language", "lang"],
        "created_at": ["created_at", "created", "date_added"],
        "avg_usefulness": ["avg_usefulness"],
        "avg_correctness": ["avg_correctness"],
        "ratings_count": ["ratings_count", "rating_count"],
        "comments_count": ["comments_count", "comment_count"],
        "url": ["url", "link"],
        "type": ["type", "resource_type"],
    },
    "subjects": {
        "id": ["id", "subject_id"],
        "name": ["name", "subject_name"],
        "slug": ["slug", "subject_slug"],
    },
    "topics": {
        "id": ["id", "topic_id"],
        "subject_id": ["subject_id"],
        "name": ["name", "topic_name"],
        "slug": ["slug", "topic_slug"],
        "parent_topic_id": ["parent_topic_id", "parent_id"],
        "order_index": ["order_index", "order", "position"],
    },
    "levels": {
        "id": ["id", "level_id"],
        "name": ["name", "level_name"],
        "slug": ["slug", "level_slug"],
    },
    "resource_topics": {
        "resource_id": ["resource_id"],
        "topic_id": ["topic_id"],
        "topic_name": ["topic_name", "name"],
        "topic_slug": ["topic_slug", "slug"],
        "parent_topic_id": ["parent_topic_id", "parent_id"],
    },
    "resource_levels": {
        "resource_id": ["resource_id"],
        "level_id": ["level_id", "id"],
        "name": ["level_name", "name"],
        "slug": ["level_slug", "slug"],
    },
    "articles": {
        "slug": ["slug"],
        "title": ["title"],
        "excerpt": ["excerpt", "summary"],
        "date": ["date", "published_at"],
        "author": ["author"],
    },
}

REQUIRED_COLUMNS: Dict[str, List[str]] = {
    "resources": ["id", "title"],
    "subjects": ["id", "slug"],
    "topics": ["id", "subject_id", "name", "slug"],
    "levels": ["id"],
    "resource_topics": ["resource_id"],
    "resource_levels": ["resource_id", "level_id"],
    "articles": ["slug", "title"],
}


def standardise_columns(df: pd.DataFrame, table: str) -> pd.DataFrame:
    """
    Rename the columns of one raw table to the canonical schema.

    The first candidate present wins (exact match, then
    case-insensitive).  Missing required columns are logged; rows of such
    a table are dropped later rather than failing the whole load.
    """
    col_map: Dict[str, str] = {}
    lower_to_original = {str(c).lower(): c for c in df.columns}
    taken = set()

    for canon, candidates in COLUMN_CANDIDATES.get(table, {}).items():
        for candidate in candidates:
            if candidate in df.columns and candidate not in taken:
                col_map[candidate] = canon
                taken.add(candidate)
                break
            original = lower_to_original.get(candidate.lower())
            if original is not None and original not in taken:
                col_map[original] = canon
                taken.add(original)
                break

    df_std = df.rename(columns=col_map)
    missing = [c for c in REQUIRED_COLUMNS.get(table, []) if c not in df_std.columns]
    if missing and len(df_std):
        logger.warning("Table {} is missing required columns: {}", table, missing)
    return df_std


# ---------------------------
# Snapshot container
# ---------------------------

@dataclass
class CatalogSnapshot:
    resources: List[Resource] = field(default_factory=list)
    subjects: List[Subject] = field(default_factory=list)
    topics: List[Topic] = field(default_factory=list)
    levels: List[Level] = field(default_factory=list)
    resource_topics: Dict[str, List[ResourceTopic]] = field(default_factory=dict)
    resource_levels: Dict[str, List[ResourceLevel]] = field(default_factory=dict)
    articles: List[Article] = field(default_factory=list)


def _map_rows(df: pd.DataFrame, table: str, mapper: Callable[[pd.Series], T]) -> List[T]:
    required = REQUIRED_COLUMNS.get(table, [])
    if any(c not in df.columns for c in required):
        return []
    df = df.dropna(subset=required)
    out: List[T] = []
    for _, row in df.iterrows():
        try:
            out.append(mapper(row))
        except Exception as e:
            logger.warning("Skipping malformed {} row: {}", table, e)
    return out


def _group_by_resource(df: pd.DataFrame, table: str, mapper: Callable[[pd.Series], T]) -> Dict[str, List[T]]:
    grouped: Dict[str, List[T]] = {}
    required = REQUIRED_COLUMNS.get(table, [])
    if any(c not in df.columns for c in required):
        return grouped
    for _, row in df.dropna(subset=required).iterrows():
        resource_id = str(row["resource_id"]).strip()
        try:
            grouped.setdefault(resource_id, []).append(mapper(row))
        except Exception as e:
            logger.warning("Skipping malformed {} row: {}", table, e)
    return grouped


def build_snapshot(tables: Dict[str, pd.DataFrame]) -> CatalogSnapshot:
    """Standardise raw tables and map them into a :class:`CatalogSnapshot`."""
    std = {
        name: standardise_columns(tables.get(name, pd.DataFrame()), name)
        for name in TABLES
    }

    topics = _map_rows(std["topics"], "topics", to_topic)
    levels = _map_rows(std["levels"], "levels", to_level)
    topics_by_id = {t.id: t for t in topics}
    levels_by_id = {level.id: level for level in levels}

    snapshot = CatalogSnapshot(
        resources=_map_rows(std["resources"], "resources", to_resource),
        subjects=_map_rows(std["subjects"], "subjects", to_subject),
        topics=topics,
        levels=levels,
        resource_topics=_group_by_resource(
            std["resource_topics"],
            "resource_topics",
            lambda row: to_resource_topic(row, topics_by_id),
        ),
        resource_levels=_group_by_resource(
            std["resource_levels"],
            "resource_levels",
            lambda row: to_resource_level(row, levels_by_id),
        ),
        articles=_map_rows(std["articles"], "articles", to_article),
    )
    logger.info(
        "Catalog snapshot: {} resources, {} subjects, {} topics, {} levels, {} articles",
        len(snapshot.resources),
        len(snapshot.subjects),
        len(snapshot.topics),
        len(snapshot.levels),
        len(snapshot.articles),
    )
    return snapshot


# ---------------------------
# IO helpers
# ---------------------------

def _read_json_tables(path: Path) -> Dict[str, pd.DataFrame]:
    with path.open("r", encoding="utf-8") as f:
        payload = json.load(f)
    if not isinstance(payload, dict):
        raise ValueError(f"Expected a JSON object of tables in {path}")
    tables: Dict[str, pd.DataFrame] = {}
    for name in TABLES:
        records = payload.get(name) or []
        tables[name] = pd.DataFrame.from_records(records) if records else pd.DataFrame()
    return tables


def _read_csv_tables(directory: Path) -> Dict[str, pd.DataFrame]:
    tables: Dict[str, pd.DataFrame] = {}
    for name in TABLES:
        csv_path = directory / f"{name}.csv"
        if csv_path.exists():
            # Keep ids as strings ("007" must not become 7)
            tables[name] = pd.read_csv(csv_path, dtype=str)
        else:
            logger.warning("No {} table in {}; treating it as empty", name, directory)
            tables[name] = pd.DataFrame()
    return tables


def load_catalog_snapshot(path: Optional[Path] = None) -> CatalogSnapshot:
    """
    Load a snapshot from a JSON file or a directory of CSV files.
    """
    path = Path(path) if path is not None else CATALOG_SNAPSHOT_PATH
    if not path.exists():
        raise FileNotFoundError(f"No catalog snapshot at {path}")

    logger.info("Loading catalog snapshot from {}", path)
    if path.is_dir():
        tables = _read_csv_tables(path)
    else:
        tables = _read_json_tables(path)
    return build_snapshot(tables)


if __name__ == "__main__":
    # python -m facet_search.catalog_build
    snap = load_catalog_snapshot()
    print(f"{len(snap.resources)} resources, {len(snap.topics)} topics")
