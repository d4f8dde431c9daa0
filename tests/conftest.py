"""Pytest configuration and shared fixtures."""

import json
from pathlib import Path
from typing import Any, Dict, List

import pytest
from loguru import logger

from facet_search.catalog_build import CatalogSnapshot
from facet_search.config import (
    Article,
    Level,
    Resource,
    ResourceLevel,
    ResourceTopic,
    Subject,
    Topic,
)
from facet_search.controller import FilterStateController

SUBJECTS = [
    Subject(id="s-math", name="Matematyka", slug="matematyka"),
    Subject(id="s-phys", name="Fizyka", slug="fizyka"),
]

TOPICS = [
    Topic(id="t-alg", subject_id="s-math", name="Algebra", slug="algebra", order_index=1),
    Topic(id="t-lin", subject_id="s-math", name="Równania liniowe", slug="rownania-liniowe",
          parent_topic_id="t-alg", order_index=1),
    Topic(id="t-quad", subject_id="s-math", name="Równania kwadratowe", slug="rownania-kwadratowe",
          parent_topic_id="t-alg", order_index=0),
    Topic(id="t-geo", subject_id="s-math", name="Geometria", slug="geometria", order_index=0),
    Topic(id="t-mech", subject_id="s-phys", name="Mechanika", slug="mechanika", order_index=0),
]

LEVELS = [
    Level(id="l-basic", name="Podstawowy", slug="podstawowy"),
    Level(id="l-ext", name="Rozszerzony", slug="rozszerzony"),
]

RESOURCES = [
    Resource(id="r1", title="Pythagorean Theorem Explained", description="Proof and worked examples",
             subject_id="s-math", language="en", created_at="2024-01-05T10:00:00Z",
             avg_usefulness=4.0, avg_correctness=5.0, ratings_count=10, comments_count=2),
    Resource(id="r2", title="Równania liniowe krok po kroku", subject_id="s-math", language="pl",
             created_at="2024-03-01T10:00:00Z", avg_usefulness=5.0, avg_correctness=5.0,
             ratings_count=3, comments_count=1),
    Resource(id="r3", title="Równania kwadratowe", subject_id="s-math", language="pl",
             created_at="2023-11-11T10:00:00Z", avg_usefulness=3.0, avg_correctness=4.0,
             ratings_count=20, comments_count=5),
    Resource(id="r4", title="Algebra basics", subject_id="s-math", language="en",
             created_at="2024-02-10T10:00:00Z", avg_usefulness=4.0, ratings_count=1),
    Resource(id="r5", title="Łamigłówki logiczne", subject_id="s-math", language="pl",
             created_at="2022-06-01T10:00:00Z"),
    Resource(id="r6", title="Newton's laws", subject_id="s-phys", language="en",
             created_at="2024-04-01T10:00:00Z", avg_usefulness=5.0, avg_correctness=4.0,
             ratings_count=7, comments_count=7),
    Resource(id="r7", title="Kinematyka", subject_id="s-phys", language="pl",
             created_at="2023-01-01T10:00:00Z"),
    Resource(id="r8", title="Zadania z geometrii", subject_id="s-math", language="pl",
             created_at="2023-05-05T10:00:00Z"),
    Resource(id="r9", title="Ćwiczenia z algebry", subject_id="s-math"),
    Resource(id="r10", title="Ułamki", subject_id="s-math", language="de", created_at="not a date"),
]

RESOURCE_TOPICS = {
    "r1": [ResourceTopic(topic_id="t-geo", topic_name="Geometria", topic_slug="geometria")],
    "r2": [ResourceTopic(topic_id="t-lin", topic_name="Równania liniowe", topic_slug="rownania-liniowe",
                         parent_topic_id="t-alg")],
    "r3": [ResourceTopic(topic_id="t-quad", topic_name="Równania kwadratowe", topic_slug="rownania-kwadratowe",
                         parent_topic_id="t-alg")],
    "r4": [ResourceTopic(topic_id="t-alg", topic_name="Algebra", topic_slug="algebra")],
    "r6": [ResourceTopic(topic_id="t-mech", topic_name="Mechanika", topic_slug="mechanika")],
    "r7": [ResourceTopic(topic_id="t-mech", topic_name="Mechanika", topic_slug="mechanika")],
    "r8": [ResourceTopic(topic_id="t-geo", topic_name="Geometria", topic_slug="geometria")],
    "r9": [ResourceTopic(topic_id="t-alg", topic_name="Algebra", topic_slug="algebra")],
}

RESOURCE_LEVELS = {
    "r1": [ResourceLevel(id="l-basic", name="Podstawowy")],
    "r2": [ResourceLevel(id="l-basic", name="Podstawowy"), ResourceLevel(id="l-ext", name="Rozszerzony")],
    "r3": [ResourceLevel(id="l-ext", name="Rozszerzony")],
    "r6": [ResourceLevel(id="l-basic", name="Podstawowy")],
    "r8": [ResourceLevel(id="l-basic", name="Podstawowy")],
}

ARTICLES = [
    Article(slug="jak-uczyc-sie-algebry", title="Jak uczyć się algebry", excerpt="Porady dotyczące równań"),
    Article(slug="pythagorean-puzzles", title="Pythagorean puzzles"),
    Article(slug="fizyka-na-co-dzien", title="Fizyka na co dzień", excerpt="Mechanika wokół nas"),
]


@pytest.fixture
def snapshot() -> CatalogSnapshot:
    """A fresh copy of the sample catalog: two subjects, nested algebra topics, ten resources."""
    return CatalogSnapshot(
        resources=list(RESOURCES),
        subjects=list(SUBJECTS),
        topics=list(TOPICS),
        levels=list(LEVELS),
        resource_topics={k: list(v) for k, v in RESOURCE_TOPICS.items()},
        resource_levels={k: list(v) for k, v in RESOURCE_LEVELS.items()},
        articles=list(ARTICLES),
    )


@pytest.fixture
def make_controller(snapshot: CatalogSnapshot):
    """Factory building a controller over the sample snapshot."""

    def _make(url: str = "/zasoby", **kwargs: Any) -> FilterStateController:
        data: Dict[str, Any] = dict(
            resources=snapshot.resources,
            subjects=snapshot.subjects,
            topics=snapshot.topics,
            levels=snapshot.levels,
            resource_topics=snapshot.resource_topics,
            resource_levels=snapshot.resource_levels,
            articles=snapshot.articles,
        )
        data.update(kwargs)
        return FilterStateController(url=url, base_path="/zasoby", **data)

    return _make


def snapshot_tables(snapshot: CatalogSnapshot) -> Dict[str, List[Dict[str, Any]]]:
    """Flatten a snapshot into the record lists of a JSON export."""
    resource_topics = [
        {"resource_id": rid, **rt.model_dump()}
        for rid, rows in snapshot.resource_topics.items()
        for rt in rows
    ]
    resource_levels = [
        {"resource_id": rid, "level_id": rl.id, "level_name": rl.name, "level_slug": rl.slug}
        for rid, rows in snapshot.resource_levels.items()
        for rl in rows
    ]
    return {
        "resources": [r.model_dump() for r in snapshot.resources],
        "subjects": [s.model_dump() for s in snapshot.subjects],
        "topics": [t.model_dump() for t in snapshot.topics],
        "levels": [level.model_dump() for level in snapshot.levels],
        "resource_topics": resource_topics,
        "resource_levels": resource_levels,
        "articles": [a.model_dump() for a in snapshot.articles],
    }


@pytest.fixture
def snapshot_json(tmp_path: Path, snapshot: CatalogSnapshot) -> Path:
    path = tmp_path / "catalog_snapshot.json"
    path.write_text(json.dumps(snapshot_tables(snapshot), ensure_ascii=False), encoding="utf-8")
    return path


@pytest.fixture
def log_messages():
    """Collect loguru messages emitted during a test."""
    messages: List[str] = []
    handler_id = logger.add(lambda m: messages.append(m.record["message"]), level="DEBUG")
    yield messages
    logger.remove(handler_id)


@pytest.fixture
def snapshot_records(snapshot: CatalogSnapshot) -> Dict[str, List[Dict[str, Any]]]:
    return snapshot_tables(snapshot)
