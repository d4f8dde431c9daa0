from __future__ import annotations

"""
Facet filtering over an in-memory resource list.

Facets (subject, topic, level, language) combine with logical AND.  The
filter never reorders: it is a pure set reduction over whichever base
list it receives, which is the fuzzy-ranked hit list while a query is
active and the full resource list otherwise.
"""

from typing import Collection, Iterable, List, Mapping, Optional, Sequence, Set

from loguru import logger

from .config import (
    LANGUAGE_NAMES,
    Article,
    FacetSelection,
    LanguageOption,
    Resource,
    ResourceLevel,
    ResourceTopic,
    TopicNode,
)
from .descendants import resolve_topic_names
from .fuzzy_index import FuzzyIndex
from .normalize import is_blank_query


# ---------------------------
# Per-facet predicates
# ---------------------------

def matches_subject(resource: Resource, subject_id: Optional[str]) -> bool:
    return not subject_id or resource.subject_id == subject_id


def matches_topics(
    resource_topics: Sequence[ResourceTopic],
    topic_names: Optional[Collection[str]],
) -> bool:
    """``topic_names`` is None when no topic is selected."""
    if topic_names is None:
        return True
    return any(t.topic_name in topic_names for t in resource_topics)


def matches_levels(resource_levels: Sequence[ResourceLevel], level_ids: Collection[str]) -> bool:
    if not level_ids:
        return True
    return any(level.id in level_ids for level in resource_levels)


def matches_languages(resource: Resource, languages: Collection[str]) -> bool:
    if not languages:
        return True
    return bool(resource.language) and resource.language in languages


# ---------------------------
# Resource filtering
# ---------------------------

def search_base(
    resources: Sequence[Resource],
    index: Optional[FuzzyIndex[Resource]],
    query: str,
) -> List[Resource]:
    """
    The list facets are applied to: fuzzy hits (best first) when the
    query is non-blank, every resource in input order otherwise.
    """
    if is_blank_query(query) or index is None:
        return list(resources)
    hits = [resource for resource, _ in index.search(query)]
    logger.info("Fuzzy search for {!r} matched {} resources", query, len(hits))
    return hits


def filter_resources(
    base: Iterable[Resource],
    selection: FacetSelection,
    topic_tree: Sequence[TopicNode],
    resource_topics: Mapping[str, Sequence[ResourceTopic]],
    resource_levels: Mapping[str, Sequence[ResourceLevel]],
) -> List[Resource]:
    """Keep the resources of ``base`` that satisfy every active facet."""
    topic_names: Optional[Set[str]] = None
    if selection.topic_ids:
        topic_names = resolve_topic_names(
            topic_tree, selection.topic_ids, selection.include_subtopics
        )
    level_ids = set(selection.level_ids)
    languages = set(selection.languages)

    out: List[Resource] = []
    for resource in base:
        if not matches_subject(resource, selection.subject_id):
            continue
        if not matches_topics(resource_topics.get(resource.id, []), topic_names):
            continue
        if not matches_levels(resource_levels.get(resource.id, []), level_ids):
            continue
        if not matches_languages(resource, languages):
            continue
        out.append(resource)
    return out


def filter_articles(index: Optional[FuzzyIndex[Article]], query: str) -> List[Article]:
    """Articles related to ``query``; empty when there is no query."""
    if index is None or is_blank_query(query):
        return []
    return [article for article, _ in index.search(query)]


# ---------------------------
# Facet options
# ---------------------------

def available_languages(resources: Iterable[Resource]) -> List[LanguageOption]:
    """Distinct language codes present in ``resources``, sorted, with display names."""
    codes = sorted({r.language for r in resources if r.language})
    return [
        LanguageOption(code=code, name=LANGUAGE_NAMES.get(code.lower(), code))
        for code in codes
    ]


def has_active_filters(selection: FacetSelection) -> bool:
    return bool(
        selection.subject_id
        or selection.topic_ids
        or selection.level_ids
        or selection.languages
        or not is_blank_query(selection.query)
    )
