from __future__ import annotations

"""
Weighted fuzzy-matching indices over resources and editorial articles.

Each index keeps, per field, a list of pre-folded strings pointing back
at the item they came from.  A query is scored against every field with
rapidfuzz's ``WRatio`` (which ignores where in the field the match sits;
queries under four characters use ``token_ratio`` and only match words),
the field score is scaled by the field weight, and an item keeps its best
weighted score.  Items under the cutoff are dropped; the rest come back
best first, with ties kept in input order.

Example::

    index = build_resource_index(resources, resource_topics)
    for resource, score in index.search("pytaghoras"):
        ...
"""

from typing import Callable, Dict, Generic, List, Mapping, Optional, Sequence, Tuple, TypeVar

from loguru import logger
from rapidfuzz import fuzz, process, utils

from .config import (
    ARTICLE_FIELD_WEIGHTS,
    FUZZY_CUTOFF,
    FUZZY_SHORT_QUERY_CHARS,
    RESOURCE_FIELD_WEIGHTS,
    Article,
    Resource,
    ResourceTopic,
)
from .normalize import clamp_text_length, fold_diacritics, is_blank_query

T = TypeVar("T")

FieldGetter = Callable[[T], Sequence[str]]


def fold_for_matching(text: str) -> str:
    """Lowercase, strip diacritics and punctuation so 'Równania!' == 'rownania'."""
    return utils.default_process(fold_diacritics(clamp_text_length(text or "")))


class FuzzyIndex(Generic[T]):
    """
    Fuzzy index over ``items``.

    ``fields`` maps a field name to a getter returning the strings of
    that field for one item (a field may hold several strings, e.g. a
    resource's topic names).  ``weights`` holds one weight per field.
    """

    def __init__(
        self,
        items: Sequence[T],
        fields: Mapping[str, FieldGetter],
        weights: Mapping[str, float],
        cutoff: float = FUZZY_CUTOFF,
    ):
        self.items = list(items)
        self.weights = dict(weights)
        self.cutoff = float(cutoff)
        self._last: Optional[Tuple[str, List[Tuple[T, float]]]] = None
        # field -> (item positions, folded strings)
        self._fields: Dict[str, Tuple[List[int], List[str]]] = {}
        for name, getter in fields.items():
            positions: List[int] = []
            texts: List[str] = []
            for pos, item in enumerate(self.items):
                for value in getter(item):
                    folded = fold_for_matching(value)
                    if folded:
                        positions.append(pos)
                        texts.append(folded)
            self._fields[name] = (positions, texts)

    def __len__(self) -> int:
        return len(self.items)

    def search(self, query: str) -> List[Tuple[T, float]]:
        """Return ``(item, score)`` pairs above the cutoff, best first."""
        if is_blank_query(query):
            return []
        q = fold_for_matching(query)
        if not q:
            return []
        last = self._last
        if last is not None and last[0] == q:
            return list(last[1])
        ranked = self._rank(q)
        self._last = (q, ranked)
        return list(ranked)

    def _rank(self, q: str) -> List[Tuple[T, float]]:
        # short queries only match whole words
        scorer = fuzz.token_ratio if len(q) < FUZZY_SHORT_QUERY_CHARS else fuzz.WRatio
        best: Dict[int, float] = {}
        for name, (positions, texts) in self._fields.items():
            weight = self.weights.get(name, 0.0)
            if weight <= 0 or weight * 100.0 < self.cutoff:
                continue
            raw_cutoff = min(100.0, self.cutoff / weight)
            matches = process.extract(
                q,
                texts,
                scorer=scorer,
                processor=None,
                limit=None,
                score_cutoff=raw_cutoff,
            )
            for _, score, idx in matches:
                pos = positions[idx]
                weighted = float(score) * weight
                if weighted > best.get(pos, 0.0):
                    best[pos] = weighted

        ranked = [
            (self.items[pos], best[pos])
            for pos in range(len(self.items))
            if best.get(pos, 0.0) >= self.cutoff
        ]
        ranked.sort(key=lambda hit: -hit[1])
        return ranked


# ---------------------------
# Resource and article indices
# ---------------------------

def build_resource_index(
    resources: Sequence[Resource],
    resource_topics: Mapping[str, Sequence[ResourceTopic]],
    cutoff: float = FUZZY_CUTOFF,
) -> FuzzyIndex[Resource]:
    """Index resources on title, associated topic names and description."""
    fields: Dict[str, FieldGetter] = {
        "title": lambda r: [r.title],
        "topic_names": lambda r: [t.topic_name for t in resource_topics.get(r.id, [])],
        "description": lambda r: [r.description] if r.description else [],
    }
    index = FuzzyIndex(resources, fields, RESOURCE_FIELD_WEIGHTS, cutoff)
    logger.info("Built resource fuzzy index over {} resources", len(index))
    return index


def build_article_index(
    articles: Sequence[Article],
    cutoff: float = FUZZY_CUTOFF,
) -> FuzzyIndex[Article]:
    """Index articles on title and excerpt with a shared weight."""
    fields: Dict[str, FieldGetter] = {
        "title": lambda a: [a.title],
        "excerpt": lambda a: [a.excerpt] if a.excerpt else [],
    }
    index = FuzzyIndex(articles, fields, ARTICLE_FIELD_WEIGHTS, cutoff)
    logger.info("Built article fuzzy index over {} articles", len(index))
    return index


class IndexCache:
    """
    Rebuilds an index only when the lists it was built from change.

    Inputs are compared by identity: the caller hands in a fresh list
    whenever the store delivers a new snapshot.  The cache keeps a
    reference to the inputs so their identity stays meaningful.
    """

    def __init__(self, cutoff: float = FUZZY_CUTOFF):
        self.cutoff = cutoff
        self._resource_inputs: Optional[Tuple[object, object]] = None
        self._resource_index: Optional[FuzzyIndex[Resource]] = None
        self._article_inputs: Optional[object] = None
        self._article_index: Optional[FuzzyIndex[Article]] = None

    def resource_index(
        self,
        resources: Sequence[Resource],
        resource_topics: Mapping[str, Sequence[ResourceTopic]],
    ) -> FuzzyIndex[Resource]:
        inputs = self._resource_inputs
        if self._resource_index is None or inputs is None or inputs[0] is not resources or inputs[1] is not resource_topics:
            self._resource_index = build_resource_index(resources, resource_topics, self.cutoff)
            self._resource_inputs = (resources, resource_topics)
        return self._resource_index

    def article_index(self, articles: Sequence[Article]) -> FuzzyIndex[Article]:
        if self._article_index is None or self._article_inputs is not articles:
            self._article_index = build_article_index(articles, self.cutoff)
            self._article_inputs = articles
        return self._article_index
