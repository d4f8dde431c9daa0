from __future__ import annotations

"""
Title suggestions for the search box.
"""

from typing import Iterable, List

from .config import SUGGESTION_LIMIT, SUGGESTION_MIN_CHARS, Article, Resource


def suggest(
    query: str,
    resources: Iterable[Resource],
    articles: Iterable[Article] = (),
    limit: int = SUGGESTION_LIMIT,
    min_chars: int = SUGGESTION_MIN_CHARS,
) -> List[str]:
    """
    Resource titles, then article titles, containing ``query``
    (case-insensitive).  Duplicates are dropped and at most ``limit``
    titles are returned; queries shorter than ``min_chars`` get nothing.
    """
    needle = (query or "").strip().casefold()
    if len(needle) < min_chars:
        return []

    titles = [r.title for r in resources] + [a.title for a in articles]
    out: List[str] = []
    seen = set()
    for title in titles:
        if needle not in title.casefold() or title in seen:
            continue
        seen.add(title)
        out.append(title)
        if len(out) >= limit:
            break
    return out
