from __future__ import annotations

"""
URL handling for the dashboard.

Paths look like ``/{base}/{subjectSlug}?/{topicSlug}?/{subtopicSlug}?``
and the free-text query travels in the ``q`` parameter.  Other query
parameters (``favorites=true``, ``rated=true``, ...) belong to the
surrounding dashboard; they are carried through untouched.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple
from urllib.parse import parse_qsl, quote, unquote, urlencode, urlsplit

from .config import QUERY_PARAM, RESOURCES_BASE_PATH


@dataclass(frozen=True)
class Location:
    path: str
    subject_slug: Optional[str] = None
    topic_slug: Optional[str] = None
    subtopic_slug: Optional[str] = None
    query: str = ""
    extra_params: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)

    @property
    def url(self) -> str:
        return build_url(self.path, self.query, self.extra_params)


def parse_location(url: str, base_path: str = RESOURCES_BASE_PATH) -> Location:
    """Split a dashboard URL into slugs, query and pass-through params.

    Paths outside ``base_path`` select nothing.
    """
    parts = urlsplit(url or "")
    path = parts.path or "/"
    query = ""
    extras: List[Tuple[str, str]] = []
    for key, value in parse_qsl(parts.query, keep_blank_values=True):
        if key == QUERY_PARAM:
            query = value
        else:
            extras.append((key, value))

    base_segments = [s for s in base_path.split("/") if s]
    segments = [unquote(s) for s in path.split("/") if s]
    slugs: List[str] = []
    if segments[: len(base_segments)] == base_segments:
        slugs = segments[len(base_segments):][:3]

    padded = slugs + [None] * (3 - len(slugs))
    return Location(
        path=path,
        subject_slug=padded[0],
        topic_slug=padded[1],
        subtopic_slug=padded[2],
        query=query,
        extra_params=tuple(extras),
    )


def build_path(*slugs: Optional[str], base_path: str = RESOURCES_BASE_PATH) -> str:
    """``build_path("matematyka", "algebra")`` -> ``/zasoby/matematyka/algebra``."""
    path = "/" + base_path.strip("/")
    for slug in slugs:
        if not slug:
            break
        path += "/" + quote(slug, safe="")
    return path


def build_url(path: str, query: str = "", extra_params: Tuple[Tuple[str, str], ...] = ()) -> str:
    """Attach ``q`` (only when non-empty) and pass-through params to ``path``."""
    params: List[Tuple[str, str]] = list(extra_params)
    if query:
        params.insert(0, (QUERY_PARAM, query))
    if not params:
        return path
    return f"{path}?{urlencode(params)}"
