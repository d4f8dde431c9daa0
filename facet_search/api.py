from __future__ import annotations
from typing import List, Optional

"""
FastAPI application for the resource dashboard.

- The URL is the state: every request rebuilds a controller from its path
  and query string, so results are bookmarkable and shareable
- Fuzzy indices are shared across requests through an identity-keyed cache
  and only rebuilt when a new snapshot is loaded
- Items per page come from ``page_size`` or, failing that, from the
  client's ``viewport_width``; the engine itself never guesses
"""

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from pydantic import BaseModel

from .catalog_build import CatalogSnapshot, load_catalog_snapshot
from .config import (
    DEFAULT_INCLUDE_SUBTOPICS,
    DEFAULT_ITEMS_PER_PAGE,
    DEFAULT_SORT,
    LOG_DIR,
    LOG_LEVEL,
    QUERY_PARAM,
    RESOURCES_BASE_PATH,
    VIEWPORT_BREAKPOINTS,
    Article,
    DashboardView,
    HealthResponse,
    LanguageOption,
    SortOption,
    TopicNode,
)
from .controller import FilterStateController
from .facet_filter import available_languages, filter_articles
from .fuzzy_index import IndexCache
from .navigation import build_url
from .suggestions import suggest
from .topic_tree import build_topic_tree

# =============================================================================
# Viewport helper
# =============================================================================

def items_per_page_for_width(width: Optional[int]) -> int:
    """Items per page for a grid of two rows at the given viewport width."""
    if width is None:
        return DEFAULT_ITEMS_PER_PAGE
    for max_width, items in VIEWPORT_BREAKPOINTS:
        if width < max_width:
            return items
    return DEFAULT_ITEMS_PER_PAGE


# =============================================================================
# Snapshot state
# =============================================================================

_snapshot: Optional[CatalogSnapshot] = None
_index_cache = IndexCache()
_log_sink_id: Optional[int] = None


def set_snapshot(snapshot: CatalogSnapshot) -> None:
    """Swap in a freshly loaded snapshot; the previous one is dropped."""
    global _snapshot
    _snapshot = snapshot
    logger.info("Serving catalog snapshot with {} resources", len(snapshot.resources))


def _require_snapshot() -> CatalogSnapshot:
    if _snapshot is None:
        raise HTTPException(status_code=500, detail="Catalog not loaded")
    return _snapshot


# Parameters consumed by the endpoint itself rather than the dashboard URL
_ENDPOINT_PARAMS = {
    "level",
    "language",
    "sort",
    "page",
    "page_size",
    "viewport_width",
    "include_subtopics",
}


def _dashboard_url(request: Request) -> str:
    """The dashboard URL of a request: its path, ``q`` and pass-through flags."""
    extras = tuple(
        (key, value)
        for key, value in request.query_params.multi_items()
        if key != QUERY_PARAM and key not in _ENDPOINT_PARAMS
    )
    return build_url(request.url.path, request.query_params.get(QUERY_PARAM, ""), extras)


# =============================================================================
# FastAPI app + startup
# =============================================================================

app = FastAPI()
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


def add_file_sink() -> int:
    """Add the rotating log file sink once per process."""
    global _log_sink_id
    if _log_sink_id is None:
        LOG_DIR.mkdir(exist_ok=True)
        _log_sink_id = logger.add(
            LOG_DIR / "facet_search.log", level=LOG_LEVEL, rotation="10 MB", retention=5
        )
    return _log_sink_id


@app.on_event("startup")
def startup_event() -> None:
    add_file_sink()
    logger.info("Starting app warmup...")
    if _snapshot is not None:
        logger.info("Snapshot already set; skipping load")
        return
    try:
        set_snapshot(load_catalog_snapshot())
    except FileNotFoundError as e:
        logger.warning("Catalog snapshot unavailable: {}", e)
    logger.info("Warmup complete.")


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(status="healthy")


@app.get(RESOURCES_BASE_PATH, response_model=DashboardView)
@app.get(RESOURCES_BASE_PATH + "/{slugs:path}", response_model=DashboardView)
def dashboard(
    request: Request,
    level: List[str] = Query(default=[]),
    language: List[str] = Query(default=[]),
    sort: SortOption = DEFAULT_SORT,
    page: int = 1,
    page_size: Optional[int] = Query(default=None, ge=1, le=200),
    viewport_width: Optional[int] = Query(default=None, ge=0),
    include_subtopics: bool = DEFAULT_INCLUDE_SUBTOPICS,
) -> DashboardView:
    snapshot = _require_snapshot()
    size = page_size or items_per_page_for_width(viewport_width)
    controller = FilterStateController(
        resources=snapshot.resources,
        subjects=snapshot.subjects,
        topics=snapshot.topics,
        levels=snapshot.levels,
        resource_topics=snapshot.resource_topics,
        resource_levels=snapshot.resource_levels,
        articles=snapshot.articles,
        url=_dashboard_url(request),
        selected_levels=level,
        selected_languages=language,
        page=page,
        page_size=size,
        sort_by=sort,
        include_subtopics=include_subtopics,
        index_cache=_index_cache,
    )
    return controller.view


class ArticlesResponse(BaseModel):
    articles: List[Article]


@app.get("/articles", response_model=ArticlesResponse)
def articles(q: str = "") -> ArticlesResponse:
    snapshot = _require_snapshot()
    index = _index_cache.article_index(snapshot.articles)
    return ArticlesResponse(articles=filter_articles(index, q))


class SuggestionsResponse(BaseModel):
    suggestions: List[str]


@app.get("/suggestions", response_model=SuggestionsResponse)
def suggestions(q: str = "") -> SuggestionsResponse:
    snapshot = _require_snapshot()
    return SuggestionsResponse(suggestions=suggest(q, snapshot.resources, snapshot.articles))


@app.get("/languages", response_model=List[LanguageOption])
def languages() -> List[LanguageOption]:
    return available_languages(_require_snapshot().resources)


@app.get("/subjects/{subject_slug}/topics", response_model=List[TopicNode])
def subject_topics(subject_slug: str) -> List[TopicNode]:
    snapshot = _require_snapshot()
    subject = next((s for s in snapshot.subjects if s.slug == subject_slug), None)
    if subject is None:
        raise HTTPException(status_code=404, detail=f"Unknown subject {subject_slug!r}")
    return build_topic_tree(t for t in snapshot.topics if t.subject_id == subject.id)
