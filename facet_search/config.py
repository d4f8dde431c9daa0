from __future__ import annotations
"""
Configuration for the resource catalog facet search engine.
"""

import os
from pathlib import Path
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field

# Paths
PROJECT_ROOT = Path(__file__).resolve().parents[1]
DATA_DIR = PROJECT_ROOT / "data"
CATALOG_SNAPSHOT_PATH = Path(
    os.getenv("FACET_SEARCH_SNAPSHOT", str(DATA_DIR / "catalog_snapshot.json"))
)

# URL surface
RESOURCES_BASE_PATH = "/" + os.getenv("FACET_SEARCH_BASE_PATH", "/zasoby").strip("/")
QUERY_PARAM = "q"

# Fuzzy matching (rapidfuzz scores are 0..100)
DEFAULT_FUZZY_CUTOFF = 65.0
# Shorter queries are matched against whole words only
FUZZY_SHORT_QUERY_CHARS = 4
FUZZY_CUTOFF = float(os.getenv("FACET_SEARCH_FUZZY_CUTOFF", str(DEFAULT_FUZZY_CUTOFF)))

# Field weights: title > topic names > description
RESOURCE_FIELD_WEIGHTS: Dict[str, float] = {
    "title": 1.0,
    "topic_names": 0.85,
    "description": 0.7,
}
ARTICLE_FIELD_WEIGHTS: Dict[str, float] = {
    "title": 1.0,
    "excerpt": 1.0,
}

# Sorting / paging
SortOption = Literal["newest", "rating", "popular", "alphabetical"]
SORT_OPTIONS: List[str] = ["newest", "rating", "popular", "alphabetical"]
DEFAULT_SORT: SortOption = "newest"
DEFAULT_INCLUDE_SUBTOPICS = True
DEFAULT_ITEMS_PER_PAGE = 8
COLLATION_LANGUAGE = "pl"

# Responsive grid: (max width exclusive, items per page)
VIEWPORT_BREAKPOINTS: List[tuple[int, int]] = [
    (640, 2),
    (960, 4),
    (1280, 6),
]

# Suggestions
SUGGESTION_MIN_CHARS = 2
SUGGESTION_LIMIT = 5

# Text processing
MAX_INPUT_CHARS = 20_000

LANGUAGE_NAMES: Dict[str, str] = {
    "pl": "Polski",
    "en": "Angielski",
    "de": "Niemiecki",
    "fr": "Francuski",
    "es": "Hiszpański",
    "it": "Włoski",
    "ru": "Rosyjski",
    "uk": "Ukraiński",
}

# Logging
LOG_LEVEL = os.getenv("FACET_SEARCH_LOG_LEVEL", "INFO")
LOG_DIR = PROJECT_ROOT / "logs"


# Pydantic schemas
class Subject(BaseModel):
    id: str
    name: str
    slug: str


class Topic(BaseModel):
    id: str
    subject_id: str
    name: str
    slug: str
    parent_topic_id: Optional[str] = None
    order_index: int = 0


class TopicNode(Topic):
    children: List["TopicNode"] = Field(default_factory=list)


TopicNode.model_rebuild()


class Level(BaseModel):
    id: str
    name: str
    slug: str = ""


class Resource(BaseModel):
    id: str
    title: str
    description: str = ""
    subject_id: str = ""
    language: Optional[str] = None
    created_at: Optional[str] = None
    avg_usefulness: Optional[float] = None
    avg_correctness: Optional[float] = None
    ratings_count: int = Field(default=0, ge=0)
    comments_count: int = Field(default=0, ge=0)
    url: str = ""
    type: str = ""


class ResourceTopic(BaseModel):
    topic_id: str
    topic_name: str
    topic_slug: str = ""
    parent_topic_id: Optional[str] = None


class ResourceLevel(BaseModel):
    id: str
    name: str = ""
    slug: str = ""


class Article(BaseModel):
    slug: str
    title: str
    excerpt: str = ""
    date: str = ""
    author: str = ""


class FacetSelection(BaseModel):
    subject_id: Optional[str] = None
    topic_ids: List[str] = Field(default_factory=list)
    level_ids: List[str] = Field(default_factory=list)
    languages: List[str] = Field(default_factory=list)
    query: str = ""
    sort_by: SortOption = DEFAULT_SORT
    page: int = 1
    include_subtopics: bool = DEFAULT_INCLUDE_SUBTOPICS


class ResourcePage(BaseModel):
    items: List[Resource]
    page: int = Field(ge=1)
    page_size: int = Field(ge=1)
    total_items: int = Field(ge=0)
    total_pages: int = Field(ge=0)
    start_index: int = Field(ge=0)
    end_index: int = Field(ge=0)


class LanguageOption(BaseModel):
    code: str
    name: str


class DashboardView(BaseModel):
    selection: FacetSelection
    page: ResourcePage
    articles: List[Article]
    has_active_filters: bool
    url: str


class HealthResponse(BaseModel):
    status: str
