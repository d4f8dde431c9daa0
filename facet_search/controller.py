from __future__ import annotations

"""
Filter-state controller for the resource dashboard.

The controller owns the facet, query, sort and page state and turns it
into a :class:`~facet_search.config.DashboardView`::

    paginate(sort(filter(resources, facets, query), sort_by), page, page_size)

Subject and topic selection are not stored as fields: they are derived
from the current URL path, and selecting them means navigating.  The
controller keeps a small back/forward history so navigation can be
undone the way a browser would.  The free-text query lives in the ``q``
parameter of the same URL.

Every mutating method ends with :meth:`_refresh`, which resets the page
when any facet changed and recomputes the view.  Recomputation is
memoized on its inputs, with the data lists compared by identity: hand
in new lists when the store delivers a new snapshot.
"""

from typing import List, Mapping, Optional, Sequence, Tuple

from loguru import logger

from .config import (
    COLLATION_LANGUAGE,
    DEFAULT_INCLUDE_SUBTOPICS,
    DEFAULT_ITEMS_PER_PAGE,
    DEFAULT_SORT,
    RESOURCES_BASE_PATH,
    SORT_OPTIONS,
    Article,
    DashboardView,
    FacetSelection,
    LanguageOption,
    Level,
    Resource,
    ResourceLevel,
    ResourcePage,
    ResourceTopic,
    Subject,
    Topic,
    TopicNode,
)
from .facet_filter import (
    available_languages,
    filter_articles,
    filter_resources,
    has_active_filters,
    search_base,
)
from .fuzzy_index import IndexCache
from .navigation import Location, build_path, build_url, parse_location
from .normalize import is_blank_query
from .pagination import paginate
from .sorting import sort_resources
from .topic_tree import build_topic_tree


class FilterStateController:
    """Facet selection state plus the derived, paginated result view."""

    def __init__(
        self,
        resources: Sequence[Resource] = (),
        subjects: Sequence[Subject] = (),
        topics: Sequence[Topic] = (),
        levels: Sequence[Level] = (),
        resource_topics: Optional[Mapping[str, Sequence[ResourceTopic]]] = None,
        resource_levels: Optional[Mapping[str, Sequence[ResourceLevel]]] = None,
        articles: Sequence[Article] = (),
        url: Optional[str] = None,
        selected_levels: Sequence[str] = (),
        selected_languages: Sequence[str] = (),
        page: int = 1,
        page_size: int = DEFAULT_ITEMS_PER_PAGE,
        sort_by: str = DEFAULT_SORT,
        include_subtopics: bool = DEFAULT_INCLUDE_SUBTOPICS,
        base_path: str = RESOURCES_BASE_PATH,
        collation_language: str = COLLATION_LANGUAGE,
        index_cache: Optional[IndexCache] = None,
    ):
        self.resources = resources
        self.subjects = subjects
        self.topics = topics
        self.levels = levels
        self.resource_topics: Mapping[str, Sequence[ResourceTopic]] = resource_topics if resource_topics is not None else {}
        self.resource_levels: Mapping[str, Sequence[ResourceLevel]] = resource_levels if resource_levels is not None else {}
        self.articles = articles

        self.base_path = base_path
        self.collation_language = collation_language
        self.selected_levels: List[str] = list(dict.fromkeys(selected_levels))
        self.selected_languages: List[str] = list(dict.fromkeys(selected_languages))
        self.sort_by = sort_by
        self.current_page = page
        self.page_size = page_size
        self.include_subtopics = include_subtopics

        self._index_cache = index_cache or IndexCache()
        self._history: List[Location] = [parse_location(url or base_path, base_path)]
        self._cursor = 0

        self._tree_inputs: Optional[Tuple[Optional[str], object]] = None
        self._tree: List[TopicNode] = []
        self._last_facets: Optional[tuple] = None
        self._warned: Optional[tuple] = None
        self._view_key: Optional[tuple] = None
        self._view: Optional[DashboardView] = None
        self._filtered: List[Resource] = []
        self._sorted: List[Resource] = []

        self._refresh()

    # ---------------------------
    # Data snapshot
    # ---------------------------

    def load_data(
        self,
        resources: Optional[Sequence[Resource]] = None,
        subjects: Optional[Sequence[Subject]] = None,
        topics: Optional[Sequence[Topic]] = None,
        levels: Optional[Sequence[Level]] = None,
        resource_topics: Optional[Mapping[str, Sequence[ResourceTopic]]] = None,
        resource_levels: Optional[Mapping[str, Sequence[ResourceLevel]]] = None,
        articles: Optional[Sequence[Article]] = None,
    ) -> None:
        """Replace any of the data lists; the latest delivery wins."""
        if resources is not None:
            self.resources = resources
        if subjects is not None:
            self.subjects = subjects
        if topics is not None:
            self.topics = topics
        if levels is not None:
            self.levels = levels
        if resource_topics is not None:
            self.resource_topics = resource_topics
        if resource_levels is not None:
            self.resource_levels = resource_levels
        if articles is not None:
            self.articles = articles
        self._refresh()

    # ---------------------------
    # Navigation
    # ---------------------------

    @property
    def location(self) -> Location:
        return self._history[self._cursor]

    @property
    def url(self) -> str:
        return self.location.url

    def navigate(self, url: str, replace: bool = False) -> None:
        """Go to ``url`` as a browser would, dropping any forward history."""
        location = parse_location(url, self.base_path)
        if replace:
            self._history[self._cursor] = location
        else:
            del self._history[self._cursor + 1:]
            self._history.append(location)
            self._cursor += 1
        self._refresh()

    def back(self) -> bool:
        if self._cursor == 0:
            return False
        self._cursor -= 1
        self._refresh()
        return True

    def forward(self) -> bool:
        if self._cursor >= len(self._history) - 1:
            return False
        self._cursor += 1
        self._refresh()
        return True

    def _go(self, path: str, query: Optional[str] = None) -> None:
        loc = self.location
        q = loc.query if query is None else query
        self.navigate(build_url(path, q, loc.extra_params))

    # ---------------------------
    # Derived subject / topic selection
    # ---------------------------

    @property
    def selected_subject(self) -> Optional[str]:
        subject = self._resolve_subject()
        return subject.id if subject else None

    def _resolve_subject(self) -> Optional[Subject]:
        slug = self.location.subject_slug
        if not slug or not self.subjects:
            return None
        for subject in self.subjects:
            if subject.slug == slug:
                return subject
        return None

    @property
    def selected_topics(self) -> List[str]:
        """
        The topic addressed by the path.  A subtopic slug wins over the
        topic slug but only resolves among children of that topic, so
        sibling slugs such as ``wstep`` may repeat under different parents.
        """
        loc = self.location
        subject_id = self.selected_subject
        if not loc.topic_slug or not subject_id or not self.topics:
            return []
        subject_topics = [t for t in self.topics if t.subject_id == subject_id]
        if not loc.subtopic_slug:
            for topic in subject_topics:
                if topic.slug == loc.topic_slug:
                    return [topic.id]
            return []

        parent_ids = {t.id for t in subject_topics if t.slug == loc.topic_slug}
        for topic in subject_topics:
            if topic.slug == loc.subtopic_slug and topic.parent_topic_id in parent_ids:
                return [topic.id]
        return []

    def _warn_unresolved(self) -> None:
        """Log slugs of the current URL that match nothing in the loaded lists."""
        loc = self.location
        seen = self._warned
        if seen is not None and seen[0] == loc and seen[1] is self.subjects and seen[2] is self.topics:
            return
        self._warned = (loc, self.subjects, self.topics)
        if loc.subject_slug and self.subjects and self.selected_subject is None:
            logger.warning("No subject matches slug {!r}; showing all subjects", loc.subject_slug)
            return
        slug = loc.subtopic_slug or loc.topic_slug
        if slug and self.topics and self.selected_subject and not self.selected_topics:
            logger.warning("No topic matches slug {!r}; showing all topics", slug)

    @property
    def topic_nodes(self) -> List[TopicNode]:
        """Topic tree of the selected subject (empty without one)."""
        subject_id = self.selected_subject
        inputs = self._tree_inputs
        if inputs is None or inputs[0] != subject_id or inputs[1] is not self.topics:
            if subject_id:
                self._tree = build_topic_tree(t for t in self.topics if t.subject_id == subject_id)
            else:
                self._tree = []
            self._tree_inputs = (subject_id, self.topics)
        return self._tree

    @property
    def search_query(self) -> str:
        return self.location.query

    # ---------------------------
    # User actions
    # ---------------------------

    def select_subject(self, subject_id: Optional[str]) -> None:
        """Navigate to a subject (or to all subjects); clears the topic selection."""
        subject = None
        if subject_id:
            subject = next((s for s in self.subjects if s.id == subject_id), None)
            if subject is None:
                logger.warning("Unknown subject id {}; showing all subjects", subject_id)
        if subject is not None:
            self._go(build_path(subject.slug, base_path=self.base_path))
        else:
            self._go(build_path(base_path=self.base_path))

    def toggle_topic(self, topic_id: str) -> None:
        """
        Navigate to a topic, or back to the subject when it is already
        selected.  Nested topics are addressed through their parent's slug.
        """
        subject = self._resolve_subject()
        topic = next((t for t in self.topics if t.id == topic_id), None)
        if topic is None or subject is None:
            logger.debug("Ignoring topic {} without a matching topic and subject", topic_id)
            return

        if topic_id in self.selected_topics:
            self._go(build_path(subject.slug, base_path=self.base_path))
            return

        if topic.parent_topic_id:
            parent = next((t for t in self.topics if t.id == topic.parent_topic_id), None)
            if parent is not None:
                self._go(build_path(subject.slug, parent.slug, topic.slug, base_path=self.base_path))
                return
        self._go(build_path(subject.slug, topic.slug, base_path=self.base_path))

    def toggle_level(self, level_id: str) -> None:
        if level_id in self.selected_levels:
            self.selected_levels = [lid for lid in self.selected_levels if lid != level_id]
        else:
            self.selected_levels = self.selected_levels + [level_id]
        self._refresh()

    def toggle_language(self, language: str) -> None:
        if language in self.selected_languages:
            self.selected_languages = [code for code in self.selected_languages if code != language]
        else:
            self.selected_languages = self.selected_languages + [language]
        self._refresh()

    def set_query(self, query: str) -> None:
        """Update ``q`` in the URL, leaving the path alone."""
        self._go(self.location.path, query or "")

    def set_sort(self, sort_by: str) -> None:
        if sort_by not in SORT_OPTIONS:
            logger.warning("Unknown sort strategy {!r}; keeping {}", sort_by, self.sort_by)
            return
        self.sort_by = sort_by
        self._refresh()

    def set_page(self, page: int) -> None:
        self.current_page = page
        self._refresh()

    def set_page_size(self, page_size: int) -> None:
        self.page_size = page_size
        self._refresh()

    def set_include_subtopics(self, include: bool) -> None:
        self.include_subtopics = bool(include)
        self._refresh()

    def clear_filters(self) -> None:
        """Drop every facet and the query, keeping sort and page size."""
        self.selected_levels = []
        self.selected_languages = []
        self._go(build_path(base_path=self.base_path), "")

    # ---------------------------
    # Derived view
    # ---------------------------

    @property
    def selection(self) -> FacetSelection:
        return FacetSelection(
            subject_id=self.selected_subject,
            topic_ids=self.selected_topics,
            level_ids=list(self.selected_levels),
            languages=list(self.selected_languages),
            query=self.search_query,
            sort_by=self.sort_by if self.sort_by in SORT_OPTIONS else DEFAULT_SORT,
            page=max(1, self.current_page),
            include_subtopics=self.include_subtopics,
        )

    @property
    def view(self) -> DashboardView:
        if self._view is None:
            self._view_key = None
            self._recompute()
        return self._view

    @property
    def current_resources(self) -> List[Resource]:
        return self.view.page.items

    @property
    def page(self) -> ResourcePage:
        return self.view.page

    @property
    def total_pages(self) -> int:
        return self.view.page.total_pages

    @property
    def filtered_resources(self) -> List[Resource]:
        return list(self._filtered)

    @property
    def sorted_resources(self) -> List[Resource]:
        return list(self._sorted)

    @property
    def has_active_filters(self) -> bool:
        return self.view.has_active_filters

    @property
    def language_options(self) -> List[LanguageOption]:
        return available_languages(self.resources)

    def _facets(self) -> tuple:
        return (
            self.selected_subject,
            tuple(self.selected_topics),
            tuple(self.selected_levels),
            tuple(self.selected_languages),
            self.search_query,
            self.include_subtopics,
        )

    def _data(self) -> tuple:
        return (
            self.resources,
            self.topics,
            self.resource_topics,
            self.resource_levels,
            self.articles,
        )

    def _refresh(self) -> None:
        self._warn_unresolved()
        facets = self._facets()
        if self._last_facets is not None and facets != self._last_facets:
            self.current_page = 1
        self._last_facets = facets
        self._recompute()

    def _same_key(self, key: tuple) -> bool:
        if self._view_key is None:
            return False
        values, data = key
        old_values, old_data = self._view_key
        return values == old_values and all(a is b for a, b in zip(data, old_data))

    def _recompute(self) -> None:
        selection = self.selection
        values = (selection.model_dump_json(), self.page_size, self.collation_language, self.url)
        if self._same_key((values, self._data())):
            return

        query = selection.query
        index = None
        article_index = None
        if not is_blank_query(query):
            index = self._index_cache.resource_index(self.resources, self.resource_topics)
            article_index = self._index_cache.article_index(self.articles)

        base = search_base(self.resources, index, query)
        filtered = filter_resources(
            base,
            selection,
            self.topic_nodes,
            self.resource_topics,
            self.resource_levels,
        )
        ordered = sort_resources(filtered, selection.sort_by, self.collation_language)
        page = paginate(ordered, selection.page, self.page_size)
        articles = filter_articles(article_index, query)

        self.current_page = page.page
        selection = selection.model_copy(update={"page": page.page})
        self._filtered = filtered
        self._sorted = ordered
        self._view = DashboardView(
            selection=selection,
            page=page,
            articles=articles,
            has_active_filters=has_active_filters(selection),
            url=self.url,
        )
        self._view_key = (
            (selection.model_dump_json(), self.page_size, self.collation_language, self.url),
            self._data(),
        )
        logger.debug(
            "Recomputed view: {} matches, page {}/{}",
            page.total_items,
            page.page,
            page.total_pages,
        )
