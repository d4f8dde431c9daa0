from __future__ import annotations

"""
Topic tree construction.

Topics arrive from the taxonomy store as a flat list where each row may
point at its parent.  :func:`build_topic_tree` turns that list into a
forest of :class:`~facet_search.config.TopicNode` objects whose children
are ordered by ``order_index`` at every level.  The tree is rebuilt
wholesale whenever topics change; nodes never hold a reference back to
their parent.
"""

from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from loguru import logger

from .config import Topic, TopicNode


def build_topic_tree(topics: Iterable[Topic]) -> List[TopicNode]:
    """Build the forest of root nodes for a flat topic list.

    A topic whose parent is not part of ``topics`` is promoted to a root
    and a warning is logged.  Sorting is stable, so siblings with equal
    ``order_index`` keep their input order.
    """
    rows = list(topics)
    nodes: Dict[str, TopicNode] = {}
    for row in rows:
        nodes[row.id] = TopicNode(**row.model_dump(exclude={"children"}), children=[])

    roots: List[TopicNode] = []
    for row in rows:
        node = nodes[row.id]
        if row.parent_topic_id:
            parent = nodes.get(row.parent_topic_id)
            if parent is not None:
                parent.children.append(node)
                continue
            logger.warning(
                "Parent topic {} not found for topic {}; treating it as a root",
                row.parent_topic_id,
                row.id,
            )
        roots.append(node)

    _sort_nodes(roots)
    return roots


def _sort_nodes(nodes: List[TopicNode]) -> None:
    nodes.sort(key=lambda n: n.order_index)
    for node in nodes:
        if node.children:
            _sort_nodes(node.children)


def walk_topic_tree(nodes: Iterable[TopicNode], depth: int = 0) -> Iterator[Tuple[TopicNode, int]]:
    """Yield ``(node, depth)`` pairs in pre-order."""
    for node in nodes:
        yield node, depth
        yield from walk_topic_tree(node.children, depth + 1)


def find_topic_node(nodes: Iterable[TopicNode], topic_id: str) -> Optional[TopicNode]:
    for node, _ in walk_topic_tree(nodes):
        if node.id == topic_id:
            return node
    return None


def count_topic_nodes(nodes: Iterable[TopicNode]) -> int:
    return sum(1 for _ in walk_topic_tree(nodes))
