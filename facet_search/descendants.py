from __future__ import annotations

"""
Resolve a topic selection to the set of topic names it covers.

Resources are linked to topics by name, so the topic facet is evaluated
against names rather than ids.  The traversal visits every node of the
tree: a selected id may sit at any depth, regardless of whether its
ancestors are selected.  Only a selected node's own subtree is expanded
when subtopics are included.
"""

from typing import Iterable, List, Set

from .config import TopicNode


def subtree_names(node: TopicNode) -> List[str]:
    """Names of every descendant of ``node`` in pre-order (``node`` excluded)."""
    names: List[str] = []
    for child in node.children:
        names.append(child.name)
        names.extend(subtree_names(child))
    return names


def resolve_topic_names(
    nodes: Iterable[TopicNode],
    selected_ids: Iterable[str],
    include_subtopics: bool,
) -> Set[str]:
    """Return the topic names reachable from ``selected_ids``.

    Ids that are not in the tree contribute nothing.
    """
    wanted = set(selected_ids)
    names: Set[str] = set()
    if not wanted:
        return names
    _collect(nodes, wanted, include_subtopics, names)
    return names


def _collect(
    nodes: Iterable[TopicNode],
    wanted: Set[str],
    include_subtopics: bool,
    names: Set[str],
) -> None:
    for node in nodes:
        if node.id in wanted:
            names.add(node.name)
            if include_subtopics:
                names.update(subtree_names(node))
        _collect(node.children, wanted, include_subtopics, names)
