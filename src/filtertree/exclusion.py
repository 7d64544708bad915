"""Safe projection of a filter tree onto a reduced set of fields.

Some query stages cannot evaluate every field (a column lives in a joined
table, a value is computed later, ...). :func:`exclude_fields` strips the
predicates on such fields while guaranteeing the result never matches fewer
records than the original. The caller applies the full filter once every
field is available.

- ``AND``: dropping a conjunct only broadens, children are pruned one by one.
- ``OR``: partially stripping a disjunct would narrow it, so the whole group
  goes when a direct leaf mentions an excluded field or when any child ends
  up unconstrained.
- ``NOT``: ``NOT(A AND B) == NOT A OR NOT B``, so removing anything inside a
  negation narrows; the group is kept untouched or dropped entirely.
"""

from __future__ import annotations

import logging
from typing import AbstractSet, Iterable, List, Optional, Union

from .ast import Combinator, FilterRequest, Group, Leaf, Node
from .normalize import iter_fields, normalize

logger = logging.getLogger(__name__)


def exclude_fields(request: FilterRequest, excluded: Union[str, Iterable[str]]) -> Optional[FilterRequest]:
    """Return ``request`` without conditions on ``excluded``, or ``None`` if nothing is left.

    ``excluded`` is an iterable of field names; a single string is one name.
    """

    if isinstance(excluded, str):
        excluded = (excluded,)
    excluded_set = frozenset(excluded)
    if not excluded_set:
        return request
    if request.root is None:
        return None
    root = exclude_node(request.root, excluded_set)
    return FilterRequest(root) if root is not None else None


def exclude_node(node: Node, excluded: AbstractSet[str]) -> Optional[Node]:
    if not excluded:
        return node
    if isinstance(node, Leaf):
        return _exclude_from_leaf(node, excluded)
    if node.combinator == Combinator.AND:
        return _exclude_from_and(node, excluded)
    if node.combinator == Combinator.OR:
        return _exclude_from_or(node, excluded)
    return _exclude_from_not(node, excluded)


def _exclude_from_leaf(leaf: Leaf, excluded: AbstractSet[str]) -> Optional[Leaf]:
    kept = [p for p in leaf.predicates if p.field not in excluded]
    return Leaf(kept) if kept else None


def _exclude_from_and(group: Group, excluded: AbstractSet[str]) -> Optional[Node]:
    survivors: List[Node] = []
    for child in group.children:
        pruned = exclude_node(child, excluded)
        if pruned is not None:
            survivors.append(pruned)
    return normalize(Group(group.combinator, survivors))


def _exclude_from_or(group: Group, excluded: AbstractSet[str]) -> Optional[Node]:
    for child in group.children:
        if isinstance(child, Leaf) and any(p.field in excluded for p in child.predicates):
            logger.debug("Dropping OR group: direct leaf references an excluded field")
            return None

    survivors: List[Node] = []
    for child in group.children:
        pruned = exclude_node(child, excluded)
        if pruned is None:
            # An unconstrained disjunct makes the whole disjunction unconstrained.
            logger.debug("Dropping OR group: a disjunct became unconstrained")
            return None
        survivors.append(pruned)
    return normalize(Group(group.combinator, survivors))


def _exclude_from_not(group: Group, excluded: AbstractSet[str]) -> Optional[Node]:
    if any(field in excluded for field in iter_fields(group)):
        logger.debug("Dropping NOT group: excluded field inside negation")
        return None
    return normalize(group)
