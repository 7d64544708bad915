from __future__ import annotations

from typing import Iterator, List, Optional, Sequence

from .ast import Combinator, Group, Leaf, Node


def normalize(node: Node) -> Optional[Node]:
    """Canonicalize ``node``.

    Empty leaves and groups disappear, and a group left with a single child
    collapses to that child unless it is a ``NOT``. Returns ``None`` when
    nothing survives.
    """

    if isinstance(node, Leaf):
        return node if node.predicates else None
    if isinstance(node, Group):
        survivors = _normalize_children(node.children)
        return _simplify(node.combinator, survivors)
    raise TypeError(f"Unsupported filter node: {type(node).__name__}")


def combine(
    combinator: Combinator,
    leaves: Sequence[Leaf],
    children: Sequence[Node],
) -> Optional[Node]:
    """Assemble a node from its own leaves and already built children."""

    if combinator == Combinator.AND and len(leaves) == 1 and not children:
        return normalize(leaves[0])
    return normalize(Group(combinator, [*leaves, *children]))


def iter_fields(node: Node) -> Iterator[str]:
    """Yield every field referenced by ``node`` at any depth."""

    if isinstance(node, Leaf):
        for predicate in node.predicates:
            yield predicate.field
        return
    for child in node.children:
        yield from iter_fields(child)


def _normalize_children(children: Sequence[Node]) -> List[Node]:
    survivors: List[Node] = []
    for child in children:
        normalized = normalize(child)
        if normalized is not None:
            survivors.append(normalized)
    return survivors


def _simplify(combinator: Combinator, nodes: Sequence[Node]) -> Optional[Node]:
    if not nodes:
        return None
    if len(nodes) == 1 and combinator != Combinator.NOT:
        return nodes[0]
    return Group(combinator, nodes)
