from __future__ import annotations

from typing import Any, Callable, Iterable, List, Optional

from .ast import Combinator, FilterRequest, Group, Leaf, Node, Operator, Predicate
from .normalize import combine
from .values import to_value_string

Initializer = Callable[["FilterRequestBuilder"], Any]


class FilterRequestBuilder:
    """Mutable accumulator that produces normalized filter trees.

    Predicates added to the builder become the node's own leaf. Under ``AND``
    and ``NOT`` they are conjoined in a single leaf; under ``OR`` every
    predicate is its own disjunct. Nested nodes are added with
    :meth:`child` or the :meth:`and_`, :meth:`or_` and :meth:`not_` shortcuts::

        request = filter_request(
            lambda f: f.eq("status", "ACTIVE")
            .gte("age", 18)
            .or_(lambda g: g.eq("role", "ADMIN").eq("role", "MODERATOR"))
        )

    A builder is owned by a single caller and is not thread-safe.
    """

    def __init__(
        self,
        combinator: Optional[Combinator] = None,
        predicates: Optional[Iterable[Predicate]] = None,
        children: Optional[Iterable[Node]] = None,
    ) -> None:
        self._combinator = Combinator(combinator) if combinator is not None else Combinator.AND
        self._predicates: List[Predicate] = list(predicates or [])
        self._children: List[Node] = list(children or [])

    @classmethod
    def from_request(cls, request: FilterRequest) -> "FilterRequestBuilder":
        """Rebuild an editable builder from a previously built request.

        The first top-level leaf becomes the builder's predicates and every
        other child is kept as a child. Under ``OR`` only a single-predicate
        leaf is lifted. Only trees with at most one top-level leaf are
        reconstructed faithfully; further leaves stay children and the lifted
        leaf moves to the front on the next build.
        """

        root = request.root
        if root is None:
            return cls()
        if isinstance(root, Leaf):
            return cls(Combinator.AND, predicates=root.predicates)

        lifted: Optional[Leaf] = None
        children: List[Node] = []
        for child in root.children:
            if lifted is None and isinstance(child, Leaf) and _can_lift(root, child):
                lifted = child
            else:
                children.append(child)
        predicates = lifted.predicates if lifted is not None else ()
        return cls(root.combinator, predicates=predicates, children=children)

    @property
    def combinator(self) -> Combinator:
        return self._combinator

    def set_combinator(self, combinator: Combinator) -> "FilterRequestBuilder":
        self._combinator = Combinator(combinator)
        return self

    # ----- build -----

    def build(self) -> Optional[FilterRequest]:
        node = self.build_node()
        if node is None:
            return None
        return FilterRequest(node)

    def build_node(self) -> Optional[Node]:
        if not self._predicates and not self._children:
            return None
        return combine(self._combinator, self._own_leaves(), list(self._children))

    def _own_leaves(self) -> List[Leaf]:
        if not self._predicates:
            return []
        if self._combinator == Combinator.OR:
            return [Leaf([predicate]) for predicate in self._predicates]
        return [Leaf(list(self._predicates))]

    # ----- predicate management -----

    def add_predicate(
        self, field: str, operator: Operator, values: Iterable[Any] = ()
    ) -> "FilterRequestBuilder":
        self._predicates.append(_predicate(field, operator, values))
        return self

    def add(self, field: str, operator: Operator, value: Any = None) -> "FilterRequestBuilder":
        return self.add_predicate(field, operator, _single(value))

    def replace_predicate(
        self, field: str, operator: Operator, values: Iterable[Any] = ()
    ) -> "FilterRequestBuilder":
        """Drop every predicate on ``field`` and add a single new one."""

        self.remove_predicate(field)
        return self.add_predicate(field, operator, values)

    def replace(self, field: str, operator: Operator, value: Any = None) -> "FilterRequestBuilder":
        return self.replace_predicate(field, operator, _single(value))

    def remove_predicate(self, field: str) -> "FilterRequestBuilder":
        self._predicates = [p for p in self._predicates if p.field != field]
        return self

    def add_predicate_if_absent(
        self, field: str, operator: Operator, values: Iterable[Any] = ()
    ) -> bool:
        """Add a predicate unless ``field`` already has one. Returns True when added."""

        if self.has_predicate(field):
            return False
        self.add_predicate(field, operator, values)
        return True

    def has_predicate(self, field: str) -> bool:
        return any(p.field == field for p in self._predicates)

    # ----- children -----

    def add_child(self, node: Node) -> "FilterRequestBuilder":
        self._children.append(node)
        return self

    def child(
        self, combinator: Optional[Combinator], initializer: Initializer
    ) -> "FilterRequestBuilder":
        nested = FilterRequestBuilder(combinator)
        initializer(nested)
        node = nested.build_node()
        if node is not None:
            self._children.append(node)
        return self

    def and_(self, initializer: Initializer) -> "FilterRequestBuilder":
        return self.child(Combinator.AND, initializer)

    def or_(self, initializer: Initializer) -> "FilterRequestBuilder":
        return self.child(Combinator.OR, initializer)

    def not_(self, initializer: Initializer) -> "FilterRequestBuilder":
        return self.child(Combinator.NOT, initializer)

    # ----- single-value operators -----

    def eq(self, field: str, value: Any) -> "FilterRequestBuilder":
        return self.add(field, Operator.EQ, value)

    def neq(self, field: str, value: Any) -> "FilterRequestBuilder":
        return self.add(field, Operator.NEQ, value)

    def contains(self, field: str, value: str) -> "FilterRequestBuilder":
        return self.add(field, Operator.CONTAINS, value)

    def starts_with(self, field: str, value: str) -> "FilterRequestBuilder":
        return self.add(field, Operator.STARTS_WITH, value)

    def ends_with(self, field: str, value: str) -> "FilterRequestBuilder":
        return self.add(field, Operator.ENDS_WITH, value)

    def gt(self, field: str, value: Any) -> "FilterRequestBuilder":
        return self.add(field, Operator.GT, value)

    def gte(self, field: str, value: Any) -> "FilterRequestBuilder":
        return self.add(field, Operator.GTE, value)

    def lt(self, field: str, value: Any) -> "FilterRequestBuilder":
        return self.add(field, Operator.LT, value)

    def lte(self, field: str, value: Any) -> "FilterRequestBuilder":
        return self.add(field, Operator.LTE, value)

    def is_null(self, field: str) -> "FilterRequestBuilder":
        return self.add_predicate(field, Operator.IS_NULL)

    def is_not_null(self, field: str) -> "FilterRequestBuilder":
        return self.add_predicate(field, Operator.IS_NOT_NULL)

    # ----- nullable-aware single-value operators (None removes the field) -----

    def eq_or_remove(self, field: str, value: Any) -> "FilterRequestBuilder":
        return self._or_remove(field, Operator.EQ, value)

    def neq_or_remove(self, field: str, value: Any) -> "FilterRequestBuilder":
        return self._or_remove(field, Operator.NEQ, value)

    def contains_or_remove(self, field: str, value: Optional[str]) -> "FilterRequestBuilder":
        return self._or_remove(field, Operator.CONTAINS, value)

    def starts_with_or_remove(self, field: str, value: Optional[str]) -> "FilterRequestBuilder":
        return self._or_remove(field, Operator.STARTS_WITH, value)

    def ends_with_or_remove(self, field: str, value: Optional[str]) -> "FilterRequestBuilder":
        return self._or_remove(field, Operator.ENDS_WITH, value)

    def gt_or_remove(self, field: str, value: Any) -> "FilterRequestBuilder":
        return self._or_remove(field, Operator.GT, value)

    def gte_or_remove(self, field: str, value: Any) -> "FilterRequestBuilder":
        return self._or_remove(field, Operator.GTE, value)

    def lt_or_remove(self, field: str, value: Any) -> "FilterRequestBuilder":
        return self._or_remove(field, Operator.LT, value)

    def lte_or_remove(self, field: str, value: Any) -> "FilterRequestBuilder":
        return self._or_remove(field, Operator.LTE, value)

    def eq_or_is_null(self, field: str, value: Any) -> "FilterRequestBuilder":
        if value is None:
            return self.is_null(field)
        return self.eq(field, value)

    def eq_if_absent(self, field: str, value: Any) -> bool:
        return self.add_predicate_if_absent(field, Operator.EQ, _single(value))

    def _or_remove(self, field: str, operator: Operator, value: Any) -> "FilterRequestBuilder":
        if value is None:
            return self.remove_predicate(field)
        return self.add(field, operator, value)

    # ----- multi-value operators -----

    def in_list(self, field: str, values: Iterable[Any]) -> "FilterRequestBuilder":
        return self.add_predicate(field, Operator.IN, values)

    def not_in_list(self, field: str, values: Iterable[Any]) -> "FilterRequestBuilder":
        return self.add_predicate(field, Operator.NOT_IN, values)

    def between(self, field: str, low: Any, high: Any) -> "FilterRequestBuilder":
        """Add a BETWEEN predicate; a missing bound is stored as an empty string."""

        bounds = ["" if low is None else low, "" if high is None else high]
        return self.add_predicate(field, Operator.BETWEEN, bounds)

    def in_list_or_remove(self, field: str, values: Optional[Iterable[Any]]) -> "FilterRequestBuilder":
        if values is None:
            return self.remove_predicate(field)
        return self.in_list(field, [v for v in values if v is not None])

    def not_in_list_or_remove(
        self, field: str, values: Optional[Iterable[Any]]
    ) -> "FilterRequestBuilder":
        if values is None:
            return self.remove_predicate(field)
        return self.not_in_list(field, [v for v in values if v is not None])

    def between_or_remove(self, field: str, low: Any, high: Any) -> "FilterRequestBuilder":
        if low is None and high is None:
            return self.remove_predicate(field)
        return self.between(field, low, high)


def filter_request(
    initializer: Optional[Initializer] = None,
    *,
    combinator: Combinator = Combinator.AND,
) -> Optional[FilterRequest]:
    """Build a :class:`FilterRequest`, or ``None`` when nothing was added."""

    builder = FilterRequestBuilder(combinator)
    if initializer is not None:
        initializer(builder)
    return builder.build()


def to_builder(request: FilterRequest) -> FilterRequestBuilder:
    return FilterRequestBuilder.from_request(request)


def _can_lift(root: Group, leaf: Leaf) -> bool:
    # OR builders split predicates into separate disjuncts again on build.
    return root.combinator != Combinator.OR or len(leaf.predicates) == 1


def _predicate(field: str, operator: Operator, values: Iterable[Any]) -> Predicate:
    return Predicate(field, Operator(operator), tuple(to_value_string(v) for v in values))


def _single(value: Any) -> List[Any]:
    return [] if value is None else [value]
