from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Optional, Tuple, Union


class Operator(str, Enum):
    EQ = "EQ"
    NEQ = "NEQ"
    CONTAINS = "CONTAINS"
    STARTS_WITH = "STARTS_WITH"
    ENDS_WITH = "ENDS_WITH"
    IN = "IN"
    NOT_IN = "NOT_IN"
    BETWEEN = "BETWEEN"
    GT = "GT"
    GTE = "GTE"
    LT = "LT"
    LTE = "LTE"
    IS_NULL = "IS_NULL"
    IS_NOT_NULL = "IS_NOT_NULL"


class Combinator(str, Enum):
    AND = "AND"
    OR = "OR"
    NOT = "NOT"


# Operators whose predicates carry a list of values (possibly empty).
MULTI_VALUE_OPERATORS: FrozenSet[Operator] = frozenset(
    {Operator.IN, Operator.NOT_IN, Operator.BETWEEN}
)
# Operators whose predicates never carry values.
NULLARY_OPERATORS: FrozenSet[Operator] = frozenset({Operator.IS_NULL, Operator.IS_NOT_NULL})


@dataclass(frozen=True)
class Predicate:
    """A single ``field``/``operator``/``values`` condition."""

    field: str
    operator: Operator
    values: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "operator", Operator(self.operator))
        object.__setattr__(self, "values", tuple(self.values))


@dataclass(frozen=True)
class Leaf:
    """Flat list of predicates, implicitly conjoined."""

    predicates: Tuple[Predicate, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "predicates", tuple(self.predicates))


@dataclass(frozen=True)
class Group:
    """Child nodes combined under AND, OR or NOT.

    ``NOT`` negates the conjunction of its children.
    """

    combinator: Combinator
    children: Tuple["Node", ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "combinator", Combinator(self.combinator))
        object.__setattr__(self, "children", tuple(self.children))


Node = Union[Leaf, Group]


@dataclass(frozen=True)
class FilterRequest:
    root: Optional[Node] = None

    @property
    def is_empty(self) -> bool:
        return self.root is None
