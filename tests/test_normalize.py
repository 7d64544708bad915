from filtertree import Combinator, Group, Leaf, Operator, Predicate, combine, iter_fields, normalize


def p(field: str, value: str = "v") -> Predicate:
    return Predicate(field, Operator.EQ, [value])


def test_empty_leaf_disappears():
    assert normalize(Leaf([])) is None


def test_non_empty_leaf_is_unchanged():
    leaf = Leaf([p("a"), p("b")])
    assert normalize(leaf) == leaf


def test_empty_group_disappears():
    assert normalize(Group(Combinator.AND, [])) is None
    assert normalize(Group(Combinator.NOT, [])) is None


def test_group_of_empty_children_disappears():
    assert normalize(Group(Combinator.OR, [Leaf([]), Group(Combinator.AND, [])])) is None


def test_single_child_and_or_collapse():
    leaf = Leaf([p("a")])
    assert normalize(Group(Combinator.AND, [leaf])) == leaf
    assert normalize(Group(Combinator.OR, [leaf])) == leaf


def test_single_child_not_is_kept():
    group = Group(Combinator.NOT, [Leaf([p("a")])])
    assert normalize(group) == group


def test_collapse_cascades_through_levels():
    leaf = Leaf([p("a")])
    tree = Group(Combinator.AND, [Group(Combinator.OR, [Leaf([]), leaf]), Leaf([])])
    assert normalize(tree) == leaf


def test_child_order_is_preserved():
    tree = Group(
        Combinator.OR,
        [Leaf([p("b")]), Leaf([]), Group(Combinator.NOT, [Leaf([p("c")])]), Leaf([p("a")])],
    )
    normalized = normalize(tree)
    assert normalized == Group(
        Combinator.OR,
        [Leaf([p("b")]), Group(Combinator.NOT, [Leaf([p("c")])]), Leaf([p("a")])],
    )


def test_normalize_is_idempotent():
    trees = [
        Leaf([]),
        Leaf([p("a")]),
        Group(Combinator.AND, [Group(Combinator.AND, [Leaf([p("a")])])]),
        Group(Combinator.NOT, [Group(Combinator.OR, [Leaf([]), Leaf([p("b")])])]),
        Group(Combinator.OR, [Leaf([p("a")]), Group(Combinator.NOT, [Leaf([])]), Leaf([p("c")])]),
    ]
    for tree in trees:
        once = normalize(tree)
        if once is None:
            continue
        assert normalize(once) == once


def test_nodes_are_immutable_values():
    a = Group(Combinator.AND, [Leaf([p("a")]), Leaf([p("b")])])
    b = Group("AND", (Leaf((p("a"),)), Leaf((p("b"),))))
    assert a == b
    assert hash(a) == hash(b)
    assert isinstance(a.children, tuple)


def test_combine_returns_single_and_leaf_directly():
    leaf = Leaf([p("a")])
    assert combine(Combinator.AND, [leaf], []) == leaf


def test_combine_wraps_not_leaf():
    leaf = Leaf([p("a")])
    assert combine(Combinator.NOT, [leaf], []) == Group(Combinator.NOT, [leaf])


def test_combine_collapses_single_or_leaf():
    leaf = Leaf([p("a"), p("b")])
    assert combine(Combinator.OR, [leaf], []) == leaf


def test_combine_puts_leaves_before_children():
    leaf = Leaf([p("a")])
    child = Group(Combinator.OR, [Leaf([p("b")]), Leaf([p("c")])])
    assert combine(Combinator.AND, [leaf], [child]) == Group(Combinator.AND, [leaf, child])


def test_combine_nothing_is_none():
    assert combine(Combinator.AND, [], []) is None


def test_iter_fields_walks_every_level():
    tree = Group(
        Combinator.AND,
        [Leaf([p("a"), p("b")]), Group(Combinator.NOT, [Group(Combinator.OR, [Leaf([p("c")])])])],
    )
    assert list(iter_fields(tree)) == ["a", "b", "c"]
