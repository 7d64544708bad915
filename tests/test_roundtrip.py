from filtertree import (
    Combinator,
    FilterRequest,
    Group,
    Leaf,
    Operator,
    Predicate,
    decode_filter_request,
    filter_request,
    to_builder,
    to_json_string,
)


def eq(field: str, value: str) -> Predicate:
    return Predicate(field, Operator.EQ, [value])


def roundtrip(request: FilterRequest):
    return decode_filter_request(to_json_string(request))


def test_negation_survives_encode_and_decode():
    request = filter_request(lambda f: f.not_(lambda g: g.eq("status", "DELETED")))
    assert request == FilterRequest(Group(Combinator.NOT, [Leaf([eq("status", "DELETED")])]))
    assert roundtrip(request) == request


def test_built_tree_roundtrips():
    request = filter_request(
        lambda f: f.eq("status", "ACTIVE")
        .gte("age", 18)
        .or_(lambda g: g.eq("type", "A").eq("type", "B"))
        .not_(lambda g: g.is_null("email").in_list("role", ["guest", "bot"]))
    )
    assert request is not None
    assert roundtrip(request) == request


def test_or_root_built_tree_roundtrips():
    request = filter_request(
        lambda f: f.eq("a", "1").between("age", 18, 65).and_(lambda g: g.eq("c", "3").lt("d", 4)),
        combinator=Combinator.OR,
    )
    assert request is not None
    assert roundtrip(request) == request


def test_decoded_body_is_stable_across_reencoding():
    raw = """
    {
      "combinator": "or",
      "filters": {"a": [{"op": "eq", "value": 1}]},
      "children": [
        {"combinator": "NOT", "children": [{"filters": {"b": [{"op": "IS_NULL"}]}}]},
        {"filters": {"c": [{"op": "IN", "values": ["x", "y"]}], "d": [{"op": "GT", "value": "5"}]}}
      ]
    }
    """
    decoded = decode_filter_request(raw)
    assert decoded is not None
    assert roundtrip(decoded) == decoded
    assert to_json_string(roundtrip(decoded)) == to_json_string(decoded)


def test_leaf_is_moved_ahead_of_groups():
    group = Group(Combinator.OR, [Leaf([eq("x", "1")]), Leaf([eq("y", "2")])])
    request = FilterRequest(Group(Combinator.AND, [group, Leaf([eq("a", "1")])]))
    assert roundtrip(request) == FilterRequest(Group(Combinator.AND, [Leaf([eq("a", "1")]), group]))


def test_empty_in_list_does_not_survive_encoding():
    request = FilterRequest(Leaf([Predicate("age", Operator.IN, [])]))
    assert roundtrip(request) is None


def test_builder_reconstruction_preserves_decoded_tree():
    raw = (
        '{"filters": {"status": [{"op": "EQ", "value": "ACTIVE"}]},'
        ' "children": [{"combinator": "OR", "filters": {"type": [{"op": "EQ", "value": "A"}]},'
        ' "children": [{"filters": {"type": [{"op": "EQ", "value": "B"}]}}]}]}'
    )
    decoded = decode_filter_request(raw)
    assert decoded is not None
    assert to_builder(decoded).build() == decoded

    extended = to_builder(decoded).eq("region", "EU").build()
    assert extended is not None
    assert roundtrip(extended) == extended
    assert extended.root.children[0] == Leaf([eq("status", "ACTIVE"), eq("region", "EU")])


def test_lone_surrogate_value_survives_reencoding():
    decoded = decode_filter_request('{"filters": {"a": [{"op": "EQ", "value": "\\ud800"}]}}')
    assert decoded == FilterRequest(Leaf([eq("a", "\ud800")]))
    text = to_json_string(decoded)
    assert "\\ud800" in text
    assert decode_filter_request(text) == decoded
