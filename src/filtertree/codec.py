from __future__ import annotations

import json
import logging
from collections import deque
from json import JSONDecodeError
from typing import Any, Deque, Dict, List, Mapping, Optional, Tuple, Union

from pydantic import ValidationError

from . import diagnostics as codes
from .ast import (
    MULTI_VALUE_OPERATORS,
    NULLARY_OPERATORS,
    Combinator,
    FilterRequest,
    Leaf,
    Node,
    Predicate,
)
from .diagnostics import Diagnostics, Severity
from .errors import DecodeError
from .normalize import combine
from .settings import CodecSettings
from .wire import ConditionDto, FieldMap, FilterBodyDto, FilterNodeDto

logger = logging.getLogger(__name__)

Source = Union[str, bytes, Mapping[str, Any], None]


# ----- decode -----


def decode_filter_request(
    raw: Source, *, settings: Optional[CodecSettings] = None
) -> Optional[FilterRequest]:
    """Decode wire input into a normalized request.

    Blank input yields ``None``. Malformed input raises :class:`DecodeError`;
    conditions missing required values are dropped silently.
    """

    request, _ = parse_filter_request(raw, settings=settings)
    return request


def parse_filter_request(
    src: Source, *, settings: Optional[CodecSettings] = None
) -> Tuple[Optional[FilterRequest], Diagnostics]:
    """Decode wire input and report what was dropped or ignored on the way."""

    settings = settings or CodecSettings()
    diagnostics = Diagnostics()

    data = _load(src)
    if data is None:
        return None, diagnostics

    prepared = _prepare(data, settings, diagnostics)
    try:
        body = FilterBodyDto.model_validate(prepared)
    except ValidationError as exc:
        raise DecodeError(f"Invalid filter body: {_first_error(exc)}", path=_error_path(exc)) from exc

    root = _decode_node(body, "$", diagnostics)
    diagnostics.log(logger)
    if root is None:
        logger.debug("Filter body decoded to an empty request")
        return None, diagnostics
    return FilterRequest(root), diagnostics


def _load(src: Source) -> Optional[Dict[str, Any]]:
    if src is None:
        return None
    if isinstance(src, Mapping):
        return dict(src)
    if isinstance(src, bytes):
        try:
            src = src.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecodeError("Filter body is not valid UTF-8") from exc
    if not isinstance(src, str):
        raise DecodeError(f"Unsupported filter source type: {type(src).__name__}")

    text = src.strip()
    if not text:
        return None
    try:
        parsed = json.loads(text)
    except JSONDecodeError as exc:
        raise DecodeError(f"Malformed filter JSON: {exc.msg}", path=f"line {exc.lineno} column {exc.colno}") from exc
    except RecursionError as exc:
        raise DecodeError("Filter JSON is nested too deeply") from exc
    except ValueError as exc:
        # e.g. integer literals beyond the interpreter's digit limit
        raise DecodeError(f"Unreadable filter JSON: {exc}") from exc
    if not isinstance(parsed, dict):
        raise DecodeError("Filter body must be a JSON object", path="$")
    return parsed


def _prepare(data: Dict[str, Any], settings: CodecSettings, diagnostics: Diagnostics) -> Dict[str, Any]:
    """Enforce decode limits and policy, and coerce combinators, before validation.

    Walks the raw structure breadth-first without recursion and returns a copy
    of the node objects; the caller's data is left untouched.
    """

    root = dict(data)
    queue: Deque[Tuple[Dict[str, Any], str, int]] = deque([(root, "$", 1)])
    seen = 0
    while queue:
        node, path, depth = queue.popleft()
        seen += 1
        if settings.max_depth is not None and depth > settings.max_depth:
            raise DecodeError(f"Filter nesting exceeds max_depth={settings.max_depth}", path=path)
        if settings.max_nodes is not None and seen > settings.max_nodes:
            raise DecodeError(f"Filter tree exceeds max_nodes={settings.max_nodes}", path=path)
        if (
            settings.exclusive_filters_children
            and node.get("filters") is not None
            and node.get("children") is not None
        ):
            raise DecodeError("'filters' and 'children' must not be combined on one node", path=path)

        _coerce_combinator(node, path, diagnostics)

        children = node.get("children")
        if isinstance(children, list):
            copied: List[Any] = []
            for idx, child in enumerate(children):
                if isinstance(child, Mapping):
                    child = dict(child)
                    queue.append((child, f"{path}.children[{idx}]", depth + 1))
                copied.append(child)
            node["children"] = copied
    return root


def _coerce_combinator(node: Dict[str, Any], path: str, diagnostics: Diagnostics) -> None:
    raw = node.get("combinator")
    if raw is None:
        return
    name = raw.strip().upper() if isinstance(raw, str) else None
    if name in Combinator.__members__:
        node["combinator"] = name
        return
    diagnostics.add(
        code=codes.UNKNOWN_COMBINATOR,
        message=f"Unknown combinator {raw!r}; using AND",
        path=f"{path}.combinator",
        severity=Severity.WARNING,
    )
    node["combinator"] = None


def _decode_node(dto: FilterNodeDto, path: str, diagnostics: Diagnostics) -> Optional[Node]:
    _report_unknown_keys(dto, path, diagnostics)

    leaf = _decode_leaf(dto.filters, f"{path}.filters", diagnostics)
    children: List[Node] = []
    for idx, child_dto in enumerate(dto.children or []):
        child = _decode_node(child_dto, f"{path}.children[{idx}]", diagnostics)
        if child is not None:
            children.append(child)

    if leaf is None and not children:
        return None
    leaves = [leaf] if leaf is not None else []
    return combine(dto.combinator or Combinator.AND, leaves, children)


def _decode_leaf(filters: Optional[FieldMap], path: str, diagnostics: Diagnostics) -> Optional[Leaf]:
    if not filters:
        return None
    predicates: List[Predicate] = []
    for field, conditions in filters.items():
        for idx, condition in enumerate(conditions):
            cond_path = f"{path}.{field}[{idx}]"
            _report_unknown_keys(condition, cond_path, diagnostics)
            predicate = _decode_condition(field, condition, cond_path, diagnostics)
            if predicate is not None:
                predicates.append(predicate)
    return Leaf(predicates) if predicates else None


def _decode_condition(
    field: str, condition: ConditionDto, path: str, diagnostics: Diagnostics
) -> Optional[Predicate]:
    op = condition.op
    if op in MULTI_VALUE_OPERATORS:
        if condition.values is None:
            diagnostics.add(
                code=codes.DROPPED_CONDITION,
                message=f"{op.value} condition without 'values' dropped",
                path=path,
                severity=Severity.WARNING,
            )
            return None
        return Predicate(field, op, condition.values)

    if op in NULLARY_OPERATORS:
        if condition.value is not None or condition.values:
            diagnostics.add(
                code=codes.IGNORED_VALUE,
                message=f"{op.value} takes no values; supplied values ignored",
                path=path,
                severity=Severity.INFO,
            )
        return Predicate(field, op, ())

    values = () if condition.value is None else (condition.value,)
    return Predicate(field, op, values)


def _report_unknown_keys(model: Union[FilterNodeDto, ConditionDto], path: str, diagnostics: Diagnostics) -> None:
    for key in model.model_extra or {}:
        diagnostics.add(
            code=codes.UNKNOWN_KEY,
            message=f"Unknown key '{key}' ignored",
            path=f"{path}.{key}",
            severity=Severity.WARNING,
        )


def _first_error(exc: ValidationError) -> str:
    errors = exc.errors()
    return errors[0]["msg"] if errors else str(exc)


def _error_path(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "$"
    path = "$"
    for part in errors[0]["loc"]:
        path += f"[{part}]" if isinstance(part, int) else f".{part}"
    return path


# ----- encode -----


def encode_filter_request(request: FilterRequest) -> FilterBodyDto:
    """Convert ``request`` into its wire model.

    The first leaf of a group becomes the group's own ``filters``; all other
    children, further leaves included, are emitted under ``children``. Decoding
    the result puts that leaf first, so child order is not always preserved.
    """

    if request.root is None:
        return FilterBodyDto()
    return FilterBodyDto(**_node_fields(request.root))


def encode_node(node: Node) -> Dict[str, Any]:
    return FilterBodyDto(**_node_fields(node)).model_dump(mode="json", exclude_none=True)


def to_json_string(request: FilterRequest) -> str:
    # json.dumps escapes lone surrogates that JSON input may legally carry.
    body = encode_filter_request(request).model_dump(mode="json", exclude_none=True)
    return json.dumps(body, separators=(",", ":"))


def _node_fields(node: Node) -> Dict[str, Any]:
    if isinstance(node, Leaf):
        return {"filters": _filters_map(node)}

    leaf_idx: Optional[int] = None
    filters = None
    for i, child in enumerate(node.children):
        if isinstance(child, Leaf):
            leaf_idx = i
            filters = _filters_map(child)
            break
    children = [
        FilterNodeDto(**_node_fields(child))
        for i, child in enumerate(node.children)
        if i != leaf_idx
    ]
    return {
        "combinator": node.combinator,
        "filters": filters,
        "children": children or None,
    }


def _filters_map(leaf: Leaf) -> Dict[str, List[ConditionDto]]:
    grouped: Dict[str, List[ConditionDto]] = {}
    for predicate in leaf.predicates:
        grouped.setdefault(predicate.field, []).append(_condition(predicate))
    return grouped


def _condition(predicate: Predicate) -> ConditionDto:
    op = predicate.operator
    if op in MULTI_VALUE_OPERATORS:
        return ConditionDto(op=op, values=list(predicate.values) or None)
    if op in NULLARY_OPERATORS:
        return ConditionDto(op=op)
    return ConditionDto(op=op, value=predicate.values[0] if predicate.values else None)
