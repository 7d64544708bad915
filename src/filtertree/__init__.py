from pydantic import __version__ as _pydantic_version

# The wire models rely on the Pydantic v2 API (model_validate/model_dump, etc.).
# Import errors should surface early if an incompatible version is installed.
if not _pydantic_version.startswith("2"):
    raise ImportError(
        "filtertree requires pydantic>=2.0; detected version %s" % _pydantic_version
    )

from .ast import (
    MULTI_VALUE_OPERATORS,
    NULLARY_OPERATORS,
    Combinator,
    FilterRequest,
    Group,
    Leaf,
    Node,
    Operator,
    Predicate,
)
from .builder import FilterRequestBuilder, filter_request, to_builder
from .codec import (
    decode_filter_request,
    encode_filter_request,
    encode_node,
    parse_filter_request,
    to_json_string,
)
from .diagnostics import Diagnostic, Diagnostics, Severity
from .errors import DecodeError, FilterTreeError
from .exclusion import exclude_fields, exclude_node
from .normalize import combine, iter_fields, normalize
from .settings import CodecSettings, FilterTreeSettings, load_settings
from .values import to_value_string
from .wire import ConditionDto, FilterBodyDto, FilterNodeDto

__all__ = [
    # model
    "Operator",
    "Combinator",
    "Predicate",
    "Leaf",
    "Group",
    "Node",
    "FilterRequest",
    "MULTI_VALUE_OPERATORS",
    "NULLARY_OPERATORS",
    # algebra
    "normalize",
    "combine",
    "iter_fields",
    "exclude_fields",
    "exclude_node",
    # builder
    "FilterRequestBuilder",
    "filter_request",
    "to_builder",
    "to_value_string",
    # wire
    "ConditionDto",
    "FilterNodeDto",
    "FilterBodyDto",
    "decode_filter_request",
    "parse_filter_request",
    "encode_filter_request",
    "encode_node",
    "to_json_string",
    # errors and diagnostics
    "FilterTreeError",
    "DecodeError",
    "Diagnostic",
    "Diagnostics",
    "Severity",
    # settings
    "CodecSettings",
    "FilterTreeSettings",
    "load_settings",
]
