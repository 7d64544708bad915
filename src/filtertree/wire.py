"""Pydantic models for the JSON wire format.

```
RequestBody  := { filters?: FieldMap, children?: NodeDto[], combinator?: AND|OR|NOT }
NodeDto      := { filters?: FieldMap, children?: NodeDto[], combinator?: AND|OR|NOT }
FieldMap     := { <field>: ConditionDto[] }
ConditionDto := { op: Operator, value?: string, values?: string[] }
```

Unknown keys are kept in ``model_extra`` so the codec can report them; they
never fail validation.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from .ast import Combinator, Operator
from .values import to_value_string

FieldMap = Dict[str, List["ConditionDto"]]


class ConditionDto(BaseModel):
    op: Operator
    value: Optional[str] = None
    values: Optional[List[str]] = None

    model_config = ConfigDict(extra="allow")

    @field_validator("op", mode="before")
    @classmethod
    def _upper_operator(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @field_validator("value", mode="before")
    @classmethod
    def _coerce_value(cls, value: Any) -> Any:
        if value is None or isinstance(value, (dict, list)):
            return value
        return to_value_string(value)

    @field_validator("values", mode="before")
    @classmethod
    def _coerce_values(cls, value: Any) -> Any:
        if not isinstance(value, list):
            return value
        return [
            item if item is None or isinstance(item, (dict, list)) else to_value_string(item)
            for item in value
        ]


class FilterNodeDto(BaseModel):
    combinator: Optional[Combinator] = None
    filters: Optional[FieldMap] = None
    children: Optional[List["FilterNodeDto"]] = None

    model_config = ConfigDict(extra="allow")


class FilterBodyDto(FilterNodeDto):
    """Top-level request body; same shape as a nested node."""


FilterNodeDto.model_rebuild()
FilterBodyDto.model_rebuild()
