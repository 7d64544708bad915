from __future__ import annotations

from typing import Optional


class FilterTreeError(Exception):
    """Base class for filtertree errors."""


class DecodeError(FilterTreeError, ValueError):
    """Raised when wire input cannot be decoded into a filter tree."""

    def __init__(self, message: str, *, path: Optional[str] = None) -> None:
        self.message = message
        self.path = path
        super().__init__(f"{message} (at {path})" if path else message)
