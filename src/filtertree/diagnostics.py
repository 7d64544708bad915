from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List

DROPPED_CONDITION = "FILTER_DROPPED_CONDITION"
IGNORED_VALUE = "FILTER_IGNORED_VALUE"
UNKNOWN_KEY = "FILTER_UNKNOWN_KEY"
UNKNOWN_COMBINATOR = "FILTER_UNKNOWN_COMBINATOR"


class Severity(str, Enum):
    WARNING = "warning"
    INFO = "info"


_LOG_LEVELS = {
    Severity.WARNING: logging.WARNING,
    Severity.INFO: logging.INFO,
}


@dataclass(frozen=True)
class Diagnostic:
    """A non-fatal finding produced while decoding wire input."""

    code: str
    message: str
    path: str
    severity: Severity


@dataclass
class Diagnostics:
    messages: List[Diagnostic] = field(default_factory=list)

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self.messages)

    def __len__(self) -> int:
        return len(self.messages)

    def add(self, code: str, message: str, path: str, severity: Severity) -> None:
        self.messages.append(Diagnostic(code=code, message=message, path=path, severity=severity))

    def warnings(self) -> List[Diagnostic]:
        return [msg for msg in self.messages if msg.severity == Severity.WARNING]

    def codes(self) -> List[str]:
        return [msg.code for msg in self.messages]

    def paths(self, code: str) -> List[str]:
        return [msg.path for msg in self.messages if msg.code == code]

    def log(self, logger: logging.Logger, *, level: int = logging.DEBUG) -> None:
        """Emit every message on ``logger``, never above its own severity."""

        for msg in self.messages:
            logger.log(
                min(level, _LOG_LEVELS[msg.severity]),
                "%s at %s: %s",
                msg.code,
                msg.path,
                msg.message,
            )
