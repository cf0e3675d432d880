"""
Channel models - One method call in, at most one completion out.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ResultKind(str, Enum):
    """Completion kinds a handler can produce."""

    SUCCESS = "success"
    ERROR = "error"
    NOT_IMPLEMENTED = "not_implemented"


@dataclass(frozen=True)
class MethodCall:
    """Named call from the host shell with its argument mapping."""

    method: str
    arguments: Mapping[str, Any] = field(default_factory=dict)

    def argument(self, key: str) -> Any:
        """Return the argument or None when the shell did not send it."""
        return self.arguments.get(key)


@dataclass(frozen=True)
class CallResult:
    """
    Completion of a method call.

    Success carries `value`; error carries `code`, `message` and `details`;
    not-implemented carries nothing.
    """

    kind: ResultKind
    value: Any = None
    code: str | None = None
    message: str | None = None
    details: dict[str, str] | None = None

    @classmethod
    def success(cls, value: Any = None) -> "CallResult":
        return cls(kind=ResultKind.SUCCESS, value=value)

    @classmethod
    def error(cls, code: str, message: str, details: dict[str, str]) -> "CallResult":
        return cls(kind=ResultKind.ERROR, code=code, message=message, details=details)

    @classmethod
    def not_implemented(cls) -> "CallResult":
        return cls(kind=ResultKind.NOT_IMPLEMENTED)

    @property
    def is_success(self) -> bool:
        return self.kind is ResultKind.SUCCESS

    @property
    def is_error(self) -> bool:
        return self.kind is ResultKind.ERROR
