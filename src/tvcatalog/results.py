#!/usr/bin/env python3
"""Success/failure outcomes returned by the source loading components.

Loaders never raise to their callers; they hand back an ``Outcome`` so the
resolver can walk its fallback chain by inspecting results.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, Optional, TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    EXPIRED = "expired"
    NETWORK_FAILURE = "network_failure"
    EMPTY_RESULT = "empty_result"
    IO_FAILURE = "io_failure"


@dataclass(frozen=True)
class Outcome(Generic[T]):
    ok: bool
    value: Optional[T] = None
    error: Optional[str] = None
    kind: Optional[ErrorKind] = None
    status_code: Optional[int] = None

    @classmethod
    def success(cls, value: Any = None) -> "Outcome":
        return cls(True, value=value)

    @classmethod
    def failure(cls, kind: ErrorKind, error: str, *, status_code: int | None = None) -> "Outcome":
        return cls(False, error=error, kind=kind, status_code=status_code)

    def get_or_none(self) -> Optional[T]:
        return self.value if self.ok else None

    def __bool__(self) -> bool:
        return self.ok


__all__ = ["ErrorKind", "Outcome"]
