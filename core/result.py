# core/result.py

from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class StageResult:
    """
    Outcome of one pipeline stage: `ok` tells which branch was taken.
    A failed result still carries a usable `value` (e.g. `{}` after a parse
    failure) plus the error that caused it.
    """

    ok: bool
    value: Any = None
    error: Optional[Exception] = None

    @classmethod
    def success(cls, value: Any) -> "StageResult":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: Exception, value: Any = None) -> "StageResult":
        return cls(ok=False, value=value, error=error)
