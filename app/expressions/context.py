"""Per-call evaluation context."""

import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from app.expressions.evaluator import LazyNamespace


def now_seconds() -> int:
    """Current Unix time in whole seconds."""
    return int(time.time())


@dataclass
class EvaluationContext:
    """Everything an expression can see while being evaluated. Never persisted."""

    record: Any
    columns: LazyNamespace
    now: int
    timeseries: Callable[[int, str], Any]
    record_lookup: Callable[..., Any] | None = None

    def variables(self) -> dict[str, Any]:
        """Variables exposed to expressions; ``item``/``getItem`` are kept for older saved formulas."""
        variables = {
            "record": self.record,
            "item": self.record,
            "columns": self.columns,
            "now": self.now,
            "timeseries": self.timeseries,
        }
        if self.record_lookup is not None:
            variables["getRecord"] = self.record_lookup
            variables["getItem"] = self.record_lookup
        return variables
