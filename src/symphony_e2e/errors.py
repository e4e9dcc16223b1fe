"""Failure taxonomy for the Particle Symphony harness.

Every failure carries enough context to tell a harness defect apart from a
defect in the driven application: the phase it happened in, the named wait
budget (if any), the measured elapsed time, and the literal expected and
observed values.

Nothing here is ever retried. ``ProbeUnavailable`` is the only kind that a
scenario may turn into a skip.
"""

from __future__ import annotations

from typing import Any


class HarnessError(Exception):
    """Base class for all harness failures."""

    kind = "error"

    def __init__(
        self,
        message: str,
        *,
        phase: str = "",
        budget: str | None = None,
        budget_ms: int | None = None,
        elapsed_ms: float | None = None,
        expected: Any = None,
        observed: Any = None,
    ):
        self.message = message
        self.phase = phase
        self.budget = budget
        self.budget_ms = budget_ms
        self.elapsed_ms = elapsed_ms
        self.expected = expected
        self.observed = observed
        super().__init__(self._render())

    def _render(self) -> str:
        parts = [self.message]
        if self.phase:
            parts.append(f"phase={self.phase}")
        if self.budget is not None:
            timing = f"budget={self.budget}"
            if self.budget_ms is not None:
                timing += f" ({self.budget_ms}ms)"
            parts.append(timing)
        if self.elapsed_ms is not None:
            parts.append(f"elapsed={self.elapsed_ms:.0f}ms")
        if self.expected is not None or self.observed is not None:
            parts.append(f"expected={self.expected!r} observed={self.observed!r}")
        return " | ".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Evidence dict for ResultsDB / reports."""
        return {
            "kind": self.kind,
            "message": self.message,
            "phase": self.phase,
            "budget": self.budget,
            "budget_ms": self.budget_ms,
            "elapsed_ms": self.elapsed_ms,
            "expected": _jsonable(self.expected),
            "observed": _jsonable(self.observed),
        }


class BudgetTimeout(HarnessError, TimeoutError):
    """A named wait budget was exceeded. Always fatal for the scenario."""

    kind = "timeout"


class ElementNotFoundError(HarnessError):
    """A required anchor element is absent or has a zero-size box."""

    kind = "element_not_found"


class AssertionFailure(HarnessError, AssertionError):
    """Observed state violates an expected invariant."""

    kind = "assertion"


class ProbeUnavailable(HarnessError):
    """An optional capability is not exposed by the driven application."""

    kind = "probe_unavailable"


def _jsonable(value: Any) -> Any:
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    return repr(value)
