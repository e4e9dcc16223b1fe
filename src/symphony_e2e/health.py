"""HealthOracle -- the universal "did this action break the app" check.

healthy := window.wasmReady === true AND canvas visible

A failed check is always a scenario failure: never retried, never
suppressed.  The oracle also enforces readiness monotonicity within its
session -- once the flag was seen true it must stay true.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from loguru import logger

from symphony_e2e.canvas import CanvasHandle
from symphony_e2e.errors import AssertionFailure
from symphony_e2e.readiness import READY_FLAG


@dataclass(frozen=True)
class HealthSnapshot:
    ready: bool
    canvas_visible: bool

    @property
    def healthy(self) -> bool:
        return self.ready and self.canvas_visible

    def as_dict(self) -> dict[str, bool]:
        return {"ready": self.ready, "canvas_visible": self.canvas_visible}


class HealthOracle:
    """Composite liveness predicate for one session."""

    def __init__(self, page: Any, canvas: CanvasHandle):
        self.page = page
        self.canvas = canvas
        self._ready_seen = False
        self._regressed = False

    @property
    def ready_seen(self) -> bool:
        return self._ready_seen

    def snapshot(self) -> HealthSnapshot:
        ready = self.page.evaluate(f"() => window.{READY_FLAG} === true") is True
        visible = bool(self.canvas.is_visible())
        if ready:
            self._ready_seen = True
        elif self._ready_seen:
            self._regressed = True
        return HealthSnapshot(ready=ready, canvas_visible=visible)

    def is_healthy(self) -> bool:
        return self.snapshot().healthy

    def assert_healthy(self, after: str = "") -> HealthSnapshot:
        """Raise AssertionFailure unless the app is healthy right now."""
        snap = self.snapshot()
        context = f" after {after}" if after else ""
        if self._regressed:
            raise AssertionFailure(
                f"Readiness flag went false{context} after being observed true",
                phase="health",
                expected={"ready": True},
                observed=snap.as_dict(),
            )
        if not snap.healthy:
            raise AssertionFailure(
                f"App unhealthy{context}",
                phase="health",
                expected={"ready": True, "canvas_visible": True},
                observed=snap.as_dict(),
            )
        logger.debug(f"healthy{context}")
        return snap
