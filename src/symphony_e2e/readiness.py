"""ReadinessDetector -- multi-phase gate before any interaction.

Phases (causally ordered, independently timed):
  1. canvas visible            -- hard, LOAD_GATE (5s)
  2. loading indicator hidden  -- soft, INDICATOR_HIDDEN (2s); the indicator
                                  may be absent or already removed
  3. window.wasmReady === true -- hard, READY_GATE (10s)

Keeping the phases separate shows exactly which one regressed.  The flag is
polled inside the page; the harness never keeps its own copy of it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from loguru import logger
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from symphony_e2e.budgets import (
    INDICATOR_HIDDEN,
    LOAD_GATE,
    READY_GATE,
    Stopwatch,
    WaitBudget,
)
from symphony_e2e.canvas import CanvasHandle
from symphony_e2e.errors import BudgetTimeout

LOADING_SELECTOR = "#loading"
READY_FLAG = "wasmReady"
READY_PREDICATE = f"() => window.{READY_FLAG} === true"


@dataclass
class ReadinessReport:
    """Elapsed milliseconds per phase of one readiness gate."""

    phases: dict[str, float] = field(default_factory=dict)
    indicator_hidden: bool = True

    @property
    def total_ms(self) -> float:
        return sum(self.phases.values())


class ReadinessDetector:
    """Declares the driven application usable, or fails with the phase that did not."""

    def __init__(
        self,
        page: Any,
        canvas: CanvasHandle,
        loading_selector: str = LOADING_SELECTOR,
    ):
        self.page = page
        self.canvas = canvas
        self.loading_selector = loading_selector

    def wait_for_ready(self, ready_gate: WaitBudget = READY_GATE) -> ReadinessReport:
        report = ReadinessReport()
        report.phases["canvas_visible"] = self._wait_canvas_visible()
        elapsed, hidden = self._wait_indicator_hidden()
        report.phases["indicator_hidden"] = elapsed
        report.indicator_hidden = hidden
        report.phases["ready_flag"] = self._wait_ready_flag(ready_gate)
        logger.info(
            f"App ready in {report.total_ms:.0f}ms "
            f"({', '.join(f'{k}={v:.0f}ms' for k, v in report.phases.items())})"
        )
        return report

    def _wait_canvas_visible(self) -> float:
        sw = Stopwatch()
        try:
            self.canvas.locator.wait_for(state="visible", timeout=LOAD_GATE.milliseconds)
        except PlaywrightTimeoutError:
            raise BudgetTimeout(
                "Canvas did not become visible",
                phase="canvas_visible",
                budget=LOAD_GATE.name,
                budget_ms=LOAD_GATE.milliseconds,
                elapsed_ms=sw.elapsed_ms,
                expected="visible",
                observed="hidden or absent",
            ) from None
        return sw.elapsed_ms

    def _wait_indicator_hidden(self) -> tuple[float, bool]:
        sw = Stopwatch()
        try:
            self.page.locator(self.loading_selector).wait_for(
                state="hidden", timeout=INDICATOR_HIDDEN.milliseconds,
            )
            return sw.elapsed_ms, True
        except PlaywrightTimeoutError:
            logger.warning(
                f"Loading indicator '{self.loading_selector}' still visible after "
                f"{INDICATOR_HIDDEN.milliseconds}ms; continuing"
            )
            return sw.elapsed_ms, False

    def _wait_ready_flag(self, gate: WaitBudget) -> float:
        sw = Stopwatch()
        try:
            self.page.wait_for_function(READY_PREDICATE, timeout=gate.milliseconds)
        except PlaywrightTimeoutError:
            observed = self.page.evaluate(f"() => window.{READY_FLAG}")
            raise BudgetTimeout(
                f"window.{READY_FLAG} never became true",
                phase="ready_flag",
                budget=gate.name,
                budget_ms=gate.milliseconds,
                elapsed_ms=sw.elapsed_ms,
                expected=True,
                observed=observed,
            ) from None
        return sw.elapsed_ms
