"""SymphonyPage -- page object bundling the harness components for one page.

Usage:
    sp = SymphonyPage(page, base_url)
    sp.goto()
    sp.driver.switch_preset(2)
    sp.health.assert_healthy(after="preset 2")
"""

from __future__ import annotations

from typing import Any

from symphony_e2e.budgets import READY_GATE, Stopwatch, WaitBudget
from symphony_e2e.canvas import CanvasHandle
from symphony_e2e.driver import InteractionDriver
from symphony_e2e.errors import AssertionFailure
from symphony_e2e.health import HealthOracle
from symphony_e2e.probes import CapabilityProbe, PwaProbe
from symphony_e2e.readiness import ReadinessDetector, ReadinessReport
from symphony_e2e.snapshot import SnapshotComparator


class SymphonyPage:
    """All interaction/observation primitives for one Particle Symphony page."""

    def __init__(self, page: Any, base_url: str):
        self.page = page
        self.base_url = base_url.rstrip("/")
        self.canvas = CanvasHandle(page)
        self.readiness = ReadinessDetector(page, self.canvas)
        self.driver = InteractionDriver(page, self.canvas)
        self.health = HealthOracle(page, self.canvas)
        self.snapshots = SnapshotComparator(self.canvas)
        self.probes = CapabilityProbe(page)
        self.pwa = PwaProbe(page, self.base_url)
        self.console_errors: list[str] = []
        page.on("console", self._on_console)
        page.on("pageerror", lambda e: self.console_errors.append(str(e)))

    def _on_console(self, msg) -> None:
        if msg.type == "error":
            self.console_errors.append(msg.text)

    def navigate(self, path: str = "/") -> Any:
        """Fresh navigation (never a reload)."""
        return self.page.goto(f"{self.base_url}{path}")

    def goto(self, path: str = "/", ready_gate: WaitBudget = READY_GATE) -> ReadinessReport:
        """Navigate and pass the readiness gate."""
        sw = Stopwatch()
        self.navigate(path)
        report = self.readiness.wait_for_ready(ready_gate)
        report.phases["navigation"] = max(sw.elapsed_ms - report.total_ms, 0.0)
        return report

    def critical_errors(self, ignore: tuple[str, ...] = ("favicon", "404", "ResizeObserver")) -> list[str]:
        """Console/page errors minus known-harmless noise."""
        return [e for e in self.console_errors if not any(s in e for s in ignore)]

    def assert_no_critical_errors(self, after: str = "") -> None:
        """JavaScript errors raised while the page was driven fail the scenario."""
        errors = self.critical_errors()
        if errors:
            context = f" after {after}" if after else ""
            raise AssertionFailure(
                f"JavaScript errors{context}",
                phase="console_errors",
                expected=[],
                observed=errors,
            )

    def wait(self, budget: WaitBudget) -> None:
        self.page.wait_for_timeout(budget.milliseconds)
