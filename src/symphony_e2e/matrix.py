"""ScenarioMatrixRunner -- executes matrix scenarios in isolated sessions.

Per scenario:
    fresh session -> navigate (never reload) -> readiness gate
    -> switch preset + settle -> health -> interaction step -> final health

A failure aborts only its own scenario and becomes a reported outcome;
siblings are unaffected.  Nothing is retried.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Iterable

from loguru import logger

from symphony_e2e.budgets import MOBILE_READY_GATE, PRESET_SETTLE, READY_GATE, Stopwatch
from symphony_e2e.errors import HarnessError, ProbeUnavailable
from symphony_e2e.page import SymphonyPage
from symphony_e2e.results import ResultsDB
from symphony_e2e.scenarios import InteractionKind, Scenario, ScenarioOutcome
from symphony_e2e.session import BrowserSession
from symphony_e2e.snapshot import SOME_CONTENT, VisualSnapshot, pixel_stats
from symphony_e2e.steps import run_step

SessionFactory = Callable[[Scenario], BrowserSession]


class ScenarioMatrixRunner:
    """Runs scenarios, optionally in parallel, and records outcomes.

    Args:
        base_url: Root URL of the driven app.
        workers: Max concurrent sessions (1 = sequential).
        headless: Launch browsers headless.
        db: Optional ResultsDB; outcomes are recorded under ``run_id``.
        run_id: ResultsDB run to record into.
        session_factory: Override session creation (tests).
    """

    def __init__(
        self,
        base_url: str,
        workers: int = 1,
        headless: bool = True,
        navigation_timeout_ms: int = 30000,
        db: ResultsDB | None = None,
        run_id: int | None = None,
        session_factory: SessionFactory | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.workers = max(1, workers)
        self.headless = headless
        self.navigation_timeout_ms = navigation_timeout_ms
        self.db = db
        self.run_id = run_id
        self._session_factory = session_factory or self._default_session

    def _default_session(self, scenario: Scenario) -> BrowserSession:
        return BrowserSession(
            engine=scenario.engine,
            device=scenario.profile,
            headless=self.headless,
            navigation_timeout_ms=self.navigation_timeout_ms,
        )

    def run(self, scenarios: Iterable[Scenario]) -> list[ScenarioOutcome]:
        scenarios = list(scenarios)
        logger.info(f"Running {len(scenarios)} scenarios with {self.workers} worker(s)")
        if self.workers == 1:
            outcomes = [self.run_one(s) for s in scenarios]
        else:
            outcomes = []
            with ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="scenario") as pool:
                futures = [pool.submit(self.run_one, s) for s in scenarios]
                for fut in as_completed(futures):
                    outcomes.append(fut.result())
        passed = sum(1 for o in outcomes if o.status == "passed")
        failed = sum(1 for o in outcomes if o.status == "failed")
        skipped = sum(1 for o in outcomes if o.status == "skipped")
        logger.info(f"Matrix done: {passed} passed, {failed} failed, {skipped} skipped")
        return outcomes

    def run_one(self, scenario: Scenario) -> ScenarioOutcome:
        """Run one scenario in its own session. Never raises for scenario failures."""
        sw = Stopwatch()
        evidence: dict = {}
        phase = "session"
        session = None
        try:
            session = self._session_factory(scenario)
            session.start()
            sp = SymphonyPage(session.page, self.base_url)

            phase = "readiness"
            gate = MOBILE_READY_GATE if scenario.profile.is_mobile else READY_GATE
            report = sp.goto(ready_gate=gate)
            evidence["readiness_ms"] = {k: round(v, 1) for k, v in report.phases.items()}
            sp.health.assert_healthy(after="startup")

            if scenario.interaction is not InteractionKind.STRESS:
                phase = "preset_switch"
                sp.driver.switch_preset(scenario.preset_key)
                sp.wait(PRESET_SETTLE)
                sp.health.assert_healthy(after=f"preset {scenario.preset.name}")
                shot = sp.snapshots.capture(f"preset_{scenario.preset.name}")
                sp.snapshots.assert_has_content(shot, SOME_CONTENT)
                evidence["preset_snapshot_bytes"] = len(shot)
                self._record_snapshot(scenario, shot)

            phase = scenario.interaction.value
            evidence.update(run_step(scenario.interaction, sp, session))

            phase = "final_health"
            sp.health.assert_healthy(after="scenario")
            sp.assert_no_critical_errors(after=scenario.interaction.value)
            outcome = ScenarioOutcome(
                scenario=scenario, status="passed",
                duration_ms=sw.elapsed_ms, evidence=evidence,
            )
        except ProbeUnavailable as e:
            logger.warning(f"SKIP {scenario.scenario_id}: {e}")
            outcome = ScenarioOutcome(
                scenario=scenario, status="skipped", duration_ms=sw.elapsed_ms,
                phase=e.phase or phase, error=e.to_dict(), evidence=evidence,
            )
        except HarnessError as e:
            logger.error(f"FAIL {scenario.scenario_id}: {e}")
            outcome = ScenarioOutcome(
                scenario=scenario, status="failed", duration_ms=sw.elapsed_ms,
                phase=e.phase or phase, error=e.to_dict(), evidence=evidence,
            )
        except Exception as e:
            # Playwright/driver errors: still terminal for this scenario only.
            logger.error(f"ERROR {scenario.scenario_id} in {phase}: {e}")
            outcome = ScenarioOutcome(
                scenario=scenario, status="failed", duration_ms=sw.elapsed_ms,
                phase=phase,
                error={"kind": type(e).__name__, "message": str(e), "phase": phase},
                evidence=evidence,
            )
        finally:
            if session is not None:
                _close_quietly(session, scenario)

        if outcome.passed:
            logger.info(f"PASS {scenario.scenario_id} ({outcome.duration_ms:.0f}ms)")
        self._record(outcome)
        return outcome

    def _record_snapshot(self, scenario: Scenario, shot: VisualSnapshot) -> None:
        if self.db is None or self.run_id is None:
            return
        self.db.record_snapshot(
            self.run_id, scenario.scenario_id, shot.label, len(shot), pixel_stats(shot),
        )

    def _record(self, outcome: ScenarioOutcome) -> None:
        if self.db is None or self.run_id is None:
            return
        self.db.record_outcome(self.run_id, outcome)


def _close_quietly(session: BrowserSession, scenario: Scenario) -> None:
    """Teardown errors are logged; they never replace the scenario outcome."""
    try:
        session.close()
    except Exception as e:
        logger.warning(f"{scenario.scenario_id}: session close failed: {e}")
