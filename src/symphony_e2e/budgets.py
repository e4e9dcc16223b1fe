"""Wait-budget registry.

Every wait in the harness is bounded by one of these named ceilings.  They
are MAXIMUM allowed times: if the driven application needs longer, that is
a defect in the application, not in the harness.

Values are milliseconds because the Playwright API takes milliseconds.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from types import MappingProxyType


@dataclass(frozen=True)
class WaitBudget:
    """Named upper bound for one phase of startup or interaction."""

    name: str
    milliseconds: int

    @property
    def seconds(self) -> float:
        return self.milliseconds / 1000.0


LOAD_GATE = WaitBudget("load_gate", 5000)
INDICATOR_HIDDEN = WaitBudget("indicator_hidden", 2000)
READY_GATE = WaitBudget("ready_gate", 10000)
PRESET_SWITCH = WaitBudget("preset_switch", 500)
PRESET_SETTLE = WaitBudget("preset_settle", 300)
INTERACTION_RESPONSE = WaitBudget("interaction_response", 200)
STABILIZE = WaitBudget("stabilize", 500)
VISUAL_SETTLE = WaitBudget("visual_settle", 1000)

TOGGLE_SETTLE = WaitBudget("toggle_settle", 100)
STRESS_SETTLE = WaitBudget("stress_settle", 200)
ESCAPE_SETTLE = WaitBudget("escape_settle", 500)
ORIENTATION_REFLOW = WaitBudget("orientation_reflow", 200)
CAPABILITY_SETUP = WaitBudget("capability_setup", 500)
TIER_DETECT = WaitBudget("tier_detect", 700)
SERVICE_WORKER = WaitBudget("service_worker", 1000)
ANIMATION_INTERVAL = WaitBudget("animation_interval", 500)
MOBILE_READY_GATE = WaitBudget("mobile_ready_gate", 15000)
HOLD = WaitBudget("hold", 500)

BUDGETS: MappingProxyType[str, WaitBudget] = MappingProxyType({
    b.name: b
    for b in (
        LOAD_GATE,
        INDICATOR_HIDDEN,
        READY_GATE,
        PRESET_SWITCH,
        PRESET_SETTLE,
        INTERACTION_RESPONSE,
        STABILIZE,
        VISUAL_SETTLE,
        TOGGLE_SETTLE,
        STRESS_SETTLE,
        ESCAPE_SETTLE,
        ORIENTATION_REFLOW,
        CAPABILITY_SETUP,
        TIER_DETECT,
        SERVICE_WORKER,
        ANIMATION_INTERVAL,
        MOBILE_READY_GATE,
        HOLD,
    )
})


def budget(name: str) -> WaitBudget:
    """Look up a budget by name. Raises KeyError for unknown names."""
    try:
        return BUDGETS[name]
    except KeyError:
        raise KeyError(f"Unknown wait budget '{name}'") from None


class Stopwatch:
    """Monotonic elapsed-time measurement in milliseconds."""

    def __init__(self):
        self._t0 = time.monotonic()

    @property
    def elapsed_ms(self) -> float:
        return (time.monotonic() - self._t0) * 1000.0

    def restart(self) -> None:
        self._t0 = time.monotonic()
