"""Pydantic models for matrix scenarios and their outcomes.

The matrix is the filtered cross-product of four finite registries:
presets x device profiles x browser engines x interaction kinds.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable

from pydantic import BaseModel, Field

from symphony_e2e.devices import DEVICES, ENGINES, BrowserEngine, DeviceProfile, device_by_name
from symphony_e2e.presets import PRESETS, PresetDescriptor, preset_by_key


class InteractionKind(str, Enum):
    """What a scenario does after the preset switch."""

    IDLE = "idle"
    CLICK_LEFT = "click_left"
    CLICK_RIGHT = "click_right"
    DRAG = "drag"
    MOVE = "move"
    TAP = "tap"
    TOGGLE_DEBUG = "toggle_debug"
    TOGGLE_GLOW = "toggle_glow"
    TOGGLE_MOTION_BLUR = "toggle_motion_blur"
    ESCAPE = "escape"
    STRESS = "stress"
    ORIENTATION = "orientation"
    CAPABILITIES = "capabilities"
    PWA = "pwa"


@dataclass(frozen=True)
class InteractionRequirements:
    needs_touch: bool = False
    needs_mobile: bool = False

    def supports(self, device: DeviceProfile) -> bool:
        if self.needs_touch and not device.has_touch:
            return False
        if self.needs_mobile and not device.is_mobile:
            return False
        return True


REQUIREMENTS: dict[InteractionKind, InteractionRequirements] = {
    kind: InteractionRequirements() for kind in InteractionKind
}
REQUIREMENTS[InteractionKind.TAP] = InteractionRequirements(needs_touch=True)
REQUIREMENTS[InteractionKind.ORIENTATION] = InteractionRequirements(needs_mobile=True)

# Stress cycles through every preset itself. Capability and PWA checks ignore the preset.
PRESET_INDEPENDENT = frozenset({
    InteractionKind.STRESS,
    InteractionKind.CAPABILITIES,
    InteractionKind.PWA,
})


class Scenario(BaseModel):
    """One cell of the matrix."""

    preset_key: int = Field(ge=1, le=len(PRESETS))
    engine: BrowserEngine
    device: str
    interaction: InteractionKind

    @property
    def preset(self) -> PresetDescriptor:
        return preset_by_key(self.preset_key)

    @property
    def profile(self) -> DeviceProfile:
        return device_by_name(self.device)

    @property
    def scenario_id(self) -> str:
        return (
            f"{self.engine.value}/{self.device}/"
            f"{self.preset.name}/{self.interaction.value}"
        )


class ScenarioOutcome(BaseModel):
    """Result of one scenario run. ``error`` holds HarnessError.to_dict()."""

    scenario: Scenario
    status: str  # "passed" | "failed" | "skipped"
    duration_ms: float = 0.0
    phase: str = ""
    error: dict[str, Any] | None = None
    evidence: dict[str, Any] = Field(default_factory=dict)

    @property
    def passed(self) -> bool:
        return self.status == "passed"


def build_matrix(
    presets: Iterable[PresetDescriptor] = PRESETS,
    devices: Iterable[DeviceProfile] = DEVICES,
    engines: Iterable[BrowserEngine] = ENGINES,
    interactions: Iterable[InteractionKind] = tuple(InteractionKind),
) -> list[Scenario]:
    """Cross-product of the registries, minus unsupported combinations."""
    presets = tuple(presets)
    scenarios: list[Scenario] = []
    seen: set[str] = set()
    for engine, device, kind, preset in itertools.product(
        tuple(engines), tuple(devices), tuple(interactions), presets,
    ):
        if not REQUIREMENTS[kind].supports(device):
            continue
        if kind in PRESET_INDEPENDENT:
            preset = presets[0]
        scenario = Scenario(
            preset_key=preset.key,
            engine=BrowserEngine(engine),
            device=device.name,
            interaction=kind,
        )
        if scenario.scenario_id in seen:
            continue
        seen.add(scenario.scenario_id)
        scenarios.append(scenario)
    return scenarios
