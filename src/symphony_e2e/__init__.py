"""Particle Symphony E2E harness."""
from .budgets import BUDGETS, Stopwatch, WaitBudget, budget
from .canvas import CanvasHandle
from .devices import DEVICES, ENGINES, BrowserEngine, DeviceProfile, device_by_name
from .driver import InteractionDriver
from .errors import (
    AssertionFailure,
    BudgetTimeout,
    ElementNotFoundError,
    HarnessError,
    ProbeUnavailable,
)
from .health import HealthOracle, HealthSnapshot
from .matrix import ScenarioMatrixRunner
from .page import SymphonyPage
from .presets import PRESETS, PresetDescriptor, preset_by_key, preset_by_name
from .probes import CAPABILITIES, Capability, CapabilityProbe, ProbeResult, PwaProbe
from .readiness import ReadinessDetector, ReadinessReport
from .results import ResultsDB
from .scenarios import InteractionKind, Scenario, ScenarioOutcome, build_matrix
from .session import BrowserSession
from .snapshot import SnapshotComparator, VisualSnapshot

__all__ = [
    "AssertionFailure",
    "BUDGETS",
    "BrowserEngine",
    "BrowserSession",
    "BudgetTimeout",
    "CAPABILITIES",
    "CanvasHandle",
    "Capability",
    "CapabilityProbe",
    "DEVICES",
    "DeviceProfile",
    "ENGINES",
    "ElementNotFoundError",
    "HarnessError",
    "HealthOracle",
    "HealthSnapshot",
    "InteractionDriver",
    "InteractionKind",
    "PRESETS",
    "PresetDescriptor",
    "ProbeResult",
    "ProbeUnavailable",
    "PwaProbe",
    "ReadinessDetector",
    "ReadinessReport",
    "ResultsDB",
    "Scenario",
    "ScenarioMatrixRunner",
    "ScenarioOutcome",
    "SnapshotComparator",
    "Stopwatch",
    "SymphonyPage",
    "VisualSnapshot",
    "WaitBudget",
    "budget",
    "build_matrix",
    "device_by_name",
    "preset_by_key",
    "preset_by_name",
]
