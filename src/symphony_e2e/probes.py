"""Capability probes -- read-only checks for optional features of the app.

The app exposes optional entry points on ``window``.  Instead of ad hoc
``typeof window.x`` checks, every entry point is declared once in
CAPABILITIES with its kind and whether it is mandatory, and probing
returns a typed ProbeResult.

Probes tolerate total absence: an optional capability that is missing
yields ``ProbeResult(available=False)``.  A mandatory one raises
AssertionFailure.  Scenarios that cannot run without an optional
capability call ``require()`` and get ProbeUnavailable (reported as skip).

PWA artifacts (manifest, meta tags, service worker) are probed by PwaProbe.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any

import requests
from loguru import logger
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from symphony_e2e.budgets import SERVICE_WORKER, Stopwatch, WaitBudget
from symphony_e2e.errors import AssertionFailure, BudgetTimeout, ProbeUnavailable


class CapabilityKind(str, Enum):
    FUNCTION = "function"  # typeof === 'function'
    OBJECT = "object"      # non-null object
    VALUE = "value"        # any non-null value, returned
    GETTER = "getter"      # function, called with no args, result returned


@dataclass(frozen=True)
class Capability:
    name: str
    path: str  # dotted path below window
    kind: CapabilityKind
    mandatory: bool = False


CAPABILITIES: MappingProxyType[str, Capability] = MappingProxyType({
    c.name: c
    for c in (
        Capability("multi_touch", "setMultiTouchAttractors", CapabilityKind.FUNCTION),
        Capability("gyro_gravity", "setGyroGravity", CapabilityKind.FUNCTION),
        Capability("gyro_disable", "disableGyro", CapabilityKind.FUNCTION),
        Capability("gyro_controller", "GyroController", CapabilityKind.OBJECT),
        Capability("haptics", "HapticFeedback", CapabilityKind.OBJECT),
        Capability("reset_particles", "resetParticles", CapabilityKind.FUNCTION),
        Capability("next_preset", "nextPreset", CapabilityKind.FUNCTION),
        Capability("prev_preset", "prevPreset", CapabilityKind.FUNCTION),
        Capability("particle_count", "getParticleCount", CapabilityKind.GETTER),
        Capability("performance_tier", "PerformanceManager.tier", CapabilityKind.VALUE),
        Capability("set_particle_count", "setParticleCount", CapabilityKind.FUNCTION),
        Capability("active_particle_count", "getActiveParticleCount", CapabilityKind.GETTER),
        Capability("quality_level", "setQualityLevel", CapabilityKind.FUNCTION),
        Capability("toggle_sound", "toggleSound", CapabilityKind.FUNCTION),
        Capability("sound_muted", "isSoundMuted", CapabilityKind.GETTER),
        Capability("toggle_fullscreen", "toggleFullscreen", CapabilityKind.FUNCTION),
        Capability("is_fullscreen", "isFullscreen", CapabilityKind.GETTER),
    )
})

PERFORMANCE_TIERS = ("low", "medium", "high")
MAX_PARTICLES = 15000

_RESOLVE_JS = """([path, kind]) => {
    let v = window;
    for (const part of path.split('.')) {
        if (v === undefined || v === null) return {present: false, value: null};
        v = v[part];
    }
    if (kind === 'function') return {present: typeof v === 'function', value: null};
    if (kind === 'object') return {present: typeof v === 'object' && v !== null, value: null};
    if (kind === 'getter') {
        if (typeof v !== 'function') return {present: false, value: null};
        return {present: true, value: v()};
    }
    const present = v !== undefined && v !== null;
    return {present: present, value: present ? v : null};
}"""

_HAPTIC_ROUNDTRIP_JS = """() => {
    const hf = window.HapticFeedback;
    if (!hf || typeof hf.toggle !== 'function') return null;
    const initial = hf.enabled;
    hf.toggle();
    const after = hf.enabled;
    hf.toggle();
    return {initial: initial, after: after, restored: hf.enabled};
}"""

_TOUCH_SETUP_JS = """() => {
    const style = getComputedStyle(document.body);
    return style.touchAction === 'none'
        || style.overscrollBehavior === 'none'
        || document.body.style.touchAction === 'none';
}"""

_SW_REGISTERED_JS = """async () => {
    if (!('serviceWorker' in navigator)) return false;
    const regs = await navigator.serviceWorker.getRegistrations();
    return regs.length > 0;
}"""


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of one probe; ``value`` is only set for VALUE/GETTER kinds."""

    capability: Capability
    available: bool
    value: Any = None

    def __bool__(self) -> bool:
        return self.available


def capability(name: str) -> Capability:
    try:
        return CAPABILITIES[name]
    except KeyError:
        raise KeyError(f"Unknown capability '{name}'") from None


class CapabilityProbe:
    """Side-effect-free existence/behavior checks against one page."""

    def __init__(self, page: Any):
        self.page = page

    def probe(self, name: str, mandatory: bool | None = None) -> ProbeResult:
        cap = capability(name)
        raw = self.page.evaluate(_RESOLVE_JS, [cap.path, cap.kind.value]) or {}
        result = ProbeResult(cap, bool(raw.get("present")), raw.get("value"))
        is_mandatory = cap.mandatory if mandatory is None else mandatory
        if not result.available:
            if is_mandatory:
                raise AssertionFailure(
                    f"Mandatory capability '{name}' missing",
                    phase="probe",
                    expected=f"window.{cap.path} ({cap.kind.value})",
                    observed=None,
                )
            logger.info(f"capability '{name}' not exposed")
        return result

    def probe_all(self) -> dict[str, ProbeResult]:
        return {name: self.probe(name) for name in CAPABILITIES}

    def require(self, name: str) -> ProbeResult:
        """Like probe() but raises ProbeUnavailable when absent."""
        result = self.probe(name)
        if not result.available:
            cap = result.capability
            raise ProbeUnavailable(
                f"Capability '{name}' not available",
                phase="probe",
                expected=f"window.{cap.path}",
            )
        return result

    # -- behavior probes --

    def haptic_toggle_roundtrip(self) -> dict[str, Any] | None:
        """Toggle HapticFeedback twice; returns {initial, after, restored} or None."""
        return self.page.evaluate(_HAPTIC_ROUNDTRIP_JS)

    def assert_haptic_toggle(self) -> dict[str, Any]:
        result = self.haptic_toggle_roundtrip()
        if result is None:
            raise ProbeUnavailable("HapticFeedback.toggle not available", phase="probe")
        if result["after"] == result["initial"] or result["restored"] != result["initial"]:
            raise AssertionFailure(
                "HapticFeedback.toggle is not a reversible inversion",
                phase="probe",
                expected={"after": not result["initial"], "restored": result["initial"]},
                observed=result,
            )
        return result

    def particle_count(self) -> int | None:
        value = self.probe("particle_count").value
        return int(value) if isinstance(value, (int, float)) else None

    def assert_particle_count(self, maximum: int = MAX_PARTICLES) -> int:
        count = self.particle_count()
        if count is None or not (0 < count <= maximum):
            raise AssertionFailure(
                "Particle count outside sane range",
                phase="probe",
                expected=f"0 < count <= {maximum}",
                observed=count,
            )
        return count

    def performance_tier(self) -> str | None:
        value = self.probe("performance_tier").value
        return value if isinstance(value, str) else None

    def assert_performance_tier(self) -> str:
        tier = self.performance_tier()
        if tier is None:
            raise ProbeUnavailable("PerformanceManager.tier not exposed", phase="probe")
        if tier not in PERFORMANCE_TIERS:
            raise AssertionFailure(
                "Unknown performance tier",
                phase="probe",
                expected=list(PERFORMANCE_TIERS),
                observed=tier,
            )
        return tier

    def touch_setup(self) -> bool:
        """True if the page disables native touch gestures on <body>."""
        return bool(self.page.evaluate(_TOUCH_SETUP_JS))


# ---------------------------------------------------------------------------
# PWA artifacts
# ---------------------------------------------------------------------------

MANIFEST_PATH = "manifest.json"
SW_POLL_MS = 100
REQUIRED_MANIFEST = {
    "name": "Particle Symphony",
    "short_name": "Particles",
    "display": "standalone",
}


class PwaProbe:
    """Manifest, meta tag and service-worker checks.

    The manifest document is mandatory: any deviation is an AssertionFailure.
    """

    def __init__(self, page: Any, base_url: str):
        self.page = page
        self.base_url = base_url.rstrip("/")

    def fetch_manifest(self) -> dict[str, Any]:
        url = f"{self.base_url}/{MANIFEST_PATH}"
        resp = requests.get(url, timeout=5)
        if resp.status_code != 200:
            raise AssertionFailure(
                f"GET {MANIFEST_PATH} failed",
                phase="manifest",
                expected=200,
                observed=resp.status_code,
            )
        try:
            manifest = resp.json()
        except ValueError:
            raise AssertionFailure(
                f"{MANIFEST_PATH} is not valid JSON",
                phase="manifest",
                observed=resp.text[:200],
            ) from None
        for key, expected in REQUIRED_MANIFEST.items():
            if manifest.get(key) != expected:
                raise AssertionFailure(
                    f"Manifest field '{key}' wrong",
                    phase="manifest",
                    expected=expected,
                    observed=manifest.get(key),
                )
        icons = manifest.get("icons")
        if not isinstance(icons, list) or len(icons) == 0:
            raise AssertionFailure(
                "Manifest has no icons",
                phase="manifest",
                expected="non-empty icons array",
                observed=icons,
            )
        return manifest

    def meta_tags(self) -> dict[str, str | None]:
        return {
            "viewport": self.page.get_attribute('meta[name="viewport"]', "content"),
            "apple-mobile-web-app-capable": self.page.get_attribute(
                'meta[name="apple-mobile-web-app-capable"]', "content"),
            "apple-mobile-web-app-status-bar-style": self.page.get_attribute(
                'meta[name="apple-mobile-web-app-status-bar-style"]', "content"),
            "manifest": self.page.get_attribute('link[rel="manifest"]', "href"),
        }

    def assert_meta_tags(self) -> dict[str, str | None]:
        tags = self.meta_tags()
        viewport = tags["viewport"] or ""
        for needle in ("user-scalable=no", "maximum-scale=1.0"):
            if needle not in viewport:
                raise AssertionFailure(
                    "Viewport meta allows zoom",
                    phase="meta",
                    expected=needle,
                    observed=viewport,
                )
        if tags["apple-mobile-web-app-capable"] != "yes":
            raise AssertionFailure(
                "apple-mobile-web-app-capable not set",
                phase="meta",
                expected="yes",
                observed=tags["apple-mobile-web-app-capable"],
            )
        if not tags["apple-mobile-web-app-status-bar-style"]:
            raise AssertionFailure(
                "apple-mobile-web-app-status-bar-style missing",
                phase="meta",
                expected="any value",
                observed=None,
            )
        if tags["manifest"] != MANIFEST_PATH:
            raise AssertionFailure(
                "Manifest link tag wrong",
                phase="meta",
                expected=MANIFEST_PATH,
                observed=tags["manifest"],
            )
        return tags

    def service_worker_registered(self) -> bool:
        return bool(self.page.evaluate(_SW_REGISTERED_JS))

    def wait_for_service_worker(self, budget: WaitBudget = SERVICE_WORKER) -> float:
        """Wait in the page until a registration exists; returns elapsed ms."""
        sw = Stopwatch()
        try:
            self.page.wait_for_function(
                _SW_REGISTERED_JS, timeout=budget.milliseconds, polling=SW_POLL_MS,
            )
        except PlaywrightTimeoutError:
            raise BudgetTimeout(
                "Service worker not registered",
                phase="service_worker",
                budget=budget.name,
                budget_ms=budget.milliseconds,
                elapsed_ms=sw.elapsed_ms,
                expected=True,
                observed=self.service_worker_registered(),
            ) from None
        return sw.elapsed_ms
