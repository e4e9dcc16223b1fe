"""Interaction steps run by the matrix, one per InteractionKind.

Positions are fractions of the canvas so the same step works on a
1280x720 desktop canvas and a 390px-wide phone canvas.  On 1280x720 they
land on the classic (640, 360) center and (200, 360) -> (800, 360) drag.
Every mutating call is followed by a health assertion.
"""

from __future__ import annotations

from typing import Any, Callable

from symphony_e2e.budgets import (
    CAPABILITY_SETUP,
    INTERACTION_RESPONSE,
    ORIENTATION_REFLOW,
    STABILIZE,
    STRESS_SETTLE,
    TIER_DETECT,
    TOGGLE_SETTLE,
)
from symphony_e2e.errors import AssertionFailure
from symphony_e2e.page import SymphonyPage
from symphony_e2e.presets import PRESETS
from symphony_e2e.scenarios import InteractionKind
from symphony_e2e.session import BrowserSession
from symphony_e2e.snapshot import SOME_CONTENT

STRESS_ROUNDS = 3

Step = Callable[[SymphonyPage, BrowserSession], dict[str, Any]]


def _at(sp: SymphonyPage, fx: float, fy: float) -> tuple[float, float]:
    w, h = sp.canvas.dimensions()
    return w * fx, h * fy


def _idle(sp: SymphonyPage, session: BrowserSession) -> dict[str, Any]:
    sp.wait(STABILIZE)
    shot = sp.snapshots.capture("idle")
    sp.snapshots.assert_has_content(shot, SOME_CONTENT)
    return {"snapshot_bytes": len(shot)}


def _click_left(sp: SymphonyPage, session: BrowserSession) -> dict[str, Any]:
    sp.wait(STABILIZE)
    before = sp.snapshots.capture("before_attract")
    x, y = _at(sp, 0.5, 0.5)
    sp.driver.click_canvas(x, y, "left")
    sp.wait(INTERACTION_RESPONSE)
    sp.driver.hold()
    sp.wait(INTERACTION_RESPONSE)
    after = sp.snapshots.capture("after_attract")
    sp.health.assert_healthy(after="left click")
    sp.snapshots.assert_changed(before, after, "left click")
    return {"before_bytes": len(before), "after_bytes": len(after)}


def _click_right(sp: SymphonyPage, session: BrowserSession) -> dict[str, Any]:
    sp.wait(STABILIZE)
    x, y = _at(sp, 0.5, 0.5)
    sp.driver.click_canvas(x, y, "right")
    sp.wait(INTERACTION_RESPONSE)
    sp.health.assert_healthy(after="right click")
    return {}


def _drag(sp: SymphonyPage, session: BrowserSession) -> dict[str, Any]:
    sp.wait(STABILIZE)
    start = _at(sp, 5 / 32, 0.5)
    end = _at(sp, 5 / 8, 0.5)
    sp.driver.drag_on_canvas(start, end)
    sp.health.assert_healthy(after="drag")
    return {"from": list(start), "to": list(end)}


def _move(sp: SymphonyPage, session: BrowserSession) -> dict[str, Any]:
    sp.wait(STABILIZE)
    for fx, fy in ((0.08, 0.14), (0.4, 0.42), (0.62, 0.7)):
        sp.driver.move_mouse_on_canvas(*_at(sp, fx, fy))
        sp.wait(TOGGLE_SETTLE)
    sp.health.assert_healthy(after="mouse moves")
    return {}


def _tap(sp: SymphonyPage, session: BrowserSession) -> dict[str, Any]:
    sp.wait(STABILIZE)
    sp.driver.tap_canvas(*_at(sp, 0.5, 0.5))
    sp.wait(INTERACTION_RESPONSE)
    sp.health.assert_healthy(after="tap")
    return {}


def _toggle_debug(sp: SymphonyPage, session: BrowserSession) -> dict[str, Any]:
    before = sp.snapshots.capture("debug_off")
    sp.driver.toggle_debug_overlay()
    with_debug = sp.snapshots.capture("debug_on")
    sp.health.assert_healthy(after="debug overlay on")
    sp.driver.toggle_debug_overlay()
    sp.health.assert_healthy(after="debug overlay off")
    sp.snapshots.assert_changed(before, with_debug, "debug overlay toggle")
    return {
        "before_bytes": len(before),
        "debug_bytes": len(with_debug),
        "restored": "unobservable",
    }


def _toggle_twice(name: str) -> Step:
    """Toggle on and off again. The app exposes no toggle flags, so only
    health is asserted; the evidence records that restoration is unobservable.
    """
    def step(sp: SymphonyPage, session: BrowserSession) -> dict[str, Any]:
        sp.wait(STABILIZE)
        toggle = getattr(sp.driver, f"toggle_{name}")
        toggle()
        sp.wait(INTERACTION_RESPONSE)
        sp.health.assert_healthy(after=f"{name} on")
        toggle()
        sp.wait(INTERACTION_RESPONSE)
        sp.health.assert_healthy(after=f"{name} off")
        return {"toggles": 2, "restored": "unobservable"}
    return step


def _escape(sp: SymphonyPage, session: BrowserSession) -> dict[str, Any]:
    url = sp.page.url
    sp.driver.press_escape()
    if sp.page.url != url:
        raise AssertionFailure(
            "Escape navigated away",
            phase="escape",
            expected=url,
            observed=sp.page.url,
        )
    sp.health.assert_healthy(after="Escape")
    return {}


def _stress(sp: SymphonyPage, session: BrowserSession) -> dict[str, Any]:
    """Three full rounds through every preset, each switch followed by a click."""
    switches = 0
    for _ in range(STRESS_ROUNDS):
        for preset in PRESETS:
            sp.driver.switch_preset(preset.key)
            sp.wait(STRESS_SETTLE)
            sp.driver.click_canvas(*_at(sp, 0.5, 0.5))
            switches += 1
    sp.health.assert_healthy(after=f"{STRESS_ROUNDS} stress rounds")
    return {"switches": switches}


def _orientation(sp: SymphonyPage, session: BrowserSession) -> dict[str, Any]:
    before_w, _ = sp.canvas.dimensions()
    rotated = session.device.rotated()
    session.set_viewport(rotated.width, rotated.height)
    sp.wait(ORIENTATION_REFLOW)
    after_w, _ = sp.canvas.dimensions()
    if after_w == before_w:
        raise AssertionFailure(
            "Canvas did not re-flow on orientation change",
            phase="orientation",
            budget=ORIENTATION_REFLOW.name,
            budget_ms=ORIENTATION_REFLOW.milliseconds,
            expected=f"width != {before_w}",
            observed=after_w,
        )
    sp.health.assert_healthy(after="orientation change")
    return {"width_before": before_w, "width_after": after_w}


def _capabilities(sp: SymphonyPage, session: BrowserSession) -> dict[str, Any]:
    """Optional capabilities the device class relies on, plus behaviour checks.

    A missing optional capability raises ProbeUnavailable (reported as skip).
    """
    sp.wait(CAPABILITY_SETUP)
    exposed = {name: bool(result) for name, result in sp.probes.probe_all().items()}
    if session.device.has_touch:
        sp.probes.require("multi_touch")
        if not sp.probes.touch_setup():
            raise AssertionFailure(
                "Native touch gestures not disabled on <body>",
                phase="touch_setup",
                expected="touch-action: none",
                observed=False,
            )
    if session.device.is_mobile:
        sp.probes.require("gyro_gravity")
        sp.probes.require("gyro_disable")
    haptics = sp.probes.assert_haptic_toggle()
    sp.wait(TIER_DETECT)
    tier = sp.probes.assert_performance_tier()
    count = sp.probes.assert_particle_count()
    sp.health.assert_healthy(after="capability checks")
    return {"exposed": exposed, "haptics": haptics, "tier": tier, "particle_count": count}


def _pwa(sp: SymphonyPage, session: BrowserSession) -> dict[str, Any]:
    manifest = sp.pwa.fetch_manifest()
    tags = sp.pwa.assert_meta_tags()
    sw_ms = sp.pwa.wait_for_service_worker()
    sp.health.assert_healthy(after="PWA checks")
    return {
        "manifest": {k: manifest.get(k) for k in ("name", "short_name", "display")},
        "meta": tags,
        "service_worker_ms": round(sw_ms, 1),
    }


STEPS: dict[InteractionKind, Step] = {
    InteractionKind.IDLE: _idle,
    InteractionKind.CLICK_LEFT: _click_left,
    InteractionKind.CLICK_RIGHT: _click_right,
    InteractionKind.DRAG: _drag,
    InteractionKind.MOVE: _move,
    InteractionKind.TAP: _tap,
    InteractionKind.TOGGLE_DEBUG: _toggle_debug,
    InteractionKind.TOGGLE_GLOW: _toggle_twice("glow"),
    InteractionKind.TOGGLE_MOTION_BLUR: _toggle_twice("motion_blur"),
    InteractionKind.ESCAPE: _escape,
    InteractionKind.STRESS: _stress,
    InteractionKind.ORIENTATION: _orientation,
    InteractionKind.CAPABILITIES: _capabilities,
    InteractionKind.PWA: _pwa,
}


def run_step(kind: InteractionKind, sp: SymphonyPage, session: BrowserSession) -> dict[str, Any]:
    return STEPS[InteractionKind(kind)](sp, session)
