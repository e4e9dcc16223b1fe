"""InteractionDriver -- semantic operations as canvas-relative low-level input.

All positions are canvas-local.  Each pointer operation resolves the canvas
box first; ElementNotFoundError from that lookup is never caught here.

Key bindings of the driven app:
    Digit1..Digit5  presets (registry order)
    F3              debug overlay
    F4              motion blur
    F5              glow
    Escape          must be a no-op
"""

from __future__ import annotations

from typing import Any

from loguru import logger

from symphony_e2e.budgets import (
    ESCAPE_SETTLE,
    HOLD,
    PRESET_SWITCH,
    TOGGLE_SETTLE,
    WaitBudget,
)
from symphony_e2e.canvas import CanvasHandle
from symphony_e2e.presets import preset_by_key

KEY_DEBUG_OVERLAY = "F3"
KEY_MOTION_BLUR = "F4"
KEY_GLOW = "F5"
KEY_ESCAPE = "Escape"

DRAG_STEPS = 10
BUTTONS = ("left", "right")


class InteractionDriver:
    """Deterministic input primitives bound to one page and its canvas."""

    def __init__(self, page: Any, canvas: CanvasHandle):
        self.page = page
        self.canvas = canvas

    # -- keyboard --

    def press_key(self, key: str, settle: WaitBudget | None = None) -> None:
        self.page.keyboard.press(key)
        logger.debug(f"key {key}")
        if settle is not None:
            self.page.wait_for_timeout(settle.milliseconds)

    def switch_preset(self, key: int) -> None:
        """Issue the preset command and wait out the UI transition window.

        Only guarantees the command was sent; the simulation may still be
        settling when this returns.
        """
        preset = preset_by_key(key)
        self.press_key(preset.key_binding, PRESET_SWITCH)
        logger.debug(f"switched to preset {preset.key} ({preset.name})")

    def toggle_debug_overlay(self) -> None:
        self.press_key(KEY_DEBUG_OVERLAY, TOGGLE_SETTLE)

    def toggle_motion_blur(self) -> None:
        self.press_key(KEY_MOTION_BLUR, TOGGLE_SETTLE)

    def toggle_glow(self) -> None:
        self.press_key(KEY_GLOW, TOGGLE_SETTLE)

    def press_escape(self) -> None:
        self.press_key(KEY_ESCAPE, ESCAPE_SETTLE)

    # -- pointer --

    def click_canvas(self, x: float, y: float, button: str = "left") -> None:
        """Single click at canvas-local (x, y). left = attract, right = repel."""
        if button not in BUTTONS:
            raise ValueError(f"button must be one of {BUTTONS}, got {button!r}")
        gx, gy = self.canvas.to_global(x, y)
        self.page.mouse.click(gx, gy, button=button)
        logger.debug(f"{button} click at local ({x}, {y}) -> page ({gx:.0f}, {gy:.0f})")

    def drag_on_canvas(
        self, start: tuple[float, float], end: tuple[float, float],
    ) -> None:
        """Press, move through DRAG_STEPS interpolated points, release."""
        box = self.canvas.box()
        sx, sy = box["x"] + start[0], box["y"] + start[1]
        ex, ey = box["x"] + end[0], box["y"] + end[1]
        self.page.mouse.move(sx, sy)
        self.page.mouse.down()
        self.page.mouse.move(ex, ey, steps=DRAG_STEPS)
        self.page.mouse.up()
        logger.debug(f"drag local {start} -> {end} in {DRAG_STEPS} steps")

    def move_mouse_on_canvas(self, x: float, y: float) -> None:
        gx, gy = self.canvas.to_global(x, y)
        self.page.mouse.move(gx, gy)

    def hold(self, duration: WaitBudget = HOLD) -> None:
        """Hold the left button at the current pointer position."""
        self.canvas.box()
        self.page.mouse.down()
        self.page.wait_for_timeout(duration.milliseconds)
        self.page.mouse.up()

    def tap_canvas(self, x: float, y: float) -> None:
        """Touch tap at canvas-local (x, y); needs a has_touch context."""
        gx, gy = self.canvas.to_global(x, y)
        self.page.touchscreen.tap(gx, gy)
        logger.debug(f"tap at local ({x}, {y})")
