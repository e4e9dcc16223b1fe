"""CanvasHandle -- the driven app's sole rendering surface.

The bounding box is resolved lazily on every call, since the canvas can
re-flow at any time (resize, orientation change).  A missing or zero-sized
canvas fails loudly with ElementNotFoundError.
"""

from __future__ import annotations

from typing import Any

from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from symphony_e2e.budgets import LOAD_GATE
from symphony_e2e.errors import AssertionFailure, ElementNotFoundError

CANVAS_SELECTOR = "canvas"

# Desktop lower bound, mobile bounds (px).
DESKTOP_MIN_WIDTH = 800
DESKTOP_MIN_HEIGHT = 600
MOBILE_MIN_WIDTH = 300


class CanvasHandle:
    """Canvas element owned by exactly one automation session."""

    def __init__(self, page: Any, selector: str = CANVAS_SELECTOR):
        self.page = page
        self.selector = selector

    @property
    def locator(self):
        return self.page.locator(self.selector).first

    def box(self) -> dict:
        """Return the canvas {x, y, width, height} in page coordinates."""
        if self.page.locator(self.selector).count() == 0:
            raise ElementNotFoundError(
                f"Canvas '{self.selector}' not found in DOM",
                phase="resolve_canvas",
            )
        try:
            box = self.locator.bounding_box(timeout=LOAD_GATE.milliseconds)
        except PlaywrightTimeoutError:
            box = None
        if box is None:
            raise ElementNotFoundError(
                f"Canvas '{self.selector}' has no bounding box (not visible?)",
                phase="resolve_canvas",
            )
        if box["width"] <= 0 or box["height"] <= 0:
            raise ElementNotFoundError(
                f"Canvas '{self.selector}' is zero-sized",
                phase="resolve_canvas",
                observed={"width": box["width"], "height": box["height"]},
            )
        return box

    def to_global(self, x: float, y: float) -> tuple[float, float]:
        """Translate canvas-local (x, y) to page coordinates."""
        box = self.box()
        return box["x"] + x, box["y"] + y

    def dimensions(self) -> tuple[float, float]:
        box = self.box()
        return box["width"], box["height"]

    def center(self) -> tuple[float, float]:
        """Canvas-local center point."""
        w, h = self.dimensions()
        return w / 2, h / 2

    def is_visible(self) -> bool:
        return self.locator.is_visible()

    # -- layout assertions --

    def assert_desktop_size(
        self, min_width: int = DESKTOP_MIN_WIDTH, min_height: int = DESKTOP_MIN_HEIGHT,
    ) -> None:
        w, h = self.dimensions()
        if w < min_width or h < min_height:
            raise AssertionFailure(
                "Canvas smaller than desktop minimum",
                phase="layout",
                expected=f">= {min_width}x{min_height}",
                observed=f"{w:.0f}x{h:.0f}",
            )

    def assert_fits_viewport(self, min_width: int = MOBILE_MIN_WIDTH) -> None:
        """Mobile layout: canvas scales to viewport width, bounded below."""
        w, _ = self.dimensions()
        vw = self.page.evaluate("() => window.innerWidth")
        if not (min_width < w <= vw):
            raise AssertionFailure(
                "Canvas does not scale to mobile viewport width",
                phase="layout",
                expected=f"{min_width} < width <= {vw}",
                observed=w,
            )
