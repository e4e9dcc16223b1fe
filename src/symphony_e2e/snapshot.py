"""Visual snapshot capture and comparison.

The simulation output is randomized, so nothing here compares against a
golden image.  Two checks are supported:
  - assert_changed:     before/after snapshots must differ byte-wise
  - assert_has_content: PNG byte length must exceed a coarse lower bound
                        (a blank canvas compresses to almost nothing)

Pass/fail is decided by bytes alone.  OpenCV pixel statistics are only
attached to failures as evidence.
"""
from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any

import cv2
import numpy as np
from loguru import logger

from symphony_e2e.canvas import CanvasHandle
from symphony_e2e.errors import AssertionFailure

SOME_CONTENT = 1000      # bytes: canvas is not blank
DENSE_CONTENT = 3000     # bytes: a preset renders particles
PARTICLE_CONTENT = 5000  # bytes: settled default scene

BLACK_THRESHOLD = 20  # gray level below which a pixel counts as background


@dataclass(frozen=True)
class VisualSnapshot:
    """Opaque PNG bytes of the canvas at one instant."""

    data: bytes
    label: str = ""
    captured_at: float = field(default_factory=time.monotonic)

    def __len__(self) -> int:
        return len(self.data)


def pixel_stats(snapshot: VisualSnapshot) -> dict[str, Any]:
    """Decode the PNG and summarize it (width, height, mean, non-black ratio)."""
    buf = np.frombuffer(snapshot.data, dtype=np.uint8)
    img = cv2.imdecode(buf, cv2.IMREAD_COLOR) if buf.size else None
    if img is None:
        return {"decoded": False, "bytes": len(snapshot)}
    gray = cv2.cvtColor(img, cv2.COLOR_BGR2GRAY)
    non_black = int(cv2.countNonZero((gray > BLACK_THRESHOLD).astype(np.uint8)))
    return {
        "decoded": True,
        "bytes": len(snapshot),
        "width": int(img.shape[1]),
        "height": int(img.shape[0]),
        "mean_luminance": round(float(gray.mean()), 2),
        "non_black_ratio": round(non_black / gray.size, 4),
    }


class SnapshotComparator:
    """Captures canvas pixels and judges change / non-blankness."""

    def __init__(self, canvas: CanvasHandle):
        self.canvas = canvas

    def capture(self, label: str = "") -> VisualSnapshot:
        self.canvas.box()
        data = self.canvas.locator.screenshot()
        snap = VisualSnapshot(data=data, label=label)
        logger.debug(f"snapshot '{label}': {len(snap)} bytes")
        return snap

    @staticmethod
    def compare(a: VisualSnapshot, b: VisualSnapshot) -> bool:
        """True iff the two snapshots are byte-identical."""
        return a.data == b.data

    def assert_changed(
        self, before: VisualSnapshot, after: VisualSnapshot, action: str,
    ) -> None:
        if self.compare(before, after):
            raise AssertionFailure(
                f"Canvas unchanged after {action}",
                phase="visual_change",
                expected="snapshots differ",
                observed={"before": pixel_stats(before), "after": pixel_stats(after)},
            )

    def assert_has_content(
        self, snapshot: VisualSnapshot, min_bytes: int = SOME_CONTENT,
    ) -> None:
        if len(snapshot) <= min_bytes:
            raise AssertionFailure(
                f"Canvas looks blank ({snapshot.label or 'snapshot'})",
                phase="visual_content",
                expected=f"> {min_bytes} bytes",
                observed=pixel_stats(snapshot),
            )

    def assert_animating(self, samples: list[VisualSnapshot]) -> None:
        """At least one adjacent pair of samples must differ."""
        if len(samples) < 2:
            raise ValueError("assert_animating needs at least two samples")
        differences = sum(
            1 for prev, cur in zip(samples, samples[1:]) if not self.compare(prev, cur)
        )
        if differences < 1:
            raise AssertionFailure(
                "Canvas frozen: consecutive snapshots identical",
                phase="animation",
                expected=">= 1 difference",
                observed=f"0 of {len(samples) - 1} pairs differ",
            )
