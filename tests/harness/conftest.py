"""Shared fakes for harness unit tests.

Pages are MagicMocks: ``page.locator(...)`` returns the same mock for every
selector, so ``.first`` is the canvas locator and the bare locator is the
loading indicator.  Harness objects are autospecced so a misspelled
method or assertion fails instead of passing silently.
"""

from __future__ import annotations

from unittest.mock import MagicMock, create_autospec

import pytest

from symphony_e2e.canvas import CanvasHandle
from symphony_e2e.devices import DESKTOP
from symphony_e2e.driver import InteractionDriver
from symphony_e2e.health import HealthOracle
from symphony_e2e.page import SymphonyPage
from symphony_e2e.probes import CapabilityProbe, PwaProbe
from symphony_e2e.readiness import ReadinessDetector
from symphony_e2e.session import BrowserSession
from symphony_e2e.snapshot import SnapshotComparator

DESKTOP_BOX = {"x": 10.0, "y": 20.0, "width": 1280.0, "height": 720.0}


@pytest.fixture
def make_page():
    """Factory for a fake Playwright page with a canvas of the given box."""
    def _make(box=DESKTOP_BOX, visible=True, count=1, ready=True):
        page = MagicMock()
        loc = page.locator.return_value
        loc.count.return_value = count
        loc.first.bounding_box.return_value = dict(box) if box else box
        loc.first.is_visible.return_value = visible
        page.evaluate.return_value = ready
        page.url = "http://127.0.0.1:8000/"
        return page
    return _make


@pytest.fixture
def page(make_page):
    return make_page()


def fake_symphony_page() -> SymphonyPage:
    """Autospecced SymphonyPage with autospecced components.

    Instance attributes are not part of an autospec, so each component the
    constructor would create is assigned here.
    """
    sp = create_autospec(SymphonyPage, instance=True)
    sp.page = MagicMock()
    sp.page.url = "http://app/"
    sp.base_url = "http://app"
    sp.canvas = create_autospec(CanvasHandle, instance=True)
    sp.readiness = create_autospec(ReadinessDetector, instance=True)
    sp.driver = create_autospec(InteractionDriver, instance=True)
    sp.health = create_autospec(HealthOracle, instance=True)
    sp.snapshots = create_autospec(SnapshotComparator, instance=True)
    sp.probes = create_autospec(CapabilityProbe, instance=True)
    sp.pwa = create_autospec(PwaProbe, instance=True)
    sp.console_errors = []
    sp.critical_errors.return_value = []
    sp.canvas.dimensions.return_value = (1280, 720)
    return sp


def fake_session(device=DESKTOP) -> BrowserSession:
    session = create_autospec(BrowserSession, instance=True)
    session.device = device
    session.page = MagicMock()
    return session


@pytest.fixture
def symphony_page():
    return fake_symphony_page()


@pytest.fixture
def make_session():
    """Factory for an autospecced BrowserSession on the given device."""
    return fake_session
