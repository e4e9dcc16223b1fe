"""Shared Playwright fixtures for end-to-end harness tests.

Serves the bundled fixture app (tests/fixtures/symphony_app) with AppServer
and hands each test its own BrowserSession.  Tests are skipped when the
browser binaries are not installed.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from symphony_e2e.budgets import MOBILE_READY_GATE
from symphony_e2e.devices import DESKTOP, BrowserEngine, device_by_name
from symphony_e2e.page import SymphonyPage
from symphony_e2e.server import AppServer
from symphony_e2e.session import BrowserSession

FIXTURE_APP = Path(__file__).resolve().parent.parent / "fixtures" / "symphony_app"


@pytest.fixture(scope="session")
def app_server():
    """Session-scoped auto-port static server for the fixture app."""
    server = AppServer(FIXTURE_APP)
    server.start()
    yield server
    server.stop()


def _open(engine, device):
    session = BrowserSession(engine, device)
    try:
        session.start()
    except Exception as e:
        pytest.skip(f"{engine.value} unavailable: {e}")
    return session


@pytest.fixture(scope="session")
def chromium_available():
    """Skip unless a Chromium session can be opened at all."""
    _open(BrowserEngine.CHROMIUM, DESKTOP).close()


@pytest.fixture
def desktop_session():
    session = _open(BrowserEngine.CHROMIUM, DESKTOP)
    yield session
    session.close()


@pytest.fixture
def phone_session():
    session = _open(BrowserEngine.CHROMIUM, device_by_name("iphone-12"))
    yield session
    session.close()


@pytest.fixture
def symphony(desktop_session, app_server):
    """Fresh desktop page past the readiness gate."""
    sp = SymphonyPage(desktop_session.page, app_server.url)
    sp.goto()
    return sp


@pytest.fixture
def phone(phone_session, app_server):
    """Fresh iPhone 12 page past the (mobile) readiness gate."""
    sp = SymphonyPage(phone_session.page, app_server.url)
    sp.goto(ready_gate=MOBILE_READY_GATE)
    return sp
