"""Tests for BrowserSession lifecycle and SymphonyPage wiring."""
from unittest.mock import MagicMock, patch

import pytest

from symphony_e2e.devices import BrowserEngine, device_by_name
from symphony_e2e.errors import AssertionFailure
from symphony_e2e.page import SymphonyPage
from symphony_e2e.session import BrowserSession

pytestmark = pytest.mark.unit


@pytest.fixture
def playwright():
    with patch("symphony_e2e.session.sync_playwright") as sp:
        pw = sp.return_value.start.return_value
        yield pw


class TestBrowserSession:
    def test_start_uses_device_context(self, playwright):
        device = device_by_name("iphone-12")
        session = BrowserSession("webkit", device, navigation_timeout_ms=12000)
        page = session.start()
        playwright.webkit.launch.assert_called_once_with(headless=True)
        browser = playwright.webkit.launch.return_value
        browser.new_context.assert_called_once_with(**device.context_options("webkit"))
        page.set_default_navigation_timeout.assert_called_once_with(12000)
        assert session.engine is BrowserEngine.WEBKIT

    def test_close_releases_everything(self, playwright):
        session = BrowserSession("chromium")
        session.start()
        browser = playwright.chromium.launch.return_value
        context = browser.new_context.return_value
        session.close()
        context.close.assert_called_once()
        browser.close.assert_called_once()
        playwright.stop.assert_called_once()
        assert session.page is None

    def test_launch_failure_stops_driver(self, playwright):
        playwright.firefox.launch.side_effect = RuntimeError("no firefox")
        with pytest.raises(RuntimeError):
            BrowserSession("firefox").start()
        playwright.stop.assert_called_once()

    def test_close_failure_is_logged(self, playwright):
        session = BrowserSession("chromium")
        session.start()
        playwright.chromium.launch.return_value.new_context.return_value.close.side_effect = (
            RuntimeError("already closed"))
        session.close()
        playwright.stop.assert_called_once()

    def test_stop_failure_is_logged(self, playwright):
        session = BrowserSession("chromium")
        session.start()
        playwright.stop.side_effect = RuntimeError("driver gone")
        session.close()
        playwright.stop.assert_called_once()
        assert session.page is None

    def test_context_manager(self, playwright):
        with BrowserSession("chromium") as session:
            assert session.page is not None
        assert session.page is None

    def test_set_viewport(self, playwright):
        session = BrowserSession("chromium")
        session.start()
        session.set_viewport(664, 390)
        session.page.set_viewport_size.assert_called_once_with({"width": 664, "height": 390})


class TestSymphonyPage:
    def test_navigate_is_fresh_goto(self, page):
        SymphonyPage(page, "http://app/").navigate()
        page.goto.assert_called_once_with("http://app/")
        page.reload.assert_not_called()

    def test_goto_runs_readiness(self, page):
        report = SymphonyPage(page, "http://app").goto("/index.html")
        page.goto.assert_called_once_with("http://app/index.html")
        assert "navigation" in report.phases
        assert "ready_flag" in report.phases

    def test_console_errors(self, page):
        sp = SymphonyPage(page, "http://app")
        handlers = {c.args[0]: c.args[1] for c in page.on.call_args_list}
        handlers["console"](MagicMock(type="error", text="Uncaught TypeError: x"))
        handlers["console"](MagicMock(type="log", text="hello"))
        handlers["console"](MagicMock(type="error", text="favicon.ico 404"))
        handlers["pageerror"](RuntimeError("boom"))
        assert sp.console_errors == ["Uncaught TypeError: x", "favicon.ico 404", "boom"]
        assert sp.critical_errors() == ["Uncaught TypeError: x", "boom"]

    def test_wait(self, page):
        from symphony_e2e.budgets import STABILIZE
        SymphonyPage(page, "http://app").wait(STABILIZE)
        page.wait_for_timeout.assert_called_once_with(500)

    def test_no_critical_errors_passes_on_noise(self, page):
        sp = SymphonyPage(page, "http://app")
        sp.console_errors.append("GET /favicon.ico 404")
        sp.assert_no_critical_errors(after="drag")

    def test_critical_errors_fail(self, page):
        sp = SymphonyPage(page, "http://app")
        sp.console_errors.extend(["ResizeObserver loop limit exceeded", "TypeError: boom"])
        with pytest.raises(AssertionFailure, match="JavaScript errors after drag") as exc:
            sp.assert_no_critical_errors(after="drag")
        assert exc.value.phase == "console_errors"
        assert exc.value.observed == ["TypeError: boom"]
