"""BrowserSession -- one exclusive Playwright session per scenario.

Each session starts its own Playwright driver, launches its own browser and
opens a single context/page.  Nothing is shared between sessions, so
sessions can run concurrently on separate threads.
"""

from __future__ import annotations

from typing import Any

from loguru import logger
from playwright.sync_api import sync_playwright

from symphony_e2e.devices import DESKTOP, BrowserEngine, DeviceProfile


class BrowserSession:
    """Isolated browser + context + page for a single scenario.

    Args:
        engine: Browser engine to launch.
        device: Device profile applied to the context.
        headless: Launch headless.
        navigation_timeout_ms: Default navigation timeout for the page.
    """

    def __init__(
        self,
        engine: BrowserEngine | str = BrowserEngine.CHROMIUM,
        device: DeviceProfile = DESKTOP,
        headless: bool = True,
        navigation_timeout_ms: int = 30000,
    ):
        self.engine = BrowserEngine(engine)
        self.device = device
        self.headless = headless
        self.navigation_timeout_ms = navigation_timeout_ms
        self._pw = None
        self._browser = None
        self._context = None
        self.page: Any = None

    def start(self) -> Any:
        self._pw = sync_playwright().start()
        try:
            launcher = getattr(self._pw, self.engine.value)
            self._browser = launcher.launch(headless=self.headless)
            self._context = self._browser.new_context(
                **self.device.context_options(self.engine)
            )
            self.page = self._context.new_page()
            self.page.set_default_navigation_timeout(self.navigation_timeout_ms)
        except Exception:
            self.close()
            raise
        logger.debug(f"session started: {self.engine.value}/{self.device.name}")
        return self.page

    def set_viewport(self, width: int, height: int) -> None:
        self.page.set_viewport_size({"width": width, "height": height})

    def close(self) -> None:
        for closer in (self._context, self._browser):
            if closer is None:
                continue
            try:
                closer.close()
            except Exception as e:
                logger.warning(f"session close failed: {e}")
        if self._pw is not None:
            try:
                self._pw.stop()
            except Exception as e:
                logger.warning(f"playwright stop failed: {e}")
        self._context = self._browser = self._pw = None
        self.page = None

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, *exc):
        self.close()
