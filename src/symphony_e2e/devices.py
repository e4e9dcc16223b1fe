"""Device-profile and browser-engine registries.

Profiles mirror the Playwright device descriptors the suite emulates, but are
kept as plain immutable data so a matrix can be built without launching
Playwright.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any


class BrowserEngine(str, Enum):
    CHROMIUM = "chromium"
    FIREFOX = "firefox"
    WEBKIT = "webkit"


ENGINES: tuple[BrowserEngine, ...] = tuple(BrowserEngine)

IPHONE_UA = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 14_4 like Mac OS X) "
    "AppleWebKit/605.1.15 (KHTML, like Gecko) Version/14.0.3 "
    "Mobile/15E148 Safari/604.1"
)
PIXEL_UA = (
    "Mozilla/5.0 (Linux; Android 11; Pixel 5) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Mobile Safari/537.36"
)
IPAD_UA = (
    "Mozilla/5.0 (iPad; CPU OS 12_2 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/12.1 Mobile/15E148 Safari/604.1"
)


@dataclass(frozen=True)
class DeviceProfile:
    """Viewport + input capabilities + user agent for one emulated device."""

    name: str
    width: int
    height: int
    has_touch: bool = False
    user_agent: str | None = None
    is_mobile: bool = False
    device_scale_factor: float = 1.0

    @property
    def viewport(self) -> dict[str, int]:
        return {"width": self.width, "height": self.height}

    def rotated(self) -> DeviceProfile:
        """Same device with width and height swapped (orientation change)."""
        return replace(self, width=self.height, height=self.width)

    def context_options(self, engine: BrowserEngine | str) -> dict[str, Any]:
        """Keyword arguments for ``browser.new_context()`` on *engine*.

        Firefox rejects ``is_mobile``, so it is only passed to the engines
        that accept it.
        """
        engine = BrowserEngine(engine)
        opts: dict[str, Any] = {
            "viewport": self.viewport,
            "has_touch": self.has_touch,
            "device_scale_factor": self.device_scale_factor,
        }
        if self.user_agent:
            opts["user_agent"] = self.user_agent
        if self.is_mobile and engine is not BrowserEngine.FIREFOX:
            opts["is_mobile"] = True
        return opts


DESKTOP = DeviceProfile("desktop", 1280, 720)

DEVICES: tuple[DeviceProfile, ...] = (
    DESKTOP,
    DeviceProfile("iphone-12", 390, 664, has_touch=True, user_agent=IPHONE_UA,
                  is_mobile=True, device_scale_factor=3),
    DeviceProfile("pixel-5", 393, 727, has_touch=True, user_agent=PIXEL_UA,
                  is_mobile=True, device_scale_factor=2.75),
    DeviceProfile("ipad-pro-11", 834, 1194, has_touch=True, user_agent=IPAD_UA,
                  is_mobile=True, device_scale_factor=2),
    DeviceProfile("mobile-portrait", 390, 844, has_touch=True, is_mobile=True),
)

MOBILE_DEVICES = tuple(d for d in DEVICES if d.is_mobile)


def device_by_name(name: str) -> DeviceProfile:
    for d in DEVICES:
        if d.name == name:
            return d
    known = ", ".join(d.name for d in DEVICES)
    raise ValueError(f"Unknown device profile '{name}' (known: {known})")
