"""Tests for capability and PWA probes."""
from unittest.mock import MagicMock, patch

import pytest
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from symphony_e2e.budgets import WaitBudget
from symphony_e2e.errors import AssertionFailure, BudgetTimeout, ProbeUnavailable
from symphony_e2e.probes import (
    CAPABILITIES,
    CapabilityKind,
    CapabilityProbe,
    SW_POLL_MS,
    PwaProbe,
    _SW_REGISTERED_JS,
    capability,
)

pytestmark = pytest.mark.unit

GOOD_MANIFEST = {
    "name": "Particle Symphony",
    "short_name": "Particles",
    "display": "standalone",
    "start_url": "./",
    "icons": [{"src": "icon.svg", "sizes": "any"}],
}


class TestCapabilityRegistry:
    def test_paths_are_unique(self):
        paths = [c.path for c in CAPABILITIES.values()]
        assert len(paths) == len(set(paths))

    def test_kinds(self):
        assert capability("haptics").kind is CapabilityKind.OBJECT
        assert capability("particle_count").kind is CapabilityKind.GETTER
        assert capability("performance_tier").path == "PerformanceManager.tier"

    def test_unknown(self):
        with pytest.raises(KeyError, match="Unknown capability"):
            capability("teleport")


class TestCapabilityProbe:
    def test_present(self, page):
        page.evaluate.return_value = {"present": True, "value": None}
        result = CapabilityProbe(page).probe("multi_touch")
        assert result
        assert result.capability.name == "multi_touch"
        args = page.evaluate.call_args[0]
        assert args[1] == ["setMultiTouchAttractors", "function"]

    def test_absent_optional(self, page):
        page.evaluate.return_value = {"present": False, "value": None}
        result = CapabilityProbe(page).probe("gyro_gravity")
        assert not result
        assert result.available is False

    def test_absent_mandatory(self, page):
        page.evaluate.return_value = {"present": False, "value": None}
        with pytest.raises(AssertionFailure, match="Mandatory capability 'haptics'"):
            CapabilityProbe(page).probe("haptics", mandatory=True)

    def test_evaluate_returning_nothing(self, page):
        page.evaluate.return_value = None
        assert not CapabilityProbe(page).probe("reset_particles")

    def test_require(self, page):
        page.evaluate.return_value = {"present": False, "value": None}
        with pytest.raises(ProbeUnavailable):
            CapabilityProbe(page).require("gyro_controller")

    def test_probe_all(self, page):
        page.evaluate.return_value = {"present": True, "value": 1}
        results = CapabilityProbe(page).probe_all()
        assert set(results) == set(CAPABILITIES)
        assert all(results.values())

    def test_haptic_toggle(self, page):
        page.evaluate.return_value = {"initial": True, "after": False, "restored": True}
        assert CapabilityProbe(page).assert_haptic_toggle()["after"] is False

    def test_haptic_toggle_not_inverting(self, page):
        page.evaluate.return_value = {"initial": True, "after": True, "restored": True}
        with pytest.raises(AssertionFailure, match="reversible"):
            CapabilityProbe(page).assert_haptic_toggle()

    def test_haptic_toggle_not_restored(self, page):
        page.evaluate.return_value = {"initial": True, "after": False, "restored": False}
        with pytest.raises(AssertionFailure):
            CapabilityProbe(page).assert_haptic_toggle()

    def test_haptic_missing(self, page):
        page.evaluate.return_value = None
        with pytest.raises(ProbeUnavailable):
            CapabilityProbe(page).assert_haptic_toggle()

    def test_particle_count(self, page):
        page.evaluate.return_value = {"present": True, "value": 2000}
        assert CapabilityProbe(page).assert_particle_count() == 2000

    @pytest.mark.parametrize("value", [0, 15001, None, "many"])
    def test_particle_count_out_of_range(self, page, value):
        page.evaluate.return_value = {"present": value is not None, "value": value}
        with pytest.raises(AssertionFailure):
            CapabilityProbe(page).assert_particle_count()

    def test_performance_tier(self, page):
        page.evaluate.return_value = {"present": True, "value": "medium"}
        assert CapabilityProbe(page).assert_performance_tier() == "medium"

    def test_unknown_tier(self, page):
        page.evaluate.return_value = {"present": True, "value": "ultra"}
        with pytest.raises(AssertionFailure):
            CapabilityProbe(page).assert_performance_tier()

    def test_tier_not_exposed(self, page):
        page.evaluate.return_value = {"present": False, "value": None}
        with pytest.raises(ProbeUnavailable):
            CapabilityProbe(page).assert_performance_tier()

    def test_touch_setup(self, page):
        page.evaluate.return_value = True
        assert CapabilityProbe(page).touch_setup() is True


def _response(status=200, payload=None, text=""):
    resp = MagicMock()
    resp.status_code = status
    if payload is None:
        resp.json.side_effect = ValueError("no json")
    else:
        resp.json.return_value = payload
    resp.text = text
    return resp


class TestManifest:
    @patch("symphony_e2e.probes.requests.get")
    def test_valid(self, mock_get, page):
        mock_get.return_value = _response(payload=GOOD_MANIFEST)
        manifest = PwaProbe(page, "http://app/").fetch_manifest()
        assert manifest["name"] == "Particle Symphony"
        mock_get.assert_called_once_with("http://app/manifest.json", timeout=5)

    @patch("symphony_e2e.probes.requests.get")
    def test_missing(self, mock_get, page):
        mock_get.return_value = _response(status=404, payload={})
        with pytest.raises(AssertionFailure) as exc:
            PwaProbe(page, "http://app").fetch_manifest()
        assert exc.value.observed == 404

    @patch("symphony_e2e.probes.requests.get")
    def test_not_json(self, mock_get, page):
        mock_get.return_value = _response(text="<html>")
        with pytest.raises(AssertionFailure, match="not valid JSON"):
            PwaProbe(page, "http://app").fetch_manifest()

    @patch("symphony_e2e.probes.requests.get")
    def test_wrong_display(self, mock_get, page):
        mock_get.return_value = _response(payload={**GOOD_MANIFEST, "display": "browser"})
        with pytest.raises(AssertionFailure, match="'display'"):
            PwaProbe(page, "http://app").fetch_manifest()

    @patch("symphony_e2e.probes.requests.get")
    def test_no_icons(self, mock_get, page):
        mock_get.return_value = _response(payload={**GOOD_MANIFEST, "icons": []})
        with pytest.raises(AssertionFailure, match="no icons"):
            PwaProbe(page, "http://app").fetch_manifest()


class TestMetaTags:
    TAGS = {
        'meta[name="viewport"]':
            "width=device-width, initial-scale=1.0, maximum-scale=1.0, user-scalable=no",
        'meta[name="apple-mobile-web-app-capable"]': "yes",
        'meta[name="apple-mobile-web-app-status-bar-style"]': "black-translucent",
        'link[rel="manifest"]': "manifest.json",
    }

    def _page(self, page, **overrides):
        tags = {**self.TAGS, **overrides}
        page.get_attribute.side_effect = lambda selector, attr: tags[selector]
        return page

    def test_valid(self, page):
        tags = PwaProbe(self._page(page), "http://app").assert_meta_tags()
        assert tags["manifest"] == "manifest.json"

    def test_zoomable_viewport(self, page):
        p = self._page(page, **{'meta[name="viewport"]': "width=device-width"})
        with pytest.raises(AssertionFailure, match="zoom"):
            PwaProbe(p, "http://app").assert_meta_tags()

    def test_not_app_capable(self, page):
        p = self._page(page, **{'meta[name="apple-mobile-web-app-capable"]': None})
        with pytest.raises(AssertionFailure, match="capable"):
            PwaProbe(p, "http://app").assert_meta_tags()


class TestServiceWorker:
    def test_waits_in_page(self, page):
        elapsed = PwaProbe(page, "http://app").wait_for_service_worker(
            WaitBudget("service_worker", 1000),
        )
        assert elapsed >= 0
        page.wait_for_function.assert_called_once_with(
            _SW_REGISTERED_JS, timeout=1000, polling=SW_POLL_MS,
        )

    def test_never_registered(self, page):
        page.wait_for_function.side_effect = PlaywrightTimeoutError("Timeout 1000ms exceeded")
        page.evaluate.return_value = False
        with pytest.raises(BudgetTimeout) as exc:
            PwaProbe(page, "http://app").wait_for_service_worker(
                WaitBudget("service_worker", 1000),
            )
        assert exc.value.budget == "service_worker"
        assert exc.value.budget_ms == 1000
        assert exc.value.expected is True
        assert exc.value.observed is False
        assert exc.value.phase == "service_worker"

    def test_other_errors_propagate(self, page):
        page.wait_for_function.side_effect = RuntimeError("page closed")
        with pytest.raises(RuntimeError):
            PwaProbe(page, "http://app").wait_for_service_worker()
