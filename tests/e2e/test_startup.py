"""Startup, readiness and rendering checks against the fixture app."""
import pytest

from symphony_e2e.budgets import ANIMATION_INTERVAL, PRESET_SETTLE, VISUAL_SETTLE
from symphony_e2e.page import SymphonyPage
from symphony_e2e.presets import DEFAULT_PRESET
from symphony_e2e.snapshot import PARTICLE_CONTENT, SOME_CONTENT

pytestmark = pytest.mark.e2e


class TestStartup:
    def test_load_and_ready(self, desktop_session, app_server):
        """Canvas visible within 5s, flag true within 10s, canvas not blank."""
        sp = SymphonyPage(desktop_session.page, app_server.url)
        report = sp.goto()
        assert report.phases["canvas_visible"] <= 5000
        assert report.phases["ready_flag"] <= 10000
        shot = sp.snapshots.capture("startup")
        sp.snapshots.assert_has_content(shot, SOME_CONTENT)

    def test_healthy_after_startup(self, symphony):
        snap = symphony.health.assert_healthy(after="startup")
        assert snap.ready and snap.canvas_visible

    def test_loading_indicator_hidden(self, desktop_session, app_server):
        report = SymphonyPage(desktop_session.page, app_server.url).goto()
        assert report.indicator_hidden is True

    def test_desktop_canvas_size(self, symphony):
        symphony.canvas.assert_desktop_size()

    def test_settled_scene_has_particles(self, symphony):
        symphony.wait(VISUAL_SETTLE)
        shot = symphony.snapshots.capture("settled")
        symphony.snapshots.assert_has_content(shot, PARTICLE_CONTENT)

    def test_animating(self, symphony):
        samples = []
        for i in range(3):
            samples.append(symphony.snapshots.capture(f"frame_{i}"))
            symphony.wait(ANIMATION_INTERVAL)
        symphony.snapshots.assert_animating(samples)

    def test_no_console_errors(self, symphony):
        symphony.wait(VISUAL_SETTLE)
        assert symphony.critical_errors() == []

    def test_default_preset_key_at_startup(self, symphony):
        """Galaxy is active at startup; pressing its key again is a healthy no-op."""
        assert DEFAULT_PRESET.name == "galaxy"
        symphony.driver.switch_preset(DEFAULT_PRESET.key)
        symphony.wait(PRESET_SETTLE)
        symphony.health.assert_healthy(after=f"preset {DEFAULT_PRESET.name}")
        shot = symphony.snapshots.capture(DEFAULT_PRESET.name)
        symphony.snapshots.assert_has_content(shot, PARTICLE_CONTENT)
        symphony.assert_no_critical_errors(after="default preset key")
