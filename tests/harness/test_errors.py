"""Tests for the harness failure taxonomy."""
import pytest

from symphony_e2e.errors import (
    AssertionFailure,
    BudgetTimeout,
    ElementNotFoundError,
    HarnessError,
    ProbeUnavailable,
)

pytestmark = pytest.mark.unit


class TestHarnessErrors:
    def test_message_carries_evidence(self):
        e = BudgetTimeout(
            "window.wasmReady never became true",
            phase="ready_flag",
            budget="ready_gate",
            budget_ms=10000,
            elapsed_ms=10012.4,
            expected=True,
            observed=False,
        )
        text = str(e)
        assert "phase=ready_flag" in text
        assert "budget=ready_gate (10000ms)" in text
        assert "elapsed=10012ms" in text
        assert "expected=True observed=False" in text

    def test_plain_message(self):
        assert str(HarnessError("boom")) == "boom"

    def test_kinds(self):
        assert BudgetTimeout("x").kind == "timeout"
        assert ElementNotFoundError("x").kind == "element_not_found"
        assert AssertionFailure("x").kind == "assertion"
        assert ProbeUnavailable("x").kind == "probe_unavailable"

    def test_builtin_bases(self):
        """Timeouts and assertion failures are still caught by builtin handlers."""
        assert isinstance(BudgetTimeout("x"), TimeoutError)
        assert isinstance(AssertionFailure("x"), AssertionError)
        for cls in (BudgetTimeout, ElementNotFoundError, AssertionFailure, ProbeUnavailable):
            assert issubclass(cls, HarnessError)

    def test_to_dict(self):
        d = AssertionFailure(
            "Canvas unchanged", phase="visual_change",
            expected="snapshots differ", observed={"bytes": (1, 2)},
        ).to_dict()
        assert d["kind"] == "assertion"
        assert d["message"] == "Canvas unchanged"
        assert d["phase"] == "visual_change"
        assert d["observed"] == {"bytes": [1, 2]}
        assert d["budget"] is None

    def test_to_dict_repr_for_opaque_values(self):
        d = HarnessError("x", observed=object()).to_dict()
        assert d["observed"].startswith("<object object")
