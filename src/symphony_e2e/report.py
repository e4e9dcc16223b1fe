"""Report generation -- failure lines, JSON export and a self-contained HTML page.

Every failure line names the failing assertion and carries the literal
expected/observed values plus elapsed-vs-budget timing.
"""

from __future__ import annotations

import html
import json
from datetime import datetime
from pathlib import Path
from typing import Any

from symphony_e2e.results import ResultsDB
from symphony_e2e.scenarios import ScenarioOutcome

_CSS = """
:root {
    --cyan: #00f0ff;
    --green: #05ffa1;
    --amber: #fcee0a;
    --magenta: #ff2a6d;
    --void: #0a0a0f;
    --surface: #12121a;
    --border: rgba(0, 240, 255, 0.08);
    --text: #c8d0dc;
    --muted: #5a6577;
}
* { margin: 0; padding: 0; box-sizing: border-box; }
body {
    background: var(--void);
    color: var(--text);
    font-family: 'Inter', system-ui, sans-serif;
    font-size: 14px;
    line-height: 1.6;
    padding: 20px;
}
h1 { font-family: 'JetBrains Mono', monospace; color: var(--cyan); font-size: 20px; }
.meta { color: var(--muted); margin-bottom: 16px; }
.stats { display: flex; gap: 12px; margin-bottom: 20px; }
.stat-card { background: var(--surface); border: 1px solid var(--border); border-radius: 6px; padding: 10px 16px; }
.stat-value { font-size: 22px; font-weight: 700; font-family: 'JetBrains Mono', monospace; }
.stat-value.pass { color: var(--green); }
.stat-value.fail { color: var(--magenta); }
.stat-value.skip { color: var(--amber); }
.stat-label { color: var(--muted); font-size: 11px; text-transform: uppercase; }
details.result { background: var(--surface); border: 1px solid var(--border); border-radius: 6px; margin-bottom: 6px; padding: 6px 12px; }
details.result.failed { border-left: 3px solid var(--magenta); }
details.result.passed { border-left: 3px solid var(--green); }
details.result.skipped { border-left: 3px solid var(--amber); }
summary { cursor: pointer; font-family: 'JetBrains Mono', monospace; }
.badge { display: inline-block; width: 48px; font-weight: 700; }
.duration { color: var(--muted); float: right; }
pre { white-space: pre-wrap; color: var(--text); margin-top: 6px; font-size: 12px; }
"""


def format_failure(error: dict[str, Any] | None, name: str = "") -> str:
    """One-line failure description from a HarnessError.to_dict() payload."""
    if not error:
        return f"{name}: no error recorded" if name else "no error recorded"
    parts = [f"{name}: " if name else ""]
    parts.append(f"[{error.get('kind', 'error')}] {error.get('message', '')}")
    if error.get("phase"):
        parts.append(f" (phase {error['phase']})")
    if error.get("expected") is not None or error.get("observed") is not None:
        parts.append(
            f" expected={error.get('expected')!r} observed={error.get('observed')!r}"
        )
    if error.get("elapsed_ms") is not None:
        timing = f" elapsed {error['elapsed_ms']:.0f}ms"
        if error.get("budget"):
            timing += f" vs {error['budget']}"
            if error.get("budget_ms") is not None:
                timing += f"={error['budget_ms']}ms"
        parts.append(timing)
    return "".join(parts)


def summary_lines(outcomes: list[ScenarioOutcome]) -> list[str]:
    """Human-readable summary: one line per scenario, failures explained."""
    lines = []
    for o in sorted(outcomes, key=lambda o: o.scenario.scenario_id):
        status = o.status.upper()
        lines.append(f"  {status:7s} {o.scenario.scenario_id:55s} {o.duration_ms:8.0f}ms")
        if o.status != "passed":
            lines.append(f"          {format_failure(o.error)}")
    passed = sum(1 for o in outcomes if o.status == "passed")
    failed = sum(1 for o in outcomes if o.status == "failed")
    skipped = sum(1 for o in outcomes if o.status == "skipped")
    lines.append(f"  {passed} passed, {failed} failed, {skipped} skipped, {len(outcomes)} total")
    return lines


class ReportGenerator:
    """Generates HTML and JSON reports from ResultsDB data."""

    def __init__(
        self,
        db: ResultsDB,
        output_dir: str | Path = "tests/.test-results/reports",
    ):
        self._db = db
        self._output_dir = Path(output_dir)
        self._output_dir.mkdir(parents=True, exist_ok=True)

    def generate(self, run_id: int) -> Path:
        """Write an HTML report for a run and return its path."""
        summary = self._db.get_run_summary(run_id)
        if summary is None:
            raise ValueError(f"Run {run_id} not found")
        results = self._db.get_results(run_id)
        content = self._render(summary, results)
        filename = (
            f"report_{summary['suite']}_run{run_id}_"
            f"{datetime.now().strftime('%Y%m%d_%H%M%S')}.html"
        )
        path = self._output_dir / filename
        path.write_text(content, encoding="utf-8")
        return path

    def export_json(self, run_id: int) -> Path:
        """Export run summary, results and snapshot stats as one JSON file."""
        summary = self._db.get_run_summary(run_id)
        if summary is None:
            raise ValueError(f"Run {run_id} not found")
        total = summary["total_tests"]
        export = {
            "generated_at": datetime.now().isoformat(),
            "run": {
                **{k: summary.get(k) for k in (
                    "id", "suite", "git_hash", "machine", "started_at",
                    "finished_at", "total_tests", "passed", "failed", "skipped",
                )},
                "pass_rate": round(summary["passed"] / total * 100, 1) if total else 0,
            },
            "results": [
                {
                    "test_name": r["test_name"],
                    "status": r["status"],
                    "engine": r["engine"],
                    "device": r["device"],
                    "preset": r["preset"],
                    "interaction": r["interaction"],
                    "phase": r["phase"],
                    "duration_ms": r["duration_ms"],
                    "details": r.get("details", {}),
                }
                for r in self._db.get_results(run_id)
            ],
            "snapshots": [
                {
                    "test_name": s["test_name"],
                    "label": s["label"],
                    "byte_length": s["byte_length"],
                    "stats": s.get("stats", {}),
                }
                for s in self._db.get_snapshots(run_id)
            ],
        }
        path = self._output_dir / f"metrics_{summary['suite']}_run{run_id}.json"
        path.write_text(json.dumps(export, indent=2, default=str), encoding="utf-8")
        return path

    # -------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------

    def _render(self, summary: dict, results: list[dict]) -> str:
        title = f"Particle Symphony E2E: {summary['suite']} run {summary['id']}"
        stats = "".join([
            self._stat(str(summary["total_tests"]), "Total", ""),
            self._stat(str(summary["passed"]), "Passed", "pass"),
            self._stat(str(summary["failed"]), "Failed", "fail"),
            self._stat(str(summary["skipped"]), "Skipped", "skip"),
        ])
        meta = html.escape(
            f"git {summary.get('git_hash') or 'unknown'} · "
            f"{summary.get('machine') or 'unknown'} · "
            f"started {summary.get('started_at') or ''}"
        )
        body = "\n".join(self._render_result(r) for r in results)
        return (
            "<!DOCTYPE html>\n<html lang=\"en\">\n<head>\n<meta charset=\"utf-8\">\n"
            f"<title>{html.escape(title)}</title>\n<style>{_CSS}</style>\n</head>\n"
            f"<body>\n<h1>{html.escape(title)}</h1>\n<div class=\"meta\">{meta}</div>\n"
            f"<div class=\"stats\">{stats}</div>\n{body}\n</body>\n</html>\n"
        )

    def _stat(self, value: str, label: str, cls: str) -> str:
        val_cls = f" {cls}" if cls else ""
        return (
            f'<div class="stat-card">'
            f'<div class="stat-value{val_cls}">{html.escape(value)}</div>'
            f'<div class="stat-label">{html.escape(label)}</div>'
            f"</div>"
        )

    def _render_result(self, r: dict) -> str:
        status = r.get("status", "failed")
        name = html.escape(r.get("test_name", "unknown"))
        dur = r.get("duration_ms") or 0
        details = r.get("details", {})
        lines = []
        if status != "passed":
            lines.append(format_failure(details.get("error")))
        lines.append(json.dumps(details, indent=2, default=str))
        return (
            f'<details class="result {status}"><summary>'
            f'<span class="badge">{status.upper()[:4]}</span>{name}'
            f'<span class="duration">{dur:.0f}ms</span></summary>'
            f"<pre>{html.escape(chr(10).join(lines))}</pre></details>"
        )
