#!/usr/bin/env python3
"""Run the Particle Symphony scenario matrix and report outcomes.

Usage:
    .venv/bin/python3 run_matrix.py [preset_name ...]

Browsers, devices, workers and the app location come from SYMPHONY_*
environment variables (see symphony_e2e.config). If no preset names are
given, all five presets are run.
"""

import socket
import subprocess
import sys
from pathlib import Path

# Ensure src/ is on path
sys.path.insert(0, str(Path(__file__).parent / "src"))

from loguru import logger

from symphony_e2e.config import settings
from symphony_e2e.devices import BrowserEngine, device_by_name
from symphony_e2e.matrix import ScenarioMatrixRunner
from symphony_e2e.presets import PRESETS, preset_by_name
from symphony_e2e.report import ReportGenerator, summary_lines
from symphony_e2e.results import ResultsDB
from symphony_e2e.scenarios import build_matrix
from symphony_e2e.server import AppServer


def _git_hash() -> str:
    try:
        return subprocess.check_output(
            ["git", "rev-parse", "--short", "HEAD"], timeout=5,
        ).decode().strip()
    except Exception:
        return "unknown"


def main() -> int:
    presets = [preset_by_name(n) for n in sys.argv[1:]] or list(PRESETS)
    scenarios = build_matrix(
        presets=presets,
        devices=[device_by_name(d) for d in settings.devices],
        engines=[BrowserEngine(b) for b in settings.browsers],
    )

    db = ResultsDB(db_path=str(settings.results_db))
    run_id = db.record_run("matrix", _git_hash(), socket.gethostname())

    server = None
    base_url = settings.base_url
    if not base_url:
        server = AppServer(settings.app_dir, port=settings.port, host=settings.host)
        server.start()
        base_url = server.url

    try:
        runner = ScenarioMatrixRunner(
            base_url,
            workers=settings.workers,
            headless=settings.headless,
            navigation_timeout_ms=settings.navigation_timeout_ms,
            db=db,
            run_id=run_id,
        )
        outcomes = runner.run(scenarios)
    finally:
        if server is not None:
            server.stop()
        db.finish_run(run_id)

    print(f"\n{'='*60}")
    print("  SUMMARY")
    print(f"{'='*60}")
    for line in summary_lines(outcomes):
        print(line)

    gen = ReportGenerator(db, output_dir=settings.report_dir)
    logger.info(f"Report: {gen.generate(run_id)}")
    logger.info(f"Metrics: {gen.export_json(run_id)}")
    db.close()
    return 0 if all(o.status != "failed" for o in outcomes) else 1


if __name__ == "__main__":
    sys.exit(main())
