"""ResultsDB -- SQLite store for matrix runs, scenario outcomes and snapshots.

Persists run data across sessions for reporting and trend analysis.
Snapshot pixels are never stored; only their size and pixel statistics.
"""

from __future__ import annotations

import json
import os
import sqlite3
import threading
from typing import Any

from symphony_e2e.scenarios import ScenarioOutcome

_SCHEMA = """
CREATE TABLE IF NOT EXISTS runs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    suite TEXT NOT NULL,
    git_hash TEXT,
    machine TEXT,
    started_at TEXT DEFAULT (datetime('now')),
    finished_at TEXT,
    total_tests INTEGER DEFAULT 0,
    passed INTEGER DEFAULT 0,
    failed INTEGER DEFAULT 0,
    skipped INTEGER DEFAULT 0
);

CREATE TABLE IF NOT EXISTS results (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    run_id INTEGER REFERENCES runs(id),
    test_name TEXT NOT NULL,
    status TEXT NOT NULL,
    engine TEXT,
    device TEXT,
    preset TEXT,
    interaction TEXT,
    phase TEXT,
    duration_ms REAL,
    details_json TEXT,
    timestamp TEXT DEFAULT (datetime('now'))
);

CREATE TABLE IF NOT EXISTS snapshots (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    run_id INTEGER REFERENCES runs(id),
    test_name TEXT,
    label TEXT,
    byte_length INTEGER,
    stats_json TEXT,
    timestamp TEXT DEFAULT (datetime('now'))
);
"""

_STATUSES = ("passed", "failed", "skipped")


class ResultsDB:
    """SQLite results store, safe to share between scenario worker threads.

    Args:
        db_path: Path to SQLite database file. Parent dirs are created
                 automatically.
    """

    def __init__(self, db_path: str = "tests/.test-results/results.db"):
        self._db_path = str(db_path)
        os.makedirs(os.path.dirname(self._db_path) or ".", exist_ok=True)
        self._lock = threading.Lock()
        self._conn = sqlite3.connect(self._db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.executescript(_SCHEMA)
        self._conn.commit()

    def record_run(self, suite: str, git_hash: str, machine: str) -> int:
        """Start a new run. Returns the run ID."""
        with self._lock:
            cur = self._conn.execute(
                "INSERT INTO runs (suite, git_hash, machine) VALUES (?, ?, ?)",
                (suite, git_hash, machine),
            )
            self._conn.commit()
            return cur.lastrowid

    def record_result(
        self,
        run_id: int,
        test_name: str,
        status: str,
        duration_ms: float,
        details: dict[str, Any],
        *,
        engine: str = "",
        device: str = "",
        preset: str = "",
        interaction: str = "",
        phase: str = "",
    ) -> None:
        """Record one result and update the run's counters."""
        if status not in _STATUSES:
            raise ValueError(f"status must be one of {_STATUSES}, got {status!r}")
        with self._lock:
            self._conn.execute(
                "INSERT INTO results (run_id, test_name, status, engine, device, "
                "preset, interaction, phase, duration_ms, details_json) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (run_id, test_name, status, engine, device, preset, interaction,
                 phase, duration_ms, json.dumps(details, default=str)),
            )
            self._conn.execute(
                f"UPDATE runs SET total_tests = total_tests + 1, "
                f"{status} = {status} + 1 WHERE id = ?",
                (run_id,),
            )
            self._conn.commit()

    def record_outcome(self, run_id: int, outcome: ScenarioOutcome) -> None:
        s = outcome.scenario
        details = {"evidence": outcome.evidence}
        if outcome.error:
            details["error"] = outcome.error
        self.record_result(
            run_id, s.scenario_id, outcome.status, outcome.duration_ms, details,
            engine=s.engine.value, device=s.device, preset=s.preset.name,
            interaction=s.interaction.value, phase=outcome.phase,
        )

    def record_snapshot(
        self,
        run_id: int,
        test_name: str,
        label: str,
        byte_length: int,
        stats: dict[str, Any],
    ) -> None:
        with self._lock:
            self._conn.execute(
                "INSERT INTO snapshots (run_id, test_name, label, byte_length, stats_json) "
                "VALUES (?, ?, ?, ?, ?)",
                (run_id, test_name, label, byte_length, json.dumps(stats)),
            )
            self._conn.commit()

    def finish_run(self, run_id: int) -> None:
        """Mark a run as finished (sets finished_at timestamp)."""
        with self._lock:
            self._conn.execute(
                "UPDATE runs SET finished_at = datetime('now') WHERE id = ?",
                (run_id,),
            )
            self._conn.commit()

    def get_run_summary(self, run_id: int) -> dict[str, Any] | None:
        """Get summary for a run. Returns None if not found."""
        row = self._query_one("SELECT * FROM runs WHERE id = ?", (run_id,))
        return dict(row) if row is not None else None

    def get_results(self, run_id: int, status: str | None = None) -> list[dict[str, Any]]:
        """All results for a run (optionally filtered by status), oldest first."""
        sql = "SELECT * FROM results WHERE run_id = ?"
        params: tuple = (run_id,)
        if status is not None:
            sql += " AND status = ?"
            params += (status,)
        rows = self._query_all(sql + " ORDER BY id", params)
        results = []
        for row in rows:
            d = dict(row)
            if d.get("details_json"):
                d["details"] = json.loads(d["details_json"])
            results.append(d)
        return results

    def get_failures(self, run_id: int) -> list[dict[str, Any]]:
        return self.get_results(run_id, status="failed")

    def get_trend(self, suite: str, last_n: int = 20) -> list[dict[str, Any]]:
        """Get the last N runs for a suite, oldest first."""
        rows = self._query_all(
            "SELECT * FROM runs WHERE suite = ? ORDER BY id DESC LIMIT ?",
            (suite, last_n),
        )
        return [dict(r) for r in reversed(rows)]

    def get_snapshots(self, run_id: int) -> list[dict[str, Any]]:
        rows = self._query_all(
            "SELECT * FROM snapshots WHERE run_id = ? ORDER BY id", (run_id,),
        )
        results = []
        for row in rows:
            d = dict(row)
            if d.get("stats_json"):
                d["stats"] = json.loads(d["stats_json"])
            results.append(d)
        return results

    def _query_one(self, sql: str, params: tuple):
        with self._lock:
            return self._conn.execute(sql, params).fetchone()

    def _query_all(self, sql: str, params: tuple) -> list:
        with self._lock:
            return self._conn.execute(sql, params).fetchall()

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()
