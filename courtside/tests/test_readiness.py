"""
Tests for the one-time backend readiness check.
"""
from __future__ import annotations

import sqlite3
import sys
import threading
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

from courtside.persistence import get_connection, init_db
from courtside.readiness import BackendReadiness


class CountingCheck:
    def __init__(self, fail_times: int = 0) -> None:
        self.calls = 0
        self.fail_times = fail_times

    def __call__(self, conn):
        self.calls += 1
        if self.calls <= self.fail_times:
            raise sqlite3.OperationalError("database is locked")


def _memory():
    return sqlite3.connect(":memory:")


def test_check_runs_once():
    check = CountingCheck()
    r = BackendReadiness(connect=_memory, check=check)
    assert r.is_ready is False
    r.ensure_ready()
    r.ensure_ready()
    assert r.is_ready is True
    assert check.calls == 1


def test_concurrent_callers_share_one_check():
    check = CountingCheck()
    r = BackendReadiness(connect=_memory, check=check)
    threads = [threading.Thread(target=r.ensure_ready) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert check.calls == 1


def test_failure_leaves_flag_unset_and_retries(caplog):
    check = CountingCheck(fail_times=1)
    r = BackendReadiness(connect=_memory, check=check)
    with pytest.raises(sqlite3.OperationalError):
        r.ensure_ready()
    assert r.is_ready is False
    assert "readiness check failed" in caplog.text
    r.ensure_ready()
    assert r.is_ready is True
    assert check.calls == 2


def test_reset_runs_check_again():
    check = CountingCheck()
    r = BackendReadiness(connect=_memory, check=check)
    r.ensure_ready()
    r.reset()
    assert r.is_ready is False
    r.ensure_ready()
    assert check.calls == 2


def test_default_check_needs_players_table(tmp_path):
    bare = BackendReadiness(connect=lambda: get_connection(tmp_path / "bare.db"))
    with pytest.raises(sqlite3.OperationalError):
        bare.ensure_ready()

    path = tmp_path / "ready.db"
    init_db(path)
    ready = BackendReadiness(connect=lambda: get_connection(path))
    ready.ensure_ready()
    assert ready.is_ready
