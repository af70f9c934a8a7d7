from __future__ import annotations

import json
import logging

import pytest

from configs.config import Config
from utils.metrics import Timer, incr


@pytest.fixture
def metrics_root(monkeypatch, tmp_path):
    monkeypatch.setattr(Config, "METRICS_ENABLED", True)
    monkeypatch.setattr(Config, "METRICS_ROOT", str(tmp_path / "metrics"))
    return tmp_path / "metrics"


def _records(root):
    return [json.loads(line) for line in (root / "metrics.log").read_text().splitlines()]


def test_incr_is_noop_when_disabled(monkeypatch, tmp_path) -> None:
    monkeypatch.setattr(Config, "METRICS_ROOT", str(tmp_path / "metrics"))
    incr("tags.fetched", 3, repo="o/r")
    assert not (tmp_path / "metrics").exists()


def test_incr_keeps_only_set_fields(metrics_root) -> None:
    incr("release_url.miss", repo="o/r", tag="v1.0.0", code="NOT_FOUND")
    incr("tags.fetched", 2, repo="o/r")
    first, second = _records(metrics_root)
    assert {k: v for k, v in first.items() if k != "ts"} == {
        "metric": "release_url.miss", "value": 1, "repo": "o/r", "tag": "v1.0.0", "code": "NOT_FOUND",
    }
    assert set(second) == {"ts", "metric", "value", "repo"}


def test_incr_rejects_non_numeric_values(metrics_root) -> None:
    with pytest.raises(TypeError):
        incr("tags.fetched", "many")


def test_timer_records_latency(metrics_root) -> None:
    with Timer("github.tags.list", repo="o/r"):
        pass
    (rec,) = _records(metrics_root)
    assert rec["metric"] == "github.tags.list.latency_s"
    assert rec["repo"] == "o/r"
    assert rec["value"] >= 0


def test_unwritable_root_logs_and_drops(monkeypatch, tmp_path, caplog) -> None:
    blocker = tmp_path / "file"
    blocker.write_text("x")
    monkeypatch.setattr(Config, "METRICS_ENABLED", True)
    monkeypatch.setattr(Config, "METRICS_ROOT", str(blocker / "metrics"))
    with caplog.at_level(logging.WARNING, logger="utils.metrics"):
        incr("tags.fetched", 1, repo="o/r")
    assert "Dropping metric tags.fetched" in caplog.text
