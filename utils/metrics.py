#!/usr/bin/env python3
"""Best-effort metrics for GitHub lookups, written as JSONL.

Disabled unless METRICS_ENABLED=1. A metrics write that fails is logged and
dropped; it never fails the lookup being measured.
"""

from __future__ import annotations

import json
import logging
import os
import time
from pathlib import Path
from typing import Any, Dict, Optional, Union

from configs.config import Config

logger = logging.getLogger(__name__)

Number = Union[int, float]


def _path() -> Path:
    root = Path(Config.METRICS_ROOT)
    root.mkdir(parents=True, exist_ok=True)
    return root / "metrics.log"


def incr(
    name: str,
    value: Number = 1,
    *,
    repo: Optional[str] = None,
    tag: Optional[str] = None,
    code: Optional[str] = None,
) -> None:
    """Append one metric record; ``repo``/``tag``/``code`` are kept only when set."""
    if not Config.METRICS_ENABLED:
        return
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        raise TypeError(f"metric {name} value must be a number, got {type(value).__name__}")
    rec: Dict[str, Any] = {"ts": int(time.time()), "metric": name, "value": value}
    for key, field in (("repo", repo), ("tag", tag), ("code", code)):
        if field is not None:
            rec[key] = field
    line = json.dumps(rec, separators=(",", ":")) + "\n"
    try:
        with open(_path(), "a", encoding="utf-8") as f:
            f.write(line)
            f.flush()
            os.fsync(f.fileno())
    except OSError as e:
        logger.warning(f"Dropping metric {name}: cannot write under {Config.METRICS_ROOT}: {e}")


class Timer:
    """Record the latency of a block as ``<name>.latency_s``."""

    def __init__(self, name: str, *, repo: Optional[str] = None, tag: Optional[str] = None):
        self.name = name
        self.repo = repo
        self.tag = tag
        self._t0 = 0.0

    def __enter__(self):
        self._t0 = time.perf_counter()
        return self

    def __exit__(self, *exc):
        dt = time.perf_counter() - self._t0
        incr(f"{self.name}.latency_s", dt, repo=self.repo, tag=self.tag)
