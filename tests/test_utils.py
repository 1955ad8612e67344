"""Tests for grid comparison and event logging utilities."""

from __future__ import annotations

import pytest

from gridsynth import Grid
from gridsynth.utils import count_changed_cells, open_event_log
from gridsynth.utils.logging import read_events


def test_count_changed_cells_same_shape() -> None:
    before = Grid.from_rows([[1, 2], [3, 4]])
    after = Grid.from_rows([[1, 0], [3, 5]])
    assert count_changed_cells(before, after) == 2
    assert count_changed_cells(before, before.copy()) == 0


def test_count_changed_cells_rejects_shape_mismatch() -> None:
    with pytest.raises(ValueError):
        count_changed_cells(Grid.from_rows([[1, 0]]), Grid.from_rows([[1, 0], [0, 2]]))


def test_event_log_appends_records(tmp_path) -> None:
    path = tmp_path / "runs" / "events.jsonl"
    with open_event_log(path) as log:
        log.log_step({"index": 0, "name": "a"})
        log.log_run({"changed_cells": 3})

    with open_event_log(path) as log:
        log.write("note", {"text": "again"})

    events = read_events(path)
    assert [event["type"] for event in events] == ["step", "run", "note"]
    assert events[1]["changed_cells"] == 3
    assert all("timestamp" in event for event in events)
