"""Tests for pipeline execution."""

from __future__ import annotations

import pytest

from gridsynth import EmptyAlphabetError, Engine, Grid, RandomFill, RuleBased, Symbol
from gridsynth.utils.logging import EventLog, read_events


def swap_rule(name: str, search: int, replace: int, *, enabled: bool = True) -> RuleBased:
    rule = RuleBased(name, enabled=enabled, search=Grid(1, 1, search))
    rule.add_replacement(1.0, Grid(1, 1, replace))
    return rule


def test_engine_construction() -> None:
    engine = Engine(4, 3, 2)
    assert engine.grid.shape == (4, 3)
    assert engine.grid.raw_cells() == [2] * 12
    assert len(engine.alphabet) == 0
    assert engine.transformations == []


def test_empty_pipeline_leaves_grid_untouched() -> None:
    engine = Engine(3, 3, 1)
    report = engine.synthesize()

    assert engine.grid.raw_cells() == [1] * 9
    assert report.steps == ()
    assert report.changed_cells == 0


@pytest.mark.parametrize(
    "steps, expected",
    [
        (1, 2),
        (2, 3),
        (3, 4),
    ],
)
def test_pipeline_chains_steps_and_keeps_grid_identity(steps: int, expected: int) -> None:
    engine = Engine(3, 2, 1)
    grid = engine.grid
    for value in range(1, steps + 1):
        engine.add_transformation(swap_rule(f"{value}->{value + 1}", value, value + 1))

    engine.synthesize()

    assert engine.grid is grid
    assert grid.raw_cells() == [expected] * 6


def test_disabled_steps_are_skipped() -> None:
    engine = Engine(2, 2, 1)
    first = engine.add_transformation(swap_rule("to-two", 1, 2, enabled=False))
    engine.add_transformation(swap_rule("to-five", 1, 5))

    report = engine.synthesize()
    assert engine.grid.raw_cells() == [5] * 4
    assert [step.applied for step in report.steps] == [False, True]
    assert report.steps[0].changed_cells == 0

    engine.grid.clear(1)
    first.set_enabled(True)
    engine.synthesize()
    assert engine.grid.raw_cells() == [2] * 4


def test_toggling_a_step_only_changes_its_own_effect() -> None:
    engine = Engine(3, 3, 0)
    engine.add_symbol(Symbol(7, "S"))
    engine.add_transformation(RandomFill("noise"))
    toggle = engine.add_transformation(swap_rule("seven-to-eight", 7, 8, enabled=False))

    engine.synthesize()
    assert engine.grid.raw_cells() == [7] * 9

    toggle.set_enabled(True)
    engine.synthesize()
    assert engine.grid.raw_cells() == [8] * 9


def test_report_counts_changed_cells() -> None:
    engine = Engine(3, 1, 0)
    engine.grid[1, 0] = 4
    engine.add_transformation(swap_rule("four", 4, 6))
    engine.add_transformation(swap_rule("six", 6, 6))

    report = engine.synthesize()
    assert report.applied_steps == 2
    assert [step.changed_cells for step in report.steps] == [1, 0]
    assert report.changed_cells == 1
    assert report.to_dict()["steps"][0]["kind"] == "rule_based"


def test_random_fill_without_symbols_propagates() -> None:
    engine = Engine(2, 2)
    engine.add_transformation(RandomFill("noise"))

    with pytest.raises(EmptyAlphabetError):
        engine.synthesize()


@pytest.mark.parametrize("rules", [1, 2])
def test_failed_synthesis_restores_grid(rules: int) -> None:
    engine = Engine(2, 2, 1)
    engine.add_transformation(swap_rule("one", 1, 2))
    if rules == 2:
        engine.add_transformation(swap_rule("two", 2, 3))
    engine.add_transformation(RandomFill("noise"))

    with pytest.raises(EmptyAlphabetError):
        engine.synthesize()
    assert engine.grid.raw_cells() == [1, 1, 1, 1]

    engine.remove_transformation(len(engine.transformations) - 1)
    engine.synthesize()
    assert engine.grid.raw_cells() == [1 + rules] * 4


def test_seeded_engines_replay_identically() -> None:
    def build() -> Engine:
        engine = Engine(6, 6, seed=99)
        for symbol_id in (1, 2, 3):
            engine.add_symbol(symbol_id, f"s{symbol_id}")
        engine.add_transformation(RandomFill("noise"))
        rule = RuleBased("half", search=Grid(1, 1, 1))
        rule.add_replacement(0.5, Grid(1, 1, 9))
        engine.add_transformation(rule)
        return engine

    first, second = build(), build()
    first.synthesize()
    second.synthesize()

    assert first.grid == second.grid


def test_synthesize_uses_current_grid_size() -> None:
    engine = Engine(2, 2, 0)
    engine.add_symbol(Symbol(3, "C"))
    engine.add_transformation(RandomFill("noise"))
    engine.add_transformation(swap_rule("noop", 4, 4))
    engine.add_transformation(swap_rule("noop-2", 4, 4))

    engine.grid.resize(5, 4)
    engine.synthesize()
    assert engine.grid.shape == (5, 4)
    assert engine.grid.raw_cells() == [3] * 20


def test_pipeline_editing() -> None:
    engine = Engine(2, 2)
    a = engine.add_transformation(RandomFill("a"))
    b = engine.add_transformation(RandomFill("b"))
    c = engine.insert_transformation(0, RandomFill("c"))
    assert [t.name for t in engine.transformations] == ["c", "a", "b"]

    engine.move_transformation(0, 2)
    assert engine.transformations == [a, b, c]

    assert engine.find_transformation("b") is b
    assert engine.find_transformation("missing") is None

    assert engine.remove_transformation(1) is b
    assert engine.transformations == [a, c]


def test_symbol_helpers() -> None:
    engine = Engine(1, 1)
    assert engine.add_symbol(Symbol(1, "A"))
    assert not engine.add_symbol(1, "B")
    assert engine.alphabet.get_symbol(1).name == "A"

    engine.remove_symbol(1)
    assert not engine.alphabet.has_symbol(1)


def test_synthesize_writes_event_log(tmp_path) -> None:
    engine = Engine(2, 2, 1)
    engine.add_transformation(swap_rule("one", 1, 2))
    engine.add_transformation(swap_rule("off", 2, 3, enabled=False))

    path = tmp_path / "logs" / "events.jsonl"
    with EventLog(path) as log:
        engine.synthesize(event_log=log)

    events = read_events(path)
    assert [event["type"] for event in events] == ["step", "step", "run"]
    assert events[0]["name"] == "one"
    assert events[0]["changed_cells"] == 4
    assert events[1]["applied"] is False
    assert events[2]["applied_steps"] == 1
