"""Tests for YAML engine configuration."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from gridsynth import RandomFill, RuleBased, TransformationKind
from gridsynth.config import EngineConfig, TransformationConfig, build_engine, build_engine_from_file, load_config

DEFAULT_CONFIG = Path(__file__).resolve().parents[1] / "configs" / "default.yaml"


def test_default_config_builds_editor_scene() -> None:
    engine = build_engine_from_file(DEFAULT_CONFIG, seed=5)

    assert engine.grid.shape == (16, 16)
    assert set(engine.grid.raw_cells()) == {0}
    assert [(s.id, s.name) for s in engine.alphabet.list_symbols()] == [(1, "F"), (2, "G")]

    random_fill, rule = engine.transformations
    assert isinstance(random_fill, RandomFill)
    assert isinstance(rule, RuleBased)
    assert rule.name == "Rule-based"
    assert rule.search.rows() == [[-1, 1, -1], [1, 2, 1], [-1, 1, -1]]
    assert rule.replacements[0].probability == 1.0

    engine.synthesize()
    assert set(engine.grid.raw_cells()) <= {1, 2}


def test_from_mapping_accepts_symbol_mapping(tmp_path) -> None:
    config = {
        "seed": 3,
        "grid": {"width": 4, "height": 2, "fill": 9},
        "symbols": {5: "E", 1: "A"},
        "transformations": [
            {"name": "off", "type": "random", "enabled": False},
            {
                "name": "swap",
                "type": "rule_based",
                "search": [[9]],
                "replacements": [{"probability": 0.5, "pattern": [[5]]}, {"pattern": [[1]]}],
            },
        ],
    }
    path = tmp_path / "scene.yaml"
    path.write_text(yaml.safe_dump(config), encoding="utf-8")

    parsed = EngineConfig.from_mapping(load_config(path))
    assert parsed.seed == 3
    assert parsed.fill == 9
    assert parsed.transformations[1].kind is TransformationKind.RULE_BASED

    engine = build_engine(parsed)
    assert engine.alphabet.ids() == [1, 5]
    assert not engine.transformations[0].enabled
    assert [entry.probability for entry in engine.transformations[1].replacements] == [0.5, 1.0]

    engine.synthesize()
    assert set(engine.grid.raw_cells()) <= {1, 5}


def test_seed_override_wins() -> None:
    config = {"seed": 1, "grid": {"width": 5}, "symbols": [{"id": 1}, {"id": 2}],
              "transformations": [{"type": "random"}]}

    first = build_engine(config, seed=11)
    second = build_engine(config, seed=11)
    assert first.rng.seed == 11
    assert first.grid.shape == (5, 5)
    assert first.transformations[0].name == "random"

    first.synthesize()
    second.synthesize()
    assert first.grid == second.grid


@pytest.mark.parametrize(
    "raw",
    [
        {"name": "bad", "type": "mirror"},
        {"name": "rule", "type": "rule_based"},
        {"name": "rule", "type": "rule_based", "search": [[1, 2], [3]]},
        {"name": "rule", "type": "rule_based", "search": []},
        {"name": "rule", "type": "rule_based", "search": [[1]],
         "replacements": [{"probability": 2.0, "pattern": [[1]]}]},
        {"name": "rule", "type": "random", "enabled": "false"},
        {"name": "rule", "type": "rule_based", "search": [[1, 1.9]]},
        {"name": "rule", "type": "rule_based", "search": [[True]]},
        {"name": "rule", "type": "rule_based", "search": [[1]],
         "replacements": [{"probability": "0.5", "pattern": [[1]]}]},
        "not-a-mapping",
    ],
)
def test_invalid_transformation_entries(raw) -> None:
    with pytest.raises(ValueError):
        TransformationConfig.from_mapping(raw)


def test_build_rejects_rule_without_search() -> None:
    config = TransformationConfig("rule", TransformationKind.RANDOM)
    object.__setattr__(config, "kind", TransformationKind.RULE_BASED)

    with pytest.raises(ValueError):
        config.build()


def test_invalid_engine_configs() -> None:
    with pytest.raises(ValueError):
        EngineConfig.from_mapping({"grid": {"width": 0}})

    with pytest.raises(ValueError):
        EngineConfig.from_mapping({"symbols": [{"id": 1}, {"id": 1}]})

    with pytest.raises(ValueError):
        EngineConfig.from_mapping({"transformations": "random"})


def test_load_config_requires_mapping(tmp_path) -> None:
    path = tmp_path / "list.yaml"
    path.write_text("- 1\n- 2\n", encoding="utf-8")

    with pytest.raises(ValueError):
        load_config(path)
