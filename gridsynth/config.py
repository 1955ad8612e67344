"""YAML configuration describing an engine and its pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Sequence, Tuple

import yaml

from .alphabet import EMPTY, Symbol
from .engine import Engine
from .grid import Grid
from .transformations import RuleBased, Transformation, TransformationKind, create_transformation


@dataclass(frozen=True)
class ReplacementConfig:
    probability: float
    pattern: Tuple[Tuple[int, ...], ...]

    def __post_init__(self) -> None:
        if not 0.0 <= self.probability <= 1.0:
            raise ValueError("replacement probability must be in [0, 1]")


@dataclass(frozen=True)
class TransformationConfig:
    """One pipeline entry; ``search``/``replacements`` apply to rule_based only."""

    name: str
    kind: TransformationKind
    enabled: bool = True
    search: Tuple[Tuple[int, ...], ...] | None = None
    replacements: Tuple[ReplacementConfig, ...] = ()

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("transformation name cannot be empty")
        if self.kind is TransformationKind.RULE_BASED and self.search is None:
            raise ValueError(f"rule_based transformation '{self.name}' requires a search pattern")

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "TransformationConfig":
        if not isinstance(raw, Mapping):
            raise ValueError("transformation entries must be mappings")

        try:
            kind = TransformationKind(str(raw.get("type", "")).strip().lower())
        except ValueError as exc:
            raise ValueError(f"unsupported transformation type '{raw.get('type')}'") from exc

        search = raw.get("search")
        enabled = raw.get("enabled", True)
        if not isinstance(enabled, bool):
            raise ValueError(f"enabled must be true or false, got {enabled!r}")
        replacements = []
        for entry in raw.get("replacements") or ():
            if not isinstance(entry, Mapping):
                raise ValueError("replacement entries must be mappings")
            replacements.append(
                ReplacementConfig(
                    probability=_probability(entry.get("probability", 1.0)),
                    pattern=_rows(entry.get("pattern")),
                )
            )

        return cls(
            name=str(raw.get("name", kind.value)),
            kind=kind,
            enabled=enabled,
            search=_rows(search) if search is not None else None,
            replacements=tuple(replacements),
        )

    def build(self) -> Transformation:
        transformation = create_transformation(self.kind, self.name, enabled=self.enabled)
        if isinstance(transformation, RuleBased):
            if self.search is None:
                raise ValueError(f"rule_based transformation '{self.name}' requires a search pattern")
            transformation.set_search(Grid.from_rows(self.search))
            for entry in self.replacements:
                transformation.add_replacement(entry.probability, Grid.from_rows(entry.pattern))
        return transformation


@dataclass(frozen=True)
class EngineConfig:
    """Configuration for a complete engine: grid, symbols and pipeline."""

    width: int = 32
    height: int = 32
    fill: int = EMPTY.id
    seed: int | None = None
    symbols: Tuple[Symbol, ...] = ()
    transformations: Tuple[TransformationConfig, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError("grid width and height must be positive")
        ids = [symbol.id for symbol in self.symbols]
        if len(ids) != len(set(ids)):
            raise ValueError("symbol ids must be unique")

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> "EngineConfig":
        grid_cfg = config.get("grid") or {}
        if not isinstance(grid_cfg, Mapping):
            raise ValueError("grid configuration must be a mapping")

        width = int(grid_cfg.get("width", 32))
        height = int(grid_cfg.get("height", width))
        seed = config.get("seed")

        raw_transformations = config.get("transformations") or []
        if not isinstance(raw_transformations, Sequence) or isinstance(raw_transformations, str):
            raise ValueError("transformations must be a list")

        return cls(
            width=width,
            height=height,
            fill=int(grid_cfg.get("fill", EMPTY.id)),
            seed=int(seed) if seed is not None else None,
            symbols=tuple(_symbols(config.get("symbols"))),
            transformations=tuple(TransformationConfig.from_mapping(raw) for raw in raw_transformations),
        )


def _rows(value: Any) -> Tuple[Tuple[int, ...], ...]:
    if not isinstance(value, Sequence) or isinstance(value, str) or not value:
        raise ValueError("patterns must be non-empty lists of rows")
    rows = []
    for row in value:
        if not isinstance(row, Sequence) or isinstance(row, str):
            raise ValueError("pattern rows must be lists of integers")
        for cell in row:
            if isinstance(cell, bool) or not isinstance(cell, int):
                raise ValueError(f"pattern cells must be integers, got {cell!r}")
        rows.append(tuple(row))
    if len({len(row) for row in rows}) != 1 or not rows[0]:
        raise ValueError("pattern rows must all have the same, non-zero length")
    return tuple(rows)


def _probability(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"replacement probability must be a number, got {value!r}")
    return float(value)


def _symbols(value: Any) -> List[Symbol]:
    if value is None:
        return []
    if isinstance(value, Mapping):
        return [Symbol(int(key), str(name)) for key, name in value.items()]
    symbols = []
    for entry in value:
        if not isinstance(entry, Mapping) or "id" not in entry:
            raise ValueError("symbol entries must be mappings with an 'id'")
        symbols.append(Symbol(int(entry["id"]), str(entry.get("name", entry["id"]))))
    return symbols


def load_config(path: str | Path) -> Dict[str, Any]:
    with Path(path).open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle)
    if not isinstance(data, Mapping):
        raise ValueError(f"configuration must be a mapping: {path}")
    return dict(data)


def build_engine(config: EngineConfig | Mapping[str, Any], *, seed: int | None = None) -> Engine:
    """Construct an engine from a parsed config; ``seed`` overrides the config's."""

    if not isinstance(config, EngineConfig):
        config = EngineConfig.from_mapping(config)

    engine = Engine(config.width, config.height, config.fill, seed=seed if seed is not None else config.seed)
    for symbol in config.symbols:
        engine.add_symbol(symbol)
    for entry in config.transformations:
        engine.add_transformation(entry.build())
    return engine


def build_engine_from_file(path: str | Path, *, seed: int | None = None) -> Engine:
    return build_engine(load_config(path), seed=seed)


__all__ = [
    "EngineConfig",
    "TransformationConfig",
    "ReplacementConfig",
    "load_config",
    "build_engine",
    "build_engine_from_file",
]
