"""Versioned archive codec for complete engine state.

Document layout (version 1)::

    {
      "version": 1,
      "grid": {"width": w, "height": h, "data": [...]},          # row-major
      "alphabet": {"symbols": [{"id": i, "name": s}, ...]},       # ascending id
      "transformations": [
        {"name": s, "enabled": b, "type": "random"},
        {"name": s, "enabled": b, "type": "rule_based",
         "search": {...grid...},
         "replacements": [{"probability": p, "grid": {...grid...}}, ...]},
      ],
    }

Decoding validates the whole document before an :class:`Engine` is built, so
a failure never leaves a partially populated engine behind.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Sequence, Tuple, cast

from .alphabet import Symbol
from .engine import Engine
from .errors import ArchiveIOError, MalformedArchiveError
from .grid import Grid
from .transformations import RandomFill, RuleBased, Transformation, TransformationKind

logger = logging.getLogger(__name__)

ARCHIVE_VERSION = 1


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def _encode_grid(grid: Grid) -> Dict[str, Any]:
    return {"width": grid.width, "height": grid.height, "data": grid.raw_cells()}


def _encode_transformation(transformation: Transformation) -> Dict[str, Any]:
    record: Dict[str, Any] = {
        "name": transformation.name,
        "enabled": transformation.enabled,
        "type": transformation.kind.value,
    }
    if transformation.kind is TransformationKind.RULE_BASED:
        rule = cast(RuleBased, transformation)
        record["search"] = _encode_grid(rule.search)
        record["replacements"] = [
            {"probability": entry.probability, "grid": _encode_grid(entry.pattern)}
            for entry in rule.replacements
        ]
    return record


def to_archive(engine: Engine) -> Dict[str, Any]:
    return {
        "version": ARCHIVE_VERSION,
        "grid": _encode_grid(engine.grid),
        "alphabet": {
            "symbols": [{"id": symbol.id, "name": symbol.name} for symbol in engine.alphabet.list_symbols()],
        },
        "transformations": [_encode_transformation(t) for t in engine.transformations],
    }


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


def _describe(value: Any) -> str:
    return type(value).__name__


def _require(mapping: Mapping[str, Any], key: str, path: str) -> Any:
    if key not in mapping:
        raise MalformedArchiveError(_join(path, key), "missing required field")
    return mapping[key]


def _join(path: str, key: str) -> str:
    return f"{path}.{key}" if path else key


def _as_mapping(value: Any, path: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise MalformedArchiveError(path, f"expected an object, got {_describe(value)}")
    return value


def _as_list(value: Any, path: str) -> Sequence[Any]:
    if not isinstance(value, list):
        raise MalformedArchiveError(path, f"expected a list, got {_describe(value)}")
    return value


def _as_int(value: Any, path: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise MalformedArchiveError(path, f"expected an integer, got {_describe(value)}")
    return value


def _as_bool(value: Any, path: str) -> bool:
    if not isinstance(value, bool):
        raise MalformedArchiveError(path, f"expected a boolean, got {_describe(value)}")
    return value


def _as_str(value: Any, path: str) -> str:
    if not isinstance(value, str):
        raise MalformedArchiveError(path, f"expected a string, got {_describe(value)}")
    return value


def _as_probability(value: Any, path: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedArchiveError(path, f"expected a number, got {_describe(value)}")
    probability = float(value)
    if not 0.0 <= probability <= 1.0:
        raise MalformedArchiveError(path, f"probability {probability} outside [0, 1]")
    return probability


def _decode_grid(value: Any, path: str) -> Grid:
    record = _as_mapping(value, path)
    width = _as_int(_require(record, "width", path), _join(path, "width"))
    height = _as_int(_require(record, "height", path), _join(path, "height"))
    if width <= 0 or height <= 0:
        raise MalformedArchiveError(path, f"dimensions must be positive, got {width}x{height}")

    data_path = _join(path, "data")
    data = _as_list(_require(record, "data", path), data_path)
    if len(data) != width * height:
        raise MalformedArchiveError(data_path, f"expected {width * height} cells, got {len(data)}")
    cells = [_as_int(cell, f"{data_path}[{index}]") for index, cell in enumerate(data)]
    return Grid.from_flat(cells, width, height)


def _decode_symbols(value: Any) -> List[Symbol]:
    alphabet = _as_mapping(value, "alphabet")
    entries = _as_list(_require(alphabet, "symbols", "alphabet"), "alphabet.symbols")

    symbols: List[Symbol] = []
    seen: set[int] = set()
    for index, raw in enumerate(entries):
        path = f"alphabet.symbols[{index}]"
        entry = _as_mapping(raw, path)
        symbol_id = _as_int(_require(entry, "id", path), _join(path, "id"))
        name = _as_str(_require(entry, "name", path), _join(path, "name"))
        if symbol_id in seen:
            raise MalformedArchiveError(_join(path, "id"), f"duplicate symbol id {symbol_id}")
        seen.add(symbol_id)
        symbols.append(Symbol(symbol_id, name))
    return symbols


def _decode_kind(value: Any, path: str) -> TransformationKind:
    tag = _as_str(value, path)
    try:
        return TransformationKind(tag)
    except ValueError:
        raise MalformedArchiveError(path, f"unknown transformation type '{tag}'") from None


def _decode_transformation(value: Any, path: str) -> Transformation:
    record = _as_mapping(value, path)
    name = _as_str(_require(record, "name", path), _join(path, "name"))
    enabled = _as_bool(_require(record, "enabled", path), _join(path, "enabled"))
    kind = _decode_kind(_require(record, "type", path), _join(path, "type"))

    if kind is TransformationKind.RANDOM:
        return RandomFill(name, enabled=enabled)

    search = _decode_grid(_require(record, "search", path), _join(path, "search"))
    replacements_path = _join(path, "replacements")
    entries = _as_list(_require(record, "replacements", path), replacements_path)

    decoded: List[Tuple[float, Grid]] = []
    for index, raw in enumerate(entries):
        entry_path = f"{replacements_path}[{index}]"
        entry = _as_mapping(raw, entry_path)
        probability = _as_probability(_require(entry, "probability", entry_path), _join(entry_path, "probability"))
        pattern = _decode_grid(_require(entry, "grid", entry_path), _join(entry_path, "grid"))
        decoded.append((probability, pattern))

    rule = RuleBased(name, enabled=enabled, search=search)
    for probability, pattern in decoded:
        rule.add_replacement(probability, pattern)
    return rule


@dataclass(frozen=True)
class _DecodedArchive:
    grid: Grid
    symbols: List[Symbol]
    transformations: List[Transformation]


def _decode(document: Any) -> _DecodedArchive:
    root = _as_mapping(document, "")
    version = _require(root, "version", "")
    if isinstance(version, bool) or not isinstance(version, int) or version != ARCHIVE_VERSION:
        raise MalformedArchiveError("version", f"unsupported archive version {version!r}")

    grid = _decode_grid(_require(root, "grid", ""), "grid")
    symbols = _decode_symbols(_require(root, "alphabet", ""))
    entries = _as_list(_require(root, "transformations", ""), "transformations")
    transformations = [_decode_transformation(raw, f"transformations[{index}]") for index, raw in enumerate(entries)]
    return _DecodedArchive(grid, symbols, transformations)


def from_archive(document: Mapping[str, Any], *, seed: int | None = None) -> Engine:
    """Build a new :class:`Engine` from an archive document."""

    decoded = _decode(document)

    engine = Engine(decoded.grid.width, decoded.grid.height, seed=seed)
    engine.grid.copy_from(decoded.grid)
    for symbol in decoded.symbols:
        engine.add_symbol(symbol)
    for transformation in decoded.transformations:
        engine.add_transformation(transformation)
    return engine


# ---------------------------------------------------------------------------
# Text and file helpers
# ---------------------------------------------------------------------------


def dumps(engine: Engine, *, indent: int | None = 2) -> str:
    return json.dumps(to_archive(engine), indent=indent)


def loads(text: str, *, seed: int | None = None) -> Engine:
    try:
        document = json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedArchiveError("", f"invalid JSON: {exc}") from exc
    return from_archive(document, seed=seed)


def save_archive(engine: Engine, path: str | Path) -> Path:
    destination = Path(path)
    text = dumps(engine)
    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_text(text + "\n", encoding="utf-8")
    except OSError as exc:
        raise ArchiveIOError(f"cannot write archive to {destination}: {exc}") from exc
    logger.info("saved archive with %d transformations to %s", len(engine.transformations), destination)
    return destination


def load_archive(path: str | Path, *, seed: int | None = None) -> Engine:
    source = Path(path)
    try:
        text = source.read_text(encoding="utf-8")
    except OSError as exc:
        raise ArchiveIOError(f"cannot read archive from {source}: {exc}") from exc

    engine = loads(text, seed=seed)
    logger.info("loaded archive with %d transformations from %s", len(engine.transformations), source)
    return engine


__all__ = [
    "ARCHIVE_VERSION",
    "to_archive",
    "from_archive",
    "dumps",
    "loads",
    "save_archive",
    "load_archive",
]
