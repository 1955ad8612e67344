"""Grid transformations and the registry that maps archive tags to them.

A transformation reads a ``source`` grid and writes a ``target`` grid of the
same size. Two kinds exist:

* :class:`RandomFill` overwrites every cell with a symbol drawn uniformly from
  the alphabet.
* :class:`RuleBased` scans the source for a search pattern and stamps one of
  several weighted replacement patterns into the target at every match.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Dict, List, Optional, Tuple, Type

from .alphabet import EMPTY, WILDCARD, Alphabet
from .errors import EmptyAlphabetError
from .grid import Grid, SeededRNG


class TransformationKind(str, Enum):
    RANDOM = "random"
    RULE_BASED = "rule_based"


def _check_same_shape(source: Grid, target: Grid) -> None:
    if source.shape != target.shape:
        raise ValueError(
            f"source {source.width}x{source.height} and target {target.width}x{target.height} differ in size"
        )


def _check_probability(probability: float) -> float:
    if isinstance(probability, bool) or not isinstance(probability, (int, float)):
        raise TypeError("probability must be a number")
    value = float(probability)
    if not 0.0 <= value <= 1.0:
        raise ValueError("probability must be in [0, 1]")
    return value


class Transformation:
    """Base class for pipeline steps."""

    kind: ClassVar[TransformationKind]

    def __init__(self, name: str, *, enabled: bool = True) -> None:
        self.name = name
        self.enabled = bool(enabled)

    def set_enabled(self, enabled: bool) -> None:
        self.enabled = bool(enabled)

    def apply(self, source: Grid, target: Grid, alphabet: Alphabet, rng: SeededRNG) -> None:
        raise NotImplementedError

    def __repr__(self) -> str:
        state = "enabled" if self.enabled else "disabled"
        return f"{type(self).__name__}(name={self.name!r}, {state})"


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class TransformationRegistry:
    """Registry mapping a :class:`TransformationKind` to its implementation."""

    def __init__(self) -> None:
        self._entries: Dict[TransformationKind, Type[Transformation]] = {}

    def register(self, cls: Type[Transformation]) -> Type[Transformation]:
        kind = TransformationKind(cls.kind)
        if kind in self._entries:
            raise ValueError(f"transformation kind '{kind.value}' is already registered")
        self._entries[kind] = cls
        return cls

    def get(self, kind: TransformationKind | str) -> Type[Transformation]:
        try:
            return self._entries[TransformationKind(kind)]
        except (KeyError, ValueError) as exc:
            raise KeyError(f"unknown transformation kind '{kind}'") from exc

    def create(self, kind: TransformationKind | str, name: str, *, enabled: bool = True) -> Transformation:
        return self.get(kind)(name, enabled=enabled)

    def kinds(self) -> List[TransformationKind]:
        return list(self._entries)


REGISTRY = TransformationRegistry()


def register_transformation(cls: Type[Transformation]) -> Type[Transformation]:
    """Class decorator registering ``cls`` into the global registry."""

    return REGISTRY.register(cls)


def create_transformation(kind: TransformationKind | str, name: str, *, enabled: bool = True) -> Transformation:
    return REGISTRY.create(kind, name, enabled=enabled)


# ---------------------------------------------------------------------------
# Random fill
# ---------------------------------------------------------------------------


@register_transformation
class RandomFill(Transformation):
    kind = TransformationKind.RANDOM

    def apply(self, source: Grid, target: Grid, alphabet: Alphabet, rng: SeededRNG) -> None:
        _check_same_shape(source, target)
        ids = alphabet.ids()
        if not ids:
            raise EmptyAlphabetError(f"random fill '{self.name}' needs at least one registered symbol")

        for y in range(target.height):
            for x in range(target.width):
                target[x, y] = rng.choice(ids)


# ---------------------------------------------------------------------------
# Rule based rewriting
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Replacement:
    """Weighted replacement pattern of a :class:`RuleBased` transformation."""

    probability: float
    pattern: Grid


@register_transformation
class RuleBased(Transformation):
    """Windowed pattern match and replace.

    Matching always reads the untouched ``source``; replacements accumulate in
    ``target``. Anchors are scanned with ``x`` as the outer loop and ``y`` as
    the inner loop, so when two matched windows overlap, the later anchor's
    non-wildcard cells win.

    Replacement weights are walked cumulatively against one uniform draw per
    match. If the weights sum to less than one, the remaining mass means no
    replacement for that match.
    """

    kind = TransformationKind.RULE_BASED

    def __init__(self, name: str, *, enabled: bool = True, search: Optional[Grid] = None) -> None:
        super().__init__(name, enabled=enabled)
        self._search = search.copy() if search is not None else Grid(1, 1, EMPTY.id)
        self._replacements: List[Replacement] = []

    # ----------------------------------------------------------------- editing
    @property
    def search(self) -> Grid:
        return self._search

    def set_search(self, pattern: Grid) -> None:
        self._search = pattern.copy()

    @property
    def replacements(self) -> Tuple[Replacement, ...]:
        return tuple(self._replacements)

    def add_replacement(self, probability: float, pattern: Grid) -> Replacement:
        entry = Replacement(_check_probability(probability), pattern.copy())
        self._replacements.append(entry)
        return entry

    def remove_replacement(self, index: int) -> Replacement:
        return self._replacements.pop(index)

    def set_probability(self, index: int, probability: float) -> None:
        current = self._replacements[index]
        self._replacements[index] = Replacement(_check_probability(probability), current.pattern)

    def total_probability(self) -> float:
        return sum(entry.probability for entry in self._replacements)

    # ---------------------------------------------------------------- matching
    def matches(self, grid: Grid, x: int, y: int) -> bool:
        """Return whether the search pattern anchored at ``(x, y)`` matches."""

        search = self._search
        if not (grid.in_bounds(x, y) and grid.in_bounds(x + search.width - 1, y + search.height - 1)):
            return False

        for sx in range(search.width):
            for sy in range(search.height):
                expected = search[sx, sy]
                if expected == WILDCARD.id:
                    continue
                if grid[x + sx, y + sy] != expected:
                    return False
        return True

    def choose(self, draw: float) -> Optional[Replacement]:
        """Pick the first replacement whose cumulative weight reaches ``draw``."""

        accumulated = 0.0
        for entry in self._replacements:
            accumulated += entry.probability
            if accumulated >= draw:
                return entry
        return None

    def apply(self, source: Grid, target: Grid, alphabet: Alphabet, rng: SeededRNG) -> None:
        _check_same_shape(source, target)
        target.copy_from(source)
        if not self._replacements:
            return

        for i in range(source.width):
            for j in range(source.height):
                if not self.matches(source, i, j):
                    continue
                entry = self.choose(rng.random())
                if entry is not None:
                    _stamp(entry.pattern, target, i, j)


def _stamp(pattern: Grid, target: Grid, x: int, y: int) -> None:
    for px in range(pattern.width):
        for py in range(pattern.height):
            value = pattern[px, py]
            if value == WILDCARD.id or not target.in_bounds(x + px, y + py):
                continue
            target[x + px, y + py] = value


__all__ = [
    "TransformationKind",
    "Transformation",
    "TransformationRegistry",
    "REGISTRY",
    "register_transformation",
    "create_transformation",
    "RandomFill",
    "RuleBased",
    "Replacement",
]
