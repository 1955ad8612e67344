"""Top-level synthesis engine owning the grid, alphabet and pipeline."""

from __future__ import annotations

import logging
import threading
from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Tuple

from .alphabet import Alphabet, Symbol
from .grid import Grid, SeededRNG
from .transformations import Transformation
from .utils.grid import count_changed_cells

if TYPE_CHECKING:  # pragma: no cover
    from .utils.logging import EventLog

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StepRecord:
    """Outcome of one pipeline slot during :meth:`Engine.synthesize`."""

    index: int
    name: str
    kind: str
    applied: bool
    changed_cells: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class SynthesisReport:
    steps: Tuple[StepRecord, ...]
    changed_cells: int

    @property
    def applied_steps(self) -> int:
        return sum(1 for step in self.steps if step.applied)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "steps": [step.to_dict() for step in self.steps],
            "applied_steps": self.applied_steps,
            "changed_cells": self.changed_cells,
        }


class Engine:
    """Grid plus an ordered pipeline of transformations.

    ``synthesize`` replays every enabled transformation in order. Each step
    reads the active buffer and writes the other one; the two buffers swap
    after every applied step, and the final buffer is copied back into the
    engine's grid when it is the scratch one.
    """

    def __init__(
        self,
        width: int = 32,
        height: int = 32,
        default: int = 0,
        *,
        seed: int | None = None,
    ) -> None:
        self._grid = Grid(width, height, default)
        self._alphabet = Alphabet()
        self._transformations: List[Transformation] = []
        self._rng = SeededRNG(seed)
        self._lock = threading.RLock()

    # --------------------------------------------------------------- accessors
    @property
    def grid(self) -> Grid:
        return self._grid

    @property
    def alphabet(self) -> Alphabet:
        return self._alphabet

    @property
    def transformations(self) -> List[Transformation]:
        return self._transformations

    @property
    def rng(self) -> SeededRNG:
        return self._rng

    def reseed(self, seed: int | None) -> None:
        self._rng = SeededRNG(seed)

    # ----------------------------------------------------------------- symbols
    def add_symbol(self, symbol: Symbol | int, name: str | None = None) -> bool:
        if not isinstance(symbol, Symbol):
            symbol = Symbol(int(symbol), name if name is not None else str(symbol))
        with self._lock:
            return self._alphabet.add_symbol(symbol)

    def remove_symbol(self, symbol_id: int) -> None:
        with self._lock:
            self._alphabet.remove_symbol(symbol_id)

    # ---------------------------------------------------------------- pipeline
    def add_transformation(self, transformation: Transformation) -> Transformation:
        with self._lock:
            self._transformations.append(transformation)
        return transformation

    def insert_transformation(self, index: int, transformation: Transformation) -> Transformation:
        with self._lock:
            self._transformations.insert(index, transformation)
        return transformation

    def remove_transformation(self, index: int) -> Transformation:
        with self._lock:
            return self._transformations.pop(index)

    def move_transformation(self, source: int, destination: int) -> None:
        with self._lock:
            transformation = self._transformations.pop(source)
            self._transformations.insert(destination, transformation)

    def find_transformation(self, name: str) -> Optional[Transformation]:
        for transformation in self._transformations:
            if transformation.name == name:
                return transformation
        return None

    # --------------------------------------------------------------- synthesis
    def synthesize(self, *, event_log: "EventLog | None" = None) -> SynthesisReport:
        """Run every enabled transformation once, in order, over the grid."""

        with self._lock:
            before = self._grid.copy()
            buffers = (self._grid, Grid(self._grid.width, self._grid.height))
            active = 0
            steps: List[StepRecord] = []

            try:
                for index, transformation in enumerate(self._transformations):
                    kind = transformation.kind.value
                    if not transformation.enabled:
                        logger.debug("step %d (%s) '%s' disabled, skipping", index, kind, transformation.name)
                        steps.append(StepRecord(index, transformation.name, kind, False, 0))
                        continue

                    source, target = buffers[active], buffers[1 - active]
                    transformation.apply(source, target, self._alphabet, self._rng)
                    changed = count_changed_cells(source, target)
                    active = 1 - active

                    logger.debug("step %d (%s) '%s' changed %d cells", index, kind, transformation.name, changed)
                    steps.append(StepRecord(index, transformation.name, kind, True, changed))

                if active != 0:
                    self._grid.copy_from(buffers[active])
            except BaseException:
                self._grid.copy_from(before)
                raise

            report = SynthesisReport(tuple(steps), count_changed_cells(before, self._grid))

        logger.info(
            "synthesized %dx%d grid: %d/%d steps applied, %d cells changed",
            self._grid.width,
            self._grid.height,
            report.applied_steps,
            len(report.steps),
            report.changed_cells,
        )
        if event_log is not None:
            for step in report.steps:
                event_log.log_step(step.to_dict())
            event_log.log_run({"applied_steps": report.applied_steps, "changed_cells": report.changed_cells})
        return report

    # ----------------------------------------------------------------- archive
    def to_archive(self) -> Dict[str, Any]:
        from .archive import to_archive

        return to_archive(self)

    @classmethod
    def from_archive(cls, document: Mapping[str, Any], *, seed: int | None = None) -> "Engine":
        from .archive import from_archive

        return from_archive(document, seed=seed)

    def __repr__(self) -> str:
        return (
            f"Engine(grid={self._grid.width}x{self._grid.height}, symbols={len(self._alphabet)}, "
            f"transformations={self._transformations!r})"
        )


__all__ = ["Engine", "StepRecord", "SynthesisReport"]
