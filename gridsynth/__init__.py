"""Procedural grid synthesis: symbols, rewrite pipelines and archives."""

from .alphabet import EMPTY, WILDCARD, Alphabet, Symbol
from .errors import (
    ArchiveIOError,
    EmptyAlphabetError,
    GridSynthError,
    MalformedArchiveError,
    SymbolNotFoundError,
)
from .grid import Grid, SeededRNG
from .transformations import (
    REGISTRY as TRANSFORMATION_REGISTRY,
    RandomFill,
    Replacement,
    RuleBased,
    Transformation,
    TransformationKind,
    TransformationRegistry,
    create_transformation,
    register_transformation,
)
from .engine import Engine, StepRecord, SynthesisReport
from .archive import (
    ARCHIVE_VERSION,
    dumps,
    from_archive,
    load_archive,
    loads,
    save_archive,
    to_archive,
)

__all__ = [
    "Grid",
    "SeededRNG",
    "Symbol",
    "Alphabet",
    "EMPTY",
    "WILDCARD",
    "GridSynthError",
    "SymbolNotFoundError",
    "EmptyAlphabetError",
    "MalformedArchiveError",
    "ArchiveIOError",
    "Transformation",
    "TransformationKind",
    "TransformationRegistry",
    "TRANSFORMATION_REGISTRY",
    "register_transformation",
    "create_transformation",
    "RandomFill",
    "RuleBased",
    "Replacement",
    "Engine",
    "StepRecord",
    "SynthesisReport",
    "ARCHIVE_VERSION",
    "to_archive",
    "from_archive",
    "dumps",
    "loads",
    "save_archive",
    "load_archive",
]
