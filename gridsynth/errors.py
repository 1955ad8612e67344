"""Error types raised by the grid synthesis engine."""

from __future__ import annotations


class GridSynthError(RuntimeError):
    """Base class for all engine failures."""


class SymbolNotFoundError(GridSynthError, KeyError):
    """Raised when an alphabet lookup targets an unregistered id."""

    def __init__(self, symbol_id: int) -> None:
        super().__init__(f"symbol {symbol_id} is not registered")
        self.symbol_id = symbol_id

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message.
        return str(self.args[0])


class EmptyAlphabetError(GridSynthError):
    """Raised when a random fill is requested with no registered symbols."""


class MalformedArchiveError(GridSynthError, ValueError):
    """Raised when an archive document cannot be decoded.

    ``field`` holds the dotted path of the offending entry, e.g.
    ``transformations[1].search.data``.
    """

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}" if field else message)
        self.field = field


class ArchiveIOError(GridSynthError):
    """Raised when an archive file cannot be read or written; the cause is chained."""


__all__ = [
    "GridSynthError",
    "SymbolNotFoundError",
    "EmptyAlphabetError",
    "MalformedArchiveError",
    "ArchiveIOError",
]
