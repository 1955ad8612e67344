"""Symbol registry shared by a synthesis pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List

from .errors import SymbolNotFoundError


@dataclass(frozen=True)
class Symbol:
    """A named integer code usable as a grid cell value."""

    id: int
    name: str


# Reserved codes. They are never inserted into an Alphabet automatically.
EMPTY = Symbol(0, "empty")
WILDCARD = Symbol(-1, "wildcard")


class Alphabet:
    """Mapping from symbol id to :class:`Symbol`.

    The first registration of an id wins; later ``add_symbol`` calls with the
    same id are ignored. Listings are always ordered by ascending id.
    """

    def __init__(self, symbols: Iterable[Symbol] | None = None) -> None:
        self._symbols: Dict[int, Symbol] = {}
        for symbol in symbols or ():
            self.add_symbol(symbol)

    def add_symbol(self, symbol: Symbol) -> bool:
        """Register ``symbol``; return ``False`` if its id was already taken."""

        if symbol.id in self._symbols:
            return False
        self._symbols[symbol.id] = symbol
        return True

    def remove_symbol(self, symbol_id: int) -> None:
        self._symbols.pop(symbol_id, None)

    def has_symbol(self, symbol_id: int) -> bool:
        return symbol_id in self._symbols

    def get_symbol(self, symbol_id: int) -> Symbol:
        try:
            return self._symbols[symbol_id]
        except KeyError:
            raise SymbolNotFoundError(symbol_id) from None

    def list_symbols(self) -> List[Symbol]:
        return [self._symbols[key] for key in sorted(self._symbols)]

    def ids(self) -> List[int]:
        return sorted(self._symbols)

    def clear(self) -> None:
        self._symbols.clear()

    def __len__(self) -> int:
        return len(self._symbols)

    def __contains__(self, symbol_id: object) -> bool:
        return symbol_id in self._symbols

    def __repr__(self) -> str:
        return f"Alphabet({self.list_symbols()!r})"


__all__ = ["Symbol", "Alphabet", "EMPTY", "WILDCARD"]
