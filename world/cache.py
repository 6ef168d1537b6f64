from __future__ import annotations

"""
Coin ledger held by a single cache, plus its text encoding.

The encoding is a JSON object::

    {"i": 3, "j": -2, "coins": [{"i": 3, "j": -2, "serial": 0}, ...]}

Unknown fields are ignored and a missing ``coins`` field means an empty
ledger, so older and newer saves stay readable.
"""

import json
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Deque, Dict, Iterator, List, Tuple

from .cell import Cell, Coin, Coordinate
from .generation import generate_coins, initial_coin_count


class EmptyLedger(Exception):
    """Raised when collecting from a cache that holds no coins."""


class CorruptState(ValueError):
    """Raised when persisted data cannot be decoded."""


def is_index(value: Any) -> bool:
    """True for a JSON integer; bool is an int subclass but never a grid index."""
    return isinstance(value, int) and not isinstance(value, bool)


def coin_from_json(data: Any) -> Coin:
    """Decode a single coin record, raising ``CorruptState`` if it is malformed."""
    if not isinstance(data, dict):
        raise CorruptState(f"Coin record is not an object: {data!r}")
    try:
        values = [data[name] for name in ("i", "j", "serial")]
    except KeyError as e:
        raise CorruptState(f"Coin record missing field {e}: {data!r}") from e
    if not all(is_index(v) for v in values):
        raise CorruptState(f"Coin record has non-integer fields: {data!r}")
    i, j, serial = values
    if serial < 0:
        raise CorruptState(f"Coin record has a negative serial: {data!r}")
    return Coin(i, j, serial)


@dataclass
class CacheMemento:
    """Plain snapshot of a ledger as it is written to storage."""

    i: int
    j: int
    coins: List[Coin] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "i": self.i,
            "j": self.j,
            "coins": [coin.to_json() for coin in self.coins],
        }

    @classmethod
    def from_dict(cls, data: Any, *, i: int = 0, j: int = 0) -> "CacheMemento":
        """
        Build a memento from decoded JSON.

        ``i``/``j`` are used when the record predates the coordinate fields.

        Raises:
            CorruptState: if the record or any coin inside it is malformed.
        """
        if not isinstance(data, dict):
            raise CorruptState(f"Cache record is not an object: {data!r}")
        raw_coins = data.get("coins", [])
        if not isinstance(raw_coins, list):
            raise CorruptState(f"'coins' is not a list: {raw_coins!r}")
        ci = data.get("i", i)
        cj = data.get("j", j)
        if not (is_index(ci) and is_index(cj)):
            raise CorruptState(f"Cache record has invalid coordinates: {ci!r},{cj!r}")
        return cls(i=ci, j=cj, coins=[coin_from_json(c) for c in raw_coins])


class Cache:
    """
    A cache bound to one grid cell, holding coins in collection order.

    The front of the ledger is the next coin to be collected; deposits go to
    the back.
    """

    __slots__ = ("cell", "_coins")

    def __init__(self, cell: Cell, coins: Tuple[Coin, ...] | List[Coin] = ()) -> None:
        self.cell = cell
        self._coins: Deque[Coin] = deque(coins)

    @classmethod
    def spawn(cls, cell: Cell, max_initial_coins: int) -> "Cache":
        """Create the cache for ``cell`` with its deterministically generated coins."""
        count = initial_coin_count(cell.i, cell.j, max_initial_coins)
        return cls(cell, generate_coins(cell.i, cell.j, count))

    @property
    def key(self) -> Coordinate:
        return self.cell.key

    @property
    def coins(self) -> Tuple[Coin, ...]:
        """Snapshot of the ledger, front first."""
        return tuple(self._coins)

    def __len__(self) -> int:
        return len(self._coins)

    def __iter__(self) -> Iterator[Coin]:
        return iter(tuple(self._coins))

    def __repr__(self) -> str:
        return f"Cache(cell={self.cell}, coins={len(self._coins)})"

    # ─────────────────────────────────────────────────────────────────────
    # == LEDGER OPERATIONS ==

    def collect_one(self) -> Coin:
        """
        Remove and return the foremost coin.

        Raises:
            EmptyLedger: if the cache holds no coins. The ledger is unchanged.
        """
        if not self._coins:
            raise EmptyLedger(f"Cache {self.cell} has no coins to collect")
        return self._coins.popleft()

    def deposit_one(self, coin: Coin) -> None:
        """Append ``coin`` to the ledger, whatever its home cell."""
        self._coins.append(coin)

    # ─────────────────────────────────────────────────────────────────────
    # == MEMENTO ==

    def to_memento(self) -> CacheMemento:
        return CacheMemento(i=self.cell.i, j=self.cell.j, coins=list(self._coins))

    def serialize(self) -> str:
        return json.dumps(self.to_memento().to_dict(), separators=(",", ":"))

    def restore(self, text: str) -> None:
        """
        Replace the ledger with the coins encoded in ``text``.

        Raises:
            CorruptState: if ``text`` cannot be decoded. The ledger is left
                untouched in that case.
        """
        try:
            data = json.loads(text)
        except (TypeError, ValueError) as e:
            raise CorruptState(f"Ledger for {self.cell} is not valid JSON: {e}") from e
        memento = CacheMemento.from_dict(data, i=self.cell.i, j=self.cell.j)
        self._coins = deque(memento.coins)


__all__ = ["Cache", "CacheMemento", "CorruptState", "EmptyLedger", "coin_from_json", "is_index"]
