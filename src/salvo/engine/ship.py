"""Ship domain model for the salvo engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable


@dataclass(frozen=True, order=True)
class Coordinate:
    """Immutable board coordinate."""

    row: int
    col: int

    @property
    def parity(self) -> int:
        """Checkerboard colour of the cell, 0 or 1."""
        return (self.row + self.col) % 2

    def neighbours(self) -> tuple[Coordinate, ...]:
        """Axis neighbours in up, down, left, right order (unbounded)."""
        return (
            Coordinate(self.row - 1, self.col),
            Coordinate(self.row + 1, self.col),
            Coordinate(self.row, self.col - 1),
            Coordinate(self.row, self.col + 1),
        )

    def label(self) -> str:
        """Human-facing label such as ``A1`` for (0, 0)."""
        return f"{chr(ord('A') + self.row)}{self.col + 1}"


class Orientation(Enum):
    """Allowed ship orientations."""

    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"

    def span(self, origin: Coordinate, length: int) -> tuple[Coordinate, ...]:
        """Cells covered by a ship of ``length`` starting at ``origin``."""
        if self is Orientation.HORIZONTAL:
            return tuple(Coordinate(origin.row, origin.col + offset) for offset in range(length))
        return tuple(Coordinate(origin.row + offset, origin.col) for offset in range(length))


class ShipType(Enum):
    """Ship classes of the standard fleet and their lengths."""

    CARRIER = ("Aircraft Carrier", 5)
    BATTLESHIP = ("Battleship", 4)
    CRUISER = ("Cruiser", 3)
    SUBMARINE = ("Submarine", 3)
    DESTROYER = ("Destroyer", 2)

    @property
    def display_name(self) -> str:
        return self.value[0]

    @property
    def length(self) -> int:
        """Return the number of contiguous cells the ship occupies."""
        return self.value[1]


@dataclass(eq=False)
class Ship:
    """A single vessel: its footprint once placed and the hits it has taken.

    Ships are passive records. The board that places a ship assigns its
    coordinates exactly once and reports hits to it; nothing else mutates it.
    """

    name: str
    length: int
    _positions: tuple[Coordinate, ...] = field(default=(), init=False, repr=False)
    _position_set: frozenset[Coordinate] = field(default=frozenset(), init=False, repr=False)
    _hits: set[Coordinate] = field(default_factory=set, init=False, repr=False)

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("Ship name must not be blank.")
        if self.length <= 0:
            raise ValueError(f"Ship length must be positive, got {self.length} for {self.name!r}.")

    @classmethod
    def of_type(cls, ship_type: ShipType) -> Ship:
        return cls(ship_type.display_name, ship_type.length)

    @property
    def placed(self) -> bool:
        return bool(self._positions)

    @property
    def hits(self) -> int:
        """Number of distinct occupied cells that have been hit."""
        return len(self._hits)

    def coordinates(self) -> list[Coordinate]:
        """Return the ordered list of coordinates occupied by this ship."""
        return list(self._positions)

    def occupies(self, coord: Coordinate) -> bool:
        return coord in self._position_set

    def is_sunk(self) -> bool:
        return self.hits == self.length

    def register_hit(self, coord: Coordinate) -> bool:
        """Count a hit at ``coord``; returns False when nothing changed."""
        if coord not in self._position_set or coord in self._hits:
            return False
        if len(self._hits) >= self.length:
            return False
        self._hits.add(coord)
        return True

    def assign_positions(self, coords: Iterable[Coordinate]) -> None:
        """Record the ship's footprint. Called by the board on placement."""
        positions = tuple(coords)
        if self.placed:
            raise RuntimeError(f"Ship {self.name!r} has already been placed.")
        if len(positions) != self.length or len(set(positions)) != self.length:
            raise ValueError(
                f"Ship {self.name!r} needs {self.length} distinct cells, got {len(positions)}."
            )
        if not _is_straight_run(positions):
            raise ValueError(f"Ship {self.name!r} must occupy one unbroken row or column.")
        self._positions = positions
        self._position_set = frozenset(positions)


def _is_straight_run(positions: tuple[Coordinate, ...]) -> bool:
    rows = sorted(coord.row for coord in positions)
    cols = sorted(coord.col for coord in positions)
    if len(set(rows)) == 1:
        return cols == list(range(cols[0], cols[0] + len(cols)))
    if len(set(cols)) == 1:
        return rows == list(range(rows[0], rows[0] + len(rows)))
    return False
