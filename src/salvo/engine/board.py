"""Single-player board management for the salvo engine."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from salvo.telemetry import get_tracer, record_engine_metric

from .ship import Coordinate, Orientation, Ship

logger = logging.getLogger(__name__)
tracer = get_tracer("salvo.engine.board")

DEFAULT_BOARD_SIZE = 10
DEFAULT_PLACEMENT_ATTEMPTS = 500


class CellState(Enum):
    """Contents of a single board cell."""

    EMPTY = "empty"
    OCCUPIED = "occupied"
    MISS = "miss"
    HIT = "hit"

    @property
    def attacked(self) -> bool:
        return self in (CellState.MISS, CellState.HIT)


class AttackResult(Enum):
    """What a single attack did."""

    INVALID = "invalid"
    ALREADY_TRIED = "already_tried"
    MISS = "miss"
    HIT = "hit"
    SUNK = "sunk"

    @property
    def is_hit(self) -> bool:
        return self in (AttackResult.HIT, AttackResult.SUNK)


@dataclass(frozen=True)
class AttackOutcome:
    """Result of one attack, self-contained enough for the caller's own view."""

    coordinate: Coordinate
    result: AttackResult
    sunk_ship_name: str | None = None

    @property
    def is_hit(self) -> bool:
        return self.result.is_hit

    @property
    def message(self) -> str:
        if self.result is AttackResult.INVALID:
            return "Out of bounds."
        if self.result is AttackResult.ALREADY_TRIED:
            return "Already attacked."
        if self.result is AttackResult.SUNK:
            return f"Hit and sunk {self.sunk_ship_name}!"
        if self.result is AttackResult.HIT:
            return "Hit!"
        return "Miss!"


class Board:
    """A player's N×N grid and the fleet placed on it."""

    def __init__(self, size: int = DEFAULT_BOARD_SIZE, owner: str = "unknown") -> None:
        if size <= 0:
            raise ValueError("Board size must be greater than zero.")
        self.size = size
        self.owner = owner
        self._cells: list[list[CellState]] = [[CellState.EMPTY] * size for _ in range(size)]
        self._ship_at: dict[Coordinate, Ship] = {}
        self._ships: list[Ship] = []

    @property
    def ships(self) -> tuple[Ship, ...]:
        return tuple(self._ships)

    @property
    def fleet_size(self) -> int:
        return len(self._ships)

    @property
    def sunk_count(self) -> int:
        return sum(1 for ship in self._ships if ship.is_sunk())

    def is_in_bounds(self, coord: Coordinate) -> bool:
        """Check whether a coordinate lies inside the board boundaries."""
        return 0 <= coord.row < self.size and 0 <= coord.col < self.size

    def cell_state(self, coord: Coordinate) -> CellState:
        if not self.is_in_bounds(coord):
            raise ValueError(f"Cell out of bounds ({coord.row},{coord.col}).")
        return self._cells[coord.row][coord.col]

    def ship_at(self, coord: Coordinate) -> Ship | None:
        return self._ship_at.get(coord)

    def is_already_attacked(self, coord: Coordinate) -> bool:
        """Out-of-bounds cells count as attacked: nobody may fire there."""
        if not self.is_in_bounds(coord):
            return True
        return self._cells[coord.row][coord.col].attacked

    def coordinates(self) -> Iterable[Coordinate]:
        """Every cell on the board in row-major order."""
        for row in range(self.size):
            for col in range(self.size):
                yield Coordinate(row, col)

    def unattacked_coordinates(self) -> list[Coordinate]:
        return [coord for coord in self.coordinates() if not self.is_already_attacked(coord)]

    def can_place_ship(self, ship: Ship, origin: Coordinate, orientation: Orientation) -> bool:
        """Determine whether a ship fits at ``origin`` without breaking a rule."""
        if ship.placed:
            return False
        for coord in orientation.span(origin, ship.length):
            if not self.is_in_bounds(coord):
                return False
            if self._cells[coord.row][coord.col] is not CellState.EMPTY:
                return False
        return True

    def place_ship(self, ship: Ship, origin: Coordinate, orientation: Orientation) -> bool:
        """Place ``ship`` if legal. Nothing changes when it is not."""
        with tracer.start_as_current_span("board.place_ship") as span:
            span.set_attribute("ship.name", ship.name)
            span.set_attribute("ship.length", ship.length)
            span.set_attribute("ship.origin.row", origin.row)
            span.set_attribute("ship.origin.col", origin.col)
            span.set_attribute("board.owner", self.owner)
            details = {
                "owner": self.owner,
                "ship_name": ship.name,
                "orientation": orientation.value,
                "row": origin.row,
                "col": origin.col,
            }
            if not self.can_place_ship(ship, origin, orientation):
                span.set_attribute("placement.accepted", False)
                record_engine_metric(
                    "salvo_engine_ship_placements", 1, {"result": "rejected", "owner": self.owner}
                )
                logger.debug("ship_placement_rejected", extra=details)
                return False

            coords = orientation.span(origin, ship.length)
            ship.assign_positions(coords)
            for coord in coords:
                self._cells[coord.row][coord.col] = CellState.OCCUPIED
                self._ship_at[coord] = ship
            self._ships.append(ship)

            span.set_attribute("placement.accepted", True)
            record_engine_metric(
                "salvo_engine_ship_placements", 1, {"result": "placed", "owner": self.owner}
            )
            logger.info("ship_placed", extra=details)
            return True

    def place_fleet_randomly(
        self,
        ships: Iterable[Ship],
        rng: random.Random,
        *,
        allow_vertical: bool = True,
        max_attempts: int = DEFAULT_PLACEMENT_ATTEMPTS,
    ) -> None:
        """Drop each ship at a random legal spot, in order.

        Raises ``RuntimeError`` if a ship still has no spot after
        ``max_attempts`` random draws.
        """
        with tracer.start_as_current_span("board.place_fleet_randomly") as span:
            span.set_attribute("board.owner", self.owner)
            orientations = list(Orientation) if allow_vertical else [Orientation.HORIZONTAL]
            for ship in ships:
                placed = False
                attempts = 0
                while not placed and attempts < max_attempts:
                    origin = Coordinate(rng.randrange(self.size), rng.randrange(self.size))
                    orientation = rng.choice(orientations)
                    placed = self.place_ship(ship, origin, orientation)
                    attempts += 1
                if not placed:
                    logger.error(
                        "random_placement_exhausted",
                        extra={"owner": self.owner, "ship_name": ship.name, "attempts": attempts},
                    )
                    raise RuntimeError(f"Could not place ship: {ship.name}")
                logger.debug(
                    "random_ship_placed",
                    extra={"owner": self.owner, "ship_name": ship.name, "attempts": attempts},
                )
            span.set_attribute("fleet.size", self.fleet_size)

    def attack(self, coord: Coordinate) -> AttackOutcome:
        """Resolve a shot at ``coord``. Repeats and strays are reported, not raised."""
        with tracer.start_as_current_span("board.attack") as span:
            span.set_attribute("shot.row", coord.row)
            span.set_attribute("shot.col", coord.col)
            span.set_attribute("board.owner", self.owner)
            outcome = self._resolve_attack(coord)
            span.set_attribute("shot.result", outcome.result.value)
            record_engine_metric(
                "salvo_engine_attacks", 1, {"result": outcome.result.value, "owner": self.owner}
            )
            level = logging.INFO if outcome.is_hit else logging.DEBUG
            logger.log(
                level,
                "attack_resolved",
                extra={
                    "owner": self.owner,
                    "row": coord.row,
                    "col": coord.col,
                    "result": outcome.result.value,
                    "sunk_ship_name": outcome.sunk_ship_name,
                },
            )
            return outcome

    def _resolve_attack(self, coord: Coordinate) -> AttackOutcome:
        if not self.is_in_bounds(coord):
            return AttackOutcome(coord, AttackResult.INVALID)

        state = self._cells[coord.row][coord.col]
        if state.attacked:
            return AttackOutcome(coord, AttackResult.ALREADY_TRIED)

        if state is CellState.OCCUPIED:
            self._cells[coord.row][coord.col] = CellState.HIT
            ship = self._ship_at[coord]
            ship.register_hit(coord)
            if ship.is_sunk():
                return AttackOutcome(coord, AttackResult.SUNK, ship.name)
            return AttackOutcome(coord, AttackResult.HIT)

        self._cells[coord.row][coord.col] = CellState.MISS
        return AttackOutcome(coord, AttackResult.MISS)

    def all_ships_sunk(self) -> bool:
        """True once the board has a fleet and every ship in it is sunk."""
        return bool(self._ships) and all(ship.is_sunk() for ship in self._ships)
