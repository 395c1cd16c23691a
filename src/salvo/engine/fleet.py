"""Fleet and game-setup configuration."""

from __future__ import annotations

import random

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .board import DEFAULT_BOARD_SIZE, Board
from .opponent import ComputerOpponent, Difficulty
from .ship import Ship, ShipType


class ShipSpec(BaseModel):
    """Name and length of one ship class in a fleet."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    length: int = Field(gt=0)

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("ship name must not be blank")
        return value

    def build(self) -> Ship:
        return Ship(self.name, self.length)


class FleetSpec(BaseModel):
    """Ordered list of ships each player deploys."""

    model_config = ConfigDict(frozen=True)

    ships: tuple[ShipSpec, ...] = Field(min_length=1)

    @field_validator("ships")
    @classmethod
    def _unique_names(cls, ships: tuple[ShipSpec, ...]) -> tuple[ShipSpec, ...]:
        seen: set[str] = set()
        for spec in ships:
            key = spec.name.casefold()
            if key in seen:
                raise ValueError(f"duplicate ship name: {spec.name}")
            seen.add(key)
        return ships

    @classmethod
    def standard(cls) -> FleetSpec:
        return cls(
            ships=tuple(ShipSpec(name=t.display_name, length=t.length) for t in ShipType)
        )

    @classmethod
    def from_pairs(cls, pairs: list[tuple[str, int]]) -> FleetSpec:
        return cls(ships=tuple(ShipSpec(name=name, length=length) for name, length in pairs))

    @property
    def total_cells(self) -> int:
        return sum(spec.length for spec in self.ships)

    def build(self) -> list[Ship]:
        """Fresh, unplaced ships for one board."""
        return [spec.build() for spec in self.ships]


class GameSettings(BaseModel):
    """Board size, fleet and computer difficulty for one match."""

    model_config = ConfigDict(frozen=True)

    board_size: int = Field(default=DEFAULT_BOARD_SIZE, gt=0)
    fleet: FleetSpec = Field(default_factory=FleetSpec.standard)
    difficulty: Difficulty = Difficulty.STANDARD

    @model_validator(mode="after")
    def _fleet_fits(self) -> GameSettings:
        for spec in self.fleet.ships:
            if spec.length > self.board_size:
                raise ValueError(
                    f"{spec.name} (length {spec.length}) does not fit a "
                    f"{self.board_size}x{self.board_size} board"
                )
        if self.fleet.total_cells > self.board_size * self.board_size:
            raise ValueError("fleet occupies more cells than the board has")
        return self

    def new_board(self, rng: random.Random, owner: str = "unknown") -> Board:
        """A board with this fleet deployed at random."""
        board = Board(self.board_size, owner=owner)
        board.place_fleet_randomly(self.fleet.build(), rng)
        return board

    def new_opponent(self, rng: random.Random) -> ComputerOpponent:
        return ComputerOpponent(self.board_size, rng, self.difficulty)
