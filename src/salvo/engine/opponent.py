"""Computer opponent: a targeting strategy plus its per-volley shot allowance."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from salvo.telemetry import get_tracer

from .board import AttackOutcome, AttackResult, Board
from .ship import Coordinate
from .targeting import RandomTargeting, ShotsExhaustedError, TargetingStrategy

logger = logging.getLogger(__name__)
tracer = get_tracer("salvo.engine.opponent")


class ShotSelector(Protocol):
    def next_shot(self) -> Coordinate: ...

    def record_outcome(self, coord: Coordinate, result: AttackResult) -> None: ...


class Difficulty(Enum):
    """Computer opponent strength."""

    EASY = "easy"
    STANDARD = "standard"
    HARD = "hard"

    @property
    def max_shots_per_volley(self) -> int:
        return 2 if self is Difficulty.HARD else 1

    @property
    def bonus_shot_on_hit(self) -> bool:
        return self is Difficulty.HARD


def create_targeting(difficulty: Difficulty, size: int, rng: random.Random) -> ShotSelector:
    if difficulty is Difficulty.EASY:
        return RandomTargeting(size, rng)
    return TargetingStrategy(size, rng)


@dataclass(frozen=True)
class Volley:
    """Shots fired by the computer in one turn."""

    outcomes: tuple[AttackOutcome, ...]
    exhausted: bool = False

    @property
    def last(self) -> AttackOutcome | None:
        return self.outcomes[-1] if self.outcomes else None


class ComputerOpponent:
    def __init__(
        self, size: int, rng: random.Random, difficulty: Difficulty = Difficulty.STANDARD
    ) -> None:
        self.difficulty = difficulty
        self.targeting = create_targeting(difficulty, size, rng)

    def fire_volley(self, board: Board) -> Volley:
        """Fire this turn's shots at ``board``.

        A hit on HARD earns one follow-up shot. Running out of cells ends the
        volley with ``exhausted`` set rather than raising.
        """
        with tracer.start_as_current_span("opponent.fire_volley") as span:
            span.set_attribute("difficulty", self.difficulty.value)
            outcomes: list[AttackOutcome] = []
            exhausted = False
            for _ in range(self.difficulty.max_shots_per_volley):
                try:
                    target = self.targeting.next_shot()
                except ShotsExhaustedError:
                    exhausted = True
                    break
                outcome = board.attack(target)
                self.targeting.record_outcome(target, outcome.result)
                outcomes.append(outcome)

                if board.all_ships_sunk():
                    break
                if not (self.difficulty.bonus_shot_on_hit and outcome.is_hit):
                    break

            span.set_attribute("volley.shots", len(outcomes))
            span.set_attribute("volley.exhausted", exhausted)
            if exhausted:
                logger.info("opponent_out_of_shots", extra={"difficulty": self.difficulty.value})
            return Volley(tuple(outcomes), exhausted)
