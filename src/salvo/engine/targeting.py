"""Computer-opponent shot selection.

``TargetingStrategy`` hunts with a parity-ordered scan and, once it draws
blood, finishes the ship off from a follow-up queue built around the hits
that have not yet produced a sinking. It never sees the opposing board;
everything it knows comes from the outcomes fed back to it.

Active hits from different ships are merged into one orientation guess.
When two damaged ships are being chased at once this can waste shots on
an impossible line before the neighbour fallback takes over.
"""

from __future__ import annotations

import logging
import random
from collections import deque

from salvo.telemetry import get_tracer, record_engine_metric

from .board import AttackResult
from .ship import Coordinate

logger = logging.getLogger(__name__)
tracer = get_tracer("salvo.engine.targeting")


class ShotsExhaustedError(RuntimeError):
    """Every coordinate on the board has already been fired at."""


def _validate(size: int, rng: random.Random | None) -> random.Random:
    if size <= 0:
        raise ValueError("Board size must be greater than zero.")
    if rng is None:
        raise ValueError("An explicit random.Random instance is required.")
    return rng


class TargetingStrategy:
    """Hunt-and-finish targeting over a ``size`` × ``size`` board."""

    def __init__(self, size: int, rng: random.Random) -> None:
        self._rng = _validate(size, rng)
        self.size = size

        even: list[Coordinate] = []
        odd: list[Coordinate] = []
        for row in range(size):
            for col in range(size):
                coord = Coordinate(row, col)
                (even if coord.parity == 0 else odd).append(coord)
        self._rng.shuffle(even)
        self._rng.shuffle(odd)

        self._scan_order: deque[Coordinate] = deque(even + odd)
        self._follow_ups: dict[Coordinate, None] = {}
        self._attempted: set[Coordinate] = set()
        self._active_hits: list[Coordinate] = []

    @property
    def pending_target_count(self) -> int:
        return len(self._follow_ups)

    @property
    def attempted_count(self) -> int:
        return len(self._attempted)

    @property
    def remaining_shots(self) -> int:
        return self.size * self.size - len(self._attempted)

    @property
    def is_targeting(self) -> bool:
        """True while a damaged ship is being pursued from the follow-up queue."""
        return bool(self._follow_ups)

    @property
    def pending_targets(self) -> tuple[Coordinate, ...]:
        """Queued follow-up shots, in the order they will be fired."""
        return tuple(self._follow_ups)

    @property
    def active_hits(self) -> tuple[Coordinate, ...]:
        return tuple(self._active_hits)

    def has_attempted(self, coord: Coordinate) -> bool:
        return coord in self._attempted

    def next_shot(self) -> Coordinate:
        """Pick the next coordinate to fire at and mark it attempted.

        Raises ``ShotsExhaustedError`` once every cell has been tried.
        """
        while self._follow_ups:
            candidate = next(iter(self._follow_ups))
            del self._follow_ups[candidate]
            if candidate not in self._attempted:
                return self._claim(candidate, "target")

        while self._scan_order:
            candidate = self._scan_order.popleft()
            if candidate not in self._attempted:
                return self._claim(candidate, "search")

        logger.info("targeting_exhausted", extra={"attempted": len(self._attempted)})
        raise ShotsExhaustedError("No remaining shots.")

    def record_outcome(self, coord: Coordinate, result: AttackResult) -> None:
        """Feed back what happened at ``coord``."""
        with tracer.start_as_current_span("targeting.record_outcome") as span:
            span.set_attribute("shot.row", coord.row)
            span.set_attribute("shot.col", coord.col)
            span.set_attribute("shot.result", result.value)

            if not self._in_bounds(coord):
                logger.debug(
                    "targeting_outcome_ignored",
                    extra={"row": coord.row, "col": coord.col, "result": result.value},
                )
                return

            self._attempted.add(coord)

            if result is AttackResult.SUNK:
                self._active_hits.clear()
                self._follow_ups.clear()
            elif result is AttackResult.HIT:
                if coord not in self._active_hits:
                    self._active_hits.append(coord)
                self._rebuild_follow_ups()

            span.set_attribute("targeting.pending", len(self._follow_ups))
            logger.debug(
                "targeting_outcome_recorded",
                extra={
                    "row": coord.row,
                    "col": coord.col,
                    "result": result.value,
                    "active_hits": len(self._active_hits),
                    "pending": len(self._follow_ups),
                },
            )

    def _claim(self, coord: Coordinate, mode: str) -> Coordinate:
        self._attempted.add(coord)
        record_engine_metric("salvo_engine_targeting_shots", 1, {"mode": mode})
        return coord

    def _rebuild_follow_ups(self) -> None:
        self._follow_ups.clear()
        hits = self._active_hits
        if not hits:
            return

        if len(hits) == 1:
            self._enqueue_neighbours(hits[0])
            return

        first = hits[0]
        if all(hit.row == first.row for hit in hits):
            cols = [hit.col for hit in hits]
            self._enqueue(Coordinate(first.row, min(cols) - 1))
            self._enqueue(Coordinate(first.row, max(cols) + 1))
        elif all(hit.col == first.col for hit in hits):
            rows = [hit.row for hit in hits]
            self._enqueue(Coordinate(min(rows) - 1, first.col))
            self._enqueue(Coordinate(max(rows) + 1, first.col))
        else:
            for hit in hits:
                self._enqueue_neighbours(hit)

        # Both ends boxed in: widen the search around every hit.
        if not self._follow_ups:
            for hit in hits:
                self._enqueue_neighbours(hit)

    def _enqueue_neighbours(self, coord: Coordinate) -> None:
        for neighbour in coord.neighbours():
            self._enqueue(neighbour)

    def _enqueue(self, coord: Coordinate) -> None:
        if not self._in_bounds(coord):
            return
        if coord in self._attempted or coord in self._follow_ups:
            return
        self._follow_ups[coord] = None

    def _in_bounds(self, coord: Coordinate) -> bool:
        return 0 <= coord.row < self.size and 0 <= coord.col < self.size


class RandomTargeting:
    """Fires at every cell once in a shuffled order, ignoring feedback."""

    def __init__(self, size: int, rng: random.Random) -> None:
        rng = _validate(size, rng)
        self.size = size
        order = [Coordinate(row, col) for row in range(size) for col in range(size)]
        rng.shuffle(order)
        self._order: deque[Coordinate] = deque(order)
        self._attempted: set[Coordinate] = set()

    @property
    def remaining_shots(self) -> int:
        return self.size * self.size - len(self._attempted)

    def next_shot(self) -> Coordinate:
        while self._order:
            candidate = self._order.popleft()
            if candidate not in self._attempted:
                self._attempted.add(candidate)
                record_engine_metric("salvo_engine_targeting_shots", 1, {"mode": "random"})
                return candidate
        raise ShotsExhaustedError("No remaining shots.")

    def record_outcome(self, coord: Coordinate, result: AttackResult) -> None:
        if 0 <= coord.row < self.size and 0 <= coord.col < self.size:
            self._attempted.add(coord)
