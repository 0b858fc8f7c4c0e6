"""Weighted-stage progress reporting.

Each stage of a run declares a relative weight. Overall progress is the
weight of the completed stages plus the current stage's weight scaled by
its own completion fraction, expressed as a percentage that never moves
backwards.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class StageWeight:
    """A named pipeline stage and its share of the whole run."""

    name: str
    weight: float


class WeightedProgress:
    """Converts (stage index, intra-stage fraction) into an overall percentage.

    Args:
        stages: Stages in execution order.
        start: Floor for the reported percentage, used when a run switches
            to a new stage plan midway.
    """

    def __init__(self, stages: list[StageWeight], start: int = 0) -> None:
        if not stages:
            raise ValueError("at least one stage is required")
        if any(stage.weight <= 0 for stage in stages):
            raise ValueError("stage weights must be positive")
        self.stages = list(stages)
        self._total = sum(stage.weight for stage in stages)
        self._offsets: list[float] = []
        running = 0.0
        for stage in stages:
            self._offsets.append(running)
            running += stage.weight
        self._last = min(max(start, 0), 100)

    @property
    def current(self) -> int:
        return self._last

    def index_of(self, name: str) -> int:
        for index, stage in enumerate(self.stages):
            if stage.name == name:
                return index
        raise KeyError(name)

    def percent(self, index: int, fraction: float = 0.0) -> int:
        """Overall percentage for a point inside stage ``index``.

        Args:
            index: Position of the stage in execution order.
            fraction: Completion of that stage in ``[0, 1]``; clamped.

        Returns:
            Integer percentage in ``[0, 100]``, never lower than any value
            previously returned.
        """
        if not 0 <= index < len(self.stages):
            raise IndexError(f"stage index {index} out of range")
        fraction = min(max(fraction, 0.0), 1.0)
        done = self._offsets[index] + self.stages[index].weight * fraction
        value = min(100, max(0, round(100 * done / self._total)))
        self._last = max(self._last, value)
        return self._last

    def complete(self) -> int:
        self._last = 100
        return 100
