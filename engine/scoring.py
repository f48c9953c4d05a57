"""
Score Accumulator - Per-round answer statistics and the final record.

Counters only ever grow during a round. finalize() turns them into an
immutable ScoreRecord exactly once.
"""

import math
from dataclasses import dataclass, field
from typing import Optional

from models.round import Outcome, PromptCategory
from models.schemas import ScoreRecord


def percentage(correct: int, attempts: int) -> int:
    """correct/attempts as a whole percentage, rounded half up; 0 if no attempts."""
    if attempts <= 0:
        return 0
    return int(math.floor(correct / attempts * 100 + 0.5))


def whole_metres(distance: float) -> int:
    """Distance in whole metres, rounded half up; never negative."""
    return int(math.floor(max(0.0, distance) + 0.5))


@dataclass
class CategoryTally:
    """Attempts and correct answers for one scoring category."""
    attempts: int = 0
    correct: int = 0

    @property
    def accuracy(self) -> int:
        return percentage(self.correct, self.attempts)


@dataclass
class ScoreAccumulator:
    """
    Running score for one round.

    Attributes:
        attempts: Every evaluated tap
        correct: PERFECT and GOOD outcomes
        perfect_hits: PERFECT outcomes (beat sync)
        rhyme / creativity: Category tallies for tagged prompts
        best_combo: Highest combo reached
        collisions: Obstacle bumps (not answer attempts)
    """
    attempts: int = 0
    correct: int = 0
    perfect_hits: int = 0
    rhyme: CategoryTally = field(default_factory=CategoryTally)
    creativity: CategoryTally = field(default_factory=CategoryTally)
    best_combo: int = 0
    collisions: int = 0
    response_times_ms: list[float] = field(default_factory=list)
    _record: Optional[ScoreRecord] = field(default=None, repr=False)

    @property
    def is_finalized(self) -> bool:
        return self._record is not None

    def _tally_for(self, category: Optional[PromptCategory]) -> Optional[CategoryTally]:
        if category is PromptCategory.RHYME:
            return self.rhyme
        if category is PromptCategory.CREATIVITY:
            return self.creativity
        return None

    def record_attempt(self, outcome: Outcome,
                       category: Optional[PromptCategory] = None,
                       response_ms: Optional[float] = None) -> None:
        """Count one evaluated tap."""
        if self.is_finalized:
            raise RuntimeError("Cannot record attempts after the score is finalized")

        self.attempts += 1
        if outcome.is_success:
            self.correct += 1
        if outcome is Outcome.PERFECT:
            self.perfect_hits += 1

        tally = self._tally_for(category)
        if tally is not None:
            tally.attempts += 1
            if outcome.is_success:
                tally.correct += 1

        if response_ms is not None:
            self.response_times_ms.append(max(0.0, float(response_ms)))

    def record_collision(self) -> None:
        if self.is_finalized:
            raise RuntimeError("Cannot record collisions after the score is finalized")
        self.collisions += 1

    def observe_combo(self, combo_count: int) -> None:
        self.best_combo = max(self.best_combo, combo_count)

    @property
    def beat_sync_accuracy(self) -> int:
        return percentage(self.perfect_hits, self.attempts)

    @property
    def mean_response_ms(self) -> Optional[float]:
        if not self.response_times_ms:
            return None
        return sum(self.response_times_ms) / len(self.response_times_ms)

    def finalize(self, distance_m: float = 0.0) -> ScoreRecord:
        """
        Compute the final ScoreRecord.

        Later calls return the same record unchanged.
        """
        if self._record is None:
            self._record = ScoreRecord(
                rhyme_accuracy_score=self.rhyme.accuracy,
                beat_sync_accuracy=self.beat_sync_accuracy,
                creativity_score=self.creativity.accuracy,
                best_combo=self.best_combo,
                distance_m=whole_metres(distance_m),
                total_attempts=self.attempts,
                collisions=self.collisions,
                mean_response_ms=self.mean_response_ms,
            )
        return self._record
