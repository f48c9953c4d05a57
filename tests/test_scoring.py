"""
Unit tests for the ScoreAccumulator and ScoreRecord.
"""

import pytest
from pydantic import ValidationError

from engine.scoring import ScoreAccumulator, percentage, whole_metres
from models.round import Outcome, PromptCategory
from models.schemas import ScoreRecord


class TestPercentage:
    """Tests for whole-percentage rounding."""

    @pytest.mark.parametrize("correct,attempts,expected", [
        (0, 0, 0),
        (0, 5, 0),
        (5, 5, 100),
        (1, 3, 33),
        (2, 3, 67),
        (1, 2, 50),
        (1, 8, 13),
    ])
    def test_rounding(self, correct, attempts, expected):
        assert percentage(correct, attempts) == expected


class TestWholeMetres:
    """Tests for distance rounding shared by the HUD and the record."""

    @pytest.mark.parametrize("distance,expected", [
        (0.0, 0),
        (10.4, 10),
        (10.5, 11),
        (10.6, 11),
        (-3.0, 0),
    ])
    def test_rounding(self, distance, expected):
        assert whole_metres(distance) == expected


class TestScoreAccumulator:
    """Tests for counting attempts and finalizing."""

    def setup_method(self):
        self.score = ScoreAccumulator()

    def test_no_attempts_finalizes_to_zero(self):
        record = self.score.finalize()

        assert record.rhyme_accuracy_score == 0
        assert record.beat_sync_accuracy == 0
        assert record.creativity_score == 0
        assert record.best_combo == 0
        assert record.mean_response_ms is None

    def test_eight_perfect_of_ten_is_80_beat_sync(self):
        for _ in range(8):
            self.score.record_attempt(Outcome.PERFECT)
        for _ in range(2):
            self.score.record_attempt(Outcome.MISS)

        assert self.score.finalize().beat_sync_accuracy == 80

    def test_good_counts_as_correct_but_not_beat_sync(self):
        self.score.record_attempt(Outcome.GOOD, category=PromptCategory.RHYME)

        record = self.score.finalize()

        assert record.rhyme_accuracy_score == 100
        assert record.beat_sync_accuracy == 0

    def test_category_percentages(self):
        for outcome in (Outcome.PERFECT, Outcome.GOOD, Outcome.MISS):
            self.score.record_attempt(outcome, category=PromptCategory.RHYME)
        for outcome in (Outcome.GOOD, Outcome.MISS, Outcome.MISS, Outcome.GOOD):
            self.score.record_attempt(outcome, category=PromptCategory.CREATIVITY)
        self.score.record_attempt(Outcome.PERFECT)

        record = self.score.finalize()

        assert record.rhyme_accuracy_score == 67
        assert record.creativity_score == 50
        assert record.beat_sync_accuracy == 25
        assert record.total_attempts == 8

    def test_best_combo_keeps_maximum(self):
        for combo in (1, 2, 3, 0, 1):
            self.score.observe_combo(combo)

        assert self.score.finalize().best_combo == 3

    def test_collisions_counted_separately(self):
        self.score.record_collision()
        self.score.record_collision()

        record = self.score.finalize()

        assert record.collisions == 2
        assert record.total_attempts == 0

    def test_distance_rounded_to_whole_metres(self):
        assert self.score.finalize(distance_m=123.6).distance_m == 124

    def test_finalize_is_idempotent(self):
        first = self.score.finalize(10)
        second = self.score.finalize(99)

        assert first is second
        assert second.distance_m == 10

    def test_no_attempts_after_finalize(self):
        self.score.finalize()

        with pytest.raises(RuntimeError):
            self.score.record_attempt(Outcome.GOOD)
        with pytest.raises(RuntimeError):
            self.score.record_collision()


class TestScoreRecord:
    """Tests for the immutable record."""

    def test_record_is_frozen(self):
        record = ScoreRecord(beat_sync_accuracy=50)

        with pytest.raises(ValidationError):
            record.beat_sync_accuracy = 60

    def test_percentages_bounded(self):
        with pytest.raises(ValidationError):
            ScoreRecord(rhyme_accuracy_score=101)

    def test_overall_score_is_rounded_mean(self):
        record = ScoreRecord(rhyme_accuracy_score=83, beat_sync_accuracy=80, creativity_score=75)

        assert record.overall_score == 79
