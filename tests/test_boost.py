"""
Unit tests for the ComboBoost state machine.
"""

import pytest

from config import ComboSettings
from engine.boost import ComboBoost
from models.entities import PlayerState


class TestComboBoost:
    """Tests for tier progression, breaks and boost lapse."""

    def setup_method(self):
        self.boost = ComboBoost()
        self.player = PlayerState(speed_min=140, speed_max=520, speed=140)

    def succeed(self, times, now_ms=0):
        return [self.boost.record_success(self.player, now_ms) for _ in range(times)]

    def test_four_successes_stay_at_tier_zero(self):
        events = self.succeed(4)

        assert self.player.combo_count == 4
        assert self.player.boost_tier == 0
        assert events == [None] * 4

    def test_fifth_success_enters_tier_one(self):
        events = self.succeed(5, now_ms=1000)

        assert self.player.boost_tier == 1
        assert self.player.boost_active
        assert events[-1].tier == 1
        assert events[-1].active_until_ms == 4000
        assert events[:-1] == [None] * 4

    def test_tenth_success_enters_tier_two(self):
        events = self.succeed(10)

        assert self.player.boost_tier == 2
        assert [e.tier for e in events if e is not None] == [1, 2]

    def test_tier_two_is_the_ceiling(self):
        events = self.succeed(20)

        assert self.player.boost_tier == 2
        assert self.player.combo_count == 20
        assert len([e for e in events if e is not None]) == 2

    def test_break_resets_combo_and_tier(self):
        self.succeed(7)

        assert self.boost.record_break(self.player)
        assert self.player.combo_count == 0
        assert self.player.boost_tier == 0
        assert not self.player.boost_active

    def test_break_without_streak(self):
        assert not self.boost.record_break(self.player)

    def test_boost_lapses_but_tier_remains(self):
        self.succeed(5, now_ms=0)

        assert not self.boost.update(self.player, now_ms=2999)
        assert self.boost.update(self.player, now_ms=3000)
        assert not self.player.boost_active
        assert self.player.boost_tier == 1
        assert not self.boost.update(self.player, now_ms=4000)

    def test_combo_rebuilds_after_break(self):
        self.succeed(5)
        self.boost.record_break(self.player)

        events = self.succeed(5)

        assert self.player.boost_tier == 1
        assert events[-1].tier == 1

    def test_invalid_thresholds_rejected(self):
        with pytest.raises(ValueError):
            ComboBoost(ComboSettings(tier_thresholds=(10, 5)))
        with pytest.raises(ValueError):
            ComboBoost(ComboSettings(tier_thresholds=(5,)))
