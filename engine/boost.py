"""
Combo/Boost State Machine.

    tier 0 --combo reaches 5--> tier 1 --combo reaches 10--> tier 2
      ^                            |                            |
      +------ miss or collision ---+----------------------------+

Entering a tier opens a timed boost window. When the window lapses the
tier and combo stay until the next miss or collision.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from config import ComboSettings, COMBO_SETTINGS
from models.entities import PlayerState


logger = logging.getLogger(__name__)

MAX_TIER = 2


@dataclass(frozen=True)
class BoostEvent:
    """Fired once when the player enters a higher boost tier."""
    tier: int
    combo_count: int
    active_until_ms: float


class ComboBoost:
    """Tracks the combo streak and boost tier on a PlayerState."""

    def __init__(self, settings: ComboSettings = COMBO_SETTINGS):
        thresholds = tuple(settings.tier_thresholds)
        if len(thresholds) != MAX_TIER:
            raise ValueError(f"Expected {MAX_TIER} tier thresholds, got {len(thresholds)}")
        if any(t <= 0 for t in thresholds) or list(thresholds) != sorted(set(thresholds)):
            raise ValueError("Tier thresholds must be positive and strictly increasing")

        self.thresholds = thresholds
        self.active_ms = settings.boost_active_ms
        self._active_until_ms: Optional[float] = None

    def reset(self) -> None:
        self._active_until_ms = None

    def record_success(self, player: PlayerState, now_ms: float) -> Optional[BoostEvent]:
        """
        Count a PERFECT or GOOD answer.

        Returns:
            BoostEvent if this success moved the player up a tier
        """
        player.combo_count += 1

        if player.boost_tier >= MAX_TIER:
            return None

        next_threshold = self.thresholds[player.boost_tier]
        if player.combo_count < next_threshold:
            return None

        player.boost_tier += 1
        player.boost_active = True
        self._active_until_ms = now_ms + self.active_ms
        logger.info("Boost tier %d reached at combo %d", player.boost_tier, player.combo_count)
        return BoostEvent(
            tier=player.boost_tier,
            combo_count=player.combo_count,
            active_until_ms=self._active_until_ms,
        )

    def record_break(self, player: PlayerState) -> bool:
        """
        A miss or collision: combo and tier drop to zero.

        Returns:
            True if there was a streak or tier to lose
        """
        had_streak = player.combo_count > 0 or player.boost_tier > 0
        player.combo_count = 0
        player.boost_tier = 0
        player.boost_active = False
        self._active_until_ms = None
        return had_streak

    def update(self, player: PlayerState, now_ms: float) -> bool:
        """
        Lapse the boost window once its time is up.

        Returns:
            True if the boost went inactive on this call
        """
        if not player.boost_active or self._active_until_ms is None:
            return False
        if now_ms < self._active_until_ms:
            return False
        player.boost_active = False
        self._active_until_ms = None
        return True
