"""
Autopilot - A scripted player for headless rounds.

Listens to round snapshots on the event bus and answers through the
same input signals a real player would use.
"""

import logging
import random
from typing import Optional

from PySide6.QtCore import QObject

from config import TrackSettings, TRACK_SETTINGS
from engine.round_controller import RoundSnapshot
from models.round import RoundState
from services.event_bus import EventBus


logger = logging.getLogger(__name__)


class Autopilot(QObject):
    """
    Taps an answer whenever the car is inside a green zone and steers
    out of the lane of any car closing in ahead.

    Args:
        event_bus: Bus carrying snapshots in and input requests out
        accuracy: Probability of picking the correct answer
        seed: Seed for the autopilot's own RNG
        lookahead: How far ahead of the car (px) to watch for traffic
        track: Track geometry the round is played on
    """

    def __init__(self, event_bus: EventBus, accuracy: float = 0.8,
                 seed: Optional[int] = None, lookahead: float = 90.0,
                 track: TrackSettings = TRACK_SETTINGS):
        super().__init__()
        if not (0.0 <= accuracy <= 1.0):
            raise ValueError("accuracy must be in [0.0, 1.0]")
        self.event_bus = event_bus
        self.accuracy = accuracy
        self.lookahead = lookahead
        self.track = track
        self._rng = random.Random(seed)
        self.taps = 0
        self.lane_changes = 0

        self.event_bus.snapshot_updated.connect(self._on_snapshot)

    def _on_snapshot(self, snapshot: RoundSnapshot) -> None:
        if snapshot.state is not RoundState.RUNNING:
            return
        if snapshot.in_zone and snapshot.answer_options:
            self._answer(snapshot)
        else:
            self._steer(snapshot)

    def _answer(self, snapshot: RoundSnapshot) -> None:
        correct = [o for o in snapshot.answer_options if o.is_correct]
        wrong = [o for o in snapshot.answer_options if not o.is_correct]
        if correct and (not wrong or self._rng.random() < self.accuracy):
            choice = correct[0]
        else:
            choice = self._rng.choice(wrong)
        self.taps += 1
        self.event_bus.select_answer(choice.answer_id)

    def _steer(self, snapshot: RoundSnapshot) -> None:
        lane = snapshot.player.lane
        _, window_right = self.track.player_window
        threatened = any(
            o.lane == lane and 0 <= o.position - window_right <= self.lookahead
            for o in snapshot.obstacles
        )
        if not threatened:
            return
        direction = -1 if lane > 0 else 1
        if not (0 <= lane + direction < self.track.lane_count):
            return
        self.lane_changes += 1
        logger.debug("Autopilot steering %+d out of lane %d", direction, lane)
        self.event_bus.request_lane_change(direction)
