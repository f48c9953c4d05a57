"""
Spawner - Decides what enters the track on each beat.

Every Nth beat brings a green zone, a fresh prompt and two cars; other
beats bring at most one car. All randomness comes from a seeded RNG so
a round replays identically for the same seed.
"""

import itertools
import random
from dataclasses import dataclass, field
from typing import Optional

from config import SpawnSettings, TrackSettings, SPAWN_SETTINGS, TRACK_SETTINGS
from models.entities import Obstacle, TimingZone


@dataclass
class SpawnPlan:
    """What a single beat (or the round start) adds to the track."""
    beat_index: int
    obstacles: list[Obstacle] = field(default_factory=list)
    zone: Optional[TimingZone] = None
    request_prompt: bool = False

    @property
    def is_empty(self) -> bool:
        return not self.obstacles and self.zone is None and not self.request_prompt


class Spawner:
    """
    Beat-driven spawn decisions.

    Entities always appear past the far edge of the track, never on
    top of the player.
    """

    def __init__(self, seed: int = 0,
                 spawn: SpawnSettings = SPAWN_SETTINGS,
                 track: TrackSettings = TRACK_SETTINGS):
        if spawn.zone_every_beats < 1:
            raise ValueError("zone_every_beats must be >= 1")
        if not (0.0 <= spawn.offbeat_obstacle_chance <= 1.0):
            raise ValueError("offbeat_obstacle_chance must be in [0.0, 1.0]")
        if spawn.obstacle_speed_min > spawn.obstacle_speed_max:
            raise ValueError("obstacle speed range is inverted")

        _, window_right = track.player_window
        if track.obstacle_spawn_x <= window_right or track.zone_spawn_x <= track.player_reference:
            raise ValueError("Spawn positions must lie beyond the player's window")

        self.settings = spawn
        self.track = track
        self.seed = int(seed)
        self.reset()

    def reset(self, seed: Optional[int] = None) -> None:
        """Restart the RNG stream and identity counters."""
        if seed is not None:
            self.seed = int(seed)
        self._rng = random.Random(self.seed)
        self._obstacle_ids = itertools.count(1)
        self._zone_ids = itertools.count(1)

    def initial_plan(self, now_ms: float = 0) -> SpawnPlan:
        """The round-start set: a zone, a prompt and a few cars."""
        plan = SpawnPlan(beat_index=0, request_prompt=True)
        plan.zone = self._make_zone(now_ms)
        plan.obstacles = [self._make_obstacle() for _ in range(self.settings.initial_obstacles)]
        return plan

    def on_beat(self, beat_index: int, now_ms: float = 0) -> SpawnPlan:
        """
        Decide what to spawn for this beat.

        Args:
            beat_index: 1-based beat number within the round
            now_ms: Clock time, stamped on new zones

        Returns:
            SpawnPlan describing the new entities
        """
        plan = SpawnPlan(beat_index=beat_index)

        if beat_index % self.settings.zone_every_beats == 0:
            plan.request_prompt = True
            plan.zone = self._make_zone(now_ms)
            plan.obstacles = [self._make_obstacle(), self._make_obstacle()]
        elif self._rng.random() < self.settings.offbeat_obstacle_chance:
            plan.obstacles = [self._make_obstacle()]

        return plan

    def _make_obstacle(self) -> Obstacle:
        lane = self._rng.randrange(self.track.lane_count)
        speed = self._rng.uniform(self.settings.obstacle_speed_min,
                                  self.settings.obstacle_speed_max)
        return Obstacle(
            obstacle_id=f"t-{next(self._obstacle_ids)}",
            lane=lane,
            position=self.track.obstacle_spawn_x,
            speed=speed,
        )

    def _make_zone(self, now_ms: float) -> TimingZone:
        return TimingZone(
            zone_id=f"gz-{next(self._zone_ids)}",
            start=self.track.zone_spawn_x,
            width=self.settings.zone_width,
            created_at_ms=now_ms,
            ttl_ms=self.settings.zone_ttl_ms,
        )
