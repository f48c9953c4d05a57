"""
Track Model - Lane geometry, player progress, and live entity populations.

The track is a horizontal strip of lanes. The player's car stays at a
fixed x (the sweet spot) and the world scrolls toward it: zones move at
the player's speed, traffic at the speed difference. Distance is the
integral of the player's speed.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from config import SpeedSettings, TrackSettings, TimingSettings, SPEED_SETTINGS, TRACK_SETTINGS, TIMING_SETTINGS
from models.entities import PlayerState, Obstacle, TimingZone


logger = logging.getLogger(__name__)


@dataclass
class TrackUpdate:
    """Entity collections after one tick, for the collision detector."""
    dt: float
    obstacles: list[Obstacle] = field(default_factory=list)
    zones: list[TimingZone] = field(default_factory=list)
    despawned_obstacles: list[str] = field(default_factory=list)
    despawned_zones: list[str] = field(default_factory=list)
    distance_delta: float = 0.0


class TrackModel:
    """
    Owns the player's progress and every obstacle and timing zone.

    Speed is changed by outside callers through the PlayerState; the
    track only integrates it, except for the beat decay it applies
    when asked.

    Usage:
        track = TrackModel()
        track.reset()
        track.add_obstacle(obstacle)
        update = track.advance(dt=0.016, player_speed=track.player.speed)
    """

    def __init__(self, track: TrackSettings = TRACK_SETTINGS,
                 speed: SpeedSettings = SPEED_SETTINGS,
                 timing: TimingSettings = TIMING_SETTINGS):
        if track.lane_count < 1:
            raise ValueError("Track needs at least one lane")
        if not (0 <= track.start_lane < track.lane_count):
            raise ValueError(f"start_lane must be in [0, {track.lane_count - 1}]")

        self.settings = track
        self.speed_settings = speed
        self.max_dt_s = timing.max_dt_s

        self.player = self._new_player()
        self._obstacles: dict[str, Obstacle] = {}
        self._zones: dict[str, TimingZone] = {}

    def _new_player(self) -> PlayerState:
        return PlayerState(
            speed_min=self.speed_settings.speed_min,
            speed_max=self.speed_settings.speed_max,
            speed=self.speed_settings.speed_min,
            lane=self.settings.start_lane,
        )

    def reset(self) -> None:
        """Clear all entities and put a fresh player on the start lane."""
        self.player = self._new_player()
        self._obstacles.clear()
        self._zones.clear()

    # ============ Geometry ============

    @property
    def lane_count(self) -> int:
        return self.settings.lane_count

    @property
    def player_reference(self) -> float:
        """The x coordinate used for zone occupancy."""
        return self.settings.player_reference

    @property
    def player_window(self) -> tuple[float, float]:
        """The x range in which a same-lane obstacle collides."""
        return self.settings.player_window

    # ============ Entities ============

    @property
    def obstacles(self) -> list[Obstacle]:
        return list(self._obstacles.values())

    @property
    def zones(self) -> list[TimingZone]:
        return list(self._zones.values())

    def add_obstacle(self, obstacle: Obstacle) -> None:
        if obstacle.obstacle_id in self._obstacles:
            raise ValueError(f"Duplicate obstacle id: {obstacle.obstacle_id}")
        if not (0 <= obstacle.lane < self.lane_count):
            raise ValueError(f"Obstacle lane {obstacle.lane} outside track")
        self._obstacles[obstacle.obstacle_id] = obstacle

    def add_zone(self, zone: TimingZone) -> None:
        if zone.zone_id in self._zones:
            raise ValueError(f"Duplicate zone id: {zone.zone_id}")
        self._zones[zone.zone_id] = zone

    # ============ Player ============

    def change_lane(self, direction: int) -> int:
        """
        Move the player one lane up (-1) or down (+1), clamped to the track.

        Returns:
            The player's lane after the move
        """
        if direction not in (-1, 1):
            raise ValueError("direction must be -1 or +1")
        self.player.lane = max(0, min(self.lane_count - 1, self.player.lane + direction))
        return self.player.lane

    def apply_beat_decay(self, factor: Optional[float] = None) -> float:
        """Multiplicative speed decay requested on every beat."""
        if factor is None:
            factor = self.speed_settings.beat_decay
        return self.player.scale_speed(factor)

    # ============ Simulation ============

    def clamp_dt(self, dt: float) -> float:
        return max(0.0, min(self.max_dt_s, dt))

    def advance(self, dt: float, player_speed: float,
                now_ms: Optional[float] = None) -> TrackUpdate:
        """
        Move every entity by one tick and integrate distance.

        Args:
            dt: Elapsed simulation time in seconds (clamped to max_dt_s)
            player_speed: The player's speed in px/sec for this tick
            now_ms: Clock time, used to expire zones with a lifetime

        Returns:
            TrackUpdate with the surviving entities and despawned ids
        """
        dt = self.clamp_dt(dt)
        update = TrackUpdate(dt=dt)

        for obstacle_id, obstacle in list(self._obstacles.items()):
            relative = player_speed - obstacle.speed
            obstacle.position -= relative * dt
            if (obstacle.position <= self.settings.obstacle_despawn_x
                    or obstacle.position > self.settings.obstacle_far_despawn_x):
                del self._obstacles[obstacle_id]
                update.despawned_obstacles.append(obstacle_id)

        for zone_id, zone in list(self._zones.items()):
            zone.start -= player_speed * dt
            expired = now_ms is not None and zone.is_expired(now_ms)
            if zone.end <= 0 or expired:
                del self._zones[zone_id]
                update.despawned_zones.append(zone_id)

        update.distance_delta = player_speed * dt / self.speed_settings.px_per_meter
        self.player.distance += update.distance_delta

        update.obstacles = self.obstacles
        update.zones = self.zones
        return update
