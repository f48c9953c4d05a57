"""
Collision & Zone Detector - Obstacle bumps and green zone occupancy.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from config import ComboSettings, TrackSettings, COMBO_SETTINGS, TRACK_SETTINGS
from models.entities import Obstacle, TimingZone


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CollisionEvent:
    """A single obstacle hitting the player."""
    obstacle_id: str
    lane: int
    position: float
    at_ms: float


class CollisionDetector:
    """
    Reports obstacle collisions and zone occupancy for the player.

    An obstacle collides when it shares the player's lane and its centre
    lies inside the player's window. Each obstacle may collide once; its
    marker is dropped when the track despawns it. Independently, no two
    collisions are recorded within collision_cooldown_ms of each other.
    """

    def __init__(self, track: TrackSettings = TRACK_SETTINGS,
                 combo: ComboSettings = COMBO_SETTINGS):
        self.settings = track
        self.cooldown_ms = combo.collision_cooldown_ms
        self._collided_ids: set[str] = set()
        self._last_collision_ms: Optional[float] = None

    def reset(self) -> None:
        """Forget every marker, for a new round."""
        self._collided_ids.clear()
        self._last_collision_ms = None

    def has_collided(self, obstacle_id: str) -> bool:
        return obstacle_id in self._collided_ids

    def forget(self, obstacle_ids: Iterable[str]) -> None:
        """Drop markers for obstacles that left the track."""
        for obstacle_id in obstacle_ids:
            self._collided_ids.discard(obstacle_id)

    def _in_cooldown(self, now_ms: float) -> bool:
        if self._last_collision_ms is None:
            return False
        return now_ms - self._last_collision_ms <= self.cooldown_ms

    def overlaps(self, player_lane: int, player_window: tuple[float, float],
                 obstacle: Obstacle) -> bool:
        """Geometric test only, ignoring markers and cooldown."""
        if abs(obstacle.lane - player_lane) >= self.settings.lane_epsilon:
            return False
        left, right = player_window
        centre = obstacle.position + self.settings.obstacle_half_width
        return left <= centre <= right

    def detect(self, player_lane: int, player_window: tuple[float, float],
               obstacles: Iterable[Obstacle], now_ms: float) -> list[CollisionEvent]:
        """
        Find new collisions for this tick.

        Args:
            player_lane: The player's current lane
            player_window: (left, right) x range of the player's car
            obstacles: Obstacles already advanced for this tick
            now_ms: Clock time of this tick

        Returns:
            List of CollisionEvent (at most one per cooldown window)
        """
        events: list[CollisionEvent] = []
        for obstacle in obstacles:
            if not self.overlaps(player_lane, player_window, obstacle):
                continue
            if obstacle.obstacle_id in self._collided_ids or self._in_cooldown(now_ms):
                continue

            self._collided_ids.add(obstacle.obstacle_id)
            self._last_collision_ms = now_ms
            event = CollisionEvent(
                obstacle_id=obstacle.obstacle_id,
                lane=obstacle.lane,
                position=obstacle.position,
                at_ms=now_ms,
            )
            events.append(event)
            logger.debug("Collision with %s in lane %d at %.0f ms",
                         obstacle.obstacle_id, obstacle.lane, now_ms)
        return events

    def is_in_zone(self, player_position: float, zones: Iterable[TimingZone]) -> bool:
        """True if the player's reference point lies in any live zone."""
        tolerance = self.settings.zone_tolerance
        return any(zone.contains(player_position, tolerance) for zone in zones)
