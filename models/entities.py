"""
Track entities: the player, obstacle traffic, and green timing zones.

Plain dataclasses with no Qt usage. The TrackModel owns the live
instances; snapshots hand out copies.
"""

from dataclasses import dataclass, replace
from typing import Optional


@dataclass
class PlayerState:
    """
    The player's progress through a round.

    Attributes:
        speed: Current speed in px/sec, always within [speed_min, speed_max]
        distance: Metres travelled this round
        lane: Index into the ordered lane set
        combo_count: Consecutive successful answers since the last miss/collision
        boost_tier: 0 (none), 1 or 2
        boost_active: True while a freshly entered tier's boost window is open
    """
    speed_min: float
    speed_max: float
    speed: float = 0.0
    distance: float = 0.0
    lane: int = 0
    combo_count: int = 0
    boost_tier: int = 0
    boost_active: bool = False

    def __post_init__(self) -> None:
        if self.speed_min > self.speed_max:
            raise ValueError("speed_min cannot exceed speed_max")
        self.speed = self._clamp(self.speed)

    def _clamp(self, value: float) -> float:
        return max(self.speed_min, min(self.speed_max, value))

    def adjust_speed(self, delta: float) -> float:
        """Add delta to speed, clamped. Returns the applied change."""
        before = self.speed
        self.speed = self._clamp(self.speed + delta)
        return self.speed - before

    def scale_speed(self, factor: float) -> float:
        """Multiply speed by factor, clamped. Returns the applied change."""
        before = self.speed
        self.speed = self._clamp(self.speed * factor)
        return self.speed - before

    def copy(self) -> "PlayerState":
        return replace(self)


@dataclass
class Obstacle:
    """A traffic car in one lane, moving at its own speed."""
    obstacle_id: str
    lane: int
    position: float
    speed: float

    def copy(self) -> "Obstacle":
        return replace(self)


@dataclass
class TimingZone:
    """A green zone scrolling toward the player."""
    zone_id: str
    start: float
    width: float
    created_at_ms: int = 0
    ttl_ms: Optional[int] = None

    @property
    def end(self) -> float:
        return self.start + self.width

    def is_expired(self, now_ms: int) -> bool:
        if self.ttl_ms is None:
            return False
        return now_ms - self.created_at_ms >= self.ttl_ms

    def contains(self, position: float, tolerance: float = 0.0) -> bool:
        return self.start - tolerance <= position <= self.end + tolerance

    def copy(self) -> "TimingZone":
        return replace(self)
