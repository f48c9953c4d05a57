"""
Rhyme Racer Configuration

Centralized settings, paths, and tuning constants for the round engine.
"""

import logging
import math
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional

import appdirs


# Application info
APP_NAME = "RhymeRacer"
APP_AUTHOR = "RhymeRacer"
APP_VERSION = "1.0.0"


@dataclass(frozen=True)
class Paths:
    """Application paths."""
    # Data directory (stores content packs)
    data_dir: Path = Path(appdirs.user_data_dir(APP_NAME, APP_AUTHOR))

    # Config directory (stores user preferences)
    config_dir: Path = Path(appdirs.user_config_dir(APP_NAME, APP_AUTHOR))

    # Log directory
    log_dir: Path = Path(appdirs.user_log_dir(APP_NAME, APP_AUTHOR))

    @property
    def log_file(self) -> Path:
        return self.log_dir / "rhymeracer.log"

    def ensure_directories(self) -> None:
        """Create all required directories."""
        for dir_path in [self.data_dir, self.config_dir, self.log_dir]:
            dir_path.mkdir(parents=True, exist_ok=True)


@dataclass(frozen=True)
class TimingSettings:
    """Clock and lifecycle timing."""
    # Round duration in milliseconds
    round_duration_ms: int = 60_000  # 60 seconds

    # Beat pulse interval in milliseconds
    beat_interval_ms: int = 1200  # 50 BPM

    # Simulation tick interval in milliseconds
    tick_interval_ms: int = 16

    # Largest integration step after a stall, in seconds
    max_dt_s: float = 0.05

    # Delay between round end and results presentation
    results_delay_ms: int = 800

    # How long outcome feedback stays visible
    feedback_hold_ms: int = 650


@dataclass(frozen=True)
class SpeedSettings:
    """Player speed tuning (px/sec)."""
    speed_min: float = 140.0
    speed_max: float = 520.0

    good_increment: float = 30.0
    perfect_increment: float = 80.0
    miss_decrement: float = 70.0
    collision_decrement: float = 120.0

    # Multiplicative decay applied on every beat
    beat_decay: float = 0.96

    # Pixels per metre for distance integration
    px_per_meter: float = 2.2


@dataclass(frozen=True)
class TrackSettings:
    """Track geometry in pixels."""
    track_width: float = 390.0
    lane_count: int = 3
    start_lane: int = 1

    # Player's fixed x on the track and half its body width
    player_left_margin: float = 16.0
    player_half_width: float = 22.0

    # Collision window around the player's reference point
    window_behind: float = 30.0
    window_ahead: float = 24.0

    # Spawn offsets past the far edge of the track
    obstacle_spawn_offset: float = 80.0
    zone_spawn_offset: float = 40.0

    obstacle_despawn_x: float = -120.0
    # Cars outrunning the player leave this far past their spawn point
    obstacle_far_margin: float = 200.0
    obstacle_half_width: float = 17.0

    lane_epsilon: float = 0.5
    zone_tolerance: float = 0.0

    @property
    def player_x(self) -> float:
        """Left edge of the player's car (the sweet spot)."""
        return float(max(self.player_left_margin + 120, math.floor(self.track_width * 0.35)))

    @property
    def player_reference(self) -> float:
        """Centre of the player's car, used for zone and collision checks."""
        return self.player_x + self.player_half_width

    @property
    def player_window(self) -> tuple[float, float]:
        ref = self.player_reference
        return (ref - self.window_behind, ref + self.window_ahead)

    @property
    def obstacle_spawn_x(self) -> float:
        return self.track_width + self.obstacle_spawn_offset

    @property
    def obstacle_far_despawn_x(self) -> float:
        return self.obstacle_spawn_x + self.obstacle_far_margin

    @property
    def zone_spawn_x(self) -> float:
        return self.track_width + self.zone_spawn_offset


@dataclass(frozen=True)
class SpawnSettings:
    """Beat-driven spawn cadence."""
    zone_every_beats: int = 4
    zone_width: float = 70.0

    # Optional zone lifetime; None keeps zones until they scroll off
    zone_ttl_ms: Optional[int] = None

    offbeat_obstacle_chance: float = 0.45
    obstacle_speed_min: float = 180.0
    obstacle_speed_max: float = 300.0

    initial_obstacles: int = 3


@dataclass(frozen=True)
class ComboSettings:
    """Combo thresholds and boost timing."""
    tier_thresholds: tuple[int, ...] = (5, 10)
    boost_active_ms: int = 3000

    # Minimum gap between two recorded collisions
    collision_cooldown_ms: int = 350


@dataclass(frozen=True)
class GameSettings:
    """Everything a round needs, bundled so tests can swap pieces."""
    timing: TimingSettings = field(default_factory=TimingSettings)
    speed: SpeedSettings = field(default_factory=SpeedSettings)
    track: TrackSettings = field(default_factory=TrackSettings)
    spawn: SpawnSettings = field(default_factory=SpawnSettings)
    combo: ComboSettings = field(default_factory=ComboSettings)


# Singleton instances
PATHS = Paths()
TIMING_SETTINGS = TimingSettings()
SPEED_SETTINGS = SpeedSettings()
TRACK_SETTINGS = TrackSettings()
SPAWN_SETTINGS = SpawnSettings()
COMBO_SETTINGS = ComboSettings()
GAME_SETTINGS = GameSettings(
    timing=TIMING_SETTINGS,
    speed=SPEED_SETTINGS,
    track=TRACK_SETTINGS,
    spawn=SPAWN_SETTINGS,
    combo=COMBO_SETTINGS,
)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(level: int = logging.INFO, log_to_file: bool = True) -> None:
    """Configure root logging: console always, plus a file in the log dir."""
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_to_file:
        PATHS.log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(PATHS.log_file, encoding="utf-8"))
    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers)


def init_config() -> None:
    """Initialize configuration and create required directories."""
    PATHS.ensure_directories()
