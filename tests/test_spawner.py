"""
Unit tests for the beat-driven Spawner.
"""

import pytest
from dataclasses import replace

from config import SpawnSettings, TrackSettings, SPAWN_SETTINGS, TRACK_SETTINGS
from engine.spawner import Spawner


class TestSpawner:
    """Tests for spawn decisions."""

    def setup_method(self):
        self.spawner = Spawner(seed=42)

    def test_initial_plan_has_zone_prompt_and_traffic(self):
        plan = self.spawner.initial_plan(now_ms=0)

        assert plan.request_prompt
        assert plan.zone is not None
        assert plan.zone.start == TRACK_SETTINGS.zone_spawn_x
        assert len(plan.obstacles) == SPAWN_SETTINGS.initial_obstacles

    def test_zone_beat_brings_prompt_zone_and_two_cars(self):
        plan = self.spawner.on_beat(4, now_ms=4800)

        assert plan.request_prompt
        assert plan.zone is not None
        assert plan.zone.width == 70
        assert plan.zone.created_at_ms == 4800
        assert len(plan.obstacles) == 2

    def test_offbeat_never_spawns_when_chance_is_zero(self):
        spawner = Spawner(seed=1, spawn=replace(SPAWN_SETTINGS, offbeat_obstacle_chance=0.0))

        plans = [spawner.on_beat(i) for i in (1, 2, 3, 5, 6, 7)]

        assert all(p.is_empty for p in plans)

    def test_offbeat_always_spawns_one_car_when_chance_is_one(self):
        spawner = Spawner(seed=1, spawn=replace(SPAWN_SETTINGS, offbeat_obstacle_chance=1.0))

        plan = spawner.on_beat(1)

        assert len(plan.obstacles) == 1
        assert plan.zone is None
        assert not plan.request_prompt

    def test_obstacles_spawn_past_track_edge(self):
        plan = self.spawner.on_beat(4)

        for obstacle in plan.obstacles:
            assert obstacle.position == TRACK_SETTINGS.obstacle_spawn_x
            assert 0 <= obstacle.lane < TRACK_SETTINGS.lane_count
            assert 180 <= obstacle.speed <= 300

    def test_ids_are_unique_across_beats(self):
        ids = set()
        count = 0
        for beat in range(1, 41):
            plan = self.spawner.on_beat(beat)
            for obstacle in plan.obstacles:
                ids.add(obstacle.obstacle_id)
                count += 1
            if plan.zone is not None:
                ids.add(plan.zone.zone_id)
                count += 1

        assert len(ids) == count

    def test_same_seed_replays_identically(self):
        other = Spawner(seed=42)

        first = [self.spawner.on_beat(b).obstacles for b in range(1, 20)]
        second = [other.on_beat(b).obstacles for b in range(1, 20)]

        assert first == second

    def test_reset_restarts_stream(self):
        before = [self.spawner.on_beat(b).obstacles for b in range(1, 10)]

        self.spawner.reset()
        after = [self.spawner.on_beat(b).obstacles for b in range(1, 10)]

        assert before == after

    def test_reset_with_new_seed(self):
        self.spawner.reset(seed=7)

        assert self.spawner.seed == 7


class TestSpawnerValidation:
    """Tests for settings validation."""

    def test_zone_cadence_must_be_positive(self):
        with pytest.raises(ValueError):
            Spawner(spawn=SpawnSettings(zone_every_beats=0))

    def test_chance_must_be_probability(self):
        with pytest.raises(ValueError):
            Spawner(spawn=SpawnSettings(offbeat_obstacle_chance=1.5))

    def test_speed_range_must_be_ordered(self):
        with pytest.raises(ValueError):
            Spawner(spawn=SpawnSettings(obstacle_speed_min=300, obstacle_speed_max=200))

    def test_spawn_point_cannot_overlap_player(self):
        """A narrow track would spawn cars inside the player's window."""
        with pytest.raises(ValueError):
            Spawner(track=TrackSettings(track_width=100))
