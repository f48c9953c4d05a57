"""
Unit tests for the application wiring and the autopilot.
"""

import sys
from dataclasses import replace

import pytest
from unittest.mock import MagicMock
from PySide6.QtCore import QCoreApplication

from app import RhymeRacerApp
from config import GAME_SETTINGS, TRACK_SETTINGS
from engine.clock import ManualClock
from engine.round_controller import RoundSnapshot
from models.entities import PlayerState, Obstacle
from models.prompt import AnswerOption
from models.round import RoundState
from models.schemas import Prompt
from services.autopilot import Autopilot
from services.content import SequenceContentSource
from services.event_bus import EventBus


PROMPTS = [
    Prompt(prompt_id=f"p{i}", text=f"Verse {i} ends with ___",
           options=("rain", "train", "tree"), correct="train")
    for i in range(4)
]


@pytest.fixture(scope="session")
def qapp():
    """Create a QCoreApplication instance for the test session."""
    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication(sys.argv)
    yield app


class TestRhymeRacerApp:
    """Tests for bus wiring with direct input delivery."""

    def setup_method(self):
        self.clock = ManualClock()
        self.app = RhymeRacerApp(content=SequenceContentSource(PROMPTS), clock=self.clock,
                                 queued_input=False)
        self.bus = self.app.event_bus

    def test_round_events_reach_the_bus(self):
        on_started = MagicMock()
        on_state = MagicMock()
        on_prompt = MagicMock()
        self.bus.round_started.connect(on_started)
        self.bus.state_changed.connect(on_state)
        self.bus.prompt_changed.connect(on_prompt)

        self.app.start_round(seed=3)

        on_started.assert_called_once()
        on_state.assert_called_once_with("running")
        on_prompt.assert_called_once_with(PROMPTS[0])

    def test_answers_from_the_bus_are_evaluated(self):
        on_answer = MagicMock()
        self.bus.answer_evaluated.connect(on_answer)
        controller = self.app.start_round()
        option = next(o for o in controller.active_options if o.is_correct)

        self.bus.select_answer(option.answer_id)

        on_answer.assert_called_once()
        assert on_answer.call_args.args[0].answer_id == option.answer_id

    def test_lane_requests_from_the_bus(self):
        controller = self.app.start_round()

        self.bus.request_lane_change(1)

        assert controller.player.lane == 2

    def test_round_end_reaches_the_bus(self):
        on_ended = MagicMock()
        self.bus.round_ended.connect(on_ended)
        controller = self.app.start_round()

        controller.force_end()

        on_ended.assert_called_once_with(controller.score_record)

    def test_content_failures_reach_the_bus(self):
        app = RhymeRacerApp(content=SequenceContentSource([]), clock=ManualClock(),
                            queued_input=False)
        on_unavailable = MagicMock()
        app.event_bus.content_unavailable.connect(on_unavailable)

        app.start_round()

        on_unavailable.assert_called_once_with("No prompts configured")

    def test_new_round_detaches_previous_controller(self):
        old = self.app.start_round(seed=1)
        new = self.app.create_round(seed=2)

        self.bus.request_lane_change(-1)

        assert old.state == RoundState.ENDED
        assert old.player.lane == 1
        assert new.state == RoundState.IDLE
        assert self.app.controller is new


class TestAutopilotRound:
    """A full round played by the autopilot over queued input."""

    def test_autopilot_plays_a_round(self, qapp):
        clock = ManualClock()
        settings = replace(GAME_SETTINGS,
                           timing=replace(GAME_SETTINGS.timing, round_duration_ms=15_000))
        racer = RhymeRacerApp(content=SequenceContentSource(PROMPTS), clock=clock,
                              settings=settings)
        autopilot = Autopilot(racer.event_bus, accuracy=1.0, seed=4, track=settings.track)
        controller = racer.start_round(seed=4)

        while controller.state == RoundState.RUNNING:
            clock.advance(16)
            qapp.processEvents()

        record = controller.score_record
        assert autopilot.taps > 0
        assert 0 < record.total_attempts <= autopilot.taps
        assert record.beat_sync_accuracy == 100


def make_snapshot(lane=1, in_zone=False, options=(), obstacles=(), state=RoundState.RUNNING):
    return RoundSnapshot(
        state=state,
        player=PlayerState(speed_min=140, speed_max=520, speed=140, lane=lane),
        obstacles=tuple(obstacles),
        zones=(),
        feedback=None,
        in_zone=in_zone,
        beat_index=0,
        time_remaining_ms=30_000,
        prompt_text="Verse 0 ends with ___",
        answer_options=tuple(options),
    )


OPTIONS = (
    AnswerOption("p0#1-opt0", "p0", "rain", 0, False),
    AnswerOption("p0#1-opt1", "p0", "train", 1, True),
    AnswerOption("p0#1-opt2", "p0", "tree", 2, False),
)


class TestAutopilotDecisions:
    """Tests for the autopilot's choices on single snapshots."""

    def setup_method(self):
        self.bus = EventBus()
        self.on_answer = MagicMock()
        self.on_lane = MagicMock()
        self.bus.answer_selected.connect(self.on_answer)
        self.bus.lane_change_requested.connect(self.on_lane)
        self.ahead = TRACK_SETTINGS.player_window[1] + 10

    def test_accurate_autopilot_picks_correct_answer(self):
        autopilot = Autopilot(self.bus, accuracy=1.0, seed=1)

        autopilot._on_snapshot(make_snapshot(in_zone=True, options=OPTIONS))

        self.on_answer.assert_called_once_with("p0#1-opt1")
        assert autopilot.taps == 1

    def test_inaccurate_autopilot_picks_wrong_answer(self):
        Autopilot(self.bus, accuracy=0.0, seed=1)._on_snapshot(
            make_snapshot(in_zone=True, options=OPTIONS))

        assert self.on_answer.call_args.args[0] in ("p0#1-opt0", "p0#1-opt2")

    def test_waits_for_zone_before_answering(self):
        Autopilot(self.bus, accuracy=1.0)._on_snapshot(make_snapshot(options=OPTIONS))

        self.on_answer.assert_not_called()

    def test_steers_out_of_threatened_lane(self):
        autopilot = Autopilot(self.bus)
        threat = Obstacle("t-1", lane=1, position=self.ahead, speed=180)

        autopilot._on_snapshot(make_snapshot(lane=1, obstacles=[threat]))

        self.on_lane.assert_called_once_with(-1)
        assert autopilot.lane_changes == 1

    def test_steers_down_from_top_lane(self):
        threat = Obstacle("t-1", lane=0, position=self.ahead, speed=180)

        Autopilot(self.bus)._on_snapshot(make_snapshot(lane=0, obstacles=[threat]))

        self.on_lane.assert_called_once_with(1)

    def test_ignores_traffic_in_other_lanes(self):
        other = Obstacle("t-1", lane=2, position=self.ahead, speed=180)

        Autopilot(self.bus)._on_snapshot(make_snapshot(lane=1, obstacles=[other]))

        self.on_lane.assert_not_called()

    def test_idle_when_round_not_running(self):
        Autopilot(self.bus, accuracy=1.0)._on_snapshot(
            make_snapshot(in_zone=True, options=OPTIONS, state=RoundState.ENDED))

        self.on_answer.assert_not_called()

    def test_accuracy_must_be_probability(self):
        with pytest.raises(ValueError):
            Autopilot(self.bus, accuracy=1.5)
