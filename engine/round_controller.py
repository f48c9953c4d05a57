"""
Round Controller - Lifecycle and sequencing for one Rhyme Racer round.

The controller runs independently of any display. It owns the round
state, the player, the track and the score, and it is the only thing
allowed to move the round between IDLE, RUNNING and ENDED.

    IDLE --start()--> RUNNING --time_expired() / force_end()--> ENDED
                         ^                                        |
                         +----------------start()-----------------+
"""

import logging
from dataclasses import dataclass
from typing import Optional

from PySide6.QtCore import QObject, Signal

from config import GameSettings, GAME_SETTINGS
from engine.boost import ComboBoost, BoostEvent
from engine.clock import Clock, ScheduledCall
from engine.collision import CollisionDetector, CollisionEvent
from engine.evaluator import AnswerEvaluator, EvaluationResult
from engine.prompt_slot import PromptSlot
from engine.scoring import ScoreAccumulator, whole_metres
from engine.spawner import Spawner, SpawnPlan
from engine.track import TrackModel
from models.entities import PlayerState, Obstacle, TimingZone
from models.prompt import AnswerOption
from models.round import RoundState, Feedback
from models.schemas import ScoreRecord
from services.content import ContentSource, ContentUnavailableError


logger = logging.getLogger(__name__)


class InvalidTransitionError(RuntimeError):
    """A lifecycle operation was called from a state that does not allow it."""


# Legal lifecycle moves
TRANSITIONS = {
    RoundState.IDLE: {RoundState.RUNNING},
    RoundState.RUNNING: {RoundState.ENDED},
    RoundState.ENDED: {RoundState.RUNNING},
}


@dataclass(frozen=True)
class RoundSnapshot:
    """
    Read-only view of the round for presentation layers.
    Emitted after every tick, beat and input event.
    """
    state: RoundState
    player: PlayerState
    obstacles: tuple[Obstacle, ...]
    zones: tuple[TimingZone, ...]
    feedback: Optional[Feedback]
    in_zone: bool
    beat_index: int
    time_remaining_ms: int
    prompt_text: Optional[str]
    answer_options: tuple[AnswerOption, ...]
    px_per_meter: float = 2.2

    @property
    def speed_mps(self) -> float:
        return self.player.speed / self.px_per_meter

    @property
    def distance_m(self) -> int:
        return whole_metres(self.player.distance)


class RoundController(QObject):
    """
    Sequences the track, spawner, detector, evaluator and combo machine
    per tick, per beat and per input event.
    Emits Qt Signals so presentation layers can react without polling.

    Usage:
        controller = RoundController(clock, content, seed=42)
        controller.round_ended.connect(show_results)
        controller.start()
        controller.change_lane(+1)
        controller.select_answer(answer_id)
    """

    # Signals
    state_changed = Signal(str)             # new state value
    round_started = Signal()
    round_ended = Signal(object)            # ScoreRecord
    results_ready = Signal(object)          # ScoreRecord, after the presentation delay
    snapshot_updated = Signal(object)       # RoundSnapshot
    prompt_changed = Signal(object)         # Prompt, or None when content failed
    answer_evaluated = Signal(object)       # EvaluationResult
    collision_occurred = Signal(object)     # CollisionEvent
    boost_activated = Signal(object)        # BoostEvent
    boost_lapsed = Signal()
    beat_pulsed = Signal(int)               # beat index
    content_unavailable = Signal(str)       # reason

    def __init__(self, clock: Clock, content: ContentSource, seed: int = 0,
                 settings: GameSettings = GAME_SETTINGS):
        """
        Initialize the round controller.

        Args:
            clock: Time source delivering ticks and beats
            content: Source of rhyme prompts
            seed: Seed for the spawner's RNG stream
            settings: Tuning constants for the round
        """
        super().__init__()
        self.settings = settings
        self._clock = clock
        self._content = content

        self._track = TrackModel(settings.track, settings.speed, settings.timing)
        self._spawner = Spawner(seed, settings.spawn, settings.track)
        self._detector = CollisionDetector(settings.track, settings.combo)
        self._evaluator = AnswerEvaluator(settings.speed)
        self._boost = ComboBoost(settings.combo)
        self._slot = PromptSlot()

        self._state = RoundState.IDLE
        self._cadences_connected = False
        self._results_call: Optional[ScheduledCall] = None
        self._reset_state()

    def _reset_state(self) -> None:
        """Reset everything the controller owns for a new round."""
        self._track.reset()
        self._spawner.reset()
        self._detector.reset()
        self._boost.reset()
        self._slot.clear()

        self._score = ScoreAccumulator()
        self._record: Optional[ScoreRecord] = None
        self._beat_index = 0
        self._started_at_ms: float = 0.0
        self._ended_at_ms: Optional[float] = None
        self._feedback: Optional[Feedback] = None
        self._feedback_until_ms: float = 0.0

    # ============ Read-only state ============

    @property
    def state(self) -> RoundState:
        """Current lifecycle state."""
        return self._state

    @property
    def seed(self) -> int:
        return self._spawner.seed

    @property
    def player(self) -> PlayerState:
        """Copy of the player's state."""
        return self._track.player.copy()

    @property
    def beat_index(self) -> int:
        return self._beat_index

    @property
    def score_record(self) -> Optional[ScoreRecord]:
        """The final record once the round has ended."""
        return self._record

    @property
    def results_pending(self) -> bool:
        return self._results_call is not None and self._results_call.pending

    @property
    def active_options(self) -> list[AnswerOption]:
        return self._slot.options

    @property
    def elapsed_ms(self) -> float:
        if self._state is RoundState.IDLE:
            return 0.0
        end = self._ended_at_ms if self._ended_at_ms is not None else self._clock.now_ms
        return max(0.0, end - self._started_at_ms)

    @property
    def time_remaining_ms(self) -> int:
        if self._state is RoundState.ENDED:
            return 0
        remaining = self.settings.timing.round_duration_ms - self.elapsed_ms
        return int(max(0.0, remaining))

    def is_in_zone(self) -> bool:
        return self._detector.is_in_zone(self._track.player_reference, self._track.zones)

    def snapshot(self) -> RoundSnapshot:
        prompt = self._slot.prompt
        return RoundSnapshot(
            state=self._state,
            player=self._track.player.copy(),
            obstacles=tuple(o.copy() for o in self._track.obstacles),
            zones=tuple(z.copy() for z in self._track.zones),
            feedback=self._feedback,
            in_zone=self.is_in_zone(),
            beat_index=self._beat_index,
            time_remaining_ms=self.time_remaining_ms,
            prompt_text=prompt.text if prompt is not None else None,
            answer_options=tuple(self._slot.options),
            px_per_meter=self.settings.speed.px_per_meter,
        )

    # ============ Lifecycle ============

    def _check_transition(self, target: RoundState) -> None:
        if target not in TRANSITIONS[self._state]:
            raise InvalidTransitionError(
                f"Cannot move round from {self._state.value} to {target.value}"
            )

    def _set_state(self, new_state: RoundState) -> None:
        self._check_transition(new_state)
        logger.info("Round %s -> %s", self._state.value, new_state.value)
        self._state = new_state
        self.state_changed.emit(new_state.value)

    def start(self) -> bool:
        """
        Start a new round (IDLE or ENDED -> RUNNING).

        Resets all owned state, restarts the clock, deals the first
        prompt, zone and traffic, and subscribes to both cadences.

        Returns:
            False if the round is already running
        """
        try:
            self._check_transition(RoundState.RUNNING)
        except InvalidTransitionError as exc:
            logger.warning("start() rejected: %s", exc)
            return False

        self._cancel_results()
        self._reset_state()

        self._connect_cadences()
        self._clock.start()
        self._started_at_ms = self._clock.now_ms
        self._set_state(RoundState.RUNNING)

        self._apply_plan(self._spawner.initial_plan(self._started_at_ms))

        self.round_started.emit()
        self._emit_snapshot()
        return True

    def time_expired(self) -> bool:
        """
        End the round because its duration has elapsed.

        Stops both cadences, finalizes the score, emits round_ended and
        schedules results_ready after the presentation delay.

        Returns:
            False if the round is not running or the duration has not elapsed
        """
        if self._state is RoundState.RUNNING and self.elapsed_ms < self.settings.timing.round_duration_ms:
            logger.warning("time_expired() rejected: %.0f ms still on the clock",
                           self.settings.timing.round_duration_ms - self.elapsed_ms)
            return False
        if self._end_round("time expired") is None:
            return False

        self._results_call = self._clock.call_later(
            self.settings.timing.results_delay_ms, self._present_results
        )
        return True

    def force_end(self) -> bool:
        """
        End the round immediately, or abandon a pending results presentation.

        Returns:
            False if there was neither a running round nor pending results
        """
        if self._state is RoundState.ENDED and self.results_pending:
            self._cancel_results()
            logger.info("Pending results presentation cancelled")
            return True
        return self._end_round("forced") is not None

    def _end_round(self, reason: str) -> Optional[ScoreRecord]:
        try:
            self._check_transition(RoundState.ENDED)
        except InvalidTransitionError as exc:
            logger.warning("End of round (%s) rejected: %s", reason, exc)
            return None

        self._disconnect_cadences()
        self._clock.stop()
        self._ended_at_ms = self._clock.now_ms
        self._set_state(RoundState.ENDED)

        self._record = self._score.finalize(self._track.player.distance)
        logger.info("Round ended (%s): %s", reason, self._record.model_dump())

        self.round_ended.emit(self._record)
        self._emit_snapshot()
        return self._record

    def _present_results(self) -> None:
        self._results_call = None
        if self._record is not None:
            self.results_ready.emit(self._record)

    def _cancel_results(self) -> None:
        if self._results_call is not None:
            self._results_call.cancel()
            self._results_call = None

    def _connect_cadences(self) -> None:
        if self._cadences_connected:
            return
        self._clock.ticked.connect(self._on_tick)
        self._clock.beat.connect(self._on_beat)
        self._cadences_connected = True

    def _disconnect_cadences(self) -> None:
        if not self._cadences_connected:
            return
        self._clock.ticked.disconnect(self._on_tick)
        self._clock.beat.disconnect(self._on_beat)
        self._cadences_connected = False

    # ============ Cadences ============

    def _on_tick(self, dt: float) -> None:
        """Advance the track, then check collisions against the new positions."""
        if self._state is not RoundState.RUNNING:
            return
        now = self._clock.now_ms
        player = self._track.player

        update = self._track.advance(dt, player.speed, now)
        self._detector.forget(update.despawned_obstacles)

        events = self._detector.detect(player.lane, self._track.player_window,
                                       update.obstacles, now)
        if events:
            self._apply_collisions(events, now)

        if self._boost.update(player, now):
            self.boost_lapsed.emit()
        if self._feedback is not None and now >= self._feedback_until_ms:
            self._feedback = None

        if self.elapsed_ms >= self.settings.timing.round_duration_ms:
            self.time_expired()
            return

        self._emit_snapshot()

    def _on_beat(self, beat_index: int) -> None:
        """Spawn for this beat and decay the player's speed."""
        if self._state is not RoundState.RUNNING:
            return
        self._beat_index = beat_index
        self._apply_plan(self._spawner.on_beat(beat_index, self._clock.now_ms))
        self._track.apply_beat_decay(self.settings.speed.beat_decay)

        self.beat_pulsed.emit(beat_index)
        self._emit_snapshot()

    def _apply_plan(self, plan: SpawnPlan) -> None:
        for obstacle in plan.obstacles:
            self._track.add_obstacle(obstacle)
        if plan.zone is not None:
            self._track.add_zone(plan.zone)
        if plan.request_prompt:
            self._deal_prompt()

    def _deal_prompt(self) -> None:
        """Replace the active prompt; a content failure leaves none active."""
        try:
            prompt = self._content.get_random_prompt()
            if prompt is None:
                raise ContentUnavailableError("Content source returned no prompt")
        except ContentUnavailableError as exc:
            logger.warning("No prompt this cycle: %s", exc)
            self._slot.clear()
            self.content_unavailable.emit(str(exc))
            self.prompt_changed.emit(None)
            return

        self._slot.replace(prompt, self._clock.now_ms)
        self.prompt_changed.emit(prompt)

    def _apply_collisions(self, events: list[CollisionEvent], now: float) -> None:
        """One speed penalty per tick, however many obstacles hit."""
        player = self._track.player
        player.adjust_speed(-self.settings.speed.collision_decrement)
        self._boost.record_break(player)
        for event in events:
            self._score.record_collision()
            self.collision_occurred.emit(event)
        self._show_feedback(Feedback.BUMP, now)

    def _show_feedback(self, feedback: Feedback, now: float) -> None:
        self._feedback = feedback
        self._feedback_until_ms = now + self.settings.timing.feedback_hold_ms

    # ============ Input ============

    def change_lane(self, direction: int) -> Optional[int]:
        """
        Move one lane up (-1) or down (+1). Ignored unless RUNNING.

        Returns:
            The new lane, or None if the request was ignored
        """
        if self._state is not RoundState.RUNNING:
            return None
        lane = self._track.change_lane(direction)
        self._emit_snapshot()
        return lane

    def select_answer(self, answer_id: str) -> Optional[EvaluationResult]:
        """
        Evaluate a tapped answer. Ignored unless RUNNING.

        Taps on answers from a replaced prompt, or a second tap on the
        same prompt, are silently ignored.

        Returns:
            EvaluationResult, or None if the tap was ignored
        """
        if self._state is not RoundState.RUNNING:
            return None

        option = self._slot.take(answer_id)
        if option is None:
            return None

        now = self._clock.now_ms
        player = self._track.player
        prompt = self._slot.prompt
        category = prompt.category if prompt is not None else None

        zone_occupied = self.is_in_zone()
        result = self._evaluator.evaluate(option, zone_occupied, player, self._score,
                                          category=category, now_ms=now)

        boost_event: Optional[BoostEvent] = None
        if result.outcome.is_success:
            boost_event = self._boost.record_success(player, now)
            self._score.observe_combo(player.combo_count)
        else:
            self._boost.record_break(player)

        self._show_feedback(Feedback.from_outcome(result.outcome), now)
        self.answer_evaluated.emit(result)
        if boost_event is not None:
            self.boost_activated.emit(boost_event)
        self._emit_snapshot()
        return result

    def _emit_snapshot(self) -> None:
        self.snapshot_updated.emit(self.snapshot())
