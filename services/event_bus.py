"""
Event Bus - Central signal hub for inter-module communication.

The round engine, presentation layers and input sources all connect to
this single object rather than directly to each other.
"""

from PySide6.QtCore import QObject, Signal


class EventBus(QObject):
    """
    Central signal hub for Rhyme Racer.

    The EventBus acts as a mediator between all application components:
    - RoundController emits lifecycle, snapshot and outcome events
    - Presentation layers listen and update their displays
    - Input sources request lane changes and answer taps

    Usage:
        # In RhymeRacerApp
        controller.round_ended.connect(self.event_bus.round_ended.emit)

        # In a results view
        self.event_bus.results_ready.connect(self._on_results)
    """

    # ============ Round Lifecycle ============
    round_started = Signal()
    round_ended = Signal(object)        # ScoreRecord
    results_ready = Signal(object)      # ScoreRecord, after the presentation delay
    state_changed = Signal(str)         # RoundState value

    # ============ Simulation ============
    snapshot_updated = Signal(object)   # RoundSnapshot
    beat_pulsed = Signal(int)           # beat index

    # ============ Gameplay Events ============
    prompt_changed = Signal(object)     # Prompt or None
    answer_evaluated = Signal(object)   # EvaluationResult
    collision_occurred = Signal(object) # CollisionEvent
    boost_activated = Signal(object)    # BoostEvent
    boost_lapsed = Signal()

    # ============ Input ============
    lane_change_requested = Signal(int)     # -1 up, +1 down
    answer_selected = Signal(str)           # answer_id

    # ============ System Events ============
    content_unavailable = Signal(str)   # reason

    def __init__(self):
        super().__init__()

    def request_lane_change(self, direction: int) -> None:
        """Convenience method for input sources."""
        self.lane_change_requested.emit(direction)

    def select_answer(self, answer_id: str) -> None:
        """Convenience method for input sources."""
        self.answer_selected.emit(answer_id)
