"""
Rhyme Racer Application Controller

Top-level controller that wires together all application components.
"""

import logging
from typing import Optional

from PySide6.QtCore import QObject, Qt

from config import GameSettings, GAME_SETTINGS
from engine.clock import Clock, BeatClock
from engine.round_controller import RoundController
from services.content import ContentSource, JsonContentSource
from services.event_bus import EventBus


logger = logging.getLogger(__name__)


class RhymeRacerApp(QObject):
    """
    Top-level application controller.
    Wires a round controller to the event bus.

    Input arrives on the bus and is queued onto the event loop, so taps
    and lane changes are handled between ticks and beats, never inside
    them.
    """

    def __init__(self, content: Optional[ContentSource] = None,
                 clock: Optional[Clock] = None,
                 settings: GameSettings = GAME_SETTINGS,
                 event_bus: Optional[EventBus] = None,
                 queued_input: bool = True):
        super().__init__()

        self.settings = settings
        self.event_bus = event_bus or EventBus()
        self.content = content or JsonContentSource()
        self.clock = clock or BeatClock(
            tick_interval_ms=settings.timing.tick_interval_ms,
            beat_interval_ms=settings.timing.beat_interval_ms,
        )
        self._input_connection = (
            Qt.ConnectionType.QueuedConnection if queued_input
            else Qt.ConnectionType.DirectConnection
        )

        # Active round controller (created per round)
        self.controller: Optional[RoundController] = None

    def create_round(self, seed: int = 0) -> RoundController:
        """
        Create a round controller and wire it to the event bus.

        Args:
            seed: Seed for the round's spawn stream

        Returns:
            The created RoundController (not yet started)
        """
        if self.controller is not None:
            self._unwire(self.controller)

        controller = RoundController(self.clock, self.content, seed=seed, settings=self.settings)

        # Wire up signals to event bus
        controller.state_changed.connect(self.event_bus.state_changed.emit)
        controller.round_started.connect(self.event_bus.round_started.emit)
        controller.round_ended.connect(self.event_bus.round_ended.emit)
        controller.results_ready.connect(self.event_bus.results_ready.emit)
        controller.snapshot_updated.connect(self.event_bus.snapshot_updated.emit)
        controller.beat_pulsed.connect(self.event_bus.beat_pulsed.emit)
        controller.prompt_changed.connect(self.event_bus.prompt_changed.emit)
        controller.answer_evaluated.connect(self.event_bus.answer_evaluated.emit)
        controller.collision_occurred.connect(self.event_bus.collision_occurred.emit)
        controller.boost_activated.connect(self.event_bus.boost_activated.emit)
        controller.boost_lapsed.connect(self.event_bus.boost_lapsed.emit)
        controller.content_unavailable.connect(self.event_bus.content_unavailable.emit)

        # Input from the bus into the controller
        self.event_bus.lane_change_requested.connect(controller.change_lane, self._input_connection)
        self.event_bus.answer_selected.connect(controller.select_answer, self._input_connection)

        self.controller = controller
        logger.info("Round created with seed %d", seed)
        return controller

    def _unwire(self, controller: RoundController) -> None:
        controller.force_end()
        self.event_bus.lane_change_requested.disconnect(controller.change_lane)
        self.event_bus.answer_selected.disconnect(controller.select_answer)

    def start_round(self, seed: int = 0) -> RoundController:
        """Create a fresh round and start it."""
        controller = self.create_round(seed)
        controller.start()
        return controller
