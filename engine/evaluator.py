"""
Answer Evaluator - Classifies a tap and applies its speed and score effects.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from config import SpeedSettings, SPEED_SETTINGS
from engine.scoring import ScoreAccumulator
from models.entities import PlayerState
from models.prompt import AnswerOption
from models.round import Outcome, PromptCategory


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EvaluationResult:
    """Result of evaluating one answer tap."""
    outcome: Outcome
    answer_id: str
    word: str
    zone_occupied: bool
    speed_delta: float
    speed_after: float
    category: Optional[PromptCategory] = None
    response_ms: Optional[float] = None
    message: str = ""


class AnswerEvaluator:
    """
    Turns a selected answer and the zone state into an Outcome.

    Speed changes by a fixed amount per outcome, clamped to the player's
    bounds. Combo and boost are left to the ComboBoost machine.
    """

    def __init__(self, settings: SpeedSettings = SPEED_SETTINGS):
        self.settings = settings
        self._speed_deltas = {
            Outcome.PERFECT: settings.perfect_increment,
            Outcome.GOOD: settings.good_increment,
            Outcome.MISS: -settings.miss_decrement,
        }

    @staticmethod
    def classify(is_correct: bool, zone_occupied: bool) -> Outcome:
        """PERFECT iff correct in zone, GOOD iff correct out of zone, else MISS."""
        if not is_correct:
            return Outcome.MISS
        return Outcome.PERFECT if zone_occupied else Outcome.GOOD

    def speed_delta_for(self, outcome: Outcome) -> float:
        return self._speed_deltas[outcome]

    def evaluate(self, option: AnswerOption, zone_occupied: bool,
                 player: PlayerState, score: ScoreAccumulator,
                 category: Optional[PromptCategory] = None,
                 now_ms: Optional[float] = None) -> EvaluationResult:
        """
        Evaluate a claimed answer.

        Args:
            option: The tapped answer (already taken from the PromptSlot)
            zone_occupied: Whether the player was inside a green zone
            player: Player whose speed is adjusted
            score: Accumulator receiving the attempt
            category: Scoring category of the prompt, if tagged
            now_ms: Clock time of the tap, for response latency

        Returns:
            EvaluationResult describing the outcome and applied speed change
        """
        outcome = self.classify(option.is_correct, zone_occupied)
        applied = player.adjust_speed(self.speed_delta_for(outcome))

        response_ms = None
        if now_ms is not None:
            response_ms = max(0.0, now_ms - option.presented_at_ms)

        score.record_attempt(outcome, category=category, response_ms=response_ms)

        result = EvaluationResult(
            outcome=outcome,
            answer_id=option.answer_id,
            word=option.word,
            zone_occupied=zone_occupied,
            speed_delta=applied,
            speed_after=player.speed,
            category=category,
            response_ms=response_ms,
            message=self._message(outcome, option.word),
        )
        logger.debug("Answer %r -> %s (speed %+.1f)", option.word, outcome.value, applied)
        return result

    @staticmethod
    def _message(outcome: Outcome, word: str) -> str:
        messages = {
            Outcome.PERFECT: f"{word} - Perfect! On the beat",
            Outcome.GOOD: f"{word} - Good rhyme, missed the zone",
            Outcome.MISS: f"{word} - Miss",
        }
        return messages[outcome]
