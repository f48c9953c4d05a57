"""
Rhyme Racer Round Engine

Core simulation for a Rhyme Racer round.
This module contains no GUI dependencies.
"""

from engine.clock import Clock, BeatClock, ManualClock, ScheduledCall
from engine.track import TrackModel, TrackUpdate
from engine.spawner import Spawner, SpawnPlan
from engine.collision import CollisionDetector, CollisionEvent
from engine.prompt_slot import PromptSlot
from engine.evaluator import AnswerEvaluator, EvaluationResult
from engine.boost import ComboBoost, BoostEvent
from engine.scoring import ScoreAccumulator, CategoryTally, percentage, whole_metres
from engine.round_controller import (
    RoundController,
    RoundSnapshot,
    InvalidTransitionError,
)

__all__ = [
    "Clock",
    "BeatClock",
    "ManualClock",
    "ScheduledCall",
    "TrackModel",
    "TrackUpdate",
    "Spawner",
    "SpawnPlan",
    "CollisionDetector",
    "CollisionEvent",
    "PromptSlot",
    "AnswerEvaluator",
    "EvaluationResult",
    "ComboBoost",
    "BoostEvent",
    "ScoreAccumulator",
    "CategoryTally",
    "percentage",
    "whole_metres",
    "RoundController",
    "RoundSnapshot",
    "InvalidTransitionError",
]
