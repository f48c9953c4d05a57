"""
Rhyme Racer Domain Models

Dataclasses for live track state and pydantic schemas for content
and final results.
"""

from models.round import RoundState, Outcome, Feedback, PromptCategory
from models.entities import PlayerState, Obstacle, TimingZone
from models.prompt import AnswerOption
from models.schemas import Prompt, PromptPack, ScoreRecord

__all__ = [
    "RoundState",
    "Outcome",
    "Feedback",
    "PromptCategory",
    "PlayerState",
    "Obstacle",
    "TimingZone",
    "AnswerOption",
    "Prompt",
    "PromptPack",
    "ScoreRecord",
]
