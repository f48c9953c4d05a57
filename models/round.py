"""
Round lifecycle and answer outcome enums for Rhyme Racer.
"""

import enum


class RoundState(enum.Enum):
    """Round lifecycle states. Only the RoundController transitions these."""
    IDLE = "idle"
    RUNNING = "running"
    ENDED = "ended"


class Outcome(enum.Enum):
    """
    Classification of a single answer tap.

    - PERFECT: correct answer while the player sits inside a green zone
    - GOOD: correct answer outside every zone
    - MISS: wrong answer, zone or not
    """
    PERFECT = "perfect"
    GOOD = "good"
    MISS = "miss"

    @property
    def is_success(self) -> bool:
        return self is not Outcome.MISS


class Feedback(enum.Enum):
    """Transient feedback shown to the player after an event."""
    PERFECT = "perfect"
    GOOD = "good"
    MISS = "miss"
    BUMP = "bump"

    @classmethod
    def from_outcome(cls, outcome: Outcome) -> "Feedback":
        return cls(outcome.value)


class PromptCategory(enum.Enum):
    """Scoring categories a prompt may be tagged with."""
    RHYME = "rhyme"
    CREATIVITY = "creativity"
