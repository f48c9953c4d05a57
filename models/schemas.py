"""
Pydantic schemas for content records and final round results.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from models.round import PromptCategory


# ============ Content Schemas ============

class Prompt(BaseModel):
    """An immutable rhyme prompt supplied by a content source."""
    model_config = ConfigDict(frozen=True)

    prompt_id: str = Field(..., min_length=1)
    text: str = Field(..., min_length=1)
    options: tuple[str, ...] = Field(..., min_length=2)
    correct: str
    category: Optional[PromptCategory] = None

    @field_validator("text")
    @classmethod
    def text_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Prompt text cannot be empty")
        return v.strip()

    @model_validator(mode="after")
    def correct_is_an_option(self) -> "Prompt":
        if self.correct not in self.options:
            raise ValueError(f"Correct answer {self.correct!r} is not among the options")
        if len(set(self.options)) != len(self.options):
            raise ValueError("Prompt options must be unique")
        return self


class PromptPack(BaseModel):
    """A bundle of prompts as stored on disk."""
    name: str = "default"
    prompts: list[Prompt] = Field(default_factory=list)


# ============ Result Schemas ============

class ScoreRecord(BaseModel):
    """Finalized, immutable score for one round."""
    model_config = ConfigDict(frozen=True)

    rhyme_accuracy_score: int = Field(0, ge=0, le=100)
    beat_sync_accuracy: int = Field(0, ge=0, le=100)
    creativity_score: int = Field(0, ge=0, le=100)
    best_combo: int = Field(0, ge=0)

    distance_m: int = Field(0, ge=0)
    total_attempts: int = Field(0, ge=0)
    collisions: int = Field(0, ge=0)
    mean_response_ms: Optional[float] = Field(None, ge=0)

    @property
    def overall_score(self) -> int:
        """Mean of the three percentages, as shown on the results screen."""
        total = self.rhyme_accuracy_score + self.beat_sync_accuracy + self.creativity_score
        return int(total / 3 + 0.5)
