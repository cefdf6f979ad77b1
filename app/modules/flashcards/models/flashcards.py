"""Pydantic models for flashcard generation and validation.

Note: To keep the provider's structured output schema simple and compatible,
``Flashcard``/``FlashcardBatch`` avoid complex constraints (min/max lengths,
formats, etc.). Length rules are enforced post-generation and on the
caller-facing ``GeneratedFlashcard``.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

MIN_QUESTION_LENGTH = 5
MIN_ANSWER_LENGTH = 3
MAX_FLASHCARDS = 100


class Difficulty(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class Flashcard(BaseModel):
    """Simple question/answer flashcard as returned by the provider."""

    question: str
    answer: str


class FlashcardBatch(BaseModel):
    """Structured output requested from the provider."""

    flashcards: list[Flashcard] = Field(default_factory=list)


class GeneratedFlashcard(BaseModel):
    """A validated flashcard handed back to the caller."""

    model_config = ConfigDict(frozen=True)

    question: str = Field(min_length=MIN_QUESTION_LENGTH)
    answer: str = Field(min_length=MIN_ANSWER_LENGTH)


class GenerationRequest(BaseModel):
    """Parameters of a single generation call."""

    model_config = ConfigDict(frozen=True)

    topic: str = Field(..., min_length=1, description="Subject of the flashcards")
    count: int = Field(default=10, gt=0, le=MAX_FLASHCARDS)
    difficulty: Difficulty = Difficulty.INTERMEDIATE

    @field_validator("topic")
    @classmethod
    def _strip_topic(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Topic is required")
        return v


class GenerationResult(BaseModel):
    """Flashcards plus how they were obtained."""

    flashcards: list[GeneratedFlashcard] = Field(default_factory=list)
    requested: int
    fallback_used: bool = False
    attempts: int = 0

    @property
    def count(self) -> int:
        return len(self.flashcards)

    @property
    def is_partial(self) -> bool:
        return not self.fallback_used and self.count < self.requested
