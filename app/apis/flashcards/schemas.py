from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from app.modules.flashcards.models.flashcards import (
    MAX_FLASHCARDS,
    Difficulty,
    GeneratedFlashcard,
)


class GenerateRequest(BaseModel):
    topic: str = Field(..., min_length=1, description="Topic to generate cards for")
    count: int = Field(default=10, gt=0, le=MAX_FLASHCARDS)
    difficulty: Difficulty = Difficulty.INTERMEDIATE
    enable_fallback: bool = True


class GenerateResponse(BaseModel):
    success: bool
    count: int = 0
    fallback_used: bool = False
    flashcards: list[GeneratedFlashcard] = Field(default_factory=list)
    error: Optional[str] = None
    kind: Optional[str] = None
