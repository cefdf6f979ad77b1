"""Flashcards module exports."""

from .errors import ClassifiedFailure, FailureKind, classify_error
from .fallback import generate_fallback_flashcards
from .main import FlashcardsGenerator, generate_flashcards
from .models.flashcards import (
    Difficulty,
    GeneratedFlashcard,
    GenerationRequest,
    GenerationResult,
)

__all__ = [
    "ClassifiedFailure",
    "FailureKind",
    "classify_error",
    "generate_fallback_flashcards",
    "FlashcardsGenerator",
    "generate_flashcards",
    "Difficulty",
    "GeneratedFlashcard",
    "GenerationRequest",
    "GenerationResult",
]
