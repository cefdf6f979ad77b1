from .flashcards import (
    Difficulty,
    Flashcard,
    FlashcardBatch,
    GeneratedFlashcard,
    GenerationRequest,
    GenerationResult,
)

__all__ = [
    "Difficulty",
    "Flashcard",
    "FlashcardBatch",
    "GeneratedFlashcard",
    "GenerationRequest",
    "GenerationResult",
]
