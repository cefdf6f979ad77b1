"""Placeholder flashcards used when the provider cannot be reached.

The cards are basic but valid so a deck can still be created; the answer text
flags them as placeholders so they can be edited or regenerated later.
"""

from __future__ import annotations

from app.modules.flashcards.models.flashcards import GeneratedFlashcard

PLACEHOLDER_MARKER = "This is a placeholder answer"


def generate_fallback_flashcards(topic: str, count: int) -> list[GeneratedFlashcard]:
    return [
        GeneratedFlashcard(
            question=f"Question {i}: What is an important concept related to {topic}?",
            answer=(
                f"{PLACEHOLDER_MARKER} for question {i} about {topic}. "
                "The AI service was temporarily unavailable. "
                "Please edit this card or regenerate the deck."
            ),
        )
        for i in range(1, max(0, int(count)) + 1)
    ]


def is_placeholder(card: GeneratedFlashcard) -> bool:
    return card.answer.startswith(PLACEHOLDER_MARKER)
