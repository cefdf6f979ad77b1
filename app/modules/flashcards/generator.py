"""Flashcard provider using pydantic-ai.

This module builds the prompt for a generation request and exposes
``generate_flashcards_with_agent``, a single structured-output call against
the configured model provider (Google Gemini, Anthropic or OpenRouter).
Imports for the LLM provider are kept lazy to avoid import-time errors when
credentials are missing. Retrying is left to the caller: the agent itself is
built with ``retries=0``.
"""

from __future__ import annotations

from typing import Awaitable, Callable

from pydantic_ai import Agent

from app.core.config import settings
from app.modules.flashcards.models.flashcards import (
    Difficulty,
    Flashcard,
    FlashcardBatch,
    GeneratedFlashcard,
    MIN_ANSWER_LENGTH,
    MIN_QUESTION_LENGTH,
)

# A provider takes the rendered prompt and returns raw flashcards.
Provider = Callable[[str], Awaitable[list[Flashcard]]]


def _build_google_model():
    """Build Google Gemini model for pydantic-ai (lazy import)."""
    from pydantic_ai.models.google import GoogleModel
    from pydantic_ai.providers.google import GoogleProvider

    provider = GoogleProvider(api_key=settings.gemini_api_key)
    return GoogleModel(settings.google_model, provider=provider)


def _build_anthropic_model():
    """Build Anthropic Claude model for pydantic-ai (lazy import)."""
    from pydantic_ai.models.anthropic import AnthropicModel
    from pydantic_ai.providers.anthropic import AnthropicProvider

    provider = AnthropicProvider(api_key=settings.anthropic_api_key)
    return AnthropicModel(settings.anthropic_model, provider=provider)


def _build_openrouter_model():
    """Build OpenRouter model via OpenAI-compatible provider (lazy import)."""
    from pydantic_ai.models.openai import OpenAIChatModel
    from pydantic_ai.providers.openai import OpenAIProvider

    if not settings.openrouter_api_key:
        raise RuntimeError(
            "OpenRouter API key not configured. Set OPENROUTER_API_KEY in your environment."
        )

    provider = OpenAIProvider(
        api_key=settings.openrouter_api_key,
        base_url="https://openrouter.ai/api/v1",
    )
    return OpenAIChatModel(settings.openrouter_model, provider=provider)


def _build_model_by_settings():
    provider = (settings.model_provider or "google").lower()
    if provider == "openrouter":
        return _build_openrouter_model()
    if provider == "anthropic":
        return _build_anthropic_model()
    return _build_google_model()


SYSTEM_PROMPT = (
    "You are an expert educator creating high-quality flashcards for students. "
    "Return a single JSON object that validates as FlashcardBatch: {flashcards}. "
    "Each flashcard has {question, answer} in plain text, no markdown. "
    "No extra keys or commentary; do not include code fences."
)

_DIFFICULTY_GUIDELINES = {
    Difficulty.BEGINNER: (
        "- Use simple, straightforward questions\n"
        "  - Focus on basic concepts and definitions\n"
        "  - Keep answers brief and clear"
    ),
    Difficulty.INTERMEDIATE: (
        "- Include some application and analysis questions\n"
        "  - Mix definitions with conceptual understanding\n"
        "  - Answers can be more detailed"
    ),
    Difficulty.ADVANCED: (
        "- Include complex, multi-step questions\n"
        "  - Focus on synthesis and evaluation\n"
        "  - Encourage critical thinking and deeper analysis"
    ),
}
_DEFAULT_GUIDELINES = "- Balance between recall and understanding"


def difficulty_guidelines(difficulty: Difficulty | str) -> str:
    try:
        return _DIFFICULTY_GUIDELINES[Difficulty(difficulty)]
    except ValueError:
        return _DEFAULT_GUIDELINES


def build_prompt(topic: str, count: int, difficulty: Difficulty | str) -> str:
    level = difficulty.value if isinstance(difficulty, Difficulty) else difficulty
    return (
        f"Generate exactly {int(count)} flashcards about: \"{topic}\"\n\n"
        "Requirements:\n"
        f"- Difficulty level: {level}\n"
        "- Each flashcard must have a clear, specific question\n"
        "- Answers should be concise but complete\n"
        "- Questions should test understanding, not just memorization\n"
        "- Avoid ambiguous or trick questions\n"
        "- Use proper grammar and spelling\n"
        f"- For {level} level:\n"
        f"  {difficulty_guidelines(difficulty)}\n\n"
        "Focus on creating educational value and clear learning objectives."
    )


async def generate_flashcards_with_agent(prompt: str) -> list[Flashcard]:
    """Run one structured-output call against the configured provider."""
    model = _build_model_by_settings()
    agent: Agent[None, FlashcardBatch] = Agent[None, FlashcardBatch](
        model=model,
        output_type=FlashcardBatch,
        system_prompt=SYSTEM_PROMPT,
        retries=0,
        model_settings={"temperature": settings.generation.temperature},
    )
    res = await agent.run(prompt)
    return list(res.output.flashcards or [])


def postprocess(cards: list[Flashcard], count: int) -> list[GeneratedFlashcard]:
    """Strip whitespace, drop cards under the minimum lengths, trim to ``count``."""
    clean_cards: list[GeneratedFlashcard] = []
    for c in cards or []:
        q = (c.question or "").strip()
        a = (c.answer or "").strip()
        if len(q) >= MIN_QUESTION_LENGTH and len(a) >= MIN_ANSWER_LENGTH:
            clean_cards.append(GeneratedFlashcard(question=q, answer=a))

    return clean_cards[: max(0, int(count))]
