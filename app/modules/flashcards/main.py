"""Flashcards service class and simple module entrypoint.

Provides a high-level class that turns a topic into a batch of validated
flashcards. Provider calls are retried with exponential backoff under a
per-attempt deadline; short responses are accepted down to a minimum ratio of
the requested count; when generation cannot recover the service falls back to
placeholder cards, except for authentication failures which always surface.
"""

from __future__ import annotations

import asyncio
import math
from typing import Any, Callable, Optional

from app.core.config import settings
from app.core.logging import get_logger, with_context
from app.modules.flashcards.errors import ClassifiedFailure, FailureKind
from app.modules.flashcards.fallback import generate_fallback_flashcards
from app.modules.flashcards.generator import (
    Provider,
    build_prompt,
    generate_flashcards_with_agent,
    postprocess,
)
from app.modules.flashcards.models.flashcards import (
    Difficulty,
    GeneratedFlashcard,
    GenerationRequest,
    GenerationResult,
)
from app.modules.flashcards.resilience import Sleep, retry_with_backoff

# Observability hook: (event name, payload). Events: retry, partial, fallback, failed.
OnEvent = Callable[[str, dict[str, Any]], None]

logger = get_logger(__name__)


def min_acceptable(count: int, ratio: float) -> int:
    return math.ceil(count * ratio)


class FlashcardsGenerator:
    """Resilient topic -> flashcards generation."""

    def __init__(
        self,
        *,
        provider: Optional[Provider] = None,
        max_attempts: Optional[int] = None,
        timeout_ms: Optional[int] = None,
        base_delay: Optional[float] = None,
        min_accept_ratio: Optional[float] = None,
        enable_fallback: Optional[bool] = None,
        sleep: Sleep = asyncio.sleep,
        on_event: Optional[OnEvent] = None,
    ) -> None:
        cfg = settings.generation
        self.provider: Provider = provider or generate_flashcards_with_agent
        self.max_attempts = max(1, int(max_attempts or cfg.max_attempts))
        self.timeout_ms = int(timeout_ms or cfg.timeout_ms)
        self.base_delay = cfg.base_delay_seconds if base_delay is None else base_delay
        self.min_accept_ratio = (
            cfg.min_accept_ratio if min_accept_ratio is None else min_accept_ratio
        )
        self.enable_fallback = (
            cfg.enable_fallback if enable_fallback is None else enable_fallback
        )
        self.sleep = sleep
        self.on_event = on_event

    def _emit(self, event: str, **data: Any) -> None:
        if self.on_event is not None:
            self.on_event(event, data)

    async def _attempt(
        self, prompt: str, request: GenerationRequest
    ) -> list[GeneratedFlashcard]:
        raw = await self.provider(prompt)
        cards = postprocess(raw, request.count)
        threshold = min_acceptable(request.count, self.min_accept_ratio)
        if len(cards) < threshold:
            raise ClassifiedFailure(
                f"Only generated {len(cards)} of {request.count} requested flashcards",
                FailureKind.VALIDATION_ERROR,
                True,
            )
        return cards

    async def generate_result(
        self,
        request: GenerationRequest,
        *,
        enable_fallback: Optional[bool] = None,
    ) -> GenerationResult:
        """Generate flashcards for ``request`` and report how they were obtained.

        Raises ``ClassifiedFailure`` when fallback is disabled or the failure
        is an authentication problem.
        """
        use_fallback = self.enable_fallback if enable_fallback is None else enable_fallback
        log = with_context(logger, topic=request.topic)
        prompt = build_prompt(request.topic, request.count, request.difficulty)
        attempts = 0

        async def _counted_attempt() -> list[GeneratedFlashcard]:
            nonlocal attempts
            attempts += 1
            return await self._attempt(prompt, request)

        def _on_retry(attempt: int, delay: float, failure: ClassifiedFailure) -> None:
            self._emit(
                "retry",
                attempt=attempt,
                delay_ms=int(delay * 1000),
                kind=failure.kind.value,
                message=failure.message,
            )

        try:
            cards = await retry_with_backoff(
                _counted_attempt,
                max_attempts=self.max_attempts,
                timeout_ms=self.timeout_ms,
                base_delay=self.base_delay,
                sleep=self.sleep,
                on_retry=_on_retry,
            )
        except ClassifiedFailure as failure:
            log.error(
                "Error generating flashcards (%s): %s",
                failure.kind.value,
                failure.message,
            )
            if use_fallback and failure.kind is not FailureKind.AUTH_ERROR:
                log.warning("Using fallback flashcard generation")
                self._emit(
                    "fallback",
                    topic=request.topic,
                    count=request.count,
                    kind=failure.kind.value,
                    message=failure.message,
                )
                return GenerationResult(
                    flashcards=generate_fallback_flashcards(request.topic, request.count),
                    requested=request.count,
                    fallback_used=True,
                    attempts=attempts,
                )
            self._emit("failed", kind=failure.kind.value, message=failure.message)
            raise

        if len(cards) < request.count:
            log.warning(
                "Partial success: Expected %d flashcards, got %d",
                request.count,
                len(cards),
            )
            self._emit("partial", requested=request.count, received=len(cards))

        return GenerationResult(
            flashcards=cards, requested=request.count, attempts=attempts
        )

    async def generate(
        self,
        request: GenerationRequest,
        *,
        enable_fallback: Optional[bool] = None,
    ) -> list[GeneratedFlashcard]:
        result = await self.generate_result(request, enable_fallback=enable_fallback)
        return result.flashcards

    def generate_sync(
        self,
        request: GenerationRequest,
        *,
        enable_fallback: Optional[bool] = None,
    ) -> GenerationResult:
        return asyncio.run(self.generate_result(request, enable_fallback=enable_fallback))


async def generate_flashcards(
    topic: str,
    count: int = 10,
    difficulty: Difficulty | str = Difficulty.INTERMEDIATE,
    *,
    enable_fallback: Optional[bool] = None,
) -> list[GeneratedFlashcard]:
    """Caller-facing entrypoint: a list of flashcards or a ``ClassifiedFailure``."""
    request = GenerationRequest(topic=topic, count=count, difficulty=difficulty)
    return await FlashcardsGenerator().generate(request, enable_fallback=enable_fallback)
