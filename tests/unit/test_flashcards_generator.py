import asyncio
from unittest.mock import MagicMock

import pytest
from pydantic import ValidationError

from app.modules.flashcards.errors import ClassifiedFailure, FailureKind
from app.modules.flashcards.fallback import is_placeholder
from app.modules.flashcards.main import FlashcardsGenerator, min_acceptable
from app.modules.flashcards.models.flashcards import Difficulty, GenerationRequest
from tests.helpers import make_cards


def _request(count=10, topic="Photosynthesis", difficulty="intermediate"):
    return GenerationRequest(topic=topic, count=count, difficulty=difficulty)


def _generator(provider, fake_sleep, **kwargs):
    kwargs.setdefault("max_attempts", 3)
    kwargs.setdefault("timeout_ms", 30000)
    kwargs.setdefault("base_delay", 1.0)
    kwargs.setdefault("min_accept_ratio", 0.5)
    kwargs.setdefault("enable_fallback", True)
    return FlashcardsGenerator(provider=provider, sleep=fake_sleep, **kwargs)


def test_min_acceptable_rounds_up():
    assert min_acceptable(10, 0.5) == 5
    assert min_acceptable(7, 0.5) == 4
    assert min_acceptable(1, 0.5) == 1


class TestRequestValidation:
    def test_defaults(self):
        req = GenerationRequest(topic="  Rust  ")
        assert req.topic == "Rust"
        assert req.count == 10
        assert req.difficulty is Difficulty.INTERMEDIATE

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"topic": ""},
            {"topic": "   "},
            {"topic": "Rust", "count": 0},
            {"topic": "Rust", "count": 101},
            {"topic": "Rust", "difficulty": "expert"},
        ],
    )
    def test_rejects_invalid(self, kwargs):
        with pytest.raises(ValidationError):
            GenerationRequest(**kwargs)

    def test_is_immutable(self):
        req = GenerationRequest(topic="Rust")
        with pytest.raises(ValidationError):
            req.count = 3


class TestOrchestrator:
    @pytest.mark.asyncio
    async def test_full_success(self, provider_factory, fake_sleep):
        provider = provider_factory(make_cards(10))
        result = await _generator(provider, fake_sleep).generate_result(_request())

        assert result.count == 10
        assert result.fallback_used is False
        assert result.attempts == 1
        assert fake_sleep.delays == []

    @pytest.mark.asyncio
    async def test_prompt_sent_to_provider(self, provider_factory, fake_sleep):
        provider = provider_factory(make_cards(3))
        await _generator(provider, fake_sleep).generate(
            _request(count=3, topic="Graph theory", difficulty="beginner")
        )

        prompt = provider.await_args.args[0]
        assert '"Graph theory"' in prompt
        assert "exactly 3 flashcards" in prompt
        assert "Difficulty level: beginner" in prompt

    @pytest.mark.asyncio
    async def test_retryable_failures_then_success(self, provider_factory, fake_sleep):
        provider = provider_factory(
            Exception("Rate limit exceeded (429)"), Exception("fetch failed"), make_cards(10)
        )
        on_event = MagicMock()
        result = await _generator(provider, fake_sleep, on_event=on_event).generate_result(
            _request()
        )

        assert result.count == 10
        assert result.fallback_used is False
        assert result.attempts == 3
        assert fake_sleep.delays == [1.0, 2.0]
        events = [c.args[0] for c in on_event.call_args_list]
        assert events == ["retry", "retry"]

    @pytest.mark.asyncio
    async def test_half_count_is_accepted_with_warning(self, provider_factory, fake_sleep):
        provider = provider_factory(make_cards(5))
        on_event = MagicMock()
        result = await _generator(provider, fake_sleep, on_event=on_event).generate_result(
            _request(count=10)
        )

        assert result.count == 5
        assert result.is_partial
        assert provider.await_count == 1
        on_event.assert_called_once_with("partial", {"requested": 10, "received": 5})

    @pytest.mark.asyncio
    async def test_under_count_is_retried(self, provider_factory, fake_sleep):
        provider = provider_factory(make_cards(4), make_cards(10))
        result = await _generator(provider, fake_sleep).generate_result(_request(count=10))

        assert result.count == 10
        assert provider.await_count == 2
        assert fake_sleep.delays == [1.0]

    @pytest.mark.asyncio
    async def test_surplus_is_trimmed(self, provider_factory, fake_sleep):
        provider = provider_factory(make_cards(15))
        cards = await _generator(provider, fake_sleep).generate(_request(count=10))
        assert len(cards) == 10

    @pytest.mark.asyncio
    async def test_persistent_under_count_falls_back(self, provider_factory, fake_sleep):
        provider = provider_factory(make_cards(4), make_cards(4), make_cards(4))
        result = await _generator(provider, fake_sleep).generate_result(_request(count=10))

        assert result.fallback_used is True
        assert result.count == 10
        assert provider.await_count == 3

    @pytest.mark.asyncio
    async def test_network_exhaustion_falls_back(self, provider_factory, fake_sleep):
        provider = provider_factory(*[ConnectionError("network unreachable")] * 3)
        on_event = MagicMock()
        result = await _generator(provider, fake_sleep, on_event=on_event).generate_result(
            _request(count=10, topic="Photosynthesis")
        )

        assert result.fallback_used is True
        assert result.attempts == 3
        assert len(result.flashcards) == 10
        for card in result.flashcards:
            assert "Photosynthesis" in card.question
            assert is_placeholder(card)
        assert fake_sleep.delays == [1.0, 2.0]
        assert on_event.call_args_list[-1].args[0] == "fallback"

    @pytest.mark.asyncio
    async def test_network_exhaustion_without_fallback(self, provider_factory, fake_sleep):
        provider = provider_factory(*[ConnectionError("network unreachable")] * 3)
        gen = _generator(provider, fake_sleep, enable_fallback=False)

        with pytest.raises(ClassifiedFailure) as exc_info:
            await gen.generate(_request())

        failure = exc_info.value
        assert failure.kind is FailureKind.UNKNOWN
        assert failure.retryable is False
        assert failure.message == "Failed after 3 attempts: network unreachable"
        assert failure.last_failure.kind is FailureKind.NETWORK_ERROR

    @pytest.mark.asyncio
    async def test_per_call_flag_overrides_default(self, provider_factory, fake_sleep):
        provider = provider_factory(*[Exception("boom")] * 3)
        gen = _generator(provider, fake_sleep, enable_fallback=True)

        with pytest.raises(ClassifiedFailure):
            await gen.generate(_request(), enable_fallback=False)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("enable_fallback", [True, False])
    async def test_auth_error_never_falls_back(
        self, provider_factory, fake_sleep, enable_fallback
    ):
        provider = provider_factory(Exception("Invalid API key"), make_cards(10))
        on_event = MagicMock()
        gen = _generator(
            provider, fake_sleep, enable_fallback=enable_fallback, on_event=on_event
        )

        with pytest.raises(ClassifiedFailure) as exc_info:
            await gen.generate(_request())

        assert exc_info.value.kind is FailureKind.AUTH_ERROR
        assert provider.await_count == 1
        assert fake_sleep.delays == []
        on_event.assert_called_once()
        assert on_event.call_args.args[0] == "failed"

    @pytest.mark.asyncio
    async def test_timeouts_exhaust_and_fall_back(self, fake_sleep):
        async def slow_provider(prompt):
            await asyncio.sleep(5)
            return make_cards(10)

        gen = _generator(slow_provider, fake_sleep, max_attempts=2, timeout_ms=20)
        result = await gen.generate_result(_request(count=4))

        assert result.fallback_used is True
        assert result.count == 4
        assert fake_sleep.delays == [1.0]

    def test_generate_sync(self, provider_factory, fake_sleep):
        provider = provider_factory(make_cards(2))
        result = _generator(provider, fake_sleep).generate_sync(_request(count=2))
        assert result.count == 2
