"""Shared test doubles."""

from app.modules.flashcards.models.flashcards import Flashcard


def make_cards(n: int) -> list[Flashcard]:
    return [
        Flashcard(question=f"What is concept {i}?", answer=f"Answer number {i}")
        for i in range(1, n + 1)
    ]


class RecordingSleep:
    """Stands in for asyncio.sleep and records the requested delays."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
