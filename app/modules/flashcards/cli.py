from __future__ import annotations

import argparse
import json
import sys

from pydantic import ValidationError

from app.modules.flashcards.errors import ClassifiedFailure
from app.modules.flashcards.main import FlashcardsGenerator
from app.modules.flashcards.models.flashcards import Difficulty, GenerationRequest


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="flashcards-gen", description="Flashcards generator CLI"
    )
    sub = parser.add_subparsers(dest="cmd", required=True)

    g = sub.add_parser("generate", help="Generate a batch of flashcards for a topic")
    g.add_argument("--topic", "-t", required=True, help="Topic of the flashcards")
    g.add_argument("--count", "-n", type=int, default=10, help="Number of cards")
    g.add_argument(
        "--difficulty",
        "-d",
        choices=[d.value for d in Difficulty],
        default=Difficulty.INTERMEDIATE.value,
    )
    g.add_argument(
        "--no-fallback",
        action="store_true",
        help="Fail instead of returning placeholder cards",
    )
    g.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress events on stderr",
    )

    args = parser.parse_args(argv)
    if args.cmd == "generate":
        # progress goes to stderr so the JSON on stdout stays clean
        def _on_event(event: str, data: dict) -> None:
            if not args.quiet:
                print(f"[{event}] {json.dumps(data)}", file=sys.stderr, flush=True)

        try:
            request = GenerationRequest(
                topic=args.topic, count=args.count, difficulty=args.difficulty
            )
        except ValidationError as e:
            parser.error(e.errors()[0]["msg"])
        svc = FlashcardsGenerator(on_event=_on_event)
        try:
            result = svc.generate_sync(request, enable_fallback=not args.no_fallback)
        except ClassifiedFailure as e:
            print(json.dumps(e.to_dict(), indent=2))
            return 1
        print(json.dumps(result.model_dump(mode="json"), indent=2))
        return 0

    parser.print_help()
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
