from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from app.core.config import settings
from app.core.logging import get_logger
from app.modules.flashcards.errors import ClassifiedFailure, FailureKind
from app.modules.flashcards.main import FlashcardsGenerator
from app.modules.flashcards.models.flashcards import GenerationRequest
from .schemas import GenerateRequest, GenerateResponse


router = APIRouter()

logger = get_logger(__name__)

_STATUS_BY_KIND = {
    FailureKind.AUTH_ERROR: status.HTTP_401_UNAUTHORIZED,
    FailureKind.RATE_LIMIT: status.HTTP_429_TOO_MANY_REQUESTS,
    FailureKind.TIMEOUT: status.HTTP_504_GATEWAY_TIMEOUT,
}


def get_generator() -> FlashcardsGenerator:
    return FlashcardsGenerator()


@router.post(
    f"/{settings.app.version}/flashcards/generate",
    response_model=GenerateResponse,
    status_code=status.HTTP_200_OK,
    tags=["flashcards"],
)
async def generate(
    req: GenerateRequest,
    generator: FlashcardsGenerator = Depends(get_generator),
):
    try:
        request = GenerationRequest(
            topic=req.topic, count=req.count, difficulty=req.difficulty
        )
    except ValidationError as e:
        raise HTTPException(
            status_code=422,
            detail=e.errors()[0]["msg"],
        )

    try:
        result = await generator.generate_result(
            request, enable_fallback=req.enable_fallback
        )
    except ClassifiedFailure as e:
        logger.error("Error generating flashcards: %s", e.message)
        body = GenerateResponse(success=False, error=e.message, kind=e.kind.value)
        return JSONResponse(
            status_code=_STATUS_BY_KIND.get(e.kind, status.HTTP_502_BAD_GATEWAY),
            content=body.model_dump(mode="json"),
        )

    return GenerateResponse(
        success=True,
        count=result.count,
        fallback_used=result.fallback_used,
        flashcards=result.flashcards,
    )
