"""
AI email drafting endpoints.
"""

import logging
from functools import lru_cache
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse

from mailcraft import config
from mailcraft.auth import get_current_user
from mailcraft.models.message import SendMessageRequest
from mailcraft.services.gemini_client import GeminiClient

router = APIRouter()

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def _build_gemini_client() -> GeminiClient:
    return GeminiClient(
        config.GEMINI_API_KEY,
        model=config.GEMINI_MODEL,
        thinking_budget=config.GEMINI_THINKING_BUDGET,
    )


def get_gemini_client() -> GeminiClient:
    """
    Shared Gemini client, built on first use.

    Raises:
        HTTPException: 503 if GEMINI_API_KEY is not configured
    """
    try:
        return _build_gemini_client()
    except ValueError as exc:
        logger.error(f"Gemini client unavailable: {exc}")
        raise HTTPException(
            status_code=503,
            detail="AI service unavailable: GEMINI_API_KEY is not configured",
        )


@router.post("/sendMessageWithFile")
async def send_message_with_file(
    body: SendMessageRequest,
    user_id: str = Depends(get_current_user),
    client: GeminiClient = Depends(get_gemini_client),
):
    """
    Send the user's instructions and current email HTML to Gemini.

    Returns the model's reply text and, when the model produced one, the
    rewritten email HTML. Provider failures are returned as 500 with the
    provider's error message.
    """
    result = await client.send_message(body.combined_text(), user_id=user_id)

    if not result.success:
        failure = result.model_dump(mode="json")
        return JSONResponse(
            status_code=500,
            content={"error": failure["error"], "details": failure["details"]},
        )

    return result.model_dump(mode="json", by_alias=True, exclude_defaults=True)


@router.get("/ai/health")
async def ai_health(
    user_id: str = Depends(get_current_user),
    client: GeminiClient = Depends(get_gemini_client),
):
    """Probe Gemini with a trivial prompt."""
    return {"healthy": await client.check_health()}


@router.get("/ai/model")
async def ai_model_info(
    model: Optional[str] = Query(None),
    user_id: str = Depends(get_current_user),
    client: GeminiClient = Depends(get_gemini_client),
):
    """Ask the configured (or given) model to describe its capabilities."""
    return await client.get_model_info(model)
