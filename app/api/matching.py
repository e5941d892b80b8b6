from typing import Awaitable

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from app.models.matching import (
    DescriptionResponse, EmbeddingResponse, ErrorResponse, ImageEmbeddingResponse, ImageUrlRequest, TextRequest,
)
from app.services import ingress
from app.scripts.logging_config import get_logger

logger = get_logger("api.matching")

router = APIRouter(prefix="/ai", tags=["ai"])

_ERRORS = {400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}


async def _respond(op: str, pending: Awaitable[BaseModel]):
    try:
        return await pending
    except Exception as e:
        status = ingress.error_status(e)
        if status >= 500:
            logger.error("[%s] failed type=%s err=%s", op, type(e).__name__, e)
        else:
            logger.info("[%s] rejected: %s", op, e)
        return JSONResponse(status_code=status, content={"error": str(e)})


@router.post("/image-description", response_model=DescriptionResponse, responses=_ERRORS)
async def image_description(req: ImageUrlRequest):
    return await _respond("image-description", ingress.describe_image_from_url(req))


@router.post("/text-embedding", response_model=EmbeddingResponse, responses=_ERRORS)
async def text_embedding(req: TextRequest):
    return await _respond("text-embedding", ingress.text_embedding(req))


@router.post("/image-embedding", response_model=ImageEmbeddingResponse, responses=_ERRORS)
async def image_embedding(req: ImageUrlRequest):
    return await _respond("image-embedding", ingress.image_embedding(req))
