"""Entry points composed from the embedding client, evaluator and dispatcher.

Request-style operations (used by the FastAPI routes and the Cloud Functions):
    describe_image_from_url   {imageUrl} -> {description}
    text_embedding            {text}     -> {embedding}
    image_embedding           {imageUrl} -> {embedding, generatedDescription}

Event-style operation:
    on_found_item_created(item_id, data) -> TriggerReport   (never raises)

Each request operation runs its external calls in worker threads under a
single deadline; the short one for text-only work, the long one when an
image is transferred.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Awaitable, Dict, List, Optional, Tuple

from pydantic import ValidationError as SchemaError

from config import settings
from app.domain.errors import EvaluationError, UpstreamError, ValidationError
from app.models.items import FoundItem
from app.models.matching import (
    DescriptionResponse, EmbeddingResponse, ImageEmbeddingResponse, ImageUrlRequest, TextRequest,
)
from app.scripts.logging_config import get_logger, log_match_event
from . import embeddings, match_evaluator, media_store, notification_dispatcher

logger = get_logger("ingress")


@dataclass
class TriggerReport:
    item_id: str
    notifications: int = 0
    queued: int = 0
    failed: List[Tuple[str, str]] = field(default_factory=list)
    error: Optional[str] = None


def error_status(exc: Exception) -> int:
    return 400 if isinstance(exc, ValidationError) else 500


def schema_error_message(errors: List[Dict[str, Any]]) -> str:
    """First pydantic error as a client-facing message naming the field."""
    if not errors:
        return "invalid request body"
    first = errors[0]
    if first.get("type") == "json_invalid":
        return "request body is not valid JSON"
    loc = [str(p) for p in first.get("loc", ())]
    if loc and loc[0] == "body" and len(loc) > 1:
        loc = loc[1:]
    name = ".".join(loc) or "body"
    if first.get("type") == "missing":
        return f"{name} is required"
    return f"{name}: {first.get('msg', 'invalid value')}"


def _require(value: Optional[str], name: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{name} is required")
    return value


async def _within(timeout: float, name: str, coro: Awaitable[Any]) -> Any:
    """One deadline for a whole operation, however many calls it makes."""
    try:
        return await asyncio.wait_for(coro, timeout=timeout)
    except asyncio.TimeoutError as e:
        raise UpstreamError(f"{name} timed out after {timeout:g}s") from e


async def _describe(image_url: str) -> DescriptionResponse:
    data = await asyncio.to_thread(media_store.download_image, image_url)
    description = await asyncio.to_thread(embeddings.describe_image, data)
    return DescriptionResponse(description=description)


async def _embed_image(image_url: str) -> ImageEmbeddingResponse:
    data = await asyncio.to_thread(media_store.download_image, image_url)
    vec, description = await asyncio.to_thread(embeddings.embed_image, data)
    return ImageEmbeddingResponse(embedding=vec, generatedDescription=description)


async def describe_image_from_url(req: ImageUrlRequest) -> DescriptionResponse:
    image_url = _require(req.imageUrl, "imageUrl")
    return await _within(settings.IMAGE_REQUEST_TIMEOUT, "image description", _describe(image_url))


async def text_embedding(req: TextRequest) -> EmbeddingResponse:
    text = _require(req.text, "text")
    vec = await _within(settings.TEXT_REQUEST_TIMEOUT, "text embedding", asyncio.to_thread(embeddings.embed_text, text))
    return EmbeddingResponse(embedding=vec)


async def image_embedding(req: ImageUrlRequest) -> ImageEmbeddingResponse:
    image_url = _require(req.imageUrl, "imageUrl")
    return await _within(settings.IMAGE_REQUEST_TIMEOUT, "image embedding", _embed_image(image_url))


async def on_found_item_created(
    item_id: str,
    data: Optional[Dict],
    load_alerts: Optional[match_evaluator.AlertLoader] = None,
    enqueue: Optional[notification_dispatcher.Enqueue] = None,
) -> TriggerReport:
    """Handle a new found_items document. Failures are logged, never raised,
    so the event platform does not keep re-delivering an unrecoverable event."""
    report = TriggerReport(item_id=item_id)
    if data is None:
        return report
    log_match_event("match_pass_start", {"item_id": item_id, "has_embedding": bool(data.get("embedding"))})

    try:
        found_item = FoundItem.model_validate({**data, "id": item_id})
    except SchemaError as e:
        report.error = f"invalid found item record: {e.errors()[:1]}"
        logger.error("found_item_invalid item=%s err=%s", item_id, report.error)
        return report

    try:
        requests = await asyncio.to_thread(match_evaluator.evaluate_found_item, found_item, load_alerts)
    except EvaluationError as e:
        report.error = str(e)
        logger.error("Error checking matches: item=%s err=%s", item_id, e)
        return report
    except Exception as e:
        report.error = f"match pass failed: {e}"
        logger.exception("Error checking matches: item=%s", item_id)
        return report

    report.notifications = len(requests)
    dispatch = await notification_dispatcher.dispatch(requests, enqueue=enqueue)
    report.queued = len(dispatch.queued)
    report.failed = dispatch.failed
    return report
