from __future__ import annotations

import io
from typing import List, Optional, Tuple

from PIL import Image, UnidentifiedImageError

from config import settings
from app.domain.errors import UpstreamError
from app.scripts.logging_config import get_logger
from .llm_providers import get_llm

logger = get_logger("embeddings")

DEFAULT_MIME_TYPE = "image/jpeg"


def _sniff_mime_type(image_bytes: bytes) -> str:
    try:
        with Image.open(io.BytesIO(image_bytes)) as im:
            return Image.MIME.get(im.format or "", DEFAULT_MIME_TYPE)
    except (UnidentifiedImageError, OSError):
        return DEFAULT_MIME_TYPE


def describe_image(image_bytes: bytes, prompt: Optional[str] = None) -> str:
    """
    Input: raw image bytes
    Output: the description model's text for the image (never blank)
    """
    prompt = prompt or settings.DESCRIPTION_PROMPT
    mime_type = _sniff_mime_type(image_bytes)
    llm = get_llm()
    try:
        text = llm.describe_image(image_bytes, mime_type, prompt)
    except Exception as e:
        logger.error("describe_image failed provider=%s bytes=%d err=%s", llm.name, len(image_bytes), e)
        raise UpstreamError(f"description generation failed: {e}") from e
    if not text or not text.strip():
        raise UpstreamError("description model returned empty content")
    return text.strip()


def embed_text(text: str) -> List[float]:
    llm = get_llm()
    try:
        vec = llm.embed_text(text)
    except Exception as e:
        logger.error("embed_text failed provider=%s chars=%d err=%s", llm.name, len(text), e)
        raise UpstreamError(f"embedding generation failed: {e}") from e
    if not vec:
        raise UpstreamError("embedding model returned an empty vector")
    return [float(v) for v in vec]


def embed_image(image_bytes: bytes) -> Tuple[List[float], str]:
    """Describe the image, then embed the description.

    Images share the text embedding space, so a text-only lost alert can match
    an image-only found item.
    """
    description = describe_image(image_bytes, settings.SEARCH_DESCRIPTION_PROMPT)
    vec = embed_text(description)
    logger.info("embed_image done dim=%d description_chars=%d", len(vec), len(description))
    return vec, description
