"""Pluggable model provider layer for descriptions and embeddings.

Usage:
  from app.services.llm_providers import get_llm
  llm = get_llm()
  text = llm.describe_image(image_bytes, "image/jpeg", prompt)
  vec = llm.embed_text(text)

Providers:
    - OpenAIProvider: chat completions with image input + embeddings API
    - EchoProvider: deterministic and offline, for tests/local

Add a new provider by implementing BaseLLMProvider.
"""
from __future__ import annotations
from typing import List, Optional
import abc
import base64
import hashlib
import threading
import time

import numpy as np
from openai import OpenAI

from config import settings
from app.scripts.logging_config import get_logger

logger = get_logger("llm")


class BaseLLMProvider(abc.ABC):
    name: str

    @abc.abstractmethod
    def describe_image(self, image_bytes: bytes, mime_type: str, prompt: str) -> str:
        ...

    @abc.abstractmethod
    def embed_text(self, text: str) -> List[float]:
        ...


def _l2_normalize(vec: np.ndarray) -> np.ndarray:
    return vec / (np.linalg.norm(vec) + 1e-9)


def _hash_to_vec(data: bytes, dim: int) -> np.ndarray:
    h = hashlib.sha256(data).digest()
    raw = (h * ((dim // len(h)) + 1))[:dim]
    arr = np.frombuffer(bytes(raw), dtype=np.uint8).astype("float32")
    return _l2_normalize(arr)


class EchoProvider(BaseLLMProvider):
    name = "echo"

    def __init__(self, dim: Optional[int] = None):
        self.dim = dim or settings.EMBEDDING_DIM

    def describe_image(self, image_bytes: bytes, mime_type: str, prompt: str) -> str:
        digest = hashlib.sha256(image_bytes).hexdigest()[:16]
        return f"{mime_type} image {digest} ({len(image_bytes)} bytes)"

    def embed_text(self, text: str) -> List[float]:
        return _hash_to_vec(text.encode("utf-8"), self.dim).tolist()


class OpenAIProvider(BaseLLMProvider):
    name = "openai"

    def __init__(self):
        if not settings.OPENAI_API_KEY:
            raise RuntimeError("OPENAI_API_KEY missing")
        # one client per process; its configuration is read-only after this point
        self.client = OpenAI(api_key=settings.OPENAI_API_KEY, max_retries=0)
        self.vision_model = settings.OPENAI_VISION_MODEL
        self.embedding_model = settings.OPENAI_EMBEDDING_MODEL

    def describe_image(self, image_bytes: bytes, mime_type: str, prompt: str) -> str:
        data_url = f"data:{mime_type};base64,{base64.b64encode(image_bytes).decode('ascii')}"
        messages = [{
            "role": "user",
            "content": [
                {"type": "image_url", "image_url": {"url": data_url}},
                {"type": "text", "text": prompt},
            ],
        }]
        start = time.time()
        resp = self.client.chat.completions.create(
            model=self.vision_model,
            messages=messages,
            timeout=settings.IMAGE_REQUEST_TIMEOUT,
        )
        out = resp.choices[0].message.content if resp.choices else None
        logger.info("llm.describe done model=%s latency=%.2fs chars=%d",
                    self.vision_model, time.time() - start, len(out) if out else 0)
        return out or ""

    def embed_text(self, text: str) -> List[float]:
        start = time.time()
        resp = self.client.embeddings.create(
            model=self.embedding_model,
            input=text,
            timeout=settings.TEXT_REQUEST_TIMEOUT,
        )
        vec = list(resp.data[0].embedding) if resp.data else []
        logger.info("llm.embed done model=%s latency=%.2fs dim=%d",
                    self.embedding_model, time.time() - start, len(vec))
        return vec


_singleton: Optional[BaseLLMProvider] = None
_init_lock = threading.Lock()


def get_llm() -> BaseLLMProvider:
    """Process-wide provider, built on first use and shared read-only afterwards."""
    global _singleton
    if _singleton is not None:
        return _singleton
    with _init_lock:
        if _singleton is not None:
            return _singleton
        provider = settings.LLM_PROVIDER.lower()
        if provider == "openai":
            _singleton = OpenAIProvider()
        elif provider == "echo":
            _singleton = EchoProvider()
        else:
            raise RuntimeError(f"unknown LLM_PROVIDER: {settings.LLM_PROVIDER}")
        logger.info("llm provider initialised name=%s", _singleton.name)
        return _singleton


def reset_llm() -> None:
    """Drop the cached provider (tests / settings reload)."""
    global _singleton
    with _init_lock:
        _singleton = None
