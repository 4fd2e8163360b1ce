"""Client for the answer-generation backend.

The backend takes a question plus prior turns and answers with text and,
optionally, manual pages rendered as images:

    POST {BACKEND_URL}/chat   {"message", "history": [{"role", "content"}], "debug_mode"}
    -> {"answer": str, "images": [{"url", "page", "relevance_score"}]}
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

import httpx
from pydantic import BaseModel, Field

from manualchat.config import get_settings
from manualchat.core.exceptions import InferenceError, InferenceTimeoutError

logger = logging.getLogger(__name__)


class HistoryItem(BaseModel):
    role: str
    content: str


class ChatRequest(BaseModel):
    message: str
    history: list[HistoryItem] = Field(default_factory=list)
    debug_mode: bool = False


class ImageRef(BaseModel):
    url: str
    page: int | None = None
    relevance_score: float | None = None


class ChatResponse(BaseModel):
    answer: str
    images: list[ImageRef] = Field(default_factory=list)


class InferenceClient:
    def __init__(self, base_url: str | None = None, timeout: float | None = None) -> None:
        settings = get_settings()
        self.base_url = (base_url or settings.backend_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.api_timeout / 1000
        self.health_timeout = settings.health_timeout

    async def ask(
        self,
        message: str,
        history: Sequence[HistoryItem] = (),
        debug_mode: bool = False,
    ) -> ChatResponse:
        payload = ChatRequest(message=message, history=list(history), debug_mode=debug_mode)
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.post(f"{self.base_url}/chat", json=payload.model_dump())
        except httpx.TimeoutException as exc:
            logger.warning("Inference backend timed out after %.1fs", self.timeout)
            raise InferenceTimeoutError("Inference backend timed out") from exc
        except httpx.HTTPError as exc:
            logger.error("Inference backend unreachable: %s", exc)
            raise InferenceError("Inference backend unreachable") from exc

        if not 200 <= resp.status_code < 300:
            logger.error("Inference backend returned HTTP %s", resp.status_code)
            raise InferenceError(
                f"Inference backend returned HTTP {resp.status_code}",
                status_code=resp.status_code,
            )

        data = resp.json()
        if debug_mode:
            logger.debug("Backend response: %s", data)
        return ChatResponse.model_validate(data)

    async def health(self) -> dict[str, Any]:
        """Report backend status; never raises."""
        try:
            async with httpx.AsyncClient(timeout=self.health_timeout) as client:
                resp = await client.get(f"{self.base_url}/health")
                data = resp.json()
        except httpx.TimeoutException:
            return {
                "status": "error",
                "message": "Backend health check timed out",
                "backend_url": self.base_url,
            }
        except (httpx.HTTPError, ValueError):
            return {
                "status": "error",
                "message": "Backend unreachable",
                "backend_url": self.base_url,
            }
        return {"status": "ok", "backend": data, "backend_url": self.base_url}
