"""Axiom 요청 로깅 미들웨어.

Axiom request logging middleware.
Each API call is sent to Axiom as one structured event: method, path,
parameters, masked body, status and duration and, for error
responses, the ``detail`` message. Without an Axiom token the middleware
passes requests straight through.
"""

import json
import logging
import re
import time
from typing import Any

from axiom_py import Client as AxiomClient
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from calcapp.config import settings

logger = logging.getLogger(__name__)

# 마스킹 대상 키 — Keys whose values never leave the server
_SENSITIVE_KEYS = re.compile(
    r"(password|passwd|secret|token|authorization|api_key|apikey|credential)",
    re.IGNORECASE,
)

# 로깅 제외 경로 — Paths excluded from logging
_SKIP_PATHS: frozenset[str] = frozenset({"/health", "/docs", "/redoc", "/openapi.json"})

# 본문을 읽는 메서드 — Methods whose JSON body is captured
_BODY_METHODS: frozenset[str] = frozenset({"POST", "PUT", "PATCH"})

_MAX_DETAIL: int = 500


def mask(data: Any, depth: int = 0) -> Any:
    """민감 필드 마스킹 — Recursively replace sensitive values with ``***``."""
    if depth > 5:
        return "..."
    if isinstance(data, dict):
        return {
            key: "***" if _SENSITIVE_KEYS.search(str(key)) else mask(value, depth + 1)
            for key, value in data.items()
        }
    if isinstance(data, list):
        return [mask(item, depth + 1) for item in data[:20]]
    if isinstance(data, str) and len(data) > 2000:
        return data[:2000] + "...(truncated)"
    return data


async def _read_json_body(request: Request) -> Any:
    """요청 본문 (JSON만) — Masked JSON body, a marker for other payloads."""
    body: bytes = await request.body()
    if not body:
        return None
    if "multipart/form-data" in request.headers.get("content-type", ""):
        return "(multipart body)"
    try:
        return mask(json.loads(body))
    except (json.JSONDecodeError, UnicodeDecodeError):
        return "(non-json body)"


def _error_detail(body: bytes) -> str:
    """에러 응답 사유 추출 — ``detail`` of a JSON error body, else the raw text."""
    try:
        data: Any = json.loads(body)
        detail: Any = data.get("detail", data) if isinstance(data, dict) else data
    except (json.JSONDecodeError, UnicodeDecodeError):
        detail = body.decode("utf-8", errors="replace")
    text: str = detail if isinstance(detail, str) else json.dumps(detail, default=str)
    return text if len(text) <= _MAX_DETAIL else text[:_MAX_DETAIL] + "..."


class AxiomLoggingMiddleware(BaseHTTPMiddleware):
    """모든 API 요청을 Axiom에 기록하는 미들웨어.

    Middleware that records every API request in Axiom.
    """

    def __init__(self, app: Any) -> None:
        super().__init__(app)
        self._dataset: str = settings.AXIOM_DATASET
        self._client: AxiomClient | None = None
        if settings.AXIOM_API_TOKEN and settings.AXIOM_DATASET:
            self._client = AxiomClient(token=settings.AXIOM_API_TOKEN)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if self._client is None or request.url.path in _SKIP_PATHS:
            return await call_next(request)

        started: float = time.perf_counter()
        event: dict[str, Any] = {
            "method": request.method,
            "path": request.url.path,
            "status_code": 500,
        }
        if request.query_params:
            event["query_params"] = mask(dict(request.query_params))
        if request.method in _BODY_METHODS:
            body: Any = await _read_json_body(request)
            if body is not None:
                event["request_body"] = body

        try:
            response: Response = await call_next(request)
            event["status_code"] = response.status_code
            if response.status_code >= 400:
                response = await self._capture_error(response, event)
        except Exception as exc:
            event["error"] = f"{type(exc).__name__}: {str(exc)[:300]}"
            raise
        finally:
            event["duration_ms"] = round((time.perf_counter() - started) * 1000, 2)
            if request.path_params:
                event["path_params"] = dict(request.path_params)
            await self._send(event)

        return response

    async def _capture_error(self, response: Response, event: dict[str, Any]) -> Response:
        """에러 본문을 읽고 응답을 재구성 — Read the error body and rebuild the response."""
        body: bytes = b""
        async for chunk in response.body_iterator:
            body += chunk if isinstance(chunk, bytes) else chunk.encode("utf-8")
        event["error"] = _error_detail(body)
        return Response(
            content=body,
            status_code=response.status_code,
            headers=dict(response.headers),
            media_type=response.media_type,
        )

    async def _send(self, event: dict[str, Any]) -> None:
        """Axiom 전송 — A failed ingest is logged and never fails the request."""
        try:
            await run_in_threadpool(self._client.ingest_events, self._dataset, [event])
        except Exception as exc:
            logger.warning("Axiom ingest failed for %s %s: %s", event["method"], event["path"], exc)
