"""번역 서비스 — DeepL HTTP API 프록시.

Translator Service — Proxies text translation and the language list to
the DeepL HTTP API.

Endpoints used:
    POST {DEEPL_API_URL}/translate   (form: text, target_lang, source_lang)
    GET  {DEEPL_API_URL}/languages   (query: type=target)
"""

import logging
from typing import Any

import httpx

from calcapp.config import settings
from calcapp.schemas.report import LanguageResponse, TranslateRequest, TranslateResponse
from calcapp.utils.exceptions import BadRequestError, UpstreamError

logger = logging.getLogger(__name__)


class TranslatorService:
    """DeepL 번역 프록시 서비스.

    Args:
        transport: 테스트용 httpx 전송 계층 (Optional httpx transport, used by the tests)
    """

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.transport: httpx.AsyncBaseTransport | None = transport
        self._languages: list[LanguageResponse] | None = None

    def _client(self) -> httpx.AsyncClient:
        if not settings.DEEPL_API_KEY:
            raise BadRequestError("The translation service is not configured")
        return httpx.AsyncClient(
            base_url=settings.DEEPL_API_URL.rstrip("/"),
            headers={"Authorization": f"DeepL-Auth-Key {settings.DEEPL_API_KEY}"},
            timeout=10.0,
            transport=self.transport,
        )

    async def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        """API 요청 — Send a request and decode the JSON body.

        Raises:
            BadRequestError: API 키 없음 (No API key configured)
            UpstreamError: 전송 오류 또는 오류 응답 (Transport failure or error status)
        """
        async with self._client() as client:
            try:
                response: httpx.Response = await client.request(method, url, **kwargs)
                response.raise_for_status()
                return response.json()
            except httpx.HTTPStatusError as exc:
                message: str = self._error_message(exc.response)
                logger.warning("Translation API error %d: %s", exc.response.status_code, message)
                raise UpstreamError(message) from exc
            except (httpx.TransportError, ValueError) as exc:
                logger.warning("Translation API unreachable: %s", exc)
                raise UpstreamError("The translation service is unavailable") from exc

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body: Any = response.json()
        except ValueError:
            body = None
        message = body.get("message") if isinstance(body, dict) else None
        return message or f"Translation service error ({response.status_code})"

    async def translate(self, data: TranslateRequest) -> TranslateResponse:
        """텍스트 번역 — Translate a text; the source language is detected when omitted."""
        form: dict[str, str] = {"text": data.text, "target_lang": data.to.upper()}
        if data.source:
            form["source_lang"] = data.source.upper()
        payload: Any = await self._request("POST", "/translate", data=form)
        translations: Any = payload.get("translations") if isinstance(payload, dict) else None
        if not isinstance(translations, list) or not translations or not isinstance(translations[0], dict):
            raise UpstreamError("The translation service returned no translation")
        first: dict = translations[0]
        return TranslateResponse(
            source=(data.source or first.get("detected_source_language") or "").lower(),
            target=data.to.lower(),
            text=data.text,
            translation=first.get("text", ""),
        )

    async def get_languages(self) -> list[LanguageResponse]:
        """대상 언어 목록 (캐시됨) — Target languages, cached after the first call."""
        if self._languages is None:
            payload: Any = await self._request("GET", "/languages", params={"type": "target"})
            # 응답 형식 검증 — A list of {"language", "name"} objects is expected
            if not isinstance(payload, list) or not all(
                isinstance(lang, dict) and "language" in lang and "name" in lang for lang in payload
            ):
                logger.warning("Unexpected language list from the translation API")
                raise UpstreamError("The translation service returned an invalid language list")
            self._languages = sorted(
                (LanguageResponse(code=str(lang["language"]).lower(), name=str(lang["name"])) for lang in payload),
                key=lambda lang: lang.name,
            )
        return self._languages


# 싱글턴 인스턴스 — Singleton instance
translator_service: TranslatorService = TranslatorService()
