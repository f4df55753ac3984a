"""JSON-over-HTTP client for the gateway, the single I/O boundary of the client core."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from recruitflow.client.errors import ApiError, UnexpectedResponseError

log = logging.getLogger(__name__)

UNEXPECTED_RESPONSE = "O servidor retornou uma resposta inesperada. Verifique os logs do backend."


class ApiClient:
    def __init__(
        self,
        base_url: str = "http://localhost:3001",
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 15.0,
    ) -> None:
        self._client = httpx.AsyncClient(base_url=base_url.rstrip("/"), transport=transport, timeout=timeout)

    def set_token(self, token: str | None) -> None:
        if token:
            self._client.headers["Authorization"] = f"Bearer {token}"
        else:
            self._client.headers.pop("Authorization", None)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get(self, path: str, **kwargs: Any) -> Any:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> Any:
        return await self.request("POST", path, **kwargs)

    async def patch(self, path: str, **kwargs: Any) -> Any:
        return await self.request("PATCH", path, **kwargs)

    async def delete(self, path: str, **kwargs: Any) -> Any:
        return await self.request("DELETE", path, **kwargs)

    async def request(self, method: str, path: str, *, default_error: str = "Falha na comunicação com o servidor.", **kwargs: Any) -> Any:
        """Send one request and return the decoded JSON body.

        Raises UnexpectedResponseError for transport failures and non-JSON
        bodies, ApiError for non-OK statuses and ``success: false`` payloads.
        """
        try:
            resp = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            log.error("%s %s failed: %s", method, path, e)
            raise UnexpectedResponseError(UNEXPECTED_RESPONSE) from e

        content_type = resp.headers.get("content-type", "")
        if "application/json" not in content_type:
            log.error("%s %s returned non-JSON (%s): %.200s", method, path, content_type or "no content-type", resp.text)
            raise UnexpectedResponseError(UNEXPECTED_RESPONSE)

        try:
            body = resp.json()
        except ValueError as e:
            log.error("%s %s returned malformed JSON", method, path)
            raise UnexpectedResponseError(UNEXPECTED_RESPONSE) from e

        failed = isinstance(body, dict) and body.get("success") is False
        if resp.is_error or failed:
            message = default_error
            if isinstance(body, dict):
                message = body.get("error") or body.get("message") or default_error
            raise ApiError(message, status_code=resp.status_code)

        return body
