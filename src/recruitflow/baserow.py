"""Baserow REST client: the system of record for users, jobs, candidates and appointments."""

from __future__ import annotations

import logging
from typing import Any

import httpx

log = logging.getLogger(__name__)

PAGE_SIZE = 200


class BaserowError(Exception):
    """A Baserow request failed (transport error or non-2xx answer)."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code

    @property
    def not_found(self) -> bool:
        return self.status_code == 404


class BaserowClient:
    """Thin async wrapper over ``/api/database/rows/table/{table}/``.

    Rows are addressed with user field names, so payloads and results use the
    column names shown in the Baserow UI (``nome``, ``Email``, ``vaga``...).
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 15.0,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers={"Authorization": f"Token {token}"},
            transport=transport,
            timeout=timeout,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    # ── Row operations ───────────────────────────────────────────────

    async def list_rows(self, table_id: int, filters: dict[str, Any] | None = None) -> list[dict]:
        """Return every row matching *filters*, following pagination.

        *filters* maps Baserow filter keys to values, e.g.
        ``{"filter__Email__equal": "a@b.com"}``.
        """
        params: dict[str, Any] = {"user_field_names": "true", "size": PAGE_SIZE}
        params.update(filters or {})
        rows: list[dict] = []
        page = 1
        while True:
            data = await self._request("GET", f"/api/database/rows/table/{table_id}/", params={**params, "page": page})
            rows.extend(data.get("results", []))
            if not data.get("next"):
                return rows
            page += 1

    async def get_row(self, table_id: int, row_id: int) -> dict:
        return await self._request(
            "GET", f"/api/database/rows/table/{table_id}/{row_id}/", params={"user_field_names": "true"}
        )

    async def create_row(self, table_id: int, fields: dict[str, Any]) -> dict:
        return await self._request(
            "POST", f"/api/database/rows/table/{table_id}/", params={"user_field_names": "true"}, json=fields
        )

    async def update_row(self, table_id: int, row_id: int, fields: dict[str, Any]) -> dict:
        return await self._request(
            "PATCH",
            f"/api/database/rows/table/{table_id}/{row_id}/",
            params={"user_field_names": "true"},
            json=fields,
        )

    async def delete_row(self, table_id: int, row_id: int) -> None:
        await self._request("DELETE", f"/api/database/rows/table/{table_id}/{row_id}/")

    # ── Internals ────────────────────────────────────────────────────

    async def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        try:
            resp = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise BaserowError(f"Baserow unreachable: {e}") from e

        if resp.status_code >= 400:
            detail = _error_detail(resp)
            log.warning("Baserow %s %s failed (%s): %s", method, url, resp.status_code, detail)
            raise BaserowError(detail, status_code=resp.status_code)

        if resp.status_code == 204 or not resp.content:
            return {}
        try:
            return resp.json()
        except ValueError as e:
            log.error("Baserow %s %s returned a non-JSON body: %.200s", method, url, resp.text)
            raise BaserowError("Resposta inválida do Baserow.", status_code=resp.status_code) from e


def _error_detail(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text or f"HTTP {resp.status_code}"
    if isinstance(body, dict):
        return str(body.get("detail") or body.get("error") or body)
    return str(body)
