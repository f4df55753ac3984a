"""Google OAuth2 + Calendar v3 over plain REST."""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote, urlencode

import httpx

log = logging.getLogger(__name__)

AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_URL = "https://oauth2.googleapis.com/token"
CALENDAR_API = "https://www.googleapis.com/calendar/v3"

SCOPES = [
    "https://www.googleapis.com/auth/calendar.events",
    "https://www.googleapis.com/auth/calendar.readonly",
]

WRITABLE_ROLES = ("owner", "writer")


class GoogleAPIError(Exception):
    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class GoogleClient:
    """OAuth2 web-server flow plus the two Calendar calls the scheduler needs.

    Each calendar call trades the stored refresh token for a short-lived access
    token, so no per-user credential state is kept in the gateway.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 15.0,
    ) -> None:
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self._http = httpx.AsyncClient(transport=transport, timeout=timeout)

    async def aclose(self) -> None:
        await self._http.aclose()

    # ── OAuth ────────────────────────────────────────────────────────

    def authorization_url(self, state: str) -> str:
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": " ".join(SCOPES),
            "access_type": "offline",
            "prompt": "consent",
            "state": state,
        }
        return f"{AUTH_URL}?{urlencode(params)}"

    async def exchange_code(self, code: str) -> dict:
        """Exchange an authorization code for tokens (``refresh_token`` may be absent)."""
        return await self._token_request({
            "code": code,
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "redirect_uri": self.redirect_uri,
            "grant_type": "authorization_code",
        })

    async def access_token(self, refresh_token: str) -> str:
        tokens = await self._token_request({
            "refresh_token": refresh_token,
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "grant_type": "refresh_token",
        })
        return tokens["access_token"]

    # ── Calendar ─────────────────────────────────────────────────────

    async def list_writable_calendars(self, refresh_token: str) -> list[dict]:
        """Calendars the user can write to, as ``{id, summary, primary}``."""
        token = await self.access_token(refresh_token)
        items: list[dict] = []
        params: dict[str, Any] = {}
        while True:
            data = await self._api("GET", "/users/me/calendarList", token, params=params)
            items.extend(data.get("items") or [])
            page_token = data.get("nextPageToken")
            if not page_token:
                break
            params = {"pageToken": page_token}

        return [
            {"id": cal["id"], "summary": cal.get("summary", ""), "primary": bool(cal.get("primary", False))}
            for cal in items
            if cal.get("accessRole") in WRITABLE_ROLES
        ]

    async def insert_event(self, refresh_token: str, calendar_id: str, event: dict) -> dict:
        """Create *event* and e-mail invitations to its attendees."""
        token = await self.access_token(refresh_token)
        return await self._api(
            "POST",
            f"/calendars/{quote(calendar_id, safe='')}/events",
            token,
            params={"sendUpdates": "all"},
            json=event,
        )

    # ── Internals ────────────────────────────────────────────────────

    async def _token_request(self, form: dict[str, str]) -> dict:
        try:
            resp = await self._http.post(TOKEN_URL, data=form)
        except httpx.HTTPError as e:
            raise GoogleAPIError(f"Google OAuth unreachable: {e}") from e
        if resp.status_code >= 400:
            raise GoogleAPIError(_error_message(resp), status_code=resp.status_code)
        return _json_body(resp)

    async def _api(self, method: str, path: str, token: str, **kwargs: Any) -> dict:
        try:
            resp = await self._http.request(
                method, CALENDAR_API + path, headers={"Authorization": f"Bearer {token}"}, **kwargs
            )
        except httpx.HTTPError as e:
            raise GoogleAPIError(f"Google Calendar unreachable: {e}") from e
        if resp.status_code >= 400:
            message = _error_message(resp)
            log.warning("Google Calendar %s %s failed (%s): %s", method, path, resp.status_code, message)
            raise GoogleAPIError(message, status_code=resp.status_code)
        return _json_body(resp)


def _json_body(resp: httpx.Response) -> dict:
    try:
        return resp.json()
    except ValueError as e:
        log.error("Google returned a non-JSON body from %s: %.200s", resp.request.url, resp.text)
        raise GoogleAPIError("Resposta inválida do Google.", status_code=resp.status_code) from e


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text or f"HTTP {resp.status_code}"
    err = body.get("error") if isinstance(body, dict) else None
    if isinstance(err, dict):
        return err.get("message") or str(err)
    if isinstance(err, str):
        return body.get("error_description") or err
    return str(body)


def build_interview_event(event_data: dict, candidate: dict, timezone: str) -> dict:
    """Calendar event body for an interview with *candidate*.

    The candidate is only invited when the row carries an e-mail address.
    """
    description = (
        f"Entrevista com o candidato: {candidate.get('nome', '')}.\n"
        f"Telefone: {candidate.get('telefone') or 'Não informado'}\n\n"
        "--- Detalhes adicionais ---\n"
        f"{event_data.get('details') or 'Nenhum detalhe adicional.'}"
    )
    event = {
        "summary": event_data.get("title", ""),
        "description": description,
        "start": {"dateTime": event_data["start"], "timeZone": timezone},
        "end": {"dateTime": event_data["end"], "timeZone": timezone},
        "reminders": {"useDefault": True},
    }
    email = (candidate.get("email") or "").strip()
    if email:
        event["attendees"] = [{"email": email}]
    return event
