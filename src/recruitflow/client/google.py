"""Google Calendar connection state and its out-of-band OAuth flow."""

from __future__ import annotations

import asyncio
import logging
import webbrowser
from typing import Awaitable, Callable

from recruitflow.client.errors import NotAuthenticatedError
from recruitflow.client.http import ApiClient
from recruitflow.client.session import SessionStore
from recruitflow.models import UserProfile

log = logging.getLogger(__name__)

Opener = Callable[[str], object]
Sleep = Callable[[float], Awaitable[None]]


def has_google_token(profile: UserProfile | None) -> bool:
    return profile is not None and bool(profile.google_refresh_token)


class GoogleConnection:
    """Connect / disconnect a Google Calendar account for the signed-in user.

    ``is_connected`` is always derived from the session profile. The consent
    screen runs in a separate browser context; when it finishes, the popup
    posts a completion message which the front end forwards to ``complete()``.
    ``on_focus()`` (window regained focus) and ``wait_for_connection()``
    (polling with backoff) cover front ends that cannot receive that message.
    """

    def __init__(
        self,
        api: ApiClient,
        session: SessionStore,
        *,
        opener: Opener = webbrowser.open,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._api = api
        self._session = session
        self._opener = opener
        self._sleep = sleep
        self.awaiting_connection = False

    @property
    def is_connected(self) -> bool:
        return has_google_token(self._session.profile)

    async def connect(self) -> str | None:
        """Fetch the authorization URL and open it; returns the URL opened."""
        profile = self._session.profile
        if profile is None:
            raise NotAuthenticatedError("Você precisa estar logado para conectar sua agenda.")

        body = await self._api.get(
            "/api/google/auth/connect",
            params={"userId": profile.id},
            default_error="Falha ao obter URL de autenticação do servidor.",
        )
        url = body.get("url")
        if not url:
            return None
        self.awaiting_connection = True
        self._opener(url)
        return url

    async def complete(self) -> bool:
        """The authorization context reported it finished: resync the profile once."""
        if not self.awaiting_connection:
            return self.is_connected
        self.awaiting_connection = False
        await self._session.refetch_profile()
        return self.is_connected

    async def on_focus(self) -> bool:
        if self.awaiting_connection:
            log.info("Main window regained focus; checking Google connection")
        return await self.complete()

    async def wait_for_connection(
        self,
        attempts: int = 6,
        initial_delay: float = 1.0,
        factor: float = 2.0,
        max_delay: float = 30.0,
    ) -> bool:
        """Poll the profile with exponential backoff until a token shows up."""
        if not self.awaiting_connection:
            return self.is_connected

        delay = initial_delay
        try:
            for _ in range(attempts):
                await self._sleep(delay)
                await self._session.refetch_profile()
                if self.is_connected:
                    return True
                delay = min(delay * factor, max_delay)
            log.info("Google connection not confirmed after %d checks", attempts)
            return False
        finally:
            self.awaiting_connection = False

    async def disconnect(self) -> None:
        profile = self._session.profile
        if profile is None:
            return
        await self._api.post(
            "/api/google/auth/disconnect",
            json={"userId": profile.id},
            default_error="Não foi possível desconectar a conta do Google.",
        )
        self._session.update_profile(profile.model_copy(update={"google_refresh_token": None}))
