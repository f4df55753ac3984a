"""Application context: one explicit owner for the stores and coordinators."""

from __future__ import annotations

import webbrowser
from dataclasses import dataclass
from pathlib import Path

import httpx

from recruitflow.client.google import GoogleConnection, Opener
from recruitflow.client.http import ApiClient
from recruitflow.client.pipeline import PipelineCoordinator
from recruitflow.client.session import SessionStore, TokenStorage
from recruitflow.client.store import DataStore
from recruitflow.models import LoginRequest, SignUpRequest, UserProfile


@dataclass
class AppContext:
    api: ApiClient
    session: SessionStore
    data: DataStore
    google: GoogleConnection
    pipeline: PipelineCoordinator

    @classmethod
    def create(
        cls,
        base_url: str = "http://localhost:3001",
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        token_path: Path | None = None,
        opener: Opener = webbrowser.open,
    ) -> AppContext:
        api = ApiClient(base_url, transport=transport)
        session = SessionStore(api, TokenStorage(token_path))
        data = DataStore(api)
        google = GoogleConnection(api, session, opener=opener)
        pipeline = PipelineCoordinator(api, session, data, google)
        return cls(api=api, session=session, data=data, google=google, pipeline=pipeline)

    async def login(self, credentials: LoginRequest) -> UserProfile | None:
        profile = await self.session.sign_in(credentials)
        if profile is not None:
            await self.data.fetch_all(profile)
        return profile

    async def signup(self, credentials: SignUpRequest) -> UserProfile | None:
        profile = await self.session.sign_up(credentials)
        if profile is not None:
            await self.data.fetch_all(profile)
        return profile

    async def resume(self) -> UserProfile | None:
        """Restore a persisted session and load its data."""
        profile = await self.session.restore()
        if profile is not None:
            await self.data.fetch_all(profile)
        return profile

    def logout(self) -> None:
        self.session.sign_out()
        self.data.clear()

    async def aclose(self) -> None:
        await self.api.aclose()
