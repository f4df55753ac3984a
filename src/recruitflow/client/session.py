"""Session store: the signed-in profile and its persisted token."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from recruitflow.client.errors import ApiError, ClientError
from recruitflow.client.http import UNEXPECTED_RESPONSE, ApiClient
from recruitflow.models import LoginRequest, SignUpRequest, UserProfile

log = logging.getLogger(__name__)


class TokenStorage:
    """Keeps the session token in a small JSON file, or in memory when *path* is None."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = path
        self._token: str | None = None

    def load(self) -> str | None:
        if self.path is None:
            return self._token
        try:
            return json.loads(self.path.read_text()).get("token")
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as e:
            log.warning("Ignoring unreadable session file %s: %s", self.path, e)
            return None

    def save(self, token: str) -> None:
        self._token = token
        if self.path is not None:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps({"token": token}))

    def clear(self) -> None:
        self._token = None
        if self.path is not None:
            self.path.unlink(missing_ok=True)


class SessionStore:
    """Owns the UserProfile. Everyone else reads ``profile`` and never mutates it."""

    def __init__(self, api: ApiClient, storage: TokenStorage | None = None) -> None:
        self._api = api
        self._storage = storage or TokenStorage()
        self.profile: UserProfile | None = None
        self.is_loading = False
        self.error: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.profile is not None

    async def sign_in(self, credentials: LoginRequest) -> UserProfile | None:
        return await self._authenticate("/api/auth/login", credentials.model_dump(), "Erro ao fazer login.")

    async def sign_up(self, credentials: SignUpRequest) -> UserProfile | None:
        return await self._authenticate("/api/auth/signup", credentials.model_dump(), "Erro ao criar conta.")

    def sign_out(self) -> None:
        self.profile = None
        self.error = None
        self._api.set_token(None)
        self._storage.clear()

    async def restore(self) -> UserProfile | None:
        """Resume the session from the persisted token, if any."""
        token = self._storage.load()
        if not token:
            return None

        self._api.set_token(token)
        self.is_loading = True
        try:
            body = await self._api.get("/api/auth/me", default_error="Sessão inválida.")
            profile = UserProfile.model_validate(body)
        except ApiError as e:
            if e.status_code == 401:
                log.info("Stored session rejected (%s); discarding it", e)
                self.sign_out()
            else:
                self.error = str(e)
            return None
        except ClientError as e:
            self.error = str(e)
            return None
        except ValidationError as e:
            log.error("Malformed profile from /api/auth/me: %s", e)
            self.error = UNEXPECTED_RESPONSE
            return None
        finally:
            self.is_loading = False

        self.profile = profile
        return self.profile

    async def refetch_profile(self) -> UserProfile | None:
        """Reload the profile from the gateway; keeps the current one on failure."""
        if self.profile is None:
            return None
        try:
            body = await self._api.get(f"/api/users/{self.profile.id}", default_error="Falha ao carregar perfil.")
            profile = UserProfile.model_validate(body)
        except ClientError as e:
            log.error("Profile refetch failed: %s", e)
            self.error = str(e)
            return None
        except ValidationError as e:
            log.error("Malformed profile from refetch: %s", e)
            self.error = UNEXPECTED_RESPONSE
            return None
        self.profile = profile
        return self.profile

    def update_profile(self, profile: UserProfile) -> None:
        self.profile = profile

    async def _authenticate(self, path: str, payload: dict, fallback: str) -> UserProfile | None:
        self.is_loading = True
        self.error = None
        try:
            body = await self._api.post(path, json=payload, default_error=fallback)
            profile = UserProfile.model_validate(body["user"])
        except ClientError as e:
            log.warning("Authentication failed: %s", e)
            self.error = str(e)
            return None
        except (KeyError, TypeError, ValidationError) as e:
            log.error("Malformed authentication response from %s: %r", path, e)
            self.error = UNEXPECTED_RESPONSE
            return None
        finally:
            self.is_loading = False

        self.profile = profile
        token = body.get("token")
        if token:
            self._api.set_token(token)
            self._storage.save(token)
        return self.profile
