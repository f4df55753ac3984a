"""Shared fixtures: in-memory Baserow and Google stand-ins wired into the gateway."""

from __future__ import annotations

import copy
import itertools

import httpx
import pytest
from fastapi.testclient import TestClient

from recruitflow.auth import create_token, hash_password
from recruitflow.baserow import BaserowError
from recruitflow.client import AppContext
from recruitflow.config import Config
from recruitflow.google import GoogleAPIError
from recruitflow.main import create_app

LINK_FIELDS = ("usuario", "vaga", "Candidato", "Vaga")


class FakeBaserow:
    """Row store with the slice of Baserow semantics the gateway relies on."""

    def __init__(self) -> None:
        self.tables: dict[int, dict[int, dict]] = {}
        self._ids = itertools.count(1)
        self.fail_tables: set[int] = set()
        self.fail_writes: set[int] = set()

    def seed(self, table_id: int, fields: dict) -> dict:
        row = {"id": next(self._ids), **self._normalize(fields)}
        self.tables.setdefault(table_id, {})[row["id"]] = row
        return copy.deepcopy(row)

    async def list_rows(self, table_id: int, filters: dict | None = None) -> list[dict]:
        self._check(table_id)
        rows = list(self.tables.get(table_id, {}).values())
        for key, value in (filters or {}).items():
            _, field, op = key.split("__")
            if op == "equal":
                rows = [r for r in rows if r.get(field) == value]
            elif op == "link_row_has":
                rows = [r for r in rows if any(link["id"] == int(value) for link in r.get(field) or [])]
        return copy.deepcopy(rows)

    async def get_row(self, table_id: int, row_id: int) -> dict:
        self._check(table_id)
        try:
            return copy.deepcopy(self.tables[table_id][row_id])
        except KeyError:
            raise BaserowError("The row does not exist.", status_code=404)

    async def create_row(self, table_id: int, fields: dict) -> dict:
        self._check(table_id)
        return self.seed(table_id, fields)

    async def update_row(self, table_id: int, row_id: int, fields: dict) -> dict:
        self._check(table_id)
        if table_id in self.fail_writes:
            raise BaserowError("Service unavailable", status_code=503)
        if row_id not in self.tables.get(table_id, {}):
            raise BaserowError("The row does not exist.", status_code=404)
        self.tables[table_id][row_id].update(self._normalize(fields))
        return copy.deepcopy(self.tables[table_id][row_id])

    async def delete_row(self, table_id: int, row_id: int) -> None:
        self._check(table_id)
        if self.tables.get(table_id, {}).pop(row_id, None) is None:
            raise BaserowError("The row does not exist.", status_code=404)

    async def aclose(self) -> None:
        pass

    def _check(self, table_id: int) -> None:
        if table_id in self.fail_tables:
            raise BaserowError("Service unavailable", status_code=503)

    @staticmethod
    def _normalize(fields: dict) -> dict:
        out = dict(fields)
        for key in LINK_FIELDS:
            if isinstance(out.get(key), list):
                out[key] = [v if isinstance(v, dict) else {"id": v, "value": ""} for v in out[key]]
        if isinstance(out.get("status"), str):
            out["status"] = {"id": 1, "value": out["status"]}
        return out


class FakeGoogle:
    def __init__(self) -> None:
        self.calendars = [
            {"id": "team@group.calendar.google.com", "summary": "Equipe", "primary": False},
            {"id": "ana@example.com", "summary": "Ana", "primary": True},
        ]
        self.refresh_token: str | None = "refresh-abc"
        self.inserted: list[tuple[str, str, dict]] = []
        self.fail_insert = False

    def authorization_url(self, state: str) -> str:
        return f"https://accounts.google.com/o/oauth2/v2/auth?state={state}"

    async def exchange_code(self, code: str) -> dict:
        if code == "bad":
            raise GoogleAPIError("invalid_grant", status_code=400)
        tokens = {"access_token": "access-1"}
        if self.refresh_token:
            tokens["refresh_token"] = self.refresh_token
        return tokens

    async def list_writable_calendars(self, refresh_token: str) -> list[dict]:
        return list(self.calendars)

    async def insert_event(self, refresh_token: str, calendar_id: str, event: dict) -> dict:
        if self.fail_insert:
            raise GoogleAPIError("Calendar quota exceeded", status_code=403)
        self.inserted.append((refresh_token, calendar_id, event))
        return {"id": "evt1", "htmlLink": "https://calendar.google.com/event?eid=evt1", **event}

    async def aclose(self) -> None:
        pass


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def cfg() -> Config:
    return Config(baserow_url="http://baserow.test", baserow_token="t", jwt_secret="test-secret")


@pytest.fixture
def baserow() -> FakeBaserow:
    return FakeBaserow()


@pytest.fixture
def google() -> FakeGoogle:
    return FakeGoogle()


@pytest.fixture
def app(cfg, baserow, google):
    return create_app(cfg, baserow=baserow, google=google)


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def recruiter(cfg, baserow) -> dict:
    return baserow.seed(cfg.users_table_id, {
        "nome": "Ana Souza",
        "empresa": "Acme",
        "telefone": "11999990000",
        "Email": "ana@example.com",
        "senha_hash": hash_password("s3cret"),
        "google_refresh_token": None,
    })


@pytest.fixture
def auth_headers(cfg, recruiter) -> dict:
    token = create_token(cfg.jwt_secret, recruiter["id"], recruiter["Email"])
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def user_client(client, auth_headers) -> TestClient:
    """TestClient signed in as the seeded recruiter."""
    client.headers.update(auth_headers)
    return client


@pytest.fixture
def other_recruiter(cfg, baserow) -> dict:
    return baserow.seed(cfg.users_table_id, {
        "nome": "Outro Recrutador",
        "Email": "outro@example.com",
        "senha_hash": hash_password("outro"),
        "google_refresh_token": "other-token",
    })


@pytest.fixture
def job(cfg, baserow, recruiter) -> dict:
    return baserow.seed(cfg.jobs_table_id, {"titulo": "Backend Python", "usuario": [recruiter["id"]]})


@pytest.fixture
def candidate(cfg, baserow, recruiter, job) -> dict:
    return baserow.seed(cfg.candidates_table_id, {
        "nome": "Bruno Lima",
        "email": "bruno@example.com",
        "telefone": "11988887777",
        "vaga": [job["id"]],
        "usuario": [recruiter["id"]],
        "score": 87,
        "status": "Triagem",
    })


@pytest.fixture
def opened() -> list[str]:
    return []


@pytest.fixture
def ctx(app, opened, tmp_path) -> AppContext:
    """Client core talking to the in-process gateway."""
    transport = httpx.ASGITransport(app=app)
    return AppContext.create(
        "http://gateway.test", transport=transport, token_path=tmp_path / "session.json", opener=opened.append
    )


@pytest.fixture
def mock_ctx(opened):
    """Build a client core talking to a hand-written gateway stand-in."""

    def build(handler) -> AppContext:
        return AppContext.create("http://gateway.test", transport=httpx.MockTransport(handler), opener=opened.append)

    return build
