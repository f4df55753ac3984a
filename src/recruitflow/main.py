"""FastAPI application entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from recruitflow.baserow import BaserowClient
from recruitflow.config import Config, load_config
from recruitflow.google import GoogleClient
from recruitflow.routes import auth, calendar, candidates, data, google_auth, jobs, users

log = logging.getLogger(__name__)


def create_app(
    config: Config | None = None,
    baserow: BaserowClient | None = None,
    google: GoogleClient | None = None,
) -> FastAPI:
    """Build the gateway.

    Clients passed in are used as-is and left open on shutdown; clients built
    here from *config* are closed with the app.
    """
    cfg = config or load_config()
    owned: list = []

    if baserow is None:
        baserow = BaserowClient(cfg.baserow_url, cfg.baserow_token)
        owned.append(baserow)

    if google is None and cfg.google_configured:
        google = GoogleClient(cfg.google_client_id, cfg.google_client_secret, cfg.google_redirect_uri)
        owned.append(google)
    if google is None:
        log.error(
            "Google credentials (GOOGLE_CLIENT_ID, GOOGLE_CLIENT_SECRET, GOOGLE_REDIRECT_URI) "
            "not found; calendar routes will answer 503"
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        for client in owned:
            await client.aclose()

    app = FastAPI(title="RecruitFlow Gateway", version="0.1.0", lifespan=lifespan)
    app.state.config = cfg
    app.state.baserow = baserow
    app.state.google = google

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(HTTPException, _http_error)
    app.add_exception_handler(RequestValidationError, _validation_error)

    app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
    app.include_router(users.router, prefix="/api/users", tags=["users"])
    app.include_router(data.router, prefix="/api/data", tags=["data"])
    app.include_router(jobs.router, prefix="/api/jobs", tags=["jobs"])
    app.include_router(candidates.router, prefix="/api/candidates", tags=["candidates"])
    app.include_router(google_auth.router, prefix="/api/google/auth", tags=["google"])
    app.include_router(calendar.router, prefix="/api/google/calendar", tags=["calendar"])

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app


async def _http_error(request: Request, exc: HTTPException) -> JSONResponse:
    # Dict details are already shaped ({success, message}); strings become {error}
    body = exc.detail if isinstance(exc.detail, dict) else {"error": exc.detail}
    return JSONResponse(body, status_code=exc.status_code, headers=getattr(exc, "headers", None))


async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        {"error": "Dados inválidos na requisição.", "details": jsonable_errors(exc)},
        status_code=422,
    )


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    return [{"loc": list(err.get("loc", ())), "msg": err.get("msg", "")} for err in exc.errors()]
