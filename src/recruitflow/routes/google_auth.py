"""Google OAuth routes: connect, callback, status, disconnect."""

from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import HTMLResponse

from recruitflow.auth import ensure_same_user, get_baserow, get_config, get_current_user
from recruitflow.baserow import BaserowClient, BaserowError
from recruitflow.config import Config
from recruitflow.google import GoogleAPIError, GoogleClient
from recruitflow.models import DisconnectRequest

router = APIRouter()
log = logging.getLogger(__name__)

COMPLETION_MESSAGE = "google-auth-complete"


def get_google(request: Request) -> GoogleClient:
    google = request.app.state.google
    if google is None:
        raise HTTPException(status_code=503, detail="Integração com o Google não configurada no servidor.")
    return google


def parse_user_id(raw: str | int | None) -> int:
    """Validate a ``userId`` query/body value; 400 when missing or not numeric."""
    try:
        return int(raw)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        raise HTTPException(status_code=400, detail="O ID do usuário (userId) é obrigatório.")


def _popup_page(origin: str, success: bool) -> HTMLResponse:
    # Tell the opener the flow finished, then close the popup
    message = json.dumps({"type": COMPLETION_MESSAGE, "success": success})
    script = (
        "<script>"
        f"if (window.opener) {{ window.opener.postMessage({message}, {json.dumps(origin)}); }}"
        "window.close();"
        "</script>"
    )
    return HTMLResponse(script)


@router.get("/connect")
async def connect(
    userId: str | None = Query(None),
    google: GoogleClient = Depends(get_google),
    current_user: dict = Depends(get_current_user),
):
    user_id = parse_user_id(userId)
    ensure_same_user(current_user, user_id)
    return {"url": google.authorization_url(state=str(user_id))}


@router.get("/callback")
async def callback(
    code: str | None = Query(None),
    state: str | None = Query(None),
    cfg: Config = Depends(get_config),
    baserow: BaserowClient = Depends(get_baserow),
    google: GoogleClient = Depends(get_google),
):
    if not code or not state or not state.isdigit():
        log.error("Invalid Google callback (missing code or state)")
        return _popup_page(cfg.frontend_url, success=False)

    user_id = int(state)
    try:
        tokens = await google.exchange_code(code)
        refresh_token = tokens.get("refresh_token")
        if not refresh_token:
            log.warning("No refresh_token received for user %s", user_id)
            return _popup_page(cfg.frontend_url, success=False)
        await baserow.update_row(cfg.users_table_id, user_id, {"google_refresh_token": refresh_token})
    except (GoogleAPIError, BaserowError) as e:
        log.error("Token exchange failed for user %s: %s", user_id, e)
        return _popup_page(cfg.frontend_url, success=False)

    log.info("Refresh token stored for user %s", user_id)
    return _popup_page(cfg.frontend_url, success=True)


@router.get("/status")
async def connection_status(
    userId: str | None = Query(None),
    cfg: Config = Depends(get_config),
    baserow: BaserowClient = Depends(get_baserow),
    current_user: dict = Depends(get_current_user),
):
    user_id = parse_user_id(userId)
    ensure_same_user(current_user, user_id)
    try:
        row = await baserow.get_row(cfg.users_table_id, user_id)
    except BaserowError as e:
        raise HTTPException(status_code=404 if e.not_found else 500, detail=str(e))
    return {"connected": bool(row.get("google_refresh_token"))}


@router.post("/disconnect")
async def disconnect(
    req: DisconnectRequest,
    cfg: Config = Depends(get_config),
    baserow: BaserowClient = Depends(get_baserow),
    current_user: dict = Depends(get_current_user),
):
    user_id = parse_user_id(req.userId)
    ensure_same_user(current_user, user_id)
    try:
        await baserow.update_row(cfg.users_table_id, user_id, {"google_refresh_token": None})
    except BaserowError as e:
        log.error("Failed to disconnect Google for user %s: %s", user_id, e)
        raise HTTPException(status_code=500, detail="Não foi possível desconectar a conta do Google.")
    return {"success": True, "message": "Conta Google desconectada com sucesso."}
