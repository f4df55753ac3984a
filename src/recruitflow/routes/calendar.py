"""Google Calendar routes: writable calendar list and interview booking."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from recruitflow.auth import FORBIDDEN, get_baserow, get_config, get_current_user
from recruitflow.baserow import BaserowClient, BaserowError
from recruitflow.config import Config
from recruitflow.google import GoogleAPIError, GoogleClient, build_interview_event
from recruitflow.models import CreateEventRequest
from recruitflow.routes.google_auth import get_google

router = APIRouter()
log = logging.getLogger(__name__)

NOT_CONNECTED = "Usuário não conectado ao Google Calendar. Por favor, conecte sua conta nas configurações."


def _fail(status_code: int, message: str) -> HTTPException:
    return HTTPException(status_code=status_code, detail={"success": False, "message": message})


def _ensure_self(current_user: dict, user_id: int) -> None:
    if current_user["id"] != user_id:
        raise _fail(403, FORBIDDEN)


async def _refresh_token(baserow: BaserowClient, cfg: Config, user_id: int) -> str:
    try:
        row = await baserow.get_row(cfg.users_table_id, user_id)
    except BaserowError as e:
        raise _fail(404 if e.not_found else 500, str(e))
    token = row.get("google_refresh_token")
    if not token:
        raise _fail(500, NOT_CONNECTED)
    return token


@router.get("/list-calendars")
async def list_calendars(
    userId: str | None = Query(None),
    cfg: Config = Depends(get_config),
    baserow: BaserowClient = Depends(get_baserow),
    google: GoogleClient = Depends(get_google),
    current_user: dict = Depends(get_current_user),
):
    if not userId or not userId.isdigit():
        raise _fail(400, "O ID do usuário (userId) é obrigatório.")
    _ensure_self(current_user, int(userId))

    refresh_token = await _refresh_token(baserow, cfg, int(userId))
    try:
        calendars = await google.list_writable_calendars(refresh_token)
    except GoogleAPIError as e:
        log.error("Failed to list Google calendars for user %s: %s", userId, e)
        raise _fail(500, str(e))
    return {"success": True, "calendars": calendars}


@router.post("/create-event")
async def create_event(
    req: CreateEventRequest,
    cfg: Config = Depends(get_config),
    baserow: BaserowClient = Depends(get_baserow),
    google: GoogleClient = Depends(get_google),
    current_user: dict = Depends(get_current_user),
):
    if not (req.userId and req.eventData and req.candidate and req.job and req.calendarId):
        raise _fail(
            400,
            "Dados insuficientes para criar o evento "
            "(userId, eventData, candidate, job, calendarId são obrigatórios).",
        )
    _ensure_self(current_user, req.userId)

    refresh_token = await _refresh_token(baserow, cfg, req.userId)
    event = build_interview_event(req.eventData.model_dump(), req.candidate, cfg.google_timezone)
    try:
        created = await google.insert_event(refresh_token, req.calendarId, event)
    except GoogleAPIError as e:
        log.error("Failed to create Google Calendar event: %s", e)
        raise _fail(500, str(e))

    log.info("Calendar event created: %s", created.get("htmlLink"))

    message = "Evento criado com sucesso!"
    try:
        await baserow.create_row(cfg.appointments_table_id, {
            "Título": req.eventData.title,
            "Início": req.eventData.start,
            "Fim": req.eventData.end,
            "Detalhes": req.eventData.details,
            "Candidato": [req.candidate["id"]],
            "Vaga": [req.job["id"]],
            "google_event_link": created.get("htmlLink"),
        })
    except (BaserowError, KeyError):
        # The calendar event exists at this point, so the booking still succeeds
        log.exception("Event %s created but appointment row was not saved", created.get("id"))
        message = "Evento criado, mas o agendamento não foi registrado."

    return {"success": True, "message": message, "data": created}
