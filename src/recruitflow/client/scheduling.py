"""Interview scheduling session: calendar choice, event form, submission."""

from __future__ import annotations

import logging
from datetime import datetime
from enum import Enum
from typing import Awaitable, Callable

from pydantic import ValidationError

from recruitflow.client.errors import ClientError, FormValidationError, NotAuthenticatedError
from recruitflow.client.http import ApiClient
from recruitflow.client.session import SessionStore
from recruitflow.models import Calendar, Candidate, EventRequest, JobPosting

log = logging.getLogger(__name__)

ScheduledHook = Callable[[], Awaitable[None]]

NO_WRITABLE_CALENDAR = "Nenhum calendário com permissão de escrita foi encontrado na sua conta Google."
MISSING_FIELDS = "Por favor, preencha todos os campos e selecione um calendário."


class ScheduleState(str, Enum):
    IDLE = "idle"
    LOADING_CALENDARS = "loading_calendars"
    READY = "ready"
    CALENDAR_LOAD_ERROR = "calendar_load_error"
    SUBMITTING = "submitting"


def _parse_moment(value: datetime | str | None) -> datetime | None:
    """Accept a datetime or a ``datetime-local`` form string; naive values are local time."""
    if value is None or value == "":
        return None
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value)
        except ValueError:
            raise FormValidationError(f"Data/hora inválida: {value!r}")
    return value if value.tzinfo else value.astimezone()


class SchedulingSession:
    """One pass through the scheduling dialog for a candidate and a job.

    IDLE → LOADING_CALENDARS → READY | CALENDAR_LOAD_ERROR;
    READY → SUBMITTING → IDLE on success, READY (with ``error``) on failure.
    """

    def __init__(
        self,
        api: ApiClient,
        session: SessionStore,
        candidate: Candidate,
        job: JobPosting,
        on_scheduled: ScheduledHook | None = None,
    ) -> None:
        self._api = api
        self._session = session
        self.candidate = candidate
        self.job = job
        self._on_scheduled = on_scheduled
        self.state = ScheduleState.IDLE
        self.calendars: list[Calendar] = []
        self.selected_calendar_id: str | None = None
        self.error: str | None = None

    @property
    def title(self) -> str:
        return f"Entrevista: {self.candidate.name} para {self.job.title}"

    @property
    def can_submit(self) -> bool:
        return self.state is ScheduleState.READY and bool(self.selected_calendar_id)

    async def open(self) -> ScheduleState:
        self.state = ScheduleState.LOADING_CALENDARS
        self.error = None
        self.calendars = []
        self.selected_calendar_id = None

        profile = self._session.profile
        if profile is None:
            return self._calendar_error("Você precisa estar logado para agendar.")

        try:
            body = await self._api.get(
                "/api/google/calendar/list-calendars",
                params={"userId": profile.id},
                default_error="Falha ao buscar calendários do Google.",
            )
            calendars = [Calendar.model_validate(c) for c in body.get("calendars") or []]
        except ClientError as e:
            return self._calendar_error(str(e))
        except ValidationError:
            return self._calendar_error("Falha ao buscar calendários do Google.")

        if not calendars:
            return self._calendar_error(NO_WRITABLE_CALENDAR)

        self.calendars = calendars
        primary = next((c for c in calendars if c.primary), calendars[0])
        self.selected_calendar_id = primary.id
        self.state = ScheduleState.READY
        return self.state

    def select_calendar(self, calendar_id: str) -> None:
        if not any(c.id == calendar_id for c in self.calendars):
            raise FormValidationError(f"Calendário desconhecido: {calendar_id}")
        self.selected_calendar_id = calendar_id

    async def submit(self, start: datetime | str | None, end: datetime | str | None, details: str = "") -> dict:
        if self.state is ScheduleState.SUBMITTING:
            raise FormValidationError("Já existe um agendamento em andamento.")

        start_at, end_at = _parse_moment(start), _parse_moment(end)
        if start_at is None or end_at is None or not self.selected_calendar_id or not self.can_submit:
            raise FormValidationError(MISSING_FIELDS)
        if end_at <= start_at:
            raise FormValidationError("O horário de fim deve ser posterior ao de início.")

        profile = self._session.profile
        if profile is None:
            raise NotAuthenticatedError("Você precisa estar logado para agendar.")
        request = EventRequest(
            start=start_at, end=end_at, title=self.title, details=details, calendar_id=self.selected_calendar_id
        )

        self.state = ScheduleState.SUBMITTING
        self.error = None
        try:
            body = await self._api.post(
                "/api/google/calendar/create-event",
                json={
                    "userId": profile.id,
                    "eventData": request.event_data(),
                    "calendarId": request.calendar_id,
                    "candidate": self.candidate.to_wire(),
                    "job": self.job.to_wire(),
                },
                default_error="Não foi possível agendar a entrevista.",
            )
        except ClientError as e:
            log.error("Scheduling failed for candidate %s: %s", self.candidate.id, e)
            self.state = ScheduleState.READY
            self.error = str(e)
            raise

        self.state = ScheduleState.IDLE
        if self._on_scheduled is not None:
            await self._on_scheduled()
        return body

    def close(self) -> None:
        self.state = ScheduleState.IDLE

    def _calendar_error(self, message: str) -> ScheduleState:
        self.error = message
        self.state = ScheduleState.CALENDAR_LOAD_ERROR
        return self.state
