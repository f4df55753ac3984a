"""Scheduling session: calendar loading, form validation, submission."""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone

import httpx
import pytest

from recruitflow.client import ApiError, FormValidationError, ScheduleState, SchedulingSession
from recruitflow.client.scheduling import MISSING_FIELDS, NO_WRITABLE_CALENDAR
from recruitflow.models import Candidate, JobPosting, LoginRequest, UserProfile

pytestmark = pytest.mark.anyio

START = datetime(2025, 3, 10, 14, 0, tzinfo=timezone.utc)
END = START + timedelta(hours=1)

CANDIDATE = Candidate(id=10, name="Bruno Lima", email="bruno@example.com", jobs=[{"id": 5, "value": "Dev"}])
JOB = JobPosting(id=5, title="Dev")
PROFILE = UserProfile(id=1, name="Ana", email="a@x", google_refresh_token="tok")


def _session(ctx, on_scheduled=None) -> SchedulingSession:
    return SchedulingSession(ctx.api, ctx.session, CANDIDATE, JOB, on_scheduled=on_scheduled)


def _calendars(*calendars) -> httpx.Response:
    return httpx.Response(200, json={"success": True, "calendars": list(calendars)})


async def test_open_selects_primary_calendar(mock_ctx):
    ctx = mock_ctx(lambda request: _calendars(
        {"id": "team", "summary": "Equipe"},
        {"id": "me", "summary": "Ana", "primary": True},
    ))
    ctx.session.update_profile(PROFILE)
    scheduling = _session(ctx)

    assert await scheduling.open() is ScheduleState.READY
    assert scheduling.selected_calendar_id == "me"
    assert scheduling.can_submit
    assert scheduling.title == "Entrevista: Bruno Lima para Dev"


async def test_open_falls_back_to_first_calendar(mock_ctx):
    ctx = mock_ctx(lambda request: _calendars({"id": "team"}, {"id": "other"}))
    ctx.session.update_profile(PROFILE)
    scheduling = _session(ctx)

    await scheduling.open()
    assert scheduling.selected_calendar_id == "team"


async def test_no_writable_calendar_blocks_submission(mock_ctx):
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request.url.path)
        return _calendars()

    ctx = mock_ctx(handler)
    ctx.session.update_profile(PROFILE)
    scheduling = _session(ctx)

    assert await scheduling.open() is ScheduleState.CALENDAR_LOAD_ERROR
    assert scheduling.error == NO_WRITABLE_CALENDAR
    assert not scheduling.can_submit

    with pytest.raises(FormValidationError):
        await scheduling.submit(START, END)
    assert requests == ["/api/google/calendar/list-calendars"]


async def test_calendar_fetch_failure(mock_ctx):
    ctx = mock_ctx(lambda request: httpx.Response(400, json={"success": False, "message": "Usuário não conectado."}))
    ctx.session.update_profile(PROFILE)
    scheduling = _session(ctx)

    assert await scheduling.open() is ScheduleState.CALENDAR_LOAD_ERROR
    assert scheduling.error == "Usuário não conectado."


async def test_submit_validates_before_network(mock_ctx):
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request.url.path)
        return _calendars({"id": "me", "primary": True})

    ctx = mock_ctx(handler)
    ctx.session.update_profile(PROFILE)
    scheduling = _session(ctx)
    await scheduling.open()

    with pytest.raises(FormValidationError, match=MISSING_FIELDS):
        await scheduling.submit(START, None)
    with pytest.raises(FormValidationError, match="posterior"):
        await scheduling.submit(END, START)
    with pytest.raises(FormValidationError):
        await scheduling.submit("amanhã", END)
    with pytest.raises(FormValidationError):
        scheduling.select_calendar("unknown")

    assert requests == ["/api/google/calendar/list-calendars"]
    assert scheduling.state is ScheduleState.READY


async def test_submit_success_runs_hook(mock_ctx):
    posted = {}
    hooked = []

    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            return _calendars({"id": "me", "primary": True}, {"id": "team"})
        posted.update(json.loads(request.content))
        return httpx.Response(200, json={"success": True, "message": "Evento criado com sucesso!", "data": {}})

    async def on_scheduled() -> None:
        hooked.append(True)

    ctx = mock_ctx(handler)
    ctx.session.update_profile(PROFILE)
    scheduling = _session(ctx, on_scheduled)
    await scheduling.open()
    scheduling.select_calendar("team")

    body = await scheduling.submit(START, END, "Meet link")

    assert body["message"] == "Evento criado com sucesso!"
    assert scheduling.state is ScheduleState.IDLE
    assert hooked == [True]
    assert posted["userId"] == 1
    assert posted["calendarId"] == "team"
    assert posted["eventData"] == {
        "start": "2025-03-10T14:00:00+00:00",
        "end": "2025-03-10T15:00:00+00:00",
        "title": "Entrevista: Bruno Lima para Dev",
        "details": "Meet link",
    }
    assert posted["candidate"]["nome"] == "Bruno Lima"
    assert posted["job"]["titulo"] == "Dev"


async def test_submit_failure_returns_to_ready(mock_ctx):
    hooked = []

    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            return _calendars({"id": "me", "primary": True})
        return httpx.Response(500, json={"success": False, "message": "Calendar quota exceeded"})

    async def on_scheduled() -> None:
        hooked.append(True)

    ctx = mock_ctx(handler)
    ctx.session.update_profile(PROFILE)
    scheduling = _session(ctx, on_scheduled)
    await scheduling.open()

    with pytest.raises(ApiError, match="quota"):
        await scheduling.submit(START, END)
    assert scheduling.state is ScheduleState.READY
    assert scheduling.error == "Calendar quota exceeded"
    assert hooked == []


async def test_naive_form_values_are_local_time(mock_ctx):
    posted = []

    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            return _calendars({"id": "me", "primary": True})
        posted.append(request)
        return httpx.Response(200, json={"success": True, "data": {}})

    ctx = mock_ctx(handler)
    ctx.session.update_profile(PROFILE)
    scheduling = _session(ctx)
    await scheduling.open()

    await scheduling.submit("2025-03-10T09:00", "2025-03-10T10:00")
    start = json.loads(posted[0].content)["eventData"]["start"]
    assert start.startswith("2025-03-10T09:00:00")
    assert datetime.fromisoformat(start).tzinfo is not None


async def test_books_through_gateway(ctx, cfg, baserow, google, recruiter, job, candidate):
    baserow.tables[cfg.users_table_id][recruiter["id"]]["google_refresh_token"] = "refresh-abc"
    await ctx.login(LoginRequest(email="ana@example.com", password="s3cret"))
    scheduling = SchedulingSession(
        ctx.api, ctx.session, ctx.data.get_candidate(candidate["id"]), ctx.data.get_job(job["id"])
    )

    await scheduling.open()
    assert scheduling.selected_calendar_id == "ana@example.com"
    await scheduling.submit(START, END, "Sala 3")

    _, calendar_id, event = google.inserted[0]
    assert calendar_id == "ana@example.com"
    assert event["summary"] == "Entrevista: Bruno Lima para Backend Python"
    assert len(baserow.tables[cfg.appointments_table_id]) == 1
