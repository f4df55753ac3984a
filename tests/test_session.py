"""Session store: sign-in/up/out, persisted token, profile refetch."""

from __future__ import annotations

import httpx
import pytest

from recruitflow.client import AppContext
from recruitflow.client.http import UNEXPECTED_RESPONSE
from recruitflow.models import LoginRequest, SignUpRequest, UserProfile

pytestmark = pytest.mark.anyio

ANA = LoginRequest(email="ana@example.com", password="s3cret")


async def test_sign_in_sets_profile_and_persists_token(ctx, recruiter, tmp_path):
    profile = await ctx.session.sign_in(ANA)

    assert profile is not None
    assert profile.id == recruiter["id"]
    assert profile.name == "Ana Souza"
    assert ctx.session.is_authenticated
    assert ctx.session.error is None
    assert "token" in (tmp_path / "session.json").read_text()


async def test_sign_in_with_bad_credentials_returns_none(ctx, recruiter):
    profile = await ctx.session.sign_in(LoginRequest(email="ana@example.com", password="wrong"))

    assert profile is None
    assert not ctx.session.is_authenticated
    assert ctx.session.error == "E-mail ou senha inválidos."
    assert not ctx.session.is_loading


async def test_sign_up_signs_the_user_in(ctx):
    profile = await ctx.session.sign_up(
        SignUpRequest(nome="Carla", empresa="Beta", email="carla@example.com", password="pw")
    )
    assert profile is not None
    assert profile.email == "carla@example.com"
    assert ctx.session.profile == profile


async def test_sign_up_duplicate_surfaces_server_message(ctx, recruiter):
    profile = await ctx.session.sign_up(SignUpRequest(nome="Ana", email="ana@example.com", password="x"))
    assert profile is None
    assert ctx.session.error == "Este e-mail já está cadastrado."


async def test_sign_in_server_down_returns_none(mock_ctx):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="<html>Bad gateway</html>", headers={"content-type": "text/html"})

    ctx = mock_ctx(handler)
    assert await ctx.session.sign_in(ANA) is None
    assert "resposta inesperada" in ctx.session.error


@pytest.mark.parametrize("body", [
    {"success": True},
    {"success": True, "user": None},
    {"success": True, "user": {"nome": "Sem id"}},
])
async def test_sign_in_malformed_reply_returns_none(mock_ctx, body):
    ctx = mock_ctx(lambda request: httpx.Response(200, json=body))

    assert await ctx.session.sign_in(ANA) is None
    assert ctx.session.error == UNEXPECTED_RESPONSE
    assert ctx.session.profile is None
    assert not ctx.session.is_loading


async def test_restore_resumes_persisted_session(app, ctx, recruiter, tmp_path):
    await ctx.session.sign_in(ANA)

    fresh = AppContext.create(
        "http://gateway.test", transport=httpx.ASGITransport(app=app), token_path=tmp_path / "session.json"
    )
    profile = await fresh.session.restore()
    assert profile is not None
    assert profile.id == recruiter["id"]


async def test_restore_discards_rejected_token(ctx, tmp_path):
    (tmp_path / "session.json").write_text('{"token": "garbage"}')

    assert await ctx.session.restore() is None
    assert not (tmp_path / "session.json").exists()


async def test_restore_without_token_is_noop(ctx):
    assert await ctx.session.restore() is None
    assert ctx.session.error is None


async def test_sign_out_clears_profile_and_token(ctx, recruiter, tmp_path):
    await ctx.session.sign_in(ANA)
    ctx.session.sign_out()

    assert ctx.session.profile is None
    assert not (tmp_path / "session.json").exists()


async def test_refetch_and_update_profile(ctx, cfg, baserow, recruiter):
    await ctx.session.sign_in(ANA)
    baserow.tables[cfg.users_table_id][recruiter["id"]]["empresa"] = "Acme Brasil"

    profile = await ctx.session.refetch_profile()
    assert profile.company == "Acme Brasil"

    ctx.session.update_profile(profile.model_copy(update={"company": "Local"}))
    assert ctx.session.profile.company == "Local"


async def test_refetch_failure_keeps_current_profile(ctx, cfg, baserow, recruiter):
    await ctx.session.sign_in(ANA)
    before = ctx.session.profile
    baserow.fail_tables.add(cfg.users_table_id)

    assert await ctx.session.refetch_profile() is None
    assert ctx.session.profile == before
    assert ctx.session.error


async def test_refetch_malformed_profile_keeps_current_one(mock_ctx):
    ctx = mock_ctx(lambda request: httpx.Response(200, json={"nome": "Sem id"}))
    before = UserProfile(id=9, name="Ana", email="a@x")
    ctx.session.update_profile(before)

    assert await ctx.session.refetch_profile() is None
    assert ctx.session.profile == before
    assert ctx.session.error == UNEXPECTED_RESPONSE
