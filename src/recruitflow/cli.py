"""Interactive terminal UI for RecruitFlow, plus the gateway launcher."""

from __future__ import annotations

import asyncio
import logging
import os
import shlex
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.theme import Theme

from recruitflow.client import AppContext, ClientError, ScheduleState
from recruitflow.config import load_config
from recruitflow.models import LoginRequest, PipelineStatus, SignUpRequest

custom_theme = Theme({
    "info": "cyan",
    "warning": "yellow",
    "error": "bold red",
    "success": "bold green",
})

console = Console(theme=custom_theme)

SESSION_FILE = Path.home() / ".recruitflow" / "session.json"

HELP = (
    "  [bold]login[/bold] <email>            sign in\n"
    "  [bold]signup[/bold]                   create an account\n"
    "  [bold]logout[/bold]                   sign out\n"
    "  [bold]jobs[/bold]                     list your jobs\n"
    "  [bold]board[/bold] <job_id>           pipeline of a job\n"
    "  [bold]move[/bold] <candidate_id> <status>   Triagem | Entrevista | Aprovado | Reprovado\n"
    "  [bold]delete-job[/bold] <job_id>      delete a job\n"
    "  [bold]google[/bold] connect|disconnect|status\n"
    "  [bold]schedule[/bold] <candidate_id> <job_id>   book an interview\n"
    "  [bold]refresh[/bold]                  reload jobs and candidates\n"
    "  [bold]quit[/bold]                     leave\n"
)


def main() -> None:
    """Entry point for the RecruitFlow CLI."""
    console.print(Panel("Recruiting pipeline console", title="RecruitFlow v0.1.0", border_style="cyan"))
    console.print(HELP)

    base_url = os.getenv("RECRUITFLOW_API_URL", "http://localhost:3001")
    try:
        asyncio.run(_run(base_url))
    except KeyboardInterrupt:
        console.print("\n[info]Goodbye![/info]")


def serve() -> None:
    """Run the gateway with uvicorn."""
    import uvicorn

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    cfg = load_config()
    uvicorn.run("recruitflow.main:create_app", factory=True, host="0.0.0.0", port=cfg.port)


async def _run(base_url: str) -> None:
    ctx = AppContext.create(base_url, token_path=SESSION_FILE)
    try:
        profile = await ctx.resume()
        if profile is not None:
            console.print(f"[success]Welcome back, {profile.name or profile.email}.[/success]")
        await _loop(ctx)
    finally:
        await ctx.aclose()


async def _loop(ctx: AppContext) -> None:
    """Main REPL loop."""
    while True:
        try:
            user_input = console.input("\n[bold green]recruitflow>[/bold green] ").strip()
        except EOFError:
            break

        if not user_input:
            continue
        if user_input.lower() in ("quit", "exit", "q"):
            console.print("[info]Goodbye![/info]")
            break

        args = shlex.split(user_input)
        command, args = args[0].lower(), args[1:]
        handler = COMMANDS.get(command)
        if handler is None:
            console.print(HELP)
            continue
        if command not in ("login", "signup") and not ctx.session.is_authenticated:
            console.print("[warning]Sign in first (login <email>).[/warning]")
            continue
        try:
            await handler(ctx, args)
        except ClientError as e:
            console.print(f"[error]Error: {e}[/error]")
        except (ValueError, IndexError):
            console.print(HELP)


# ── Commands ──────────────────────────────────────────────────────────────

async def _login(ctx: AppContext, args: list[str]) -> None:
    email = args[0] if args else console.input("E-mail: ")
    password = console.input("Senha: ", password=True)
    profile = await ctx.login(LoginRequest(email=email, password=password))
    if profile is None:
        console.print(f"[error]{ctx.session.error}[/error]")
        return
    console.print(f"[success]Signed in as {profile.name or profile.email}.[/success]")
    _report_data_error(ctx)


async def _signup(ctx: AppContext, args: list[str]) -> None:
    credentials = SignUpRequest(
        nome=console.input("Nome: "),
        empresa=console.input("Empresa: "),
        telefone=console.input("Telefone: "),
        email=console.input("E-mail: "),
        password=console.input("Senha: ", password=True),
    )
    profile = await ctx.signup(credentials)
    if profile is None:
        console.print(f"[error]{ctx.session.error}[/error]")
        return
    console.print(f"[success]Account created for {profile.email}.[/success]")


async def _logout(ctx: AppContext, args: list[str]) -> None:
    ctx.logout()
    console.print("[info]Signed out.[/info]")


async def _jobs(ctx: AppContext, args: list[str]) -> None:
    table = Table(title="Vagas")
    table.add_column("ID", justify="right")
    table.add_column("Título")
    table.add_column("Candidatos", justify="right")
    for job in ctx.data.jobs:
        table.add_row(str(job.id), job.title, str(len(ctx.data.candidates_for_job(job.id))))
    console.print(table)


async def _board(ctx: AppContext, args: list[str]) -> None:
    job = ctx.data.get_job(int(args[0]))
    if job is None:
        console.print("[warning]Vaga não encontrada.[/warning]")
        return
    table = Table(title=f"Resultados: {job.title}")
    for status in PipelineStatus:
        table.add_column(status.value)
    columns: dict[PipelineStatus, list[str]] = {status: [] for status in PipelineStatus}
    for c in ctx.data.candidates_for_job(job.id):
        score = f" ({c.score:g})" if c.score is not None else ""
        columns[c.status_value or PipelineStatus.SCREENING].append(f"#{c.id} {c.name}{score}")
    depth = max((len(col) for col in columns.values()), default=0)
    for i in range(depth):
        table.add_row(*(col[i] if i < len(col) else "" for col in columns.values()))
    console.print(table)


async def _move(ctx: AppContext, args: list[str]) -> None:
    candidate_id, status = int(args[0]), PipelineStatus(args[1].capitalize())
    await ctx.pipeline.move_candidate(candidate_id, status)
    console.print(f"[success]Candidate #{candidate_id} → {status.value}[/success]")


async def _delete_job(ctx: AppContext, args: list[str]) -> None:
    job_id = int(args[0])
    await ctx.data.delete_job(job_id)
    console.print(f"[success]Job #{job_id} deleted.[/success]")


async def _google(ctx: AppContext, args: list[str]) -> None:
    action = args[0] if args else "status"
    if action == "connect":
        url = await ctx.google.connect()
        if url is None:
            console.print("[error]Servidor não retornou a URL de autorização.[/error]")
            return
        console.print(f"[info]Complete the consent screen in your browser:[/info]\n{url}")
        if await ctx.google.wait_for_connection():
            console.print("[success]Google Calendar connected.[/success]")
        else:
            console.print("[warning]Connection not confirmed yet; run 'google status' later.[/warning]")
    elif action == "disconnect":
        await ctx.google.disconnect()
        console.print("[info]Google Calendar disconnected.[/info]")
    else:
        await ctx.session.refetch_profile()
        state = "connected" if ctx.google.is_connected else "not connected"
        console.print(f"[info]Google Calendar: {state}[/info]")


async def _schedule(ctx: AppContext, args: list[str]) -> None:
    candidate = ctx.data.get_candidate(int(args[0]))
    job = ctx.data.get_job(int(args[1]))
    if candidate is None or job is None:
        console.print("[warning]Candidato ou vaga não encontrado.[/warning]")
        return

    scheduling = ctx.pipeline.open_scheduling(candidate, job)
    if await scheduling.open() is ScheduleState.CALENDAR_LOAD_ERROR:
        console.print(f"[error]{scheduling.error}[/error]")
        return

    for i, cal in enumerate(scheduling.calendars, 1):
        marker = " (Principal)" if cal.primary else ""
        console.print(f"  {i}. {cal.summary}{marker}")
    choice = console.input(f"Calendário [{scheduling.calendars.index(_selected(scheduling)) + 1}]: ").strip()
    if choice:
        scheduling.select_calendar(scheduling.calendars[int(choice) - 1].id)

    console.print(f"[info]{scheduling.title}[/info]")
    while True:
        start = console.input("Início (AAAA-MM-DDTHH:MM): ").strip()
        end = console.input("Fim (AAAA-MM-DDTHH:MM): ").strip()
        details = console.input("Detalhes adicionais: ").strip()
        try:
            await scheduling.submit(start, end, details)
        except ClientError as e:
            console.print(f"[error]Error: {e}[/error]")
            if console.input("Tentar novamente? [s/N] ").strip().lower() != "s":
                scheduling.close()
                return
            continue
        console.print("[success]Entrevista agendada com sucesso![/success]")
        return


async def _refresh(ctx: AppContext, args: list[str]) -> None:
    await ctx.pipeline.resync()
    _report_data_error(ctx)
    console.print(f"[info]{len(ctx.data.jobs)} jobs, {len(ctx.data.candidates)} candidates.[/info]")


def _selected(scheduling):
    return next(c for c in scheduling.calendars if c.id == scheduling.selected_calendar_id)


def _report_data_error(ctx: AppContext) -> None:
    if ctx.data.error:
        console.print(f"[error]{ctx.data.error}[/error]")


COMMANDS = {
    "login": _login,
    "signup": _signup,
    "logout": _logout,
    "jobs": _jobs,
    "board": _board,
    "move": _move,
    "delete-job": _delete_job,
    "google": _google,
    "schedule": _schedule,
    "refresh": _refresh,
}


if __name__ == "__main__":
    main()
