"""Outbound n8n webhook: hands a new candidate to the screening automation."""

from __future__ import annotations

import logging

import httpx

from recruitflow.baserow import BaserowClient, BaserowError
from recruitflow.config import Config

log = logging.getLogger(__name__)


async def _get_recruiter(baserow: BaserowClient, cfg: Config, user_id: int) -> dict | None:
    try:
        return await baserow.get_row(cfg.users_table_id, user_id)
    except BaserowError as e:
        log.error("Failed to load recruiter %s: %s", user_id, e)
        return None


async def trigger_screening_webhook(
    cfg: Config,
    baserow: BaserowClient,
    candidate: dict,
    job: dict,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> tuple[bool, str]:
    """POST ``{candidate, job, recruiter}`` to the screening webhook.

    Never raises; returns ``(success, message)``.
    """
    if not cfg.n8n_screening_webhook_url:
        log.warning("N8N screening webhook URL not configured; skipping.")
        return False, "URL do webhook não configurada."

    owners = job.get("usuario") or []
    if not owners:
        log.error("Job %s has no recruiter linked; cannot trigger webhook.", job.get("id"))
        return False, "Vaga sem recrutador associado."

    recruiter_id = owners[0]["id"]
    recruiter = await _get_recruiter(baserow, cfg, recruiter_id)
    if recruiter is None:
        return False, f"Recrutador com ID {recruiter_id} não encontrado."
    recruiter.pop("senha_hash", None)

    payload = {"candidate": candidate, "job": job, "recruiter": recruiter}
    try:
        async with httpx.AsyncClient(transport=transport, timeout=15.0) as client:
            resp = await client.post(cfg.n8n_screening_webhook_url, json=payload)
    except httpx.HTTPError as e:
        log.error("Failed to call N8N webhook: %s", e)
        return False, str(e)

    if resp.status_code >= 400:
        message = f"N8N respondeu com status {resp.status_code}: {resp.text}"
        log.error("N8N webhook rejected candidate %s: %s", candidate.get("id"), message)
        return False, message

    return True, "Webhook enviado."
