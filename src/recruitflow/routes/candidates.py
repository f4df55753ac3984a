"""Candidate routes: creation (with screening hand-off) and pipeline status."""

from __future__ import annotations

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException

from recruitflow.auth import ensure_owner, get_baserow, get_config, get_current_user
from recruitflow.baserow import BaserowClient, BaserowError
from recruitflow.config import Config
from recruitflow.models import CandidateCreate, PipelineStatus, StatusUpdate
from recruitflow.webhook import trigger_screening_webhook

router = APIRouter()
log = logging.getLogger(__name__)


async def _screen_in_background(cfg: Config, baserow: BaserowClient, candidate: dict, job: dict) -> None:
    ok, message = await trigger_screening_webhook(cfg, baserow, candidate, job)
    if ok:
        log.info("Candidate %s sent to screening", candidate.get("id"))
    else:
        log.warning("Screening webhook not sent for candidate %s: %s", candidate.get("id"), message)


@router.post("", status_code=201)
async def create_candidate(
    req: CandidateCreate,
    background: BackgroundTasks,
    cfg: Config = Depends(get_config),
    baserow: BaserowClient = Depends(get_baserow),
    current_user: dict = Depends(get_current_user),
):
    """Register a candidate for a job and hand it to the screening automation."""
    if not req.nome.strip() or req.vaga_id is None:
        raise HTTPException(status_code=400, detail="Nome e vaga (vaga_id) são obrigatórios.")

    try:
        job = await baserow.get_row(cfg.jobs_table_id, req.vaga_id)
    except BaserowError as e:
        if e.not_found:
            raise HTTPException(status_code=404, detail="Vaga não encontrada.")
        raise HTTPException(status_code=500, detail=str(e))
    ensure_owner(job, current_user)

    owner_ids = [link["id"] for link in job.get("usuario") or []]
    try:
        candidate = await baserow.create_row(cfg.candidates_table_id, {
            "nome": req.nome.strip(),
            "email": req.email,
            "telefone": req.telefone,
            "vaga": [req.vaga_id],
            "usuario": owner_ids,
            "status": PipelineStatus.SCREENING.value,
        })
    except BaserowError as e:
        log.error("Failed to create candidate for job %s: %s", req.vaga_id, e)
        raise HTTPException(status_code=500, detail="Não foi possível cadastrar o candidato.")

    background.add_task(_screen_in_background, cfg, baserow, candidate, job)
    return candidate


@router.patch("/{candidate_id}/status")
async def update_status(
    candidate_id: int,
    req: StatusUpdate,
    cfg: Config = Depends(get_config),
    baserow: BaserowClient = Depends(get_baserow),
    current_user: dict = Depends(get_current_user),
):
    try:
        candidate = await baserow.get_row(cfg.candidates_table_id, candidate_id)
    except BaserowError as e:
        if e.not_found:
            raise HTTPException(status_code=404, detail="Candidato não encontrado.")
        raise HTTPException(status_code=500, detail="Não foi possível atualizar o status.")
    ensure_owner(candidate, current_user)

    try:
        await baserow.update_row(cfg.candidates_table_id, candidate_id, {"status": req.status.value})
    except BaserowError as e:
        log.error("Failed to update status of candidate %s: %s", candidate_id, e)
        if e.not_found:
            raise HTTPException(status_code=404, detail="Candidato não encontrado.")
        raise HTTPException(status_code=500, detail="Não foi possível atualizar o status.")
    return {"success": True, "id": candidate_id, "status": req.status.value}
