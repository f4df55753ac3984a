"""Job routes: create, edit, delete."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from recruitflow.auth import ensure_owner, ensure_same_user, get_baserow, get_config, get_current_user
from recruitflow.baserow import BaserowClient, BaserowError
from recruitflow.config import Config
from recruitflow.models import JobCreate, JobUpdate

log = logging.getLogger(__name__)

router = APIRouter()


def _raise_for(e: BaserowError, fallback: str) -> None:
    if e.not_found:
        raise HTTPException(status_code=404, detail="Vaga não encontrada.")
    raise HTTPException(status_code=500, detail=fallback)


async def _owned_job(baserow: BaserowClient, cfg: Config, job_id: int, current_user: dict) -> dict:
    try:
        job = await baserow.get_row(cfg.jobs_table_id, job_id)
    except BaserowError as e:
        log.error("Failed to load job %s: %s", job_id, e)
        _raise_for(e, "Não foi possível carregar a vaga.")
    ensure_owner(job, current_user)
    return job


@router.post("", status_code=201)
async def create_job(
    req: JobCreate,
    cfg: Config = Depends(get_config),
    baserow: BaserowClient = Depends(get_baserow),
    current_user: dict = Depends(get_current_user),
):
    title = req.titulo.strip()
    if not title:
        raise HTTPException(status_code=400, detail="O título da vaga é obrigatório.")
    if req.usuario_id is None:
        raise HTTPException(status_code=400, detail="O ID do usuário (usuario_id) é obrigatório.")
    ensure_same_user(current_user, req.usuario_id)

    fields = dict(req.model_extra or {})
    fields.update({"titulo": title, "usuario": [req.usuario_id]})
    try:
        return await baserow.create_row(cfg.jobs_table_id, fields)
    except BaserowError as e:
        log.error("Failed to create job: %s", e)
        _raise_for(e, "Não foi possível criar a vaga.")


@router.patch("/{job_id}")
async def update_job(
    job_id: int,
    req: JobUpdate,
    cfg: Config = Depends(get_config),
    baserow: BaserowClient = Depends(get_baserow),
    current_user: dict = Depends(get_current_user),
):
    fields = req.model_dump(exclude_none=True)
    if "titulo" in fields and not fields["titulo"].strip():
        raise HTTPException(status_code=400, detail="O título da vaga é obrigatório.")
    # Ownership moves only through create
    fields.pop("usuario", None)

    await _owned_job(baserow, cfg, job_id, current_user)
    try:
        return await baserow.update_row(cfg.jobs_table_id, job_id, fields)
    except BaserowError as e:
        log.error("Failed to update job %s: %s", job_id, e)
        _raise_for(e, "Não foi possível atualizar a vaga.")


@router.delete("/{job_id}")
async def delete_job(
    job_id: int,
    cfg: Config = Depends(get_config),
    baserow: BaserowClient = Depends(get_baserow),
    current_user: dict = Depends(get_current_user),
):
    await _owned_job(baserow, cfg, job_id, current_user)
    try:
        await baserow.delete_row(cfg.jobs_table_id, job_id)
    except BaserowError as e:
        log.error("Failed to delete job %s: %s", job_id, e)
        _raise_for(e, "Não foi possível excluir a vaga.")
    return {"success": True, "message": "Vaga excluída com sucesso."}
