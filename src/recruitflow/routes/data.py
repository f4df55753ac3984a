"""Bulk data route: every job and candidate owned by a recruiter."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from recruitflow.auth import ensure_same_user, get_baserow, get_config, get_current_user
from recruitflow.baserow import BaserowClient, BaserowError
from recruitflow.config import Config

router = APIRouter()
log = logging.getLogger(__name__)


@router.get("/all/{user_id}")
async def all_data(
    user_id: int,
    cfg: Config = Depends(get_config),
    baserow: BaserowClient = Depends(get_baserow),
    current_user: dict = Depends(get_current_user),
):
    ensure_same_user(current_user, user_id)
    owned = {"filter__usuario__link_row_has": user_id}
    try:
        jobs = await baserow.list_rows(cfg.jobs_table_id, owned)
        candidates = await baserow.list_rows(cfg.candidates_table_id, owned)
    except BaserowError as e:
        log.error("Failed to load data for user %s: %s", user_id, e)
        raise HTTPException(status_code=500, detail="Falha ao buscar dados.")
    return {"success": True, "jobs": jobs, "candidates": candidates}
