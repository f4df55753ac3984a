"""User routes: profile lookup."""

from fastapi import APIRouter, Depends, HTTPException

from recruitflow.auth import ensure_same_user, get_baserow, get_config, get_current_user
from recruitflow.baserow import BaserowClient, BaserowError
from recruitflow.config import Config
from recruitflow.models import UserProfile

router = APIRouter()


@router.get("/{user_id}")
async def get_user(
    user_id: int,
    cfg: Config = Depends(get_config),
    baserow: BaserowClient = Depends(get_baserow),
    current_user: dict = Depends(get_current_user),
):
    ensure_same_user(current_user, user_id)
    try:
        row = await baserow.get_row(cfg.users_table_id, user_id)
    except BaserowError as e:
        if e.not_found:
            raise HTTPException(status_code=404, detail="Usuário não encontrado.")
        raise HTTPException(status_code=500, detail=str(e))
    return UserProfile.from_row(row).to_wire()
