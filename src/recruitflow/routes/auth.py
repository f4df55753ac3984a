"""Auth routes: signup, login, me."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from recruitflow.auth import create_token, get_baserow, get_config, get_current_user, hash_password, verify_password
from recruitflow.baserow import BaserowClient, BaserowError
from recruitflow.config import Config
from recruitflow.models import LoginRequest, SignUpRequest, UserProfile

router = APIRouter()
log = logging.getLogger(__name__)


async def _find_user_by_email(baserow: BaserowClient, cfg: Config, email: str) -> dict | None:
    rows = await baserow.list_rows(cfg.users_table_id, {"filter__Email__equal": email})
    return rows[0] if rows else None


@router.post("/signup", status_code=status.HTTP_201_CREATED)
async def signup(
    req: SignUpRequest,
    cfg: Config = Depends(get_config),
    baserow: BaserowClient = Depends(get_baserow),
):
    if not req.email or not req.password or not req.nome:
        raise HTTPException(status_code=400, detail="Nome, email e senha são obrigatórios.")

    email = req.email.strip().lower()
    try:
        if await _find_user_by_email(baserow, cfg, email):
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Este e-mail já está cadastrado.")

        row = await baserow.create_row(cfg.users_table_id, {
            "nome": req.nome,
            "empresa": req.empresa,
            "telefone": req.telefone,
            "Email": email,
            "senha_hash": hash_password(req.password),
        })
    except BaserowError as e:
        log.error("Signup failed for %s: %s", email, e)
        raise HTTPException(status_code=500, detail=str(e) or "Erro ao criar conta.")

    user = UserProfile.from_row(row)
    return {"success": True, "user": user.to_wire(), "token": create_token(cfg.jwt_secret, user.id, user.email)}


@router.post("/login")
async def login(
    req: LoginRequest,
    cfg: Config = Depends(get_config),
    baserow: BaserowClient = Depends(get_baserow),
):
    if not req.email or not req.password:
        raise HTTPException(status_code=400, detail="Email e senha são obrigatórios.")

    try:
        row = await _find_user_by_email(baserow, cfg, req.email.strip().lower())
    except BaserowError as e:
        log.error("Login lookup failed: %s", e)
        raise HTTPException(status_code=500, detail=str(e) or "Erro ao fazer login.")

    if not row or not row.get("senha_hash") or not verify_password(req.password, row["senha_hash"]):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="E-mail ou senha inválidos.")

    user = UserProfile.from_row(row)
    return {"success": True, "user": user.to_wire(), "token": create_token(cfg.jwt_secret, user.id, user.email)}


@router.get("/me")
async def me(current_user: dict = Depends(get_current_user)):
    return UserProfile.from_row(current_user).to_wire()
