"""Authentication helpers: JWT session tokens + password hashing."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import bcrypt
import jwt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from recruitflow.baserow import BaserowClient, BaserowError
from recruitflow.config import Config

JWT_ALGORITHM = "HS256"
JWT_EXPIRE_DAYS = 7

_bearer_scheme = HTTPBearer(auto_error=False)

FORBIDDEN = "Acesso negado a recursos de outro usuário."


# ── Password helpers ──────────────────────────────────────────────────────

def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=10)).decode()


def verify_password(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode(), hashed.encode())
    except ValueError:
        # Malformed hash stored in the users table
        return False


# ── JWT helpers ───────────────────────────────────────────────────────────

def create_token(secret: str, user_id: int, email: str) -> str:
    payload = {
        "sub": str(user_id),
        "email": email,
        "exp": datetime.now(timezone.utc) + timedelta(days=JWT_EXPIRE_DAYS),
    }
    return jwt.encode(payload, secret, algorithm=JWT_ALGORITHM)


def decode_token(secret: str, token: str) -> dict:
    return jwt.decode(token, secret, algorithms=[JWT_ALGORITHM])


# ── FastAPI dependencies ──────────────────────────────────────────────────

def get_config(request: Request) -> Config:
    return request.app.state.config


def get_baserow(request: Request) -> BaserowClient:
    return request.app.state.baserow


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme),
    cfg: Config = Depends(get_config),
    baserow: BaserowClient = Depends(get_baserow),
) -> dict:
    """Decode the JWT from the Authorization header and return the user row."""
    if credentials is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token não fornecido.")
    try:
        payload = decode_token(cfg.jwt_secret, credentials.credentials)
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Sessão expirada.")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token inválido.")

    try:
        return await baserow.get_row(cfg.users_table_id, int(payload["sub"]))
    except BaserowError as e:
        if e.not_found:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Usuário não encontrado.")
        raise HTTPException(status_code=500, detail="Falha ao validar a sessão.")


def ensure_same_user(current_user: dict, user_id: int) -> None:
    """403 unless *user_id* is the authenticated user."""
    if current_user["id"] != user_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=FORBIDDEN)


def ensure_owner(row: dict, current_user: dict) -> None:
    """403 unless the row's ``usuario`` links include the authenticated user."""
    if not any(link.get("id") == current_user["id"] for link in row.get("usuario") or []):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=FORBIDDEN)
