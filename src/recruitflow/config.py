"""Configuration loading from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv


@dataclass
class Config:
    baserow_url: str = "https://api.baserow.io"
    baserow_token: str = ""

    users_table_id: int = 711
    jobs_table_id: int = 709
    candidates_table_id: int = 710
    whatsapp_candidates_table_id: int = 712
    appointments_table_id: int = 713

    google_client_id: str = ""
    google_client_secret: str = ""
    google_redirect_uri: str = ""
    google_timezone: str = "America/Sao_Paulo"

    n8n_screening_webhook_url: str = ""

    frontend_url: str = "http://localhost:5173"
    jwt_secret: str = "recruitflow-dev-secret-change-me"
    port: int = 3001

    @property
    def google_configured(self) -> bool:
        return bool(self.google_client_id and self.google_client_secret and self.google_redirect_uri)

    @property
    def allowed_origins(self) -> list[str]:
        origins = [self.frontend_url]
        if self.frontend_url.startswith("https://"):
            origins.append(self.frontend_url.replace("https://", "https://www.", 1))
        return origins


def load_config(env_file: str | None = None) -> Config:
    """Load configuration from .env file and environment variables."""
    if env_file:
        load_dotenv(env_file)
    else:
        load_dotenv()

    return Config(
        baserow_url=os.getenv("BASEROW_URL", "https://api.baserow.io").rstrip("/"),
        baserow_token=os.getenv("BASEROW_TOKEN", ""),
        users_table_id=int(os.getenv("BASEROW_USERS_TABLE_ID", "711")),
        jobs_table_id=int(os.getenv("BASEROW_JOBS_TABLE_ID", "709")),
        candidates_table_id=int(os.getenv("BASEROW_CANDIDATES_TABLE_ID", "710")),
        whatsapp_candidates_table_id=int(os.getenv("BASEROW_WHATSAPP_CANDIDATES_TABLE_ID", "712")),
        appointments_table_id=int(os.getenv("BASEROW_APPOINTMENTS_TABLE_ID", "713")),
        google_client_id=os.getenv("GOOGLE_CLIENT_ID", ""),
        google_client_secret=os.getenv("GOOGLE_CLIENT_SECRET", ""),
        google_redirect_uri=os.getenv("GOOGLE_REDIRECT_URI", ""),
        google_timezone=os.getenv("GOOGLE_TIMEZONE", "America/Sao_Paulo"),
        n8n_screening_webhook_url=os.getenv("N8N_TRIAGEM_WEBHOOK_URL", ""),
        frontend_url=os.getenv("FRONTEND_URL", "http://localhost:5173"),
        jwt_secret=os.getenv("JWT_SECRET", "recruitflow-dev-secret-change-me"),
        port=int(os.getenv("PORT", "3001")),
    )
