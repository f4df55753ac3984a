"""Pydantic models: shared between gateway routes and the client core.

Field aliases carry the Baserow column names (Portuguese), which are also the
JSON names on the gateway's wire.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ── Enums ──────────────────────────────────────────────────────────────────

class PipelineStatus(str, Enum):
    SCREENING = "Triagem"
    INTERVIEW = "Entrevista"
    APPROVED = "Aprovado"
    REJECTED = "Reprovado"


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


# ── Baserow field shapes ──────────────────────────────────────────────────

class LinkedRow(BaseModel):
    id: int
    value: str = ""


class StatusOption(BaseModel):
    id: int = 0
    value: PipelineStatus


class ResumeFile(BaseModel):
    model_config = ConfigDict(extra="allow")

    url: str
    name: str = ""


def _links(value: Any) -> Any:
    # Baserow returns null, or a plain string for legacy rows, on unlinked fields
    if value is None or isinstance(value, str):
        return []
    return value


# ── User / Auth ───────────────────────────────────────────────────────────

class UserProfile(_WireModel):
    id: int
    name: str = Field("", alias="nome")
    email: str = ""
    company: str | None = Field(None, alias="empresa")
    phone: str | None = Field(None, alias="telefone")
    avatar_url: str | None = None
    google_refresh_token: str | None = None

    @classmethod
    def from_row(cls, row: dict) -> UserProfile:
        """Build the public profile from a users-table row (drops the password hash)."""
        return cls(
            id=row["id"],
            name=row.get("nome") or "",
            email=row.get("Email") or "",
            company=row.get("empresa"),
            phone=row.get("telefone"),
            avatar_url=row.get("avatar_url") or None,
            google_refresh_token=row.get("google_refresh_token") or None,
        )


class SignUpRequest(BaseModel):
    nome: str = ""
    empresa: str = ""
    telefone: str = ""
    email: str = ""
    password: str = ""


class LoginRequest(BaseModel):
    email: str = ""
    password: str = ""


# ── Job ────────────────────────────────────────────────────────────────────

class JobPosting(_WireModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: int
    title: str = Field("", alias="titulo")
    owners: list[LinkedRow] = Field(default_factory=list, alias="usuario")

    @field_validator("owners", mode="before")
    @classmethod
    def normalize_links(cls, value: Any) -> Any:
        return _links(value)

    @property
    def owner_id(self) -> int | None:
        return self.owners[0].id if self.owners else None


class JobCreate(BaseModel):
    model_config = ConfigDict(extra="allow")

    titulo: str = ""
    usuario_id: int | None = None


class JobUpdate(BaseModel):
    model_config = ConfigDict(extra="allow")

    titulo: str | None = None


# ── Candidate ──────────────────────────────────────────────────────────────

class Candidate(_WireModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: int
    name: str = Field("", alias="nome")
    email: str | None = None
    phone: str | None = Field(None, alias="telefone")
    jobs: list[LinkedRow] = Field(default_factory=list, alias="vaga")
    owners: list[LinkedRow] = Field(default_factory=list, alias="usuario")
    resume: list[ResumeFile] = Field(default_factory=list, alias="curriculo")
    score: float | None = None
    ai_summary: str | None = Field(None, alias="resumo_ia")
    status: StatusOption | None = None
    screened_at: str | None = Field(None, alias="data_triagem")
    gender: str | None = Field(None, alias="sexo")
    education: str | None = Field(None, alias="escolaridade")
    age: int | None = Field(None, alias="idade")

    @field_validator("jobs", "owners", "resume", mode="before")
    @classmethod
    def normalize_links(cls, value: Any) -> Any:
        return _links(value)

    @property
    def status_value(self) -> PipelineStatus | None:
        return self.status.value if self.status else None

    def applies_to(self, job_id: int) -> bool:
        return any(link.id == job_id for link in self.jobs)


class CandidateCreate(BaseModel):
    nome: str = ""
    email: str | None = None
    telefone: str | None = None
    vaga_id: int | None = None


class StatusUpdate(BaseModel):
    status: PipelineStatus


# ── Google Calendar ───────────────────────────────────────────────────────

class Calendar(BaseModel):
    id: str
    summary: str = ""
    primary: bool = False


class DisconnectRequest(BaseModel):
    userId: int | None = None


class EventData(BaseModel):
    start: str
    end: str
    title: str = ""
    details: str = ""


class CreateEventRequest(BaseModel):
    userId: int | None = None
    eventData: EventData | None = None
    calendarId: str | None = None
    candidate: dict | None = None
    job: dict | None = None


class EventRequest(_WireModel):
    """A single interview booking, built from form input plus candidate/job context."""

    start: datetime
    end: datetime
    title: str
    details: str = ""
    calendar_id: str = Field(alias="calendarId")

    def event_data(self) -> dict[str, str]:
        return {
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "title": self.title,
            "details": self.details,
        }
