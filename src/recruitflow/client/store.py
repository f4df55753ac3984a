"""Remote data cache: the signed-in recruiter's jobs and candidates."""

from __future__ import annotations

import logging
from typing import Literal

from pydantic import ValidationError

from recruitflow.client.errors import ClientError
from recruitflow.client.http import ApiClient
from recruitflow.models import Candidate, JobPosting, PipelineStatus, StatusOption, UserProfile

log = logging.getLogger(__name__)

SortKey = Literal["score", "nome"]


class DataStore:
    """Jobs + candidates as last loaded from ``/api/data/all``.

    Loading fails closed: any error empties both collections. Candidate status
    changes are optimistic; job deletion waits for the gateway.
    """

    def __init__(self, api: ApiClient) -> None:
        self._api = api
        self.jobs: list[JobPosting] = []
        self.candidates: list[Candidate] = []
        self.is_loading = False
        self.error: str | None = None
        self._generation = 0

    async def fetch_all(self, profile: UserProfile) -> None:
        self._generation += 1
        generation = self._generation
        self.is_loading = True
        self.error = None
        try:
            body = await self._api.get(f"/api/data/all/{profile.id}", default_error="Falha ao carregar dados do servidor.")
            jobs = [JobPosting.model_validate(row) for row in body.get("jobs") or []]
            candidates = [Candidate.model_validate(row) for row in body.get("candidates") or []]
        except (ClientError, ValidationError) as e:
            if generation != self._generation:
                return
            log.error("Failed to load data: %s", e)
            self.jobs, self.candidates = [], []
            self.error = str(e) if isinstance(e, ClientError) else "Dados recebidos em formato inválido."
            self.is_loading = False
            return

        if generation != self._generation:
            log.debug("Discarding stale data load #%d", generation)
            return
        self.jobs, self.candidates = jobs, candidates
        self.is_loading = False

    def clear(self) -> None:
        self._generation += 1
        self.jobs, self.candidates = [], []
        self.error = None
        self.is_loading = False

    # ── Jobs ─────────────────────────────────────────────────────────

    def get_job(self, job_id: int) -> JobPosting | None:
        return next((job for job in self.jobs if job.id == job_id), None)

    def add_job(self, job: JobPosting) -> None:
        self.jobs = [job, *self.jobs]

    def update_job(self, updated: JobPosting) -> None:
        self.jobs = [updated if job.id == updated.id else job for job in self.jobs]

    async def delete_job(self, job_id: int) -> None:
        """Delete on the gateway, then locally. Raises and keeps the job on failure."""
        await self._api.delete(f"/api/jobs/{job_id}", default_error="Não foi possível excluir a vaga.")
        self.jobs = [job for job in self.jobs if job.id != job_id]

    # ── Candidates ───────────────────────────────────────────────────

    def get_candidate(self, candidate_id: int) -> Candidate | None:
        return next((c for c in self.candidates if c.id == candidate_id), None)

    def update_candidate_status(self, candidate_id: int, status: PipelineStatus) -> StatusOption | None:
        """Optimistically set a candidate's status; returns the status it replaced."""
        return self.set_candidate_status(candidate_id, StatusOption(id=0, value=status))

    def set_candidate_status(self, candidate_id: int, status: StatusOption | None) -> StatusOption | None:
        previous = None
        replaced = []
        for c in self.candidates:
            if c.id == candidate_id:
                previous = c.status
                c = c.model_copy(update={"status": status})
            replaced.append(c)
        self.candidates = replaced
        return previous

    def candidates_for_job(self, job_id: int, sort_key: SortKey = "score", descending: bool = True) -> list[Candidate]:
        matching = [c for c in self.candidates if c.applies_to(job_id)]
        if sort_key == "score":
            # Unscored candidates sort after scored ones when descending
            return sorted(matching, key=lambda c: c.score if c.score is not None else float("-inf"), reverse=descending)
        return sorted(matching, key=lambda c: c.name.casefold(), reverse=descending)
