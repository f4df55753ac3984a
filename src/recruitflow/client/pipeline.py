"""Kanban pipeline coordination: status moves and interview scheduling for one job."""

from __future__ import annotations

import logging

from recruitflow.client.errors import ClientError, NotConnectedError
from recruitflow.client.google import GoogleConnection
from recruitflow.client.http import ApiClient
from recruitflow.client.scheduling import SchedulingSession
from recruitflow.client.session import SessionStore
from recruitflow.client.store import DataStore
from recruitflow.models import Candidate, JobPosting, PipelineStatus

log = logging.getLogger(__name__)


class PipelineCoordinator:
    def __init__(self, api: ApiClient, session: SessionStore, data: DataStore, google: GoogleConnection) -> None:
        self._api = api
        self._session = session
        self._data = data
        self._google = google

    async def move_candidate(self, candidate_id: int, status: PipelineStatus) -> None:
        """Apply *status* locally, then confirm with the gateway.

        On failure the previous status is shown again at once, then the whole
        dataset is reloaded so the store matches what the backend holds, and the
        error is re-raised.
        """
        previous = self._data.update_candidate_status(candidate_id, status)
        try:
            await self._api.patch(
                f"/api/candidates/{candidate_id}/status",
                json={"status": status.value},
                default_error="Não foi possível atualizar o status.",
            )
        except ClientError as e:
            log.error("Status update of candidate %s to %s failed: %s", candidate_id, status.value, e)
            self._data.set_candidate_status(candidate_id, previous)
            # The write may have landed even though the reply was lost
            await self.resync()
            raise
        log.info("Candidate %s moved to %s", candidate_id, status.value)

    def open_scheduling(self, candidate: Candidate, job: JobPosting) -> SchedulingSession:
        """Start a scheduling session; call ``open()`` on the result to load calendars."""
        if not self._google.is_connected:
            raise NotConnectedError("Conecte sua conta Google em 'Configurações' para agendar.")

        async def after_scheduled() -> None:
            await self._after_scheduled(candidate.id)

        return SchedulingSession(self._api, self._session, candidate, job, on_scheduled=after_scheduled)

    async def resync(self) -> None:
        if self._session.profile is not None:
            await self._data.fetch_all(self._session.profile)

    async def _after_scheduled(self, candidate_id: int) -> None:
        current = self._data.get_candidate(candidate_id)
        if current is not None and current.status_value is not PipelineStatus.INTERVIEW:
            try:
                await self.move_candidate(candidate_id, PipelineStatus.INTERVIEW)
            except ClientError as e:
                log.warning("Interview booked but candidate %s kept its status: %s", candidate_id, e)
        await self.resync()
