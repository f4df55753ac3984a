"""Client application core: session, data cache, Google connection, scheduling."""

from recruitflow.client.context import AppContext
from recruitflow.client.errors import (
    ApiError,
    ClientError,
    FormValidationError,
    NotAuthenticatedError,
    NotConnectedError,
    UnexpectedResponseError,
)
from recruitflow.client.google import GoogleConnection
from recruitflow.client.http import ApiClient
from recruitflow.client.pipeline import PipelineCoordinator
from recruitflow.client.scheduling import ScheduleState, SchedulingSession
from recruitflow.client.session import SessionStore, TokenStorage
from recruitflow.client.store import DataStore

__all__ = [
    "ApiClient",
    "ApiError",
    "AppContext",
    "ClientError",
    "DataStore",
    "FormValidationError",
    "GoogleConnection",
    "NotAuthenticatedError",
    "NotConnectedError",
    "PipelineCoordinator",
    "ScheduleState",
    "SchedulingSession",
    "SessionStore",
    "TokenStorage",
    "UnexpectedResponseError",
]
