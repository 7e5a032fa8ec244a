"""Serialization of AppState to and from the persisted JSON blob."""

import structlog
from pydantic import ValidationError

from scorekeeper.logic.state import AppState

logger = structlog.get_logger()

_MAX_LOGGED_ERRORS = 5


def dump_state(state: AppState) -> str:
    """Serialize the whole application state to JSON."""
    return state.model_dump_json()


def load_state(content: str | bytes | None) -> AppState:
    """
    Parse a persisted blob into AppState.

    Missing or null collections default to empty, so blobs from older
    versions load. Unparseable or invalid blobs yield a fresh default state
    instead of failing startup.
    """
    if content is None or not content.strip():
        return AppState()
    try:
        return AppState.model_validate_json(content)
    except ValidationError as exc:
        locations = [".".join(str(part) for part in error["loc"]) for error in exc.errors()[:_MAX_LOGGED_ERRORS]]
        logger.warning("discarding unreadable state blob", error_count=exc.error_count(), locations=locations)
        return AppState()
