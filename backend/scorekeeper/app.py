"""Application wiring: settings -> logging -> storage -> store."""

import structlog

from scorekeeper.settings import ScoreKeeperSettings
from scorekeeper.store.store import AppStateStore
from shared.logging import setup_logging
from shared.storage import LocalStateStorage, StateStorage

logger = structlog.get_logger()


def create_store(
    settings: ScoreKeeperSettings | None = None,
    storage: StateStorage | None = None,
) -> AppStateStore:
    """Build the application's single AppStateStore.

    Settings are read from SCOREKEEPER_* environment variables when not
    given. storage defaults to a LocalStateStorage on settings.state_file.
    """
    settings = settings or ScoreKeeperSettings()
    log_file = setup_logging(log_format=settings.log_format, level=settings.log_level, log_dir=settings.log_dir)

    storage = storage or LocalStateStorage(settings.state_file)
    store = AppStateStore(storage, auto_advance_rounds=settings.auto_advance_rounds)
    logger.info(
        "score keeper ready",
        log_file=str(log_file) if log_file else None,
        saved_players=len(store.state.saved_players),
        history=len(store.state.game_history),
        active_session=store.is_session_active,
    )
    return store
