import pytest
from pydantic import ValidationError

from scorekeeper.settings import ScoreKeeperSettings

_ENV_VARS = (
    "SCOREKEEPER_STATE_FILE",
    "SCOREKEEPER_LOG_DIR",
    "SCOREKEEPER_LOG_LEVEL",
    "SCOREKEEPER_LOG_FORMAT",
    "SCOREKEEPER_AUTO_ADVANCE_ROUNDS",
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestScoreKeeperSettings:
    def test_defaults(self, clean_env):
        settings = ScoreKeeperSettings()

        assert settings.state_file == "backend/data/scorekeeper.json"
        assert settings.log_dir is None
        assert settings.log_level == "INFO"
        assert settings.log_format == "console"
        assert settings.auto_advance_rounds is False

    def test_reads_prefixed_env(self, clean_env):
        clean_env.setenv("SCOREKEEPER_STATE_FILE", "/tmp/state.json")
        clean_env.setenv("SCOREKEEPER_AUTO_ADVANCE_ROUNDS", "true")

        settings = ScoreKeeperSettings()

        assert settings.state_file == "/tmp/state.json"
        assert settings.auto_advance_rounds is True

    def test_log_level_normalized(self, clean_env):
        clean_env.setenv("SCOREKEEPER_LOG_LEVEL", "debug")

        assert ScoreKeeperSettings().log_level == "DEBUG"

    def test_invalid_log_level_rejected(self):
        with pytest.raises(ValidationError, match="log_level"):
            ScoreKeeperSettings(log_level="chatty")

    def test_log_format_normalized(self):
        assert ScoreKeeperSettings(log_format="JSON").log_format == "json"

    def test_invalid_log_format_rejected(self):
        with pytest.raises(ValidationError, match="log_format"):
            ScoreKeeperSettings(log_format="xml")

    def test_blank_log_dir_disables_file_logging(self):
        assert ScoreKeeperSettings(log_dir="  ").log_dir is None

    def test_empty_state_file_rejected(self):
        with pytest.raises(ValidationError, match="state_file"):
            ScoreKeeperSettings(state_file="")
