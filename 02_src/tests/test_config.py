"""Tests for configuration loading."""

from pathlib import Path

from apptrace.config import DEFAULT_ENDPOINT, Config, load_config, resolve_log_path


class TestLoadConfig:
    """Tests for load_config()."""

    def test_defaults(self, tmp_path):
        """Test defaults without any environment."""
        config = load_config(tmp_path)

        assert config.root_path == tmp_path.resolve()
        assert config.environment == "development"
        assert config.endpoint == DEFAULT_ENDPOINT
        assert config.push_api_key is None
        assert config.is_active is False

    def test_environment_variables(self, tmp_path, monkeypatch):
        """Test reading APPTRACE_* variables."""
        monkeypatch.setenv("APPTRACE_PUSH_API_KEY", "key")
        monkeypatch.setenv("APPTRACE_ACTIVE", "true")
        monkeypatch.setenv("APPTRACE_ENV", "staging")
        monkeypatch.setenv("APPTRACE_ENDPOINT", "https://collector.test/")
        monkeypatch.setenv("APPTRACE_FLUSH_INTERVAL", "5")

        config = load_config(tmp_path)

        assert config.is_active is True
        assert config.environment == "staging"
        assert config.endpoint == "https://collector.test"
        assert config.flush_interval == 5.0

    def test_dotenv_file(self, tmp_path):
        """Test that a .env file in the root is read."""
        (tmp_path / ".env").write_text("APPTRACE_PUSH_API_KEY=from-file\nAPPTRACE_ACTIVE=1\n")

        config = load_config(tmp_path)

        assert config.push_api_key == "from-file"
        assert config.is_active is True

    def test_process_env_wins_over_dotenv(self, tmp_path, monkeypatch):
        """Test that existing variables are not overridden by .env."""
        monkeypatch.setenv("APPTRACE_PUSH_API_KEY", "from-env")
        (tmp_path / ".env").write_text("APPTRACE_PUSH_API_KEY=from-file\n")

        assert load_config(tmp_path).push_api_key == "from-env"

    def test_overrides_win(self, tmp_path, monkeypatch, caplog):
        """Test that explicit overrides beat the environment."""
        monkeypatch.setenv("APPTRACE_ACTIVE", "false")

        config = load_config(
            tmp_path,
            "production",
            {"push_api_key": "key", "active": True, "ignore_actions": ["Health#show"]},
        )

        assert config.environment == "production"
        assert config.is_active is True
        assert not hasattr(config, "ignore_actions")
        assert "Ignoring unknown config option ignore_actions" in caplog.text

    def test_active_requires_key(self, tmp_path):
        """Test that the active flag alone does not activate reporting."""
        config = load_config(tmp_path, overrides={"active": True})

        assert config.active is True
        assert config.is_active is False


class TestLogPath:
    """Tests for log path resolution."""

    def test_default_log_path(self, tmp_path):
        """Test the default log file location."""
        assert resolve_log_path(tmp_path) == tmp_path / "log" / "apptrace.log"

    def test_relative_log_path(self, tmp_path):
        """Test that relative paths hang off the root."""
        config = Config(root_path=tmp_path, log_path=Path("var/app.log"))
        assert config.resolved_log_path() == tmp_path / "var" / "app.log"

    def test_absolute_log_path(self, tmp_path):
        """Test that absolute paths are kept."""
        absolute = tmp_path / "elsewhere.log"
        assert resolve_log_path("/srv/app", absolute) == absolute
