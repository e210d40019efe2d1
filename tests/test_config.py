"""Tests for configuration management."""

import stat

import pytest

from pygits3.config import Config
from pygits3.exceptions import ConfigurationError

CONFIG_KEYS = [
    "PYGITS3_BUCKET",
    "PYGITS3_DISTRIBUTION_ID",
    "PYGITS3_REGION",
    "PYGITS3_PROFILE",
    "PYGITS3_ENDPOINT_URL",
    "PYGITS3_ACL",
    "PYGITS3_EXCLUDE",
    "PYGITS3_WORKERS",
    "PYGITS3_CONFIG_DIR",
    "AWS_REGION",
]


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every configuration variable from the environment."""
    for key in CONFIG_KEYS:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


@pytest.fixture
def cfg(tmp_path, clean_env):
    """Config reading from an empty temporary directory."""
    return Config(config_dir=tmp_path)


class TestConfigDefaults:
    """Tests for default values."""

    def test_defaults(self, cfg):
        """Test values when nothing is configured."""
        assert cfg.bucket is None
        assert cfg.distribution_id is None
        assert cfg.region is None
        assert cfg.acl == "public-read"
        assert cfg.excluded_prefixes == [".git", ".ssh"]
        assert cfg.workers == 1
        assert cfg.is_configured() is False

    def test_config_dir_from_environment(self, clean_env, tmp_path):
        """Test that PYGITS3_CONFIG_DIR moves the config file."""
        clean_env.setenv("PYGITS3_CONFIG_DIR", str(tmp_path / "custom"))
        assert Config().get_config_path() == tmp_path / "custom" / "config"


class TestConfigSources:
    """Tests for the environment and file layers."""

    def test_environment(self, cfg, clean_env):
        """Test that environment variables are read."""
        clean_env.setenv("PYGITS3_BUCKET", "env-bucket")
        clean_env.setenv("PYGITS3_DISTRIBUTION_ID", "E1")
        clean_env.setenv("AWS_REGION", "eu-west-1")

        assert cfg.bucket == "env-bucket"
        assert cfg.distribution_id == "E1"
        assert cfg.region == "eu-west-1"
        assert cfg.is_configured() is True

    def test_file(self, cfg):
        """Test that values are read from the config file."""
        cfg.get_config_path().write_text(
            "PYGITS3_BUCKET=file-bucket\nPYGITS3_EXCLUDE=.git, .ssh, private\n"
        )

        assert cfg.bucket == "file-bucket"
        assert cfg.excluded_prefixes == [".git", ".ssh", "private"]

    def test_environment_wins_over_file(self, cfg, clean_env):
        """Test the lookup order."""
        cfg.get_config_path().write_text("PYGITS3_BUCKET=file-bucket\n")
        clean_env.setenv("PYGITS3_BUCKET", "env-bucket")

        assert cfg.bucket == "env-bucket"

    @pytest.mark.parametrize("value", ["none", "NONE", "None"])
    def test_acl_disabled(self, cfg, clean_env, value):
        """Test that 'none' disables the ACL."""
        clean_env.setenv("PYGITS3_ACL", value)
        assert cfg.acl is None

    def test_acl_custom(self, cfg, clean_env):
        """Test a custom canned ACL."""
        clean_env.setenv("PYGITS3_ACL", "bucket-owner-full-control")
        assert cfg.acl == "bucket-owner-full-control"


class TestConfigWorkers:
    """Tests for the workers setting."""

    def test_workers(self, cfg, clean_env):
        """Test a valid number of workers."""
        clean_env.setenv("PYGITS3_WORKERS", "8")
        assert cfg.workers == 8

    @pytest.mark.parametrize("value", ["zero", "1.5"])
    def test_workers_not_integer(self, cfg, clean_env, value):
        """Test that a non-integer is rejected."""
        clean_env.setenv("PYGITS3_WORKERS", value)
        with pytest.raises(ConfigurationError, match="must be an integer"):
            cfg.workers

    def test_workers_below_one(self, cfg, clean_env):
        """Test that zero workers are rejected."""
        clean_env.setenv("PYGITS3_WORKERS", "0")
        with pytest.raises(ConfigurationError, match="at least 1"):
            cfg.workers


class TestConfigSave:
    """Tests for saving configuration."""

    def test_save_and_reload(self, tmp_path, clean_env):
        """Test that saved values are read back."""
        cfg = Config(config_dir=tmp_path / "pygits3")

        path = cfg.save(bucket="www.example.com", distribution_id="E2", region=None)

        assert path == tmp_path / "pygits3" / "config"
        assert stat.S_IMODE(path.stat().st_mode) == 0o600
        reloaded = Config(config_dir=tmp_path / "pygits3")
        assert reloaded.bucket == "www.example.com"
        assert reloaded.distribution_id == "E2"
        assert "PYGITS3_REGION" not in path.read_text()

    def test_save_updates_existing_value(self, cfg):
        """Test that saving twice replaces the value."""
        cfg.save(bucket="first")
        cfg.save(bucket="second")

        assert cfg.bucket == "second"
        assert cfg.get_config_path().read_text().count("PYGITS3_BUCKET") == 1
