"""Configuration management for PyGitS3.

Values are read from environment variables first and then from the
dotenv-style file ``~/.config/pygits3/config``.
"""

import os
from pathlib import Path
from typing import Optional

from dotenv import dotenv_values, set_key

from .exceptions import ConfigurationError
from .utils import DEFAULT_ACL, DEFAULT_EXCLUDED_PREFIXES

ENV_PREFIX = "PYGITS3_"

BUCKET_KEY = "PYGITS3_BUCKET"
DISTRIBUTION_KEY = "PYGITS3_DISTRIBUTION_ID"
REGION_KEY = "PYGITS3_REGION"
PROFILE_KEY = "PYGITS3_PROFILE"
ENDPOINT_URL_KEY = "PYGITS3_ENDPOINT_URL"
ACL_KEY = "PYGITS3_ACL"
EXCLUDE_KEY = "PYGITS3_EXCLUDE"
WORKERS_KEY = "PYGITS3_WORKERS"


class Config:
    """Layered configuration (environment, then config file)."""

    def __init__(self, config_dir: Optional[Path] = None):
        """Initialize configuration.

        Args:
            config_dir: Directory holding the config file
                (defaults to $PYGITS3_CONFIG_DIR or ~/.config/pygits3)
        """
        if config_dir is None:
            env_dir = os.environ.get("PYGITS3_CONFIG_DIR")
            config_dir = (
                Path(env_dir) if env_dir else Path.home() / ".config" / "pygits3"
            )
        self.config_dir = config_dir

    def get_config_path(self) -> Path:
        """Get the path of the config file."""
        return self.config_dir / "config"

    def _file_values(self) -> dict[str, Optional[str]]:
        path = self.get_config_path()
        if not path.exists():
            return {}
        return dict(dotenv_values(path))

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Look up a raw value.

        Args:
            key: Full variable name (e.g. ``PYGITS3_BUCKET``)
            default: Value returned when the key is set nowhere

        Returns:
            The environment value, else the config file value, else default
        """
        value = os.environ.get(key)
        if value:
            return value
        value = self._file_values().get(key)
        if value:
            return value
        return default

    @property
    def bucket(self) -> Optional[str]:
        return self.get(BUCKET_KEY)

    @property
    def distribution_id(self) -> Optional[str]:
        return self.get(DISTRIBUTION_KEY)

    @property
    def region(self) -> Optional[str]:
        return self.get(REGION_KEY) or os.environ.get("AWS_REGION")

    @property
    def profile(self) -> Optional[str]:
        return self.get(PROFILE_KEY)

    @property
    def endpoint_url(self) -> Optional[str]:
        return self.get(ENDPOINT_URL_KEY)

    @property
    def acl(self) -> Optional[str]:
        """Canned ACL for uploads; ``none`` disables the ACL header."""
        value = self.get(ACL_KEY, DEFAULT_ACL)
        if value is None or value.lower() == "none":
            return None
        return value

    @property
    def excluded_prefixes(self) -> list[str]:
        value = self.get(EXCLUDE_KEY)
        if value is None:
            return list(DEFAULT_EXCLUDED_PREFIXES)
        return [part.strip() for part in value.split(",") if part.strip()]

    @property
    def workers(self) -> int:
        value = self.get(WORKERS_KEY, "1")
        try:
            workers = int(value or "1")
        except ValueError as e:
            raise ConfigurationError(
                f"{WORKERS_KEY} must be an integer, got {value!r}"
            ) from e
        if workers < 1:
            raise ConfigurationError(f"{WORKERS_KEY} must be at least 1")
        return workers

    def is_configured(self) -> bool:
        """Check whether a target bucket is configured."""
        return bool(self.bucket)

    def save(self, **values: Optional[str]) -> Path:
        """Persist values to the config file.

        Args:
            **values: Short names (``bucket``, ``distribution_id``, ``region``,
                ``profile``, ``endpoint_url``, ``acl``) mapped to values;
                ``None`` values are skipped

        Returns:
            Path of the written config file
        """
        path = self.get_config_path()
        path.parent.mkdir(parents=True, exist_ok=True)
        path.touch(exist_ok=True)
        for name, value in values.items():
            if value is None:
                continue
            set_key(str(path), f"{ENV_PREFIX}{name.upper()}", value)
        path.chmod(0o600)
        return path


config = Config()
