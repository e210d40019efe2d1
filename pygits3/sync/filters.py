"""Key filtering for control namespaces that must never be synced."""

import re
from collections.abc import Iterable
from typing import Optional

from ..exceptions import ConfigurationError
from ..utils import DEFAULT_EXCLUDED_PREFIXES


class PathFilter:
    """Excludes keys under a set of reserved prefixes.

    A prefix matches the bare key itself and every key nested below it,
    so ``.git`` matches ``.git`` and ``.git/config`` but not ``.gitignore``.

    Examples:
        >>> path_filter = PathFilter([".git", ".ssh"])
        >>> path_filter.is_excluded(".git/HEAD")
        True
        >>> path_filter.is_excluded(".gitignore")
        False
    """

    def __init__(self, prefixes: Optional[Iterable[str]] = None):
        """Initialize the filter.

        Args:
            prefixes: Reserved prefixes (defaults to ``.git`` and ``.ssh``)

        Raises:
            ConfigurationError: If a prefix is empty after normalization
        """
        if prefixes is None:
            prefixes = DEFAULT_EXCLUDED_PREFIXES

        normalized: list[str] = []
        for prefix in prefixes:
            value = prefix.strip().strip("/")
            if not value:
                raise ConfigurationError(f"Invalid excluded prefix: {prefix!r}")
            if value not in normalized:
                normalized.append(value)
        self.prefixes: tuple[str, ...] = tuple(normalized)

        # matches: .git, .git/test, ...
        if self.prefixes:
            alternatives = "|".join(re.escape(p) for p in self.prefixes)
            self._pattern: Optional[re.Pattern[str]] = re.compile(
                rf"^(?:{alternatives})(?:/.*)?$", re.DOTALL
            )
        else:
            self._pattern = None

    def is_excluded(self, key: str) -> bool:
        """Check whether a key belongs to a reserved namespace."""
        if self._pattern is None:
            return False
        return self._pattern.match(key) is not None

    def __repr__(self) -> str:
        return f"PathFilter(prefixes={list(self.prefixes)!r})"
