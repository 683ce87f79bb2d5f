"""Settings store interfaces and implementations.

A store owns the persisted summary settings. It is constructed with an
optional change handler which it calls with ``(old, new)`` after every
successful write; ``old`` is None on the first write.
"""

import json
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, Optional

from .exceptions import SettingsStoreError
from .models import Frequency, Settings

logger = logging.getLogger(__name__)

ChangeHandler = Callable[[Optional[Settings], Settings], None]


def settings_from_env() -> Settings:
    """Build seed settings from environment variables.

    Environment variables:
        SUMMARY_ENABLED: "1"/"true" to enable summaries. Defaults to off.
        SUMMARY_RECIPIENT: Destination email address.
        SUMMARY_FREQUENCY: daily, weekly or monthly. Defaults to daily.
    """
    return Settings.from_dict(
        {
            "enabled": os.getenv("SUMMARY_ENABLED", ""),
            "email": os.getenv("SUMMARY_RECIPIENT", ""),
            "frequency": os.getenv("SUMMARY_FREQUENCY", Frequency.DAILY.value),
        }
    )


class SettingsStore(ABC):
    """Interface for reading and writing summary settings."""

    def __init__(self, on_change: Optional[ChangeHandler] = None):
        self._on_change = on_change

    @abstractmethod
    def get(self) -> Settings:
        """Return the current settings snapshot."""
        pass

    @abstractmethod
    def _load(self) -> Optional[Settings]:
        """Return the stored settings, or None if nothing was written yet."""
        pass

    @abstractmethod
    def _save(self, settings: Settings) -> None:
        """Persist settings."""
        pass

    def update(self, settings: Settings) -> Settings:
        """Write new settings and notify the change handler.

        Last write wins. The handler runs after the write succeeds, so it
        always observes the new snapshot through ``get()``.

        Args:
            settings: The new settings.

        Returns:
            The settings that were written.
        """
        old = self._load()
        self._save(settings)
        logger.info(
            "Summary settings updated (enabled=%s, frequency=%s)",
            settings.enabled,
            settings.frequency.value,
        )
        if self._on_change is not None:
            self._on_change(old, settings)
        return settings


class InMemorySettingsStore(SettingsStore):
    """Keeps settings in memory. Used in tests and one-off runs."""

    def __init__(
        self,
        initial: Optional[Settings] = None,
        on_change: Optional[ChangeHandler] = None,
    ):
        super().__init__(on_change=on_change)
        self._settings = initial

    def get(self) -> Settings:
        return self._settings if self._settings is not None else Settings()

    def _load(self) -> Optional[Settings]:
        return self._settings

    def _save(self, settings: Settings) -> None:
        self._settings = settings


class JsonFileSettingsStore(SettingsStore):
    """Persists settings as a small JSON document on disk.

    If the file does not exist yet, ``get()`` returns the ``defaults``
    settings (usually seeded from the environment) without writing them.
    """

    def __init__(
        self,
        path: Optional[Path] = None,
        defaults: Optional[Settings] = None,
        on_change: Optional[ChangeHandler] = None,
    ):
        """Initialize the store.

        Args:
            path: Settings file location. Defaults to SUMMARY_SETTINGS_PATH
                env var, or config/settings.json.
            defaults: Settings returned while the file does not exist.
            on_change: Handler called with (old, new) after each write.
        """
        super().__init__(on_change=on_change)
        if path:
            self._path = path
        elif os.environ.get("SUMMARY_SETTINGS_PATH"):
            self._path = Path(os.environ["SUMMARY_SETTINGS_PATH"])
        else:
            self._path = Path(__file__).parent.parent.parent / "config" / "settings.json"
        self._defaults = defaults or Settings()

    @property
    def path(self) -> Path:
        return self._path

    def get(self) -> Settings:
        return self._load() or self._defaults

    def _load(self) -> Optional[Settings]:
        if not self._path.exists():
            return None
        try:
            with open(self._path) as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise SettingsStoreError(f"cannot read {self._path}: {e}") from e
        if not isinstance(data, dict):
            raise SettingsStoreError(f"{self._path} does not contain a JSON object")
        return Settings.from_dict(data)

    def _save(self, settings: Settings) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
            with open(tmp_path, "w") as f:
                json.dump(settings.to_dict(), f, indent=2)
            tmp_path.replace(self._path)
        except OSError as e:
            raise SettingsStoreError(f"cannot write {self._path}: {e}") from e
