"""Settings module for the activity summary configuration.

Public API:
    Settings: Snapshot of enabled/recipient/frequency.
    Frequency: Daily, weekly or monthly recurrence.
    SettingsStore: Interface for reading and writing settings.
    InMemorySettingsStore: In-memory implementation.
    JsonFileSettingsStore: JSON file implementation.
    settings_from_env: Seed settings from environment variables.
    SettingsError: Base exception for module errors.
    InvalidSettingsError: Settings cannot be used for a run.
    SettingsStoreError: Store read/write failure.
"""

from .exceptions import InvalidSettingsError, SettingsError, SettingsStoreError
from .models import Frequency, Settings
from .store import (
    ChangeHandler,
    InMemorySettingsStore,
    JsonFileSettingsStore,
    SettingsStore,
    settings_from_env,
)

__all__ = [
    "Settings",
    "Frequency",
    "ChangeHandler",
    "SettingsStore",
    "InMemorySettingsStore",
    "JsonFileSettingsStore",
    "settings_from_env",
    "SettingsError",
    "InvalidSettingsError",
    "SettingsStoreError",
]
