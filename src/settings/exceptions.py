"""Exceptions for the settings module."""


class SettingsError(Exception):
    """Base exception for settings errors."""

    pass


class InvalidSettingsError(SettingsError):
    """Raised when settings cannot be used for a summary run."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Invalid summary settings: {reason}")


class SettingsStoreError(SettingsError):
    """Raised when the settings store cannot be read or written."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Settings store error: {reason}")
