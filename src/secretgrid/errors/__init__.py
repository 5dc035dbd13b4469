"""Custom exception hierarchy for secretgrid."""

from __future__ import annotations


class SecretGridError(Exception):
    """Base class for all custom errors raised by secretgrid."""


# --- 3-layer hierarchy ---

class DomainError(SecretGridError):
    """Base class for domain-level errors."""


class InfrastructureError(SecretGridError):
    """Base class for infrastructure-level errors."""


class ApplicationError(SecretGridError):
    """Base class for application-level errors."""


# --- Domain errors ---

class EmptyCacheError(DomainError):
    """Raised when the current remote page is requested before any fetch succeeded."""


# --- Infrastructure errors ---

class FetchError(InfrastructureError):
    """Raised when the remote source fails to return a page or an item detail."""


class SourceUnavailableError(FetchError):
    """Raised when no source client has been initialised for the current context."""


class FixtureFormatError(InfrastructureError):
    """Raised when a fixture file cannot be turned into items."""


# --- Application errors ---

class UnknownIntentError(ApplicationError):
    """Raised when the controller receives an intent it has no handler for."""


# --- Settings errors ---

class SettingsError(SecretGridError):
    """Base class for settings related failures."""


class SettingsLoadError(SettingsError):
    """Raised when the settings file cannot be parsed or loaded."""


class SettingsValidationError(SettingsError):
    """Raised when settings data fails schema validation."""
