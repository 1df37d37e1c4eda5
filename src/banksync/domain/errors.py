"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class ConfigurationError(ValidationError):
    """Configuration file is missing, malformed or incomplete."""


class InvalidRecordError(ValidationError):
    """A transaction record lacks the fields the reconciler needs."""

    def __init__(self, message: str, record=None):
        super().__init__(message)
        self.record = record


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class UnknownProviderError(NotFoundError):
    """Configured provider slug has no registered adapter."""

    def __init__(self, slug: str):
        super().__init__(unknown_provider(slug))
        self.slug = slug


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class AdapterError(Exception):
    """A bank adapter failed to fetch or parse transactions."""


class LedgerApiError(Exception):
    """The ledger rejected a request or could not be reached."""

    def __init__(self, message: str, status_code: int | None = None, detail: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail


def unknown_provider(slug: str) -> str:
    """Return message for a provider slug with no adapter."""
    return f"Provider '{slug}' not recognized"


def duplicate_provider(slug: str) -> str:
    """Return message for a provider slug registered twice."""
    return f"Provider '{slug}' is already registered"


def missing_import_id(record) -> str:
    """Return message for a record reaching the reconciler without an import ID."""
    return f"Transaction record has no import_id: {record!r}"


def missing_config_key(key: str, where: str = "config") -> str:
    """Return message for a required configuration key."""
    return f"Missing required key '{key}' in {where}"
