class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class UnmappedSubjectError(DomainError):
    """Raised when a device subject id has no employee in the directory."""

    def __init__(self, subject_id: str):
        super().__init__(f"No employee mapped for device subject {subject_id!r}")
        self.subject_id = subject_id


class DeviceUnavailable(DomainError):
    """Raised when the terminal cannot be reached or answers garbage."""


class BackendError(DomainError):
    """Raised when the HR backend rejects a call."""


class BackendUnavailable(BackendError):
    """Transport, lookup or write failure. Safe to retry on the next cycle."""
