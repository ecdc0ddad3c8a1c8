"""Domain errors.

Business-rule rejections at admission time are *not* exceptions; they come
back as ``domain.decisions.Rejected``. What lives here are infrastructure
faults and lifecycle errors for operations outside admission.
"""
from uuid import UUID


class ReservationError(Exception):
    """Base class for reservation engine failures."""

    retryable = False


class StorageUnavailable(ReservationError):
    """The record store could not be reached or failed mid-operation.

    Nothing was committed when this is raised; the whole request may be retried.
    """

    retryable = True


class ReferenceGenerationFailed(ReservationError):
    """Could not produce a unique reservation reference within the retry budget."""

    retryable = True

    def __init__(self, attempts: int) -> None:
        self.attempts = attempts
        super().__init__(f"Could not generate a unique reservation reference after {attempts} attempts")


class DuplicateReferenceError(ReservationError):
    """Raised by the store when a reference is already taken."""

    def __init__(self, reference: str) -> None:
        self.reference = reference
        super().__init__(f"Reservation reference {reference} already exists")


class ConcurrentModificationError(ReservationError):
    """The stored reservation changed since it was read; re-read and retry."""

    retryable = True

    def __init__(self, reservation_id: UUID, expected_version: int, actual_version: int) -> None:
        self.reservation_id = reservation_id
        self.expected_version = expected_version
        self.actual_version = actual_version
        super().__init__(
            f"Reservation {reservation_id} is at version {actual_version}, expected {expected_version}"
        )


class ReservationNotCancellableError(ValueError):
    """Raised when status or lead time forbids cancellation."""

    def __init__(self, reservation_id: UUID, reason: str) -> None:
        self.reservation_id = reservation_id
        self.reason = reason
        super().__init__(reason)


class InvalidTransitionError(ValueError):
    """Raised when a status change is not allowed from the current status."""
