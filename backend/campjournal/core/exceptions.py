"""
Custom exception classes raised by the CampJournal service layer.
Each maps onto one HTTP status in `campjournal.main`.
"""


class CampJournalError(Exception):
    """Base exception for service-layer errors."""

    status_code = 500

    def __init__(self, message: str = None):
        self.message = message or self.__class__.__doc__
        super().__init__(self.message)


class NotFoundError(CampJournalError):
    """Requested record not found."""

    status_code = 404


class AlreadyExistsError(CampJournalError):
    """Record already exists."""

    status_code = 409


class ValidationFailedError(CampJournalError):
    """Request failed validation."""

    status_code = 422


class RemoteServiceError(CampJournalError):
    """Upstream service call failed."""

    status_code = 502
