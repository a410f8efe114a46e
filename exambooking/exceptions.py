"""
Exceptions raised by the booking workflows.
Raised in catalog/admission/review/storage and caught in the blueprints,
which turn them into flashed messages.
"""


class BookingError(Exception):
    """Base exception for all exam booking errors."""


class StorageError(BookingError):
    """Raised when the file store cannot save or remove an object."""


# --------------------------
# Admission
# --------------------------
class AdmissionError(BookingError):
    """Base exception for errors while admitting a new booking."""


class ApplicationInvalid(AdmissionError):
    """Raised when submitted applicant data fails required-field validation."""

    def __init__(self, errors):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


class RoundNotFound(AdmissionError):
    """Raised when the chosen round does not exist or is no longer active."""


class RoundFull(AdmissionError):
    """Raised when the chosen round has no seats left."""


class UploadFailed(AdmissionError):
    """Raised when an evidence file could not be stored."""


class BookingNotSaved(AdmissionError):
    """Raised when the booking row could not be written."""


# --------------------------
# Review
# --------------------------
class ReviewError(BookingError):
    """Base exception for operator review errors."""


class BookingNotFound(ReviewError):
    """Raised when the booking being reviewed does not exist."""


class InvalidStatus(ReviewError):
    """Raised for a status value outside pending/verified/rejected."""


class InvalidTransition(ReviewError):
    """Raised when a booking that is no longer pending is reviewed again."""
