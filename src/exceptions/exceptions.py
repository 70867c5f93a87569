"""
Error taxonomy for the plagiarism report service.
Every error carries a kind so the transport layer can map it to a status code.
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    VALIDATION = "validation_error"
    NOT_FOUND = "not_found"
    UPSTREAM_UNAVAILABLE = "upstream_unavailable"
    DOWNLOAD_FAILED = "download_failed"
    EXTRACTION_FAILED = "extraction_failed"
    ANALYSIS_FAILED = "analysis_failed"
    PERSISTENCE = "persistence_error"


class PlagiarismServiceError(Exception):
    """Base class for all classified service errors."""

    kind: ErrorKind = ErrorKind.PERSISTENCE
    status_code: int = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(PlagiarismServiceError):
    kind = ErrorKind.VALIDATION
    status_code = 400


class NotFoundError(PlagiarismServiceError):
    kind = ErrorKind.NOT_FOUND
    status_code = 404


class UpstreamUnavailableError(PlagiarismServiceError):
    """The file catalog (storage service) could not be reached."""

    kind = ErrorKind.UPSTREAM_UNAVAILABLE
    status_code = 503


class DownloadFailedError(PlagiarismServiceError):
    kind = ErrorKind.DOWNLOAD_FAILED
    status_code = 503


class ExtractionFailedError(PlagiarismServiceError):
    """File content is corrupt or in an unsupported format."""

    kind = ErrorKind.EXTRACTION_FAILED
    status_code = 422


class PersistenceError(PlagiarismServiceError):
    kind = ErrorKind.PERSISTENCE
    status_code = 500


class AnalysisFailedError(PlagiarismServiceError):
    """
    A pairwise comparison failed, aborting the whole analysis cycle.

    Args:
        student_a: First student of the failed pair
        student_b: Second student of the failed pair
        reason: Short description of the failed step
        cause: Underlying error
    """

    kind = ErrorKind.ANALYSIS_FAILED

    def __init__(
        self,
        student_a: str,
        student_b: str,
        reason: str,
        cause: Optional[BaseException] = None,
    ):
        self.student_a = student_a
        self.student_b = student_b
        self.reason = reason
        self.cause = cause
        if student_a and student_b:
            message = f"analysis failed for students {student_a} and {student_b}: {reason}: {cause}"
        else:
            message = f"analysis failed: {reason}: {cause}"
        super().__init__(message)

    @property
    def status_code(self) -> int:
        if isinstance(self.cause, PlagiarismServiceError):
            return self.cause.status_code
        return 500
