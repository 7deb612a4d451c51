from typing import Dict, Optional


class SportsReelsException(Exception):
    """Base exception for the SportsReels video pipeline."""

    def __init__(self, message: str, error_code: str = None, details: Dict = None):
        super().__init__(message)
        self.error_code = error_code
        self.details = details or {}


class ProviderException(SportsReelsException):
    """Raised when external provider fails."""
    pass


class ConfigurationException(SportsReelsException):
    """Raised when configuration is invalid."""
    pass


class ValidationException(SportsReelsException):
    """Raised when input validation fails. No side effects have happened."""

    def __init__(self, message: str, field: Optional[str] = None, error_code: str = "VALIDATION_ERROR", details: Dict = None):
        super().__init__(message, error_code=error_code, details=details)
        self.field = field
        if field:
            self.details.setdefault("field", field)


class ResourceNotFoundException(SportsReelsException):
    """Raised when requested resource is not found."""
    pass


class MultipleRecordsException(SportsReelsException):
    """Raised when a lookup expected a single row and found several."""

    def __init__(self, message: str, count: int, details: Dict = None):
        super().__init__(message, error_code="MULTIPLE_ROWS", details=details)
        self.count = count


class PipelineStageException(SportsReelsException):
    """
    Failure of one upload pipeline stage.

    ``stage`` names the stage that failed and ``retryable_from`` tells the caller
    where a retry has to start: ``input`` (fix the input first), ``compress``
    (run the whole pipeline again) or ``analyze`` (re-run analysis only).
    """

    stage: str = "unknown"
    retryable_from: str = "compress"
    default_code: str = "PIPELINE_ERROR"

    def __init__(self, message: str, cause: Optional[BaseException] = None, stage: Optional[str] = None, details: Dict = None):
        super().__init__(message, error_code=self.default_code, details=details)
        if stage:
            self.stage = stage
        self.cause = cause
        self.details.setdefault("stage", self.stage)
        if cause is not None:
            self.details.setdefault("original_exception", type(cause).__name__)


class CompressionException(PipelineStageException):
    stage = "compressing"
    default_code = "COMPRESSION_ERROR"


class UploadException(PipelineStageException):
    stage = "uploading"
    default_code = "UPLOAD_ERROR"


class PersistException(PipelineStageException):
    """The binary is already in storage and is now orphaned."""

    stage = "persisting"
    default_code = "PERSIST_ERROR"


class AnalysisException(PipelineStageException):
    stage = "analyzing"
    retryable_from = "analyze"
    default_code = "ANALYSIS_ERROR"


class UploadCancelledException(PipelineStageException):
    default_code = "UPLOAD_CANCELLED"
