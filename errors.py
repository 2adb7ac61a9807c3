"""
Stage-qualified errors raised by the contract analysis pipeline.
"""
from typing import Any, Dict, Optional


class PipelineError(Exception):
    """Base class for failures of a single pipeline stage.

    ``message`` is short and safe to show to end users. Details from the
    underlying cause stay in the exception chain and the logs.
    """
    stage = "pipeline"
    status_code = 500
    retryable = False

    def __init__(self, message: str, *, retryable: Optional[bool] = None, source: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.source = source
        if retryable is not None:
            self.retryable = retryable

    def __str__(self) -> str:
        return f"{self.stage}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": str(self),
            "stage": self.stage,
            "retryable": self.retryable,
        }


class InputError(PipelineError):
    stage = "input"
    status_code = 400


class ExtractionError(PipelineError):
    """The document could not be fetched or holds no text."""
    stage = "extraction"
    status_code = 422


class ClassificationError(PipelineError):
    stage = "classification"
    status_code = 502

    def __init__(self, message: str, **kwargs):
        super().__init__(message, **kwargs)
        if self.retryable:
            self.status_code = 503


class AnalysisError(PipelineError):
    stage = "analysis"
    status_code = 502


class BackendUnavailableError(AnalysisError):
    """The AI backend could not be reached or answered with an API error."""
    status_code = 503
    retryable = True


class AnalysisSchemaError(AnalysisError):
    """The AI backend answered, but not with a usable analysis."""


class StorageError(PipelineError):
    """The record was not written. Nothing partial is left behind."""
    stage = "storage"
    retryable = True
