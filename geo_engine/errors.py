"""
Exception hierarchy for the GEO engine.
"""

from typing import Any, Dict, Optional


class GeoEngineError(Exception):
    """Base exception for all engine errors."""


class InputValidationError(GeoEngineError):
    """User input rejected before a run starts."""

    def __init__(self, message: str, fields: Optional[list] = None):
        super().__init__(message)
        self.fields = fields or []


class AnswerServiceError(GeoEngineError):
    """Error talking to the answer-generation service."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.response = response


class WorkflowError(GeoEngineError):
    """A workflow step could not run or failed."""

    def __init__(self, message: str, run_id: Optional[str] = None, step: Optional[str] = None):
        super().__init__(message)
        self.run_id = run_id
        self.step = step


class RunNotFoundError(WorkflowError):
    """No run stored under the given id."""

    def __init__(self, run_id: str):
        super().__init__(f"Run not found: {run_id}", run_id=run_id)


class SynthesisError(GeoEngineError):
    """LLM-backed category or prompt synthesis produced nothing usable."""
