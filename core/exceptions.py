"""
Custom exceptions for ETL jobs with structured error context.

Only misuse of the job API is represented here. Failures raised by a query
executor (syntax errors, lost connections, constraint violations) are never
wrapped: they reach the caller of ``run`` exactly as the driver raised them.

Exception Hierarchy:
    ETLException (base)
    └── ConfigurationError
        ├── ObserverCapabilityError
        ├── UnknownStageError
        └── BoundaryNotRegisteredError
"""

from typing import Optional, Dict, Any
from datetime import datetime, timezone


class ETLException(Exception):
    """
    Base exception for all ETL-related errors.

    Attributes:
        message: Human-readable error message
        context: Additional context information (job, stage, boundary, etc.)
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.context = context or {}
        self.timestamp = datetime.now(timezone.utc)

        self.context["error_timestamp"] = self.timestamp.isoformat()

        super().__init__(message)

    def __str__(self) -> str:
        """Format error message with context."""
        base_msg = f"{self.__class__.__name__}: {self.message}"

        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base_msg += f" | Context: {context_str}"

        return base_msg

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
            "timestamp": self.timestamp.isoformat()
        }


# ============================================================================
# Configuration Errors
# ============================================================================

class ConfigurationError(ETLException):
    """
    Base exception for a job that was set up incorrectly.

    Raised at the point of misuse (attribute assignment, registration or
    evaluation), never deferred to a later stage.
    """
    pass


class ObserverCapabilityError(ConfigurationError):
    """
    Exception raised when an observer lacks a required operation.

    Context should include:
        - missing_method: Name of the operation the observer does not implement
        - observer_type: Type name of the rejected observer
    """
    pass


class UnknownStageError(ConfigurationError):
    """
    Exception raised for a stage name outside the fixed stage set.

    Context should include:
        - stage: The name that was supplied
        - valid_stages: The accepted stage names
    """
    pass


class BoundaryNotRegisteredError(ConfigurationError):
    """
    Exception raised when a boundary is evaluated without a generator.

    Context should include:
        - boundary: start, step or stop
        - job: Description of the job
    """
    pass
