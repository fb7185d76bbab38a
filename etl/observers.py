"""
Observers receive the timing and lifecycle events a job emits.

An observer is anything with ``info(data)`` and ``debug(data)``, each taking a
mapping of event fields. Jobs check the capability when the observer is
assigned, so a bad observer fails during configuration instead of halfway
through a run.
"""

import logging
from typing import Any, Dict, Optional, Protocol, runtime_checkable

from core.exceptions import ObserverCapabilityError

REQUIRED_OBSERVER_METHODS = ("info", "debug")


@runtime_checkable
class Observer(Protocol):
    """Event sink with two severities"""

    def info(self, data: Dict[str, Any]) -> None:
        ...

    def debug(self, data: Dict[str, Any]) -> None:
        ...


def ensure_observer(observer: Any) -> Any:
    """
    Validate that an observer implements every required operation.

    Returns:
        The observer unchanged, so the call can wrap an assignment

    Raises:
        ObserverCapabilityError: naming the first missing operation
    """
    for required_method in REQUIRED_OBSERVER_METHODS:
        if not callable(getattr(observer, required_method, None)):
            raise ObserverCapabilityError(
                f"observer must implement #{required_method}",
                context={
                    "missing_method": required_method,
                    "observer_type": type(observer).__name__
                }
            )
    return observer


class LoggingObserver:
    """
    Forward job events to a standard library logger.

    Each event becomes one log line; the raw event mapping travels along in
    ``extra["etl_event"]`` for handlers that want structured output.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger("etl.events")

    def info(self, data: Dict[str, Any]) -> None:
        self.logger.info(self.format(data), extra={"etl_event": data})

    def debug(self, data: Dict[str, Any]) -> None:
        self.logger.debug(self.format(data), extra={"etl_event": data})

    @staticmethod
    def format(data: Dict[str, Any]) -> str:
        parts = [str(data.get("event_type", "event"))]

        emitter = data.get("emitter")
        if emitter is not None:
            parts.append(f"emitter={getattr(emitter, 'description', None) or type(emitter).__name__}")

        if "runtime" in data:
            parts.append(f"runtime={data['runtime']:.4f}s")

        for key, value in data.items():
            if key in ("event_type", "emitter", "runtime", "sql"):
                continue
            parts.append(f"{key}={value}")

        # Statement text last, collapsed onto one line
        if "sql" in data:
            parts.append(f"sql={' '.join(str(data['sql']).split())}")

        return " | ".join(parts)
