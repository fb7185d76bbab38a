"""
Basic ETL job: four ordered, pluggable stages over a query executor.

A job is configured by registering callbacks for any of the fixed stages
and then calling ``run``, which executes them in order:

    ensure_destination -> before_etl -> transform -> after_etl

Every callback receives the job itself as its first argument, so it can
issue statements through ``job.query``, which times and logs each one.

Example:
    job = BasicJob(description="daily totals", executor=executor)

    @job.ensure_destination
    def create_destination(job):
        job.query("CREATE TABLE IF NOT EXISTS totals (name TEXT PRIMARY KEY, total INT)")

    @job.transform
    def load_totals(job):
        job.query("REPLACE INTO totals SELECT name, SUM(amount) FROM sales GROUP BY name")

    job.run(exclude={"after_etl"})
"""

import enum
import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Union

from core.exceptions import ConfigurationError, UnknownStageError
from etl.executors import QueryExecutor
from etl.helpers import QueryHelpers
from etl.observers import Observer, ensure_observer

logger = logging.getLogger(__name__)

StageCallback = Callable[..., Any]


class Stage(str, enum.Enum):
    """Named steps of an ETL job"""
    ENSURE_DESTINATION = "ensure_destination"
    BEFORE_ETL = "before_etl"
    TRANSFORM = "transform"
    AFTER_ETL = "after_etl"


ORDERED_STAGES = (
    Stage.ENSURE_DESTINATION,
    Stage.BEFORE_ETL,
    Stage.TRANSFORM,
    Stage.AFTER_ETL,
)


def to_stage(name: Union[str, Stage]) -> Stage:
    """Resolve a stage name, rejecting anything outside the fixed set"""
    try:
        return Stage(name)
    except ValueError:
        raise UnknownStageError(
            f"unknown stage {name!r}",
            context={
                "stage": name,
                "valid_stages": [stage.value for stage in ORDERED_STAGES]
            }
        ) from None


# ============================================================================
# Transform behaviors
# ============================================================================

class TransformBehavior(ABC):
    """Decides how the transform stage drives its registered callback"""

    @abstractmethod
    def __call__(self, job: "BasicJob", callback: StageCallback, *args) -> Any:
        ...


class DirectTransform(TransformBehavior):
    """Call the transform callback once, like any other stage"""

    def __call__(self, job, callback, *args):
        return callback(job, *args)


# ============================================================================
# Job
# ============================================================================

class BasicJob(QueryHelpers):
    """
    A single ETL job.

    Responsibilities:
    - Hold one callback per stage and run them in a fixed order
    - Time and log every statement issued through ``query``
    - Forward events to an optional observer

    The executor and observer are borrowed; the job never closes them.
    Failures are not retried or rolled back: the first exception aborts
    ``run`` and propagates unchanged.
    """

    CONFIGURABLE_ATTRIBUTES = ("description", "executor", "observer")

    def __init__(self, attributes: Optional[Mapping[str, Any]] = None, **kwargs):
        self.description: Optional[str] = None
        self.executor: Optional[QueryExecutor] = None
        self._observer: Optional[Observer] = None
        self._stages: Dict[Stage, StageCallback] = {}
        self.transform_behavior: TransformBehavior = self.create_transform_behavior()

        merged = dict(attributes or {})
        merged.update(kwargs)
        for name, value in merged.items():
            self.configure(name, value)

    def create_transform_behavior(self) -> TransformBehavior:
        return DirectTransform()

    def configure(self, name: str, value: Any) -> None:
        """Apply one configuration attribute"""
        if name not in self.CONFIGURABLE_ATTRIBUTES:
            raise ConfigurationError(
                f"{type(self).__name__} has no configurable attribute {name!r}",
                context={"attribute": name, "valid_attributes": list(self.CONFIGURABLE_ATTRIBUTES)}
            )
        setattr(self, name, value)

    def config(self, fn: Optional[Callable[["BasicJob"], Any]] = None) -> "BasicJob":
        """Mutate the job in place through ``fn`` and return it for chaining"""
        if fn is not None:
            fn(self)
        return self

    @property
    def observer(self) -> Optional[Observer]:
        return self._observer

    @observer.setter
    def observer(self, observer: Optional[Observer]):
        self._observer = ensure_observer(observer) if observer is not None else None

    # ------------------------------------------------------------------
    # Stage table
    # ------------------------------------------------------------------

    def register(self, stage: Union[str, Stage], callback: StageCallback) -> StageCallback:
        """Store ``callback`` for ``stage``, replacing any previous one"""
        stage = to_stage(stage)
        if not callable(callback):
            raise ConfigurationError(
                f"callback for stage {stage.value!r} must be callable",
                context={"stage": stage.value, "callback_type": type(callback).__name__}
            )
        self._stages[stage] = callback
        return callback

    def registered(self, stage: Union[str, Stage]) -> Optional[StageCallback]:
        return self._stages.get(to_stage(stage))

    def invoke(self, stage: Union[str, Stage], *args) -> Any:
        """
        Call the callback registered for ``stage`` with the job and ``args``.

        Returns:
            The callback's result, or None when no callback is registered
        """
        stage = to_stage(stage)
        callback = self._stages.get(stage)
        if callback is None:
            return None
        if stage is Stage.TRANSFORM:
            return self.transform_behavior(self, callback, *args)
        return callback(self, *args)

    def _stage_accessor(self, stage: Stage, callback: Optional[StageCallback]):
        if callback is not None:
            return self.register(stage, callback)
        return self.invoke(stage)

    def ensure_destination(self, callback: Optional[StageCallback] = None):
        """Register the ensure_destination callback, or run it when called bare"""
        return self._stage_accessor(Stage.ENSURE_DESTINATION, callback)

    def before_etl(self, callback: Optional[StageCallback] = None):
        """Register the before_etl callback, or run it when called bare"""
        return self._stage_accessor(Stage.BEFORE_ETL, callback)

    def transform(self, callback: Optional[StageCallback] = None):
        """Register the transform callback, or run it when called bare"""
        return self._stage_accessor(Stage.TRANSFORM, callback)

    def after_etl(self, callback: Optional[StageCallback] = None):
        """Register the after_etl callback, or run it when called bare"""
        return self._stage_accessor(Stage.AFTER_ETL, callback)

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def run(self, exclude: Union[str, Stage, Iterable[Union[str, Stage]]] = ()) -> None:
        """
        Run every stage not named in ``exclude``, in the fixed order.

        Stages without a callback are skipped. Stage callbacks receive only
        the job; anything else they need must be closed over.
        """
        if isinstance(exclude, str):
            exclude = [exclude]
        # Names outside the stage set exclude nothing
        excluded = {stage.value if isinstance(stage, Stage) else stage for stage in exclude or ()}

        for stage in ORDERED_STAGES:
            if stage.value in excluded:
                logger.debug(f"Skipping excluded stage {stage.value} for {self!r}")
                continue
            if stage not in self._stages:
                continue

            self.time_and_log(
                {"event_type": "stage", "stage": stage.value},
                lambda: self.invoke(stage)
            )

    def query(self, statement: Any) -> Any:
        """Execute ``statement`` through the executor, timing and logging it"""
        return self.time_and_log(
            {"event_type": "query", "sql": str(statement)},
            lambda: self.executor.execute(statement)
        )

    def info(self, **data) -> None:
        if self._observer is not None:
            self._observer.info({**data, "emitter": self})

    def debug(self, **data) -> None:
        if self._observer is not None:
            self._observer.debug({**data, "emitter": self})

    def time_and_log(self, data: Dict[str, Any], fn: Callable[[], Any]) -> Any:
        """Emit a debug event, call ``fn``, then emit an info event with its runtime"""
        self.debug(**data)
        start_runtime = time.perf_counter()
        retval = fn()
        self.info(**data, runtime=time.perf_counter() - start_runtime)
        return retval

    def __repr__(self) -> str:
        return f"<{type(self).__name__} description={self.description!r}>"
