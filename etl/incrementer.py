"""
Incremental ETL: run the transform over successive windows of a key range.

The job starts at ``start``, advances by ``step`` and keeps going while the
window's lower bound is at most ``stop``. Each boundary comes from a
generator that is evaluated lazily and then memoized for the lifetime of the
job. A ``stop`` such as "current maximum id in the source" is therefore read
exactly once: a source that keeps growing during the run cannot push the
ceiling forward and keep the loop alive forever.

Windows are half-open, ``lower <= key < upper``, and the last window is the
one whose lower bound reaches ``stop``, so a row keyed exactly at ``stop`` is
always covered even though that window's upper bound lies past ``stop``.

Example:
    job = IncrementalJob(description="orders", executor=executor)

    job.start(lambda job: job.max_for("orders_copy", "id", default_floor=0))
    job.step(lambda job: 1000)
    job.stop(lambda job: job.max_for("orders", "id", default_floor=0))

    @job.transform
    def copy_window(job, lower, upper):
        job.query(
            "REPLACE INTO orders_copy SELECT * FROM orders "
            f"WHERE id >= {lower} AND id < {upper}"
        )

    job.run()
"""

import enum
import logging
from datetime import date, datetime
from typing import Any, Callable, Dict, Iterator, NamedTuple, Optional, Union

from core.exceptions import BoundaryNotRegisteredError, ConfigurationError
from etl.basic import BasicJob, TransformBehavior

logger = logging.getLogger(__name__)

BoundaryGenerator = Callable[..., Any]


class Boundary(str, enum.Enum):
    """Boundary functions of the window loop"""
    START = "start"
    STEP = "step"
    STOP = "stop"


BOUNDARY_NAMES = tuple(boundary.value for boundary in Boundary)


def to_boundary(name: Union[str, Boundary]) -> Boundary:
    try:
        return Boundary(name)
    except ValueError:
        raise ConfigurationError(
            f"unknown boundary {name!r}",
            context={"boundary": name, "valid_boundaries": [b.value for b in Boundary]}
        ) from None


def cast(value: Any) -> Any:
    """Render dates and datetimes the way SQL dialects accept them as literals"""
    # datetime before date: datetime is a date subclass
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M:%S")
    if isinstance(value, date):
        return value.strftime("%Y-%m-%d")
    return value


class Window(NamedTuple):
    lower_bound: Any
    upper_bound: Any


class BoundaryCache:
    """
    Memoized start/step/stop values.

    A slot is computed on first evaluation and never again, whatever
    arguments later evaluations pass. A computed None is a value too.
    """

    def __init__(self):
        self._generators: Dict[Boundary, BoundaryGenerator] = {}
        self._values: Dict[Boundary, Any] = {}

    def register(self, which: Union[str, Boundary], generator: BoundaryGenerator) -> BoundaryGenerator:
        which = to_boundary(which)
        if not callable(generator):
            raise ConfigurationError(
                f"{which.value} generator must be callable",
                context={"boundary": which.value, "generator_type": type(generator).__name__}
            )
        self._generators[which] = generator
        return generator

    def is_evaluated(self, which: Union[str, Boundary]) -> bool:
        return to_boundary(which) in self._values

    def evaluate(self, job: BasicJob, which: Union[str, Boundary], *args) -> Any:
        which = to_boundary(which)
        if which in self._values:
            return self._values[which]

        generator = self._generators.get(which)
        if generator is None:
            raise BoundaryNotRegisteredError(
                f"no {which.value} generator registered",
                context={"boundary": which.value, "job": job.description}
            )

        value = self._values[which] = generator(job, *args)
        logger.debug(f"Memoized {which.value}={value!r} for {job!r}")
        return value


class WindowedTransform(TransformBehavior):
    """Call the transform callback once per window, empty windows included"""

    def __call__(self, job, callback, *args):
        for window in job.windows():
            job.debug(
                event_type="window",
                lower_bound=window.lower_bound,
                upper_bound=window.upper_bound
            )
            callback(job, window.lower_bound, window.upper_bound, *args)


class IncrementalJob(BasicJob):
    """
    ETL job whose transform runs once per window between start and stop.

    Besides the basic attributes, ``start``, ``step`` and ``stop``
    generators may be passed at construction. Each generator receives the
    job and returns a number, date or datetime; ``step`` must be something
    that adds to the others (an int, or a timedelta for temporal keys) and
    must be positive or the loop never ends.
    """

    CONFIGURABLE_ATTRIBUTES = BasicJob.CONFIGURABLE_ATTRIBUTES + BOUNDARY_NAMES

    def __init__(self, attributes=None, **kwargs):
        self.boundaries = BoundaryCache()
        super().__init__(attributes, **kwargs)

    def create_transform_behavior(self) -> TransformBehavior:
        return WindowedTransform()

    def configure(self, name: str, value: Any) -> None:
        if name in BOUNDARY_NAMES:
            self.register_boundary(name, value)
            return
        super().configure(name, value)

    def register_boundary(self, which: Union[str, Boundary], generator: BoundaryGenerator) -> BoundaryGenerator:
        """Store a boundary generator for lazy, memoized evaluation"""
        return self.boundaries.register(which, generator)

    def evaluate(self, which: Union[str, Boundary], *args) -> Any:
        """Return the memoized boundary value, computing it on first use"""
        return self.boundaries.evaluate(self, which, *args)

    def _boundary_accessor(self, which: Boundary, generator: Optional[BoundaryGenerator], args):
        if generator is not None:
            return self.register_boundary(which, generator)
        return self.evaluate(which, *args)

    def start(self, generator: Optional[BoundaryGenerator] = None, *args):
        return self._boundary_accessor(Boundary.START, generator, args)

    def step(self, generator: Optional[BoundaryGenerator] = None, *args):
        return self._boundary_accessor(Boundary.STEP, generator, args)

    def stop(self, generator: Optional[BoundaryGenerator] = None, *args):
        return self._boundary_accessor(Boundary.STOP, generator, args)

    def windows(self) -> Iterator[Window]:
        """
        Yield the windows between start and stop.

        Bounds are cast for the executor's dialect; the running cursor is
        not, so arithmetic always happens on the original values.
        """
        current = self.evaluate(Boundary.START)
        stop = self.evaluate(Boundary.STOP)
        step = self.evaluate(Boundary.STEP)

        if stop is None:
            logger.info(f"No stop value for {self!r}, nothing to transform")
            return

        while current <= stop:
            upper = current + step
            yield Window(cast(current), cast(upper))
            current = upper
