"""
Staged ETL jobs against a query-capable data store.

Modules:
    basic: BasicJob, the four ordered stages and instrumented queries
    incrementer: IncrementalJob, running the transform over memoized windows
    observers: Observer capability check and a logging-backed observer
    executors: Query executor protocol and the SQLAlchemy implementation
    helpers: Query helpers mixed into every job (max_for)
    scheduler: APScheduler integration for periodic runs

Architecture:
    A job runs up to four stages in a fixed order:

    1. ensure_destination - create whatever the load writes into
    2. before_etl - prepare the source
    3. transform - move the data (once, or once per window)
    4. after_etl - post-process the destination

    Each stage is a plain callable receiving the job. Statements issued with
    ``job.query`` are timed and reported to the job's observer.

Usage:
    from etl.basic import BasicJob
    from etl.incrementer import IncrementalJob
    from etl.observers import LoggingObserver
    from etl.executors import SQLAlchemyExecutor

Error Handling:
    Misconfiguration raises core.exceptions.ConfigurationError subclasses at
    the point of misuse. Executor failures propagate unchanged and abort the
    run; nothing is retried or rolled back.
"""

from etl.basic import BasicJob, Stage, ORDERED_STAGES
from etl.incrementer import IncrementalJob, Boundary, Window, cast
from etl.observers import LoggingObserver
from etl.executors import SQLAlchemyExecutor

__all__ = [
    "BasicJob",
    "Stage",
    "ORDERED_STAGES",
    "IncrementalJob",
    "Boundary",
    "Window",
    "cast",
    "LoggingObserver",
    "SQLAlchemyExecutor",
]
