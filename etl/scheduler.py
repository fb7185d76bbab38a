import logging
from typing import Callable, Iterable, Optional

from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.interval import IntervalTrigger

from core.config import settings
from etl.basic import BasicJob

logger = logging.getLogger(__name__)

JobFactory = Callable[[], BasicJob]


class JobScheduler:
    """
    Run ETL jobs on an interval.

    Jobs are scheduled as factories, not instances: every tick builds a new
    job so boundary values are read afresh instead of staying memoized from
    the previous run.
    """

    def __init__(self, scheduler=None):
        self.scheduler = scheduler or BlockingScheduler()

    def run_job(self, factory: JobFactory, exclude: Iterable[str] = ()):
        """Build and run one job instance"""
        job = factory()
        logger.info(f"Scheduler: Starting {job!r}")
        try:
            job.run(exclude=exclude)
        except Exception as e:
            logger.error(f"Scheduler: {job!r} failed - {e}")
            raise
        logger.info(f"Scheduler: Finished {job!r}")

    def add(
        self,
        factory: JobFactory,
        minutes: Optional[int] = None,
        name: Optional[str] = None,
        exclude: Iterable[str] = ()
    ):
        """Schedule ``factory`` to run every ``minutes`` minutes"""
        job_id = name or getattr(factory, "__name__", repr(factory))
        self.scheduler.add_job(
            self.run_job,
            trigger=IntervalTrigger(minutes=minutes or settings.ETL_SCHEDULE_MINUTES),
            args=[factory],
            kwargs={"exclude": list(exclude)},
            id=job_id,
            name=job_id,
            replace_existing=True,
            max_instances=1,
            coalesce=True
        )
        logger.info(f"Scheduled {job_id} every {minutes or settings.ETL_SCHEDULE_MINUTES} minutes")

    def start(self):
        """Start the scheduler; blocks until stopped"""
        logger.info("ETL Scheduler started")
        self.scheduler.start()

    def stop(self):
        self.scheduler.shutdown()
        logger.info("ETL Scheduler stopped")
