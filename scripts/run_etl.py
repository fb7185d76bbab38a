"""
Script to run an ETL job against the configured database

JOB_FACTORY is ``module:callable``. The callable receives a query executor
built from settings and returns a configured job:

    def build_job(executor):
        job = IncrementalJob(description="orders", executor=executor)
        ...
        return job

    python scripts/run_etl.py myjobs.orders:build_job --except after_etl
"""

import importlib
import logging
import os
import sys

import click

# Add current directory to path to allow imports of job modules
sys.path.append(os.getcwd())

from core.config import settings
from core.database import get_executor
from core.exceptions import ETLException
from core.logging import setup_logging
from etl.basic import ORDERED_STAGES
from etl.observers import LoggingObserver
from etl.scheduler import JobScheduler

logger = logging.getLogger(__name__)


def load_factory(path: str):
    module_name, _, attribute = path.partition(":")
    if not attribute:
        raise click.BadParameter("expected module:callable", param_hint="JOB_FACTORY")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise click.BadParameter(f"cannot import {module_name}: {e}", param_hint="JOB_FACTORY")
    try:
        return getattr(module, attribute)
    except AttributeError:
        raise click.BadParameter(f"{module_name} has no attribute {attribute}", param_hint="JOB_FACTORY")


@click.command()
@click.argument("job_factory")
@click.option(
    "--except", "exclude", multiple=True,
    type=click.Choice([stage.value for stage in ORDERED_STAGES]),
    help="Stage to skip; may be repeated."
)
@click.option("--schedule", is_flag=True, help="Keep running on an interval.")
@click.option("--minutes", type=int, default=None, help="Interval for --schedule.")
@click.option("--log-level", default=None, help="Overrides LOG_LEVEL.")
def main(job_factory, exclude, schedule, minutes, log_level):
    """Run the job built by JOB_FACTORY."""
    setup_logging(log_level)
    factory = load_factory(job_factory)
    executor = get_executor()

    def build():
        job = factory(executor)
        if job.observer is None:
            job.observer = LoggingObserver()
        return job

    try:
        if schedule:
            scheduler = JobScheduler()
            scheduler.add(build, minutes=minutes, name=job_factory, exclude=exclude)
            try:
                scheduler.start()
            except (KeyboardInterrupt, SystemExit):
                logger.info("Interrupted")
            return

        JobScheduler().run_job(build, exclude=exclude)
    except ETLException as e:
        logger.error(f"Job misconfigured: {e.message}", extra={"error_context": e.to_dict()})
        sys.exit(2)
    except Exception as e:
        logger.error(f"ETL job error: {str(e)}")
        sys.exit(1)
    finally:
        executor.engine.dispose()

    logger.info(f"ETL job completed ({settings.ENVIRONMENT})")


if __name__ == "__main__":
    main()
