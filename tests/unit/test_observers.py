"""
Unit tests for observers
"""

import logging

import pytest
from unittest.mock import Mock

from core.exceptions import ObserverCapabilityError
from etl.basic import BasicJob
from etl.observers import LoggingObserver, Observer, ensure_observer


class TestEnsureObserver:

    def test_returns_valid_observer(self):
        observer = Mock(spec=["info", "debug"])
        assert ensure_observer(observer) is observer

    def test_standard_logger_qualifies(self):
        logger = logging.getLogger("etl.tests")
        assert ensure_observer(logger) is logger

    def test_non_callable_attribute_is_rejected(self):
        class HalfObserver:
            info = staticmethod(lambda data: None)
            debug = "not callable"

        with pytest.raises(ObserverCapabilityError) as exc_info:
            ensure_observer(HalfObserver())

        assert exc_info.value.context == {
            "missing_method": "debug",
            "observer_type": "HalfObserver",
            "error_timestamp": exc_info.value.context["error_timestamp"],
        }

    def test_logging_observer_satisfies_protocol(self):
        assert isinstance(LoggingObserver(), Observer)


class TestLoggingObserver:

    def test_query_event_is_one_line(self, caplog):
        job = BasicJob(description="nightly")
        observer = LoggingObserver()

        with caplog.at_level(logging.INFO, logger="etl.events"):
            observer.info({
                "event_type": "query",
                "sql": "SELECT *\n  FROM etl_source",
                "runtime": 0.5,
                "emitter": job,
            })

        assert caplog.messages == [
            "query | emitter=nightly | runtime=0.5000s | sql=SELECT * FROM etl_source"
        ]
        assert caplog.records[0].etl_event["emitter"] is job

    def test_debug_events_use_debug_level(self, caplog):
        observer = LoggingObserver(logging.getLogger("etl.tests.observer"))

        with caplog.at_level(logging.DEBUG, logger="etl.tests.observer"):
            observer.debug({"event_type": "window", "lower_bound": 0, "upper_bound": 1})

        assert caplog.records[0].levelno == logging.DEBUG
        assert caplog.messages == ["window | lower_bound=0 | upper_bound=1"]

    def test_emitter_without_description_uses_type_name(self):
        message = LoggingObserver.format({"event_type": "stage", "emitter": BasicJob(), "stage": "transform"})
        assert message == "stage | emitter=BasicJob | stage=transform"

    def test_job_events_reach_the_log(self, caplog, mock_executor):
        job = BasicJob(description="logged", executor=mock_executor, observer=LoggingObserver())

        with caplog.at_level(logging.DEBUG, logger="etl.events"):
            job.query("SELECT 1")

        assert len(caplog.records) == 2
        assert caplog.records[0].levelno == logging.DEBUG
        assert caplog.records[1].levelno == logging.INFO
        assert "runtime=" in caplog.messages[1]
