"""
Integration tests for the basic job against SQLite
"""

import pytest
from unittest.mock import Mock
from sqlalchemy.exc import OperationalError

from etl.basic import BasicJob, Stage


@pytest.fixture
def totals_job(executor, etl_source):
    job = BasicJob(description="totals", executor=executor)

    @job.ensure_destination
    def create_destination(job):
        job.query("""
            CREATE TABLE IF NOT EXISTS etl_destination (
                name VARCHAR(10),
                total_amount INT DEFAULT 0,
                PRIMARY KEY (name)
            )
        """)

    @job.before_etl
    def drop_negative_amounts(job):
        job.query("DELETE FROM etl_source WHERE amount < 0")

    @job.transform
    def sum_by_name(job):
        job.query("""
            REPLACE INTO etl_destination
            SELECT name, SUM(amount) FROM etl_source
            GROUP BY name
        """)

    @job.after_etl
    def promote_big_spenders(job):
        job.query("""
            UPDATE etl_destination
            SET name = 'SUPER ' || name
            WHERE total_amount > 115
        """)

    return job


def test_executes_stages_in_order(totals_job, executor):
    """
    Test: stages run in order against a real database
    """
    totals_job.run()

    rows = executor.execute("SELECT * FROM etl_destination ORDER BY total_amount DESC")

    assert [dict(r) for r in rows] == [
        {"name": "SUPER Jack", "total_amount": 120},
        {"name": "Jeff", "total_amount": 110},
        {"name": "Nick", "total_amount": 90},
        {"name": "Ryan", "total_amount": 50},
    ]


def test_excluded_stage_does_not_run(totals_job, executor):
    """
    Test: excluding before_etl leaves negative amounts in the totals
    """
    totals_job.run(exclude={Stage.BEFORE_ETL, Stage.AFTER_ETL})

    rows = executor.execute("SELECT name, total_amount FROM etl_destination WHERE name = 'Nick'")

    assert rows[0]["total_amount"] == 0


def test_failed_statement_aborts_without_rollback(totals_job, executor):
    """
    Test: a failing transform statement stops the run before after_etl
    and leaves earlier stages' work in place
    """
    after = Mock()
    totals_job.transform(lambda job: job.query("SELECT * FROM missing_table"))
    totals_job.after_etl(after)

    with pytest.raises(OperationalError, match="missing_table"):
        totals_job.run()

    after.assert_not_called()

    tables = executor.execute("SELECT name FROM sqlite_master WHERE type = 'table' AND name = 'etl_destination'")
    assert len(tables) == 1

    negatives = executor.execute("SELECT COUNT(*) AS n FROM etl_source WHERE amount < 0")
    assert negatives[0]["n"] == 0
