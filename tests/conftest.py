"""
Pytest configuration and fixtures
"""

import pytest
from unittest.mock import Mock
from sqlalchemy import create_engine

from etl.executors import SQLAlchemyExecutor


@pytest.fixture(scope="function")
def test_engine(tmp_path):
    """Create a throwaway SQLite database engine"""
    engine = create_engine(f"sqlite:///{tmp_path / 'etl_test.db'}", future=True)

    yield engine

    engine.dispose()


@pytest.fixture(scope="function")
def executor(test_engine):
    """Query executor over the test database"""
    return SQLAlchemyExecutor(test_engine)


@pytest.fixture
def etl_source(executor):
    """Source table with integer keys 1-7, one negative amount"""
    executor.execute("""
        CREATE TABLE etl_source (
            id INT NOT NULL,
            name VARCHAR(10),
            amount INT DEFAULT 0,
            PRIMARY KEY (id)
        )
    """)
    executor.execute("""
        INSERT INTO etl_source (id, name, amount)
        VALUES
            (1, 'Jeff', 100),
            (2, 'Ryan', 50),
            (3, 'Jack', 75),
            (4, 'Jeff', 10),
            (5, 'Jack', 45),
            (6, 'Nick', -90),
            (7, 'Nick', 90)
    """)
    return "etl_source"


@pytest.fixture
def mock_executor():
    """Executor double returning no rows"""
    executor = Mock()
    executor.execute.return_value = []
    return executor


@pytest.fixture
def mock_observer():
    """Observer double implementing both severities"""
    return Mock(spec=["info", "debug"])
