"""
Query executors run statements on behalf of a job.

A job only needs ``execute(statement)``. The SQLAlchemy executor below is the
one the application wires up; tests and callers may pass any object with the
same method.
"""

import logging
from typing import Any, List, Optional, Protocol, Union

from sqlalchemy import MetaData, Table
from sqlalchemy.engine import Engine
from sqlalchemy.sql.expression import Executable

logger = logging.getLogger(__name__)


class QueryExecutor(Protocol):
    """Execute a statement, return result rows or raise"""

    def execute(self, statement: Any) -> Any:
        ...


class SQLAlchemyExecutor:
    """
    Execute statements through a SQLAlchemy engine.

    The engine is borrowed: the executor never disposes of it. Every
    statement runs in its own transaction which commits on success, so work
    done by earlier stages stays applied if a later statement fails.
    """

    def __init__(self, engine: Engine):
        self.engine = engine

    def execute(self, statement: Union[str, Executable]) -> List[Any]:
        """
        Run one statement.

        Plain strings are handed to the driver as-is; SQLAlchemy constructs
        are compiled for the engine's dialect.

        Returns:
            List of row mappings, empty for statements that return no rows
        """
        with self.engine.begin() as connection:
            if isinstance(statement, str):
                result = connection.exec_driver_sql(statement)
            else:
                result = connection.execute(statement)

            if result.returns_rows:
                return result.mappings().all()
            return []

    def reflect_table(self, name: str, schema: Optional[str] = None) -> Table:
        """Load a table's column metadata from the database"""
        logger.debug(f"Reflecting table {schema + '.' if schema else ''}{name}")
        return Table(name, MetaData(), schema=schema, autoload_with=self.engine)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.engine.url.render_as_string(hide_password=True)})"
