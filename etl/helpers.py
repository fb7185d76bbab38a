"""
Query helpers shared by all jobs.
"""

from datetime import date, datetime
from typing import Any, Optional

from sqlalchemy import Date, DateTime, func, select

from core.exceptions import ConfigurationError

BEGINNING_OF_TIME = "1970-01-01 00:00:00"


def _parse_floor(value: Any, column_type) -> Any:
    if not isinstance(value, str):
        return value
    if isinstance(column_type, DateTime):
        return datetime.fromisoformat(value)
    if isinstance(column_type, Date):
        return date.fromisoformat(value[:10])
    return value


class QueryHelpers:
    """Mixin for jobs whose executor can reflect table metadata"""

    def max_for(
        self,
        table: str,
        column: str,
        database: Optional[str] = None,
        default_floor: Any = None
    ) -> Any:
        """
        Find the maximum value of ``column`` in ``table``.

        Handy as a ``start`` generator reading a destination's high-water
        mark. The statement goes through ``query`` so it is timed and logged.

        Args:
            table: Table name
            column: Column to take the maximum of
            database: Schema the table lives in, if not the default one
            default_floor: Value returned when there is no maximum. Date and
                datetime columns default to the beginning of time; other
                column types must supply one.

        Raises:
            ConfigurationError: non date/datetime column without a default floor
        """
        reflected = self.executor.reflect_table(table, schema=database)
        target = reflected.c[column]

        if default_floor is None:
            if not isinstance(target.type, (Date, DateTime)):
                raise ConfigurationError(
                    f"max_for needs a default_floor for non-date column {column!r}",
                    context={"table": table, "column": column, "column_type": str(target.type)}
                )
            default_floor = BEGINNING_OF_TIME

        rows = self.query(select(func.max(target).label("the_max")))
        value = rows[0]["the_max"] if rows else None

        if value is None:
            return _parse_floor(default_floor, target.type)
        return value
