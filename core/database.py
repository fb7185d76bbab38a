"""
Database engine management with SQLAlchemy
"""

import logging
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from core.config import settings

logger = logging.getLogger(__name__)


def create_db_engine(url: Optional[str] = None) -> Engine:
    """Create a synchronous engine for the configured database"""
    url = url or settings.DATABASE_URL
    engine = create_engine(
        url,
        echo=settings.SQL_ECHO,
        pool_pre_ping=True,
        future=True
    )
    logger.debug(f"Created engine for {engine.url.render_as_string(hide_password=True)}")
    return engine


def get_executor(url: Optional[str] = None):
    """Build a query executor over a fresh engine"""
    from etl.executors import SQLAlchemyExecutor

    return SQLAlchemyExecutor(create_db_engine(url))
