"""
==================================================
Warehouse connectivity utilities.
==================================================

Provides connection helpers and health checks for the warehouse that hosts
the raw changelog and the schema views.

This module keeps SQLAlchemy engine construction out of business logic, so
the view factory receives an explicit engine handle instead of reaching for
global state.

Example:
    >>> from utils.database_utils import create_warehouse_engine, verify_connection
    >>>
    >>> engine = create_warehouse_engine()
    >>> success, message = verify_connection(engine)
"""

import logging
from typing import Optional, Tuple

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from core.config import config

logger = logging.getLogger(__name__)


class DatabaseConnectionError(Exception):
    """Exception raised when the warehouse engine cannot be created."""
    pass


def create_warehouse_engine(url: Optional[str] = None, echo: bool = False) -> Engine:
    """
    Create a SQLAlchemy engine for the warehouse.

    Args:
        url: SQLAlchemy URL (defaults to config.get_warehouse_url())
        echo: Enable SQL statement logging

    Returns:
        SQLAlchemy Engine

    Raises:
        DatabaseConnectionError: If no dialect is installed for the URL
    """
    url = url or config.get_warehouse_url()
    try:
        return create_engine(url, echo=echo)
    except (SQLAlchemyError, ImportError) as e:
        raise DatabaseConnectionError(f"Cannot create warehouse engine for '{url}': {e}") from e


def verify_connection(engine: Engine) -> Tuple[bool, str]:
    """
    Verify the warehouse answers a trivial query.

    Returns:
        Tuple of (success, message)

    Example:
        >>> success, message = verify_connection(engine)
        >>> if not success:
        ...     print(f"❌ {message}")
    """
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True, f"Connected to warehouse at {engine.url}"
    except SQLAlchemyError as e:
        logger.debug(f"Warehouse not available: {e}")
        return False, f"Warehouse connection failed: {e}"
