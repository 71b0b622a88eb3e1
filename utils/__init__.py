"""
==========================
Utility Functions Package.
==========================

Reusable helpers for warehouse connectivity.

Modules:
    database_utils: SQLAlchemy engine creation and health checks
"""

__version__ = "1.0.0"
__all__ = [
    'DatabaseConnectionError',
    'create_warehouse_engine',
    'verify_connection'
]

from .database_utils import (
    DatabaseConnectionError,
    create_warehouse_engine,
    verify_connection,
)
