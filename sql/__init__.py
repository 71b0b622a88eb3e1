"""
=================================================
SQL utilities package for schema view generation.
=================================================

This package provides modular, reusable SQL construction functions for
BigQuery Standard SQL. All functions generate SQL strings; nothing here
talks to the warehouse.

The package follows a clear organization:
    - ddl.py: Data Definition Language (CREATE VIEW / ALTER VIEW)
    - query_builder.py: Query builders and metadata queries (_builder suffix)
    - udf.py: Value coercion function calls and their definitions

Architecture:
    - All builders end with '_builder' suffix (e.g., select_builder)
    - ddl.py imports from query_builder.py (not vice versa)
    - All SQL generation is pure functions (no side effects)

Example:
    >>> from sql.query_builder import select_builder
    >>> from sql.udf import firestore_number
    >>>
    >>> query = select_builder(
    ...     columns=['document_name', firestore_number('ds', 'JSON_EXTRACT(data, "$.n")') + ' AS n'],
    ...     table='`ds.users_raw_changelog`'
    ... )
"""

__version__ = "1.0.0"
__all__ = [
    # DDL functions
    'create_view_sql', 'alter_column_description_sql', 'column_description_statements',
    # Query builders
    'select_builder', 'subquery_builder', 'cross_join_unnest_builder',
    'first_value_builder', 'table_reference_builder', 'check_view_exists_sql',
    'format_sql',
    # Coercion functions
    'UDFS',
]

from .ddl import (
    alter_column_description_sql,
    column_description_statements,
    create_view_sql,
)
from .query_builder import (
    check_view_exists_sql,
    cross_join_unnest_builder,
    first_value_builder,
    format_sql,
    select_builder,
    subquery_builder,
    table_reference_builder,
)
from .udf import UDFS
