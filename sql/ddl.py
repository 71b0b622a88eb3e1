"""
===================================================
Data Definition Language (DDL) utilities for views.
===================================================

Provides functions for generating the BigQuery DDL statements the view
factory executes.

Functions:
    create_view_sql: Generate CREATE VIEW with a friendly name
    alter_column_description_sql: Generate ALTER VIEW ... SET OPTIONS for one column
    column_description_statements: ALTER statements for every described column

Example:
    >>> from sql.ddl import create_view_sql
    >>>
    >>> sql = create_view_sql(
    ...     dataset_id='analytics',
    ...     view_name='users_schema_people_changelog',
    ...     query='SELECT document_name FROM `analytics.users_raw_changelog`'
    ... )
"""

from typing import Iterable, List, Optional

from models.schema_models import ColumnDescriptor
from sql.query_builder import table_reference_builder

# Applied after backslashes are doubled.
_OPTION_ESCAPES = (
    ('"', '\\"'),
    ('\n', '\\n'),
    ('\r', '\\r'),
    ('\t', '\\t'),
)

def _quote_option(value: str) -> str:
    """Render a string as a double-quoted, single-line OPTIONS literal."""
    escaped = value.replace('\\', '\\\\')
    for char, escape in _OPTION_ESCAPES:
        escaped = escaped.replace(char, escape)
    return f'"{escaped}"'


def create_view_sql(
    dataset_id: str,
    view_name: str,
    query: str,
    project_id: Optional[str] = None,
    friendly_name: Optional[str] = None
) -> str:
    """Generate CREATE VIEW statement.

    Args:
        dataset_id: Dataset that will own the view
        view_name: Name of the view
        query: View body
        project_id: Optional project prefix
        friendly_name: Display name, defaults to the view name

    Returns:
        SQL CREATE VIEW statement

    Example:
        >>> print(create_view_sql('ds', 'v', 'SELECT 1'))
        CREATE VIEW `ds.v`
        OPTIONS(friendly_name="v")
        AS SELECT 1
    """
    ref = table_reference_builder(dataset_id, view_name, project_id)
    label = friendly_name or view_name
    return f"CREATE VIEW {ref}\nOPTIONS(friendly_name={_quote_option(label)})\nAS {query}"


def alter_column_description_sql(
    dataset_id: str,
    view_name: str,
    column: str,
    description: str,
    project_id: Optional[str] = None
) -> str:
    """Generate ALTER VIEW statement setting one column description.

    Args:
        dataset_id: Dataset that owns the view
        view_name: Name of the view
        column: Column name
        description: Column description
        project_id: Optional project prefix

    Returns:
        SQL ALTER VIEW statement
    """
    ref = table_reference_builder(dataset_id, view_name, project_id)
    return (
        f"ALTER VIEW {ref} ALTER COLUMN {column} "
        f"SET OPTIONS(description={_quote_option(description)})"
    )


def column_description_statements(
    dataset_id: str,
    view_name: str,
    columns: Iterable[ColumnDescriptor],
    project_id: Optional[str] = None
) -> List[str]:
    """Generate ALTER VIEW statements for every column that has a description."""
    return [
        alter_column_description_sql(dataset_id, view_name, column.name, column.description, project_id)
        for column in columns
        if column.description
    ]
