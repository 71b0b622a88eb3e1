"""
=======================================================
Latest snapshot schema view: current state of documents.
=======================================================

Builds the query of the latest snapshot schema view: one row per live
document, holding the values of its most recent change. Deleted documents
are filtered out.

Every field is read through FIRST_VALUE over the changes of its document,
newest first, and the result is grouped so each document collapses into a
single row. Array and geopoint values cannot be grouped, so they are left
out of this view (the numeric latitude and longitude of a geopoint stay).

Example:
    >>> from views.snapshot_view import build_latest_snapshot_view_query
    >>>
    >>> view = build_latest_snapshot_view_query('analytics', 'users_raw_latest', schema)
"""

from typing import Optional

from models.schema_models import CompiledView, Schema
from sql.query_builder import (
    first_value_builder,
    format_sql,
    select_builder,
    table_reference_builder,
)
from views.changelog_view import DATA_COLUMN, FIXED_COLUMNS, check_reserved_names
from views.schema_walker import walk_schema

DELETED_FLAG = 'is_deleted'


def build_latest_snapshot_view_query(
    dataset_id: str,
    raw_table_name: str,
    schema: Schema,
    project_id: Optional[str] = None
) -> CompiledView:
    """
    Compile the latest snapshot schema view.

    Args:
        dataset_id: Dataset holding the raw table and coercion functions
        raw_table_name: Name of the raw latest view
        schema: Document schema
        project_id: Optional project qualifying table and function names

    Returns:
        CompiledView with unformatted query text and ordered columns

    Raises:
        SchemaValidationError: If a field flattens to a fixed column name or the deleted flag
    """
    result = walk_schema(
        dataset_id,
        DATA_COLUMN,
        schema,
        transform=first_value_builder,
        project_id=project_id,
    )
    check_reserved_names(result.extractors, [*FIXED_COLUMNS, DELETED_FLAG])
    ungroupable = set(result.arrays) | set(result.geopoints)
    groupable = [name for name in result.extractors if name not in ungroupable]

    latest_operation = first_value_builder('operation')
    inner = select_builder(
        columns=[
            'document_name',
            f"{first_value_builder('timestamp')} AS timestamp",
            f"{latest_operation} AS operation",
            f'{latest_operation} = "DELETE" AS {DELETED_FLAG}',
            *result.extractors.values(),
        ],
        table=table_reference_builder(dataset_id, raw_table_name, project_id),
    )

    query = select_builder(
        columns=[*FIXED_COLUMNS, *groupable],
        table=f"({inner})",
        where_conditions=[f"NOT {DELETED_FLAG}"],
        group_by=[*FIXED_COLUMNS, *groupable],
    )
    columns = tuple(column for column in result.columns if column.name not in ungroupable)

    return CompiledView(query=query, columns=columns)


def latest_snapshot_schema_view(
    dataset_id: str,
    table_name: str,
    schema: Schema,
    project_id: Optional[str] = None
) -> CompiledView:
    """Compile the latest snapshot schema view with pretty-printed query text."""
    compiled = build_latest_snapshot_view_query(dataset_id, table_name, schema, project_id)
    return CompiledView(query=format_sql(compiled.query), columns=compiled.columns)
