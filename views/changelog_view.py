"""
=====================================================
Changelog schema view: typed view over the raw log.
=====================================================

Builds the query of the changelog schema view: one output row per raw
change event, with every schema field extracted into its own typed column.

Query shape without arrays::

    SELECT document_name, timestamp, operation, <field expressions>
    FROM `dataset.users_raw_changelog`

With arrays the base query is wrapped and each array is unnested, so a
document ends up with one row per array member. With several arrays the
number of rows per change event is the product of the array lengths, and
an empty array removes the event from the view::

    SELECT * FROM (<base query>) users_raw_changelog
    CROSS JOIN UNNEST(users_raw_changelog.tags) AS tags_member WITH OFFSET tags_index

Every array adds a <name>_index and a <name>_member column after all the
schema columns.

Example:
    >>> from views.changelog_view import build_schema_view_query
    >>>
    >>> view = build_schema_view_query('analytics', 'users_raw_changelog', schema)
    >>> view.column_names
    ['name', 'tags', 'tags_index', 'tags_member']
"""

from typing import Iterable, List, Optional, Tuple

from models.schema_models import NULLABLE, ColumnDescriptor, CompiledView, Schema, SchemaValidationError
from sql.query_builder import (
    cross_join_unnest_builder,
    format_sql,
    select_builder,
    subquery_builder,
    table_reference_builder,
)
from views.schema_walker import walk_schema

FIXED_COLUMNS: Tuple[str, ...] = ('document_name', 'timestamp', 'operation')
DATA_COLUMN = 'data'


def check_reserved_names(column_names: Iterable[str], reserved: Iterable[str]) -> None:
    """
    Reject schema columns whose name the view already emits itself.

    Raises:
        SchemaValidationError: If a schema column reuses a reserved name
    """
    clashes = sorted(set(column_names) & set(reserved))
    if clashes:
        raise SchemaValidationError(
            f"Fields flatten to reserved column names: {', '.join(clashes)}"
        )


def array_position_columns(array_field: str) -> Tuple[ColumnDescriptor, ColumnDescriptor]:
    """Columns added by unnesting ``array_field``."""
    return (
        ColumnDescriptor(
            name=f"{array_field}_index",
            type='INTEGER',
            mode=NULLABLE,
            description=f"Index of the corresponding {array_field}_member cell in {array_field}.",
        ),
        ColumnDescriptor(
            name=f"{array_field}_member",
            type='STRING',
            mode=NULLABLE,
            description=f"String representation of the member of {array_field}[{array_field}_index].",
        ),
    )


def build_schema_view_query(
    dataset_id: str,
    raw_table_name: str,
    schema: Schema,
    project_id: Optional[str] = None
) -> CompiledView:
    """
    Compile the changelog schema view of a raw changelog table.

    Args:
        dataset_id: Dataset holding the raw table and coercion functions
        raw_table_name: Name of the raw changelog table
        schema: Document schema
        project_id: Optional project qualifying table and function names

    Returns:
        CompiledView with unformatted query text and ordered columns

    Raises:
        SchemaValidationError: If a field flattens to a fixed or array position column name
    """
    result = walk_schema(dataset_id, DATA_COLUMN, schema, project_id=project_id)
    position_columns = [
        column for array_field in result.arrays for column in array_position_columns(array_field)
    ]
    check_reserved_names(result.extractors, [*FIXED_COLUMNS, *(c.name for c in position_columns)])

    query = select_builder(
        columns=[*FIXED_COLUMNS, *result.extractors.values()],
        table=table_reference_builder(dataset_id, raw_table_name, project_id),
    )
    columns: List[ColumnDescriptor] = list(result.columns)

    if result.arrays:
        joins = " ".join(
            cross_join_unnest_builder(raw_table_name, array_field)
            for array_field in result.arrays
        )
        query = f"{subquery_builder(query, alias=raw_table_name)} {joins}"

        columns.extend(position_columns)

    return CompiledView(query=query, columns=tuple(columns))


def user_schema_view(
    dataset_id: str,
    table_name: str,
    schema: Schema,
    project_id: Optional[str] = None
) -> CompiledView:
    """Compile the changelog schema view with pretty-printed query text."""
    compiled = build_schema_view_query(dataset_id, table_name, schema, project_id)
    return CompiledView(query=format_sql(compiled.query), columns=compiled.columns)
