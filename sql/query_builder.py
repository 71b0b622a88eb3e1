"""
============================
SQL Query Builder Utilities.
============================

This module provides low-level building blocks for constructing the
BigQuery Standard SQL used by schema views. All builders follow the
_builder naming convention for consistency.

Query Builders:
- table_reference_builder: Backtick-quoted, fully qualified table name
- select_builder: Build SELECT statements from a column expression list
- subquery_builder: Wrap a query in SELECT * FROM (...)
- cross_join_unnest_builder: Row-multiplying UNNEST join for one array
- first_value_builder: FIRST_VALUE window over the latest document change

Metadata Query Functions:
- check_view_exists_sql: Check if a table or view exists in a dataset

Formatting:
- format_sql: Pretty-print a statement with sqlparse

Usage:
    from sql.query_builder import (
        select_builder, subquery_builder, cross_join_unnest_builder
    )

    base = select_builder(
        columns=['document_name', 'timestamp', 'operation'],
        table='`my_dataset.users_raw_changelog`'
    )
    query = subquery_builder(base, alias='users_raw_changelog')
"""

from typing import List, Optional

import sqlparse


def table_reference_builder(
    dataset_id: str,
    table: str,
    project_id: Optional[str] = None
) -> str:
    """
    Build a backtick-quoted table reference.

    Args:
        dataset_id: Dataset name
        table: Table or view name
        project_id: Optional project prefix

    Returns:
        Reference such as `project.dataset.table`
    """
    if project_id:
        return f"`{project_id}.{dataset_id}.{table}`"
    return f"`{dataset_id}.{table}`"


def select_builder(
    columns: List[str],
    table: str,
    where_conditions: Optional[List[str]] = None,
    group_by: Optional[List[str]] = None
) -> str:
    """
    Build a SELECT statement.

    Column expressions are emitted verbatim and joined with ", ", so an
    empty trailing list never leaves a dangling comma.

    Args:
        columns: Column expressions, already aliased where needed
        table: FROM target (a table reference or a parenthesized subquery)
        where_conditions: Conditions joined with AND
        group_by: GROUP BY expressions

    Returns:
        SQL SELECT statement without a trailing semicolon
    """
    sql = f"SELECT {', '.join(columns)} FROM {table}"

    if where_conditions:
        sql += " WHERE " + " AND ".join(where_conditions)

    if group_by:
        sql += " GROUP BY " + ", ".join(group_by)

    return sql


def subquery_builder(query: str, alias: Optional[str] = None) -> str:
    """
    Wrap a query in an outer SELECT *.

    Args:
        query: The inner SELECT
        alias: Optional alias for the inner query

    Returns:
        SELECT * FROM (query) [alias]
    """
    sql = f"SELECT * FROM ({query})"
    if alias:
        sql += f" {alias}"
    return sql


def cross_join_unnest_builder(table_alias: str, array_field: str) -> str:
    """
    Build the CROSS JOIN UNNEST clause for one array column.

    Each source row is repeated once per array element, with the element in
    <array_field>_member and its position in <array_field>_index. A row whose
    array is empty produces no output rows.

    Args:
        table_alias: Alias of the relation exposing the array column
        array_field: Qualified name of the array column

    Returns:
        CROSS JOIN UNNEST clause
    """
    return (
        f"CROSS JOIN UNNEST({table_alias}.{array_field}) "
        f"AS {array_field}_member "
        f"WITH OFFSET {array_field}_index"
    )


def first_value_builder(
    selector: str,
    partition_by: str = "document_name",
    order_by: str = "timestamp DESC"
) -> str:
    """
    Wrap a selector in FIRST_VALUE over the most recent change of a document.

    Args:
        selector: Expression to evaluate
        partition_by: PARTITION BY expression
        order_by: ORDER BY expression

    Returns:
        Window function expression
    """
    return f"FIRST_VALUE({selector}) OVER(PARTITION BY {partition_by} ORDER BY {order_by})"


def check_view_exists_sql(
    dataset_id: str,
    view_name: str,
    project_id: Optional[str] = None
) -> str:
    """
    Generate SQL to check if a table or view exists.

    Args:
        dataset_id: Dataset to search
        view_name: Table or view name
        project_id: Optional project prefix

    Returns:
        SQL query that returns 1 if the object exists, nothing if not
    """
    schemata = table_reference_builder(dataset_id, "INFORMATION_SCHEMA.TABLES", project_id)
    return f"""SELECT 1
FROM {schemata}
WHERE table_name = '{view_name}'"""


def format_sql(query: str) -> str:
    """
    Pretty-print a SQL statement.

    Args:
        query: SQL text

    Returns:
        Reindented SQL with upper-case keywords
    """
    return sqlparse.format(query, reindent=True, keyword_case="upper").strip()
