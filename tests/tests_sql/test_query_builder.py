"""
=================================================
Pytest suite for query_builder.py
=================================================

Sections:
---------
1. Unit tests - individual builders
2. Edge case tests - empty clauses, formatting

Available markers:
------------------
unit, edge_case

How to Execute:
---------------
All tests:          pytest tests/tests_sql/test_query_builder.py -v
"""

import pytest

from sql.query_builder import (
    check_view_exists_sql,
    cross_join_unnest_builder,
    first_value_builder,
    format_sql,
    select_builder,
    subquery_builder,
    table_reference_builder,
)

# =========================
# UNIT TESTS
# =========================


@pytest.mark.unit
@pytest.mark.parametrize('project_id,expected', [
    (None, '`ds.t`'),
    ('', '`ds.t`'),
    ('proj', '`proj.ds.t`'),
])
def test_table_reference_builder(project_id, expected):
    """Test references are backtick-quoted and optionally project-qualified."""
    assert table_reference_builder('ds', 't', project_id) == expected


@pytest.mark.unit
def test_select_builder_basic():
    """Test a plain column list."""
    assert select_builder(['a', 'b AS c'], '`ds.t`') == 'SELECT a, b AS c FROM `ds.t`'


@pytest.mark.unit
def test_select_builder_where_and_group_by():
    """Test WHERE conditions join with AND before GROUP BY."""
    sql = select_builder(['a'], 't', where_conditions=['x', 'NOT y'], group_by=['a', 'b'])
    assert sql == 'SELECT a FROM t WHERE x AND NOT y GROUP BY a, b'


@pytest.mark.unit
def test_subquery_builder_with_alias():
    """Test the inner query is parenthesized and aliased."""
    assert subquery_builder('SELECT 1', alias='r') == 'SELECT * FROM (SELECT 1) r'


@pytest.mark.unit
def test_cross_join_unnest_builder():
    """Test member and index aliases follow the array name."""
    assert cross_join_unnest_builder('raw', 'tags') == (
        'CROSS JOIN UNNEST(raw.tags) AS tags_member WITH OFFSET tags_index'
    )


@pytest.mark.unit
def test_first_value_builder_defaults():
    """Test the window takes the latest change per document."""
    assert first_value_builder('x') == (
        'FIRST_VALUE(x) OVER(PARTITION BY document_name ORDER BY timestamp DESC)'
    )


@pytest.mark.unit
def test_check_view_exists_sql():
    """Test the existence check reads INFORMATION_SCHEMA of the dataset."""
    sql = check_view_exists_sql('ds', 'my_view', 'proj')
    assert 'FROM `proj.ds.INFORMATION_SCHEMA.TABLES`' in sql
    assert "WHERE table_name = 'my_view'" in sql


# =========================
# EDGE CASE TESTS
# =========================

@pytest.mark.edge_case
def test_select_builder_single_column_has_no_comma():
    """Test no dangling separator with one column."""
    assert select_builder(['a'], 't') == 'SELECT a FROM t'


@pytest.mark.edge_case
def test_format_sql_reindents_and_uppercases():
    """Test formatting spreads clauses over lines and upper-cases keywords."""
    formatted = format_sql('select a, b from t where a = 1')

    assert formatted.startswith('SELECT a')
    assert '\nFROM t' in formatted
    assert '\nWHERE a = 1' in formatted


@pytest.mark.edge_case
def test_format_sql_keeps_identifiers():
    """Test backtick references survive formatting."""
    assert '`proj.ds.t`' in format_sql('SELECT a FROM `proj.ds.t`')
