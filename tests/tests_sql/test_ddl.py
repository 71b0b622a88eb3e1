"""
=================================================
Pytest suite for ddl.py
=================================================

Sections:
---------
1. Unit tests - CREATE VIEW and ALTER VIEW statements
2. Edge case tests - quoting, undescribed columns

Available markers:
------------------
unit, edge_case

How to Execute:
---------------
All tests:          pytest tests/tests_sql/test_ddl.py -v
"""

import pytest

from models.schema_models import ColumnDescriptor
from sql.ddl import alter_column_description_sql, column_description_statements, create_view_sql

# =========================
# UNIT TESTS
# =========================


@pytest.mark.unit
def test_create_view_sql():
    """Test the view is created with its name as friendly name."""
    assert create_view_sql('ds', 'v', 'SELECT 1', 'proj') == (
        'CREATE VIEW `proj.ds.v`\n'
        'OPTIONS(friendly_name="v")\n'
        'AS SELECT 1'
    )


@pytest.mark.unit
def test_create_view_sql_friendly_name():
    """Test an explicit friendly name."""
    assert 'OPTIONS(friendly_name="Users")' in create_view_sql('ds', 'v', 'SELECT 1', friendly_name='Users')


@pytest.mark.unit
def test_alter_column_description_sql():
    """Test one column description statement."""
    assert alter_column_description_sql('ds', 'v', 'name', 'Display name') == (
        'ALTER VIEW `ds.v` ALTER COLUMN name SET OPTIONS(description="Display name")'
    )


@pytest.mark.unit
def test_column_description_statements_in_order():
    """Test one statement per described column, in column order."""
    columns = [
        ColumnDescriptor(name='a', type='STRING', description='First'),
        ColumnDescriptor(name='b', type='STRING'),
        ColumnDescriptor(name='c', type='NUMERIC', description='Third'),
    ]

    statements = column_description_statements('ds', 'v', columns)

    assert len(statements) == 2
    assert 'ALTER COLUMN a ' in statements[0]
    assert 'ALTER COLUMN c ' in statements[1]


# =========================
# EDGE CASE TESTS
# =========================

@pytest.mark.edge_case
def test_description_quotes_are_escaped():
    """Test embedded quotes and backslashes stay inside the literal."""
    sql = alter_column_description_sql('ds', 'v', 'x', 'say "hi" \\o/')
    assert sql.endswith('SET OPTIONS(description="say \\"hi\\" \\\\o/")')


@pytest.mark.edge_case
def test_no_described_columns():
    """Test no statements when nothing is described."""
    assert column_description_statements('ds', 'v', [ColumnDescriptor(name='a', type='STRING')]) == []


@pytest.mark.edge_case
def test_multiline_description_stays_on_one_line():
    """Test line breaks and tabs are escaped inside the literal."""
    sql = alter_column_description_sql('ds', 'v', 'c', 'line one\nline two\r\n\tindented')

    assert '\n' not in sql
    assert '\r' not in sql
    assert '\t' not in sql
    assert sql.endswith('SET OPTIONS(description="line one\\nline two\\r\\n\\tindented")')


@pytest.mark.edge_case
def test_friendly_name_is_escaped():
    """Test the view friendly name uses the same quoting."""
    sql = create_view_sql('ds', 'v', 'SELECT 1', friendly_name='a\nb')
    assert 'OPTIONS(friendly_name="a\\nb")' in sql
