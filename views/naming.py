"""
=================================================
Naming conventions for raw tables and views.
=================================================

Every object derived from a raw changelog shares the same table name
prefix. The helpers compose, so the changelog view of a schema named
``people`` over prefix ``users`` is::

    change_log(schema('users', 'people'))  # users_schema_people_changelog

Functions:
    raw: Name of the raw storage for a prefix
    change_log: Name of the changelog variant of a table
    latest: Name of the latest-snapshot variant of a table
    schema: Name of the schema-specific variant of a table
    qualify_field_name: Flatten a nested field path into a column name
"""

import re
from typing import Sequence

_NOT_IDENTIFIER_CHAR = re.compile(r"[^a-zA-Z0-9_]")


def raw(table_name: str) -> str:
    return f"{table_name}_raw"


def change_log(table_name: str) -> str:
    return f"{table_name}_changelog"


def latest(table_name: str) -> str:
    return f"{table_name}_latest"


def schema(table_name: str, schema_name: str) -> str:
    return f"{table_name}_schema_{schema_name}"


def qualify_field_name(path: Sequence[str], name: str) -> str:
    """
    Build the flat column name of a field.

    Every character of ``name`` outside [A-Za-z0-9_] becomes ``_`` and the
    result is appended to ``path`` with ``_`` separators. Path elements are
    used as given.

    Column names must also start with a letter or underscore and be at most
    128 characters long. Neither rule is applied here, so callers cannot
    assume the result is always a valid column name.

    Example:
        >>> qualify_field_name(['a', 'b'], 'c-d')
        'a_b_c_d'
    """
    return "_".join([*path, _NOT_IDENTIFIER_CHAR.sub("_", name)])
