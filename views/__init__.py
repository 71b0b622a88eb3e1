"""
=========================================================
Schema views package.
=========================================================

Compiles user-declared document schemas into typed BigQuery views over a
raw JSON changelog, and creates those views in the warehouse.

Modules:
    naming: Table/view naming conventions and column name flattening
    schema_walker: Schema traversal into SELECT expressions and columns
    changelog_view: Changelog schema view query
    snapshot_view: Latest snapshot schema view query
    schema_loader: Schema JSON files
    view_factory: Warehouse-facing view creation

Architecture:
    - Compilers (schema_walker, changelog_view, snapshot_view) are pure
      functions with no I/O
    - view_factory is the only module that talks to the warehouse
    - SQL text comes from the sql package

Example:
    >>> from views import build_schema_view_query, read_schemas
    >>>
    >>> for name, schema in read_schemas(['schemas/*.json']).items():
    ...     view = build_schema_view_query('analytics', 'users_raw_changelog', schema)
"""

__version__ = "0.1.0"
__all__ = [
    'build_schema_view_query',
    'user_schema_view',
    'build_latest_snapshot_view_query',
    'latest_snapshot_schema_view',
    'walk_schema',
    'qualify_field_name',
    'read_schemas',
    'SchemaViewFactory',
    'ViewCreationError',
]

from .changelog_view import build_schema_view_query, user_schema_view
from .naming import qualify_field_name
from .schema_loader import read_schemas
from .schema_walker import walk_schema
from .snapshot_view import build_latest_snapshot_view_query, latest_snapshot_schema_view
from .view_factory import SchemaViewFactory, ViewCreationError
