"""
==================================================
Schema view factory.
==================================================

Creates the warehouse objects behind a user-declared schema over a raw
changelog:

    - the coercion functions the compiled queries call (UDFs)
    - <prefix>_schema_<name>_changelog: typed view over every change event
    - <prefix>_schema_<name>_latest: typed view over the latest live documents

Views are created only when they do not exist yet. Column descriptions are
refreshed on every run from the compiled columns plus the provenance
columns of the raw changelog (everything except event_id and data).

The factory receives its SQLAlchemy engine explicitly; when none is given
it builds one from the configured warehouse URL on first use. Existence
checks and creation are not serialized across processes: two runs racing
on the same view can both see it missing and the second CREATE fails.

Example:
    >>> from views.view_factory import SchemaViewFactory
    >>>
    >>> factory = SchemaViewFactory(engine=engine, project_id='my-project')
    >>> result = factory.initialize_schema_view_resources(
    ...     dataset_id='analytics',
    ...     table_name_prefix='users',
    ...     schema_name='people',
    ...     schema=schema
    ... )
    >>> result['changelog_view']['created']
    True
"""

import json
import logging
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from core.config import config
from models.schema_models import CompiledView, Schema, decorate_schema_with_changelog_fields
from sql.ddl import column_description_statements, create_view_sql
from sql.query_builder import check_view_exists_sql
from sql.udf import UDFS
from utils.database_utils import create_warehouse_engine
from views.changelog_view import user_schema_view
from views.naming import change_log, latest, raw
from views.naming import schema as schema_table
from views.snapshot_view import latest_snapshot_schema_view

logger = logging.getLogger(__name__)


class ViewCreationError(Exception):
    """Exception raised when the warehouse rejects a view operation."""
    pass


class SchemaViewFactory:
    """Creates and refreshes the schema views of a raw changelog.

    Attributes:
        project_id: Project qualifying tables, views and functions
    """

    def __init__(self, engine: Optional[Engine] = None, project_id: Optional[str] = None):
        """Initialize the factory.

        Args:
            engine: SQLAlchemy engine for the warehouse, created lazily
                from configuration when omitted
            project_id: Project identifier (defaults to config.project_id)
        """
        self._engine = engine
        self.project_id = project_id if project_id is not None else config.project_id

    def _get_engine(self) -> Engine:
        if self._engine is None:
            self._engine = create_warehouse_engine()
        return self._engine

    def _execute(self, statements: List[str]) -> None:
        """Execute DDL statements in one transaction.

        Statements run as driver SQL so literal colons in descriptions are
        not taken for bind parameters.
        """
        if not statements:
            return
        try:
            with self._get_engine().begin() as conn:
                for statement in statements:
                    conn.exec_driver_sql(statement)
        except SQLAlchemyError as e:
            logger.error(f"Warehouse statement failed: {e}")
            raise ViewCreationError(f"Warehouse statement failed: {e}") from e

    def register_udfs(self, dataset_id: str) -> List[str]:
        """
        Create every coercion function in the dataset if missing.

        Returns:
            Names of the registered functions
        """
        statements = []
        for name, build in UDFS.items():
            logger.debug(f"Registering function {dataset_id}.{name}")
            statements.append(build(dataset_id, self.project_id))
        self._execute(statements)
        return list(UDFS)

    def view_exists(self, dataset_id: str, view_name: str) -> bool:
        """
        Check if a table or view exists in a dataset.

        Raises:
            ViewCreationError: If the check itself fails
        """
        try:
            with self._get_engine().begin() as conn:
                sql = check_view_exists_sql(dataset_id, view_name, self.project_id)
                row = conn.execute(text(sql)).fetchone()
                return row is not None
        except SQLAlchemyError as e:
            logger.error(f"Error checking view existence: {e}")
            raise ViewCreationError(f"Failed to check existence of {view_name}: {e}") from e

    def ensure_view(
        self,
        dataset_id: str,
        view_name: str,
        compiled: CompiledView,
        schema: Schema
    ) -> Dict[str, Any]:
        """
        Create a view if it is missing, then refresh its column descriptions.

        Args:
            dataset_id: Dataset that owns the view
            view_name: Name of the view
            compiled: Compiled query and columns
            schema: Source schema, logged on creation

        Returns:
            Dict with keys: view, created, fields
        """
        created = False
        if not self.view_exists(dataset_id, view_name):
            logger.info(f"Creating BigQuery schema view {view_name}")
            logger.debug(f"Schema:\n{json.dumps(asdict(schema), indent=2)}")
            logger.debug(f"Query:\n{compiled.query}")
            self._execute([
                create_view_sql(dataset_id, view_name, compiled.query, self.project_id)
            ])
            created = True
            logger.info(f"✅ Created BigQuery schema view {view_name}")

        fields = decorate_schema_with_changelog_fields(compiled.columns)
        self._execute(column_description_statements(dataset_id, view_name, fields, self.project_id))

        return {
            'view': view_name,
            'created': created,
            'fields': [column.to_dict() for column in fields],
        }

    def initialize_schema_view_resources(
        self,
        dataset_id: str,
        table_name_prefix: str,
        schema_name: str,
        schema: Schema
    ) -> Dict[str, Any]:
        """
        Create the changelog and latest snapshot views of a schema.

        Existing views are left in place; only their column descriptions
        are refreshed.

        Args:
            dataset_id: Dataset holding the raw changelog
            table_name_prefix: Prefix shared by the raw table and the views
            schema_name: Name of the schema, part of the view names
            schema: Document schema

        Returns:
            Dict with keys: udfs, changelog_view, latest_view

        Raises:
            ViewCreationError: If any warehouse statement fails
            SchemaValidationError: If the schema is malformed
        """
        raw_changelog_table = change_log(raw(table_name_prefix))
        raw_latest_view = latest(raw(table_name_prefix))
        changelog_view_name = change_log(schema_table(table_name_prefix, schema_name))
        latest_view_name = latest(schema_table(table_name_prefix, schema_name))

        # Compile first so a malformed schema fails before any warehouse call.
        changelog_view = user_schema_view(dataset_id, raw_changelog_table, schema, self.project_id)
        latest_view = latest_snapshot_schema_view(dataset_id, raw_latest_view, schema, self.project_id)

        udfs = self.register_udfs(dataset_id)

        return {
            'udfs': udfs,
            'changelog_view': self.ensure_view(dataset_id, changelog_view_name, changelog_view, schema),
            'latest_view': self.ensure_view(dataset_id, latest_view_name, latest_view, schema),
        }

    def close(self) -> None:
        """Dispose the engine if one was created."""
        if self._engine is not None:
            self._engine.dispose()
