"""
=========================================================
Command-line entry point for schema view generation.
=========================================================

Reads schema files and creates, for each schema, the changelog and latest
snapshot views over a raw changelog in the warehouse.

Architecture:
    1. Configuration (core.config) supplies defaults for every option
    2. Application logging (core.logger)
    3. Schema files (views.schema_loader)
    4. Compilation (views.changelog_view, views.snapshot_view)
    5. Warehouse objects (views.view_factory) - skipped with --dry-run

Key Design Principles:
    - Compilation never touches the warehouse
    - The warehouse engine is created here and handed to the factory
    - main.py is a thin CLI wrapper

Usage:
    # Create views for every schema file in a directory
    python main.py --dataset analytics --table-name-prefix users \\
        --schema-files 'schemas/*.json'

    # Print the compiled SQL without connecting to the warehouse
    python main.py --dataset analytics --table-name-prefix users \\
        --schema-files schemas/people.json --dry-run

Example:
    >>> from main import SchemaViewGenerator
    >>>
    >>> generator = SchemaViewGenerator(project_id='my-project', dry_run=True)
    >>> generator.run('analytics', 'users', {'people': schema})
"""

import argparse
import sys
from typing import Any, Dict, List, Optional

from core.config import config
from core.logger import get_logger, setup_logging
from models.schema_models import CompiledView, Schema, SchemaValidationError
from utils.database_utils import DatabaseConnectionError, create_warehouse_engine, verify_connection
from views.changelog_view import user_schema_view
from views.naming import change_log, latest, raw
from views.naming import schema as schema_table
from views.schema_loader import read_schemas
from views.snapshot_view import latest_snapshot_schema_view
from views.view_factory import SchemaViewFactory, ViewCreationError

logger = get_logger(__name__)


class OrchestratorError(Exception):
    """Exception raised for orchestrator operation errors."""
    pass


class SchemaViewGenerator:
    """
    Generates schema views for a set of schemas.

    Attributes:
        project_id: Project qualifying tables, views and functions
        dry_run: Print compiled SQL instead of touching the warehouse
        factory: SchemaViewFactory, created on first non-dry run
    """

    def __init__(
        self,
        project_id: Optional[str] = None,
        dry_run: bool = False,
        factory: Optional[SchemaViewFactory] = None
    ):
        self.project_id = project_id
        self.dry_run = dry_run
        self.factory = factory

    def _get_factory(self) -> SchemaViewFactory:
        if self.factory is None:
            engine = create_warehouse_engine()
            success, message = verify_connection(engine)
            if not success:
                raise OrchestratorError(message)
            logger.info(f"✅ {message}")
            self.factory = SchemaViewFactory(engine=engine, project_id=self.project_id)
        return self.factory

    def compile(
        self,
        dataset_id: str,
        table_name_prefix: str,
        schema_name: str,
        schema: Schema
    ) -> Dict[str, CompiledView]:
        """
        Compile both views of a schema without touching the warehouse.

        Returns:
            Mapping of view name to CompiledView
        """
        return {
            change_log(schema_table(table_name_prefix, schema_name)): user_schema_view(
                dataset_id, change_log(raw(table_name_prefix)), schema, self.project_id
            ),
            latest(schema_table(table_name_prefix, schema_name)): latest_snapshot_schema_view(
                dataset_id, latest(raw(table_name_prefix)), schema, self.project_id
            ),
        }

    def run(
        self,
        dataset_id: str,
        table_name_prefix: str,
        schemas: Dict[str, Schema]
    ) -> Dict[str, Any]:
        """
        Generate the views of every schema.

        Returns:
            Mapping of schema name to the compiled views (dry run) or the
            factory result
        """
        results: Dict[str, Any] = {}

        for schema_name, schema in schemas.items():
            logger.info(f"Processing schema '{schema_name}'")

            if self.dry_run:
                compiled = self.compile(dataset_id, table_name_prefix, schema_name, schema)
                for view_name, view in compiled.items():
                    print(f"-- {view_name}\n{view.query};\n")
                results[schema_name] = compiled
            else:
                results[schema_name] = self._get_factory().initialize_schema_view_resources(
                    dataset_id, table_name_prefix, schema_name, schema
                )

        return results


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate typed BigQuery views over a raw document changelog",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Create views for every schema in a directory
  python main.py -d analytics -t users -f 'schemas/*.json'

  # Print the SQL only
  python main.py -d analytics -t users -f schemas/people.json --dry-run
        """
    )
    parser.add_argument(
        '-p', '--project',
        default=config.project_id,
        help='Project containing the dataset (default: PROJECT_ID)'
    )
    parser.add_argument(
        '-d', '--dataset',
        default=config.dataset_id,
        help='Dataset containing the raw changelog (default: BIGQUERY_DATASET)'
    )
    parser.add_argument(
        '-t', '--table-name-prefix',
        default=config.table_name_prefix,
        help='Common prefix of the raw changelog and generated views (default: TABLE_NAME_PREFIX)'
    )
    parser.add_argument(
        '-f', '--schema-files',
        action='append',
        help='Schema file or glob pattern; may be given more than once '
             '(default: every *.json file in SCHEMA_DIR)'
    )
    parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Print the compiled SQL without connecting to the warehouse'
    )
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable verbose logging (DEBUG level)'
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Command-line interface for schema view generation.

    Exit Codes:
        0: Success
        1: Error
        130: User interrupt (Ctrl+C)
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(
        log_level='DEBUG' if args.verbose else config.log_level,
        log_file=config.project.log_file,
        log_dir=str(config.project.logs_dir)
    )
    schema_files = args.schema_files or [str(config.project.schema_dir / '*.json')]

    missing = [
        option for option, value in (
            ('--dataset', args.dataset),
            ('--table-name-prefix', args.table_name_prefix),
        )
        if not value
    ]
    if missing:
        logger.error(f"Missing required options: {', '.join(missing)}")
        return 1

    try:
        schemas = read_schemas(schema_files)
        generator = SchemaViewGenerator(project_id=args.project, dry_run=args.dry_run)
        generator.run(args.dataset, args.table_name_prefix, schemas)
        logger.info(f"🎉 Processed {len(schemas)} schema(s)")
        return 0

    except (SchemaValidationError, ViewCreationError, DatabaseConnectionError, OrchestratorError) as e:
        logger.error(f"❌ Schema view generation failed: {e}")
        return 1
    except KeyboardInterrupt:
        logger.warning("⚠️  Operation interrupted by user")
        return 130
    except Exception as e:
        logger.error(f"❌ Unexpected error: {e}", exc_info=True)
        return 1


if __name__ == '__main__':
    sys.exit(main())
