"""
=============================================
Configuration management for schema views.
=============================================

Loads all configuration from environment variables (.env file) and provides
a centralized Config singleton for application-wide access.

The configuration system ensures:
- Single source of truth for warehouse coordinates
- Defaults for the command-line interface
- Environment-specific configurations (dev/staging/prod)

Example:
    >>> from core.config import config
    >>>
    >>> # Warehouse connection
    >>> engine_url = config.get_warehouse_url()
    >>>
    >>> # Access individual settings
    >>> print(f"Project: {config.project_id}, Dataset: {config.dataset_id}")
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load environment variables from .env file
env_path = Path(__file__).parent.parent / '.env'
load_dotenv(dotenv_path=env_path)


@dataclass
class WarehouseConfig:
    """Warehouse configuration settings.

    Attributes:
        project_id: Cloud project that owns the dataset (may be unset)
        dataset_id: Default dataset holding the raw changelog
        table_name_prefix: Default prefix shared by raw tables and views
        url: Explicit SQLAlchemy URL, overrides the derived one
    """

    project_id: Optional[str]
    dataset_id: Optional[str]
    table_name_prefix: Optional[str]
    url: Optional[str] = None

    def get_url(self) -> str:
        """Get SQLAlchemy URL for the warehouse.

        Returns:
            The explicit URL when configured, otherwise a BigQuery URL
            scoped to the project
        """
        if self.url:
            return self.url
        if self.project_id:
            return f"bigquery://{self.project_id}"
        return "bigquery://"


@dataclass
class ProjectConfig:
    """Project-wide configuration settings.

    Attributes:
        project_root: Absolute path to project root directory
        schema_dir: Directory searched for schema JSON files when no
            schema file is given on the command line
        logs_dir: Directory of the optional log file
        log_level: Root logging level name
        log_file: Log file name, no file output when unset
    """

    project_root: Path
    schema_dir: Path
    logs_dir: Path
    log_level: str = 'INFO'
    log_file: Optional[str] = None


class Config:
    """Centralized configuration manager.

    Provides access to all configuration settings loaded from environment
    variables (.env file).

    Attributes:
        warehouse: WarehouseConfig instance with warehouse coordinates
        project: ProjectConfig instance with paths and logging settings

    Example:
        >>> config = Config()
        >>> url = config.get_warehouse_url()
    """

    def __init__(self):
        """Initialize configuration from environment variables."""
        self.warehouse = WarehouseConfig(
            project_id=os.getenv('PROJECT_ID') or None,
            dataset_id=os.getenv('BIGQUERY_DATASET') or None,
            table_name_prefix=os.getenv('TABLE_NAME_PREFIX') or None,
            url=os.getenv('WAREHOUSE_URL') or None
        )

        project_root = Path(__file__).parent.parent
        self.project = ProjectConfig(
            project_root=project_root,
            schema_dir=Path(os.getenv('SCHEMA_DIR', str(project_root / 'schemas'))),
            logs_dir=Path(os.getenv('LOGS_DIR', str(project_root / 'logs'))),
            log_level=os.getenv('LOG_LEVEL', 'INFO').upper(),
            log_file=os.getenv('LOG_FILE') or None
        )

    @property
    def project_id(self) -> Optional[str]:
        """Get cloud project identifier."""
        return self.warehouse.project_id

    @property
    def dataset_id(self) -> Optional[str]:
        """Get default dataset identifier."""
        return self.warehouse.dataset_id

    @property
    def table_name_prefix(self) -> Optional[str]:
        """Get default table name prefix."""
        return self.warehouse.table_name_prefix

    @property
    def warehouse_url(self) -> str:
        """Get warehouse SQLAlchemy URL."""
        return self.warehouse.get_url()

    @property
    def log_level(self) -> str:
        """Get root logging level."""
        return self.project.log_level

    def get_warehouse_url(self) -> str:
        """Get warehouse connection URL.

        Returns:
            SQLAlchemy-compatible URL string

        Example:
            >>> config = Config()
            >>> engine = create_engine(config.get_warehouse_url())
        """
        return self.warehouse.get_url()


# Global configuration instance
config = Config()
