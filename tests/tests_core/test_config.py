"""
=================================================
Pytest suite for core/config.py
=================================================

Sections:
---------
1. Unit tests - warehouse URL derivation
2. Integration tests - environment loading

Available markers:
------------------
unit, integration

How to Execute:
---------------
All tests:          pytest tests/tests_core/test_config.py -v
"""

from pathlib import Path

import pytest

from core.config import Config, ProjectConfig, WarehouseConfig

ENV_VARS = (
    'PROJECT_ID', 'BIGQUERY_DATASET', 'TABLE_NAME_PREFIX', 'WAREHOUSE_URL', 'LOG_LEVEL', 'SCHEMA_DIR',
    'LOGS_DIR', 'LOG_FILE',
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


# =========================
# UNIT TESTS
# =========================

@pytest.mark.unit
@pytest.mark.parametrize('project_id,url,expected', [
    (None, None, 'bigquery://'),
    ('proj', None, 'bigquery://proj'),
    ('proj', 'sqlite://', 'sqlite://'),
])
def test_warehouse_url(project_id, url, expected):
    """Test an explicit URL wins over the project-derived one."""
    warehouse = WarehouseConfig(project_id=project_id, dataset_id=None, table_name_prefix=None, url=url)
    assert warehouse.get_url() == expected


@pytest.mark.unit
def test_project_config_default_level():
    """Test INFO is the default logging level."""
    project = ProjectConfig(project_root=Path('.'), schema_dir=Path('s'), logs_dir=Path('l'))
    assert project.log_level == 'INFO'


# =========================
# INTEGRATION TESTS
# =========================

@pytest.mark.integration
def test_config_reads_environment(clean_env):
    """Test every setting comes from its environment variable."""
    clean_env.setenv('PROJECT_ID', 'proj')
    clean_env.setenv('BIGQUERY_DATASET', 'analytics')
    clean_env.setenv('TABLE_NAME_PREFIX', 'users')
    clean_env.setenv('LOG_LEVEL', 'debug')
    clean_env.setenv('SCHEMA_DIR', '/tmp/schemas')
    clean_env.setenv('LOGS_DIR', '/tmp/logs')
    clean_env.setenv('LOG_FILE', 'views.log')

    config = Config()

    assert config.project_id == 'proj'
    assert config.dataset_id == 'analytics'
    assert config.table_name_prefix == 'users'
    assert config.log_level == 'DEBUG'
    assert config.project.schema_dir == Path('/tmp/schemas')
    assert config.project.logs_dir == Path('/tmp/logs')
    assert config.project.log_file == 'views.log'
    assert config.warehouse_url == 'bigquery://proj'
    assert config.get_warehouse_url() == 'bigquery://proj'


@pytest.mark.integration
def test_config_defaults(clean_env):
    """Test unset variables leave optional settings empty."""
    config = Config()

    assert config.project_id is None
    assert config.dataset_id is None
    assert config.table_name_prefix is None
    assert config.log_level == 'INFO'
    assert config.project.schema_dir == config.project.project_root / 'schemas'
    assert config.project.logs_dir == config.project.project_root / 'logs'
    assert config.project.log_file is None


@pytest.mark.integration
def test_empty_variables_are_unset(clean_env):
    """Test empty strings count as unset."""
    clean_env.setenv('PROJECT_ID', '')
    clean_env.setenv('WAREHOUSE_URL', '')

    config = Config()

    assert config.project_id is None
    assert config.warehouse_url == 'bigquery://'
