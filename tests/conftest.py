"""
Shared pytest configuration and fixtures for all tests.
"""

import sys
from pathlib import Path

import pytest

# Add project root to sys.path to enable importing project modules
# This allows tests to import from 'core', 'sql', 'views', etc. without installation
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))


def pytest_configure(config):
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: Unit tests - isolated function-level tests")
    config.addinivalue_line("markers", "integration: Integration tests - component interactions")
    config.addinivalue_line("markers", "smoke: Smoke tests - basic functionality checks")
    config.addinivalue_line("markers", "edge_case: Edge case tests - boundary conditions")
    config.addinivalue_line("markers", "regression: Regression tests - previously fixed bugs")
    config.addinivalue_line("markers", "system: System tests - full system behavior tests")


@pytest.fixture
def schema_factory():
    """
    Factory building a Schema from plain field dictionaries, as found in
    schema files.
    """
    from models.schema_models import Schema

    def factory(*fields, **extra):
        return Schema.from_dict({'fields': list(fields), **extra})

    return factory


@pytest.fixture
def events_schema(schema_factory):
    """Schema with one string, one array and one geopoint field."""
    return schema_factory(
        {'name': 'name', 'type': 'string'},
        {'name': 'tags', 'type': 'array'},
        {'name': 'loc', 'type': 'geopoint'},
    )
