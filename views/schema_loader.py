"""
===============================================
Schema file loading.
===============================================

Schema files are JSON documents of the form::

    {
      "idField": "user_id",
      "fields": [
        {"name": "name", "type": "string", "description": "Display name"},
        {"name": "address", "type": "map", "fields": [
          {"name": "city", "type": "string"}
        ]}
      ]
    }

Each file defines one schema, named after the file: the last extension is
dropped and dashes become underscores, so ``people-v2.json`` defines the
schema ``people_v2``.

Example:
    >>> from views.schema_loader import read_schemas
    >>>
    >>> schemas = read_schemas(['schemas/*.json'])
    >>> sorted(schemas)
    ['orders', 'people_v2']
"""

import glob
import json
import logging
import os
from pathlib import Path
from typing import Dict, Iterable

from models.schema_models import Schema, SchemaValidationError

logger = logging.getLogger(__name__)


class SchemaLoadError(SchemaValidationError):
    """Exception raised when a schema file cannot be found, read or parsed."""
    pass


def file_path_to_schema_name(file_path: str) -> str:
    """Derive a schema name from a schema file path."""
    return Path(file_path).stem.replace('-', '_')


def read_schema(file_path: str) -> Schema:
    """
    Read one schema file.

    Raises:
        SchemaLoadError: If the file cannot be read or is not valid JSON
        SchemaValidationError: If the document is not a valid schema
    """
    try:
        with open(file_path, encoding='utf-8') as handle:
            document = json.load(handle)
    except OSError as e:
        raise SchemaLoadError(f"Cannot read schema file {file_path}: {e}") from e
    except json.JSONDecodeError as e:
        raise SchemaLoadError(f"Schema file {file_path} is not valid JSON: {e}") from e

    return Schema.from_dict(document)


def read_schemas(patterns: Iterable[str]) -> Dict[str, Schema]:
    """
    Read every schema file matching the given glob patterns.

    Args:
        patterns: Glob patterns or plain file paths

    Returns:
        Mapping of schema name to Schema, in match order

    Raises:
        SchemaLoadError: If a pattern matches no file
    """
    schemas: Dict[str, Schema] = {}

    for pattern in patterns:
        matches = sorted(glob.glob(os.path.expanduser(pattern)))
        if not matches:
            raise SchemaLoadError(f"No schema files match '{pattern}'")

        for file_path in matches:
            name = file_path_to_schema_name(file_path)
            if name in schemas:
                logger.warning(f"Schema '{name}' from {file_path} replaces an earlier definition")
            schemas[name] = read_schema(file_path)
            logger.debug(f"Loaded schema '{name}' from {file_path}")

    return schemas
