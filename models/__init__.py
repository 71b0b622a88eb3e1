"""
========================================
Models for Schema Views
========================================

Value types shared by the compilers and the view factory.

Modules:
    schema_models: Document schema input models and view output models

Example:
    >>> from models import Schema, FieldType
    >>> schema = Schema.from_dict({'fields': [{'name': 'n', 'type': 'number'}]})
    >>> schema.fields[0].type is FieldType.NUMBER
    True
"""

__version__ = "0.1.0"
__all__ = [
    'ColumnDescriptor',
    'CompiledView',
    'Field',
    'FieldType',
    'Schema',
    'SchemaValidationError',
    'UnsupportedFieldTypeError',
    'RAW_CHANGELOG_SCHEMA',
    'decorate_schema_with_changelog_fields',
]

from .schema_models import (
    RAW_CHANGELOG_SCHEMA,
    ColumnDescriptor,
    CompiledView,
    Field,
    FieldType,
    Schema,
    SchemaValidationError,
    UnsupportedFieldTypeError,
    decorate_schema_with_changelog_fields,
)
