"""
===========================================================
Schema and Column Models
===========================================================

Value types shared by the schema view compilers and the view factory.

Input models describe a user-declared document schema: a tree of named,
typed fields that may nest through ``map`` fields. Output models describe
what a compiler produces: BigQuery column descriptors and the compiled view
(query text plus ordered columns).

Models:
    FieldType: Closed set of document field type tags
    Field: One named, typed field (children only for maps)
    Schema: Top-level ordered field list
    ColumnDescriptor: One output column of a compiled view
    CompiledView: Query text and ordered column descriptors

All models are frozen dataclasses; compilers traverse them and never mutate
them.

Example:
    >>> from models.schema_models import Schema
    >>>
    >>> schema = Schema.from_dict({
    ...     'fields': [
    ...         {'name': 'name', 'type': 'string'},
    ...         {'name': 'address', 'type': 'map', 'fields': [
    ...             {'name': 'city', 'type': 'string'}
    ...         ]}
    ...     ]
    ... })
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

NULLABLE = 'NULLABLE'
REPEATED = 'REPEATED'
REQUIRED = 'REQUIRED'


class SchemaValidationError(ValueError):
    """Exception raised when a schema is malformed.

    Raised for maps without children, non-map fields carrying children,
    missing names and unreadable schema documents.
    """
    pass


class UnsupportedFieldTypeError(SchemaValidationError):
    """Exception raised when a field type tag has no known handling."""
    pass


class FieldType(str, Enum):
    """Document field type tags."""

    BOOLEAN = 'boolean'
    GEOPOINT = 'geopoint'
    NUMBER = 'number'
    MAP = 'map'
    ARRAY = 'array'
    NULL = 'null'
    STRING = 'string'
    TIMESTAMP = 'timestamp'
    REFERENCE = 'reference'

    @classmethod
    def parse(cls, tag: Any) -> 'FieldType':
        """Convert a raw type tag into a FieldType.

        Raises:
            UnsupportedFieldTypeError: If the tag is not a known type
        """
        if isinstance(tag, cls):
            return tag
        try:
            return cls(tag)
        except ValueError:
            raise UnsupportedFieldTypeError(f"Unsupported field type: {tag!r}") from None


# Array columns are REPEATED STRING; maps never become columns.
STORAGE_TYPES: Dict[FieldType, Optional[str]] = {
    FieldType.BOOLEAN: 'BOOLEAN',
    FieldType.GEOPOINT: 'GEOGRAPHY',
    FieldType.NUMBER: 'NUMERIC',
    FieldType.NULL: 'STRING',
    FieldType.STRING: 'STRING',
    FieldType.TIMESTAMP: 'TIMESTAMP',
    FieldType.REFERENCE: 'STRING',
    FieldType.ARRAY: 'STRING',
    FieldType.MAP: None,
}


@dataclass(frozen=True)
class Field:
    """A named, typed field of a document schema.

    Attributes:
        name: Field name as it appears in the JSON document
        type: Field type tag
        fields: Child fields, only for ``map`` fields
        description: Optional column description
    """

    name: str
    type: FieldType
    fields: Tuple['Field', ...] = ()
    description: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Field':
        """Build a Field (and its children) from a parsed JSON object."""
        if not isinstance(data, dict):
            raise SchemaValidationError(f"Field definition must be an object, got {data!r}")

        name = data.get('name')
        if not isinstance(name, str) or not name:
            raise SchemaValidationError(f"Field definition has no name: {data!r}")

        if 'type' not in data:
            raise SchemaValidationError(f"Field '{name}' has no type")

        children = data.get('fields') or []
        if not isinstance(children, list):
            raise SchemaValidationError(f"Children of field '{name}' must be a list")

        return cls(
            name=name,
            type=FieldType.parse(data['type']),
            fields=tuple(cls.from_dict(child) for child in children),
            description=data.get('description'),
        )


@dataclass(frozen=True)
class Schema:
    """A document schema.

    Attributes:
        fields: Top-level fields in declaration order
        id_field: Optional name of the document id field
        timestamp_field: Optional name of the document timestamp field
    """

    fields: Tuple[Field, ...] = ()
    id_field: Optional[str] = None
    timestamp_field: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Schema':
        """Build a Schema from a parsed JSON schema document.

        Accepts the camelCase keys used by schema files (``idField``,
        ``timestampField``).
        """
        if not isinstance(data, dict):
            raise SchemaValidationError("Schema document must be a JSON object")

        fields = data.get('fields')
        if not isinstance(fields, list):
            raise SchemaValidationError("Schema document must contain a 'fields' list")

        return cls(
            fields=tuple(Field.from_dict(item) for item in fields),
            id_field=data.get('idField'),
            timestamp_field=data.get('timestampField'),
        )


@dataclass(frozen=True)
class ColumnDescriptor:
    """One column of a compiled view.

    Attributes:
        name: Flat column name
        type: BigQuery storage type
        mode: NULLABLE, REPEATED or REQUIRED
        description: Optional column description
    """

    name: str
    type: str
    mode: str = NULLABLE
    description: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Return the descriptor in BigQuery API schema format."""
        column = {
            'name': self.name,
            'type': self.type,
            'mode': self.mode,
        }
        if self.description:
            column['description'] = self.description
        return column


@dataclass(frozen=True)
class CompiledView:
    """Query text and the ordered columns it produces."""

    query: str
    columns: Tuple[ColumnDescriptor, ...] = field(default_factory=tuple)

    @property
    def column_names(self) -> List[str]:
        return [column.name for column in self.columns]


# Fields of the raw changelog table written by the change tracker.
RAW_CHANGELOG_SCHEMA: Tuple[ColumnDescriptor, ...] = (
    ColumnDescriptor(
        name='timestamp',
        type='TIMESTAMP',
        mode=REQUIRED,
        description=(
            'The commit timestamp of this change in Cloud Firestore. If the '
            'operation is IMPORT, this timestamp is epoch to ensure that any '
            'operation on an imported document supersedes the IMPORT.'
        ),
    ),
    ColumnDescriptor(
        name='event_id',
        type='STRING',
        mode=REQUIRED,
        description=(
            'The ID of the most-recent document change event that triggered '
            'the export. Empty for imports.'
        ),
    ),
    ColumnDescriptor(
        name='document_name',
        type='STRING',
        mode=REQUIRED,
        description=(
            'The full name of the changed document, for example, '
            'projects/collection/databases/(default)/documents/users/me.'
        ),
    ),
    ColumnDescriptor(
        name='operation',
        type='STRING',
        mode=REQUIRED,
        description='One of CREATE, UPDATE, IMPORT, or DELETE.',
    ),
    ColumnDescriptor(
        name='data',
        type='STRING',
        mode=NULLABLE,
        description='The full JSON representation of the current document state.',
    ),
)

# Raw changelog fields that never appear in a schema view.
EXCLUDED_CHANGELOG_FIELDS = frozenset({'event_id', 'data'})


def decorate_schema_with_changelog_fields(
    columns: Tuple[ColumnDescriptor, ...]
) -> List[ColumnDescriptor]:
    """Append the raw changelog provenance columns to a view's columns.

    Every raw changelog field except ``event_id`` and ``data`` is appended
    after the compiled columns. The input is not modified.
    """
    decorated = list(columns)
    decorated.extend(
        column for column in RAW_CHANGELOG_SCHEMA
        if column.name not in EXCLUDED_CHANGELOG_FIELDS
    )
    return decorated
