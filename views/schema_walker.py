"""
==================================================
Schema walker: document schema to SELECT clauses.
==================================================

Turns a (possibly nested) document schema into the SELECT expressions that
extract every leaf field from the raw JSON column and coerce it into its
BigQuery type, together with the matching column descriptors.

Components:
    json_extract: Raw JSON_EXTRACT expression for a field path
    resolve_leaf: Expressions and columns for one non-map field
    walk_schema: Depth-first traversal over the whole schema

Map fields are structural: the walker descends into them and their children
are named after the full path (``address.city`` becomes ``address_city``),
but no column is emitted for the map itself.

Array and geopoint columns are reported separately in the walk result
because only the view-level query knows what to do with them:

- Arrays are unnested in the changelog view and dropped from the latest
  snapshot view, since they cannot be grouped.
- Geopoints are dropped from the latest snapshot view for the same reason.

Example:
    >>> from models.schema_models import Schema
    >>> from views.schema_walker import walk_schema
    >>>
    >>> schema = Schema.from_dict({'fields': [{'name': 'age', 'type': 'number'}]})
    >>> result = walk_schema('analytics', 'data', schema)
    >>> result.extractors['age']
    "`analytics.firestoreNumber`(JSON_EXTRACT(data, '$.age')) AS age"
"""

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from models.schema_models import (
    NULLABLE,
    REPEATED,
    STORAGE_TYPES,
    ColumnDescriptor,
    Field,
    FieldType,
    Schema,
    SchemaValidationError,
    UnsupportedFieldTypeError,
)
from sql import udf
from views.naming import qualify_field_name

logger = logging.getLogger(__name__)

Transform = Callable[[str], str]


def identity(selector: str) -> str:
    return selector


@dataclass(frozen=True)
class LeafResult:
    """Output of resolving one leaf field.

    Attributes:
        extractors: Qualified column name -> aliased SELECT expression
        columns: Column descriptors in SELECT order
    """

    extractors: Dict[str, str]
    columns: Tuple[ColumnDescriptor, ...]


@dataclass(frozen=True)
class WalkResult:
    """Aggregated output of a schema walk.

    Attributes:
        extractors: Read-only mapping of qualified column name to aliased
            SELECT expression, in emission order
        arrays: Qualified names of array fields
        geopoints: Qualified names of geopoint fields
        columns: Column descriptors in SELECT order
    """

    extractors: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}), hash=False)
    arrays: Tuple[str, ...] = ()
    geopoints: Tuple[str, ...] = ()
    columns: Tuple[ColumnDescriptor, ...] = ()

    @classmethod
    def combine(cls, results: Iterable['WalkResult']) -> 'WalkResult':
        """Concatenate results in order into a single result.

        Raises:
            SchemaValidationError: If two results emit the same column name
        """
        extractors: Dict[str, str] = {}
        arrays: List[str] = []
        geopoints: List[str] = []
        columns: List[ColumnDescriptor] = []
        clashes = set()

        for result in results:
            for name, selector in result.extractors.items():
                if name in extractors:
                    clashes.add(name)
                extractors[name] = selector
            arrays.extend(result.arrays)
            geopoints.extend(result.geopoints)
            columns.extend(result.columns)

        if clashes:
            raise SchemaValidationError(
                f"Fields flatten to duplicate column names: {', '.join(sorted(clashes))}"
            )
        return cls(
            extractors=MappingProxyType(extractors),
            arrays=tuple(arrays),
            geopoints=tuple(geopoints),
            columns=tuple(columns),
        )

    def merge(self, other: 'WalkResult') -> 'WalkResult':
        """Return a new result holding ``self`` followed by ``other``."""
        return WalkResult.combine((self, other))


def json_extract(
    json_column: str,
    path: Sequence[str],
    field: Field,
    sub_path: str = "",
    transform: Transform = identity
) -> str:
    """
    Build the expression extracting a field from a raw JSON column.

    Args:
        json_column: Column holding the raw JSON document
        path: Names of the enclosing map fields, outermost first
        field: The field to extract
        sub_path: Path appended verbatim inside the field, e.g. '._latitude'
        transform: Applied to the whole JSON_EXTRACT call

    Returns:
        JSON_EXTRACT expression (a JSON-encoded string value)
    """
    pointer = ".".join([*path, field.name]) + sub_path
    return transform(f"JSON_EXTRACT({json_column}, '$.{pointer}')")


def _null_selector(dataset_id, json_column, path, field, transform, project_id):
    return transform("NULL")


def _raw_selector(dataset_id, json_column, path, field, transform, project_id):
    return json_extract(json_column, path, field, "", transform)


def _coerced_selector(coerce: Callable[..., str]):
    def selector(dataset_id, json_column, path, field, transform, project_id):
        return coerce(
            dataset_id,
            json_extract(json_column, path, field, "", transform),
            project_id,
        )
    return selector


# Single-column leaf kinds. Geopoints fan out and are resolved separately;
# maps never reach the resolver.
LEAF_SELECTORS = {
    FieldType.NULL: _null_selector,
    FieldType.STRING: _raw_selector,
    FieldType.REFERENCE: _raw_selector,
    FieldType.BOOLEAN: _coerced_selector(udf.firestore_boolean),
    FieldType.NUMBER: _coerced_selector(udf.firestore_number),
    FieldType.TIMESTAMP: _coerced_selector(udf.firestore_timestamp),
    FieldType.ARRAY: _coerced_selector(udf.firestore_array),
}


def _resolve_geopoint(
    dataset_id: str,
    json_column: str,
    path: Sequence[str],
    field: Field,
    transform: Transform,
    project_id: Optional[str]
) -> LeafResult:
    """Resolve a geopoint into its GEOGRAPHY value and numeric coordinates."""
    name = qualify_field_name(path, field.name)
    latitude_name = qualify_field_name(path, f"{field.name}_latitude")
    longitude_name = qualify_field_name(path, f"{field.name}_longitude")

    geopoint = udf.firestore_geopoint(
        dataset_id,
        json_extract(json_column, path, field, "", transform),
        project_id,
    )
    latitude = json_extract(json_column, path, field, "._latitude", transform)
    longitude = json_extract(json_column, path, field, "._longitude", transform)

    extractors = {
        name: f"{geopoint} AS {name}",
        latitude_name: f"SAFE_CAST({latitude} AS NUMERIC) AS {latitude_name}",
        longitude_name: f"SAFE_CAST({longitude} AS NUMERIC) AS {longitude_name}",
    }
    columns = (
        ColumnDescriptor(
            name=name,
            type=STORAGE_TYPES[FieldType.GEOPOINT],
            mode=NULLABLE,
            description=field.description,
        ),
        ColumnDescriptor(
            name=latitude_name,
            type='NUMERIC',
            mode=NULLABLE,
            description=f"Numeric latitude component of {field.name}.",
        ),
        ColumnDescriptor(
            name=longitude_name,
            type='NUMERIC',
            mode=NULLABLE,
            description=f"Numeric longitude component of {field.name}.",
        ),
    )
    return LeafResult(extractors=extractors, columns=columns)


def resolve_leaf(
    dataset_id: str,
    json_column: str,
    path: Sequence[str],
    field: Field,
    transform: Transform = identity,
    project_id: Optional[str] = None
) -> LeafResult:
    """
    Resolve one non-map field into SELECT expressions and column descriptors.

    Args:
        dataset_id: Dataset that owns the coercion functions
        json_column: Column holding the raw JSON document
        path: Names of the enclosing map fields
        field: The leaf field
        transform: Applied to every JSON extraction
        project_id: Optional project qualifying the coercion functions

    Returns:
        LeafResult with one entry per output column

    Raises:
        SchemaValidationError: If ``field`` is a map
        UnsupportedFieldTypeError: If the field type has no handling
    """
    field_type = FieldType.parse(field.type)

    if field_type is FieldType.MAP:
        raise SchemaValidationError(f"Map field '{field.name}' cannot be resolved as a leaf")

    if field_type is FieldType.GEOPOINT:
        return _resolve_geopoint(dataset_id, json_column, path, field, transform, project_id)

    selector_for = LEAF_SELECTORS.get(field_type)
    if selector_for is None:
        raise UnsupportedFieldTypeError(f"No leaf handling for field type '{field_type.value}'")

    name = qualify_field_name(path, field.name)
    selector = selector_for(dataset_id, json_column, path, field, transform, project_id)

    if field_type is FieldType.ARRAY:
        column = ColumnDescriptor(name=name, type='STRING', mode=REPEATED, description=field.description)
    else:
        column = ColumnDescriptor(
            name=name,
            type=STORAGE_TYPES[field_type],
            mode=NULLABLE,
            description=field.description,
        )

    return LeafResult(extractors={name: f"{selector} AS {name}"}, columns=(column,))


def _check_shape(field: Field, field_type: FieldType) -> None:
    if field_type is FieldType.MAP and not field.fields:
        raise SchemaValidationError(f"Map field '{field.name}' has no child fields")
    if field_type is not FieldType.MAP and field.fields:
        raise SchemaValidationError(
            f"Field '{field.name}' of type '{field_type.value}' cannot have child fields"
        )


def walk_schema(
    dataset_id: str,
    json_column: str,
    schema: Schema,
    path: Sequence[str] = (),
    transform: Optional[Transform] = None,
    project_id: Optional[str] = None
) -> WalkResult:
    """
    Collect SELECT expressions and columns for every leaf of a schema.

    Fields are visited depth-first in declaration order, which fixes the
    order of both the expressions and the column descriptors.

    Args:
        dataset_id: Dataset that owns the coercion functions
        json_column: Column holding the raw JSON document
        schema: Schema (or map sub-schema) to walk
        path: Names of the enclosing map fields
        transform: Applied to every JSON extraction, identity by default
        project_id: Optional project qualifying the coercion functions

    Returns:
        WalkResult for the whole subtree

    Raises:
        SchemaValidationError: On malformed or colliding fields
        UnsupportedFieldTypeError: On unknown type tags
    """
    transform = transform or identity
    parts: List[WalkResult] = []

    for field in schema.fields:
        field_type = FieldType.parse(field.type)
        _check_shape(field, field_type)

        if field_type is FieldType.MAP:
            parts.append(walk_schema(
                dataset_id,
                json_column,
                Schema(fields=field.fields),
                path=(*path, field.name),
                transform=transform,
                project_id=project_id,
            ))
            continue

        leaf = resolve_leaf(dataset_id, json_column, path, field, transform, project_id)
        qualified = qualify_field_name(path, field.name)
        logger.debug(f"Resolved field {'.'.join([*path, field.name])} ({field_type.value}) as {qualified}")

        parts.append(WalkResult(
            extractors=leaf.extractors,
            arrays=(qualified,) if field_type is FieldType.ARRAY else (),
            geopoints=(qualified,) if field_type is FieldType.GEOPOINT else (),
            columns=leaf.columns,
        ))

    return WalkResult.combine(parts)
