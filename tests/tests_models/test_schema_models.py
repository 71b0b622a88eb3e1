"""
=================================================
Comprehensive pytest suite for schema_models.py
=================================================

Sections:
---------
1. Unit tests - type tags, parsing, descriptors
2. Integration tests - changelog decoration
3. Edge case tests - malformed documents

Available markers:
------------------
unit, integration, edge_case

How to Execute:
---------------
All tests:          pytest tests/tests_models/test_schema_models.py -v
"""

import dataclasses

import pytest

from models.schema_models import (
    NULLABLE,
    RAW_CHANGELOG_SCHEMA,
    REPEATED,
    STORAGE_TYPES,
    ColumnDescriptor,
    CompiledView,
    Field,
    FieldType,
    Schema,
    SchemaValidationError,
    UnsupportedFieldTypeError,
    decorate_schema_with_changelog_fields,
)

# =========================
# UNIT TESTS
# =========================


@pytest.mark.unit
@pytest.mark.parametrize('tag', [
    'boolean', 'geopoint', 'number', 'map', 'array', 'null', 'string', 'timestamp', 'reference',
])
def test_field_type_parse_known_tags(tag):
    """Test every documented tag parses."""
    assert FieldType.parse(tag).value == tag


@pytest.mark.unit
def test_field_type_parse_passes_members_through():
    """Test an enum member is returned unchanged."""
    assert FieldType.parse(FieldType.MAP) is FieldType.MAP


@pytest.mark.unit
def test_storage_types_cover_every_tag():
    """Test each tag has a storage type entry and only maps have none."""
    assert set(STORAGE_TYPES) == set(FieldType)
    assert [t for t, storage in STORAGE_TYPES.items() if storage is None] == [FieldType.MAP]


@pytest.mark.unit
def test_schema_from_dict_nested():
    """Test nested fields, descriptions and camelCase keys."""
    schema = Schema.from_dict({
        'idField': 'uid',
        'timestampField': 'updated',
        'fields': [
            {'name': 'address', 'type': 'map', 'description': 'Postal', 'fields': [
                {'name': 'city', 'type': 'string'},
            ]},
        ],
    })

    assert schema.id_field == 'uid'
    assert schema.timestamp_field == 'updated'
    address = schema.fields[0]
    assert address == Field(
        name='address',
        type=FieldType.MAP,
        fields=(Field(name='city', type=FieldType.STRING),),
        description='Postal',
    )


@pytest.mark.unit
def test_models_are_frozen():
    """Test schema values cannot be modified."""
    field = Field(name='a', type=FieldType.STRING)
    with pytest.raises(dataclasses.FrozenInstanceError):
        field.name = 'b'


@pytest.mark.unit
def test_column_descriptor_to_dict():
    """Test descriptions are only emitted when present."""
    assert ColumnDescriptor(name='a', type='STRING').to_dict() == {
        'name': 'a', 'type': 'STRING', 'mode': NULLABLE,
    }
    assert ColumnDescriptor(name='a', type='STRING', mode=REPEATED, description='d').to_dict() == {
        'name': 'a', 'type': 'STRING', 'mode': REPEATED, 'description': 'd',
    }


@pytest.mark.unit
def test_compiled_view_column_names():
    """Test column names follow column order."""
    view = CompiledView(query='SELECT 1', columns=(
        ColumnDescriptor(name='b', type='STRING'),
        ColumnDescriptor(name='a', type='STRING'),
    ))
    assert view.column_names == ['b', 'a']


# =========================
# INTEGRATION TESTS
# =========================

@pytest.mark.integration
def test_decorate_appends_provenance_columns():
    """Test timestamp, document_name and operation follow the view columns."""
    columns = (ColumnDescriptor(name='name', type='STRING'),)

    decorated = decorate_schema_with_changelog_fields(columns)

    assert [c.name for c in decorated] == ['name', 'timestamp', 'document_name', 'operation']
    assert columns == (ColumnDescriptor(name='name', type='STRING'),)


@pytest.mark.integration
def test_raw_changelog_schema_fields():
    """Test the raw changelog layout."""
    assert [c.name for c in RAW_CHANGELOG_SCHEMA] == [
        'timestamp', 'event_id', 'document_name', 'operation', 'data',
    ]
    assert all(c.description for c in RAW_CHANGELOG_SCHEMA)


# =========================
# EDGE CASE TESTS
# =========================

@pytest.mark.edge_case
def test_unknown_type_tag():
    """Test unknown tags raise the dedicated error."""
    with pytest.raises(UnsupportedFieldTypeError, match="'decimal'"):
        FieldType.parse('decimal')


@pytest.mark.edge_case
def test_unsupported_type_is_a_validation_error():
    """Test callers can catch every schema problem with one exception."""
    assert issubclass(UnsupportedFieldTypeError, SchemaValidationError)
    assert issubclass(SchemaValidationError, ValueError)


@pytest.mark.edge_case
@pytest.mark.parametrize('document,message', [
    ([], 'JSON object'),
    ({}, "'fields'"),
    ({'fields': {}}, "'fields'"),
    ({'fields': ['x']}, 'must be an object'),
    ({'fields': [{'type': 'string'}]}, 'has no name'),
    ({'fields': [{'name': 'a'}]}, 'has no type'),
    ({'fields': [{'name': 'a', 'type': 'map', 'fields': 'x'}]}, 'must be a list'),
])
def test_malformed_documents(document, message):
    """Test malformed schema documents are rejected."""
    with pytest.raises(SchemaValidationError, match=message):
        Schema.from_dict(document)
