"""
=====================================================
Value coercion functions (BigQuery UDFs).
=====================================================

The schema view compilers never cast JSON values themselves. They wrap each
raw ``JSON_EXTRACT`` expression in a call to a named, dataset-scoped
function that performs the cast. This module provides both halves of that
boundary:

Call Builders (used by the compilers):
- firestore_array: ARRAY<STRING> of stringified elements
- firestore_boolean: BOOLEAN
- firestore_number: NUMERIC
- firestore_timestamp: TIMESTAMP from a serialized {_seconds, _nanoseconds}
- firestore_geopoint: GEOGRAPHY from a serialized {_latitude, _longitude}

Definitions (used by the view factory):
- UDFS: mapping of function name to a builder of its
  ``CREATE FUNCTION IF NOT EXISTS`` statement

Usage:
    from sql.udf import firestore_boolean, UDFS

    selector = firestore_boolean('my_dataset', "JSON_EXTRACT(data, '$.active')")
    # `my_dataset.firestoreBoolean`(JSON_EXTRACT(data, '$.active'))

    statements = [build('my_dataset') for build in UDFS.values()]
"""

from typing import Callable, Dict, Optional

ARRAY_FUNCTION = 'firestoreArray'
BOOLEAN_FUNCTION = 'firestoreBoolean'
NUMBER_FUNCTION = 'firestoreNumber'
TIMESTAMP_FUNCTION = 'firestoreTimestamp'
GEOPOINT_FUNCTION = 'firestoreGeopoint'


def function_reference(
    dataset_id: str,
    function_name: str,
    project_id: Optional[str] = None
) -> str:
    """
    Build the backtick-quoted, fully qualified name of a dataset function.

    Args:
        dataset_id: Dataset that owns the function
        function_name: Function name
        project_id: Optional project prefix

    Returns:
        Quoted reference such as `project.dataset.firestoreNumber`
    """
    if project_id:
        return f"`{project_id}.{dataset_id}.{function_name}`"
    return f"`{dataset_id}.{function_name}`"


def _call(
    function_name: str,
    dataset_id: str,
    selector: str,
    project_id: Optional[str]
) -> str:
    return f"{function_reference(dataset_id, function_name, project_id)}({selector})"


def firestore_array(dataset_id: str, selector: str, project_id: Optional[str] = None) -> str:
    """Coerce a JSON array into ARRAY<STRING>."""
    return _call(ARRAY_FUNCTION, dataset_id, selector, project_id)


def firestore_boolean(dataset_id: str, selector: str, project_id: Optional[str] = None) -> str:
    """Coerce a JSON value into BOOLEAN."""
    return _call(BOOLEAN_FUNCTION, dataset_id, selector, project_id)


def firestore_number(dataset_id: str, selector: str, project_id: Optional[str] = None) -> str:
    """Coerce a JSON value into NUMERIC."""
    return _call(NUMBER_FUNCTION, dataset_id, selector, project_id)


def firestore_timestamp(dataset_id: str, selector: str, project_id: Optional[str] = None) -> str:
    """Coerce a serialized timestamp into TIMESTAMP."""
    return _call(TIMESTAMP_FUNCTION, dataset_id, selector, project_id)


def firestore_geopoint(dataset_id: str, selector: str, project_id: Optional[str] = None) -> str:
    """Coerce a serialized geopoint into GEOGRAPHY."""
    return _call(GEOPOINT_FUNCTION, dataset_id, selector, project_id)


def firestore_array_function(dataset_id: str, project_id: Optional[str] = None) -> str:
    """
    Generate CREATE FUNCTION for the array coercion.

    Each element is re-serialized to a JSON string so arrays of mixed
    element types still fit a single ARRAY<STRING> column.
    """
    ref = function_reference(dataset_id, ARRAY_FUNCTION, project_id)
    return f'''CREATE FUNCTION IF NOT EXISTS {ref}(json STRING)
RETURNS ARRAY<STRING>
LANGUAGE js AS """
  if (!json) {{
    return [];
  }}
  return JSON.parse(json).map(x => JSON.stringify(x));
"""'''


def firestore_boolean_function(dataset_id: str, project_id: Optional[str] = None) -> str:
    """Generate CREATE FUNCTION for the boolean coercion."""
    ref = function_reference(dataset_id, BOOLEAN_FUNCTION, project_id)
    return f"""CREATE FUNCTION IF NOT EXISTS {ref}(json STRING)
RETURNS BOOLEAN AS (SAFE_CAST(json AS BOOLEAN))"""


def firestore_number_function(dataset_id: str, project_id: Optional[str] = None) -> str:
    """Generate CREATE FUNCTION for the number coercion."""
    ref = function_reference(dataset_id, NUMBER_FUNCTION, project_id)
    return f"""CREATE FUNCTION IF NOT EXISTS {ref}(json STRING)
RETURNS NUMERIC AS (SAFE_CAST(json AS NUMERIC))"""


def firestore_timestamp_function(dataset_id: str, project_id: Optional[str] = None) -> str:
    """Generate CREATE FUNCTION for the timestamp coercion."""
    ref = function_reference(dataset_id, TIMESTAMP_FUNCTION, project_id)
    return f"""CREATE FUNCTION IF NOT EXISTS {ref}(json STRING)
RETURNS TIMESTAMP AS (TIMESTAMP_MILLIS(
  SAFE_CAST(JSON_EXTRACT(json, '$._seconds') AS INT64) * 1000 +
  SAFE_CAST(SAFE_CAST(JSON_EXTRACT(json, '$._nanoseconds') AS INT64) / 1E6 AS INT64)
))"""


def firestore_geopoint_function(dataset_id: str, project_id: Optional[str] = None) -> str:
    """Generate CREATE FUNCTION for the geopoint coercion."""
    ref = function_reference(dataset_id, GEOPOINT_FUNCTION, project_id)
    return f"""CREATE FUNCTION IF NOT EXISTS {ref}(json STRING)
RETURNS GEOGRAPHY AS (ST_GEOGPOINT(
  SAFE_CAST(JSON_EXTRACT(json, '$._longitude') AS NUMERIC),
  SAFE_CAST(JSON_EXTRACT(json, '$._latitude') AS NUMERIC)
))"""


UDFS: Dict[str, Callable[..., str]] = {
    ARRAY_FUNCTION: firestore_array_function,
    BOOLEAN_FUNCTION: firestore_boolean_function,
    NUMBER_FUNCTION: firestore_number_function,
    TIMESTAMP_FUNCTION: firestore_timestamp_function,
    GEOPOINT_FUNCTION: firestore_geopoint_function,
}
