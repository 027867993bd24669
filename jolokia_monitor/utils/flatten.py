"""Flattening of nested Jolokia attribute values into field sets."""

from typing import Any, Dict, Optional


def flatten_value(
    prefix: str,
    value: Any,
    delimiter: str = "_",
    fields: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """
    Recursively flatten a decoded JSON value into scalar fields.

    Objects are walked and each key is appended to the field name with
    *delimiter*. Every other value (numbers, strings, booleans, None and
    lists) is a leaf stored under the name built so far. Lists are not
    walked, so an array-valued attribute becomes a single field.

    Args:
        prefix: Field name for *value*, usually the metric name
        value: Decoded JSON value
        delimiter: Separator between name components; may be empty
        fields: Mapping to fill in place, a new dict when omitted

    Returns:
        Dict[str, Any]: Field name to leaf value

    Example:
        >>> flatten_value("heap", {"used": 1, "max": 2})
        {'heap_used': 1, 'heap_max': 2}
    """
    if fields is None:
        fields = {}

    if isinstance(value, dict):
        for key, sub_value in value.items():
            flatten_value(f"{prefix}{delimiter}{key}", sub_value, delimiter, fields)
    else:
        fields[prefix] = value

    return fields
