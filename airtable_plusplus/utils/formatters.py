import re
from typing import Any, Dict

_WORD_SPLIT = re.compile(r"[^0-9A-Za-z]+")


def format_column_filter(column_name: Any = "") -> str:
    """
    Wraps a multi-word column name in curly braces for use in a formula.
    Example: 'Column ID' -> '{Column ID}'
    Example: 'Name' -> 'Name'
    """
    column_name = f"{column_name}"
    if len(column_name.split(" ")) > 1:
        return f"{{{column_name}}}"
    return column_name


def to_camel_case(column_name: str) -> str:
    """
    Converts an Airtable column name into a lowerCamelCase key.
    Example: 'First Name' -> 'firstName'
    Example: 'phone-number' -> 'phoneNumber'
    Example: 'Student ID' -> 'studentId'
    """
    parts = [p for p in _WORD_SPLIT.split(column_name) if p]
    if not parts:
        return column_name

    words = [p.lower() for p in parts]
    return words[0] + "".join(w.capitalize() for w in words[1:])


def camelize_record(record: Dict[str, Any]) -> Dict[str, Any]:
    """Returns a copy of the record with its field names camelCased."""
    fields = record.get("fields") or {}
    shaped = dict(record)
    shaped["fields"] = {to_camel_case(k): v for k, v in fields.items()}
    return shaped


def deleted_record(record_id: str) -> Dict[str, Any]:
    return {"id": record_id, "fields": {}, "createdTime": None}
