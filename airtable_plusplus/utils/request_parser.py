from typing import Any, Dict, List, Mapping, Optional

# Airtable REST parameter names -> pyairtable keyword arguments
_PARAM_NAMES = {
    "filterByFormula": "formula",
    "maxRecords": "max_records",
    "pageSize": "page_size",
    "cellFormat": "cell_format",
    "timeZone": "time_zone",
    "userLocale": "user_locale",
    "returnFieldsByFieldId": "use_field_ids",
    "view": "view",
    "sort": "sort",
    "fields": "fields",
}

_ALLOWED = set(_PARAM_NAMES.values())


def parse_sort(sort: Any) -> List[str]:
    """
    Normalize a sort specification into pyairtable's form.

    Airtable's REST API takes [{"field": "Name", "direction": "desc"}], while
    pyairtable expects ["-Name"]. Plain strings are passed through untouched,
    and a single string or sort object is treated as a one-item list.
    """
    if isinstance(sort, (str, Mapping)):
        sort = [sort]

    parsed: List[str] = []
    for item in sort:
        if isinstance(item, str):
            parsed.append(item)
            continue
        field = item["field"]
        direction = str(item.get("direction", "asc")).lower()
        parsed.append(f"-{field}" if direction == "desc" else field)
    return parsed


def parse_query_params(params: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """
    Normalize read() parameters into keyword arguments for Table.iterate().

    Accepts both the Airtable REST names (filterByFormula, maxRecords, ...)
    and pyairtable's own names (formula, max_records, ...). Empty values are
    dropped; unknown names fail loudly instead of being silently ignored.
    """
    options: Dict[str, Any] = {}
    if not params:
        return options

    unknown = []
    for key, value in params.items():
        name = _PARAM_NAMES.get(key, key)
        if name not in _ALLOWED:
            unknown.append(key)
            continue
        if value is None or value == "":
            continue
        options[name] = value

    if unknown:
        raise ValueError(f"Unsupported read parameter(s): {', '.join(unknown)}")

    if "sort" in options:
        options["sort"] = parse_sort(options["sort"])

    return options
