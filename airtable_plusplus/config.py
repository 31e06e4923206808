from typing import Any, Callable, Dict, Mapping, Optional, Union

from pydantic import PositiveInt
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_ENDPOINT_URL = "https://api.airtable.com"

# Fields that change the HTTP session, as opposed to just the table being addressed
CONNECTION_FIELDS = ("api_key", "endpoint_url", "request_timeout", "no_retry_if_rate_limited")

# Accept the camelCase spelling used by the JavaScript airtable-plus options
_ALIASES = {
    "apiKey": "api_key",
    "baseID": "base_id",
    "baseId": "base_id",
    "tableName": "table_name",
    "camelCase": "camel_case",
    "endpointUrl": "endpoint_url",
    "requestTimeout": "request_timeout",
    "noRetryIfRateLimited": "no_retry_if_rate_limited",
}


class AirtableConfig(BaseSettings):
    api_key: str
    base_id: str
    table_name: str

    camel_case: bool = False
    endpoint_url: str = DEFAULT_ENDPOINT_URL
    request_timeout: Optional[float] = None
    no_retry_if_rate_limited: bool = False

    # Caps the per-row calls issued by the "where" operations; None is unbounded
    concurrency: Optional[PositiveInt] = None
    # Applied to every record handed back by read()
    transform: Optional[Callable[[Dict[str, Any]], Any]] = None

    model_config = SettingsConfigDict(
        env_prefix="AIRTABLE_",
        env_file=".env",
        extra="ignore",
        validate_assignment=True,
    )


ConfigOverride = Union[str, Mapping[str, Any], AirtableConfig, None]


def normalize_options(options: Mapping[str, Any]) -> Dict[str, Any]:
    """Maps option names onto AirtableConfig fields, rejecting unknown ones."""
    normalized = {}
    unknown = []
    for key, value in options.items():
        field = _ALIASES.get(key, key)
        if field not in AirtableConfig.model_fields:
            unknown.append(key)
            continue
        normalized[field] = value
    if unknown:
        raise ValueError(f"Unknown configuration option(s): {', '.join(unknown)}")
    return normalized


def merge_config(base: AirtableConfig, override: ConfigOverride = None) -> AirtableConfig:
    """
    Returns a new configuration with the override applied on top of `base`.

    A string override is read as a table name. A mapping may use either the
    snake_case field names or the camelCase option names. `base` is never
    modified; an empty override hands `base` straight back. Invalid values
    raise pydantic.ValidationError before any request is made.
    """
    if not override:
        return base

    if isinstance(override, str):
        updates = {"table_name": override}
    elif isinstance(override, AirtableConfig):
        updates = override.model_dump(exclude_unset=True)
    else:
        updates = normalize_options(override)

    # Assigning field by field runs the same validation as construction
    merged = base.model_copy()
    for field, value in updates.items():
        setattr(merged, field, value)
    return merged


def same_connection(a: AirtableConfig, b: AirtableConfig) -> bool:
    """True when both configurations can share one pyairtable session."""
    return all(getattr(a, field) == getattr(b, field) for field in CONNECTION_FIELDS)
