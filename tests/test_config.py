import pytest
from pydantic import ValidationError

from airtable_plusplus.config import AirtableConfig, merge_config, same_connection


def make_config(**options):
    defaults = {"api_key": "keyBase", "base_id": "appBase", "table_name": "Students"}
    defaults.update(options)
    return AirtableConfig(**defaults)


def test_override_wins_over_instance_default():
    base = make_config(camel_case=False, request_timeout=10)

    merged = merge_config(base, {"table_name": "Teachers", "camel_case": True})

    assert merged.table_name == "Teachers"
    assert merged.camel_case is True
    # Absent fields fall back to the defaults
    assert merged.base_id == "appBase"
    assert merged.request_timeout == 10


def test_string_override_is_a_table_name():
    merged = merge_config(make_config(), "Teachers")

    assert merged.table_name == "Teachers"
    assert merged.base_id == "appBase"


def test_camel_case_option_names_are_accepted():
    merged = merge_config(make_config(), {"tableName": "Teachers", "baseID": "appOther", "noRetryIfRateLimited": True})

    assert merged.table_name == "Teachers"
    assert merged.base_id == "appOther"
    assert merged.no_retry_if_rate_limited is True


def test_merge_does_not_mutate_base():
    base = make_config()

    merge_config(base, {"table_name": "Teachers"})

    assert base.table_name == "Students"


@pytest.mark.parametrize("override", [None, "", {}])
def test_empty_override_returns_base(override):
    base = make_config()
    assert merge_config(base, override) is base


def test_unknown_option_is_rejected():
    with pytest.raises(ValueError, match="tabelName"):
        merge_config(make_config(), {"tabelName": "Teachers"})


def test_defaults_come_from_environment(monkeypatch):
    monkeypatch.setenv("AIRTABLE_API_KEY", "keyEnv")
    monkeypatch.setenv("AIRTABLE_BASE_ID", "appEnv")
    monkeypatch.setenv("AIRTABLE_TABLE_NAME", "EnvTable")

    config = AirtableConfig(table_name="Explicit")

    assert config.api_key == "keyEnv"
    assert config.base_id == "appEnv"
    assert config.table_name == "Explicit"
    assert config.endpoint_url == "https://api.airtable.com"


def test_missing_api_key_is_rejected():
    with pytest.raises(ValidationError):
        AirtableConfig(base_id="appBase", table_name="Students")


def test_same_connection_ignores_table_and_base():
    base = make_config()

    assert same_connection(base, merge_config(base, {"base_id": "appOther", "table_name": "Other"}))
    assert not same_connection(base, merge_config(base, {"api_key": "keyOther"}))
    assert not same_connection(base, merge_config(base, {"request_timeout": 3}))


@pytest.mark.parametrize("concurrency", [0, -1])
def test_concurrency_must_be_positive(concurrency):
    with pytest.raises(ValidationError):
        make_config(concurrency=concurrency)


def test_override_values_are_validated():
    base = make_config()

    with pytest.raises(ValidationError):
        merge_config(base, {"concurrency": -1})
    assert base.concurrency is None

    assert merge_config(base, {"concurrency": 3}).concurrency == 3
