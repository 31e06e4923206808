"""
Airtable Client Service
=======================
This module is the façade over a single Airtable table, wrapping pyairtable
in an async, configuration-driven API.

Key Functionality:
- Holds instance-level defaults (API key, base, table, response shaping).
- Lets every call override part of that configuration for that call only.
- Provides CRUD helpers that map 1:1 onto pyairtable's single-record calls:
    - create / find / update / replace / delete
    - read: walks every page of a listing and concatenates the results.
- Provides "where" helpers that read matching rows by formula, then issue one
  update, replace or delete per row (update_where, replace_where,
  delete_where, upsert). These are not transactional: a failure halfway
  through leaves the already-written rows as they are.

pyairtable is synchronous, so each network call runs in a worker thread.
"""

import asyncio
from contextlib import contextmanager
from typing import Any, Awaitable, Dict, Iterable, List, Mapping, Optional, Union

from pyairtable import Api
from pyairtable.formulas import to_formula_str

from airtable_plusplus.config import (
    AirtableConfig,
    ConfigOverride,
    merge_config,
    normalize_options,
    same_connection,
)
from airtable_plusplus.utils.formatters import camelize_record, deleted_record, format_column_filter
from airtable_plusplus.utils.logger import log_debug, log_error, log_info
from airtable_plusplus.utils.request_parser import parse_query_params

Record = Dict[str, Any]


def build_api(config: AirtableConfig) -> Api:
    """Creates a pyairtable session from the connection settings of `config`."""
    timeout = None
    if config.request_timeout is not None:
        timeout = (config.request_timeout, config.request_timeout)

    return Api(
        config.api_key,
        timeout=timeout,
        retry_strategy=not config.no_retry_if_rate_limited,
        endpoint_url=config.endpoint_url,
    )


class AirtablePlusPlus:
    """
    Async Airtable table wrapper with per-call configuration overrides.

    Options not passed in fall back to the AIRTABLE_API_KEY, AIRTABLE_BASE_ID
    and AIRTABLE_TABLE_NAME environment variables (or a .env file).

    Example:
        inst = AirtablePlusPlus(base_id="appXXX", table_name="Table 1")
        rows = await inst.read({"maxRecords": 1})
        await inst.update(rows[0]["id"], {"Name": "foo"}, config="Table 2")
    """

    def __init__(self, config: Union[AirtableConfig, Mapping[str, Any], None] = None, **options):
        if isinstance(config, AirtableConfig):
            self.config = merge_config(config, options)
        else:
            self.config = AirtableConfig(**normalize_options({**(config or {}), **options}))
        self.api = build_api(self.config)

    @contextmanager
    def _table(self, cfg: AirtableConfig):
        """
        Yields the table addressed by `cfg`. Connection overrides get a
        session of their own, closed once the call is done.
        """
        if same_connection(cfg, self.config):
            yield self.api.table(cfg.base_id, cfg.table_name)
            return

        api = build_api(cfg)
        try:
            yield api.table(cfg.base_id, cfg.table_name)
        finally:
            api.session.close()

    def _shape(self, record: Record, cfg: AirtableConfig) -> Record:
        return camelize_record(record) if cfg.camel_case else record

    async def _fan_out(self, cfg: AirtableConfig, calls: Iterable[Awaitable[Any]]) -> List[Any]:
        """Awaits the per-row calls of a "where" operation; the first failure propagates."""
        calls = list(calls)
        if cfg.concurrency:
            semaphore = asyncio.Semaphore(cfg.concurrency)

            async def limited(call):
                async with semaphore:
                    return await call

            calls = [limited(call) for call in calls]
        return list(await asyncio.gather(*calls))

    async def create(self, data: Mapping[str, Any], config: ConfigOverride = None) -> Record:
        """
        Creates a new row using `data` as the cell values.

        The keys must match the column names of the table (even with
        camel_case enabled), otherwise Airtable rejects the request.
        """
        if not data:
            log_error("Create called without data")
            raise ValueError("No data provided")
        cfg = merge_config(self.config, config)
        return await self._create(cfg, data)

    async def _create(self, cfg: AirtableConfig, data: Mapping[str, Any]) -> Record:
        with self._table(cfg) as table:
            record = await asyncio.to_thread(table.create, dict(data))
        log_debug(f"Created record in {cfg.table_name}", record.get("id", ""))
        return self._shape(record, cfg)

    async def read(
        self,
        params: Union[str, Mapping[str, Any], None] = None,
        config: ConfigOverride = None,
    ) -> List[Record]:
        """
        Reads every row of the table, page by page.

        Args:
            params: a table name, or Airtable list parameters such as
                filterByFormula, maxRecords, pageSize, sort, view, fields,
                cellFormat, timeZone and userLocale.
            config: optional configuration override.

        Returns:
            list: the records of all pages, in page order.
        """
        cfg = merge_config(self.config, config)
        if isinstance(params, str):
            cfg = merge_config(cfg, params)
            params = None

        rows = await self._read_rows(cfg, parse_query_params(params))
        rows = [self._shape(row, cfg) for row in rows]
        if cfg.transform is not None:
            rows = [cfg.transform(row) for row in rows]
        return rows

    async def _read_rows(self, cfg: AirtableConfig, options: Dict[str, Any]) -> List[Record]:
        def collect(table):
            data: List[Record] = []
            for page in table.iterate(**options):
                data.extend(page)
            return [row for row in data if row]

        with self._table(cfg) as table:
            rows = await asyncio.to_thread(collect, table)
        log_debug(f"Read {len(rows)} record(s) from {cfg.table_name}")
        return rows

    async def find(self, row_id: str, config: ConfigOverride = None) -> Record:
        cfg = merge_config(self.config, config)
        with self._table(cfg) as table:
            record = await asyncio.to_thread(table.get, row_id)
        return self._shape(record, cfg)

    async def update(self, row_id: str, data: Mapping[str, Any], config: ConfigOverride = None) -> Record:
        """
        Updates the given cells of a row. Cells not present in `data` keep
        their current value.
        """
        cfg = merge_config(self.config, config)
        return await self._update(cfg, row_id, data)

    async def _update(self, cfg: AirtableConfig, row_id: str, data: Mapping[str, Any], replace: bool = False) -> Record:
        with self._table(cfg) as table:
            record = await asyncio.to_thread(table.update, row_id, dict(data), replace=replace)
        log_debug(f"{'Replaced' if replace else 'Updated'} record {row_id} in {cfg.table_name}")
        return self._shape(record, cfg)

    async def update_where(self, where: str, data: Mapping[str, Any], config: ConfigOverride = None) -> List[Record]:
        """
        Updates every row matching the `where` formula.

        Example:
            await inst.update_where('firstName = "foo"', {"firstName": "fooBar"})
        """
        cfg = merge_config(self.config, config)
        rows = await self._read_rows(cfg, {"formula": where})
        log_info(f"update_where matched {len(rows)} row(s) in {cfg.table_name}", where)
        return await self._fan_out(cfg, (self._update(cfg, row["id"], data) for row in rows))

    async def replace(self, row_id: str, data: Mapping[str, Any], config: ConfigOverride = None) -> Record:
        """
        Overwrites a row completely. Cells not present in `data` are cleared.
        """
        cfg = merge_config(self.config, config)
        return await self._update(cfg, row_id, data, replace=True)

    async def replace_where(self, where: str, data: Mapping[str, Any], config: ConfigOverride = None) -> List[Record]:
        cfg = merge_config(self.config, config)
        rows = await self._read_rows(cfg, {"formula": where})
        log_info(f"replace_where matched {len(rows)} row(s) in {cfg.table_name}", where)
        return await self._fan_out(cfg, (self._update(cfg, row["id"], data, replace=True) for row in rows))

    async def delete(self, row_id: Union[str, Iterable[str]], config: ConfigOverride = None):
        """
        Deletes one row, or several when given a list of IDs.

        Returns:
            dict or list: {"id": ..., "fields": {}, "createdTime": None} per deleted row.
        """
        cfg = merge_config(self.config, config)
        return await self._delete(cfg, row_id)

    async def _delete(self, cfg: AirtableConfig, row_id: Union[str, Iterable[str]]):
        if isinstance(row_id, str):
            with self._table(cfg) as table:
                result = await asyncio.to_thread(table.delete, row_id)
            log_debug(f"Deleted record {row_id} from {cfg.table_name}")
            return deleted_record(result["id"])

        with self._table(cfg) as table:
            results = await asyncio.to_thread(table.batch_delete, list(row_id))
        log_debug(f"Deleted {len(results)} record(s) from {cfg.table_name}")
        return [deleted_record(result["id"]) for result in results]

    async def delete_where(self, where: str, config: ConfigOverride = None) -> List[Record]:
        cfg = merge_config(self.config, config)
        rows = await self._read_rows(cfg, {"formula": where})
        log_info(f"delete_where matched {len(rows)} row(s) in {cfg.table_name}", where)
        return await self._fan_out(cfg, (self._delete(cfg, row["id"]) for row in rows))

    async def upsert(self, key: str, data: Mapping[str, Any], config: ConfigOverride = None):
        """
        Inserts `data` as a new row, or updates the rows whose `key` column
        already holds data[key].

        Returns:
            dict: the created record when nothing matched.
            list: the updated records otherwise.
        """
        if not key or not data:
            log_error("Upsert called without key or data")
            raise ValueError("Key and data are required, but not provided")
        if data.get(key) is None:
            log_error("Upsert key has no value in data", key)
            raise ValueError(f"No value provided for key '{key}'")

        cfg = merge_config(self.config, config)
        formula = f"{format_column_filter(key)} = {to_formula_str(data[key])}"
        rows = await self._read_rows(cfg, {"formula": formula})

        if not rows:
            log_info(f"Upsert found no match in {cfg.table_name}, creating", formula)
            return await self._create(cfg, data)

        log_info(f"Upsert matched {len(rows)} row(s) in {cfg.table_name}", formula)
        return await self._fan_out(cfg, (self._update(cfg, row["id"], data) for row in rows))
