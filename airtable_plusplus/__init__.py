from airtable_plusplus.config import AirtableConfig, merge_config
from airtable_plusplus.services.airtable_client import AirtablePlusPlus
from airtable_plusplus.utils.formatters import format_column_filter

__all__ = ["AirtableConfig", "AirtablePlusPlus", "format_column_filter", "merge_config"]
