# holdings_import/__init__.py
from .models import (
    HoldingField,
    HoldingType,
    ImportReport,
    ImportResult,
    ParsedHolding,
    TickerDirectoryEntry,
)
from .column_detector import ColumnMap, detect_columns, detect_delimiter, extract_currency_hint
from .parser import parse_file, parse_holdings, parse_locale_number, parse_text, to_canonical_json
from .symbol_mapper import infer_currency_from_symbol, normalize_ticker
from .ticker_directory import (
    build_directory_from_rows,
    enrich_holding,
    enrich_holdings,
    find_ticker_by_name,
    load_directory_csv,
)
from .ingest_agent import IngestAgent

__all__ = [
    "HoldingField",
    "HoldingType",
    "ImportReport",
    "ImportResult",
    "ParsedHolding",
    "TickerDirectoryEntry",
    "ColumnMap",
    "detect_columns",
    "detect_delimiter",
    "extract_currency_hint",
    "parse_file",
    "parse_holdings",
    "parse_locale_number",
    "parse_text",
    "to_canonical_json",
    "infer_currency_from_symbol",
    "normalize_ticker",
    "build_directory_from_rows",
    "enrich_holding",
    "enrich_holdings",
    "find_ticker_by_name",
    "load_directory_csv",
    "IngestAgent",
]
