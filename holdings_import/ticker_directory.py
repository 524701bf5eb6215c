# holdings_import/ticker_directory.py
"""
Name -> ticker lookup against an externally supplied directory, used to
backfill symbols (and, when still defaulted, currencies) for holdings that
were imported by name only. Also builds that directory from a sheet export.
"""

import logging
import re
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

import pandas as pd

from .models import ParsedHolding, TickerDirectoryEntry

logger = logging.getLogger(__name__)

# Trailing corporate noise ignored by the prefix match ("Volvo AB" -> "volvo")
_CORPORATE_SUFFIX = re.compile(r" ab$| group$| class [ab]$")
_CURRENCY_CODE = re.compile(r"^[A-Z]{3}$")
_LEADING_NUMBER = re.compile(r"^[-+]?\d+(?:\.\d+)?")

_COMPANY_HEADER = re.compile(r"company", re.IGNORECASE)
_TICKER_HEADER = re.compile(r"ticker", re.IGNORECASE)
_CURRENCY_HEADER = re.compile(r"currency", re.IGNORECASE)
_PRICE_HEADER = re.compile(r"price", re.IGNORECASE)


class DirectorySheetError(ValueError):
    """Raised when a directory sheet lacks the Company, Ticker or Price column."""

    pass


def strip_corporate_suffix(name: str) -> str:
    return _CORPORATE_SUFFIX.sub("", name.lower()).strip()


def find_ticker_by_name(name: str,
                        directory: Sequence[TickerDirectoryEntry]) -> Optional[TickerDirectoryEntry]:
    """
    Look a company name up in the directory.

    Priority:
    1. Exact case-insensitive name match
    2. Directory name starting with the holding name minus " AB" / " Group" / " Class A|B"

    Returns:
        The matching entry, or None
    """
    if not name or not directory:
        return None

    lowered = name.lower()
    for entry in directory:
        if entry.name and entry.name.lower() == lowered:
            return entry

    cleaned = strip_corporate_suffix(name)
    if not cleaned:
        return None
    for entry in directory:
        if entry.name and entry.name.lower().startswith(cleaned):
            return entry

    return None


def _directory_currency(entry: TickerDirectoryEntry) -> Optional[str]:
    if not entry.currency:
        return None
    code = entry.currency.strip().upper()
    return code if _CURRENCY_CODE.match(code) else None


def enrich_holding(holding: ParsedHolding,
                   directory: Sequence[TickerDirectoryEntry]) -> ParsedHolding:
    """
    Backfill a missing symbol from the directory.

    The currency is only replaced while currency_provided is still False; once
    any real source set it, the flag stays True.
    """
    if holding.symbol:
        return holding

    entry = find_ticker_by_name(holding.name, directory)
    if entry is None:
        return holding

    update = {"symbol": entry.symbol}
    currency = _directory_currency(entry)
    if currency and not holding.currency_provided:
        update["currency"] = currency
        update["currency_provided"] = True

    logger.debug("Matched %r to %s", holding.name, entry.symbol)
    return holding.model_copy(update=update)


def enrich_holdings(holdings: Iterable[ParsedHolding],
                    directory: Sequence[TickerDirectoryEntry]) -> List[ParsedHolding]:
    """Apply enrich_holding to every holding, keeping order."""
    return [enrich_holding(h, directory) for h in holdings]


def _normalize_value(value) -> Optional[str]:
    if value is None:
        return None
    trimmed = str(value).strip()
    return trimmed or None


def clean_symbol(raw_symbol: str) -> str:
    """Drop an exchange prefix such as "STO:" and uppercase."""
    trimmed = raw_symbol.strip()
    if ":" in trimmed:
        return trimmed.split(":")[-1].upper()
    return trimmed.upper()


def parse_directory_price(raw_price: Optional[str]) -> Optional[float]:
    if not raw_price:
        return None
    sanitized = re.sub(r"\s", "", raw_price).replace(",", ".", 1)
    m = _LEADING_NUMBER.match(sanitized)
    return float(m.group(0)) if m else None


def _find_header(headers: Sequence[str], pattern: re.Pattern) -> int:
    for index, header in enumerate(headers):
        if pattern.search(header):
            return index
    return -1


def build_directory_from_rows(header_row: Sequence[Optional[str]],
                              data_rows: Iterable[Sequence[Optional[str]]]
                              ) -> Tuple[List[TickerDirectoryEntry], Dict[str, int]]:
    """
    Build directory entries from a sheet with Company / Ticker / Currency / Price columns.

    Args:
        header_row: Header cells of the sheet
        data_rows: Remaining rows

    Returns:
        Tuple of (entries, occurrence count per symbol)

    Raises:
        DirectorySheetError: if Company, Ticker or Price is missing
    """
    headers = [h.strip() if isinstance(h, str) else "" for h in header_row]
    company_idx = _find_header(headers, _COMPANY_HEADER)
    ticker_idx = _find_header(headers, _TICKER_HEADER)
    currency_idx = _find_header(headers, _CURRENCY_HEADER)
    price_idx = _find_header(headers, _PRICE_HEADER)

    if company_idx == -1 or ticker_idx == -1 or price_idx == -1:
        raise DirectorySheetError("Directory sheet is missing required columns (Company, Ticker, Price).")

    def cell(row: Sequence[Optional[str]], index: int) -> Optional[str]:
        return _normalize_value(row[index]) if 0 <= index < len(row) else None

    entries: List[TickerDirectoryEntry] = []
    symbol_counts: Dict[str, int] = {}
    for row in data_rows:
        if not row:
            continue
        raw_symbol = cell(row, ticker_idx)
        if not raw_symbol:
            continue

        symbol = clean_symbol(raw_symbol)
        if not symbol:
            continue
        entries.append(TickerDirectoryEntry(
            symbol=symbol,
            name=cell(row, company_idx) or symbol,
            currency=cell(row, currency_idx),
            price=parse_directory_price(cell(row, price_idx)),
        ))
        symbol_counts[symbol] = symbol_counts.get(symbol, 0) + 1

    return entries, symbol_counts


def load_directory_csv(file_path: Union[str, Path]) -> List[TickerDirectoryEntry]:
    """
    Read a directory sheet exported as CSV.

    Raises:
        FileNotFoundError: if the file does not exist
        DirectorySheetError: if required columns are missing
    """
    p = Path(file_path)
    if not p.exists():
        raise FileNotFoundError(file_path)

    df = pd.read_csv(p, dtype=str, keep_default_na=False)
    entries, symbol_counts = build_directory_from_rows(
        list(df.columns), df.values.tolist()
    )
    duplicates = [s for s, n in symbol_counts.items() if n > 1]
    if duplicates:
        logger.warning("Directory %s lists %d symbols more than once: %s",
                       p.name, len(duplicates), duplicates[:10])
    return entries
