# holdings_import/parser.py
import logging
import math
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import pandas as pd

from .column_detector import ColumnMap, detect_columns, split_header, trim_quotes
from .models import HoldingField, HoldingType, ImportReport, ParsedHolding
from .symbol_mapper import (
    complete_exchange_suffix,
    infer_currency_from_symbol,
    is_likely_isin,
    normalize_ticker,
)

logger = logging.getLogger(__name__)

DEFAULT_CURRENCY = "SEK"

TEXT_SUFFIXES = {".csv", ".tsv", ".txt"}
EXCEL_SUFFIXES = {".xlsx", ".xls"}

_NON_NUMERIC = re.compile(r"[^0-9,.\-]")
_NON_LETTER = re.compile(r"[^a-zA-Z]")
_LINE_BREAK = re.compile(r"\r?\n")
_CELL_BREAK = re.compile(r"[\t\r\n]+")
_LEADING_NUMBER = re.compile(r"^-?\d+(?:\.\d+)?")
_CURRENCY_CODE = re.compile(r"^[A-Z]{3}$")

# Substring rules for the type column, checked in order
_FUND_WORDS = ("fund", "fond", "etf")
_STOCK_WORDS = ("stock", "aktie")
_CRYPTO = re.compile(r"krypto|crypto|bitcoin|ethereum|btc|eth")
_OTHER = re.compile(r"certifikat|warrant|mini")
_BONDS = re.compile(r"obligation|bond|ränta")
_REAL_ESTATE = re.compile(r"fastighet|real estate")


class UnsupportedFileError(ValueError):
    """Raised when an import file has an extension we cannot read."""

    pass


# Helpers for cleaning numeric fields
def parse_locale_number(x: Any) -> float:
    """
    Coerce Nordic / continental formatted text like '1 234,56 kr' or
    '12.345,67' into float. Returns math.nan when empty or invalid.

    A lone comma is the decimal separator. When both comma and dot occur, the
    one appearing last is the decimal separator and the other is dropped.
    A separator repeated on its own (1.234.567) groups thousands. Trailing
    text after the number is ignored, so "150:-" reads as 150.
    """
    if x is None:
        return math.nan
    if isinstance(x, (int, float)):
        return float(x) if math.isfinite(x) else math.nan

    s = _NON_NUMERIC.sub("", str(x).replace("\u2212", "-"))
    if not s:
        return math.nan

    has_comma = "," in s
    has_dot = "." in s
    if has_comma and has_dot:
        if s.rfind(",") > s.rfind("."):
            s = s.replace(".", "").replace(",", ".")
        else:
            s = s.replace(",", "")
    elif s.count(",") > 1 or s.count(".") > 1:
        s = s.replace(",", "").replace(".", "")
    elif has_comma:
        s = s.replace(",", ".")

    m = _LEADING_NUMBER.match(s)
    if not m:
        return math.nan
    value = float(m.group(0))
    return value if math.isfinite(value) else math.nan


def _is_positive(value: float) -> bool:
    return math.isfinite(value) and value > 0


def split_lines(text: str) -> List[str]:
    """Strip byte-order marks and return the trimmed, non-empty lines."""
    if not text:
        return []
    cleaned = text.replace("\ufeff", "")
    return [line.strip() for line in _LINE_BREAK.split(cleaned) if line.strip()]


def split_row(line: str, delimiter: str) -> List[str]:
    return [trim_quotes(part.strip()).strip() for part in line.split(delimiter)]


def _cell(parts: Sequence[str], index: int) -> str:
    return parts[index] if 0 <= index < len(parts) else ""


def _first_value(parts: Sequence[str], indices: Sequence[int]) -> str:
    """First non-empty cell among the candidates, else the first candidate's cell."""
    if not indices:
        return ""
    for index in indices:
        value = _cell(parts, index)
        if value.strip():
            return value
    return _cell(parts, indices[0])


def detect_holding_type(type_raw: str, name_raw: str = "") -> HoldingType:
    """
    Map a broker's instrument type text to a HoldingType.

    Without a type value the name decides between fund and stock.
    """
    if type_raw and type_raw.strip():
        lower = type_raw.strip().lower()
        if lower == "funds" or any(w in lower for w in _FUND_WORDS):
            return HoldingType.FUND
        if lower == "stocks" or any(w in lower for w in _STOCK_WORDS):
            return HoldingType.STOCK
        if _CRYPTO.search(lower):
            return HoldingType.CRYPTO
        if _OTHER.search(lower):
            return HoldingType.OTHER
        if _BONDS.search(lower):
            return HoldingType.BONDS
        if _REAL_ESTATE.search(lower):
            return HoldingType.REAL_ESTATE
        return HoldingType.STOCK

    name_lower = (name_raw or "").lower()
    if any(w in name_lower for w in _FUND_WORDS):
        return HoldingType.FUND
    return HoldingType.STOCK


def _parse_quantity(parts: Sequence[str], indices: Sequence[int]) -> float:
    for index in indices:
        value = parse_locale_number(_cell(parts, index))
        if _is_positive(value):
            return value
    return math.nan


def _parse_purchase_price(parts: Sequence[str],
                          column_map: ColumnMap) -> Tuple[float, Optional[str]]:
    """
    Returns:
        Tuple of (price, currency hint of the column that supplied it)
    """
    for candidates in (column_map.purchase_price_candidates(),
                       column_map.candidates(HoldingField.PURCHASE_PRICE)):
        for index in candidates:
            value = parse_locale_number(_cell(parts, index))
            if _is_positive(value):
                return value, column_map.currency_hint(index)
    return math.nan, None


def _pick_symbol(parts: Sequence[str], indices: Sequence[int]) -> str:
    """First non-ISIN symbol cell; an ISIN only when nothing else is present."""
    fallback = ""
    for index in indices:
        value = _cell(parts, index).strip()
        if not value:
            continue
        if not is_likely_isin(value):
            return value
        if not fallback:
            fallback = value
    return fallback


def _explicit_currency(raw: str) -> Optional[str]:
    letters = _NON_LETTER.sub("", raw or "").upper()
    return letters if len(letters) == 3 else None


def resolve_default_currency(code: Optional[str]) -> str:
    """Upper-case a caller supplied default currency; anything but 3 letters falls back to SEK."""
    cleaned = (code or "").strip().upper()
    if _CURRENCY_CODE.match(cleaned):
        return cleaned
    if cleaned:
        logger.warning("Ignoring default currency %r, using %s", code, DEFAULT_CURRENCY)
    return DEFAULT_CURRENCY


def row_to_holding(parts: Sequence[str], column_map: ColumnMap,
                   default_currency: str = DEFAULT_CURRENCY,
                   line_no: Optional[int] = None) -> Optional[ParsedHolding]:
    """
    Build a ParsedHolding from one split data row, or return None when the row
    lacks a positive quantity, a positive purchase price, or any identity.
    """
    name_raw = _first_value(parts, column_map.candidates(HoldingField.NAME)).strip()
    holding_type = detect_holding_type(
        _first_value(parts, column_map.candidates(HoldingField.TYPE)), name_raw
    )

    quantity = _parse_quantity(parts, column_map.candidates(HoldingField.QUANTITY))
    purchase_price, price_hint = _parse_purchase_price(parts, column_map)
    symbol_raw = _pick_symbol(parts, column_map.candidates(HoldingField.SYMBOL))

    reason = None
    if not _is_positive(quantity):
        reason = "no positive quantity"
    elif not _is_positive(purchase_price):
        reason = "no positive purchase price"
    elif not (name_raw or symbol_raw):
        reason = "no name or symbol"
    if reason:
        logger.debug("Dropping row %s: %s", line_no if line_no is not None else "?", reason)
        return None

    currency_from_value = _explicit_currency(
        _first_value(parts, column_map.candidates(HoldingField.CURRENCY))
    )
    base_symbol = normalize_ticker(symbol_raw)
    symbol = complete_exchange_suffix(base_symbol, currency_from_value or price_hint)
    inferred = infer_currency_from_symbol(symbol)

    resolved = currency_from_value or price_hint or inferred
    return ParsedHolding(
        name=name_raw or base_symbol,
        symbol=symbol,
        quantity=quantity,
        purchase_price=purchase_price,
        currency=resolved or resolve_default_currency(default_currency),
        currency_provided=resolved is not None,
        holding_type=holding_type,
    )


def parse_text(text: str,
               default_currency: str = DEFAULT_CURRENCY) -> Tuple[List[ParsedHolding], ImportReport]:
    """
    Parse a delimited holdings export.

    Args:
        text: Raw file content, any line-ending convention, optional BOM
        default_currency: Currency used when no column, header or symbol names one

    Returns:
        Tuple of (holdings in input order, report with row counts and detected layout)
    """
    default_currency = resolve_default_currency(default_currency)
    lines = split_lines(text)
    if not lines:
        return [], ImportReport(total_rows=0, imported_rows=0, dropped_rows=0)

    delimiter, headers = split_header(lines[0])
    column_map = detect_columns(headers)
    start = 1 if column_map.has_header else 0

    holdings: List[ParsedHolding] = []
    for line_no in range(start, len(lines)):
        parts = split_row(lines[line_no], delimiter)
        holding = row_to_holding(parts, column_map, default_currency, line_no=line_no + 1)
        if holding is not None:
            holdings.append(holding)

    total = len(lines) - start
    report = ImportReport(
        total_rows=total,
        imported_rows=len(holdings),
        dropped_rows=total - len(holdings),
        delimiter=delimiter,
        has_header=column_map.has_header,
        column_map=column_map.to_dict(),
    )
    return holdings, report


def parse_holdings(text: str, default_currency: str = DEFAULT_CURRENCY) -> List[ParsedHolding]:
    """Parse a delimited holdings export into holdings, dropping unusable rows."""
    holdings, _ = parse_text(text, default_currency)
    return holdings


def read_text_file(path: Union[str, Path]) -> str:
    """
    Decode a text export. UTF-16 is used when a UTF-16 byte-order mark is
    present (Nordnet), otherwise UTF-8 with a cp1252 fallback.
    """
    raw = Path(path).read_bytes()
    if raw.startswith((b"\xff\xfe", b"\xfe\xff")):
        return raw.decode("utf-16")
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        return raw.decode("cp1252", errors="replace")


def excel_to_text(path: Union[str, Path]) -> str:
    """Flatten the first sheet of a workbook into tab-delimited text."""
    df = pd.read_excel(path, dtype=str, header=None)
    df = df.fillna("")
    return "\n".join(
        "\t".join(_CELL_BREAK.sub(" ", str(v)).strip() for v in row)
        for row in df.itertuples(index=False, name=None)
    )


def parse_file(file_path: Union[str, Path],
               default_currency: str = DEFAULT_CURRENCY) -> Tuple[List[ParsedHolding], ImportReport]:
    """
    Read a CSV / TSV / TXT or Excel export and parse it like uploaded text.

    Raises:
        FileNotFoundError: if the file does not exist
        UnsupportedFileError: for any other extension
    """
    p = Path(file_path)
    if not p.exists():
        raise FileNotFoundError(file_path)

    suffix = p.suffix.lower()
    if suffix in TEXT_SUFFIXES:
        text = read_text_file(p)
    elif suffix in EXCEL_SUFFIXES:
        text = excel_to_text(p)
    else:
        raise UnsupportedFileError("Unsupported file type. Use .csv, .tsv, .txt or .xlsx/.xls")

    return parse_text(text, default_currency)


def to_canonical_json(holdings: List[ParsedHolding]) -> List[Dict[str, Any]]:
    """
    Convert holdings to the camelCase structure the persistence layer stores:
    {
        "name": "Volvo B",
        "symbol": "VOLV-B.ST",
        "quantity": 10.0,
        "purchasePrice": 150.5,
        "currency": "SEK",
        "currencyProvided": true,
        "holdingType": "stock",
        "holdingValue": 1505.0
    }
    """
    out = []
    for h in holdings:
        out.append({
            "name": h.name,
            "symbol": h.symbol,
            "quantity": h.quantity,
            "purchasePrice": h.purchase_price,
            "currency": h.currency,
            "currencyProvided": h.currency_provided,
            "holdingType": h.holding_type.value,
            "holdingValue": h.quantity * h.purchase_price,
        })
    return out
