# holdings_import/column_detector.py
"""
Heuristic detection of the field delimiter and of which columns hold the
name, symbol, quantity, purchase price, currency and instrument type in a
broker export, plus currency hints embedded in header text.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, List, NamedTuple, Optional, Sequence, Tuple

from .models import HoldingField


TAB = "\t"
SEMICOLON = ";"
COMMA = ","


class HeaderRule(NamedTuple):
    field: HoldingField
    pattern: re.Pattern
    exclude: Optional[re.Pattern] = None

    def matches(self, header: str) -> bool:
        if not self.pattern.search(header):
            return False
        return not (self.exclude and self.exclude.search(header))


# Order matters: the first matching rule wins for a header cell
HEADER_RULES: Tuple[HeaderRule, ...] = (
    # "inköpstyp" is purchase wording, it must not be read as instrument type
    HeaderRule(HoldingField.TYPE,
               re.compile(r"typ|type|kategori|category|slag|instrument"),
               re.compile(r"inköpstyp")),
    HeaderRule(HoldingField.SYMBOL, re.compile(r"symbol|ticker")),
    HeaderRule(HoldingField.SYMBOL, re.compile(r"kortnamn")),
    HeaderRule(HoldingField.SYMBOL, re.compile(r"isin")),
    HeaderRule(HoldingField.NAME,
               re.compile(r"name|namn|företag|company|bolag"),
               re.compile(r"kortnamn")),
    HeaderRule(HoldingField.QUANTITY,
               re.compile(r"quantity|antal|shares|mängd|aktier|innehav|volym|volume")),
    HeaderRule(HoldingField.PURCHASE_PRICE,
               re.compile(r"purchase|köppris|pris|inköpspris|cost|avg|gav|kurs")),
    HeaderRule(HoldingField.CURRENCY, re.compile(r"currency|valuta")),
)

# Positional layout used when no header cell can be classified
HEADERLESS_ORDER: Tuple[HoldingField, ...] = (
    HoldingField.NAME,
    HoldingField.SYMBOL,
    HoldingField.QUANTITY,
    HoldingField.PURCHASE_PRICE,
    HoldingField.CURRENCY,
)

# Codes accepted from a bare three-letter word in a header, e.g. "GAV (SEK)"
KNOWN_CURRENCY_CODES = frozenset({
    "SEK", "NOK", "DKK", "EUR", "USD", "GBP", "CHF", "ISK", "PLN", "CZK",
    "HUF", "JPY", "CNY", "HKD", "SGD", "CAD", "AUD", "NZD", "ZAR", "INR",
    "BRL", "MXN", "TRY", "KRW",
})

_THREE_LETTER_WORD = re.compile(r"\b([A-Z]{3})\b")

CURRENCY_WORDS: Tuple[Tuple[re.Pattern, str], ...] = (
    (re.compile(r"SEK|KRON", re.IGNORECASE), "SEK"),
    (re.compile(r"USD|DOLLAR", re.IGNORECASE), "USD"),
    (re.compile(r"EUR|EURO", re.IGNORECASE), "EUR"),
    (re.compile(r"GBP|POUND", re.IGNORECASE), "GBP"),
    (re.compile(r"NOK", re.IGNORECASE), "NOK"),
    (re.compile(r"DKK", re.IGNORECASE), "DKK"),
)

# Local abbreviation for "genomsnittligt anskaffningsvärde" (average acquisition cost)
_GAV_EXACT = "gav"
_GAV_DECORATED = re.compile(r"^gav\s*\(")
_GAV_ANY = re.compile(r"gav")


@dataclass(frozen=True)
class ColumnMap:
    """
    Ordered candidate column indices per HoldingField, together with the
    cleaned header cells and the per-column currency hints they carry.
    """
    headers: Tuple[str, ...]
    indices: Dict[HoldingField, Tuple[int, ...]] = field(default_factory=dict)
    currency_hints: Tuple[Optional[str], ...] = ()
    has_header: bool = True

    def candidates(self, holding_field: HoldingField) -> Tuple[int, ...]:
        return self.indices.get(holding_field, ())

    def currency_hint(self, index: int) -> Optional[str]:
        if 0 <= index < len(self.currency_hints):
            return self.currency_hints[index]
        return None

    def purchase_price_candidates(self) -> Tuple[int, ...]:
        return prioritize_purchase_price_columns(
            self.candidates(HoldingField.PURCHASE_PRICE), self.headers
        )

    def to_dict(self) -> Dict[str, List[int]]:
        return {f.value: list(idx) for f, idx in self.indices.items() if idx}


def trim_quotes(value: str) -> str:
    """Drop one leading and one trailing double quote, if present."""
    if value.startswith('"'):
        value = value[1:]
    if value.endswith('"'):
        value = value[:-1]
    return value


def detect_delimiter(line: str) -> str:
    """
    Pick the field separator from a header line.

    Tabs win only with a strict majority; otherwise semicolon beats comma on
    equal counts, and comma is the default when neither occurs.
    """
    tabs = line.count(TAB)
    semicolons = line.count(SEMICOLON)
    commas = line.count(COMMA)

    # Nordnet style exports are tab separated
    if tabs > semicolons and tabs > commas:
        return TAB
    if semicolons == 0 and commas == 0:
        return COMMA
    return SEMICOLON if semicolons >= commas else COMMA


def split_header(line: str) -> Tuple[str, List[str]]:
    """
    Detect the delimiter and split the header line with it.

    Returns:
        Tuple of (delimiter, cleaned header cells)
    """
    delimiter = detect_delimiter(line)
    parts = line.split(delimiter)

    if len(parts) == 1:
        for other in (SEMICOLON, TAB, COMMA):
            if other != delimiter and other in line:
                delimiter = other
                parts = line.split(delimiter)
                break

    return delimiter, [trim_quotes(p.lstrip("\ufeff").strip()) for p in parts]


def classify_header(header: str) -> Optional[HoldingField]:
    """
    Classify a single header cell against the ordered rule table.

    Returns:
        The matching HoldingField, or None when the cell is unclassified
    """
    normalized = header.strip().lower()
    if not normalized:
        return None
    for rule in HEADER_RULES:
        if rule.matches(normalized):
            return rule.field
    return None


def extract_currency_hint(header: str) -> Optional[str]:
    """
    Find a currency signal in header text, e.g. "Kurs (USD)" -> "USD".
    """
    upper = header.upper()
    for code in _THREE_LETTER_WORD.findall(upper):
        if code in KNOWN_CURRENCY_CODES:
            return code
    for pattern, code in CURRENCY_WORDS:
        if pattern.search(upper):
            return code
    return None


def prioritize_purchase_price_columns(indices: Sequence[int],
                                      headers: Sequence[str]) -> Tuple[int, ...]:
    """
    Order purchase-price candidates so the native-currency cost column wins.

    Exports often carry both "GAV" and an FX-converted "GAV (SEK)". Preference:
    exact "gav", then "gav (...)", then anything containing "gav", and finally
    the unfiltered candidate list.
    """
    if not indices:
        return tuple(indices)

    exact: List[int] = []
    decorated: List[int] = []
    other: List[int] = []
    for index in indices:
        header = headers[index].strip().lower() if 0 <= index < len(headers) else ""
        if header == _GAV_EXACT:
            exact.append(index)
        elif _GAV_DECORATED.match(header):
            decorated.append(index)
        elif _GAV_ANY.search(header):
            other.append(index)

    for group in (exact, decorated, other):
        if group:
            return tuple(group)
    return tuple(indices)


def detect_columns(headers: Sequence[str]) -> ColumnMap:
    """
    Build the column map for a header row.

    Args:
        headers: Cleaned header cells, left to right

    Returns:
        ColumnMap; when no cell classifies the table is treated as headerless
        and columns are assigned positionally (name, symbol, quantity,
        purchase price, currency)
    """
    classified = [classify_header(h) for h in headers]
    has_header = any(classified)

    buckets: Dict[HoldingField, List[int]] = {f: [] for f in HoldingField}
    if has_header:
        for index, holding_field in enumerate(classified):
            if holding_field is not None:
                buckets[holding_field].append(index)
    else:
        for index, holding_field in zip(range(len(headers)), HEADERLESS_ORDER):
            buckets[holding_field].append(index)

    return ColumnMap(
        headers=tuple(headers),
        indices={f: tuple(idx) for f, idx in buckets.items()},
        currency_hints=tuple(
            extract_currency_hint(h) if has_header else None for h in headers
        ),
        has_header=has_header,
    )
