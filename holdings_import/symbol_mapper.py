# holdings_import/symbol_mapper.py
"""
Ticker normalization for Nordic share classes, ISIN detection and
exchange-suffix currency inference.
"""

from typing import Optional
import re


# Exchange suffixes and the currency their listings trade in
EXCHANGE_SUFFIXES = {
    ".ST": "SEK",  # Nasdaq Stockholm
    ".OL": "NOK",  # Oslo Børs
    ".CO": "DKK",  # Nasdaq Copenhagen
    ".HE": "EUR",  # Nasdaq Helsinki
    ".L": "GBP",   # London Stock Exchange
}

# Suffix appended to a bare symbol when the currency points at the exchange
SUFFIX_FOR_CURRENCY = {
    "DKK": ".CO",
    "NOK": ".OL",
}

_EXCHANGE_SUFFIX = re.compile(r"^(.*?)(\.(?:ST|OL|CO|HE|L))$")
_SEPARATED_CLASS = re.compile(r"^(.*?)[\s\-]([ABCD])$")
_COMPACT_CLASS = re.compile(r"^(.*?)([ABCD])$")
_ISIN = re.compile(r"^[A-Z]{2}[A-Z0-9]{9}[0-9]$")

# Below this base length a trailing A-D is usually part of a plain ticker (META, NVDA)
MIN_COMPACT_BASE_LENGTH = 5


def normalize_ticker(ticker: Optional[str]) -> str:
    """
    Canonicalize share-class spellings: "ABCA.ST", "ABC A.ST" and "ABC-A.ST"
    all become "ABC-A.ST".

    A compact trailing class letter is only split off when an exchange suffix
    is present or the base is at least five characters long, so ordinary
    tickers like "META" survive untouched. Idempotent.
    """
    if not ticker or not ticker.strip():
        return ""

    upper = ticker.strip().upper()

    suffix_match = _EXCHANGE_SUFFIX.match(upper)
    if suffix_match:
        base, suffix = suffix_match.group(1), suffix_match.group(2)
    else:
        base, suffix = upper, ""

    separated = _SEPARATED_CLASS.match(base)
    if separated:
        main, share_class = separated.groups()
        return f"{main.strip()}-{share_class}{suffix}"

    compact = _COMPACT_CLASS.match(base)
    if compact and (suffix or len(base) >= MIN_COMPACT_BASE_LENGTH):
        main, share_class = compact.groups()
        # "BRK.B" style symbols already carry their own class separator
        if len(main) >= 2 and main[-1].isalnum():
            return f"{main}-{share_class}{suffix}"

    return f"{base}{suffix}"


def is_likely_isin(value: Optional[str]) -> bool:
    """Two letters, nine alphanumerics and a check digit, e.g. SE0000115446."""
    if not value:
        return False
    return bool(_ISIN.match(value.strip().upper()))


def infer_currency_from_symbol(symbol: Optional[str]) -> Optional[str]:
    """
    Map a known exchange suffix to its trading currency.

    Returns:
        Three-letter currency code, or None when the suffix is unknown
    """
    if not symbol:
        return None
    upper = symbol.strip().upper()
    for suffix, currency in EXCHANGE_SUFFIXES.items():
        if upper.endswith(suffix):
            return currency
    return None


def complete_exchange_suffix(symbol: str, currency: Optional[str]) -> str:
    """
    Append ".CO" / ".OL" to a bare symbol whose currency is DKK / NOK.
    """
    if not symbol or "." in symbol or not currency:
        return symbol
    suffix = SUFFIX_FOR_CURRENCY.get(currency.upper())
    return f"{symbol}{suffix}" if suffix else symbol
