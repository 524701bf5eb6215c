"""Unit tests for ticker normalization and symbol-based currency inference."""

import pytest

from holdings_import.symbol_mapper import (
    complete_exchange_suffix,
    infer_currency_from_symbol,
    is_likely_isin,
    normalize_ticker,
)


@pytest.mark.parametrize("raw, expected", [
    ("ABCA.ST", "ABC-A.ST"),
    ("ABC A.ST", "ABC-A.ST"),
    ("abc-a.st", "ABC-A.ST"),
    ("ABC A", "ABC-A"),
    ("VOLVB", "VOLV-B"),
    ("  volv b ", "VOLV-B"),
    ("META", "META"),
    ("NVDA", "NVDA"),
    ("AAPL", "AAPL"),
    ("BRK.B", "BRK.B"),
    ("AB.ST", "AB.ST"),
    ("EQNR.OL", "EQNR.OL"),
    ("SE0000115446", "SE0000115446"),
    ("", ""),
    (None, ""),
])
def test_normalize_ticker(raw, expected):
    assert normalize_ticker(raw) == expected


@pytest.mark.parametrize("raw", [
    "ABCA.ST", "ABC A", "VOLVB", "META", "BRK.B", "AB-CA", "A-B", "SHB A.ST", "NOVO B.CO",
])
def test_normalize_ticker_is_idempotent(raw):
    once = normalize_ticker(raw)
    assert normalize_ticker(once) == once


@pytest.mark.parametrize("value, expected", [
    ("SE0000115446", True),
    ("us0378331005", True),
    ("VOLV-B", False),
    ("SE000011544X", False),
    ("", False),
    (None, False),
])
def test_is_likely_isin(value, expected):
    assert is_likely_isin(value) is expected


@pytest.mark.parametrize("symbol, expected", [
    ("VOLV-B.ST", "SEK"),
    ("EQNR.OL", "NOK"),
    ("NOVO-B.CO", "DKK"),
    ("NOKIA.HE", "EUR"),
    ("VOD.L", "GBP"),
    ("AAPL", None),
    ("", None),
])
def test_infer_currency_from_symbol(symbol, expected):
    assert infer_currency_from_symbol(symbol) == expected


def test_complete_exchange_suffix():
    assert complete_exchange_suffix("NOVO-B", "DKK") == "NOVO-B.CO"
    assert complete_exchange_suffix("EQNR", "NOK") == "EQNR.OL"
    assert complete_exchange_suffix("EQNR.OL", "NOK") == "EQNR.OL"
    assert complete_exchange_suffix("AAPL", "USD") == "AAPL"
    assert complete_exchange_suffix("AAPL", None) == "AAPL"
    assert complete_exchange_suffix("", "DKK") == ""
