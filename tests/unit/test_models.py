"""Unit tests for the holding value objects."""

import math

import pytest
from pydantic import ValidationError

from holdings_import.models import HoldingType, ImportReport, ParsedHolding


def test_parsed_holding_defaults(make_holding):
    holding = make_holding()

    assert holding.currency == "SEK"
    assert holding.currency_provided is False
    assert holding.holding_type == HoldingType.STOCK


@pytest.mark.parametrize("overrides", [
    {"quantity": 0},
    {"quantity": -1},
    {"purchase_price": 0},
    {"purchase_price": math.nan},
    {"quantity": math.inf},
    {"name": "", "symbol": ""},
    {"name": "  ", "symbol": ""},
    {"currency": "kr"},
])
def test_parsed_holding_rejects_invalid_values(make_holding, overrides):
    with pytest.raises(ValidationError):
        make_holding(**overrides)


def test_parsed_holding_accepts_symbol_only(make_holding):
    assert make_holding(name="", symbol="AAPL").symbol == "AAPL"


def test_parsed_holding_is_immutable(make_holding):
    holding = make_holding()

    with pytest.raises(ValidationError):
        holding.quantity = 5


def test_import_report_defaults():
    report = ImportReport()

    assert report.total_rows == 0
    assert report.enriched_symbols == []
    assert report.parse_errors == []
