"""Unit tests for ticker directory lookup and enrichment."""

import pytest

from holdings_import.ticker_directory import (
    DirectorySheetError,
    build_directory_from_rows,
    clean_symbol,
    enrich_holding,
    enrich_holdings,
    find_ticker_by_name,
    load_directory_csv,
    parse_directory_price,
    strip_corporate_suffix,
)


@pytest.mark.parametrize("name, expected", [
    ("Volvo AB", "volvo"),
    ("Investor Group", "investor"),
    ("Atlas Copco Class A", "atlas copco"),
    ("Ericsson", "ericsson"),
])
def test_strip_corporate_suffix(name, expected):
    assert strip_corporate_suffix(name) == expected


def test_find_ticker_exact_match_ignores_case(directory):
    assert find_ticker_by_name("VOLVO ab", directory).symbol == "VOLV-B.ST"


def test_find_ticker_prefix_match_after_suffix_strip(directory):
    assert find_ticker_by_name("Volvo Group", directory).symbol == "VOLV-B.ST"
    assert find_ticker_by_name("Apple", directory).symbol == "AAPL"


def test_find_ticker_no_match(directory):
    assert find_ticker_by_name("Microsoft", directory) is None
    assert find_ticker_by_name("", directory) is None
    assert find_ticker_by_name("Apple", []) is None


def test_enrich_backfills_symbol_and_default_currency(make_holding, directory):
    holding = make_holding(name="Apple")
    enriched = enrich_holding(holding, directory)

    assert enriched.symbol == "AAPL"
    assert enriched.currency == "USD"
    assert enriched.currency_provided is True
    # the original stays untouched
    assert holding.symbol == ""
    assert holding.currency == "SEK"


def test_enrich_keeps_provided_currency(make_holding, directory):
    holding = make_holding(name="Apple", currency="EUR", currency_provided=True)
    enriched = enrich_holding(holding, directory)

    assert enriched.symbol == "AAPL"
    assert enriched.currency == "EUR"
    assert enriched.currency_provided is True


def test_enrich_without_directory_currency_keeps_flag(make_holding, directory):
    enriched = enrich_holding(make_holding(name="Ericsson"), directory)

    assert enriched.symbol == "ERIC-B.ST"
    assert enriched.currency == "SEK"
    assert enriched.currency_provided is False


def test_enrich_skips_holdings_with_symbol(make_holding, directory):
    holding = make_holding(name="Apple", symbol="APC")

    assert enrich_holding(holding, directory) is holding


def test_enrich_holdings_keeps_order(make_holding, directory):
    holdings = [make_holding(name="Microsoft"), make_holding(name="Volvo AB"), make_holding(name="Apple")]

    assert [h.symbol for h in enrich_holdings(holdings, directory)] == ["", "VOLV-B.ST", "AAPL"]


@pytest.mark.parametrize("raw, expected", [
    ("STO:VOLV-B", "VOLV-B"),
    ("nasdaq:aapl", "AAPL"),
    (" eric-b ", "ERIC-B"),
])
def test_clean_symbol(raw, expected):
    assert clean_symbol(raw) == expected


@pytest.mark.parametrize("raw, expected", [
    ("250,5", 250.5),
    ("1 234", 1234.0),
    ("190.25 USD", 190.25),
    ("n/a", None),
    (None, None),
])
def test_parse_directory_price(raw, expected):
    assert parse_directory_price(raw) == expected


def test_build_directory_from_rows():
    header = ["Company", "Ticker", "Currency", "Price"]
    rows = [
        ["Volvo AB", "STO:VOLV-B", "SEK", "250,5"],
        ["", "aapl", "", "190"],
        ["No ticker", "", "SEK", "1"],
        ["Volvo AB", "VOLV-B", "SEK", "251"],
        [],
    ]
    entries, counts = build_directory_from_rows(header, rows)

    assert [e.symbol for e in entries] == ["VOLV-B", "AAPL", "VOLV-B"]
    assert entries[0].price == 250.5
    assert entries[1].name == "AAPL"
    assert entries[1].currency is None
    assert counts == {"VOLV-B": 2, "AAPL": 1}


def test_build_directory_requires_price_column():
    with pytest.raises(DirectorySheetError):
        build_directory_from_rows(["Company", "Ticker"], [["Volvo", "VOLV-B"]])


def test_load_directory_csv(tmp_path):
    path = tmp_path / "tickers.csv"
    path.write_text(
        "Company,Ticker,Currency,Price\n"
        "Volvo AB,STO:VOLV-B,SEK,250.5\n"
        "Apple Inc,AAPL,USD,190\n",
        encoding="utf-8",
    )

    entries = load_directory_csv(path)

    assert [(e.name, e.symbol, e.currency) for e in entries] == [
        ("Volvo AB", "VOLV-B", "SEK"),
        ("Apple Inc", "AAPL", "USD"),
    ]


def test_load_directory_csv_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_directory_csv(tmp_path / "missing.csv")
