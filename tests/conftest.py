"""Pytest configuration and fixtures."""

import pytest

from holdings_import.models import ParsedHolding, TickerDirectoryEntry


@pytest.fixture(autouse=True)
def clean_holdings_env(monkeypatch):
    """Keep a developer's .env / shell settings out of the tests."""
    for key in ("HOLDINGS_DEFAULT_CURRENCY", "HOLDINGS_TICKER_DIRECTORY", "HOLDINGS_LOG_LEVEL"):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def avanza_export() -> str:
    """Semicolon separated export with Swedish headers and decimal commas."""
    return (
        "Namn;Kortnamn;Antal;GAV;Valuta\n"
        "Volvo B;VOLV B;10;150,50;SEK\n"
        "Novo Nordisk B;NOVO B;4;712,30;DKK\n"
        "Equinor;EQNR;5;298,10;NOK\n"
    )


@pytest.fixture
def nordnet_export() -> str:
    """Tab separated export with an instrument type column."""
    return (
        "Namn\tKortnamn\tTyp\tAntal\tGAV\n"
        "Avanza Global\t\tFunds\t12,5\t250,10\n"
        "Investor B\tINVE B\tStocks\t30\t180,20\n"
        "Bitcoin XBT\t\tCertifikat\t2\t95,00\n"
    )


@pytest.fixture
def directory() -> list:
    return [
        TickerDirectoryEntry(symbol="VOLV-B.ST", name="Volvo AB", currency="SEK"),
        TickerDirectoryEntry(symbol="AAPL", name="Apple Inc", currency="USD"),
        TickerDirectoryEntry(symbol="ERIC-B.ST", name="Ericsson", currency=None),
    ]


@pytest.fixture
def make_holding():
    def _make(**overrides) -> ParsedHolding:
        data = {"name": "Apple", "quantity": 1.0, "purchase_price": 10.0}
        data.update(overrides)
        return ParsedHolding(**data)
    return _make
