# holdings_import/config.py
"""
Environment-driven settings for holdings imports.

Environment:
    HOLDINGS_DEFAULT_CURRENCY=SEK
    HOLDINGS_TICKER_DIRECTORY=<path to a Company/Ticker/Currency/Price CSV>
    HOLDINGS_LOG_LEVEL=INFO
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


@dataclass(frozen=True)
class Settings:
    default_currency: str = "SEK"
    ticker_directory: Optional[str] = None
    log_level: str = "INFO"


def default_currency_from_env() -> str:
    currency = (os.getenv("HOLDINGS_DEFAULT_CURRENCY") or "SEK").strip().upper()
    if len(currency) != 3 or not currency.isalpha():
        raise ValueError(f"HOLDINGS_DEFAULT_CURRENCY must be a 3-letter code, got {currency!r}")
    return currency


def ticker_directory_from_env() -> Optional[str]:
    return os.getenv("HOLDINGS_TICKER_DIRECTORY") or None


def log_level_from_env() -> str:
    return (os.getenv("HOLDINGS_LOG_LEVEL") or "INFO").strip().upper()


def get_settings() -> Settings:
    """Read settings from the environment (and a .env file, if any)."""
    return Settings(
        default_currency=default_currency_from_env(),
        ticker_directory=ticker_directory_from_env(),
        log_level=log_level_from_env(),
    )
