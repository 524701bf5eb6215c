# holdings_import/ingest_agent.py
"""
IngestAgent: turns an uploaded broker export into holdings plus an import
report, optionally backfilling symbols from a ticker directory.

Usage:
    python -m holdings_import.ingest_agent export.csv --directory tickers.csv
"""

import json
import logging
from pathlib import Path
from typing import List, Optional, Sequence, Union

from .config import default_currency_from_env, log_level_from_env, ticker_directory_from_env
from .models import ImportReport, ImportResult, ParsedHolding, TickerDirectoryEntry
from .parser import (
    DEFAULT_CURRENCY,
    UnsupportedFileError,
    parse_file,
    parse_text,
    to_canonical_json,
)
from .ticker_directory import enrich_holdings, load_directory_csv

logger = logging.getLogger(__name__)


class IngestAgent:
    def __init__(self, default_currency: Optional[str] = None,
                 directory: Optional[Sequence[TickerDirectoryEntry]] = None,
                 directory_path: Optional[Union[str, Path]] = None,
                 use_enrichment: bool = True):
        # the environment is consulted only for values the caller left out
        self.default_currency = default_currency or default_currency_from_env()
        self.directory_path = directory_path or ticker_directory_from_env()
        self.use_enrichment = use_enrichment
        self._directory: Optional[List[TickerDirectoryEntry]] = (
            list(directory) if directory is not None else None
        )

    @property
    def directory(self) -> List[TickerDirectoryEntry]:
        """The ticker directory, loaded lazily from directory_path when not given."""
        if self._directory is None:
            if self.directory_path:
                self._directory = load_directory_csv(self.directory_path)
                logger.info("Loaded %d directory entries from %s",
                            len(self._directory), self.directory_path)
            else:
                self._directory = []
        return self._directory

    def _finish(self, holdings: List[ParsedHolding], report: ImportReport) -> ImportResult:
        if self.use_enrichment and self.directory:
            enriched = enrich_holdings(holdings, self.directory)
            report.enriched_symbols = [
                after.symbol for before, after in zip(holdings, enriched)
                if not before.symbol and after.symbol
            ]
            holdings = enriched

        logger.info("Imported %d of %d rows (delimiter=%r, header=%s, enriched=%d)",
                    report.imported_rows, report.total_rows, report.delimiter,
                    report.has_header, len(report.enriched_symbols))
        return ImportResult(holdings=holdings, report=report)

    def process_text(self, text: str) -> ImportResult:
        holdings, report = parse_text(text, self.default_currency)
        return self._finish(holdings, report)

    def process_file(self, file_path: Union[str, Path]) -> ImportResult:
        file_path = Path(file_path)
        try:
            holdings, report = parse_file(file_path, self.default_currency)
        except (FileNotFoundError, UnsupportedFileError):
            raise
        except Exception as e:
            logger.warning("Could not read %s: %s", file_path, e, exc_info=True)
            return ImportResult(
                holdings=[],
                report=ImportReport(parse_errors=[f"File parsing failed: {e}"]),
            )
        return self._finish(holdings, report)


def main(argv: Optional[Sequence[str]] = None) -> int:
    import argparse

    parser = argparse.ArgumentParser(description="Parse a broker holdings export into JSON")
    parser.add_argument("file", help="Export file (.csv, .tsv, .txt, .xlsx, .xls)")
    parser.add_argument(
        "--directory",
        default=None,
        help="Ticker directory CSV (Company, Ticker, Currency, Price) used to backfill symbols",
    )
    parser.add_argument(
        "--default-currency",
        default=None,
        help=f"Currency when nothing in the file names one (default: HOLDINGS_DEFAULT_CURRENCY or {DEFAULT_CURRENCY})",
    )
    parser.add_argument(
        "--no-enrich",
        action="store_true",
        help="Skip the ticker directory lookup",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=log_level_from_env(),
                        format="%(asctime)s %(levelname)s %(message)s")

    agent = IngestAgent(
        default_currency=args.default_currency,
        directory_path=args.directory,
        use_enrichment=not args.no_enrich,
    )
    try:
        result = agent.process_file(args.file)
    except (FileNotFoundError, UnsupportedFileError) as e:
        logger.error("%s", e)
        return 1

    out = {
        "holdings": to_canonical_json(result.holdings),
        "report": result.report.model_dump(),
    }
    print(json.dumps(out, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
