# holdings_import/models.py
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class HoldingField(str, Enum):
    """Semantic role a header column can play in a holdings export."""
    NAME = "name"
    SYMBOL = "symbol"
    QUANTITY = "quantity"
    PURCHASE_PRICE = "purchasePrice"
    CURRENCY = "currency"
    TYPE = "type"


class HoldingType(str, Enum):
    STOCK = "stock"
    FUND = "fund"
    CRYPTO = "crypto"
    BONDS = "bonds"
    REAL_ESTATE = "real_estate"
    OTHER = "other"


class ParsedHolding(BaseModel):
    """
    A single position extracted from an import file.
    Immutable; quantity and purchase_price are finite and strictly positive,
    and at least one of name/symbol is non-empty.
    """
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    name: str = ""
    symbol: str = ""
    quantity: float = Field(..., gt=0)
    purchase_price: float = Field(..., gt=0)
    currency: str = Field("SEK", pattern=r"^[A-Z]{3}$")
    currency_provided: bool = False    # False only when currency is the default fallback
    holding_type: HoldingType = HoldingType.STOCK

    @model_validator(mode="after")
    def _require_identity(self) -> "ParsedHolding":
        if not self.name.strip() and not self.symbol.strip():
            raise ValueError("holding needs a name or a symbol")
        return self


class TickerDirectoryEntry(BaseModel):
    """
    External name -> symbol lookup row used for enrichment.
    """
    model_config = ConfigDict(frozen=True)

    symbol: str = Field(..., min_length=1)
    name: Optional[str] = None
    currency: Optional[str] = None
    price: Optional[float] = None


class ImportReport(BaseModel):
    """
    Summary of a single import so the caller can show imported vs total rows.
    """
    total_rows: int = 0                  # non-empty data lines (header excluded)
    imported_rows: int = 0
    dropped_rows: int = 0
    delimiter: str = ","
    has_header: bool = True
    column_map: Dict[str, List[int]] = Field(default_factory=dict)
    enriched_symbols: List[str] = Field(default_factory=list)
    parse_errors: List[str] = Field(default_factory=list)   # file-level failures only


class ImportResult(BaseModel):
    """
    Final import output handed to the persistence caller.
    """
    holdings: List[ParsedHolding]
    report: ImportReport
