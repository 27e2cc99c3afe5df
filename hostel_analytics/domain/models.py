"""Domain models - pure Python dataclasses representing business entities"""

import enum
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional


@dataclass(frozen=True)
class OccupancySample:
    """One calendar day of bed utilization"""

    date: date
    total_beds: int
    occupied_beds: int


@dataclass
class ForecastPoint:
    """Predicted occupancy for a single future day"""

    date: date
    predicted_occupancy_rate: float
    method: str


@dataclass
class ForecastMetadata:
    """Summary of the history a forecast was built from"""

    historical_days: int
    moving_average: float
    trend: str  # "increasing", "decreasing" or "stable"
    trend_slope: float
    note: str


@dataclass
class OccupancyForecast:
    """Output of the occupancy forecaster"""

    forecast: List[ForecastPoint]
    metadata: ForecastMetadata


class InvoiceStatus(str, enum.Enum):
    """Fee invoice lifecycle. PAID is terminal."""

    PENDING = "PENDING"
    PARTIAL = "PARTIAL"
    PAID = "PAID"


class PaymentMethod(str, enum.Enum):
    CASH = "CASH"
    CARD = "CARD"
    UPI = "UPI"
    BANK_TRANSFER = "BANK_TRANSFER"


@dataclass
class Payment:
    """Immutable payment applied against one invoice"""

    amount_cents: int
    paid_at: datetime
    method: str = PaymentMethod.CASH.value
    reference: Optional[str] = None


@dataclass
class Invoice:
    """Billing obligation with the payments recorded against it"""

    amount_cents: int
    issued_at: datetime
    payments: List[Payment] = field(default_factory=list)


@dataclass
class LedgerBalance:
    """Running state of an invoice derived from its payments"""

    total_paid_cents: int
    remaining_cents: int
    status: InvoiceStatus


@dataclass
class FeeBucket:
    """Fees invoiced and collected on one calendar day"""

    date: date
    total_invoiced_cents: int = 0
    total_paid_cents: int = 0
