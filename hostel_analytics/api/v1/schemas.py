"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, Field, model_validator
from datetime import date
from typing import List, Optional

from hostel_analytics.domain.models import InvoiceStatus, PaymentMethod


class OccupancySampleSchema(BaseModel):
    """One day of bed utilization, used for both ingest and listing"""

    date: date
    total_beds: int = Field(..., gt=0, description="Beds available that day")
    occupied_beds: int = Field(..., ge=0, description="Beds occupied that day")

    @model_validator(mode="after")
    def occupied_within_total(self) -> "OccupancySampleSchema":
        if self.occupied_beds > self.total_beds:
            raise ValueError("occupied_beds cannot exceed total_beds")
        return self


class ForecastPointSchema(BaseModel):
    date: date
    predicted_occupancy_rate: float
    method: str


class ForecastMetadataSchema(BaseModel):
    historical_days: int
    moving_average: float
    trend: str
    trend_slope: float
    note: str


class ForecastResponse(BaseModel):
    """Response for GET /v1/analytics/forecast"""

    forecast: List[ForecastPointSchema]
    metadata: ForecastMetadataSchema


class FeeBucketSchema(BaseModel):
    """Fees invoiced and collected on one day"""

    date: date
    total_invoiced_cents: int
    total_paid_cents: int


class InvoiceCreateRequest(BaseModel):
    """Request body for POST /v1/fees/invoices"""

    resident_id: str = Field(..., min_length=1, description="Resident being billed")
    amount_cents: int = Field(..., gt=0, description="Total owed in cents")
    due_date: date
    description: Optional[str] = None


class PaymentRequest(BaseModel):
    """Request body for POST /v1/fees/payments"""

    invoice_id: str = Field(..., min_length=1)
    amount_cents: int = Field(..., gt=0, description="Amount paid in cents")
    method: PaymentMethod
    reference: Optional[str] = None


class PaymentSchema(BaseModel):
    payment_id: str
    invoice_id: str
    resident_id: str
    amount_cents: int
    method: str
    reference: Optional[str] = None
    paid_at: str


class InvoiceSchema(BaseModel):
    """Invoice with its payments and current balance"""

    invoice_id: str
    resident_id: str
    amount_cents: int
    due_date: date
    description: Optional[str] = None
    status: InvoiceStatus
    issued_at: str
    total_paid_cents: int
    remaining_cents: int
    payments: List[PaymentSchema]


class PaymentResponse(BaseModel):
    """Response for POST /v1/fees/payments"""

    payment: PaymentSchema
    invoice: InvoiceSchema
