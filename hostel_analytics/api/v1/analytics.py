"""/v1/analytics - occupancy history, occupancy forecast and fee time series"""

import time
import logging
from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from hostel_analytics.api.v1.schemas import (
    OccupancySampleSchema,
    ForecastResponse,
    ForecastPointSchema,
    ForecastMetadataSchema,
    FeeBucketSchema,
)
from hostel_analytics.api.dependencies import get_request_id, get_occupancy_repository, get_invoice_repository
from hostel_analytics.infrastructure.database.session import get_db
from hostel_analytics.infrastructure.database.repositories import OccupancyRepository, InvoiceRepository
from hostel_analytics.domain.models import OccupancySample
from hostel_analytics.domain.forecasting import forecast_occupancy
from hostel_analytics.domain.fees import build_fee_time_series
from hostel_analytics.domain.exceptions import (
    DuplicateSampleError,
    InsufficientHistoricalDataError,
    InvalidSampleError,
)
from hostel_analytics.infrastructure.observability.metrics import record_forecast, forecast_failure_counter
from hostel_analytics.infrastructure.observability.logging import log_forecast
from hostel_analytics.utils.date_utils import trailing_window_start, utcnow
from hostel_analytics.config import settings

router = APIRouter()


@router.get("/analytics/occupancy", response_model=List[OccupancySampleSchema])
def get_occupancy(occupancy_repo: OccupancyRepository = Depends(get_occupancy_repository)):
    """Occupancy samples for the trailing analytics window, oldest first"""
    start = trailing_window_start(date.today(), settings.analytics_window_days)
    samples = occupancy_repo.get_history_since(start)

    return [
        OccupancySampleSchema(date=s.date, total_beds=s.total_beds, occupied_beds=s.occupied_beds)
        for s in samples
    ]


@router.post("/analytics/occupancy", response_model=OccupancySampleSchema, status_code=201)
def record_occupancy(
    request_body: OccupancySampleSchema,
    request: Request,
    db: Session = Depends(get_db),
    occupancy_repo: OccupancyRepository = Depends(get_occupancy_repository),
):
    """
    Record the bed utilization snapshot for one day.

    Samples are immutable: a second snapshot for the same day returns 409.
    """
    request_id = get_request_id(request)
    sample = OccupancySample(
        date=request_body.date,
        total_beds=request_body.total_beds,
        occupied_beds=request_body.occupied_beds,
    )

    try:
        occupancy_repo.record_sample(sample)
        db.commit()
    except DuplicateSampleError as e:
        db.rollback()
        logging.warning(f"Duplicate occupancy sample: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=409, detail=str(e))

    return request_body


@router.get("/analytics/forecast", response_model=ForecastResponse)
def get_forecast(
    request: Request,
    occupancy_repo: OccupancyRepository = Depends(get_occupancy_repository),
):
    """
    Forecast occupancy rate for the next 7 days.

    Flow:
    1. Load occupancy history for the trailing analytics window
    2. Fit linear trend and blend with the 7-day moving average
    3. Return forecast points and trend metadata
    """
    start_time = time.time()
    request_id = get_request_id(request)

    start = trailing_window_start(date.today(), settings.analytics_window_days)
    history = occupancy_repo.get_history_since(start)

    try:
        result = forecast_occupancy(history)
    except InsufficientHistoricalDataError as e:
        forecast_failure_counter.labels(reason="insufficient_data").inc()
        logging.warning(f"Insufficient data: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=400, detail=str(e))
    except InvalidSampleError as e:
        forecast_failure_counter.labels(reason="invalid_sample").inc()
        logging.error(f"Invalid occupancy history: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    duration_ms = (time.time() - start_time) * 1000
    record_forecast(result.metadata.trend)
    log_forecast(request_id, result.metadata.historical_days, result.metadata.trend, duration_ms)

    return ForecastResponse(
        forecast=[
            ForecastPointSchema(
                date=p.date,
                predicted_occupancy_rate=p.predicted_occupancy_rate,
                method=p.method,
            )
            for p in result.forecast
        ],
        metadata=ForecastMetadataSchema(
            historical_days=result.metadata.historical_days,
            moving_average=result.metadata.moving_average,
            trend=result.metadata.trend,
            trend_slope=result.metadata.trend_slope,
            note=result.metadata.note,
        ),
    )


@router.get("/analytics/fees", response_model=List[FeeBucketSchema])
def get_fees_time_series(
    start_date: Optional[date] = Query(None, description="First day, defaults to the start of the analytics window"),
    end_date: Optional[date] = Query(None, description="Last day, defaults to today (UTC)"),
    invoice_repo: InvoiceRepository = Depends(get_invoice_repository),
):
    """
    Daily totals invoiced and collected.

    Invoices are selected by issuance day; their payments are bucketed on
    the day they were paid.
    """
    end = end_date or utcnow().date()
    start = start_date or trailing_window_start(end, settings.analytics_window_days)
    if start > end:
        raise HTTPException(status_code=400, detail="start_date must not be after end_date")

    invoices = invoice_repo.get_invoices_issued_between(start, end)
    buckets = build_fee_time_series(invoices, start, end)

    return [
        FeeBucketSchema(
            date=b.date,
            total_invoiced_cents=b.total_invoiced_cents,
            total_paid_cents=b.total_paid_cents,
        )
        for b in buckets
    ]
