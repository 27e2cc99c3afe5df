"""Occupancy forecasting - linear trend blended with a trailing moving average"""

import math
from datetime import timedelta
from typing import List, Sequence, Tuple
from hostel_analytics.domain.models import (
    OccupancySample,
    ForecastPoint,
    ForecastMetadata,
    OccupancyForecast,
)
from hostel_analytics.domain.exceptions import InsufficientHistoricalDataError, InvalidSampleError

MIN_HISTORY_DAYS = 7
FORECAST_HORIZON_DAYS = 7
MOVING_AVERAGE_WINDOW = 7

TREND_WEIGHT = 0.6
MOVING_AVERAGE_WEIGHT = 0.4

FORECAST_METHOD = "Linear Regression + Moving Average"
FORECAST_NOTE = "Statistical forecast for educational purposes. Not financial advice."


def round_half_up(value: float, digits: int) -> float:
    """Round halves towards +infinity, matching the dashboard's rounding"""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def occupancy_rate(sample: OccupancySample) -> float:
    """
    Percentage of beds occupied on the sample's day.

    Raises:
        InvalidSampleError: total_beds is not positive or occupied_beds is outside [0, total_beds]
    """
    if sample.total_beds <= 0 or not 0 <= sample.occupied_beds <= sample.total_beds:
        raise InvalidSampleError(sample.date, sample.total_beds, sample.occupied_beds)
    return 100 * sample.occupied_beds / sample.total_beds


def fit_linear_trend(values: Sequence[float]) -> Tuple[float, float]:
    """
    Ordinary least squares fit of value against its index.

    Returns: (slope, intercept). Slope is 0 when all x are identical.
    """
    n = len(values)
    x_mean = (n - 1) / 2
    y_mean = sum(values) / n

    numerator = 0.0
    denominator = 0.0
    for i, y in enumerate(values):
        numerator += (i - x_mean) * (y - y_mean)
        denominator += (i - x_mean) ** 2

    slope = numerator / denominator if denominator != 0 else 0.0
    intercept = y_mean - slope * x_mean
    return slope, intercept


def moving_average(values: Sequence[float], window: int = MOVING_AVERAGE_WINDOW) -> float:
    """Mean of the last `window` values"""
    tail = values[-window:]
    return sum(tail) / len(tail)


def classify_trend(slope: float) -> str:
    if slope > 0:
        return "increasing"
    elif slope < 0:
        return "decreasing"
    return "stable"


def forecast_occupancy(samples: Sequence[OccupancySample]) -> OccupancyForecast:
    """
    Main entry point: predict occupancy rate for the next 7 days.

    Samples must be ordered by ascending date with no gaps. Each forecast day
    blends the fitted trend line (60%) with the moving average of the last 7
    historical rates (40%). The moving average is computed once and applied
    to every forecast day.

    Raises:
        InsufficientHistoricalDataError: fewer than 7 samples
        InvalidSampleError: a sample with no beds or impossible occupancy
    """
    if len(samples) < MIN_HISTORY_DAYS:
        raise InsufficientHistoricalDataError(len(samples), MIN_HISTORY_DAYS)

    rates = [occupancy_rate(s) for s in samples]
    n = len(rates)

    slope, intercept = fit_linear_trend(rates)
    average = moving_average(rates)
    last_date = samples[-1].date

    forecast: List[ForecastPoint] = []
    for k in range(1, FORECAST_HORIZON_DAYS + 1):
        # Continue the fitted line past the last historical index (n - 1)
        trend_prediction = slope * (n + k - 1) + intercept
        blended = TREND_WEIGHT * trend_prediction + MOVING_AVERAGE_WEIGHT * average
        bounded = max(0.0, min(100.0, blended))

        forecast.append(
            ForecastPoint(
                date=last_date + timedelta(days=k),
                predicted_occupancy_rate=round_half_up(bounded, 1),
                method=FORECAST_METHOD,
            )
        )

    return OccupancyForecast(
        forecast=forecast,
        metadata=ForecastMetadata(
            historical_days=n,
            moving_average=round_half_up(average, 1),
            trend=classify_trend(slope),
            trend_slope=round_half_up(slope, 2),
            note=FORECAST_NOTE,
        ),
    )
