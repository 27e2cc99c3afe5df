"""Prometheus metrics for monitoring forecasts, fee collection and HTTP latency"""

from prometheus_client import Counter, Histogram

# Forecast metrics
forecast_counter = Counter(
    "hostel_forecast_total",
    "Occupancy forecasts generated",
    ["trend"],  # increasing | decreasing | stable
)

forecast_failure_counter = Counter(
    "hostel_forecast_failures_total",
    "Forecasts rejected because of missing or invalid history",
    ["reason"],  # insufficient_data | invalid_sample
)

# Fee ledger metrics
payment_counter = Counter(
    "hostel_payment_total",
    "Payments recorded by resulting invoice status",
    ["status"],  # PARTIAL | PAID
)

payment_rejection_counter = Counter(
    "hostel_payment_rejections_total",
    "Payments rejected by the ledger",
    ["reason"],  # balance_exceeded | already_paid | not_found | conflict | invalid_amount
)

payment_amount_histogram = Histogram(
    "hostel_payment_amount_cents",
    "Recorded payment amounts in cents",
    buckets=[500, 1_000, 5_000, 10_000, 50_000, 100_000, 500_000, 1_000_000],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_payment(status: str, amount_cents: int) -> None:
    """Record a successful payment"""
    payment_counter.labels(status=status).inc()
    payment_amount_histogram.observe(amount_cents)


def record_forecast(trend: str) -> None:
    forecast_counter.labels(trend=trend).inc()
