"""Populate a development database with occupancy history, invoices and payments

Usage:
    python -m hostel_analytics.infrastructure.database.seed
"""

import logging
import random
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Sequence
from sqlalchemy.orm import Session

from hostel_analytics.infrastructure.database.repositories import OccupancyRepository, InvoiceRepository
from hostel_analytics.domain.models import OccupancySample, PaymentMethod
from hostel_analytics.utils.date_utils import generate_date_range

TOTAL_BEDS = 32  # 8 rooms, 4 beds each
INVOICE_AMOUNTS_CENTS = [300_000, 500_000, 700_000, 1_000_000]
DEFAULT_RESIDENTS = ("R-001", "R-002", "R-003", "R-004", "R-005", "R-006")


@dataclass
class SeedSummary:
    samples: int
    invoices: int
    payments: int


def seed_analytics(
    db: Session,
    days: int = 30,
    today: Optional[date] = None,
    resident_ids: Sequence[str] = DEFAULT_RESIDENTS,
    rng: Optional[random.Random] = None,
) -> SeedSummary:
    """
    Generate `days` of history ending today.

    - One occupancy sample per day at 60-95% of TOTAL_BEDS
    - 1-3 invoices per day issued at 09:00 UTC, due 7 days later
    - 70% of invoices receive one payment 1-5 days after issue,
      in full 60% of the time and half otherwise

    Payments go through InvoiceRepository.record_payment so the stored
    statuses follow the ledger rules. Commits once at the end.
    """
    rng = rng or random.Random()
    today = today or date.today()
    occupancy_repo = OccupancyRepository(db)
    invoice_repo = InvoiceRepository(db)
    methods = [m.value for m in PaymentMethod]

    summary = SeedSummary(samples=0, invoices=0, payments=0)
    for day in generate_date_range(today - timedelta(days=days - 1), today):
        occupied = int(TOTAL_BEDS * (0.6 + rng.random() * 0.35))
        occupancy_repo.record_sample(OccupancySample(date=day, total_beds=TOTAL_BEDS, occupied_beds=occupied))
        summary.samples += 1

        issued_at = datetime.combine(day, time(9, 0), tzinfo=timezone.utc)
        for _ in range(min(rng.randint(1, 3), len(resident_ids))):
            amount = rng.choice(INVOICE_AMOUNTS_CENTS)
            db_invoice = invoice_repo.create_invoice(
                resident_id=rng.choice(resident_ids),
                amount_cents=amount,
                due_date=day + timedelta(days=7),
                description=f"Monthly Rent - {day.strftime('%B %Y')}",
                issued_at=issued_at,
            )
            summary.invoices += 1

            if rng.random() > 0.3:
                paid_on = day + timedelta(days=rng.randint(1, 5))
                invoice_repo.record_payment(
                    invoice_id=db_invoice.id,
                    amount_cents=amount if rng.random() > 0.4 else amount // 2,
                    method=rng.choice(methods),
                    reference=f"TXN{rng.randint(0, 999_999)}" if rng.random() > 0.5 else None,
                    paid_at=datetime.combine(paid_on, time(14, 0), tzinfo=timezone.utc),
                )
                summary.payments += 1

    db.commit()
    return summary


if __name__ == "__main__":
    from hostel_analytics.config import settings
    from hostel_analytics.infrastructure.database.models import Base
    from hostel_analytics.infrastructure.database.session import SessionLocal, engine
    from hostel_analytics.infrastructure.observability.logging import setup_logging

    setup_logging(settings.log_level)
    Base.metadata.create_all(bind=engine)

    session = SessionLocal()
    try:
        result = seed_analytics(session)
        logging.info(
            "Analytics seed completed",
            extra={"samples": result.samples, "invoices": result.invoices, "payments": result.payments},
        )
    except Exception:
        session.rollback()
        logging.exception("Analytics seed failed")
        raise
    finally:
        session.close()
