"""Data access layer for occupancy history and the fee ledger"""

import uuid
from datetime import date, datetime
from typing import List, Optional, Tuple
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload
from sqlalchemy.orm.exc import StaleDataError

from hostel_analytics.infrastructure.database.models import OccupancyHistory, FeeInvoice, FeePayment
from hostel_analytics.domain.models import OccupancySample, Invoice, Payment, InvoiceStatus
from hostel_analytics.domain.fees import apply_payment
from hostel_analytics.domain.exceptions import (
    DuplicateSampleError,
    InvoiceNotFoundError,
    PaymentConflictError,
)
from hostel_analytics.utils.date_utils import utc_day_bounds, utcnow


def to_domain_invoice(db_invoice: FeeInvoice) -> Invoice:
    """Map an ORM invoice and its loaded payments to the domain model"""
    return Invoice(
        amount_cents=db_invoice.amount_cents,
        issued_at=db_invoice.issued_at,
        payments=[
            Payment(
                amount_cents=p.amount_cents,
                paid_at=p.paid_at,
                method=p.method,
                reference=p.reference,
            )
            for p in db_invoice.payments
        ],
    )


class OccupancyRepository:
    """Repository for daily occupancy samples"""

    def __init__(self, db: Session):
        self.db = db

    def record_sample(self, sample: OccupancySample) -> OccupancyHistory:
        """
        Persist one day's sample. Samples are immutable, so a second sample
        for the same day is rejected.

        Raises:
            DuplicateSampleError: a sample for that day already exists
        """
        db_sample = OccupancyHistory(
            date=sample.date,
            total_beds=sample.total_beds,
            occupied_beds=sample.occupied_beds,
        )
        self.db.add(db_sample)
        try:
            self.db.flush()
        except IntegrityError as e:
            raise DuplicateSampleError(f"Occupancy already recorded for {sample.date.isoformat()}") from e
        return db_sample

    def get_history_since(self, start_date: date) -> List[OccupancySample]:
        """Samples on or after start_date, ascending by date"""
        rows = (
            self.db.query(OccupancyHistory)
            .filter(OccupancyHistory.date >= start_date)
            .order_by(OccupancyHistory.date.asc())
            .all()
        )
        return [
            OccupancySample(date=r.date, total_beds=r.total_beds, occupied_beds=r.occupied_beds)
            for r in rows
        ]


class InvoiceRepository:
    """Repository for fee invoices and the payments recorded against them"""

    def __init__(self, db: Session):
        self.db = db

    def create_invoice(
        self,
        resident_id: str,
        amount_cents: int,
        due_date: date,
        description: Optional[str] = None,
        issued_at: Optional[datetime] = None,
    ) -> FeeInvoice:
        """Persist a new PENDING invoice"""
        db_invoice = FeeInvoice(
            resident_id=resident_id,
            amount_cents=amount_cents,
            due_date=due_date,
            description=description,
            status=InvoiceStatus.PENDING.value,
            issued_at=issued_at or utcnow(),
        )
        self.db.add(db_invoice)
        self.db.flush()
        return db_invoice

    def get_invoice(self, invoice_id: uuid.UUID) -> Optional[FeeInvoice]:
        """Fetch invoice with payments"""
        return (
            self.db.query(FeeInvoice)
            .options(selectinload(FeeInvoice.payments))
            .filter(FeeInvoice.id == invoice_id)
            .first()
        )

    def list_invoices(
        self,
        status: Optional[InvoiceStatus] = None,
        resident_id: Optional[str] = None,
    ) -> List[FeeInvoice]:
        """Invoices with payments, earliest due first"""
        query = self.db.query(FeeInvoice).options(selectinload(FeeInvoice.payments))
        if status is not None:
            query = query.filter(FeeInvoice.status == status.value)
        if resident_id is not None:
            query = query.filter(FeeInvoice.resident_id == resident_id)
        return query.order_by(FeeInvoice.due_date.asc()).all()

    def get_invoices_issued_between(self, start_date: date, end_date: date) -> List[Invoice]:
        """Domain invoices issued on any day in [start_date, end_date], with all their payments"""
        lower, upper = utc_day_bounds(start_date, end_date)
        rows = (
            self.db.query(FeeInvoice)
            .options(selectinload(FeeInvoice.payments))
            .filter(FeeInvoice.issued_at >= lower, FeeInvoice.issued_at < upper)
            .all()
        )
        return [to_domain_invoice(r) for r in rows]

    def total_paid(self, invoice_id: uuid.UUID) -> int:
        """Sum of payments stored for an invoice"""
        total = (
            self.db.query(func.coalesce(func.sum(FeePayment.amount_cents), 0))
            .filter(FeePayment.invoice_id == invoice_id)
            .scalar()
        )
        return int(total)

    def record_payment(
        self,
        invoice_id: uuid.UUID,
        amount_cents: int,
        method: str,
        reference: Optional[str] = None,
        paid_at: Optional[datetime] = None,
    ) -> Tuple[FeePayment, FeeInvoice]:
        """
        Append a payment and move the invoice to its new status as one unit.

        The invoice row is locked (SELECT ... FOR UPDATE where the database
        supports it) before the balance is read, and the status UPDATE is
        guarded by the invoice version. The caller owns the transaction:
        commit on success, roll back on any exception.

        Raises:
            InvoiceNotFoundError: no invoice with that id
            InvalidPaymentAmountError: amount is not positive
            BalanceExceededError / InvoiceAlreadyPaidError: amount is over the remaining balance
            PaymentConflictError: a concurrent payment changed the invoice first
        """
        db_invoice = (
            self.db.query(FeeInvoice)
            .filter(FeeInvoice.id == invoice_id)
            .with_for_update()
            .first()
        )
        if db_invoice is None:
            raise InvoiceNotFoundError(f"Invoice {invoice_id} not found")

        balance = apply_payment(db_invoice.amount_cents, self.total_paid(invoice_id), amount_cents)

        db_payment = FeePayment(
            invoice_id=db_invoice.id,
            resident_id=db_invoice.resident_id,
            amount_cents=amount_cents,
            method=method,
            reference=reference,
            paid_at=paid_at or utcnow(),
        )
        db_invoice.payments.append(db_payment)

        # Always touch the row so the version guard applies even when the status is unchanged
        db_invoice.status = balance.status.value
        db_invoice.updated_at = utcnow()

        try:
            self.db.flush()
        except StaleDataError as e:
            raise PaymentConflictError(
                f"Invoice {invoice_id} was modified by a concurrent payment"
            ) from e

        return db_payment, db_invoice
