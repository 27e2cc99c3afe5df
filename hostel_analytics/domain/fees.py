"""Fee ledger - invoice status derivation and fee reporting"""

from datetime import date
from typing import Dict, Iterable, List
from hostel_analytics.domain.models import Invoice, InvoiceStatus, LedgerBalance, FeeBucket
from hostel_analytics.domain.exceptions import (
    BalanceExceededError,
    InvoiceAlreadyPaidError,
    InvalidPaymentAmountError,
)
from hostel_analytics.utils.date_utils import utc_day


def derive_status(amount_cents: int, total_paid_cents: int) -> InvoiceStatus:
    """Status is a pure function of what has been paid against what is owed"""
    if total_paid_cents >= amount_cents:
        return InvoiceStatus.PAID
    elif total_paid_cents > 0:
        return InvoiceStatus.PARTIAL
    return InvoiceStatus.PENDING


def remaining_balance(amount_cents: int, total_paid_cents: int) -> int:
    return max(amount_cents - total_paid_cents, 0)


def apply_payment(amount_cents: int, total_paid_cents: int, payment_cents: int) -> LedgerBalance:
    """
    Validate one payment against the current balance and return the new balance.

    Raises:
        InvalidPaymentAmountError: payment is not positive
        InvoiceAlreadyPaidError: invoice is already PAID
        BalanceExceededError: payment is larger than the remaining balance
    """
    if payment_cents <= 0:
        raise InvalidPaymentAmountError(f"Payment amount must be positive, got {payment_cents}")

    remaining = remaining_balance(amount_cents, total_paid_cents)
    if derive_status(amount_cents, total_paid_cents) is InvoiceStatus.PAID:
        raise InvoiceAlreadyPaidError()
    if payment_cents > remaining:
        raise BalanceExceededError(remaining)

    new_total = total_paid_cents + payment_cents
    return LedgerBalance(
        total_paid_cents=new_total,
        remaining_cents=remaining_balance(amount_cents, new_total),
        status=derive_status(amount_cents, new_total),
    )


def replay_payments(amount_cents: int, payments_cents: Iterable[int]) -> LedgerBalance:
    """
    Fold an ordered list of payments into a balance using the same rules as
    recording them one by one. Raises on the first payment that would be rejected.
    """
    balance = LedgerBalance(
        total_paid_cents=0,
        remaining_cents=amount_cents,
        status=InvoiceStatus.PENDING,
    )
    for payment_cents in payments_cents:
        balance = apply_payment(amount_cents, balance.total_paid_cents, payment_cents)
    return balance


def summarize_invoice(invoice: Invoice) -> LedgerBalance:
    """Balance of a stored invoice, without re-validating its payments"""
    total_paid = sum(p.amount_cents for p in invoice.payments)
    return LedgerBalance(
        total_paid_cents=total_paid,
        remaining_cents=remaining_balance(invoice.amount_cents, total_paid),
        status=derive_status(invoice.amount_cents, total_paid),
    )


def build_fee_time_series(invoices: Iterable[Invoice], start_date: date, end_date: date) -> List[FeeBucket]:
    """
    Bucket invoiced and collected amounts by UTC calendar day.

    - Invoices issued within [start_date, end_date] count towards total_invoiced
      on their issuance day.
    - Payments of those invoices count towards total_paid on their own paid_at
      day, as long as that day is within the range. The payment day is not tied
      to the invoice's issuance day.

    Returns buckets ascending by date. Days with activity on only one side
    report 0 on the other.
    """
    buckets: Dict[date, FeeBucket] = {}

    def bucket_for(day: date) -> FeeBucket:
        if day not in buckets:
            buckets[day] = FeeBucket(date=day)
        return buckets[day]

    for invoice in invoices:
        issued_on = utc_day(invoice.issued_at)
        if not start_date <= issued_on <= end_date:
            continue

        bucket_for(issued_on).total_invoiced_cents += invoice.amount_cents

        for payment in invoice.payments:
            paid_on = utc_day(payment.paid_at)
            if start_date <= paid_on <= end_date:
                bucket_for(paid_on).total_paid_cents += payment.amount_cents

    return [buckets[day] for day in sorted(buckets)]
