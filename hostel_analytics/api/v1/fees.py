"""/v1/fees - invoices and payment recording"""

import time
import uuid
import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from hostel_analytics.api.v1.schemas import (
    InvoiceCreateRequest,
    InvoiceSchema,
    PaymentRequest,
    PaymentResponse,
    PaymentSchema,
)
from hostel_analytics.api.dependencies import get_request_id, get_invoice_repository
from hostel_analytics.infrastructure.database.session import get_db
from hostel_analytics.infrastructure.database.repositories import InvoiceRepository, to_domain_invoice
from hostel_analytics.infrastructure.database.models import FeeInvoice, FeePayment
from hostel_analytics.domain.models import InvoiceStatus
from hostel_analytics.domain.fees import summarize_invoice
from hostel_analytics.domain.exceptions import (
    BalanceExceededError,
    InvoiceAlreadyPaidError,
    InvoiceNotFoundError,
    InvalidPaymentAmountError,
    PaymentConflictError,
)
from hostel_analytics.infrastructure.observability.metrics import record_payment, payment_rejection_counter
from hostel_analytics.infrastructure.observability.logging import log_payment

router = APIRouter()


def _payment_schema(payment: FeePayment) -> PaymentSchema:
    return PaymentSchema(
        payment_id=str(payment.id),
        invoice_id=str(payment.invoice_id),
        resident_id=payment.resident_id,
        amount_cents=payment.amount_cents,
        method=payment.method,
        reference=payment.reference,
        paid_at=payment.paid_at.isoformat(),
    )


def _invoice_schema(invoice: FeeInvoice) -> InvoiceSchema:
    balance = summarize_invoice(to_domain_invoice(invoice))
    return InvoiceSchema(
        invoice_id=str(invoice.id),
        resident_id=invoice.resident_id,
        amount_cents=invoice.amount_cents,
        due_date=invoice.due_date,
        description=invoice.description,
        status=InvoiceStatus(invoice.status),
        issued_at=invoice.issued_at.isoformat(),
        total_paid_cents=balance.total_paid_cents,
        remaining_cents=balance.remaining_cents,
        payments=[_payment_schema(p) for p in invoice.payments],
    )


def _parse_invoice_id(invoice_id: str) -> uuid.UUID:
    try:
        return uuid.UUID(invoice_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid invoice ID format")


@router.get("/fees/invoices", response_model=List[InvoiceSchema])
def list_invoices(
    status: Optional[InvoiceStatus] = Query(None, description="Filter by invoice status"),
    resident_id: Optional[str] = Query(None, description="Filter by resident"),
    invoice_repo: InvoiceRepository = Depends(get_invoice_repository),
):
    """Invoices with payments, earliest due date first"""
    invoices = invoice_repo.list_invoices(status=status, resident_id=resident_id)
    return [_invoice_schema(inv) for inv in invoices]


@router.post("/fees/invoices", response_model=InvoiceSchema, status_code=201)
def create_invoice(
    request_body: InvoiceCreateRequest,
    db: Session = Depends(get_db),
    invoice_repo: InvoiceRepository = Depends(get_invoice_repository),
):
    """Issue a new PENDING invoice to a resident"""
    db_invoice = invoice_repo.create_invoice(
        resident_id=request_body.resident_id,
        amount_cents=request_body.amount_cents,
        due_date=request_body.due_date,
        description=request_body.description,
    )
    db.commit()
    db.refresh(db_invoice)

    return _invoice_schema(db_invoice)


@router.get("/fees/invoices/{invoice_id}", response_model=InvoiceSchema)
def get_invoice(invoice_id: str, invoice_repo: InvoiceRepository = Depends(get_invoice_repository)):
    """Invoice with its payments and remaining balance"""
    invoice = invoice_repo.get_invoice(_parse_invoice_id(invoice_id))

    if not invoice:
        raise HTTPException(status_code=404, detail="Invoice not found")

    return _invoice_schema(invoice)


@router.post("/fees/payments", response_model=PaymentResponse)
def create_payment(
    request_body: PaymentRequest,
    request: Request,
    db: Session = Depends(get_db),
    invoice_repo: InvoiceRepository = Depends(get_invoice_repository),
):
    """
    Record a payment against an invoice.

    Flow:
    1. Lock the invoice and read what has been paid so far
    2. Reject the payment if it exceeds the remaining balance
    3. Append the payment and move the invoice to PARTIAL or PAID
    4. Commit both writes together
    """
    start_time = time.time()
    request_id = get_request_id(request)
    invoice_id = _parse_invoice_id(request_body.invoice_id)

    try:
        db_payment, db_invoice = invoice_repo.record_payment(
            invoice_id=invoice_id,
            amount_cents=request_body.amount_cents,
            method=request_body.method.value,
            reference=request_body.reference,
        )
        db.commit()

    except InvoiceNotFoundError as e:
        db.rollback()
        payment_rejection_counter.labels(reason="not_found").inc()
        raise HTTPException(status_code=404, detail=str(e))

    except InvoiceAlreadyPaidError as e:
        db.rollback()
        payment_rejection_counter.labels(reason="already_paid").inc()
        logging.warning(f"Payment on paid invoice: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=400, detail=str(e))

    except BalanceExceededError as e:
        db.rollback()
        payment_rejection_counter.labels(reason="balance_exceeded").inc()
        logging.warning(f"Balance exceeded: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=400, detail=str(e))

    except InvalidPaymentAmountError as e:
        db.rollback()
        payment_rejection_counter.labels(reason="invalid_amount").inc()
        raise HTTPException(status_code=422, detail=str(e))

    except PaymentConflictError as e:
        db.rollback()
        payment_rejection_counter.labels(reason="conflict").inc()
        logging.warning(f"Payment conflict: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=409, detail=str(e))

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    duration_ms = (time.time() - start_time) * 1000
    record_payment(db_invoice.status, request_body.amount_cents)
    log_payment(request_id, str(db_invoice.id), request_body.amount_cents, db_invoice.status, duration_ms)

    return PaymentResponse(
        payment=_payment_schema(db_payment),
        invoice=_invoice_schema(db_invoice),
    )
