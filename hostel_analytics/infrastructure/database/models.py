"""SQLAlchemy ORM models for occupancy history and the fee ledger"""

import uuid
from sqlalchemy import Column, String, BigInteger, DateTime, Date, Integer, ForeignKey, Text, Uuid
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

from hostel_analytics.domain.models import InvoiceStatus
from hostel_analytics.utils.date_utils import utcnow

Base = declarative_base()


class OccupancyHistory(Base):
    """Daily bed utilization snapshot, one row per day"""

    __tablename__ = "occupancy_history"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    date = Column(Date, nullable=False, unique=True, index=True)
    total_beds = Column(Integer, nullable=False)
    occupied_beds = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class FeeInvoice(Base):
    """Fee obligation of a resident. Status only changes when a payment is recorded."""

    __tablename__ = "fee_invoice"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    resident_id = Column(Text, nullable=False, index=True)
    amount_cents = Column(BigInteger, nullable=False)
    due_date = Column(Date, nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(16), nullable=False, default=InvoiceStatus.PENDING.value, index=True)
    issued_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    # Optimistic concurrency: every UPDATE is guarded by the version it read
    version_id = Column(Integer, nullable=False)

    payments = relationship(
        "FeePayment",
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="FeePayment.paid_at",
    )

    __mapper_args__ = {"version_id_col": version_id}


class FeePayment(Base):
    """Append-only payment against a single invoice"""

    __tablename__ = "fee_payment"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    invoice_id = Column(Uuid, ForeignKey("fee_invoice.id", ondelete="CASCADE"), nullable=False, index=True)
    resident_id = Column(Text, nullable=False)
    amount_cents = Column(BigInteger, nullable=False)
    method = Column(String(32), nullable=False)
    reference = Column(Text, nullable=True)
    paid_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)

    invoice = relationship("FeeInvoice", back_populates="payments")
