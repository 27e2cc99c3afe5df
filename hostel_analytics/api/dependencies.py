"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from hostel_analytics.infrastructure.database.session import get_db
from hostel_analytics.infrastructure.database.repositories import OccupancyRepository, InvoiceRepository


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_occupancy_repository(db: Session = Depends(get_db)) -> OccupancyRepository:
    """Provide occupancy repository bound to the request session"""
    return OccupancyRepository(db)


def get_invoice_repository(db: Session = Depends(get_db)) -> InvoiceRepository:
    """Provide invoice repository bound to the request session"""
    return InvoiceRepository(db)
