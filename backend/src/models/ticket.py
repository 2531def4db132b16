"""
Ticket model (read-only view of visit reservations).

Only the columns the calendar needs are mapped: the reservation day, the
booked slot and the payment status. Ticket sales live in another service.
"""

import enum
from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, Date, Time, Index

from backend.src.models import Base


class TicketStatus(enum.Enum):
    """Ticket lifecycle status."""
    PENDING = "pending"
    PAID = "paid"
    CANCELLED = "cancelled"
    USED = "used"
    EXPIRED = "expired"


class Ticket(Base):
    """
    Visit reservation.

    Attributes:
        id: Primary key
        reservation_date: Day of the visit
        slot_start_time / slot_end_time: Booked time slot
        status: pending, paid, cancelled, used or expired
        created_at: Reservation timestamp
    """

    __tablename__ = "tickets"

    id = Column(Integer, primary_key=True, autoincrement=True)

    reservation_date = Column(Date, nullable=False)
    slot_start_time = Column(Time, nullable=True)
    slot_end_time = Column(Time, nullable=True)
    status = Column(String(20), default="pending", nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index("idx_tickets_date_status", "reservation_date", "status"),
    )

    def __repr__(self) -> str:
        return (
            f"<Ticket(id={self.id}, date={self.reservation_date}, "
            f"status={self.status})>"
        )
