from datetime import datetime
from typing import TYPE_CHECKING, List, Optional
from uuid import UUID

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    text,
)
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from src.platform.database.orm_db_setting import Base


if TYPE_CHECKING:
    from src.service.shared_kernel.driven_adapter.model.event_model import EventModel


# Constraint names are matched when translating IntegrityError
UQ_TICKET_ACTIVE_ATTENDEE = 'uq_ticket_active_attendee'
UQ_TICKET_NUMBER = 'uq_ticket_number'
UQ_TICKET_VERIFICATION_TOKEN = 'uq_ticket_verification_token'
UQ_TICKET_PAYMENT_REF = 'uq_ticket_payment_ref'


class TicketModel(Base):
    __tablename__ = 'ticket'
    __mapper_args__ = {'eager_defaults': True}
    __table_args__ = (
        # One non-cancelled ticket per attendee per event
        Index(
            UQ_TICKET_ACTIVE_ATTENDEE,
            'event_id',
            'attendee_id',
            unique=True,
            postgresql_where=text("status <> 'cancelled'"),
            sqlite_where=text("status <> 'cancelled'"),
        ),
        Index(UQ_TICKET_NUMBER, 'ticket_number', unique=True),
        Index(UQ_TICKET_VERIFICATION_TOKEN, 'verification_token', unique=True),
        Index(
            UQ_TICKET_PAYMENT_REF,
            'payment_ref',
            unique=True,
            postgresql_where=text('payment_ref IS NOT NULL'),
            sqlite_where=text('payment_ref IS NOT NULL'),
        ),
        Index('ix_ticket_event_status', 'event_id', 'status'),
        CheckConstraint('price_paid >= 0', name='ck_ticket_price_paid_non_negative'),
        CheckConstraint('scan_count >= 0', name='ck_ticket_scan_count_non_negative'),
    )

    id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True)  # UUID7
    event_id: Mapped[int] = mapped_column(Integer, ForeignKey('event.id'), nullable=False)
    attendee_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    ticket_number: Mapped[str] = mapped_column(String(32), nullable=False)
    verification_token: Mapped[str] = mapped_column(String(64), nullable=False)
    price_paid: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    payment_ref: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    payment_status: Mapped[str] = mapped_column(String(20), nullable=False, default='completed')
    status: Mapped[str] = mapped_column(String(20), nullable=False, default='active')

    # Verification (door scans)
    is_scanned: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    scanned_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    scanned_by: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    entry_time: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    exit_time: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    scan_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Cancellation
    cancelled_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    cancellation_reason: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    refund_amount: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    booked_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    event: Mapped['EventModel'] = relationship(
        'EventModel', back_populates='tickets', lazy='noload'
    )
    notes: Mapped[List['TicketStaffNoteModel']] = relationship(
        'TicketStaffNoteModel',
        lazy='selectin',
        order_by='TicketStaffNoteModel.id',
        cascade='all, delete-orphan',
    )


class TicketStaffNoteModel(Base):
    __tablename__ = 'ticket_staff_note'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    ticket_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True), ForeignKey('ticket.id', ondelete='CASCADE'), index=True
    )
    staff_id: Mapped[int] = mapped_column(Integer, nullable=False)
    note: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
