from datetime import datetime
from typing import TYPE_CHECKING, List

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from src.platform.database.orm_db_setting import Base


if TYPE_CHECKING:
    from src.service.shared_kernel.driven_adapter.model.ticket_model import TicketModel


class EventModel(Base):
    __tablename__ = 'event'
    __mapper_args__ = {'eager_defaults': True}
    __table_args__ = (
        CheckConstraint('capacity >= 1', name='ck_event_capacity_positive'),
        CheckConstraint(
            'tickets_sold >= 0 AND tickets_sold <= capacity', name='ck_event_tickets_sold_bounds'
        ),
        CheckConstraint('start_at < end_at', name='ck_event_window_order'),
        CheckConstraint('price >= 0', name='ck_event_price_non_negative'),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    host_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default='')
    category: Mapped[str] = mapped_column(String(50), nullable=False, default='other')
    location: Mapped[str] = mapped_column(String(255), nullable=False, default='')
    start_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default='draft', index=True)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    tickets_sold: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_free: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    price: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default='USD')
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    staff: Mapped[List['EventStaffModel']] = relationship(
        'EventStaffModel', lazy='selectin', cascade='all, delete-orphan'
    )
    tickets: Mapped[List['TicketModel']] = relationship(
        'TicketModel', back_populates='event', lazy='noload'
    )


class EventStaffModel(Base):
    __tablename__ = 'event_staff'

    event_id: Mapped[int] = mapped_column(
        Integer, ForeignKey('event.id', ondelete='CASCADE'), primary_key=True
    )
    staff_id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
