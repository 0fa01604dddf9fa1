"""Conversions between ORM rows and domain entities"""

from src.service.shared_kernel.domain.entity.event_entity import Event
from src.service.shared_kernel.domain.entity.ticket_entity import Ticket
from src.service.shared_kernel.domain.enum.event_status import EventStatus
from src.service.shared_kernel.domain.enum.ticket_status import PaymentStatus, TicketStatus
from src.service.shared_kernel.domain.value_object.pricing import Pricing
from src.service.shared_kernel.domain.value_object.verification import (
    Cancellation,
    StaffNote,
    Verification,
)
from src.service.shared_kernel.driven_adapter.model.event_model import EventModel, EventStaffModel
from src.service.shared_kernel.driven_adapter.model.ticket_model import (
    TicketModel,
    TicketStaffNoteModel,
)


def model_to_event(event_model: EventModel) -> Event:
    return Event(
        id=event_model.id,
        host_id=event_model.host_id,
        title=event_model.title,
        description=event_model.description,
        category=event_model.category,
        location=event_model.location,
        start_at=event_model.start_at,
        end_at=event_model.end_at,
        status=EventStatus(event_model.status),
        capacity=event_model.capacity,
        tickets_sold=event_model.tickets_sold,
        pricing=Pricing(
            is_free=event_model.is_free, price=event_model.price, currency=event_model.currency
        ),
        assigned_staff=(staff.staff_id for staff in event_model.staff),
        created_at=event_model.created_at,
        updated_at=event_model.updated_at,
    )


def apply_event_to_model(event: Event, event_model: EventModel) -> EventModel:
    """Copy catalog fields; tickets_sold is owned by adjust_tickets_sold"""
    event_model.host_id = event.host_id
    event_model.title = event.title
    event_model.description = event.description
    event_model.category = event.category
    event_model.location = event.location
    event_model.start_at = event.start_at
    event_model.end_at = event.end_at
    event_model.status = event.status.value
    event_model.capacity = event.capacity
    event_model.is_free = event.pricing.is_free
    event_model.price = event.pricing.price
    event_model.currency = event.pricing.currency
    if event.updated_at is not None:
        event_model.updated_at = event.updated_at

    current = {staff.staff_id for staff in event_model.staff}
    if current != set(event.assigned_staff):
        event_model.staff = [
            EventStaffModel(staff_id=staff_id) for staff_id in sorted(event.assigned_staff)
        ]
    return event_model


def model_to_ticket(ticket_model: TicketModel) -> Ticket:
    cancellation = None
    if ticket_model.cancelled_at is not None:
        cancellation = Cancellation(
            cancelled_at=ticket_model.cancelled_at,
            reason=ticket_model.cancellation_reason or '',
            refund_amount=ticket_model.refund_amount or 0,
        )
    return Ticket(
        id=ticket_model.id,
        event_id=ticket_model.event_id,
        attendee_id=ticket_model.attendee_id,
        ticket_number=ticket_model.ticket_number,
        verification_token=ticket_model.verification_token,
        price_paid=ticket_model.price_paid,
        payment_ref=ticket_model.payment_ref,
        payment_status=PaymentStatus(ticket_model.payment_status),
        status=TicketStatus(ticket_model.status),
        verification=Verification(
            is_scanned=ticket_model.is_scanned,
            scanned_at=ticket_model.scanned_at,
            scanned_by=ticket_model.scanned_by,
            entry_time=ticket_model.entry_time,
            exit_time=ticket_model.exit_time,
            scan_count=ticket_model.scan_count,
        ),
        cancellation=cancellation,
        staff_notes=[
            StaffNote(staff_id=note.staff_id, note=note.note, created_at=note.created_at)
            for note in ticket_model.notes
        ],
        booked_at=ticket_model.booked_at,
        updated_at=ticket_model.updated_at,
    )


def apply_ticket_state_to_model(ticket: Ticket, ticket_model: TicketModel) -> TicketModel:
    """Copy the mutable part of a ticket (identifiers and price never change)"""
    ticket_model.status = ticket.status.value
    ticket_model.payment_status = ticket.payment_status.value

    verification = ticket.verification
    ticket_model.is_scanned = verification.is_scanned
    ticket_model.scanned_at = verification.scanned_at
    ticket_model.scanned_by = verification.scanned_by
    ticket_model.entry_time = verification.entry_time
    ticket_model.exit_time = verification.exit_time
    ticket_model.scan_count = verification.scan_count

    if ticket.cancellation is not None:
        ticket_model.cancelled_at = ticket.cancellation.cancelled_at
        ticket_model.cancellation_reason = ticket.cancellation.reason
        ticket_model.refund_amount = ticket.cancellation.refund_amount
    if ticket.updated_at is not None:
        ticket_model.updated_at = ticket.updated_at
    return ticket_model


def ticket_to_model(ticket: Ticket) -> TicketModel:
    ticket_model = TicketModel(
        id=ticket.id,
        event_id=ticket.event_id,
        attendee_id=ticket.attendee_id,
        ticket_number=ticket.ticket_number,
        verification_token=ticket.verification_token,
        price_paid=ticket.price_paid,
        payment_ref=ticket.payment_ref,
        booked_at=ticket.booked_at,
        notes=[
            TicketStaffNoteModel(staff_id=note.staff_id, note=note.note, created_at=note.created_at)
            for note in ticket.staff_notes
        ],
    )
    return apply_ticket_state_to_model(ticket, ticket_model)
