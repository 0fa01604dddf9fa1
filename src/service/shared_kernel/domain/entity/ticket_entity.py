from datetime import datetime, timedelta
import secrets
from typing import List, Optional
from uuid import UUID

import attrs
from uuid_utils.compat import uuid7

from src.platform.exception.exceptions import (
    DomainError,
    NotCancellableError,
    NotCheckedInError,
    TicketNotActiveError,
)
from src.service.shared_kernel.domain.enum.ticket_status import (
    PaymentStatus,
    ScanAction,
    TicketStatus,
)
from src.service.shared_kernel.domain.value_object.verification import (
    Cancellation,
    StaffNote,
    Verification,
)


DEFAULT_CANCELLATION_REASON = 'Cancelled by attendee'


def generate_ticket_number(*, now: datetime) -> str:
    return f'TCK-{now:%Y%m%d}-{secrets.token_hex(4).upper()}'


def generate_verification_token() -> str:
    return secrets.token_hex(32)


@attrs.define
class Ticket:
    id: UUID
    event_id: int
    attendee_id: int
    ticket_number: str
    verification_token: str = attrs.field(repr=False)
    price_paid: int = 0
    payment_ref: Optional[str] = None
    payment_status: PaymentStatus = PaymentStatus.COMPLETED
    status: TicketStatus = TicketStatus.ACTIVE
    verification: Verification = attrs.field(factory=Verification)
    cancellation: Optional[Cancellation] = None
    staff_notes: List[StaffNote] = attrs.field(factory=list)
    booked_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def issue(
        cls,
        *,
        event_id: int,
        attendee_id: int,
        price_paid: int,
        payment_ref: Optional[str],
        now: datetime,
    ) -> 'Ticket':
        if price_paid > 0 and not payment_ref:
            raise DomainError('Paid tickets need a payment reference')
        return cls(
            id=uuid7(),
            event_id=event_id,
            attendee_id=attendee_id,
            ticket_number=generate_ticket_number(now=now),
            verification_token=generate_verification_token(),
            price_paid=price_paid,
            payment_ref=payment_ref,
            payment_status=PaymentStatus.COMPLETED,
            status=TicketStatus.ACTIVE,
            booked_at=now,
            updated_at=now,
        )

    def with_fresh_identifiers(self, *, now: datetime) -> 'Ticket':
        return attrs.evolve(
            self,
            id=uuid7(),
            ticket_number=generate_ticket_number(now=now),
            verification_token=generate_verification_token(),
        )

    @property
    def is_active(self) -> bool:
        return self.status == TicketStatus.ACTIVE

    @property
    def awaits_refund(self) -> bool:
        return (
            self.status == TicketStatus.CANCELLED
            and self.price_paid > 0
            and self.payment_ref is not None
            and self.payment_status != PaymentStatus.REFUNDED
        )

    # ---------- cancellation ----------

    def can_cancel(self, *, event_start_at: datetime, now: datetime, window: timedelta) -> bool:
        return self.is_active and event_start_at - now >= window

    def cancel(
        self, *, event_start_at: datetime, now: datetime, window: timedelta, reason: str = ''
    ) -> 'Ticket':
        if not self.is_active:
            raise NotCancellableError(f'Ticket is {self.status.value} and cannot be cancelled')
        if event_start_at - now < window:
            hours = int(window.total_seconds() // 3600)
            raise NotCancellableError(
                f'Tickets can only be cancelled at least {hours} hours before the event'
            )
        return attrs.evolve(
            self,
            status=TicketStatus.CANCELLED,
            cancellation=Cancellation(
                cancelled_at=now,
                reason=reason.strip() or DEFAULT_CANCELLATION_REASON,
                refund_amount=self.price_paid,
            ),
            updated_at=now,
        )

    def mark_refunded(self, *, now: datetime) -> 'Ticket':
        return attrs.evolve(self, payment_status=PaymentStatus.REFUNDED, updated_at=now)

    # ---------- check-in ----------

    def record_scan(
        self, *, action: ScanAction, staff_id: int, now: datetime
    ) -> tuple['Ticket', bool]:
        """Apply a door scan. Returns the updated ticket and whether it was the first entry."""
        if not self.is_active:
            raise TicketNotActiveError(
                f'Ticket is {self.status.value}. Cannot scan inactive tickets'
            )

        if action == ScanAction.ENTRY:
            if self.verification.is_scanned:
                verification = self.verification.repeat_entry()
                is_first_scan = False
            else:
                verification = self.verification.first_entry(staff_id=staff_id, now=now)
                is_first_scan = True
        else:
            if not self.verification.is_scanned:
                raise NotCheckedInError()
            verification = self.verification.exit(now=now)
            is_first_scan = False

        return attrs.evolve(self, verification=verification, updated_at=now), is_first_scan

    def add_note(self, *, staff_id: int, note: str, now: datetime) -> tuple['Ticket', StaffNote]:
        if not note.strip():
            raise DomainError('Note content is required')
        staff_note = StaffNote(staff_id=staff_id, note=note.strip(), created_at=now)
        return (
            attrs.evolve(self, staff_notes=[*self.staff_notes, staff_note], updated_at=now),
            staff_note,
        )

    def close_admission(self, *, now: datetime) -> 'Ticket':
        """Terminal marking after the event: scanned tickets were used, the rest expired."""
        if not self.is_active:
            return self
        status = TicketStatus.USED if self.verification.is_scanned else TicketStatus.EXPIRED
        return attrs.evolve(self, status=status, updated_at=now)
