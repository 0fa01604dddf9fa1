from datetime import datetime
from typing import Iterable, Optional

import attrs

from src.platform.exception.exceptions import (
    DomainError,
    EventNotBookableError,
    EventWindowClosedError,
)
from src.service.shared_kernel.domain.enum.event_status import (
    EVENT_STATUS_TRANSITIONS,
    EventStatus,
)
from src.service.shared_kernel.domain.enum.ticket_status import ScanAction
from src.service.shared_kernel.domain.value_object.pricing import Pricing


def _to_staff_set(value: Iterable[int]) -> frozenset[int]:
    return frozenset(int(staff_id) for staff_id in value)


@attrs.define
class Event:
    host_id: int
    title: str
    start_at: datetime
    end_at: datetime
    capacity: int
    id: Optional[int] = None
    description: str = ''
    category: str = 'other'
    location: str = ''
    status: EventStatus = EventStatus.DRAFT
    pricing: Pricing = attrs.field(factory=Pricing)
    assigned_staff: frozenset[int] = attrs.field(factory=frozenset, converter=_to_staff_set)
    tickets_sold: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def create(
        cls,
        *,
        host_id: int,
        title: str,
        start_at: datetime,
        end_at: datetime,
        capacity: int,
        pricing: Pricing,
        now: datetime,
        description: str = '',
        category: str = 'other',
        location: str = '',
        assigned_staff: Iterable[int] = (),
        status: EventStatus = EventStatus.DRAFT,
    ) -> 'Event':
        if not title.strip():
            raise DomainError('title is required')
        cls.validate_schedule(start_at=start_at, end_at=end_at)
        if capacity < 1:
            raise DomainError('capacity must be at least 1')
        if status not in (EventStatus.DRAFT, EventStatus.PUBLISHED):
            raise DomainError('New events start as draft or published')

        return cls(
            host_id=host_id,
            title=title.strip(),
            start_at=start_at,
            end_at=end_at,
            capacity=capacity,
            description=description,
            category=category,
            location=location,
            status=status,
            pricing=pricing,
            assigned_staff=assigned_staff,
            created_at=now,
            updated_at=now,
        )

    @staticmethod
    def validate_schedule(*, start_at: datetime, end_at: datetime) -> None:
        if start_at.tzinfo is None or end_at.tzinfo is None:
            raise DomainError('Event schedule must be timezone-aware')
        if start_at >= end_at:
            raise DomainError('Event must end after it starts')

    # ---------- booking facts ----------

    @property
    def seats_left(self) -> int:
        return self.capacity - self.tickets_sold

    @property
    def has_capacity(self) -> bool:
        return self.tickets_sold < self.capacity

    def ensure_bookable(self, *, now: datetime) -> None:
        if self.status != EventStatus.PUBLISHED:
            raise EventNotBookableError(f'Event is {self.status.value} and not open for booking')
        if now >= self.start_at:
            raise EventNotBookableError('Event has already started')

    def is_staff_assigned(self, staff_id: int) -> bool:
        return staff_id in self.assigned_staff

    def has_ended(self, *, now: datetime) -> bool:
        return now > self.end_at

    def ensure_scan_window(self, *, action: ScanAction, now: datetime) -> None:
        """Entry needs start_at <= now <= end_at; exit only needs now <= end_at."""
        if now > self.end_at:
            raise EventWindowClosedError('Event has already ended')
        if action == ScanAction.ENTRY and now < self.start_at:
            raise EventWindowClosedError('Event has not started yet')

    # ---------- catalog edits ----------

    def change_status(self, *, status: EventStatus, now: datetime) -> 'Event':
        if status == self.status:
            return self
        if status not in EVENT_STATUS_TRANSITIONS[self.status]:
            raise DomainError(f'Cannot move event from {self.status.value} to {status.value}')
        return attrs.evolve(self, status=status, updated_at=now)

    def change_capacity(self, *, capacity: int, now: datetime) -> 'Event':
        if capacity < 1:
            raise DomainError('capacity must be at least 1')
        if capacity < self.tickets_sold:
            raise DomainError(
                f'capacity cannot drop below tickets already sold ({self.tickets_sold})'
            )
        return attrs.evolve(self, capacity=capacity, updated_at=now)

    def reschedule(self, *, start_at: datetime, end_at: datetime, now: datetime) -> 'Event':
        self.validate_schedule(start_at=start_at, end_at=end_at)
        return attrs.evolve(self, start_at=start_at, end_at=end_at, updated_at=now)

    def assign_staff(self, *, staff_ids: Iterable[int], now: datetime) -> 'Event':
        return attrs.evolve(self, assigned_staff=staff_ids, updated_at=now)
