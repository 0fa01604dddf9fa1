from datetime import datetime
from typing import Optional

import attrs


@attrs.frozen
class Verification:
    """Door scan record embedded in a ticket."""

    is_scanned: bool = False
    scanned_at: Optional[datetime] = None
    scanned_by: Optional[int] = None
    entry_time: Optional[datetime] = None
    exit_time: Optional[datetime] = None
    scan_count: int = 0

    def first_entry(self, *, staff_id: int, now: datetime) -> 'Verification':
        return attrs.evolve(
            self,
            is_scanned=True,
            scanned_at=now,
            scanned_by=staff_id,
            entry_time=now,
            scan_count=1,
        )

    def repeat_entry(self) -> 'Verification':
        return attrs.evolve(self, scan_count=self.scan_count + 1)

    def exit(self, *, now: datetime) -> 'Verification':
        return attrs.evolve(self, exit_time=now)


@attrs.frozen
class Cancellation:
    cancelled_at: datetime
    reason: str
    refund_amount: int


@attrs.frozen
class StaffNote:
    staff_id: int
    note: str
    created_at: datetime
