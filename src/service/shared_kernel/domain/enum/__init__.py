from src.service.shared_kernel.domain.enum.event_status import (
    EVENT_STATUS_TRANSITIONS,
    EventStatus,
)
from src.service.shared_kernel.domain.enum.ticket_status import (
    PaymentStatus,
    ScanAction,
    TicketStatus,
)
from src.service.shared_kernel.domain.enum.user_role import UserRole


__all__ = [
    'EVENT_STATUS_TRANSITIONS',
    'EventStatus',
    'PaymentStatus',
    'ScanAction',
    'TicketStatus',
    'UserRole',
]
