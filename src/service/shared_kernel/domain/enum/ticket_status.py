from enum import StrEnum


class TicketStatus(StrEnum):
    ACTIVE = 'active'
    CANCELLED = 'cancelled'
    USED = 'used'
    EXPIRED = 'expired'


class PaymentStatus(StrEnum):
    PENDING = 'pending'
    COMPLETED = 'completed'
    FAILED = 'failed'
    REFUNDED = 'refunded'


class ScanAction(StrEnum):
    ENTRY = 'entry'
    EXIT = 'exit'
