"""
Wire Modules Configuration

Defines the modules that need dependency injection wiring.
Shared between production and test environments.
"""

from types import ModuleType

from src.service.catalog.app.command import create_event_use_case, update_event_use_case
from src.service.catalog.app.query import get_event_use_case, list_events_use_case
from src.service.checkin.app.command import (
    add_ticket_note_use_case,
    close_admission_use_case,
    scan_ticket_use_case,
)
from src.service.checkin.app.query import (
    attendance_summary_use_case,
    list_assigned_events_use_case,
)
from src.service.ledger.app.command import (
    cancel_ticket_use_case,
    create_payment_use_case,
    issue_ticket_use_case,
    process_payment_use_case,
    refund_ticket_use_case,
    retry_pending_refunds_use_case,
)
from src.service.ledger.app.query import (
    get_payment_use_case,
    get_ticket_use_case,
    list_my_tickets_use_case,
)
from src.service.reporting.app.query import scan_histogram_use_case, search_tickets_use_case
from src.service.shared_kernel.driving_adapter.http_controller.auth import role_auth


WIRE_MODULES: list[ModuleType] = [
    # ledger
    issue_ticket_use_case,
    cancel_ticket_use_case,
    refund_ticket_use_case,
    retry_pending_refunds_use_case,
    create_payment_use_case,
    process_payment_use_case,
    list_my_tickets_use_case,
    get_ticket_use_case,
    get_payment_use_case,
    # checkin
    scan_ticket_use_case,
    add_ticket_note_use_case,
    close_admission_use_case,
    attendance_summary_use_case,
    list_assigned_events_use_case,
    # reporting
    search_tickets_use_case,
    scan_histogram_use_case,
    # catalog
    create_event_use_case,
    update_event_use_case,
    get_event_use_case,
    list_events_use_case,
    # auth
    role_auth,
]
