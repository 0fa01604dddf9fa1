"""Application layer interfaces (Ports)"""

from src.service.shared_kernel.app.interface.i_clock import IClock
from src.service.shared_kernel.app.interface.i_event_command_repo import IEventCommandRepo
from src.service.shared_kernel.app.interface.i_event_query_repo import IEventQueryRepo
from src.service.shared_kernel.app.interface.i_ticket_command_repo import ITicketCommandRepo
from src.service.shared_kernel.app.interface.i_ticket_query_repo import ITicketQueryRepo


__all__ = [
    'IClock',
    'IEventCommandRepo',
    'IEventQueryRepo',
    'ITicketCommandRepo',
    'ITicketQueryRepo',
]
