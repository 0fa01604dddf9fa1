from src.service.shared_kernel.driven_adapter.model.event_model import EventModel, EventStaffModel
from src.service.shared_kernel.driven_adapter.model.ticket_model import (
    TicketModel,
    TicketStaffNoteModel,
)


__all__ = ['EventModel', 'EventStaffModel', 'TicketModel', 'TicketStaffNoteModel']
