from src.service.shared_kernel.domain.entity.event_entity import Event
from src.service.shared_kernel.domain.entity.principal_entity import Principal
from src.service.shared_kernel.domain.entity.ticket_entity import Ticket


__all__ = ['Event', 'Principal', 'Ticket']
