from src.service.shared_kernel.app.dto.ticket_query_dto import AttendanceStats, TicketSearchCriteria


__all__ = ['AttendanceStats', 'TicketSearchCriteria']
