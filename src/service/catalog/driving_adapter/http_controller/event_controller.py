from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from src.platform.logging.loguru_io import Logger
from src.service.catalog.app.command.create_event_use_case import CreateEventUseCase
from src.service.catalog.app.command.update_event_use_case import (
    EventChanges,
    UpdateEventUseCase,
)
from src.service.catalog.app.query.get_event_use_case import GetEventUseCase
from src.service.catalog.app.query.list_events_use_case import ListEventsUseCase
from src.service.catalog.driving_adapter.http_controller.schema.event_schema import (
    EventCreateRequest,
    EventData,
    EventListResponse,
    EventResponse,
    EventUpdateRequest,
)
from src.service.shared_kernel.domain.entity.principal_entity import Principal
from src.service.shared_kernel.driving_adapter.http_controller.auth.role_auth import (
    get_current_principal,
    require_host_or_admin,
)


router = APIRouter()


@router.post('', status_code=status.HTTP_201_CREATED)
@Logger.io
async def create_event(
    request: EventCreateRequest,
    principal: Principal = Depends(require_host_or_admin),
    use_case: CreateEventUseCase = Depends(CreateEventUseCase.depends),
) -> EventResponse:
    event = await use_case.execute(
        host_id=principal.id,
        title=request.title,
        description=request.description,
        category=request.category,
        location=request.location,
        start_at=request.start_at,
        end_at=request.end_at,
        capacity=request.capacity,
        pricing=request.pricing.to_pricing(),
        assigned_staff=request.assigned_staff,
        status=request.status,
    )
    return EventResponse(event=EventData.from_event(event))


@router.get('')
@Logger.io
async def list_events(
    category: Optional[str] = Query(default=None, max_length=50),
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    use_case: ListEventsUseCase = Depends(ListEventsUseCase.depends),
) -> EventListResponse:
    events = await use_case.list_available(category=category, limit=limit, offset=offset)
    return EventListResponse(
        count=len(events), events=[EventData.from_event(event) for event in events]
    )


@router.get('/mine')
@Logger.io
async def list_my_events(
    principal: Principal = Depends(require_host_or_admin),
    use_case: ListEventsUseCase = Depends(ListEventsUseCase.depends),
) -> EventListResponse:
    events = await use_case.list_by_host(host_id=principal.id)
    return EventListResponse(
        count=len(events), events=[EventData.from_event(event) for event in events]
    )


@router.get('/{event_id}')
@Logger.io
async def get_event(
    event_id: int,
    principal: Principal = Depends(get_current_principal),
    use_case: GetEventUseCase = Depends(GetEventUseCase.depends),
) -> EventResponse:
    event = await use_case.execute(event_id=event_id, principal=principal)
    return EventResponse(event=EventData.from_event(event))


@router.patch('/{event_id}')
@Logger.io
async def update_event(
    event_id: int,
    request: EventUpdateRequest,
    principal: Principal = Depends(require_host_or_admin),
    use_case: UpdateEventUseCase = Depends(UpdateEventUseCase.depends),
) -> EventResponse:
    event = await use_case.execute(
        event_id=event_id,
        principal=principal,
        changes=EventChanges(
            title=request.title,
            description=request.description,
            category=request.category,
            location=request.location,
            start_at=request.start_at,
            end_at=request.end_at,
            capacity=request.capacity,
            status=request.status,
            pricing=request.pricing.to_pricing() if request.pricing else None,
            assigned_staff=frozenset(request.assigned_staff)
            if request.assigned_staff is not None
            else None,
        ),
    )
    return EventResponse(event=EventData.from_event(event))
