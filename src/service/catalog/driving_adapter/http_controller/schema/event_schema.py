from datetime import datetime
import json
from typing import Any, List, Optional

from pydantic import AwareDatetime, BaseModel, Field, field_validator

from src.service.shared_kernel.domain.entity.event_entity import Event
from src.service.shared_kernel.domain.enum.event_status import EventStatus
from src.service.shared_kernel.domain.value_object.pricing import Pricing


class PricingSchema(BaseModel):
    is_free: bool = True
    price: int = Field(default=0, ge=0)  # minor units
    currency: str = Field(default='USD', min_length=3, max_length=3)

    def to_pricing(self) -> Pricing:
        return Pricing(is_free=self.is_free, price=self.price, currency=self.currency.upper())


def _parse_json_field(value: Any) -> Any:
    # Multipart form clients send nested objects as JSON strings
    if isinstance(value, str):
        try:
            return json.loads(value)
        except json.JSONDecodeError as e:
            raise ValueError('must be a JSON object') from e
    return value


class EventCreateRequest(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(default='', max_length=5000)
    category: str = Field(default='other', max_length=50)
    location: str = Field(default='', max_length=300)
    start_at: AwareDatetime
    end_at: AwareDatetime
    capacity: int = Field(ge=1)
    pricing: PricingSchema = Field(default_factory=PricingSchema)
    assigned_staff: List[int] = []
    status: EventStatus = EventStatus.DRAFT

    model_config = {
        'json_schema_extra': {
            'example': {
                'title': 'PyCon Taipei Meetup',
                'start_at': '2026-03-01T18:00:00Z',
                'end_at': '2026-03-01T21:00:00Z',
                'capacity': 120,
                'pricing': {'is_free': False, 'price': 2500, 'currency': 'USD'},
                'assigned_staff': [3],
                'status': 'published',
            }
        }
    }

    @field_validator('pricing', mode='before')
    @classmethod
    def parse_pricing(cls, value: Any) -> Any:
        return _parse_json_field(value)


class EventUpdateRequest(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=5000)
    category: Optional[str] = Field(default=None, max_length=50)
    location: Optional[str] = Field(default=None, max_length=300)
    start_at: Optional[AwareDatetime] = None
    end_at: Optional[AwareDatetime] = None
    capacity: Optional[int] = Field(default=None, ge=1)
    pricing: Optional[PricingSchema] = None
    assigned_staff: Optional[List[int]] = None
    status: Optional[EventStatus] = None

    @field_validator('pricing', mode='before')
    @classmethod
    def parse_pricing(cls, value: Any) -> Any:
        return _parse_json_field(value)


class EventData(BaseModel):
    id: int
    host_id: int
    title: str
    description: str
    category: str
    location: str
    start_at: datetime
    end_at: datetime
    status: str
    capacity: int
    tickets_sold: int
    seats_left: int
    pricing: PricingSchema
    assigned_staff: List[int]

    @classmethod
    def from_event(cls, event: Event) -> 'EventData':
        return cls(
            id=event.id or 0,
            host_id=event.host_id,
            title=event.title,
            description=event.description,
            category=event.category,
            location=event.location,
            start_at=event.start_at,
            end_at=event.end_at,
            status=event.status.value,
            capacity=event.capacity,
            tickets_sold=event.tickets_sold,
            seats_left=event.seats_left,
            pricing=PricingSchema(
                is_free=event.pricing.is_free,
                price=event.pricing.price,
                currency=event.pricing.currency,
            ),
            assigned_staff=sorted(event.assigned_staff),
        )


class EventResponse(BaseModel):
    success: bool = True
    event: EventData


class EventListResponse(BaseModel):
    success: bool = True
    count: int
    events: List[EventData]
