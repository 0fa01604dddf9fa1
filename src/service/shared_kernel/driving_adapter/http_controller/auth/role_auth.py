from typing import Optional

from dependency_injector.wiring import Provide, inject
from fastapi import Cookie, Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from opentelemetry import trace

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.exception.exceptions import ForbiddenError
from src.service.shared_kernel.domain.entity.principal_entity import Principal
from src.service.shared_kernel.domain.enum.user_role import UserRole
from src.service.shared_kernel.driving_adapter.http_controller.auth.jwt_auth import JwtAuth


bearer_scheme = HTTPBearer(auto_error=False)


class RoleAuthStrategy:
    @staticmethod
    def is_attendee(principal: Principal) -> bool:
        return principal.role == UserRole.ATTENDEE

    @staticmethod
    def is_staff(principal: Principal) -> bool:
        return principal.role == UserRole.STAFF

    @staticmethod
    def can_manage_events(principal: Principal) -> bool:
        return principal.role in (UserRole.HOST, UserRole.ADMIN)


@inject
async def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    token: Optional[str] = Cookie(None, alias=settings.AUTH_COOKIE_NAME),
    jwt_auth: JwtAuth = Depends(Provide[Container.jwt_auth]),
) -> Principal:
    """Bearer header wins over the session cookie"""
    raw_token = credentials.credentials if credentials else token
    return jwt_auth.resolve_principal(raw_token)


async def require_attendee(principal: Principal = Depends(get_current_principal)) -> Principal:
    tracer = trace.get_tracer(__name__)
    with tracer.start_as_current_span(
        'auth.require_attendee',
        attributes={'user.id': principal.id, 'user.role': principal.role.value},
    ):
        if not RoleAuthStrategy.is_attendee(principal):
            raise ForbiddenError('Only attendees can perform this action')
        return principal


async def require_staff(principal: Principal = Depends(get_current_principal)) -> Principal:
    if not RoleAuthStrategy.is_staff(principal):
        raise ForbiddenError('Only event staff can perform this action')
    return principal


async def require_host_or_admin(
    principal: Principal = Depends(get_current_principal),
) -> Principal:
    if not RoleAuthStrategy.can_manage_events(principal):
        raise ForbiddenError('Only event hosts can perform this action')
    return principal
