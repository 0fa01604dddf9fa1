"""
Identity resolution

Tokens are minted by the identity service that owns user accounts and share this
service's signing secret. The principal is rebuilt from the claims (no DB query).
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, Optional

import jwt

from src.platform.config.core_setting import settings
from src.platform.exception.exceptions import AuthenticationError
from src.service.shared_kernel.domain.entity.principal_entity import Principal
from src.service.shared_kernel.domain.enum.user_role import UserRole


class JwtAuth:
    def __init__(self) -> None:
        self.secret = settings.SECRET_KEY.get_secret_value()
        self.algorithm = settings.ALGORITHM
        self.token_expire_minutes = settings.ACCESS_TOKEN_EXPIRE_MINUTES

    def create_jwt_token(
        self,
        *,
        user_id: int,
        role: UserRole,
        name: str = '',
        email: str = '',
        permissions: Iterable[str] = (),
    ) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            'sub': str(user_id),
            'exp': now + timedelta(minutes=self.token_expire_minutes),
            'iat': now,
            'user_id': user_id,
            'role': role.value,
            'name': name,
            'email': email,
            'permissions': sorted(permissions),
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def decode_jwt_token(self, token: str) -> Dict[str, Any]:
        try:
            return jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError:
            raise AuthenticationError('Token has expired')
        except jwt.PyJWTError:
            raise AuthenticationError('Invalid token')

    def resolve_principal(self, token: Optional[str]) -> Principal:
        if not token:
            raise AuthenticationError('Not authenticated')

        payload = self.decode_jwt_token(token)
        user_id = payload.get('user_id')
        role = payload.get('role')
        if not isinstance(user_id, int) or not role:
            raise AuthenticationError('Invalid token')

        try:
            user_role = UserRole(role)
        except ValueError:
            raise AuthenticationError(f'Unknown role: {role}')

        return Principal(
            id=user_id,
            role=user_role,
            name=payload.get('name') or '',
            email=payload.get('email') or '',
            permissions=payload.get('permissions') or (),
        )
