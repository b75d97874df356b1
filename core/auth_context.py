"""
Контекст авторизации

Контекст (хранилище, пользователь, роль) передаётся в каждую операцию явно;
аутентификация выполняется за пределами приложения.
"""

from dataclasses import dataclass
from typing import Any, Iterable, Optional

from core.exceptions import AuthorizationError

ADMIN_ROLE = 'ADMIN'
DEFAULT_STAFF_ROLES = ('ADMIN', 'AGENT')


@dataclass(frozen=True)
class AuthContext:
    """Действующий пользователь и дескриптор хранилища"""
    db_manager: Any
    user_id: Optional[str]
    role: Optional[str]


def is_admin(role: Optional[str]) -> bool:
    return role == ADMIN_ROLE


def assert_authenticated(ctx: Optional[AuthContext]) -> AuthContext:
    """Проверка, что пользователь определён"""
    if ctx is None or not ctx.user_id:
        raise AuthorizationError(AuthorizationError.UNAUTHORIZED)
    return ctx


def assert_staff(
    ctx: Optional[AuthContext],
    staff_roles: Iterable[str] = DEFAULT_STAFF_ROLES
) -> AuthContext:
    """Проверка, что роль пользователя относится к сотрудникам"""
    ctx = assert_authenticated(ctx)
    if (ctx.role or '').upper() not in {role.upper() for role in staff_roles}:
        raise AuthorizationError(
            AuthorizationError.FORBIDDEN,
            f"Role {ctx.role!r} is not allowed to perform this action"
        )
    return ctx
