"""
Route Guards

FastAPI dependencies that resolve the session user and short-circuit a
request before the route body runs:

    - require_anonymous: signup/login pages, logged-in users are sent home
    - require_user: profile, logout, commenting, anonymous users go to /login
    - require_admin: meal management, other roles get a 403 page

Authorization goes through a role → capability table that lists every
``UserRole`` member, so adding a role without deciding its capabilities
fails at import time.

Usage:
    @router.get("/meals", dependencies=[Depends(require_admin)])
    async def all_meals(...): ...
"""

import enum
import logging
from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from menu_app.core.config import get_settings
from menu_app.database import get_db
from menu_app.exceptions import ForbiddenError, GuardRedirect
from menu_app.models import User, UserRole
from menu_app.services import auth as auth_service
from menu_app.services.sessions import BaseSessionStore, get_session_store
from menu_app.templating import CurrentUser

logger = logging.getLogger(__name__)


class Capability(str, enum.Enum):
    COMMENT = "comment"
    MANAGE_MEALS = "manage_meals"


ROLE_CAPABILITIES: dict[UserRole, frozenset[Capability]] = {
    UserRole.ADMIN: frozenset({Capability.COMMENT, Capability.MANAGE_MEALS}),
    UserRole.MODERATOR: frozenset({Capability.COMMENT}),
    UserRole.CUSTOMER: frozenset({Capability.COMMENT}),
}

_missing_roles = set(UserRole) - set(ROLE_CAPABILITIES)
if _missing_roles:
    raise RuntimeError(f"No capabilities defined for roles: {sorted(r.value for r in _missing_roles)}")


def has_capability(role: UserRole, capability: Capability) -> bool:
    return capability in ROLE_CAPABILITIES[role]


# =============================================================================
# SESSION RESOLUTION
# =============================================================================

async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
    store: BaseSessionStore = Depends(get_session_store),
) -> Optional[User]:
    """
    Resolve the authenticated user from the session cookie.

    The session only holds the user id, so the user row is read fresh on
    every request. A session whose user no longer exists counts as
    anonymous. The user is also placed on ``request.state.user`` and a
    template snapshot on ``request.state.current_user``.
    """
    request.state.user = None
    request.state.current_user = None
    session_id = request.cookies.get(get_settings().session_cookie_name)
    if not session_id:
        return None

    data = await store.get(session_id)
    if not data or "user_id" not in data:
        return None

    user = await auth_service.get_user(db, data["user_id"])
    if user is None:
        logger.warning(f"Session refers to missing user #{data['user_id']}")
        return None

    request.state.user = user
    request.state.current_user = CurrentUser.from_user(user)
    return user


# =============================================================================
# GUARDS
# =============================================================================

async def require_anonymous(user: Optional[User] = Depends(get_current_user)) -> None:
    if user is not None:
        raise GuardRedirect("/")


async def require_user(user: Optional[User] = Depends(get_current_user)) -> User:
    if user is None:
        raise GuardRedirect("/login")
    return user


def require_capability(capability: Capability):
    """Build a guard that needs a logged-in user holding ``capability``."""

    async def guard(user: User = Depends(require_user)) -> User:
        if not has_capability(user.role, capability):
            logger.warning(f"User #{user.id} ({user.role.value}) denied {capability.value}")
            raise ForbiddenError()
        return user

    return guard


require_admin = require_capability(Capability.MANAGE_MEALS)
require_commenter = require_capability(Capability.COMMENT)
