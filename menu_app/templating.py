"""
Template Rendering

Wraps Jinja2Templates so every page receives the same base context:
the restaurant name and a snapshot of the logged-in user.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from fastapi import Request
from fastapi.templating import Jinja2Templates

from menu_app.core.config import get_settings
from menu_app.models import User, UserRole

TEMPLATE_DIR = Path(__file__).parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATE_DIR))


@dataclass(frozen=True)
class CurrentUser:
    """
    Plain copy of the session user for templates.

    Templates never touch the ORM object, so a rollback inside a handler
    cannot trigger a lazy reload while a page is being rendered.
    """
    id: int
    username: str
    email: str
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @classmethod
    def from_user(cls, user: User) -> "CurrentUser":
        return cls(id=user.id, username=user.username, email=user.email, role=user.role)


def current_user(request: Request) -> Optional[CurrentUser]:
    return getattr(request.state, "current_user", None)


def render(
    request: Request,
    name: str,
    context: Optional[dict[str, Any]] = None,
    status_code: int = 200,
):
    """Render ``name`` with the shared base context."""
    page = {
        "restaurant_name": get_settings().restaurant_name,
        "user_in_session": current_user(request),
    }
    page.update(context or {})
    return templates.TemplateResponse(request, name, page, status_code=status_code)
