"""
Authentication Routes

    GET/POST /signup     anonymous only
    GET/POST /login      anonymous only
    POST     /logout     logged-in users
    GET      /profile/id logged-in users
"""

import logging

from fastapi import APIRouter, Depends, Form, Path, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from menu_app.core.config import get_settings
from menu_app.database import get_db
from menu_app.exceptions import FormValidationError
from menu_app.guards import require_anonymous, require_user
from menu_app.models import User
from menu_app.schemas import MAX_RECORD_ID, LoginForm, SignupForm
from menu_app.services import auth as auth_service
from menu_app.services.sessions import BaseSessionStore, get_session_store
from menu_app.templating import render

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])


# =============================================================================
# SESSION COOKIE HELPERS
# =============================================================================

async def start_session(
    request: Request,
    response: RedirectResponse,
    store: BaseSessionStore,
    user: User,
) -> str:
    """
    Open a fresh session for ``user`` and attach its cookie to ``response``.

    Any session id the client already carried is destroyed, so a login
    always gets a new identifier.
    """
    settings = get_settings()
    previous = request.cookies.get(settings.session_cookie_name)
    if previous:
        await store.delete(previous)

    session_id = await store.create({"user_id": user.id})
    response.set_cookie(
        settings.session_cookie_name,
        session_id,
        max_age=settings.session_ttl_seconds,
        httponly=True,
        samesite="lax",
        secure=settings.session_cookie_secure,
    )
    return session_id


# =============================================================================
# SIGNUP
# =============================================================================

@router.get("/signup", dependencies=[Depends(require_anonymous)])
async def signup_page(request: Request):
    return render(request, "auth/signup.html")


@router.post("/signup", dependencies=[Depends(require_anonymous)])
async def signup(
    request: Request,
    username: str = Form(""),
    email: str = Form(""),
    password: str = Form(""),
    db: AsyncSession = Depends(get_db),
    store: BaseSessionStore = Depends(get_session_store),
):
    """Create an account, log it in and continue to the menu."""
    form = SignupForm(username=username, email=email, password=password)
    try:
        user = await auth_service.signup(db, form)
    except FormValidationError as e:
        return render(
            request,
            "auth/signup.html",
            {"error_message": e.message, "username": form.username, "email": form.email},
            status_code=e.http_status,
        )

    response = RedirectResponse("/menu", status_code=303)
    await start_session(request, response, store, user)
    return response


# =============================================================================
# LOGIN / LOGOUT
# =============================================================================

@router.get("/login", dependencies=[Depends(require_anonymous)])
async def login_page(request: Request):
    return render(request, "auth/login.html")


@router.post("/login", dependencies=[Depends(require_anonymous)])
async def login(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
    db: AsyncSession = Depends(get_db),
    store: BaseSessionStore = Depends(get_session_store),
):
    form = LoginForm(email=email, password=password)
    try:
        user = await auth_service.authenticate(db, form)
    except FormValidationError as e:
        return render(
            request,
            "auth/login.html",
            {"error_message": e.message, "email": form.email},
            status_code=e.http_status,
        )

    response = RedirectResponse("/menu", status_code=303)
    await start_session(request, response, store, user)
    return response


@router.post("/logout")
async def logout(
    request: Request,
    user: User = Depends(require_user),
    store: BaseSessionStore = Depends(get_session_store),
):
    """Destroy the session; store failures go to the generic error handler."""
    settings = get_settings()
    await store.delete(request.cookies[settings.session_cookie_name])
    logger.info(f"User #{user.id} has logged out")

    response = RedirectResponse("/", status_code=303)
    response.delete_cookie(settings.session_cookie_name)
    return response


# =============================================================================
# PROFILE
# =============================================================================

@router.get("/profile/{user_id}", dependencies=[Depends(require_user)])
async def profile(
    request: Request,
    user_id: int = Path(ge=1, le=MAX_RECORD_ID),
    db: AsyncSession = Depends(get_db),
):
    found_user, found_comments = await auth_service.get_profile(db, user_id)
    return render(
        request,
        "user/profile.html",
        {"found_user": found_user, "found_comments": found_comments},
    )
