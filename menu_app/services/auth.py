"""
Authentication Service

Signup, login and profile lookups. Functions take an ``AsyncSession`` and
raise ``FormValidationError`` / ``NotFoundError``; routes decide how to
render them.
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from menu_app.core.config import get_settings
from menu_app.exceptions import DuplicateError, FormValidationError, NotFoundError
from menu_app.models import Comment, User, UserRole
from menu_app.schemas import LoginForm, SignupForm
from menu_app.security import hash_password_async, verify_password_async

logger = logging.getLogger(__name__)

SIGNUP_MISSING_FIELDS = "All fields are mandatory. Please provide a username, email and password."
USERNAME_TAKEN = "Username invalid. Please try a different username."
EMAIL_TAKEN = "An account with that email already exists."
LOGIN_MISSING_FIELDS = "All fields are mandatory. Please provide email and password."
INVALID_CREDENTIALS = "Invalid email or password. Please try again."


def short_password_message(min_length: int) -> str:
    return f"Your password must be a minimum of {min_length} characters."


# Verified against when the email is unknown so both failures cost the same
_dummy_hash: Optional[str] = None


async def _get_dummy_hash() -> str:
    global _dummy_hash
    if _dummy_hash is None:
        _dummy_hash = await hash_password_async("menu-app-timing-equalizer")
    return _dummy_hash


async def signup(db: AsyncSession, form: SignupForm) -> User:
    """
    Register a new customer account.

    The username pre-check runs before hashing so a duplicate never pays for
    bcrypt. The unique constraints on ``users`` settle concurrent signups.

    Raises:
        FormValidationError: Missing fields or short password
        DuplicateError: Username or email already registered
    """
    settings = get_settings()

    if not form.username or not form.email or not form.password:
        logger.info("Signup rejected: missing fields")
        raise FormValidationError(SIGNUP_MISSING_FIELDS)

    if len(form.password) < settings.min_password_length:
        raise FormValidationError(short_password_message(settings.min_password_length))

    found = await db.scalar(select(User.id).where(User.username == form.username))
    if found is not None:
        logger.info(f"Signup rejected: username {form.username!r} already exists")
        raise DuplicateError(USERNAME_TAKEN)

    hashed = await hash_password_async(form.password)
    user = User(
        username=form.username,
        email=form.email,
        password=hashed,
        role=UserRole.CUSTOMER,
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        detail = str(e.orig).lower()
        logger.info(f"Signup rejected by unique constraint: {detail}")
        raise DuplicateError(EMAIL_TAKEN if "email" in detail else USERNAME_TAKEN) from e

    await db.refresh(user)
    logger.info(f"New user {user.username} has been created (id={user.id})")
    return user


async def authenticate(db: AsyncSession, form: LoginForm) -> User:
    """
    Resolve the user for a login attempt.

    Unknown email and wrong password raise the same message.

    Raises:
        FormValidationError: Missing fields or bad credentials
    """
    if not form.email or not form.password:
        raise FormValidationError(LOGIN_MISSING_FIELDS)

    user = await db.scalar(select(User).where(User.email == form.email))
    if user is None:
        await verify_password_async(form.password, await _get_dummy_hash())
        logger.info("Login failed: email not registered")
        raise FormValidationError(INVALID_CREDENTIALS)

    if not await verify_password_async(form.password, user.password):
        logger.info(f"Login failed: incorrect password for user id={user.id}")
        raise FormValidationError(INVALID_CREDENTIALS)

    logger.info(f"{user.email} has successfully logged in")
    return user


async def get_user(db: AsyncSession, user_id: int) -> Optional[User]:
    return await db.get(User, user_id)


async def get_profile(db: AsyncSession, user_id: int) -> tuple[User, list[Comment]]:
    """
    Load a user and the comments they wrote, newest first, with each
    comment's meal resolved (None once the meal has been deleted).

    Raises:
        NotFoundError: If the user does not exist
    """
    user = await db.get(User, user_id)
    if user is None:
        raise NotFoundError(f"User #{user_id} not found")

    result = await db.execute(
        select(Comment)
        .where(Comment.author_id == user_id)
        .options(selectinload(Comment.dish))
        .order_by(Comment.id.desc())
    )
    return user, list(result.scalars().all())
