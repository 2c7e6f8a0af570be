"""
Meal Catalog Service

Listing, detail and the administrator CRUD operations. Image bytes are
handed to the configured storage backend before anything is written to
the database, so a failed upload never leaves a meal without its image.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from menu_app.exceptions import DuplicateError, FormValidationError, NotFoundError
from menu_app.models import Comment, Meal
from menu_app.schemas import MealForm
from menu_app.services.storage import BaseImageStorage, StoredImage

logger = logging.getLogger(__name__)

MEAL_MISSING_FIELDS = "All fields are mandatory. Please provide a name, ingredients and allergens."
MEAL_EXISTS = "This meal already exists in the database."
MEAL_IMAGE_REQUIRED = "Please upload an image for the meal."


@dataclass
class ImageInput:
    """One uploaded file as read from the multipart form."""
    filename: str
    content: bytes
    content_type: str


def _require_fields(form: MealForm) -> None:
    if not form.name or not form.ingredients or not form.allergens:
        logger.info("Meal rejected: name, ingredients or allergens missing")
        raise FormValidationError(MEAL_MISSING_FIELDS)


async def _name_taken(db: AsyncSession, name: str, exclude_id: Optional[int] = None) -> bool:
    query = select(Meal.id).where(Meal.name == name)
    if exclude_id is not None:
        query = query.where(Meal.id != exclude_id)
    return await db.scalar(query) is not None


async def _commit_unique(db: AsyncSession) -> None:
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        logger.info(f"Meal rejected by unique constraint: {e.orig}")
        raise DuplicateError(MEAL_EXISTS) from e


async def _commit_with_image(
    db: AsyncSession, storage: BaseImageStorage, stored: Optional[StoredImage]
) -> None:
    """Commit, removing a freshly stored image if the meal is rejected."""
    try:
        await _commit_unique(db)
    except DuplicateError:
        if stored is not None:
            await storage.delete(stored)
        raise


async def list_meals(db: AsyncSession) -> list[Meal]:
    """All meals in insertion order (public menu and admin listing)."""
    result = await db.execute(select(Meal).order_by(Meal.id))
    meals = list(result.scalars().all())
    logger.debug(f"There are currently {len(meals)} meals in the database")
    return meals


async def get_meal(db: AsyncSession, meal_id: int) -> Meal:
    """
    Raises:
        NotFoundError: If the meal does not exist
    """
    meal = await db.get(Meal, meal_id)
    if meal is None:
        raise NotFoundError(f"Meal #{meal_id} not found")
    return meal


async def get_meal_detail(db: AsyncSession, meal_id: int) -> Meal:
    """
    Load a meal with its comments and each comment's author.

    Raises:
        NotFoundError: If the meal does not exist
    """
    result = await db.execute(
        select(Meal)
        .where(Meal.id == meal_id)
        .options(selectinload(Meal.comments).selectinload(Comment.author))
    )
    meal = result.scalar_one_or_none()
    if meal is None:
        raise NotFoundError(f"Meal #{meal_id} not found")
    return meal


async def create_meal(
    db: AsyncSession,
    form: MealForm,
    image: Optional[ImageInput],
    storage: BaseImageStorage,
) -> Meal:
    """
    Create a meal after uploading its image.

    Validation and the name check run before the upload, so a rejected
    meal has no side effects.

    Raises:
        FormValidationError: Missing fields or image
        DuplicateError: A meal with this name exists
        ImageUploadError: The storage backend rejected the image
    """
    _require_fields(form)

    if await _name_taken(db, form.name):
        logger.info(f"Meal {form.name!r} not added: already exists")
        raise DuplicateError(MEAL_EXISTS)

    if image is None:
        raise FormValidationError(MEAL_IMAGE_REQUIRED)

    stored = await storage.upload(image.filename, image.content, image.content_type)

    meal = Meal(**form.column_values(), meal_image=stored.url)
    db.add(meal)
    await _commit_with_image(db, storage, stored)
    await db.refresh(meal)

    logger.info(f"New meal {meal.name!r} added (id={meal.id}, image={stored.url})")
    return meal


async def update_meal(
    db: AsyncSession,
    meal_id: int,
    form: MealForm,
    image: Optional[ImageInput],
    existing_image: Optional[str],
    storage: BaseImageStorage,
) -> Meal:
    """
    Overwrite every editable field of a meal.

    A new image replaces the stored URI; without one the ``existing_image``
    value posted by the edit form is kept (falling back to the stored URI
    when the form did not send it).

    Raises:
        NotFoundError: If the meal does not exist
        FormValidationError / DuplicateError / ImageUploadError
    """
    meal = await get_meal(db, meal_id)
    _require_fields(form)

    if await _name_taken(db, form.name, exclude_id=meal_id):
        raise DuplicateError(MEAL_EXISTS)

    stored = None
    if image is not None:
        stored = await storage.upload(image.filename, image.content, image.content_type)
        meal_image = stored.url
    else:
        meal_image = existing_image or meal.meal_image

    for field, value in form.column_values().items():
        setattr(meal, field, value)
    meal.meal_image = meal_image

    await _commit_with_image(db, storage, stored)
    await db.refresh(meal)

    logger.info(f"Meal #{meal.id} updated")
    return meal


async def delete_meal(db: AsyncSession, meal_id: int) -> None:
    """
    Hard-delete a meal. Its comments stay, detached from any meal.

    Raises:
        NotFoundError: If the meal does not exist
    """
    result = await db.execute(
        select(Meal).where(Meal.id == meal_id).options(selectinload(Meal.comments))
    )
    meal = result.scalar_one_or_none()
    if meal is None:
        raise NotFoundError(f"Meal #{meal_id} not found")

    orphaned = len(meal.comments)
    await db.delete(meal)
    await db.commit()
    logger.info(f"Meal #{meal_id} deleted ({orphaned} comments orphaned)")
