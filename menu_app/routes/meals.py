"""
Meal Management Routes (administrators only)

    GET/POST /meals/create
    GET      /meals
    GET      /meals/{meal_id}
    POST     /meals/{meal_id}/delete
    GET/POST /meals/{meal_id}/edit

Every route sits behind ``require_admin``; the guard runs before any
form parsing side effects or storage calls.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Path, Request, UploadFile
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from menu_app.database import get_db
from menu_app.exceptions import FormValidationError
from menu_app.guards import require_admin
from menu_app.schemas import MAX_RECORD_ID, MealForm
from menu_app.services import meals as meal_service
from menu_app.services.meals import ImageInput
from menu_app.services.storage import BaseImageStorage, get_image_storage
from menu_app.templating import render

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/meals", tags=["Meals"], dependencies=[Depends(require_admin)])


async def read_image(upload: Optional[UploadFile]) -> Optional[ImageInput]:
    """Return the uploaded file, or None when the file field was left empty."""
    if upload is None or not upload.filename:
        return None
    content = await upload.read()
    return ImageInput(
        filename=upload.filename,
        content=content,
        content_type=upload.content_type or "",
    )


def meal_form(
    name: str = Form(""),
    ingredients: str = Form(""),
    allergens: str = Form(""),
    spice_level: str = Form(""),
    category: str = Form(""),
    cuisine: str = Form(""),
    dish_type: str = Form(""),
) -> MealForm:
    return MealForm(
        name=name,
        ingredients=ingredients,
        allergens=allergens,
        spice_level=spice_level,
        category=category,
        cuisine=cuisine,
        dish_type=dish_type,
    )


# =============================================================================
# CREATE
# =============================================================================

@router.get("/create")
async def new_meal_page(request: Request):
    return render(request, "meals/new-meal.html", {"meal": MealForm()})


@router.post("/create")
async def create_meal(
    request: Request,
    form: MealForm = Depends(meal_form),
    meal_image: Optional[UploadFile] = File(None),
    db: AsyncSession = Depends(get_db),
    storage: BaseImageStorage = Depends(get_image_storage),
):
    image = await read_image(meal_image)
    try:
        await meal_service.create_meal(db, form, image, storage)
    except FormValidationError as e:
        return render(
            request,
            "meals/new-meal.html",
            {"meal": form, "error_message": e.message},
            status_code=e.http_status,
        )
    return RedirectResponse("/meals", status_code=303)


# =============================================================================
# LIST / DETAIL
# =============================================================================

@router.get("")
async def all_meals(request: Request, db: AsyncSession = Depends(get_db)):
    meals = await meal_service.list_meals(db)
    return render(request, "meals/all-meals.html", {"all_meals": meals})


@router.get("/{meal_id}")
async def meal_details(
    request: Request,
    meal_id: int = Path(ge=1, le=MAX_RECORD_ID),
    db: AsyncSession = Depends(get_db),
):
    found_meal = await meal_service.get_meal_detail(db, meal_id)
    return render(request, "meals/meal-details.html", {"found_meal": found_meal})


# =============================================================================
# DELETE
# =============================================================================

@router.post("/{meal_id}/delete")
async def delete_meal(
    meal_id: int = Path(ge=1, le=MAX_RECORD_ID),
    db: AsyncSession = Depends(get_db),
):
    await meal_service.delete_meal(db, meal_id)
    return RedirectResponse("/meals", status_code=303)


# =============================================================================
# EDIT
# =============================================================================

@router.get("/{meal_id}/edit")
async def edit_meal_page(
    request: Request,
    meal_id: int = Path(ge=1, le=MAX_RECORD_ID),
    db: AsyncSession = Depends(get_db),
):
    found_meal = await meal_service.get_meal(db, meal_id)
    return render(request, "meals/edit-meal.html", {"meal": found_meal, "meal_id": meal_id})


@router.post("/{meal_id}/edit")
async def update_meal(
    request: Request,
    meal_id: int = Path(ge=1, le=MAX_RECORD_ID),
    form: MealForm = Depends(meal_form),
    existing_image: str = Form(""),
    meal_image: Optional[UploadFile] = File(None),
    db: AsyncSession = Depends(get_db),
    storage: BaseImageStorage = Depends(get_image_storage),
):
    image = await read_image(meal_image)
    try:
        meal = await meal_service.update_meal(
            db, meal_id, form, image, existing_image.strip() or None, storage
        )
    except FormValidationError as e:
        # Re-render from the submitted values, not the (possibly expired) row
        submitted = {**form.model_dump(), "meal_image": existing_image}
        return render(
            request,
            "meals/edit-meal.html",
            {"meal": submitted, "meal_id": meal_id, "error_message": e.message},
            status_code=e.http_status,
        )
    return RedirectResponse(f"/meals/{meal.id}", status_code=303)
