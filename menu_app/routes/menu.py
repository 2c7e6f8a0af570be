"""
Public Menu Routes

    GET  /                                   home page
    GET  /menu                               all meals
    GET  /menu/meal/{meal_id}                meal with its comments
    POST /menu/meal/{meal_id}/create-comment logged-in users
"""

import logging

from fastapi import APIRouter, Depends, Form, Path, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from menu_app.database import get_db
from menu_app.exceptions import FormValidationError
from menu_app.guards import get_current_user, require_commenter
from menu_app.models import User
from menu_app.schemas import MAX_RECORD_ID, CommentForm
from menu_app.services import comments as comment_service
from menu_app.services import meals as meal_service
from menu_app.templating import render

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Menu"], dependencies=[Depends(get_current_user)])


@router.get("/")
async def home(request: Request):
    return render(request, "index.html")


@router.get("/menu")
async def menu(request: Request, db: AsyncSession = Depends(get_db)):
    all_meals = await meal_service.list_meals(db)
    return render(request, "meals/menu.html", {"all_meals": all_meals})


@router.get("/menu/meal/{meal_id}")
async def meal_page(
    request: Request,
    meal_id: int = Path(ge=1, le=MAX_RECORD_ID),
    db: AsyncSession = Depends(get_db),
):
    found_meal = await meal_service.get_meal_detail(db, meal_id)
    return render(request, "meals/meal.html", {"found_meal": found_meal})


@router.post("/menu/meal/{meal_id}/create-comment")
async def create_comment(
    request: Request,
    meal_id: int = Path(ge=1, le=MAX_RECORD_ID),
    content: str = Form(""),
    user: User = Depends(require_commenter),
    db: AsyncSession = Depends(get_db),
):
    form = CommentForm(content=content)
    try:
        await comment_service.create_comment(db, meal_id, user.id, form)
    except FormValidationError as e:
        found_meal = await meal_service.get_meal_detail(db, meal_id)
        return render(
            request,
            "meals/meal.html",
            {"found_meal": found_meal, "error_message": e.message},
            status_code=e.http_status,
        )

    return RedirectResponse(f"/menu/meal/{meal_id}", status_code=303)
