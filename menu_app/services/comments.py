"""
Comment Service

A comment is a single row pointing at its meal and author; the meal's
comment list is derived from it, so one commit is all it takes.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from menu_app.exceptions import FormValidationError
from menu_app.models import Comment
from menu_app.schemas import CommentForm
from menu_app.services.meals import get_meal

logger = logging.getLogger(__name__)

COMMENT_EMPTY = "Please write a comment before posting."


async def create_comment(
    db: AsyncSession,
    meal_id: int,
    author_id: int,
    form: CommentForm,
) -> Comment:
    """
    Post a comment on a meal.

    Raises:
        NotFoundError: If the meal does not exist
        FormValidationError: If the comment is blank
    """
    await get_meal(db, meal_id)

    if not form.content:
        raise FormValidationError(COMMENT_EMPTY)

    comment = Comment(meal_id=meal_id, author_id=author_id, content=form.content)
    db.add(comment)
    await db.commit()
    await db.refresh(comment)

    logger.info(f"Comment #{comment.id} posted on meal #{meal_id} by user #{author_id}")
    return comment
