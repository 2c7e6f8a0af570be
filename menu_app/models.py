"""
SQLAlchemy Database Models

Three tables back the menu:
- users: registered accounts with a role
- meals: the catalog managed by administrators
- comments: customer comments on a meal

A meal's comments are not stored on the meal row; ``Meal.comments`` is
derived from ``Comment.meal_id``.

Version: 1.0.0
"""

import enum

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from menu_app.database import Base


class UserRole(str, enum.Enum):
    """Closed set of account roles."""
    ADMIN = "admin"
    MODERATOR = "moderator"
    CUSTOMER = "customer"


class User(Base):
    """
    Registered account.

    ``username`` and ``email`` carry unique constraints; the password column
    only ever holds a bcrypt hash.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    username = Column(String(50), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password = Column(String(255), nullable=False)
    role = Column(
        Enum(
            UserRole,
            name="user_role",
            values_callable=lambda roles: [role.value for role in roles],
        ),
        default=UserRole.CUSTOMER,
        nullable=False,
    )

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    comments = relationship("Comment", back_populates="author", order_by="Comment.id")

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def __repr__(self):
        return f"<User #{self.id} - {self.username} - {self.role.value}>"


class Meal(Base):
    """Dish on the menu."""
    __tablename__ = "meals"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # =========================================================================
    # DESCRIPTION
    # =========================================================================
    name = Column(String(120), nullable=False, unique=True, index=True)
    ingredients = Column(Text, nullable=False)
    allergens = Column(Text, nullable=False)
    spice_level = Column(String(30), nullable=True)

    # =========================================================================
    # CLASSIFICATION
    # =========================================================================
    category = Column(String(50), nullable=True)
    cuisine = Column(String(50), nullable=True)
    dish_type = Column(String(50), nullable=True)

    # URI returned by the image storage backend
    meal_image = Column(String(500), nullable=True)

    # =========================================================================
    # TIMESTAMPS
    # =========================================================================
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Deleting a meal leaves its comments in place with meal_id set to NULL
    comments = relationship("Comment", back_populates="dish", order_by="Comment.id")

    def __repr__(self):
        return f"<Meal #{self.id} - {self.name}>"


class Comment(Base):
    """A user's comment on a meal."""
    __tablename__ = "comments"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    meal_id = Column(
        Integer,
        ForeignKey("meals.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    author_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    content = Column(Text, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    dish = relationship("Meal", back_populates="comments")
    author = relationship("User", back_populates="comments")

    def __repr__(self):
        return f"<Comment #{self.id} - meal {self.meal_id} - user {self.author_id}>"
