"""
Pydantic Schemas for Form Input and JSON Responses

Form schemas only normalize input (trimming, lowercasing email). Required
field and length rules live in the service layer so each failure can be
reported with its own message on the re-rendered form.

Version: 1.0.0
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

# Largest id a BIGINT or SQLite INTEGER column can hold
MAX_RECORD_ID = 2**63 - 1


def _strip(v: Optional[str]) -> str:
    return (v or "").strip()


# =============================================================================
# AUTH FORMS
# =============================================================================

class SignupForm(BaseModel):
    """Fields of the signup form."""
    username: str = ""
    email: str = ""
    # Passwords are kept exactly as typed
    password: str = ""

    @field_validator("username", mode="before")
    @classmethod
    def strip_username(cls, v: Optional[str]) -> str:
        return _strip(v)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v: Optional[str]) -> str:
        return _strip(v).lower()

    @field_validator("password", mode="before")
    @classmethod
    def none_to_empty(cls, v: Optional[str]) -> str:
        return v or ""


class LoginForm(BaseModel):
    """Fields of the login form."""
    email: str = ""
    password: str = ""

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v: Optional[str]) -> str:
        return _strip(v).lower()

    @field_validator("password", mode="before")
    @classmethod
    def none_to_empty(cls, v: Optional[str]) -> str:
        return v or ""


# =============================================================================
# MEAL & COMMENT FORMS
# =============================================================================

class MealForm(BaseModel):
    """Editable meal fields shared by the create and edit forms."""
    name: str = Field(default="", examples=["Chicken Tikka Masala"])
    ingredients: str = Field(default="", examples=["chicken, yoghurt, tomato, cream"])
    allergens: str = Field(default="", examples=["dairy"])
    spice_level: str = Field(default="", examples=["medium"])
    category: str = Field(default="", examples=["main"])
    cuisine: str = Field(default="", examples=["Indian"])
    dish_type: str = Field(default="", examples=["curry"])

    @field_validator("*", mode="before")
    @classmethod
    def strip_all(cls, v: Optional[str]) -> str:
        return _strip(v)

    def column_values(self) -> dict[str, Optional[str]]:
        """Values to write to the meal row; blank optional fields become NULL."""
        values = self.model_dump()
        for key in ("spice_level", "category", "cuisine", "dish_type"):
            values[key] = values[key] or None
        return values


class CommentForm(BaseModel):
    content: str = ""

    @field_validator("content", mode="before")
    @classmethod
    def strip_content(cls, v: Optional[str]) -> str:
        return _strip(v)


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    database: str
    sessions: str
    storage: str
    timestamp: datetime
