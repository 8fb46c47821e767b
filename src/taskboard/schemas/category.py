"""Pydantic schemas for categories."""

from datetime import datetime
from typing import Optional

from pydantic import Field, model_validator

from taskboard.schemas import CamelModel, reject_nulls

COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"


class CategoryCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=50)
    color: Optional[str] = Field(None, pattern=COLOR_PATTERN)


class CategoryUpdate(CamelModel):
    """Partial update — only fields present in the body are applied."""
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    color: Optional[str] = Field(None, pattern=COLOR_PATTERN)

    @model_validator(mode="after")
    def _name_not_null(self):
        reject_nulls(self, "name")
        return self


class CategoryRead(CamelModel):
    id: int
    name: str
    color: Optional[str]
    created_at: datetime
    updated_at: datetime
