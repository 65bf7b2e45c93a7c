"""Models for creating records."""

from pydantic import BaseModel, Field, field_validator

from src.domain.pantry import PantryItemStatus


class PantryItemCreate(BaseModel):
    """Payload inserted into the pantry_items table."""

    name: str = Field(..., description="Item name, stored as entered")
    status: PantryItemStatus = Field(default=PantryItemStatus.FULL, description="Initial stock level")

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("name must not be empty")
        return v
