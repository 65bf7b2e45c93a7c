"""Pantry domain models and enums."""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class PantryItemStatus(StrEnum):
    """Pantry item stock level.

    Values are the strings stored in the status column.
    """

    FULL = "Full"
    RUNNING_LOW = "Running Low"
    LESS_THAN_TWO = "< 2"
    OUT_OF_STOCK = "Out of Stock"


class PantryItem(BaseModel):
    """Pantry item data transfer object."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Unique item ID assigned by the store")
    name: str = Field(..., min_length=1, description="Item name (e.g., 'Milk', 'Eggs')")
    status: PantryItemStatus = Field(default=PantryItemStatus.FULL, description="Stock level")
    created_at: datetime = Field(..., description="When the store created the item")
