"""Models for partial record updates."""

from pydantic import BaseModel

from src.domain.pantry import PantryItemStatus


class PantryItemStatusUpdate(BaseModel):
    """Status change for a pantry item."""

    status: PantryItemStatus
