"""Domain models and DTOs."""

from src.domain.create_models import PantryItemCreate
from src.domain.pantry import PantryItem, PantryItemStatus
from src.domain.update_models import PantryItemStatusUpdate


__all__ = [
    "PantryItem",
    "PantryItemCreate",
    "PantryItemStatus",
    "PantryItemStatusUpdate",
]
