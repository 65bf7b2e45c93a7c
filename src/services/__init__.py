from src.services import (
    pantry_lifecycle,
    pantry_repository,
    pantry_store,
)


__all__ = [
    "pantry_lifecycle",
    "pantry_repository",
    "pantry_store",
]
