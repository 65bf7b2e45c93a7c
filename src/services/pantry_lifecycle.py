"""Pure stock-level transitions and list ordering for pantry items."""

from collections.abc import Sequence

from src.domain.pantry import PantryItem, PantryItemStatus


STATUS_CYCLE: dict[PantryItemStatus, PantryItemStatus] = {
    PantryItemStatus.FULL: PantryItemStatus.RUNNING_LOW,
    PantryItemStatus.RUNNING_LOW: PantryItemStatus.LESS_THAN_TWO,
    PantryItemStatus.LESS_THAN_TWO: PantryItemStatus.OUT_OF_STOCK,
    PantryItemStatus.OUT_OF_STOCK: PantryItemStatus.FULL,
}


def advance_status(status: PantryItemStatus | str | None) -> PantryItemStatus:
    """Return the stock level that follows ``status`` in the cycle.

    Full -> Running Low -> < 2 -> Out of Stock -> Full. Values outside the
    cycle advance to Full.
    """
    try:
        current = PantryItemStatus(status)
    except ValueError:
        return PantryItemStatus.FULL
    return STATUS_CYCLE[current]


def derive_display_order(items: Sequence[PantryItem]) -> list[PantryItem]:
    """Return items with every Out of Stock entry moved to the end.

    Stable partition: relative order inside the in-stock and out-of-stock
    groups is kept. The input is not modified.
    """
    in_stock = [item for item in items if item.status != PantryItemStatus.OUT_OF_STOCK]
    out_of_stock = [item for item in items if item.status == PantryItemStatus.OUT_OF_STOCK]
    return in_stock + out_of_stock
