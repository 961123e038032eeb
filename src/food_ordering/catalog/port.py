"""Menu catalog port (abstract interface).

Defines the lookup the cart needs from the restaurant catalog service: the
current price of a menu item, whether it can be ordered right now, and which
restaurant serves it. Adapters implement this against the real catalog or,
in development and tests, an in-memory table.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class MenuItemInfo:
    """Catalog facts about a menu item at lookup time."""

    menu_item_id: int
    restaurant_id: int
    price: float
    available: bool = True


class MenuCatalog(ABC):
    """Abstract menu catalog interface."""

    @abstractmethod
    def get_menu_item(self, menu_item_id: int) -> MenuItemInfo | None:
        """Return the menu item, or None if the catalog does not know it."""
        ...
