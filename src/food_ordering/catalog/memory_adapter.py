"""In-memory menu catalog for development and testing.

Holds menu items registered at runtime and records every lookup, so tests can
assert which items the cart asked about.
"""

from food_ordering.catalog.port import MenuCatalog, MenuItemInfo


class InMemoryMenuCatalog(MenuCatalog):
    """Menu catalog backed by a dict."""

    def __init__(self) -> None:
        self.menu_items: dict[int, MenuItemInfo] = {}
        self.calls: list[int] = []

    def register(self, menu_item_id: int, restaurant_id: int, price: float, available: bool = True) -> MenuItemInfo:
        info = MenuItemInfo(
            menu_item_id=menu_item_id,
            restaurant_id=restaurant_id,
            price=price,
            available=available,
        )
        self.menu_items[menu_item_id] = info
        return info

    def set_availability(self, menu_item_id: int, available: bool) -> None:
        info = self.menu_items[menu_item_id]
        self.menu_items[menu_item_id] = MenuItemInfo(
            menu_item_id=info.menu_item_id,
            restaurant_id=info.restaurant_id,
            price=info.price,
            available=available,
        )

    def get_menu_item(self, menu_item_id: int) -> MenuItemInfo | None:
        self.calls.append(menu_item_id)
        return self.menu_items.get(menu_item_id)
