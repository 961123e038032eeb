"""Menu catalog factory.

Provides get_catalog() / set_catalog() to plug in a catalog lookup:
- None (default): carts trust the unit price supplied with each command
- InMemoryMenuCatalog for development and testing
"""

from food_ordering.catalog.memory_adapter import InMemoryMenuCatalog
from food_ordering.catalog.port import MenuCatalog, MenuItemInfo

__all__ = ["InMemoryMenuCatalog", "MenuCatalog", "MenuItemInfo", "get_catalog", "reset_catalog", "set_catalog"]

_current_catalog: MenuCatalog | None = None


def get_catalog() -> MenuCatalog | None:
    """Return the configured menu catalog, or None when lookups are disabled."""
    return _current_catalog


def set_catalog(catalog: MenuCatalog) -> None:
    """Install a menu catalog (at startup, or in tests)."""
    global _current_catalog
    _current_catalog = catalog


def reset_catalog() -> None:
    """Disable catalog lookups."""
    global _current_catalog
    _current_catalog = None
