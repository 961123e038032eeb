"""Cart item management: commands and handler.

When a menu catalog is configured, AddCartItem checks the menu item against
it once the cart is known to be active: unknown items are not found,
unavailable items cannot be ordered, and the item must come from the cart's
restaurant. The catalog price is used when the command does not carry one.
"""

from datetime import UTC, datetime

import structlog
from protean import handle
from protean.exceptions import InvalidOperationError, ObjectNotFoundError
from protean.fields import DateTime, Float, Identifier, Integer, String
from protean.utils.globals import current_domain
from structlog.contextvars import bound_contextvars

from food_ordering.cart.cart import Cart
from food_ordering.catalog import get_catalog
from food_ordering.domain import ordering

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Cart")
class AddCartItem:
    cart_id = Identifier(required=True)
    menu_item_id = Integer(required=True, min_value=1)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(min_value=0.0)  # Optional when a catalog is configured
    special_instructions = String(max_length=500)
    actor_id = Integer(required=True, min_value=1)
    requested_at = DateTime()


@ordering.command(part_of="Cart")
class UpdateCartItemQuantity:
    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)
    new_quantity = Integer(required=True, min_value=1)
    actor_id = Integer(required=True, min_value=1)
    requested_at = DateTime()


@ordering.command(part_of="Cart")
class RemoveCartItem:
    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)
    actor_id = Integer(required=True, min_value=1)
    requested_at = DateTime()


def _lookup_menu_item(menu_item_id):
    """Return the catalog entry for a menu item, or None without a catalog."""
    catalog = get_catalog()
    if catalog is None:
        return None

    info = catalog.get_menu_item(menu_item_id)
    if info is None:
        raise ObjectNotFoundError(f"Menu item {menu_item_id} does not exist")
    if not info.available:
        logger.warning("Menu item unavailable", menu_item_id=menu_item_id)
        raise InvalidOperationError(f"Menu item {menu_item_id} is not available")
    return info


@ordering.command_handler(part_of=Cart)
class ManageCartItemsHandler:
    @handle(AddCartItem)
    def add_cart_item(self, command):
        with bound_contextvars(cart_id=str(command.cart_id), actor_id=command.actor_id):
            repo = current_domain.repository_for(Cart)
            cart = repo.get(command.cart_id)

            # A closed cart is reported as such, whatever the menu item
            cart.assert_active("add items")
            menu_item = _lookup_menu_item(command.menu_item_id)
            unit_price = command.unit_price
            if unit_price is None and menu_item is not None:
                unit_price = menu_item.price

            item = cart.add_item(
                menu_item_id=command.menu_item_id,
                quantity=command.quantity,
                unit_price=unit_price,
                actor_id=command.actor_id,
                at=command.requested_at or datetime.now(UTC),
                special_instructions=command.special_instructions,
                restaurant_id=menu_item.restaurant_id if menu_item is not None else None,
            )
            repo.add(cart)

            logger.info(
                "Item added to cart",
                item_id=str(item.id),
                menu_item_id=command.menu_item_id,
                quantity=command.quantity,
                total_price=item.total_price,
            )
            return str(item.id)

    @handle(UpdateCartItemQuantity)
    def update_cart_item_quantity(self, command):
        with bound_contextvars(cart_id=str(command.cart_id), actor_id=command.actor_id):
            repo = current_domain.repository_for(Cart)
            cart = repo.get(command.cart_id)
            cart.update_item_quantity(
                item_id=command.item_id,
                new_quantity=command.new_quantity,
                actor_id=command.actor_id,
                at=command.requested_at or datetime.now(UTC),
            )
            repo.add(cart)

            logger.info(
                "Cart item quantity updated",
                item_id=str(command.item_id),
                new_quantity=command.new_quantity,
            )

    @handle(RemoveCartItem)
    def remove_cart_item(self, command):
        with bound_contextvars(cart_id=str(command.cart_id), actor_id=command.actor_id):
            repo = current_domain.repository_for(Cart)
            cart = repo.get(command.cart_id)
            cart.remove_item(
                item_id=command.item_id,
                actor_id=command.actor_id,
                at=command.requested_at or datetime.now(UTC),
            )
            repo.add(cart)

            logger.info("Item removed from cart", item_id=str(command.item_id))
