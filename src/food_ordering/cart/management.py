"""Cart management: commands and handler.

Handles cart creation and cancellation.
"""

from datetime import UTC, datetime

import structlog
from protean import handle
from protean.fields import DateTime, Identifier, Integer
from protean.utils.globals import current_domain
from structlog.contextvars import bound_contextvars

from food_ordering.cart.cart import Cart
from food_ordering.domain import ordering

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Cart")
class CreateCart:
    """Start a cart for a customer ordering from a restaurant."""

    customer_id = Integer(required=True, min_value=1)
    restaurant_id = Integer(required=True, min_value=1)
    actor_id = Integer(required=True, min_value=1)
    requested_at = DateTime()  # Optional: defaults to now


@ordering.command(part_of="Cart")
class CancelCart:
    """Cancel an active cart."""

    cart_id = Identifier(required=True)
    actor_id = Integer(required=True, min_value=1)
    requested_at = DateTime()


@ordering.command_handler(part_of=Cart)
class ManageCartHandler:
    @handle(CreateCart)
    def create_cart(self, command):
        cart = Cart.create(
            customer_id=command.customer_id,
            restaurant_id=command.restaurant_id,
            actor_id=command.actor_id,
            at=command.requested_at or datetime.now(UTC),
        )
        with bound_contextvars(cart_id=str(cart.id), actor_id=command.actor_id):
            current_domain.repository_for(Cart).add(cart)

            logger.info(
                "Cart created",
                customer_id=cart.customer_id,
                restaurant_id=cart.restaurant_id,
            )
        return str(cart.id)

    @handle(CancelCart)
    def cancel_cart(self, command):
        with bound_contextvars(cart_id=str(command.cart_id), actor_id=command.actor_id):
            repo = current_domain.repository_for(Cart)
            cart = repo.get(command.cart_id)
            cart.cancel(
                actor_id=command.actor_id,
                at=command.requested_at or datetime.now(UTC),
            )
            repo.add(cart)

            logger.info("Cart cancelled")
