"""Cart checkout: command and handler.

Checkout is the last thing that happens to a cart. The resulting
CartCheckedOut event carries the line snapshot and subtotal that the order
service turns into an order.
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
class CheckoutCart:
    cart_id = Identifier(required=True)
    actor_id = Integer(required=True, min_value=1)
    requested_at = DateTime()


@ordering.command_handler(part_of=Cart)
class CheckoutCartHandler:
    @handle(CheckoutCart)
    def checkout_cart(self, command):
        with bound_contextvars(cart_id=str(command.cart_id), actor_id=command.actor_id):
            repo = current_domain.repository_for(Cart)
            cart = repo.get(command.cart_id)
            cart.checkout(
                actor_id=command.actor_id,
                at=command.requested_at or datetime.now(UTC),
            )
            repo.add(cart)

            subtotal = cart.compute_subtotal()
            logger.info(
                "Cart checked out",
                customer_id=cart.customer_id,
                restaurant_id=cart.restaurant_id,
                item_count=len(cart.items),
                subtotal=str(subtotal),
            )
            return str(subtotal)
