"""Cart view: current cart state for storefront rendering."""

import json

import structlog
from protean.core.projector import on
from protean.exceptions import ObjectNotFoundError
from protean.fields import DateTime, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from food_ordering.cart.cart import Cart, CartStatus
from food_ordering.cart.events import (
    CartCancelled,
    CartCheckedOut,
    CartCreated,
    CartItemAdded,
    CartItemQuantityUpdated,
    CartItemRemoved,
)
from food_ordering.domain import ordering

logger = structlog.get_logger(__name__)


@ordering.projection
class CartView:
    cart_id = Identifier(identifier=True, required=True)
    customer_id = Integer()
    restaurant_id = Integer()
    status = String(required=True)
    items = Text()  # JSON: list of {item_id, menu_item_id, quantity, unit_price, total_price, special_instructions}
    item_count = Integer(default=0)
    subtotal = Float(default=0.0)
    created_at = DateTime()
    updated_at = DateTime()
    updated_by = Integer()


@ordering.projector(projector_for=CartView, aggregates=[Cart])
class CartViewProjector:
    @on(CartCreated)
    def on_cart_created(self, event):
        view = CartView(
            cart_id=event.cart_id,
            customer_id=event.customer_id,
            restaurant_id=event.restaurant_id,
            status=CartStatus.ACTIVE.value,
            items="[]",
            item_count=0,
            subtotal=0.0,
            created_at=event.created_at,
            updated_at=event.created_at,
            updated_by=event.created_by,
        )
        current_domain.repository_for(CartView).add(view)

    @on(CartItemAdded)
    def on_item_added(self, event):
        repo = current_domain.repository_for(CartView)
        view = self._get_or_create_view(repo, event.cart_id)

        items = json.loads(view.items) if view.items else []
        items.append(
            {
                "item_id": str(event.item_id),
                "menu_item_id": event.menu_item_id,
                "quantity": event.quantity,
                "unit_price": event.unit_price,
                "total_price": event.total_price,
                "special_instructions": event.special_instructions,
            }
        )

        view.items = json.dumps(items)
        view.item_count = len(items)
        view.subtotal = event.new_subtotal
        view.updated_at = event.added_at
        view.updated_by = event.added_by
        repo.add(view)

    @on(CartItemQuantityUpdated)
    def on_quantity_updated(self, event):
        repo = current_domain.repository_for(CartView)
        view = self._get_or_create_view(repo, event.cart_id)
        items = json.loads(view.items) if view.items else []
        for item in items:
            if item.get("item_id") == str(event.item_id):
                item["quantity"] = event.new_quantity
                item["total_price"] = event.total_price
                break
        view.items = json.dumps(items)
        view.subtotal = event.new_subtotal
        view.updated_at = event.updated_at
        view.updated_by = event.updated_by
        repo.add(view)

    @on(CartItemRemoved)
    def on_item_removed(self, event):
        repo = current_domain.repository_for(CartView)
        view = self._get_or_create_view(repo, event.cart_id)
        items = json.loads(view.items) if view.items else []
        items = [i for i in items if i.get("item_id") != str(event.item_id)]
        view.items = json.dumps(items)
        view.item_count = len(items)
        view.subtotal = event.new_subtotal
        view.updated_at = event.removed_at
        view.updated_by = event.removed_by
        repo.add(view)

    @on(CartCheckedOut)
    def on_cart_checked_out(self, event):
        repo = current_domain.repository_for(CartView)
        view = self._get_or_create_view(repo, event.cart_id)
        view.status = CartStatus.CHECKED_OUT.value
        view.subtotal = event.subtotal
        view.updated_at = event.checked_out_at
        view.updated_by = event.checked_out_by
        repo.add(view)

    @on(CartCancelled)
    def on_cart_cancelled(self, event):
        repo = current_domain.repository_for(CartView)
        view = self._get_or_create_view(repo, event.cart_id)
        view.status = CartStatus.CANCELLED.value
        view.updated_at = event.cancelled_at
        view.updated_by = event.cancelled_by
        repo.add(view)

    @staticmethod
    def _get_or_create_view(repo, cart_id):
        try:
            return repo.get(cart_id)
        except ObjectNotFoundError:
            logger.warning("Cart view missing, rebuilding from event", cart_id=str(cart_id))
            return CartView(
                cart_id=cart_id,
                status=CartStatus.ACTIVE.value,
                items="[]",
                item_count=0,
                subtotal=0.0,
            )
