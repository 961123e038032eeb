"""Cart aggregate (CQRS): a customer's in-progress order at one restaurant.

The cart is a standard CQRS aggregate (not event sourced). It owns its line
items, snapshots each menu item's price when it is added, and ends either
checked out (handed over for order creation) or cancelled.

State Machine:
    ACTIVE → CHECKED_OUT
    ACTIVE → CANCELLED

Every mutating method takes the acting user and the time of the change as
arguments; the aggregate never reads the clock itself.
"""

import json
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import InvalidOperationError, ObjectNotFoundError, ValidationError
from protean.fields import DateTime, Float, HasMany, Integer, String

from food_ordering.cart.events import (
    CartCancelled,
    CartCheckedOut,
    CartCreated,
    CartItemAdded,
    CartItemQuantityUpdated,
    CartItemRemoved,
)
from food_ordering.cart.pricing import line_total, money_sum, to_money
from food_ordering.domain import ordering


class CartStatus(Enum):
    ACTIVE = "Active"
    CHECKED_OUT = "CheckedOut"
    CANCELLED = "Cancelled"


_VALID_TRANSITIONS = {
    CartStatus.ACTIVE: {CartStatus.CHECKED_OUT, CartStatus.CANCELLED},
    CartStatus.CHECKED_OUT: set(),  # Terminal
    CartStatus.CANCELLED: set(),  # Terminal
}


def _require_positive_id(field_name, value):
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValidationError({field_name: [f"{field_name} must be a positive integer"]})


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@ordering.entity(part_of="Cart")
class CartItem:
    """One line of a cart: a menu item, how many, and the price it was added at.

    ``unit_price`` is a snapshot, not a live catalogue lookup. ``total_price``
    is stored alongside it and recomputed on every quantity change.
    """

    line_number = Integer(required=True, min_value=1)
    menu_item_id = Integer(required=True, min_value=1)
    quantity = Integer(required=True, min_value=1)
    special_instructions = String(max_length=500)
    unit_price = Float(required=True, min_value=0.0)
    total_price = Float(required=True, min_value=0.0)
    created_at = DateTime()
    updated_at = DateTime()
    created_by = Integer()
    updated_by = Integer()


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@ordering.aggregate
class Cart:
    customer_id = Integer(required=True, min_value=1)
    restaurant_id = Integer(required=True, min_value=1)
    status = String(choices=CartStatus, default=CartStatus.ACTIVE.value)
    items = HasMany(CartItem)
    next_line_number = Integer(default=1)
    created_at = DateTime()
    updated_at = DateTime()
    created_by = Integer()
    updated_by = Integer()
    checked_out_at = DateTime()
    cancelled_at = DateTime()

    @invariant.post
    def line_totals_must_match_unit_price_times_quantity(self):
        for item in self.items:
            expected = line_total(item.unit_price, item.quantity)
            if to_money(item.total_price) != expected:
                raise ValidationError(
                    {"items": [f"Line {item.line_number} total {item.total_price} does not equal {expected}"]}
                )

    @invariant.post
    def checked_out_cart_must_have_items(self):
        if self.status == CartStatus.CHECKED_OUT.value and not self.items:
            raise ValidationError({"cart": ["A checked out cart must contain items"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, customer_id, restaurant_id, actor_id, at):
        """Start an empty, active cart for a customer at a restaurant."""
        _require_positive_id("customer_id", customer_id)
        _require_positive_id("restaurant_id", restaurant_id)
        _require_positive_id("actor_id", actor_id)

        cart = cls(
            customer_id=customer_id,
            restaurant_id=restaurant_id,
            status=CartStatus.ACTIVE.value,
            next_line_number=1,
            created_at=at,
            updated_at=at,
            created_by=actor_id,
            updated_by=actor_id,
        )

        cart.raise_(
            CartCreated(
                cart_id=str(cart.id),
                customer_id=customer_id,
                restaurant_id=restaurant_id,
                created_by=actor_id,
                created_at=at,
            )
        )
        return cart

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    def assert_active(self, action):
        """Raise InvalidOperationError unless the cart still accepts changes."""
        if CartStatus(self.status) != CartStatus.ACTIVE:
            raise InvalidOperationError(f"Cannot {action}: cart is {self.status}")

    def _assert_can_transition(self, target_status):
        current = CartStatus(self.status)
        if target_status not in _VALID_TRANSITIONS[current]:
            raise InvalidOperationError(f"Cannot transition cart from {current.value} to {target_status.value}")

    def _find_item(self, item_id):
        item = next((i for i in self.items if str(i.id) == str(item_id)), None)
        if item is None:
            raise ObjectNotFoundError(f"Item {item_id} not found in cart {self.id}")
        return item

    def _touch(self, actor_id, at):
        self.updated_at = at
        self.updated_by = actor_id

    @property
    def lines(self):
        """Items in the order they were added."""
        return sorted(self.items, key=lambda item: item.line_number)

    def compute_subtotal(self):
        """Sum of line totals. Never stored on the cart."""
        return money_sum(item.total_price for item in self.items)

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def add_item(
        self,
        menu_item_id,
        quantity,
        unit_price,
        actor_id,
        at,
        special_instructions=None,
        restaurant_id=None,
    ):
        """Append a new line. Repeated menu items are kept as separate lines.

        Args:
            restaurant_id: The restaurant the menu item belongs to, when the
                caller knows it. Must match the cart's restaurant.
        """
        self.assert_active("add items")

        _require_positive_id("menu_item_id", menu_item_id)
        _require_positive_id("actor_id", actor_id)
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be greater than zero"]})
        if restaurant_id is not None and restaurant_id != self.restaurant_id:
            raise ValidationError(
                {"restaurant_id": [f"Menu item belongs to restaurant {restaurant_id}, not {self.restaurant_id}"]}
            )
        if unit_price is None:
            raise ValidationError({"unit_price": ["Unit price is required"]})
        try:
            price = to_money(unit_price)
        except ValueError:
            raise ValidationError({"unit_price": [f"Invalid unit price: {unit_price!r}"]}) from None
        if price < 0:
            raise ValidationError({"unit_price": ["Unit price cannot be negative"]})

        item = CartItem(
            line_number=self.next_line_number,
            menu_item_id=menu_item_id,
            quantity=quantity,
            special_instructions=special_instructions,
            unit_price=float(price),
            total_price=float(line_total(price, quantity)),
            created_at=at,
            updated_at=at,
            created_by=actor_id,
            updated_by=actor_id,
        )

        with atomic_change(self):
            self.add_items(item)
            self.next_line_number += 1
            self._touch(actor_id, at)

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                item_id=str(item.id),
                menu_item_id=menu_item_id,
                quantity=quantity,
                unit_price=item.unit_price,
                total_price=item.total_price,
                special_instructions=special_instructions,
                new_subtotal=float(self.compute_subtotal()),
                added_by=actor_id,
                added_at=at,
            )
        )
        return item

    def update_item_quantity(self, item_id, new_quantity, actor_id, at):
        """Change a line's quantity and reprice it. Zero is rejected; use remove_item."""
        self.assert_active("update item quantities")

        _require_positive_id("actor_id", actor_id)
        if isinstance(new_quantity, bool) or not isinstance(new_quantity, int) or new_quantity <= 0:
            raise ValidationError({"new_quantity": ["Quantity must be greater than zero"]})
        item = self._find_item(item_id)

        previous_quantity = item.quantity
        with atomic_change(self):
            item.quantity = new_quantity
            item.total_price = float(line_total(item.unit_price, new_quantity))
            item.updated_at = at
            item.updated_by = actor_id
            self._touch(actor_id, at)

        self.raise_(
            CartItemQuantityUpdated(
                cart_id=str(self.id),
                item_id=str(item.id),
                previous_quantity=previous_quantity,
                new_quantity=new_quantity,
                total_price=item.total_price,
                new_subtotal=float(self.compute_subtotal()),
                updated_by=actor_id,
                updated_at=at,
            )
        )
        return item

    def remove_item(self, item_id, actor_id, at):
        """Remove a line from the cart."""
        self.assert_active("remove items")

        _require_positive_id("actor_id", actor_id)
        item = self._find_item(item_id)

        with atomic_change(self):
            self.remove_items(item)
            self._touch(actor_id, at)

        self.raise_(
            CartItemRemoved(
                cart_id=str(self.id),
                item_id=str(item_id),
                new_subtotal=float(self.compute_subtotal()),
                removed_by=actor_id,
                removed_at=at,
            )
        )

    # -------------------------------------------------------------------
    # Cart lifecycle
    # -------------------------------------------------------------------
    def checkout(self, actor_id, at):
        """Finalize the cart for order creation. Irreversible."""
        self._assert_can_transition(CartStatus.CHECKED_OUT)
        if not self.items:
            raise InvalidOperationError("Cannot check out an empty cart")
        _require_positive_id("actor_id", actor_id)

        items_snapshot = [
            {
                "item_id": str(item.id),
                "menu_item_id": item.menu_item_id,
                "quantity": item.quantity,
                "unit_price": item.unit_price,
                "total_price": item.total_price,
                "special_instructions": item.special_instructions,
            }
            for item in self.lines
        ]
        subtotal = self.compute_subtotal()

        with atomic_change(self):
            self.status = CartStatus.CHECKED_OUT.value
            self.checked_out_at = at
            self._touch(actor_id, at)

        self.raise_(
            CartCheckedOut(
                cart_id=str(self.id),
                customer_id=self.customer_id,
                restaurant_id=self.restaurant_id,
                items=json.dumps(items_snapshot),
                subtotal=float(subtotal),
                checked_out_by=actor_id,
                checked_out_at=at,
            )
        )
        return self

    def cancel(self, actor_id, at):
        """Cancel the cart. Items are kept; the cart is logically deleted."""
        self._assert_can_transition(CartStatus.CANCELLED)
        _require_positive_id("actor_id", actor_id)

        with atomic_change(self):
            self.status = CartStatus.CANCELLED.value
            self.cancelled_at = at
            self._touch(actor_id, at)

        self.raise_(
            CartCancelled(
                cart_id=str(self.id),
                cancelled_by=actor_id,
                cancelled_at=at,
            )
        )
        return self
