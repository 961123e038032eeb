"""Domain events for the Cart aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from food_ordering.domain import ordering


@ordering.event(part_of="Cart")
class CartCreated:
    """A customer started a cart at a restaurant."""

    __version__ = "v1"

    cart_id = Identifier(required=True)
    customer_id = Integer(required=True)
    restaurant_id = Integer(required=True)
    created_by = Integer(required=True)
    created_at = DateTime(required=True)


@ordering.event(part_of="Cart")
class CartItemAdded:
    """A menu item was added to the cart as a new line."""

    __version__ = "v1"

    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)
    menu_item_id = Integer(required=True)
    quantity = Integer(required=True)
    unit_price = Float(required=True)
    total_price = Float(required=True)
    special_instructions = String(max_length=500)
    new_subtotal = Float(required=True)
    added_by = Integer(required=True)
    added_at = DateTime(required=True)


@ordering.event(part_of="Cart")
class CartItemQuantityUpdated:
    """The quantity of a cart line was changed and its total repriced."""

    __version__ = "v1"

    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)
    total_price = Float(required=True)
    new_subtotal = Float(required=True)
    updated_by = Integer(required=True)
    updated_at = DateTime(required=True)


@ordering.event(part_of="Cart")
class CartItemRemoved:
    """A line was removed from the cart."""

    __version__ = "v1"

    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)
    new_subtotal = Float(required=True)
    removed_by = Integer(required=True)
    removed_at = DateTime(required=True)


@ordering.event(part_of="Cart")
class CartCheckedOut:
    """The cart was finalized and handed over for order creation."""

    __version__ = "v1"

    cart_id = Identifier(required=True)
    customer_id = Integer(required=True)
    restaurant_id = Integer(required=True)
    items = Text(required=True)  # JSON: list of {item_id, menu_item_id, quantity, unit_price, total_price, ...}
    subtotal = Float(required=True)
    checked_out_by = Integer(required=True)
    checked_out_at = DateTime(required=True)


@ordering.event(part_of="Cart")
class CartCancelled:
    """The cart was abandoned by the customer and logically deleted."""

    __version__ = "v1"

    cart_id = Identifier(required=True)
    cancelled_by = Integer(required=True)
    cancelled_at = DateTime(required=True)
