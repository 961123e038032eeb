"""Shared BDD fixtures and step definitions for the Ordering domain."""

from datetime import UTC, datetime
from decimal import Decimal

import pytest
from food_ordering.cart.cart import Cart
from food_ordering.cart.events import (
    CartCancelled,
    CartCheckedOut,
    CartCreated,
    CartItemAdded,
    CartItemQuantityUpdated,
    CartItemRemoved,
)
from protean.exceptions import InvalidOperationError, ObjectNotFoundError, ValidationError
from pytest_bdd import given, parsers, then, when

NOW = datetime(2026, 3, 2, 18, 30, tzinfo=UTC)

# Map event name strings to classes for dynamic lookup in Then steps
_CART_EVENT_CLASSES = {
    "CartCreated": CartCreated,
    "CartItemAdded": CartItemAdded,
    "CartItemQuantityUpdated": CartItemQuantityUpdated,
    "CartItemRemoved": CartItemRemoved,
    "CartCheckedOut": CartCheckedOut,
    "CartCancelled": CartCancelled,
}


@pytest.fixture()
def error():
    """Container for the exception raised by a When step, if any."""
    return {"exc": None}


def _capture(error, action):
    try:
        action()
    except (ValidationError, InvalidOperationError, ObjectNotFoundError) as exc:
        error["exc"] = exc


def _line_for(cart, menu_item_id):
    return next(item for item in cart.lines if item.menu_item_id == menu_item_id)


def _add(cart, menu_item_id, quantity, price):
    cart.add_item(
        menu_item_id=menu_item_id,
        quantity=quantity,
        unit_price=Decimal(price),
        actor_id=cart.customer_id,
        at=NOW,
    )


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(
    parsers.cfparse("customer {customer_id:d} has an active cart at restaurant {restaurant_id:d}"),
    target_fixture="cart",
)
def active_cart(customer_id, restaurant_id):
    return Cart.create(customer_id=customer_id, restaurant_id=restaurant_id, actor_id=customer_id, at=NOW)


@given(parsers.cfparse("the customer added menu item {menu_item_id:d} with quantity {quantity:d} at {price}"))
def item_added(cart, menu_item_id, quantity, price):
    _add(cart, menu_item_id, quantity, price)


@given("the customer checked out")
def checked_out(cart):
    cart.checkout(actor_id=cart.customer_id, at=NOW)


@given("the customer cancelled the cart")
def cancelled(cart):
    cart.cancel(actor_id=cart.customer_id, at=NOW)


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(
    parsers.cfparse("customer {customer_id:d} starts a cart at restaurant {restaurant_id:d}"),
    target_fixture="cart",
)
def start_cart(customer_id, restaurant_id):
    return Cart.create(customer_id=customer_id, restaurant_id=restaurant_id, actor_id=customer_id, at=NOW)


@when(parsers.cfparse("the customer adds menu item {menu_item_id:d} with quantity {quantity:d} at {price}"))
def add_item(cart, error, menu_item_id, quantity, price):
    _capture(error, lambda: _add(cart, menu_item_id, quantity, price))


@when(parsers.cfparse("the customer changes the quantity of menu item {menu_item_id:d} to {quantity:d}"))
def change_quantity(cart, error, menu_item_id, quantity):
    item = _line_for(cart, menu_item_id)
    _capture(
        error,
        lambda: cart.update_item_quantity(item.id, quantity, actor_id=cart.customer_id, at=NOW),
    )


@when(parsers.cfparse("the customer removes menu item {menu_item_id:d}"))
def remove_item(cart, error, menu_item_id):
    item = _line_for(cart, menu_item_id)
    _capture(error, lambda: cart.remove_item(item.id, actor_id=cart.customer_id, at=NOW))


@when("the customer checks out")
def checkout(cart, error):
    _capture(error, lambda: cart.checkout(actor_id=cart.customer_id, at=NOW))


@when("the customer cancels the cart")
def cancel(cart, error):
    _capture(error, lambda: cart.cancel(actor_id=cart.customer_id, at=NOW))


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.re(r"the cart has (?P<count>\d+) items?"), converters={"count": int})
def cart_has_n_items(cart, count):
    assert len(cart.items) == count


@then(parsers.cfparse("the cart is {status}"))
def cart_status(cart, status):
    assert cart.status == status


@then(parsers.cfparse("the cart subtotal is {amount}"))
def cart_subtotal(cart, amount):
    assert cart.compute_subtotal() == Decimal(amount)


@then(parsers.cfparse("the line for menu item {menu_item_id:d} totals {amount}"))
def line_total(cart, menu_item_id, amount):
    assert Decimal(str(_line_for(cart, menu_item_id).total_price)) == Decimal(amount)


@then(parsers.cfparse("a {event_name} event is raised"))
def event_raised(cart, event_name):
    event_cls = _CART_EVENT_CLASSES[event_name]
    assert any(isinstance(e, event_cls) for e in cart._events)


@then("the action fails with an invalid argument")
def failed_with_invalid_argument(error):
    assert isinstance(error["exc"], ValidationError)


@then("the action fails with an invalid state")
def failed_with_invalid_state(error):
    assert isinstance(error["exc"], InvalidOperationError)
