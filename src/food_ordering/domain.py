"""Ordering bounded context: the customer's shopping cart for one restaurant.

Handles cart lifecycle (Active → CheckedOut / Cancelled), line item pricing,
and the cart view read model consumed by storefront screens.
"""

from protean.domain import Domain

from food_ordering.utils.logging import configure_logging, get_logger

configure_logging()

logger = get_logger(__name__)

ordering = Domain(name="ordering")
