"""Food-delivery ordering: the restaurant-scoped shopping cart."""
