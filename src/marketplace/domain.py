"""Marketplace bounded context: catalogue, carts, checkout and orders.

A single domain so that one Unit of Work spans products, the buyer's cart,
the order and the daily order counter during checkout.
"""

from protean.domain import Domain

marketplace = Domain(name="marketplace")
