"""Storefront context — client-side shopping cart and checkout.

Holds the cart state manager (CartStore) and the checkout orchestration
process (CheckoutOrchestrator) that turns a cart snapshot into an order on
the backend.
"""
