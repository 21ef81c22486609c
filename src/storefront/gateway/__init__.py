"""Order backend factory.

Provides get_order_client() / set_order_client() to swap implementations:
- FakeOrderClient for development and testing
- HttpOrderClient for a real backend (``STOREFRONT_ORDER_BACKEND=http``)
"""

from storefront.auth import get_auth_gate
from storefront.config import get_settings
from storefront.gateway.fake_adapter import FakeOrderClient
from storefront.gateway.http_adapter import HttpOrderClient
from storefront.gateway.port import OrderSubmissionClient

_current_client: OrderSubmissionClient | None = None


def get_order_client() -> OrderSubmissionClient:
    """Return the current order backend, built from settings on first use."""
    global _current_client
    if _current_client is None:
        settings = get_settings()
        if settings.order_backend == "http":
            _current_client = HttpOrderClient(
                settings.api_url,
                auth_gate=get_auth_gate(),
                timeout=settings.submission_timeout,
            )
        else:
            _current_client = FakeOrderClient()
    return _current_client


def set_order_client(client: OrderSubmissionClient) -> None:
    """Override the active order backend (useful for tests)."""
    global _current_client
    _current_client = client


def reset_order_client() -> None:
    """Reset to default backend."""
    global _current_client
    _current_client = None


__all__ = [
    "FakeOrderClient",
    "HttpOrderClient",
    "OrderSubmissionClient",
    "get_order_client",
    "reset_order_client",
    "set_order_client",
]
