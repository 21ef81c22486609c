import logging
from decimal import Decimal

import pytest
import structlog
from storefront.auth.port import UserIdentity
from storefront.auth.session import SessionAuthGate
from storefront.cart.entry import Product
from storefront.cart.storage import InMemoryCartStorage
from storefront.cart.store import CartStore
from storefront.checkout.orchestrator import CheckoutOrchestrator
from storefront.config import StorefrontSettings
from storefront.gateway.fake_adapter import FakeOrderClient
from storefront.utils.logging import clear_context


@pytest.fixture
def settings():
    return StorefrontSettings(
        _env_file=None,
        env="test",
        confirmation_delay=0.01,
        submission_timeout=1.0,
    )


@pytest.fixture
def product_a():
    return Product(id="prod-a", name="Linen shirt", price=Decimal("100"), count_in_stock=3, image="/uploads/a.jpg")


@pytest.fixture
def product_b():
    return Product(id="prod-b", name="Wool scarf", price=Decimal("45.50"), count_in_stock=10, image="/uploads/b.jpg")


@pytest.fixture
def storage():
    return InMemoryCartStorage()


@pytest.fixture
def cart(storage):
    return CartStore(storage=storage)


@pytest.fixture
def user():
    return UserIdentity(user_id="user-001", name="Anna", email="anna@example.com", token="tok-123")


@pytest.fixture
def auth_gate(user):
    return SessionAuthGate(user=user)


@pytest.fixture
def order_client():
    return FakeOrderClient()


@pytest.fixture
def navigations():
    return []


@pytest.fixture
def orchestrator(cart, auth_gate, order_client, navigations, settings):
    return CheckoutOrchestrator(
        cart,
        auth_gate=auth_gate,
        order_client=order_client,
        navigator=navigations.append,
        settings=settings,
    )


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers = handlers
    root.setLevel(level)
    structlog.reset_defaults()
    clear_context()
