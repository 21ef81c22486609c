"""Application tests for CheckoutOrchestrator — the happy path and its gates.

Covers:
- Unauthenticated checkout redirects to login with intent "checkout"
- Address validation keeps the customer in address collection
- Successful submission clears the cart and navigates after a delay
- Failed submission keeps the cart and the address for a retry
"""

import asyncio
from decimal import Decimal

from storefront.auth.session import SessionAuthGate
from storefront.cart.catalogue import InMemoryCatalog, ProductCatalog
from storefront.cart.entry import Product
from storefront.cart.events import CartCleared
from storefront.checkout.address import MISSING_ADDRESS_FIELD
from storefront.checkout.navigation import Navigation
from storefront.checkout.orchestrator import (
    EMPTY_CART_MESSAGE,
    GENERIC_ORDER_ERROR,
    ORDER_SUCCESS_MESSAGE,
    CheckoutOrchestrator,
    CheckoutState,
)
from storefront.exceptions import SubmissionErrorKind

VALID_ADDRESS = {"address": "Tverskaya 1", "city": "Moscow", "postal_code": "101000", "country": "RU"}


def _fill_address(orchestrator, **overrides):
    orchestrator.update_address(**{**VALID_ADDRESS, **overrides})


class UnreachableCatalog(ProductCatalog):
    def get_products(self, product_ids):
        raise ConnectionError("catalogue unavailable")


class TestBeginCheckout:
    def test_authenticated_user_reaches_address_collection(self, orchestrator, cart, product_a):
        cart.add_item(product_a, 1)

        assert orchestrator.begin_checkout() == CheckoutState.ADDRESS_COLLECTION
        assert orchestrator.history == [
            CheckoutState.BROWSING,
            CheckoutState.AUTH_CHECK,
            CheckoutState.ADDRESS_COLLECTION,
        ]
        assert orchestrator.address.missing_fields() == ["address", "city", "postal_code", "country"]
        assert orchestrator.payment_method == "Cash on delivery"

    def test_unauthenticated_user_is_redirected_to_login(self, cart, order_client, navigations, settings, product_a):
        cart.add_item(product_a, 3)
        orchestrator = CheckoutOrchestrator(
            cart,
            auth_gate=SessionAuthGate(),
            order_client=order_client,
            navigator=navigations.append,
            settings=settings,
        )

        state = orchestrator.begin_checkout()

        assert state == CheckoutState.BROWSING
        assert CheckoutState.ADDRESS_COLLECTION not in orchestrator.history
        assert navigations == [Navigation(path="/login", redirect="checkout")]
        assert orchestrator.error is None
        snapshot = cart.get_snapshot()
        assert snapshot.product_ids == ["prod-a"]
        assert snapshot.get("prod-a").quantity == 3

    def test_empty_cart_does_not_enter_checkout(self, orchestrator, navigations):
        assert orchestrator.begin_checkout() == CheckoutState.BROWSING
        assert orchestrator.error == EMPTY_CART_MESSAGE
        assert navigations == []

    def test_catalogue_failure_keeps_unreconciled_cart(self, cart, auth_gate, order_client, settings, product_a):
        cart.add_item(product_a, 2)
        orchestrator = CheckoutOrchestrator(
            cart, auth_gate=auth_gate, order_client=order_client, catalogue=UnreachableCatalog(), settings=settings
        )

        assert orchestrator.begin_checkout() == CheckoutState.ADDRESS_COLLECTION
        assert cart.get_snapshot().get("prod-a").quantity == 2

    def test_begin_twice_keeps_address(self, orchestrator, cart, product_a):
        cart.add_item(product_a, 1)
        orchestrator.begin_checkout()
        orchestrator.update_address(city="Moscow")

        assert orchestrator.begin_checkout() == CheckoutState.ADDRESS_COLLECTION
        assert orchestrator.address.city == "Moscow"

    def test_cart_is_reconciled_with_catalogue(self, cart, auth_gate, order_client, settings, product_a):
        cart.add_item(product_a, 3)
        catalogue = InMemoryCatalog(
            [Product(id="prod-a", name="Linen shirt", price=Decimal("100"), count_in_stock=2)]
        )
        orchestrator = CheckoutOrchestrator(
            cart, auth_gate=auth_gate, order_client=order_client, catalogue=catalogue, settings=settings
        )

        orchestrator.begin_checkout()

        assert cart.get_snapshot().get("prod-a").quantity == 2

    def test_sold_out_cart_stays_browsing(self, cart, auth_gate, order_client, settings, product_a):
        cart.add_item(product_a, 1)
        catalogue = InMemoryCatalog([product_a.model_copy(update={"count_in_stock": 0})])
        orchestrator = CheckoutOrchestrator(
            cart, auth_gate=auth_gate, order_client=order_client, catalogue=catalogue, settings=settings
        )

        assert orchestrator.begin_checkout() == CheckoutState.BROWSING
        assert orchestrator.error == EMPTY_CART_MESSAGE


class TestAddressValidation:
    async def test_missing_field_keeps_address_collection(self, orchestrator, cart, order_client, product_a):
        cart.add_item(product_a, 1)
        orchestrator.begin_checkout()
        _fill_address(orchestrator, address="")

        state = await orchestrator.place_order()

        assert state == CheckoutState.ADDRESS_COLLECTION
        assert orchestrator.error == MISSING_ADDRESS_FIELD
        assert CheckoutState.SUBMITTING not in orchestrator.history
        assert orchestrator.address.city == "Moscow"
        assert orchestrator.address.postal_code == "101000"
        assert orchestrator.address.country == "RU"
        assert order_client.calls == []

    async def test_every_field_is_required(self, orchestrator, cart, order_client, product_a):
        cart.add_item(product_a, 1)
        orchestrator.begin_checkout()

        for field in VALID_ADDRESS:
            _fill_address(orchestrator, **{field: ""})
            assert await orchestrator.place_order() == CheckoutState.ADDRESS_COLLECTION

        assert order_client.calls == []

    def test_address_edits_are_ignored_outside_checkout(self, orchestrator):
        orchestrator.update_address(city="Moscow")
        assert orchestrator.address.city == ""


class TestSuccessfulSubmission:
    async def test_confirmation_clears_cart(self, orchestrator, cart, order_client, product_a, product_b):
        cart.add_item(product_a, 3)
        cart.add_item(product_b, 2)
        orchestrator.begin_checkout()
        _fill_address(orchestrator)

        state = await orchestrator.place_order()

        assert state == CheckoutState.CONFIRMED
        assert cart.get_snapshot().is_empty
        assert orchestrator.success == ORDER_SUCCESS_MESSAGE
        assert orchestrator.error is None
        assert orchestrator.confirmation.order_id.startswith("fake_ord_")

    async def test_submitted_draft_is_a_copy_of_the_cart(self, orchestrator, cart, order_client, product_a):
        cart.add_item(product_a, 2)
        cart.update_quantity("prod-a", 5)
        orchestrator.begin_checkout()
        _fill_address(orchestrator)

        await orchestrator.place_order()

        draft = order_client.calls[0]
        assert draft.items[0].quantity == 3
        assert draft.total_price == Decimal("300")
        assert draft.shipping_address.city == "Moscow"
        assert draft.payment_method == "Cash on delivery"

    async def test_navigates_to_order_history_after_delay(self, orchestrator, cart, navigations, product_a):
        cart.add_item(product_a, 1)
        orchestrator.begin_checkout()
        _fill_address(orchestrator)

        await orchestrator.place_order()
        assert navigations == []
        assert orchestrator.pending_navigation.pending

        await asyncio.sleep(0.05)
        assert navigations == [Navigation(path="/profile")]

    async def test_failing_cart_listener_does_not_block_confirmation(self, orchestrator, cart, product_a):
        cleared = []

        def listener(event):
            if isinstance(event, CartCleared):
                cleared.append(event)
                raise RuntimeError("badge renderer crashed")

        cart.add_item(product_a, 1)
        cart.subscribe(listener)
        orchestrator.begin_checkout()
        _fill_address(orchestrator)

        assert await orchestrator.place_order() == CheckoutState.CONFIRMED
        assert len(cleared) == 1
        assert cart.get_snapshot().is_empty
        assert orchestrator.pending_navigation is not None


class TestFailedSubmission:
    async def test_backend_message_is_shown_verbatim(self, orchestrator, cart, order_client, product_a):
        cart.add_item(product_a, 3)
        order_client.configure(should_succeed=False, failure_message="Out of stock")
        orchestrator.begin_checkout()
        _fill_address(orchestrator)
        before = cart.get_snapshot()

        state = await orchestrator.place_order()

        assert state == CheckoutState.ADDRESS_COLLECTION
        assert orchestrator.error == "Out of stock"
        assert orchestrator.history[-3:] == [
            CheckoutState.SUBMITTING,
            CheckoutState.FAILED,
            CheckoutState.ADDRESS_COLLECTION,
        ]
        assert cart.get_snapshot() == before
        assert orchestrator.address.city == "Moscow"

    async def test_missing_message_falls_back_to_generic(self, orchestrator, cart, order_client, product_a):
        cart.add_item(product_a, 1)
        order_client.configure(should_succeed=False, failure_message=None, failure_kind=SubmissionErrorKind.NETWORK)
        orchestrator.begin_checkout()
        _fill_address(orchestrator)

        await orchestrator.place_order()

        assert orchestrator.error == GENERIC_ORDER_ERROR

    async def test_retry_after_failure(self, orchestrator, cart, order_client, navigations, product_a):
        cart.add_item(product_a, 1)
        order_client.configure(should_succeed=False)
        orchestrator.begin_checkout()
        _fill_address(orchestrator)
        await orchestrator.place_order()

        order_client.configure(should_succeed=True)
        orchestrator.update_address(address="Tverskaya 2")
        state = await orchestrator.place_order()

        assert state == CheckoutState.CONFIRMED
        assert len(order_client.calls) == 2
        assert order_client.calls[1].shipping_address.address == "Tverskaya 2"
        assert orchestrator.error is None

    async def test_no_automatic_retry(self, orchestrator, cart, order_client, product_a):
        cart.add_item(product_a, 1)
        order_client.configure(should_succeed=False)
        orchestrator.begin_checkout()
        _fill_address(orchestrator)

        await orchestrator.place_order()

        assert len(order_client.calls) == 1
