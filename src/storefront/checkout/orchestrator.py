"""Checkout orchestrator — sequences the customer from cart to placed order.

Flow:
    1. begin_checkout(): Browsing → AuthCheck. No user → back to Browsing and
       a login redirect with intent "checkout". Otherwise → AddressCollection.
    2. update_address(): edit the shipping address draft.
    3. place_order(): validate the address, freeze the cart into an
       OrderDraft and submit it (AddressCollection → Submitting).
    4a. Success → clear the cart, Confirmed, navigate to the order history
        after a short delay.
    4b. Failure → Failed → AddressCollection with the error message shown,
        the address kept and the cart untouched.

Only one submission can be in flight. A response that arrives after
dispose() or reset() is discarded.
"""

import asyncio
from enum import Enum

import structlog

from storefront.auth import get_auth_gate
from storefront.auth.port import AuthGate, UserIdentity
from storefront.cart.catalogue import ProductCatalog
from storefront.cart.store import CartStore
from storefront.checkout.address import ShippingAddress
from storefront.checkout.navigation import Navigation, Navigator, ScheduledNavigation
from storefront.checkout.order import OrderConfirmation, OrderDraft
from storefront.config import StorefrontSettings, get_settings
from storefront.exceptions import AuthRequiredError, SubmissionError, SubmissionErrorKind, ValidationError
from storefront.gateway import get_order_client
from storefront.gateway.port import OrderSubmissionClient

logger = structlog.get_logger(__name__)

CHECKOUT_INTENT = "checkout"
EMPTY_CART_MESSAGE = "Your cart is empty"
ORDER_SUCCESS_MESSAGE = "Order placed successfully!"
GENERIC_ORDER_ERROR = "An error occurred while placing the order"


class CheckoutState(Enum):
    BROWSING = "Browsing"
    AUTH_CHECK = "AuthCheck"
    ADDRESS_COLLECTION = "AddressCollection"
    SUBMITTING = "Submitting"
    CONFIRMED = "Confirmed"
    FAILED = "Failed"


def _ignore_navigation(navigation: Navigation) -> None:
    logger.debug("No navigator attached, dropping navigation", path=navigation.path)


class CheckoutOrchestrator:
    def __init__(
        self,
        cart: CartStore,
        auth_gate: AuthGate | None = None,
        order_client: OrderSubmissionClient | None = None,
        navigator: Navigator | None = None,
        catalogue: ProductCatalog | None = None,
        settings: StorefrontSettings | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.cart = cart
        self.auth_gate = auth_gate or get_auth_gate()
        self.order_client = order_client or get_order_client()
        self.navigator = navigator or _ignore_navigation
        self.catalogue = catalogue

        self.state = CheckoutState.BROWSING
        self.history: list[CheckoutState] = [CheckoutState.BROWSING]
        self.address = ShippingAddress()
        self.payment_method = self.settings.default_payment_method
        self.error: str | None = None
        self.success: str | None = None
        self.confirmation: OrderConfirmation | None = None

        self._generation = 0
        self._disposed = False
        self._in_flight = False
        self._pending_navigation: ScheduledNavigation | None = None

    # -------------------------------------------------------------------
    # Read helpers for the presentation layer
    # -------------------------------------------------------------------
    @property
    def is_submitting(self) -> bool:
        return self._in_flight

    @property
    def can_place_order(self) -> bool:
        return self.state == CheckoutState.ADDRESS_COLLECTION and not (self._disposed or self._in_flight)

    @property
    def pending_navigation(self) -> ScheduledNavigation | None:
        return self._pending_navigation

    # -------------------------------------------------------------------
    # Step 1: enter checkout
    # -------------------------------------------------------------------
    def begin_checkout(self) -> CheckoutState:
        if self._disposed:
            logger.warning("begin_checkout on a disposed orchestrator")
            return self.state
        if self.state != CheckoutState.BROWSING:
            return self.state

        self.error = None
        self.success = None

        if self.catalogue is not None:
            self._reconcile_with_catalogue()

        if self.cart.get_snapshot().is_empty:
            self.error = EMPTY_CART_MESSAGE
            return self.state

        self._transition(CheckoutState.AUTH_CHECK)
        try:
            user = self._require_user()
        except AuthRequiredError as exc:
            self._transition(CheckoutState.BROWSING)
            logger.info("Checkout requires login, redirecting", intent=exc.intent)
            self._navigate(Navigation(path=self.settings.login_path, redirect=exc.intent))
            return self.state

        self.address = ShippingAddress()
        self.payment_method = self.settings.default_payment_method
        self._transition(CheckoutState.ADDRESS_COLLECTION)
        logger.info("Checkout started", user_id=user.user_id)
        return self.state

    # -------------------------------------------------------------------
    # Step 2: shipping address
    # -------------------------------------------------------------------
    def update_address(self, **fields: str) -> ShippingAddress:
        """Edit the shipping address draft. Ignored outside address collection."""
        if self.state != CheckoutState.ADDRESS_COLLECTION:
            logger.warning("Address edit ignored", state=self.state.value)
            return self.address
        self.address = self.address.with_changes(**fields)
        return self.address

    # -------------------------------------------------------------------
    # Step 3: place the order
    # -------------------------------------------------------------------
    async def place_order(self) -> CheckoutState:
        if self._in_flight or self.state == CheckoutState.SUBMITTING:
            logger.info("Order submission already in flight, ignoring")
            return self.state
        if not self.can_place_order:
            logger.warning("place_order ignored", state=self.state.value)
            return self.state

        try:
            self.address.ensure_complete()
            draft = self._freeze_order()
        except ValidationError as exc:
            self.error = exc.message
            logger.info("Order validation failed", fields=sorted(exc.messages))
            return self.state

        self.error = None
        self.success = None
        self._transition(CheckoutState.SUBMITTING)
        generation = self._generation

        self._in_flight = True
        try:
            confirmation = await self._submit(draft)
        except SubmissionError as exc:
            if self._is_stale(generation):
                logger.info("Discarding failed submission for a closed checkout")
                return self.state
            self.error = exc.message or GENERIC_ORDER_ERROR
            self._transition(CheckoutState.FAILED)
            self._transition(CheckoutState.ADDRESS_COLLECTION)
            logger.warning("Order submission failed", kind=exc.kind.value, message=self.error)
            return self.state
        finally:
            self._in_flight = False

        if self._is_stale(generation):
            logger.info("Discarding order confirmation for a closed checkout", order_id=confirmation.order_id)
            return self.state

        self.cart.clear()
        self.confirmation = confirmation
        self.success = ORDER_SUCCESS_MESSAGE
        self._transition(CheckoutState.CONFIRMED)
        logger.info("Order placed", order_id=confirmation.order_id, total_price=str(draft.total_price))

        self._pending_navigation = ScheduledNavigation.schedule(
            self.settings.confirmation_delay,
            self._navigate,
            Navigation(path=self.settings.order_history_path),
        )
        return self.state

    # -------------------------------------------------------------------
    # Lifetime
    # -------------------------------------------------------------------
    def reset(self) -> None:
        """Leave checkout and start over at Browsing."""
        self._close()
        self.address = ShippingAddress()
        self.error = None
        self.success = None
        self.confirmation = None
        if self.state != CheckoutState.BROWSING:
            self._transition(CheckoutState.BROWSING)

    def dispose(self) -> None:
        """Tear down: cancel pending navigation and drop in-flight responses."""
        self._close()
        self._disposed = True

    # -------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------
    def _require_user(self) -> UserIdentity:
        user = self.auth_gate.current_user()
        if user is None:
            raise AuthRequiredError(intent=CHECKOUT_INTENT)
        return user

    def _reconcile_with_catalogue(self) -> None:
        snapshot = self.cart.get_snapshot()
        try:
            self.cart.reconcile(self.catalogue.get_products(snapshot.product_ids))
        except Exception:
            logger.exception("Catalogue reconciliation failed, keeping the cart as is")

    def _freeze_order(self) -> OrderDraft:
        snapshot = self.cart.get_snapshot()
        if snapshot.is_empty:
            raise ValidationError(EMPTY_CART_MESSAGE, {"cart": [EMPTY_CART_MESSAGE]})
        return OrderDraft.from_snapshot(snapshot, self.address, self.payment_method)

    async def _submit(self, draft: OrderDraft) -> OrderConfirmation:
        try:
            return await asyncio.wait_for(
                self.order_client.create_order(draft),
                timeout=self.settings.submission_timeout,
            )
        except TimeoutError as exc:
            raise SubmissionError(
                "The order service did not respond in time",
                kind=SubmissionErrorKind.TIMEOUT,
            ) from exc
        except SubmissionError:
            raise
        except Exception as exc:
            logger.exception("Order client raised an unexpected error")
            raise SubmissionError(kind=SubmissionErrorKind.NETWORK) from exc

    def _is_stale(self, generation: int) -> bool:
        return self._disposed or generation != self._generation

    def _close(self) -> None:
        self._generation += 1
        if self._pending_navigation is not None:
            self._pending_navigation.cancel()
            self._pending_navigation = None

    def _transition(self, new_state: CheckoutState) -> None:
        logger.debug("Checkout transition", from_state=self.state.value, to_state=new_state.value)
        self.state = new_state
        self.history.append(new_state)

    def _navigate(self, navigation: Navigation) -> None:
        self.navigator(navigation)
