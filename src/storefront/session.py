"""Storefront session — wires the cart and checkout for one client session.

Usage:
    session = StorefrontSession.start()
    session.cart.add_item(product, 1)
    checkout = session.new_checkout(navigator=router.push)
"""

from storefront.auth import get_auth_gate
from storefront.auth.port import AuthGate
from storefront.cart.catalogue import ProductCatalog
from storefront.cart.storage import CartStorage, build_cart_storage
from storefront.cart.store import CartStore
from storefront.checkout.navigation import Navigator
from storefront.checkout.orchestrator import CheckoutOrchestrator
from storefront.config import StorefrontSettings, get_settings
from storefront.gateway import get_order_client
from storefront.gateway.port import OrderSubmissionClient
from storefront.utils.logging import configure_logging


class StorefrontSession:
    def __init__(
        self,
        cart: CartStore,
        auth_gate: AuthGate,
        order_client: OrderSubmissionClient,
        settings: StorefrontSettings,
        catalogue: ProductCatalog | None = None,
    ) -> None:
        self.cart = cart
        self.auth_gate = auth_gate
        self.order_client = order_client
        self.settings = settings
        self.catalogue = catalogue
        self._checkouts: list[CheckoutOrchestrator] = []

    @classmethod
    def start(
        cls,
        settings: StorefrontSettings | None = None,
        storage: CartStorage | None = None,
        catalogue: ProductCatalog | None = None,
    ) -> "StorefrontSession":
        """Open a session, restoring the persisted cart if there is one."""
        settings = settings or get_settings()
        if settings.configure_logs:
            configure_logging(settings.log_dir)
        storage = storage or build_cart_storage(settings)
        return cls(
            cart=CartStore.restore(storage),
            auth_gate=get_auth_gate(),
            order_client=get_order_client(),
            settings=settings,
            catalogue=catalogue,
        )

    def new_checkout(self, navigator: Navigator | None = None) -> CheckoutOrchestrator:
        orchestrator = CheckoutOrchestrator(
            self.cart,
            auth_gate=self.auth_gate,
            order_client=self.order_client,
            navigator=navigator,
            catalogue=self.catalogue,
            settings=self.settings,
        )
        self._checkouts.append(orchestrator)
        return orchestrator

    def close(self) -> None:
        """End the session. Open checkouts are disposed; the cart stays persisted."""
        for orchestrator in self._checkouts:
            orchestrator.dispose()
        self._checkouts.clear()
