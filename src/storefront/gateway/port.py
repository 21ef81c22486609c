"""Order submission port (abstract interface).

Defines the contract every order backend adapter implements, so the
checkout flow can run against FakeOrderClient (dev/test) or HttpOrderClient
(production) unchanged.
"""

from abc import ABC, abstractmethod

from storefront.checkout.order import OrderConfirmation, OrderDraft


class OrderSubmissionClient(ABC):
    """Abstract order backend."""

    @abstractmethod
    async def create_order(self, draft: OrderDraft) -> OrderConfirmation:
        """Create an order from ``draft``.

        Raises:
            SubmissionError: the backend rejected the order or was unreachable.
        """
        ...
