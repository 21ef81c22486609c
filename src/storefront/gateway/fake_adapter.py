"""Configurable fake order backend for development and testing.

Succeeds or fails on demand, records every call, and can hold responses
back until released so tests can observe a submission in flight.
"""

import asyncio
from datetime import UTC, datetime
from uuid import uuid4

from storefront.checkout.order import OrderConfirmation, OrderDraft
from storefront.exceptions import SubmissionError, SubmissionErrorKind
from storefront.gateway.port import OrderSubmissionClient


class FakeOrderClient(OrderSubmissionClient):
    """Configurable fake order backend."""

    def __init__(self) -> None:
        self.should_succeed: bool = True
        self.failure_message: str | None = "Out of stock"
        self.failure_kind: SubmissionErrorKind = SubmissionErrorKind.REJECTED
        self.calls: list[OrderDraft] = []
        self._release: asyncio.Event | None = None

    def configure(
        self,
        should_succeed: bool,
        failure_message: str | None = "Out of stock",
        failure_kind: SubmissionErrorKind = SubmissionErrorKind.REJECTED,
    ) -> None:
        """Configure backend behavior at runtime."""
        self.should_succeed = should_succeed
        self.failure_message = failure_message
        self.failure_kind = failure_kind

    def hold(self) -> None:
        """Hold responses until ``release()`` is called."""
        self._release = asyncio.Event()

    def release(self) -> None:
        if self._release is not None:
            self._release.set()

    async def create_order(self, draft: OrderDraft) -> OrderConfirmation:
        self.calls.append(draft)

        if self._release is not None:
            await self._release.wait()

        if self.should_succeed:
            order_id = f"fake_ord_{uuid4().hex[:12]}"
            return OrderConfirmation(
                order_id=order_id,
                created_at=datetime.now(UTC),
                raw={"_id": order_id, **draft.to_payload()},
            )
        raise SubmissionError(self.failure_message, kind=self.failure_kind)
