"""HTTP order backend adapter.

POSTs the order draft to ``{base_url}/orders`` and maps the response:
2xx carries the created order (``_id`` or ``id``), anything else carries an
error body whose ``message`` is shown to the customer.
"""

from datetime import datetime
from typing import Any

import httpx
import structlog
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from storefront.auth.port import AuthGate
from storefront.checkout.order import OrderConfirmation, OrderDraft
from storefront.exceptions import SubmissionError, SubmissionErrorKind
from storefront.gateway.port import OrderSubmissionClient

logger = structlog.get_logger(__name__)

_timestamp = TypeAdapter(datetime)


class HttpOrderClient(OrderSubmissionClient):
    def __init__(self, base_url: str, auth_gate: AuthGate | None = None, timeout: float = 10.0) -> None:
        self.base_url = base_url.rstrip("/")
        self.auth_gate = auth_gate
        self.timeout = timeout

    def _get_headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        user = self.auth_gate.current_user() if self.auth_gate else None
        if user is not None and user.token:
            headers["Authorization"] = f"Bearer {user.token}"
        return headers

    async def create_order(self, draft: OrderDraft) -> OrderConfirmation:
        url = f"{self.base_url}/orders"
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(url, json=draft.to_payload(), headers=self._get_headers())
        except httpx.TimeoutException as exc:
            logger.warning("Order request timed out", url=url, error=str(exc))
            raise SubmissionError("The order service did not respond in time", kind=SubmissionErrorKind.TIMEOUT) from exc
        except httpx.HTTPError as exc:
            logger.warning("Order request failed", url=url, error=str(exc))
            raise SubmissionError(kind=SubmissionErrorKind.NETWORK) from exc

        body = _json_body(response)

        if response.is_error:
            message = body.get("message") if isinstance(body, dict) else None
            logger.info("Order rejected by backend", status_code=response.status_code, message=message)
            raise SubmissionError(message, kind=SubmissionErrorKind.REJECTED, status_code=response.status_code)

        order_id = (body.get("_id") or body.get("id")) if isinstance(body, dict) else None
        if not order_id:
            raise SubmissionError(
                "The order service returned an unexpected response",
                kind=SubmissionErrorKind.INVALID_RESPONSE,
                status_code=response.status_code,
            )

        logger.info("Order created", order_id=str(order_id))
        return OrderConfirmation(order_id=str(order_id), created_at=_created_at(body), raw=body)


def _created_at(body: dict) -> datetime | None:
    # The order is already created here, so an unparseable timestamp is dropped
    value = body.get("createdAt")
    if value is None:
        return None
    try:
        return _timestamp.validate_python(value)
    except PydanticValidationError:
        logger.warning("Ignoring unparseable order timestamp", created_at=str(value))
        return None


def _json_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None
