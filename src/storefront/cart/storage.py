"""Cart storage port and adapters.

Persisted cart state is a mapping ``product_id -> record`` where a record is
``{quantity, countInStock, unitPrice, name, imageRef}``. Mapping order is
cart insertion order.
"""

import copy
import json
from abc import ABC, abstractmethod
from pathlib import Path

import structlog

from storefront.config import StorefrontSettings

logger = structlog.get_logger(__name__)


class CartStorage(ABC):
    """Abstract key-value store for the cart."""

    @abstractmethod
    def load(self) -> dict[str, dict]:
        """Return the persisted mapping, or an empty dict."""
        ...

    @abstractmethod
    def save(self, records: dict[str, dict]) -> None:
        """Replace the persisted mapping."""
        ...

    @abstractmethod
    def clear(self) -> None:
        """Drop all persisted state."""
        ...


class InMemoryCartStorage(CartStorage):
    """Keeps the cart for the lifetime of the process only."""

    def __init__(self, records: dict[str, dict] | None = None) -> None:
        self._records: dict[str, dict] = copy.deepcopy(records or {})
        self.save_count = 0

    def load(self) -> dict[str, dict]:
        return copy.deepcopy(self._records)

    def save(self, records: dict[str, dict]) -> None:
        self._records = copy.deepcopy(records)
        self.save_count += 1

    def clear(self) -> None:
        self._records = {}


class JsonFileCartStorage(CartStorage):
    """Keeps the cart in a single JSON document on disk."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load(self) -> dict[str, dict]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Unreadable cart file, starting empty", path=str(self.path), error=str(exc))
            return {}
        if not isinstance(data, dict):
            logger.warning("Cart file does not hold a mapping, starting empty", path=str(self.path))
            return {}
        return data

    def save(self, records: dict[str, dict]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(records, ensure_ascii=False, indent=2), encoding="utf-8")
        tmp_path.replace(self.path)

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)


def build_cart_storage(settings: StorefrontSettings) -> CartStorage:
    """Pick the storage adapter configured for this process."""
    if settings.cart_storage_path:
        return JsonFileCartStorage(settings.cart_storage_path)
    return InMemoryCartStorage()
