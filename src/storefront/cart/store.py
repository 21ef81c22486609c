"""CartStore — the shopping cart state manager.

The store is an explicitly owned object: whoever needs the cart receives the
instance, and every change goes through the operations below. Entries are
kept in insertion order and never violate ``1 <= quantity <= count_in_stock``.

Quantities above the stock count are clamped rather than rejected. Stock is
a soft bound on the client; the backend does the authoritative check when
the order is created.
"""

from collections.abc import Callable, Iterable

import structlog
from pydantic import ValidationError as PydanticValidationError

from storefront.cart.entry import CartEntry, CartSnapshot, Product
from storefront.cart.events import (
    CartCleared,
    CartEvent,
    CartItemAdded,
    CartItemRemoved,
    CartQuantityUpdated,
    CartReconciled,
)
from storefront.cart.storage import CartStorage, InMemoryCartStorage

logger = structlog.get_logger(__name__)

CartListener = Callable[[CartEvent], None]


class CartStore:
    def __init__(self, storage: CartStorage | None = None, entries: Iterable[CartEntry] = ()) -> None:
        self._storage = storage or InMemoryCartStorage()
        self._entries: dict[str, CartEntry] = {entry.product_id: entry for entry in entries}
        self._listeners: list[CartListener] = []

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def restore(cls, storage: CartStorage) -> "CartStore":
        """Build a store from persisted state, skipping unusable records."""
        entries = []
        for product_id, record in storage.load().items():
            try:
                entries.append(CartEntry.from_record(product_id, record))
            except (KeyError, TypeError, PydanticValidationError) as exc:
                logger.warning("Skipping invalid persisted cart entry", product_id=product_id, error=str(exc))
        logger.debug("Cart restored", entry_count=len(entries))
        return cls(storage=storage, entries=entries)

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    def get_snapshot(self) -> CartSnapshot:
        return CartSnapshot(entries=tuple(self._entries.values()))

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, product_id: object) -> bool:
        return product_id in self._entries

    # -------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------
    def add_item(self, product: Product, quantity: int = 1) -> None:
        """Add ``quantity`` of ``product``, merging into an existing entry."""
        if product.count_in_stock == 0:
            logger.debug("Ignoring add of out-of-stock product", product_id=product.id)
            return
        if quantity < 1:
            logger.debug("Ignoring add with non-positive quantity", product_id=product.id, quantity=quantity)
            return

        existing = self._entries.get(product.id)
        requested = existing.quantity + quantity if existing else quantity
        new_quantity = min(requested, product.count_in_stock)
        if new_quantity < requested:
            logger.debug("Quantity clamped to stock", product_id=product.id, requested=requested, stock=new_quantity)

        entries = dict(self._entries)
        entries[product.id] = CartEntry.from_product(product, new_quantity)
        self._commit(
            entries,
            CartItemAdded(product_id=product.id, requested_quantity=quantity, new_quantity=new_quantity),
        )

    def update_quantity(self, product_id: str, new_quantity: int) -> None:
        """Set the quantity of an entry, clamped into ``[1, count_in_stock]``."""
        entry = self._entries.get(product_id)
        if entry is None:
            return

        clamped = max(1, min(new_quantity, entry.count_in_stock))
        if clamped != new_quantity:
            logger.debug("Quantity clamped", product_id=product_id, requested=new_quantity, applied=clamped)
        if clamped == entry.quantity:
            return

        entries = dict(self._entries)
        entries[product_id] = entry.replace(quantity=clamped)
        self._commit(
            entries,
            CartQuantityUpdated(product_id=product_id, previous_quantity=entry.quantity, new_quantity=clamped),
        )

    def increment(self, product_id: str) -> None:
        entry = self._entries.get(product_id)
        if entry is not None:
            self.update_quantity(product_id, entry.quantity + 1)

    def decrement(self, product_id: str) -> None:
        """Lower the quantity by one; an entry at quantity 1 is removed."""
        entry = self._entries.get(product_id)
        if entry is None:
            return
        if entry.quantity <= 1:
            self.remove_item(product_id)
        else:
            self.update_quantity(product_id, entry.quantity - 1)

    def remove_item(self, product_id: str) -> None:
        if product_id not in self._entries:
            return

        entries = dict(self._entries)
        del entries[product_id]
        self._commit(entries, CartItemRemoved(product_id=product_id))

    def clear(self) -> None:
        removed_count = len(self._entries)
        self._commit({}, CartCleared(removed_count=removed_count))

    def reconcile(self, products: Iterable[Product]) -> list[str]:
        """Refresh stale stock, price and name from current product data.

        Quantities above the new stock are clamped; entries whose product is
        now out of stock are dropped. Returns the ids that changed.
        """
        entries = dict(self._entries)
        updated, removed = [], []

        for product in products:
            entry = entries.get(product.id)
            if entry is None:
                continue
            if product.count_in_stock == 0:
                del entries[product.id]
                removed.append(product.id)
                continue

            refreshed = entry.replace(
                name=product.name,
                unit_price=product.price,
                count_in_stock=product.count_in_stock,
                quantity=min(entry.quantity, product.count_in_stock),
            )
            if refreshed != entry:
                entries[product.id] = refreshed
                updated.append(product.id)

        if updated or removed:
            logger.info("Cart reconciled with catalogue", updated=updated, removed=removed)
            self._commit(
                entries,
                CartReconciled(updated_product_ids=tuple(updated), removed_product_ids=tuple(removed)),
            )
        return updated + removed

    # -------------------------------------------------------------------
    # Subscriptions
    # -------------------------------------------------------------------
    def subscribe(self, listener: CartListener) -> Callable[[], None]:
        """Register ``listener`` for cart events. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # -------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------
    def _commit(self, entries: dict[str, CartEntry], event: CartEvent) -> None:
        # Swap the whole mapping so readers only ever see a fully applied change
        self._entries = entries
        self._persist()
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Cart listener failed", event_type=type(event).__name__)

    def _persist(self) -> None:
        records = {product_id: entry.to_record() for product_id, entry in self._entries.items()}
        try:
            self._storage.save(records)
        except OSError as exc:
            logger.error("Failed to persist cart", error=str(exc))
