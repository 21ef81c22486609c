"""Product catalogue port — source of current stock and prices.

Persisted carts carry the stock count and price seen when the product was
added. Before checkout they are refreshed from the catalogue so the order
reflects current data.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable

from storefront.cart.entry import Product


class ProductCatalog(ABC):
    @abstractmethod
    def get_products(self, product_ids: Iterable[str]) -> list[Product]:
        """Return current data for the given ids. Unknown ids are omitted."""
        ...


class InMemoryCatalog(ProductCatalog):
    """Dictionary-backed catalogue for development and testing."""

    def __init__(self, products: Iterable[Product] = ()) -> None:
        self._products: dict[str, Product] = {product.id: product for product in products}

    def put(self, product: Product) -> None:
        self._products[product.id] = product

    def get_products(self, product_ids: Iterable[str]) -> list[Product]:
        return [self._products[pid] for pid in product_ids if pid in self._products]
