# stockroom/listing.py
import locale
import logging
import unicodedata
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List

from stockroom.models import Product

logger = logging.getLogger(__name__)

SORT_KEYS = ("name", "price", "stock")


def _fold(text: str) -> str:
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch)).casefold()


def _name_key(p: Product):
    # accent-folded first so ordering holds even under the C locale
    return (locale.strxfrm(_fold(p.name)), locale.strxfrm(p.name.casefold()), locale.strxfrm(p.name))


_SORTERS: Dict[str, Callable[[Product], object]] = {
    "name": _name_key,
    "price": lambda p: p.price,
    "stock": lambda p: p.stock,
}


@dataclass
class ProductListView:
    """Search text and sort order for the product table."""

    search: str = ""
    sort_key: str = "name"
    ascending: bool = True

    def __post_init__(self):
        self.set_sort(self.sort_key)

    def set_sort(self, key: str):
        if key not in _SORTERS:
            raise ValueError(f"sort key must be one of {', '.join(SORT_KEYS)}, got {key!r}")
        self.sort_key = key

    def toggle_direction(self):
        self.ascending = not self.ascending

    def matches(self, product: Product) -> bool:
        q = self.search.strip().lower()
        if not q:
            return True
        return any(q in v.lower() for v in (product.name, product.sku, product.category or ""))

    def apply(self, products: Iterable[Product]) -> List[Product]:
        # sorted() is stable in both directions, so ties keep input order
        return sorted(
            (p for p in products if self.matches(p)),
            key=_SORTERS[self.sort_key],
            reverse=not self.ascending,
        )

    @staticmethod
    def summary(products: Iterable[Product]) -> Dict[str, float]:
        count = units = 0
        value = 0.0
        for p in products:
            count += 1
            units += p.stock
            value += p.price * p.stock
        return {"count": count, "units": units, "value": round(value, 2)}


def use_system_collation():
    """Collate names with the user's locale instead of the C default."""
    try:
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error as e:
        logger.warning("keeping default collation: %s", e)
