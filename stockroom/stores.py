# stockroom/stores.py
"""
The two product stores behind StockroomClient.

RemoteStore talks to the REST API; LocalStore keeps a JSON list on disk
(the fallback store) and seeds it with sample data the first time it is
read empty. Neither one knows about the other.
"""
import json
import logging
import os
import random
import time
import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from stockroom.config import ClientConfig
from stockroom.decode import product_from, products_from
from stockroom.errors import ProductNotFound, RemoteUnavailable
from stockroom.models import Health, Product, ProductInput, ProductPatch, utc_now_iso

logger = logging.getLogger(__name__)


def new_id() -> str:
    try:
        return str(uuid.uuid4())
    except NotImplementedError:
        # no OS randomness source
        return f"{int(time.time() * 1000)}-{random.getrandbits(52):x}"


def seed_products(now: Optional[str] = None) -> List[Product]:
    now = now or utc_now_iso()
    return [
        Product(id=new_id(), name="Wireless Mouse", sku="WM-1001", price=25.99, stock=120,
                category="Accessories", created_at=now),
        Product(id=new_id(), name="Mechanical Keyboard", sku="MK-2002", price=79.0, stock=45,
                category="Accessories", created_at=now),
        Product(id=new_id(), name='27" Monitor', sku="MN-2700", price=239.99, stock=18,
                category="Displays", created_at=now),
    ]


class Store(ABC):
    name: str = ""

    @abstractmethod
    def list_products(self) -> List[Product]:
        """Return every product, newest first."""

    @abstractmethod
    def create_product(self, payload: ProductInput) -> Product:
        """Persist a new product and return it with id and createdAt set."""

    @abstractmethod
    def update_product(self, product_id: str, patch: ProductPatch) -> Product:
        """Merge the supplied fields into an existing product."""

    @abstractmethod
    def delete_product(self, product_id: str) -> None:
        """Remove a product."""


# ---------------------------
# Remote
# ---------------------------
class RemoteStore(Store):
    name = "remote"

    def __init__(self, config: ClientConfig, client: Optional[httpx.Client] = None):
        self.base_url = config.base_url.rstrip("/")
        self.client = client or httpx.Client(timeout=config.timeout)

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def _product_url(self, product_id: str) -> str:
        return self._url(f"/products/{quote(product_id, safe='')}")

    def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            r = self.client.request(method, url, **kwargs)
            r.raise_for_status()
        except httpx.HTTPStatusError as e:
            code = e.response.status_code
            raise RemoteUnavailable(f"{method} {url} returned HTTP {code}", status_code=code) from e
        except httpx.HTTPError as e:
            raise RemoteUnavailable(f"{method} {url} failed: {e}") from e
        return r

    def _json(self, r: httpx.Response) -> Any:
        try:
            return r.json()
        except ValueError as e:
            raise RemoteUnavailable(f"{r.request.method} {r.request.url} sent a non-JSON body") from e

    def health(self) -> Health:
        data = self._json(self._request("GET", self._url("/health")))
        try:
            return Health.model_validate(data)
        except ValidationError as e:
            raise RemoteUnavailable("invalid health payload") from e

    def list_products(self) -> List[Product]:
        return products_from(self._json(self._request("GET", self._url("/products"))))

    def create_product(self, payload: ProductInput) -> Product:
        r = self._request("POST", self._url("/products"), json=payload.model_dump(exclude_none=True))
        return product_from(self._json(r))

    def update_product(self, product_id: str, patch: ProductPatch) -> Product:
        r = self._request("PATCH", self._product_url(product_id), json=patch.changes())
        return product_from(self._json(r))

    def delete_product(self, product_id: str) -> None:
        self._request("DELETE", self._product_url(product_id))

    def close(self):
        self.client.close()


# ---------------------------
# Local
# ---------------------------
class LocalStorage:
    """A JSON object on disk mapping keys to values, used like browser localStorage."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def _load(self) -> Dict[str, Any]:
        try:
            raw = self.path.read_bytes()
        except FileNotFoundError:
            return {}
        try:
            data = json.loads(raw)
        except ValueError:
            # also covers UnicodeDecodeError
            logger.warning("ignoring unreadable storage file %s", self.path)
            return {}
        return data if isinstance(data, dict) else {}

    def get_item(self, key: str) -> Any:
        return self._load().get(key)

    def set_item(self, key: str, value: Any):
        data = self._load()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_name(self.path.name + ".tmp")
        tmp.write_text(json.dumps(data, indent=2), encoding="utf-8")
        os.replace(tmp, self.path)


class LocalStore(Store):
    name = "local"

    def __init__(self, config: ClientConfig, storage: Optional[LocalStorage] = None):
        self.key = config.storage_key
        self.storage = storage or LocalStorage(config.storage_path)

    def read(self) -> List[Product]:
        raw = self.storage.get_item(self.key)
        if not isinstance(raw, list):
            return []
        out = []
        for item in raw:
            try:
                out.append(Product.model_validate(item))
            except ValidationError:
                logger.warning("dropping malformed local product record: %r", item)
        return out

    def write(self, products: List[Product]):
        self.storage.set_item(self.key, [p.to_record() for p in products])

    def ensure_seed(self) -> List[Product]:
        existing = self.read()
        if existing:
            return existing
        seeded = seed_products()
        self.write(seeded)
        logger.info("seeded local store with %d sample products", len(seeded))
        return seeded

    def list_products(self) -> List[Product]:
        return self.ensure_seed()

    def create_product(self, payload: ProductInput) -> Product:
        product = Product(id=new_id(), created_at=utc_now_iso(), **payload.model_dump())
        products = self.read()
        products.insert(0, product)
        self.write(products)
        return product

    def update_product(self, product_id: str, patch: ProductPatch) -> Product:
        products = self.read()
        for idx, current in enumerate(products):
            if current.id == product_id:
                break
        else:
            raise ProductNotFound(product_id)
        updated = current.model_copy(update={**patch.changes(), "updated_at": utc_now_iso()})
        products[idx] = updated
        self.write(products)
        return updated

    def delete_product(self, product_id: str) -> None:
        products = self.read()
        self.write([p for p in products if p.id != product_id])
