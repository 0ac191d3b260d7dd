# stockroom/client.py
import logging
from typing import Callable, Dict, List, Optional, TypeVar, Union

import httpx

from stockroom.config import ClientConfig
from stockroom.errors import RemoteUnavailable
from stockroom.models import Health, Product, ProductInput, ProductPatch
from stockroom.stores import LocalStore, RemoteStore, Store

logger = logging.getLogger(__name__)

T = TypeVar("T")


class StockroomClient:
    """
    CRUD over products that keeps working without a backend.

    Every call goes to the remote API first. When the API cannot be reached or
    answers with a non-2xx status, the same call is served by the local store
    instead. With ``sticky_fallback`` on, the first fallback keeps the client on
    the local store until reconnect() succeeds, so one session never shows
    records from both stores. ``last_source`` names the store that answered the
    most recent call.
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        remote: Optional[RemoteStore] = None,
        local: Optional[LocalStore] = None,
        http_client: Optional[httpx.Client] = None,
    ):
        self.config = config or ClientConfig.from_env()
        self.remote = remote or RemoteStore(self.config, client=http_client)
        self.local = local or LocalStore(self.config)
        self.offline = False
        self.last_source: Optional[str] = None

    def _call(self, op: str, run: Callable[[Store], T], attempts: int = 1) -> T:
        if not self.offline:
            error = None
            for attempt in range(1, attempts + 1):
                self.last_source = self.remote.name
                try:
                    return run(self.remote)
                except RemoteUnavailable as e:
                    error = e
                    logger.warning("%s: remote attempt %d/%d failed: %s", op, attempt, attempts, e)
            # only outages (no response, or 5xx) pin the session to the local store
            if self.config.sticky_fallback and (error.status_code is None or error.status_code >= 500):
                self.offline = True
            logger.warning("%s: falling back to local store", op)
        self.last_source = self.local.name
        return run(self.local)

    # Products
    def list_products(self) -> List[Product]:
        return self._call("list_products", lambda s: s.list_products(),
                          attempts=1 + max(self.config.read_retries, 0))

    def create_product(self, payload: Union[ProductInput, dict]) -> Product:
        payload = ProductInput.model_validate(payload)
        return self._call("create_product", lambda s: s.create_product(payload))

    def update_product(self, product_id: str, patch: Union[ProductPatch, dict]) -> Product:
        patch = ProductPatch.model_validate(patch)
        return self._call("update_product", lambda s: s.update_product(product_id, patch))

    def delete_product(self, product_id: str) -> Dict[str, str]:
        self._call("delete_product", lambda s: s.delete_product(product_id))
        return {"id": product_id}

    # Health
    def get_health(self) -> Health:
        return self.remote.health()

    def reconnect(self) -> bool:
        try:
            self.remote.health()
        except RemoteUnavailable as e:
            logger.info("remote still unavailable: %s", e)
            return False
        self.offline = False
        return True

    def close(self):
        self.remote.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
