# stockroom/errors.py
from typing import Optional


class StockroomError(Exception):
    pass


class RemoteUnavailable(StockroomError):
    """The API could not be reached, answered non-2xx, or sent an unreadable body."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ProductNotFound(StockroomError, KeyError):
    def __init__(self, product_id: str):
        super().__init__(f"Product not found: {product_id}")
        self.product_id = product_id

    def __str__(self) -> str:
        return self.args[0]
