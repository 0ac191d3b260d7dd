# stockroom_api/models.py
from datetime import datetime, timezone
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional

def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")

class Product(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    sku: str
    price: float
    stock: int
    category: Optional[str] = None
    created_at: str = Field(..., alias="createdAt")
    updated_at: Optional[str] = Field(None, alias="updatedAt")

class ErrorBody(BaseModel):
    code: str
    message: str
    details: Optional[object] = None

class ProductEnvelope(BaseModel):
    product: Product

class ProductList(BaseModel):
    products: List[Product]

class HealthOut(BaseModel):
    status: str
    uptime: float
    db: str
