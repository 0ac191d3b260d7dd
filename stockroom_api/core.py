from pydantic import BaseModel, Field
from typing import Optional, Dict, Any

from .models import now_iso

class ProductIn(BaseModel):
    name: str = Field(..., min_length=1)
    sku: str = Field(..., min_length=1)
    price: float = Field(..., ge=0)
    stock: int = Field(..., ge=0)
    category: Optional[str] = None

class ProductPatchIn(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    sku: Optional[str] = Field(None, min_length=1)
    price: Optional[float] = Field(None, ge=0)
    stock: Optional[int] = Field(None, ge=0)
    category: Optional[str] = None

def _make_product_dict(product_id: str, p: ProductIn) -> Dict[str, Any]:
    product = {
        "id": product_id,
        "name": p.name,
        "sku": p.sku,
        "price": p.price,
        "stock": p.stock,
        "createdAt": now_iso(),
    }
    if p.category is not None:
        product["category"] = p.category
    return product
