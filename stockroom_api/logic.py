import uuid
from typing import Dict, Any, List
from fastapi import HTTPException

from .core import ProductIn, ProductPatchIn, _make_product_dict
from .database import PRODUCTS, _get_lock, uptime
from .models import now_iso

# This file contains the core logic for all API endpoints.

async def health_logic() -> Dict[str, Any]:
    return {"status": "ok", "uptime": uptime(), "db": "memory"}

async def list_products_logic() -> List[Dict[str, Any]]:
    # newest first, like the client's local store
    return list(reversed(list(PRODUCTS.values())))

async def get_product_logic(product_id: str) -> Dict[str, Any]:
    p = PRODUCTS.get(product_id)
    if not p:
        raise HTTPException(status_code=404, detail="Product not found")
    return p

async def create_product_logic(payload: ProductIn) -> Dict[str, Any]:
    async with _get_lock():
        pid = uuid.uuid4().hex
        PRODUCTS[pid] = _make_product_dict(pid, payload)
        return PRODUCTS[pid]

async def update_product_logic(product_id: str, patch: ProductPatchIn) -> Dict[str, Any]:
    async with _get_lock():
        p = PRODUCTS.get(product_id)
        if not p:
            raise HTTPException(status_code=404, detail="Product not found")
        for field, value in patch.model_dump(exclude_unset=True).items():
            if value is None:
                if field == "category":
                    p.pop("category", None)
                continue
            p[field] = value
        p["updatedAt"] = now_iso()
        return p

async def delete_product_logic(product_id: str) -> None:
    async with _get_lock():
        if PRODUCTS.pop(product_id, None) is None:
            raise HTTPException(status_code=404, detail="Product not found")

# Utility: reset (for tests/demo)
async def reset_all_logic() -> Dict[str, str]:
    PRODUCTS.clear()
    return {"status": "reset"}
