# stockroom/models.py
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


def utc_now_iso() -> str:
    # same shape as JS toISOString(): millisecond precision, Z suffix
    now = datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


class ProductInput(BaseModel):
    name: str = Field(..., min_length=1)
    sku: str = Field(..., min_length=1)
    price: float = Field(..., ge=0)
    stock: int = Field(..., ge=0)
    category: Optional[str] = None


class ProductPatch(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    sku: Optional[str] = Field(None, min_length=1)
    price: Optional[float] = Field(None, ge=0)
    stock: Optional[int] = Field(None, ge=0)
    category: Optional[str] = None

    def changes(self) -> dict:
        """Only the fields the caller actually supplied."""
        data = self.model_dump(exclude_unset=True)
        # an explicit None only makes sense for the optional category
        return {k: v for k, v in data.items() if v is not None or k == "category"}


class Product(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    sku: str
    price: float = Field(..., ge=0)
    stock: int = Field(..., ge=0)
    category: Optional[str] = None
    created_at: str = Field(..., alias="createdAt")
    updated_at: Optional[str] = Field(None, alias="updatedAt")

    def to_record(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class Health(BaseModel):
    status: str
    uptime: float
    db: str
