"""Catalog Pydantic schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from rentflow.domain.stock import StockOperation

RentalUnit = Literal["hour", "day", "week", "month"]
ProductCondition = Literal["excellent", "good", "fair", "damaged"]


def _clean_list(values: list[str] | None) -> list[str] | None:
    if values is None:
        return None
    return [v.strip() for v in values if v and v.strip()]


def _clean_specifications(values: dict[str, str] | None) -> dict[str, str] | None:
    if values is None:
        return None
    return {
        key.strip(): value.strip()
        for key, value in values.items()
        if key.strip() and value.strip()
    }


class ProductBase(BaseModel):
    """Fields shared by create and update payloads."""

    category: str | None = Field(None, max_length=100)
    subcategory: str | None = Field(None, max_length=100)
    location: str | None = Field(None, max_length=200)
    notes: str | None = Field(None, max_length=1000)

    @field_validator("amenities", mode="after", check_fields=False)
    @classmethod
    def clean_amenities(cls, v: list[str] | None) -> list[str] | None:
        return _clean_list(v)

    @field_validator("tags", mode="after", check_fields=False)
    @classmethod
    def clean_tags(cls, v: list[str] | None) -> list[str] | None:
        cleaned = _clean_list(v)
        return [t.lower() for t in cleaned] if cleaned is not None else None

    @field_validator("specifications", mode="after", check_fields=False)
    @classmethod
    def clean_specifications(cls, v: dict[str, str] | None) -> dict[str, str] | None:
        return _clean_specifications(v)


class ProductCreate(ProductBase):
    """Schema for creating a product."""

    name: str = Field(..., min_length=2, max_length=200)
    description: str = Field(..., min_length=10, max_length=2000)
    base_price: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    unit: RentalUnit = "day"
    stock: int = Field(..., ge=0)
    total_stock: int = Field(..., ge=0)
    amenities: list[str] = Field(default_factory=list)
    specifications: dict[str, str] = Field(default_factory=dict)
    tags: list[str] = Field(default_factory=list)
    condition: ProductCondition = "excellent"
    popularity: int = Field(default=0, ge=0, le=100)
    rating: float = Field(default=0, ge=0, le=5)
    is_rentable: bool = True
    is_active: bool = True

    @model_validator(mode="after")
    def check_stock(self) -> "ProductCreate":
        if self.stock > self.total_stock:
            raise ValueError("Current stock cannot exceed total stock")
        return self


class ProductUpdate(ProductBase):
    """Schema for updating a product. Stock bounds are checked against the stored row."""

    name: str | None = Field(None, min_length=2, max_length=200)
    description: str | None = Field(None, min_length=10, max_length=2000)
    base_price: Decimal | None = Field(None, ge=0, max_digits=12, decimal_places=2)
    unit: RentalUnit | None = None
    stock: int | None = Field(None, ge=0)
    total_stock: int | None = Field(None, ge=0)
    amenities: list[str] | None = None
    specifications: dict[str, str] | None = None
    tags: list[str] | None = None
    condition: ProductCondition | None = None
    popularity: int | None = Field(None, ge=0, le=100)
    rating: float | None = Field(None, ge=0, le=5)
    is_rentable: bool | None = None
    is_active: bool | None = None


class ProductResponse(BaseModel):
    """Schema for product response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    description: str
    category: str | None
    subcategory: str | None
    location: str | None
    notes: str | None
    base_price: Decimal
    unit: str
    stock: int
    total_stock: int
    amenities: list[str]
    specifications: dict[str, str]
    tags: list[str]
    condition: str
    popularity: int
    rating: float
    review_count: int
    is_rentable: bool
    is_active: bool
    is_available: bool
    stock_percentage: int
    created_at: datetime
    updated_at: datetime


class ProductListResponse(BaseModel):
    products: list[ProductResponse]
    total: int
    page: int
    page_size: int


class StockUpdateRequest(BaseModel):
    """Schema for a direct stock adjustment."""

    quantity: int = Field(..., ge=0)
    operation: StockOperation = StockOperation.SET


class StockUpdateResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    stock: int
    total_stock: int


class AvailabilityResponse(BaseModel):
    """Stock-only availability answer for a product."""

    available: bool
    stock: int
    total_stock: int
    requested_quantity: int


class CategoryCreate(BaseModel):
    """Schema for creating a category."""

    name: str = Field(..., min_length=2, max_length=100)
    description: str | None = Field(None, max_length=500)
    image_url: str | None = None
    parent_id: UUID | None = None
    is_active: bool = True
    sort_order: int = 0


class CategoryUpdate(BaseModel):
    name: str | None = Field(None, min_length=2, max_length=100)
    description: str | None = Field(None, max_length=500)
    image_url: str | None = None
    parent_id: UUID | None = None
    is_active: bool | None = None
    sort_order: int | None = None


class CategoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    slug: str
    description: str | None
    image_url: str | None
    parent_id: UUID | None
    is_active: bool
    sort_order: int
    created_at: datetime


class CategoryTreeNode(CategoryResponse):
    children: list["CategoryTreeNode"] = Field(default_factory=list)
