"""Product catalog endpoints."""

import logging
from decimal import Decimal
from typing import Annotated, Literal
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from rentflow.api.deps import get_current_admin, get_db, get_optional_user
from rentflow.core.exceptions import BadRequestError, NotFoundError, ValidationError
from rentflow.core.permissions import is_operator, require_operator
from rentflow.domain.stock import adjust_stock
from rentflow.models.booking import Booking
from rentflow.models.product import Product
from rentflow.models.user import User
from rentflow.schemas.product import (
    AvailabilityResponse,
    ProductCreate,
    ProductListResponse,
    ProductResponse,
    ProductUpdate,
    StockUpdateRequest,
    StockUpdateResponse,
)
from rentflow.schemas.reporting import ProductStatsResponse
from rentflow.services.reporting_service import reporting_service

logger = logging.getLogger(__name__)

router = APIRouter()

# Columns that cannot be cleared through an update
REQUIRED_FIELDS = frozenset(
    {"name", "description", "base_price", "unit", "stock", "total_stock", "condition",
     "amenities", "specifications", "tags", "popularity", "rating", "is_rentable", "is_active"}
)

SORT_COLUMNS = {
    "popularity": Product.popularity.desc(),
    "rating": Product.rating.desc(),
    "price_asc": Product.base_price.asc(),
    "price_desc": Product.base_price.desc(),
    "name": Product.name.asc(),
    "newest": Product.created_at.desc(),
}


async def _get_product(db: AsyncSession, product_id: UUID, lock: bool = False) -> Product:
    query = select(Product).where(Product.id == product_id)
    if lock:
        query = query.with_for_update()
    result = await db.execute(query)
    product = result.scalar_one_or_none()
    if not product:
        raise NotFoundError("Product", str(product_id))
    return product


@router.get("/", response_model=ProductListResponse)
async def list_products(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User | None, Depends(get_optional_user)],
    category: str | None = Query(default=None),
    search: str | None = Query(default=None, max_length=100),
    min_price: Decimal | None = Query(default=None, ge=0),
    max_price: Decimal | None = Query(default=None, ge=0),
    available_only: bool = Query(default=False),
    include_inactive: bool = Query(default=False),
    sort: Literal["popularity", "rating", "price_asc", "price_desc", "name", "newest"] = Query(
        default="popularity"
    ),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=100),
) -> ProductListResponse:
    """Browse the catalog. Inactive products are only listed for staff and admins."""
    query = select(Product)

    if not (include_inactive and is_operator(current_user)):
        query = query.where(Product.is_active.is_(True))
    if category:
        query = query.where(Product.category == category)
    if search:
        pattern = f"%{search.lower()}%"
        query = query.where(
            or_(
                func.lower(Product.name).like(pattern),
                func.lower(Product.description).like(pattern),
            )
        )
    if min_price is not None:
        query = query.where(Product.base_price >= min_price)
    if max_price is not None:
        query = query.where(Product.base_price <= max_price)
    if available_only:
        query = query.where(Product.is_rentable.is_(True), Product.stock > 0)

    count_result = await db.execute(select(func.count()).select_from(query.subquery()))
    total = count_result.scalar() or 0

    offset = (page - 1) * page_size
    result = await db.execute(
        query.order_by(SORT_COLUMNS[sort], Product.id).offset(offset).limit(page_size)
    )
    products = list(result.scalars().all())

    return ProductListResponse(
        products=[ProductResponse.model_validate(p) for p in products],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/admin/stats", response_model=ProductStatsResponse)
async def get_product_stats(
    _: Annotated[User, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """Catalog statistics for the admin dashboard."""
    return await reporting_service.get_product_stats(db)


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(
    product_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Product:
    """Get product details."""
    return await _get_product(db, product_id)


@router.get("/{product_id}/availability", response_model=AvailabilityResponse)
async def check_availability(
    product_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    quantity: int = Query(default=1, ge=1),
) -> AvailabilityResponse:
    """Whether the requested quantity can be rented right now, judged on current stock."""
    product = await _get_product(db, product_id)
    return AvailabilityResponse(
        available=product.is_active and product.is_rentable and quantity <= product.stock,
        stock=product.stock,
        total_stock=product.total_stock,
        requested_quantity=quantity,
    )


@router.post("/", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product(
    product_data: ProductCreate,
    _: Annotated[User, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Product:
    """Add a product to the catalog (admin only)."""
    product = Product(**product_data.model_dump())
    db.add(product)
    await db.flush()

    logger.info("Product %s created: %s (stock %d)", product.id, product.name, product.stock)
    return product


@router.put("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: UUID,
    updates: ProductUpdate,
    _: Annotated[User, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Product:
    """Update a product (admin only)."""
    product = await _get_product(db, product_id, lock=True)
    update_data = {
        field: value
        for field, value in updates.model_dump(exclude_unset=True).items()
        if value is not None or field not in REQUIRED_FIELDS
    }

    stock = update_data.get("stock", product.stock)
    total_stock = update_data.get("total_stock", product.total_stock)
    if stock > total_stock:
        raise ValidationError("Current stock cannot exceed total stock")

    for field, value in update_data.items():
        setattr(product, field, value)
    await db.flush()
    return product


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(
    product_id: UUID,
    _: Annotated[User, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> None:
    """Delete a product that no booking refers to (admin only)."""
    product = await _get_product(db, product_id)

    bookings = await db.scalar(
        select(func.count(Booking.id)).where(Booking.product_id == product.id)
    )
    if bookings:
        raise BadRequestError(
            "Product has bookings and cannot be deleted; deactivate it instead"
        )

    await db.delete(product)
    await db.flush()
    logger.info("Product %s deleted", product_id)


@router.patch("/{product_id}/stock", response_model=StockUpdateResponse)
async def update_stock(
    product_id: UUID,
    request: StockUpdateRequest,
    current_user: Annotated[User, Depends(require_operator)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Product:
    """Add to, subtract from or set a product's available stock (staff/admin)."""
    product = await _get_product(db, product_id, lock=True)
    previous = product.stock
    adjust_stock(product, request.quantity, request.operation)
    await db.flush()

    logger.info(
        "Stock for product %s changed %d -> %d by %s (%s %d)",
        product.id,
        previous,
        product.stock,
        current_user.id,
        request.operation.value,
        request.quantity,
    )
    return product
