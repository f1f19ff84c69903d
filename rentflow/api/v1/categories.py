"""Category endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from rentflow.api.deps import get_current_admin, get_db
from rentflow.core.exceptions import BadRequestError, NotFoundError, ValidationError
from rentflow.models.product import Category, Product
from rentflow.models.user import User
from rentflow.schemas.product import (
    CategoryCreate,
    CategoryResponse,
    CategoryTreeNode,
    CategoryUpdate,
)
from rentflow.utils.identifiers import generate_category_slug

router = APIRouter()


async def _get_category(db: AsyncSession, category_id: UUID) -> Category:
    result = await db.execute(select(Category).where(Category.id == category_id))
    category = result.scalar_one_or_none()
    if not category:
        raise NotFoundError("Category", str(category_id))
    return category


async def _ensure_parent_exists(db: AsyncSession, parent_id: UUID) -> None:
    result = await db.execute(select(Category.id).where(Category.id == parent_id))
    if result.scalar_one_or_none() is None:
        raise BadRequestError("Parent category not found")


async def _ensure_name_free(db: AsyncSession, name: str, exclude_id: UUID | None = None) -> None:
    query = select(Category.id).where(func.lower(Category.name) == name.lower())
    if exclude_id:
        query = query.where(Category.id != exclude_id)
    if (await db.execute(query)).scalar_one_or_none() is not None:
        raise ValidationError("Category name already exists")


@router.get("/", response_model=list[CategoryResponse])
async def list_categories(
    db: Annotated[AsyncSession, Depends(get_db)],
    parent_id: UUID | None = Query(default=None),
    root_only: bool = Query(default=False),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=50, ge=1, le=100),
) -> list[Category]:
    """List active categories, optionally the children of one parent or top level only."""
    query = select(Category).where(Category.is_active.is_(True))
    if parent_id:
        query = query.where(Category.parent_id == parent_id)
    elif root_only:
        query = query.where(Category.parent_id.is_(None))

    offset = (page - 1) * page_size
    result = await db.execute(
        query.order_by(Category.sort_order, Category.name).offset(offset).limit(page_size)
    )
    return list(result.scalars().all())


@router.get("/tree", response_model=list[CategoryTreeNode])
async def get_category_tree(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[CategoryTreeNode]:
    """Active categories nested under their parents."""
    result = await db.execute(
        select(Category)
        .where(Category.is_active.is_(True))
        .order_by(Category.sort_order, Category.name)
    )
    categories = list(result.scalars().all())

    nodes = {c.id: CategoryTreeNode.model_validate(c) for c in categories}
    roots: list[CategoryTreeNode] = []
    for category in categories:
        node = nodes[category.id]
        parent = nodes.get(category.parent_id) if category.parent_id else None
        # Children of inactive parents surface at the top level
        if parent is None:
            roots.append(node)
        else:
            parent.children.append(node)
    return roots


@router.get("/{category_id}", response_model=CategoryResponse)
async def get_category(
    category_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Category:
    """Get a category by ID."""
    return await _get_category(db, category_id)


@router.post("/", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
async def create_category(
    category_data: CategoryCreate,
    _: Annotated[User, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Category:
    """Create a category (admin only)."""
    await _ensure_name_free(db, category_data.name)
    if category_data.parent_id:
        await _ensure_parent_exists(db, category_data.parent_id)

    category = Category(
        **category_data.model_dump(),
        slug=await generate_category_slug(db, category_data.name),
    )
    db.add(category)
    await db.flush()
    return category


@router.put("/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: UUID,
    updates: CategoryUpdate,
    _: Annotated[User, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Category:
    """Update a category (admin only)."""
    category = await _get_category(db, category_id)
    update_data = updates.model_dump(exclude_unset=True)

    parent_id = update_data.get("parent_id")
    if parent_id:
        if parent_id == category.id:
            raise BadRequestError("Category cannot be its own parent")
        await _ensure_parent_exists(db, parent_id)

    new_name = update_data.get("name")
    if new_name and new_name != category.name:
        await _ensure_name_free(db, new_name, exclude_id=category.id)
        category.slug = await generate_category_slug(db, new_name)

    for field, value in update_data.items():
        setattr(category, field, value)
    await db.flush()
    return category


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category(
    category_id: UUID,
    _: Annotated[User, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> None:
    """Delete a category that has no subcategories and no products."""
    category = await _get_category(db, category_id)

    subcategories = await db.scalar(
        select(func.count(Category.id)).where(Category.parent_id == category.id)
    )
    if subcategories:
        raise BadRequestError("Cannot delete category with subcategories")

    products = await db.scalar(
        select(func.count(Product.id)).where(Product.category == category.name)
    )
    if products:
        raise BadRequestError("Cannot delete category with products")

    await db.delete(category)
    await db.flush()
