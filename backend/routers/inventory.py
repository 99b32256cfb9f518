import logging
import math
from typing import Dict, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.auth import current_active_user
from core.config import settings
from core.units import coerce_amount, price_to_minor
from db.database import get_async_session
from db.inventory.item import InventoryItem as InventoryItemModel
from db.users import User
from schemas.inventory import InventoryItem, InventoryItemCreate, InventoryItemUpdate, Pagination

logger = logging.getLogger(__name__)

router = APIRouter()


def _item_out(model: InventoryItemModel) -> dict:
    return InventoryItem.from_model(model).to_wire()


def _owned_items(user: User):
    return select(InventoryItemModel).where(InventoryItemModel.user_id == user.id)


async def _get_owned_item(db: AsyncSession, user: User, item_id: UUID) -> InventoryItemModel:
    res = await db.execute(_owned_items(user).where(InventoryItemModel.id == item_id))
    model = res.scalar_one_or_none()
    if not model:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Item not found")
    return model


async def _commit_or_500(db: AsyncSession, action: str) -> None:
    try:
        await db.commit()
    except Exception:
        await db.rollback()
        logger.exception("[inventory] %s failed", action)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to {action} inventory item",
        )


@router.get("", response_model=Dict)
async def list_inventory_items(
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, alias="pageSize", ge=1),
    category: Optional[str] = None,
    q: Optional[str] = None,
    user: User = Depends(current_active_user),
    db: AsyncSession = Depends(get_async_session),
):
    """
    List the caller's items, most recently updated first.

    - pageSize defaults to INVENTORY_DEFAULT_PAGE_SIZE and is capped at INVENTORY_MAX_PAGE_SIZE.
    - category filters exactly; q is a case-insensitive name search.
    """
    page_size = min(page_size or settings.inventory_default_page_size, settings.inventory_max_page_size)

    stmt = _owned_items(user)
    if category:
        stmt = stmt.where(InventoryItemModel.category == category)
    if q and q.strip():
        qq = f"%{q.strip().lower()}%"
        stmt = stmt.where(func.lower(InventoryItemModel.name).like(qq))

    total = (await db.execute(select(func.count()).select_from(stmt.subquery()))).scalar_one()

    res = await db.execute(
        stmt.order_by(InventoryItemModel.updated_at.desc(), InventoryItemModel.id)
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    items = [_item_out(m) for m in res.scalars().all()]

    pagination = Pagination(
        page=page,
        page_size=page_size,
        total_items=total,
        total_pages=math.ceil(total / page_size),
    )
    return {
        "success": True,
        "data": items,
        "pagination": pagination.model_dump(by_alias=True),
    }


@router.get("/low-stock", response_model=Dict)
async def list_low_stock_items(
    user: User = Depends(current_active_user),
    db: AsyncSession = Depends(get_async_session),
):
    """Items at or below their minimum stock level, lowest quantity first."""
    res = await db.execute(
        _owned_items(user)
        .where(InventoryItemModel.quantity <= InventoryItemModel.min_stock)
        .order_by(InventoryItemModel.quantity.asc(), func.lower(InventoryItemModel.name).asc())
    )
    return {"success": True, "data": [_item_out(m) for m in res.scalars().all()]}


@router.get("/{item_id}", response_model=Dict)
async def get_inventory_item(
    item_id: UUID,
    user: User = Depends(current_active_user),
    db: AsyncSession = Depends(get_async_session),
):
    model = await _get_owned_item(db, user, item_id)
    return {"success": True, "data": _item_out(model)}


@router.post("", response_model=Dict, status_code=status.HTTP_201_CREATED)
async def create_inventory_item(
    payload: InventoryItemCreate,
    user: User = Depends(current_active_user),
    db: AsyncSession = Depends(get_async_session),
):
    model = InventoryItemModel(
        user_id=user.id,
        name=payload.name,
        category=payload.category,
        quantity=payload.quantity,
        unit=payload.unit,
        min_stock=payload.min_stock,
        price_minor=price_to_minor(payload.price),
        supplier=payload.supplier or None,
    )
    db.add(model)
    await _commit_or_500(db, "create")
    await db.refresh(model)
    logger.info("Created inventory item %s for user %s", model.id, user.id)
    return {
        "success": True,
        "data": _item_out(model),
        "message": "Inventory item created successfully",
    }


@router.patch("/{item_id}", response_model=Dict)
async def update_inventory_item(
    item_id: UUID,
    payload: InventoryItemUpdate,
    user: User = Depends(current_active_user),
    db: AsyncSession = Depends(get_async_session),
):
    model = await _get_owned_item(db, user, item_id)

    data = payload.model_dump(exclude_unset=True)
    if "name" in data and data["name"] is not None:
        model.name = data["name"]
    if "category" in data and data["category"] is not None:
        model.category = data["category"]
    if "unit" in data and data["unit"] is not None:
        model.unit = data["unit"]
    if "quantity" in data and data["quantity"] is not None:
        model.quantity = data["quantity"]
    if "min_stock" in data and data["min_stock"] is not None:
        model.min_stock = data["min_stock"]
    if "price" in data and data["price"] is not None:
        model.price_minor = price_to_minor(data["price"])
    if "supplier" in data:
        model.supplier = data["supplier"] or None

    # A unit switch or a fractional count must still land on whole numbers.
    model.quantity = coerce_amount(model.quantity or 0, model.unit)
    model.min_stock = coerce_amount(model.min_stock or 0, model.unit)
    model.updated_at = func.now()

    await _commit_or_500(db, "update")
    await db.refresh(model)
    return {
        "success": True,
        "data": _item_out(model),
        "message": "Inventory item updated successfully",
    }


@router.delete("/{item_id}", response_model=Dict)
async def delete_inventory_item(
    item_id: UUID,
    user: User = Depends(current_active_user),
    db: AsyncSession = Depends(get_async_session),
):
    model = await _get_owned_item(db, user, item_id)
    await db.delete(model)
    await _commit_or_500(db, "delete")
    logger.info("Deleted inventory item %s for user %s", item_id, user.id)
    return {"success": True, "message": "Inventory item deleted successfully"}
