# routers/inventory_routes.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from database import get_db
from schemas.position import PositionWithItem, QuantityOut
from services.inventory_service import get_current_quantity, get_position_with_item, list_positions_with_item

router = APIRouter(tags=["inventory"])


@router.get("/inventory", response_model=List[PositionWithItem])
def get_inventory(db: Session = Depends(get_db)):
    return list_positions_with_item(db)


@router.get("/inventory/{name_id}", response_model=PositionWithItem)
def get_inventory_item(name_id: int, db: Session = Depends(get_db)):
    position = get_position_with_item(db, name_id)
    if not position:
        raise HTTPException(status_code=404, detail="No inventory for this item")
    return position


@router.get("/inventory/{name_id}/quantity", response_model=QuantityOut)
def get_inventory_quantity(name_id: int, db: Session = Depends(get_db)):
    return QuantityOut(name_id=name_id, quantity=get_current_quantity(db, name_id))
