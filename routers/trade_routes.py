# routers/trade_routes.py
from __future__ import annotations

from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from database import get_db
from schemas.trade import SellCreate, TradeCreate, TradeOut, TradeWithItem
from services.errors import LedgerError
from services.trade_service import (
    create_sell_trade,
    create_trade,
    get_trade_history_with_item,
    get_trades_by_date_range_with_item,
    list_trades_with_item,
    reverse_trade,
)

router = APIRouter(tags=["trades"])


@router.post("/trades", response_model=TradeOut, status_code=status.HTTP_201_CREATED)
def save_trade(payload: TradeCreate, db: Session = Depends(get_db)):
    try:
        return create_trade(
            db,
            name_id=payload.name_id,
            type=payload.type,
            unit_price=payload.unit_price,
            quantity=payload.quantity,
            platform=payload.platform,
            counterparty=payload.counterparty,
            occurred_at=payload.occurred_at,
        )
    except LedgerError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc))


@router.post("/trades/sell", response_model=TradeOut, status_code=status.HTTP_201_CREATED)
def save_sell_trade(payload: SellCreate, db: Session = Depends(get_db)):
    try:
        return create_sell_trade(
            db,
            name_id=payload.name_id,
            unit_price=payload.unit_price,
            quantity=payload.quantity,
            platform=payload.platform,
            counterparty=payload.counterparty,
            occurred_at=payload.occurred_at,
        )
    except LedgerError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc))


@router.get("/trades", response_model=List[TradeWithItem])
def get_trades(db: Session = Depends(get_db)):
    return list_trades_with_item(db)


@router.get("/trades/history/{name_id}", response_model=List[TradeWithItem])
def get_trade_history(name_id: int, db: Session = Depends(get_db)):
    return get_trade_history_with_item(db, name_id)


@router.get("/trades/date-range", response_model=List[TradeWithItem])
def get_trades_in_range(
    start: datetime = Query(...),
    end: datetime = Query(...),
    db: Session = Depends(get_db),
):
    try:
        return get_trades_by_date_range_with_item(db, start, end)
    except LedgerError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc))


@router.delete("/trades/{trade_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_trade(trade_id: int, db: Session = Depends(get_db)):
    """Best-effort reversal: inventory is re-costed, not restored exactly."""
    try:
        reverse_trade(db, trade_id)
    except LedgerError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
