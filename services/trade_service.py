# services/trade_service.py
"""
Trade intake and ledger read models.

create_trade validates everything before the first write, then records the
trade and updates the position in the same transaction.
"""
from __future__ import annotations

import logging
from collections import OrderedDict
from datetime import date, datetime
from decimal import Decimal
from typing import Dict, List, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models.item import Item
from models.trade import Trade, TradeType
from schemas.trade import DailyFlow, TradeWithItem
from services.errors import (
    InconsistentState,
    InsufficientInventory,
    ItemNotFound,
    LedgerError,
    TradeNotFound,
    TradeValidationError,
)
from services.inventory_service import (
    get_current_quantity,
    has_enough_inventory,
    process_trade,
    process_trade_reversal,
)
from services.item_service import item_exists
from utils.common_helpers import ZERO, q4, to_decimal

logger = logging.getLogger(__name__)


def _coerce_type(value) -> TradeType:
    if isinstance(value, TradeType):
        return value
    try:
        return TradeType(str(value).strip().upper())
    except ValueError as exc:
        raise TradeValidationError(f"Unknown trade type: {value!r}") from exc


def _validate(name_id, type_, unit_price, quantity) -> Tuple[int, TradeType, Decimal, int]:
    if name_id is None:
        raise TradeValidationError("name_id is required")
    if type_ is None:
        raise TradeValidationError("type is required")
    trade_type = _coerce_type(type_)

    price = to_decimal(unit_price)
    if price is None or not price.is_finite() or price <= ZERO:
        raise TradeValidationError("unit_price must be greater than 0")
    if price.as_tuple().exponent < -4:
        raise TradeValidationError("unit_price allows at most 4 decimal places")
    price = q4(price)

    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise TradeValidationError("quantity must be a positive integer")

    try:
        name_id = int(name_id)
    except (TypeError, ValueError) as exc:
        raise TradeValidationError(f"Invalid name_id: {name_id!r}") from exc
    return name_id, trade_type, price, quantity


def create_trade(
    db: Session,
    *,
    name_id: int | None,
    type: TradeType | str | None,
    unit_price: Decimal | None,
    quantity: int | None,
    platform: str | None = None,
    counterparty: str | None = None,
    occurred_at: datetime | None = None,
) -> Trade:
    name_id, trade_type, price, quantity = _validate(name_id, type, unit_price, quantity)

    if not item_exists(db, name_id):
        raise ItemNotFound(name_id)

    if trade_type == TradeType.SELL and not has_enough_inventory(db, name_id, quantity):
        raise InsufficientInventory(name_id, get_current_quantity(db, name_id), quantity)

    trade = Trade.build(
        name_id=name_id,
        type=trade_type,
        unit_price=price,
        quantity=quantity,
        platform=platform,
        counterparty=counterparty,
        occurred_at=occurred_at,
    )
    db.add(trade)
    db.flush()

    try:
        process_trade(db, trade)
    except (LedgerError, SQLAlchemyError) as exc:
        trade_id = trade.id
        db.rollback()
        logger.critical(
            "trade_inventory_out_of_sync trade_id=%s name_id=%s type=%s error=%s",
            trade_id, name_id, trade_type.value, exc,
        )
        raise InconsistentState(
            f"Trade {trade_id} was recorded but inventory could not be updated: {exc}"
        ) from exc

    db.commit()
    db.refresh(trade)
    logger.info(
        "trade_created trade_id=%s name_id=%s type=%s quantity=%s unit_price=%s",
        trade.id, trade.name_id, trade.type.value, trade.quantity, trade.unit_price,
    )
    return trade


def create_sell_trade(
    db: Session,
    *,
    name_id: int | None,
    unit_price: Decimal | None,
    quantity: int | None,
    platform: str | None = None,
    counterparty: str | None = None,
    occurred_at: datetime | None = None,
) -> Trade:
    return create_trade(
        db,
        name_id=name_id,
        type=TradeType.SELL,
        unit_price=unit_price,
        quantity=quantity,
        platform=platform,
        counterparty=counterparty,
        occurred_at=occurred_at,
    )


def reverse_trade(db: Session, trade_id: int) -> None:
    """
    Best-effort reversal: undo the trade's effect on inventory and delete it.

    A reversed SELL is re-costed at the current weighted average, so this is
    not an exact inverse of the original trade.
    """
    trade = db.get(Trade, trade_id)
    if trade is None:
        raise TradeNotFound(trade_id)

    try:
        process_trade_reversal(db, trade)
    except LedgerError:
        db.rollback()
        raise

    name_id, trade_type = trade.name_id, trade.type
    db.delete(trade)
    db.commit()
    logger.info("trade_reversed trade_id=%s name_id=%s type=%s", trade_id, name_id, trade_type.value)


# -----------------------
# Read models
# -----------------------

def list_trades(db: Session) -> List[Trade]:
    return db.query(Trade).order_by(Trade.occurred_at.asc(), Trade.id.asc()).all()


def _with_item_query(db: Session):
    return db.query(Trade, Item).outerjoin(Item, Item.name_id == Trade.name_id)


def _to_dto(trade: Trade, item: Item | None) -> TradeWithItem:
    dto = TradeWithItem.model_validate(trade)
    if item is not None:
        dto.cn_name = item.cn_name
        dto.en_name = item.en_name
    return dto


def list_trades_with_item(db: Session) -> List[TradeWithItem]:
    rows = _with_item_query(db).order_by(Trade.occurred_at.desc(), Trade.id.desc()).all()
    return [_to_dto(t, i) for t, i in rows]


def get_trade_history_with_item(db: Session, name_id: int) -> List[TradeWithItem]:
    rows = (
        _with_item_query(db)
        .filter(Trade.name_id == name_id)
        .order_by(Trade.occurred_at.desc(), Trade.id.desc())
        .all()
    )
    return [_to_dto(t, i) for t, i in rows]


def _in_range(db: Session, start: datetime, end: datetime):
    if start > end:
        raise TradeValidationError("start must not be after end")
    return _with_item_query(db).filter(Trade.occurred_at >= start, Trade.occurred_at <= end)


def get_trades_by_date_range_with_item(db: Session, start: datetime, end: datetime) -> List[TradeWithItem]:
    rows = _in_range(db, start, end).order_by(Trade.occurred_at.asc(), Trade.id.asc()).all()
    return [_to_dto(t, i) for t, i in rows]


def daily_summary(db: Session, start: datetime, end: datetime) -> List[DailyFlow]:
    rows = _in_range(db, start, end).order_by(Trade.occurred_at.asc(), Trade.id.asc()).all()

    buckets: Dict[date, List[Decimal]] = OrderedDict()
    for trade, _item in rows:
        bucket = buckets.setdefault(trade.occurred_at.date(), [ZERO, ZERO])
        if trade.type == TradeType.BUY:
            bucket[0] += trade.total_amount
        else:
            bucket[1] += trade.total_amount

    return [
        DailyFlow(day=day, total_buy=buy, total_sell=sell, net=sell - buy)
        for day, (buy, sell) in sorted(buckets.items())
    ]
