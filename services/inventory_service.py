# services/inventory_service.py
"""
Weighted-average-cost inventory accounting.

apply_buy / apply_sell are pure rules over a Position and a Trade.
process_buy_trade / process_sell_trade bind them to a session and are the
only code paths that write the inventory table. Neither commits; the caller
owns the transaction.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session

from models.item import Item
from models.position import Position
from models.trade import Trade, TradeType
from schemas.position import PositionWithItem
from services.errors import (
    InconsistentState,
    InsufficientInventory,
    InvalidTradeType,
    ReversalUnavailable,
)
from utils.common_helpers import ZERO, q4

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


# -----------------------
# Pure accounting rules
# -----------------------

def apply_buy(position: Optional[Position], trade: Trade) -> Position:
    if trade.type != TradeType.BUY:
        raise InvalidTradeType(f"apply_buy called with a {trade.type.value} trade")

    if position is None:
        now = _now()
        return Position(
            name_id=trade.name_id,
            current_quantity=trade.quantity,
            weighted_average_cost=q4(trade.unit_price),
            total_investment_cost=q4(trade.total_amount),
            created_at=now,
            last_updated_at=now,
        )

    new_quantity = position.current_quantity + trade.quantity
    new_total_cost = position.total_investment_cost + trade.total_amount
    position.current_quantity = new_quantity
    position.total_investment_cost = new_total_cost
    position.weighted_average_cost = q4(new_total_cost / Decimal(new_quantity))
    position.last_updated_at = _now()
    return position


def apply_sell(position: Optional[Position], trade: Trade) -> Optional[Position]:
    """Returns the updated position, or None when the sale empties it."""
    if trade.type != TradeType.SELL:
        raise InvalidTradeType(f"apply_sell called with a {trade.type.value} trade")

    held = position.current_quantity if position is not None else 0
    if position is None or held < trade.quantity:
        raise InsufficientInventory(trade.name_id, held, trade.quantity)

    new_quantity = held - trade.quantity
    if new_quantity == 0:
        return None

    # pro-rata cost removal; average cost of the remaining units is unchanged
    sell_ratio = q4(Decimal(trade.quantity) / Decimal(held))
    sold_cost = q4(position.total_investment_cost * sell_ratio)
    position.current_quantity = new_quantity
    position.total_investment_cost = position.total_investment_cost - sold_cost
    position.last_updated_at = _now()
    return position


# -----------------------
# Best-effort reversal
# -----------------------
# Not an exact inverse of apply_*: a reversed SELL is re-costed at the
# current weighted average, which can differ from the cost it removed.

def reverse_buy(position: Optional[Position], trade: Trade) -> Optional[Position]:
    if trade.type != TradeType.BUY:
        raise InvalidTradeType(f"reverse_buy called with a {trade.type.value} trade")

    held = position.current_quantity if position is not None else 0
    if position is None or held < trade.quantity:
        raise InsufficientInventory(trade.name_id, held, trade.quantity)

    new_quantity = held - trade.quantity
    if new_quantity == 0:
        return None

    new_total_cost = position.total_investment_cost - trade.total_amount
    if new_total_cost < ZERO:
        raise InconsistentState(
            f"Reversing trade {trade.id} would leave a negative cost basis for name_id={trade.name_id}"
        )

    position.current_quantity = new_quantity
    position.total_investment_cost = new_total_cost
    position.weighted_average_cost = q4(new_total_cost / Decimal(new_quantity))
    position.last_updated_at = _now()
    return position


def reverse_sell(position: Optional[Position], trade: Trade) -> Position:
    if trade.type != TradeType.SELL:
        raise InvalidTradeType(f"reverse_sell called with a {trade.type.value} trade")

    if position is None:
        raise ReversalUnavailable(
            f"Position for name_id={trade.name_id} was fully sold; "
            "re-enter a BUY trade instead of reversing this sale"
        )

    restored_cost = q4(position.weighted_average_cost * trade.quantity)
    position.current_quantity = position.current_quantity + trade.quantity
    position.total_investment_cost = position.total_investment_cost + restored_cost
    position.last_updated_at = _now()
    return position


# -----------------------
# Session-bound operations
# -----------------------

def get_position(db: Session, name_id: int) -> Position | None:
    return db.query(Position).filter(Position.name_id == name_id).first()


def get_current_quantity(db: Session, name_id: int) -> int:
    position = get_position(db, name_id)
    return position.current_quantity if position else 0


def has_enough_inventory(db: Session, name_id: int, quantity: int) -> bool:
    return get_current_quantity(db, name_id) >= quantity


def _store(db: Session, before: Position | None, after: Position | None) -> Position | None:
    if after is None:
        if before is not None:
            db.delete(before)
        return None
    if before is None:
        db.add(after)
    db.flush()
    return after


def process_buy_trade(db: Session, trade: Trade) -> Position:
    position = get_position(db, trade.name_id)
    old_quantity = position.current_quantity if position else 0
    old_avg = position.weighted_average_cost if position else None

    updated = _store(db, position, apply_buy(position, trade))
    logger.info(
        "inventory_buy name_id=%s quantity=%s->%s avg_cost=%s->%s",
        trade.name_id, old_quantity, updated.current_quantity, old_avg, updated.weighted_average_cost,
    )
    return updated  # type: ignore[return-value]


def process_sell_trade(db: Session, trade: Trade) -> Position | None:
    position = get_position(db, trade.name_id)
    old_quantity = position.current_quantity if position else 0

    updated = _store(db, position, apply_sell(position, trade))
    if updated is None:
        logger.info("inventory_sold_out name_id=%s quantity=%s", trade.name_id, old_quantity)
    else:
        logger.info(
            "inventory_sell name_id=%s quantity=%s->%s total_cost=%s",
            trade.name_id, old_quantity, updated.current_quantity, updated.total_investment_cost,
        )
    return updated


def process_trade(db: Session, trade: Trade) -> Position | None:
    if trade.type == TradeType.BUY:
        return process_buy_trade(db, trade)
    return process_sell_trade(db, trade)


def process_trade_reversal(db: Session, trade: Trade) -> Position | None:
    position = get_position(db, trade.name_id)
    if trade.type == TradeType.BUY:
        updated = _store(db, position, reverse_buy(position, trade))
    else:
        updated = _store(db, position, reverse_sell(position, trade))
    logger.info(
        "inventory_reversal trade_id=%s name_id=%s type=%s remaining=%s",
        trade.id, trade.name_id, trade.type.value, updated.current_quantity if updated else 0,
    )
    return updated


# -----------------------
# Read models
# -----------------------

def _with_item(position: Position, item: Item | None) -> PositionWithItem:
    return PositionWithItem(
        id=position.id,
        name_id=position.name_id,
        cn_name=item.cn_name if item else None,
        en_name=item.en_name if item else None,
        current_quantity=position.current_quantity,
        weighted_average_cost=position.weighted_average_cost,
        total_investment_cost=position.total_investment_cost,
        created_at=position.created_at,
        last_updated_at=position.last_updated_at,
    )


def list_positions_with_item(db: Session) -> List[PositionWithItem]:
    rows = (
        db.query(Position, Item)
        .outerjoin(Item, Item.name_id == Position.name_id)
        .order_by(Position.last_updated_at.desc(), Position.id.desc())
        .all()
    )
    return [_with_item(position, item) for position, item in rows]


def get_position_with_item(db: Session, name_id: int) -> PositionWithItem | None:
    row = (
        db.query(Position, Item)
        .outerjoin(Item, Item.name_id == Position.name_id)
        .filter(Position.name_id == name_id)
        .first()
    )
    if row is None:
        return None
    return _with_item(*row)


def list_positions(db: Session) -> List[Position]:
    return db.query(Position).all()
