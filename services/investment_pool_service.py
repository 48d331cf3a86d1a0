# services/investment_pool_service.py
"""
Investment-pool analytics: treats all skin trading as one pool of capital.

compute_pool_statistics is pure (reads trade/position-like objects only);
the get_* wrappers load rows from the session and never write.
"""
from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Iterable, List, Optional, Sequence

from sqlalchemy.orm import Session

from models.trade import TradeType
from schemas.stats import InvestmentPoolStats
from services.inventory_service import list_positions
from services.trade_service import list_trades
from utils.common_helpers import ZERO, decimal_sum, safe_div_q4

logger = logging.getLogger(__name__)


def _buys(trades: Iterable) -> List:
    return [t for t in trades if t.type == TradeType.BUY]


def _sells(trades: Iterable) -> List:
    return [t for t in trades if t.type == TradeType.SELL]


def holding_cost_basis(positions: Iterable) -> Decimal:
    return decimal_sum(
        p.weighted_average_cost * p.current_quantity
        for p in positions
        if p.current_quantity > 0
    )


def peak_net_investment(trades: Sequence) -> Decimal:
    """
    Largest net capital ever sitting in the pool.

    Runs BUY(+)/SELL(-) amounts in occurred_at order (stable for ties). When
    the running total never goes above zero, falls back to the first BUY.
    """
    ordered = sorted(trades, key=lambda t: t.occurred_at)
    running = ZERO
    peak = ZERO
    for t in ordered:
        running += t.total_amount if t.type == TradeType.BUY else -t.total_amount
        if running > peak:
            peak = running

    if peak <= ZERO:
        first_buy = next((t for t in ordered if t.type == TradeType.BUY), None)
        return first_buy.total_amount if first_buy is not None else ZERO
    return peak


def _day(value: datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


def compute_pool_statistics(
    trades: Sequence,
    positions: Sequence,
    *,
    manual_market_value: Optional[Decimal] = None,
    today: Optional[date] = None,
) -> InvestmentPoolStats:
    if not trades:
        return InvestmentPoolStats()

    today = today or datetime.now(timezone.utc).date()
    buys = _buys(trades)
    sells = _sells(trades)

    total_investment = decimal_sum(t.total_amount for t in buys)
    total_withdrawal = decimal_sum(t.total_amount for t in sells)
    current_cost = total_investment - total_withdrawal

    static_cost = holding_cost_basis(positions)
    current_holding_value = manual_market_value if manual_market_value is not None else static_cost

    peak = peak_net_investment(trades)
    realized_profit = total_withdrawal - (total_investment - static_cost)
    unrealized_profit = current_holding_value - static_cost
    total_profit = realized_profit + unrealized_profit

    absolute_profit = current_holding_value - current_cost

    # a ledger with no BUY counts from today
    first_investment = min((_day(t.occurred_at) for t in buys), default=today)
    last_trade = max(_day(t.occurred_at) for t in trades)
    investment_days = (today - first_investment).days + 1

    return InvestmentPoolStats(
        total_investment=total_investment,
        total_withdrawal=total_withdrawal,
        current_cost=current_cost,
        static_cost=static_cost,
        current_holding_value=current_holding_value,
        absolute_profit=absolute_profit,
        return_rate=safe_div_q4(absolute_profit, current_cost),
        total_value=total_withdrawal + current_holding_value,
        peak_net_investment=peak,
        net_cash_flow=current_cost,
        realized_profit=realized_profit,
        unrealized_profit=unrealized_profit,
        total_profit=total_profit,
        real_return_rate=safe_div_q4(total_profit, peak),
        first_investment_date=first_investment,
        last_trade_date=last_trade,
        total_investment_days=investment_days,
        total_buy_trades=len(buys),
        total_sell_trades=len(sells),
        total_items=len({t.name_id for t in trades}),
        current_holding_items=sum(1 for p in positions if p.current_quantity > 0),
    )


def get_investment_pool_statistics(db: Session) -> InvestmentPoolStats:
    return get_investment_pool_statistics_with_manual_value(db, None)


def get_investment_pool_statistics_with_manual_value(
    db: Session,
    manual_market_value: Optional[Decimal],
) -> InvestmentPoolStats:
    trades = list_trades(db)
    positions = list_positions(db)
    stats = compute_pool_statistics(trades, positions, manual_market_value=manual_market_value)
    logger.info(
        "investment_pool_computed trades=%d positions=%d manual_value=%s",
        len(trades), len(positions), manual_market_value is not None,
    )
    return stats
