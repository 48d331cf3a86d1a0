from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

_ZERO = Decimal("0")


class InvestmentPoolStats(BaseModel):
    """Trading activity viewed as one investment pool that money flows in and out of."""

    # cash flow
    total_investment: Decimal = _ZERO      # sum of all BUY amounts
    total_withdrawal: Decimal = _ZERO      # sum of all SELL amounts
    current_cost: Decimal = _ZERO          # investment - withdrawal
    static_cost: Decimal = _ZERO           # cost basis of current holdings
    current_holding_value: Decimal = _ZERO  # cost basis, or manual market value

    # legacy return figures
    absolute_profit: Decimal = _ZERO
    return_rate: Decimal = _ZERO
    total_value: Decimal = _ZERO

    # realized/unrealized view
    peak_net_investment: Decimal = _ZERO
    net_cash_flow: Decimal = _ZERO
    realized_profit: Decimal = _ZERO
    unrealized_profit: Decimal = _ZERO
    total_profit: Decimal = _ZERO
    real_return_rate: Decimal = _ZERO

    first_investment_date: Optional[date] = None
    last_trade_date: Optional[date] = None
    total_investment_days: int = 0

    total_buy_trades: int = 0
    total_sell_trades: int = 0
    total_items: int = 0
    current_holding_items: int = 0


class ManualValueRequest(BaseModel):
    market_value: Decimal = Field(ge=0)
