from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from models.trade import TradeType


def _optional_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    text = value.strip()
    if not text:
        return None
    if len(text) > 128:
        raise ValueError("must be at most 128 characters")
    return text


class SellCreate(BaseModel):
    name_id: int
    unit_price: Decimal = Field(gt=0, max_digits=19, decimal_places=4)
    quantity: int = Field(gt=0)
    platform: Optional[str] = None
    counterparty: Optional[str] = None
    occurred_at: Optional[datetime] = None

    @field_validator("platform", "counterparty")
    @classmethod
    def validate_text(cls, value: Optional[str]) -> Optional[str]:
        return _optional_text(value)


class TradeCreate(SellCreate):
    type: TradeType


class TradeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name_id: int
    type: TradeType
    unit_price: Decimal
    quantity: int
    total_amount: Decimal
    platform: Optional[str] = None
    counterparty: Optional[str] = None
    occurred_at: datetime
    created_at: datetime


class TradeWithItem(TradeOut):
    cn_name: Optional[str] = None
    en_name: Optional[str] = None


class DailyFlow(BaseModel):
    day: date
    total_buy: Decimal
    total_sell: Decimal
    net: Decimal
