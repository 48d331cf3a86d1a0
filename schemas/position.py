from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict


class PositionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name_id: int
    current_quantity: int
    weighted_average_cost: Decimal
    total_investment_cost: Decimal
    created_at: datetime
    last_updated_at: datetime


class PositionWithItem(PositionOut):
    # display names joined from the item catalog; None if the item row is gone
    cn_name: Optional[str] = None
    en_name: Optional[str] = None


class QuantityOut(BaseModel):
    name_id: int
    quantity: int
