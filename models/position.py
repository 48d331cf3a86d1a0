from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import BigInteger, DateTime, Numeric
from sqlalchemy.orm import Mapped, mapped_column

from database import Base


class Position(Base):
    """Current holding for one item. Rows with zero quantity are deleted, never kept."""

    __tablename__ = "inventory"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    name_id: Mapped[int] = mapped_column(BigInteger, unique=True, index=True)
    current_quantity: Mapped[int] = mapped_column()
    weighted_average_cost: Mapped[Decimal] = mapped_column(Numeric(19, 4))
    total_investment_cost: Mapped[Decimal] = mapped_column(Numeric(19, 4))

    # stamped explicitly by services.inventory_service, no ORM onupdate hooks
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    last_updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
