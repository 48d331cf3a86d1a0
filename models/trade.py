from __future__ import annotations

import enum
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import BigInteger, DateTime, Enum, ForeignKey, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from database import Base


class TradeType(str, enum.Enum):
    BUY = "BUY"
    SELL = "SELL"


class Trade(Base):
    __tablename__ = "trades"
    __table_args__ = (
        Index("ix_trades_occurred_at", "occurred_at"),
        Index("ix_trades_type", "type"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    name_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("items.name_id"), index=True)
    type: Mapped[TradeType] = mapped_column(Enum(TradeType, native_enum=False, length=8))
    unit_price: Mapped[Decimal] = mapped_column(Numeric(19, 4))
    quantity: Mapped[int] = mapped_column()
    total_amount: Mapped[Decimal] = mapped_column(Numeric(19, 4))

    # trading venue (Steam, Buff, igxe, ...) and optional counterparty
    platform: Mapped[str | None] = mapped_column(String(128), nullable=True)
    counterparty: Mapped[str | None] = mapped_column(String(128), nullable=True)

    occurred_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))

    @classmethod
    def build(
        cls,
        *,
        name_id: int,
        type: TradeType,
        unit_price: Decimal,
        quantity: int,
        platform: str | None = None,
        counterparty: str | None = None,
        occurred_at: datetime | None = None,
    ) -> "Trade":
        """Create an unsaved trade; total_amount is always derived, never supplied."""
        now = datetime.now(timezone.utc)
        return cls(
            name_id=name_id,
            type=type,
            unit_price=unit_price,
            quantity=quantity,
            total_amount=unit_price * quantity,
            platform=platform,
            counterparty=counterparty,
            occurred_at=occurred_at or now,
            created_at=now,
        )
