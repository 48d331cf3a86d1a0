# models/item.py
from database import Base
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import BigInteger, String


class Item(Base):
    __tablename__ = "items"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)

    # e.g. "AK-47 | Aquamarine Revenge (Battle-Scarred)"
    market_hash_name: Mapped[str] = mapped_column(String(512), unique=True, index=True)
    en_name: Mapped[str] = mapped_column(String(512))
    cn_name: Mapped[str] = mapped_column(String(512))

    # external market id, stable across trades
    name_id: Mapped[int] = mapped_column(BigInteger, unique=True, index=True)
