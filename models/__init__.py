from .item import Item
from .trade import Trade, TradeType
from .position import Position
