import os
import unittest
from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import patch

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import models  # noqa: F401
from database import Base, SessionLocal, engine
from models.item import Item
from models.position import Position
from models.trade import Trade, TradeType
from services.errors import (
    InconsistentState,
    InsufficientInventory,
    InvalidTradeType,
    ItemNotFound,
    ReversalUnavailable,
    TradeNotFound,
    TradeValidationError,
)
from services.inventory_service import (
    get_current_quantity,
    get_position,
    has_enough_inventory,
    list_positions_with_item,
)
from services.trade_service import (
    create_sell_trade,
    create_trade,
    daily_summary,
    get_trade_history_with_item,
    get_trades_by_date_range_with_item,
    list_trades_with_item,
    reverse_trade,
)

D = Decimal
AK = 1001
AWP = 2002


def at(day: int, hour: int = 12) -> datetime:
    return datetime(2026, 5, day, hour, 0, tzinfo=timezone.utc)


class LedgerDbTestCase(unittest.TestCase):
    def setUp(self):
        Base.metadata.drop_all(bind=engine)
        Base.metadata.create_all(bind=engine)
        self.db = SessionLocal()
        self.db.add_all(
            [
                Item(market_hash_name="AK-47 | Redline (Field-Tested)", en_name="AK-47 | Redline", cn_name="AK-47 | 红线", name_id=AK),
                Item(market_hash_name="AWP | Asiimov (Field-Tested)", en_name="AWP | Asiimov", cn_name="AWP | 二西莫夫", name_id=AWP),
            ]
        )
        self.db.commit()

    def tearDown(self):
        self.db.close()

    def trade(self, type_, price, qty, name_id=AK, occurred_at=None):
        return create_trade(
            self.db,
            name_id=name_id,
            type=type_,
            unit_price=D(price),
            quantity=qty,
            occurred_at=occurred_at,
        )


class TestCreateTrade(LedgerDbTestCase):
    def test_buy_buy_sell_updates_position(self):
        first = self.trade(TradeType.BUY, "2.0000", 10)
        self.assertEqual(first.total_amount, D("20.0000"))
        self.trade(TradeType.BUY, "5.0000", 5)
        self.trade(TradeType.SELL, "9.0000", 6)

        pos = get_position(self.db, AK)
        self.assertEqual(pos.current_quantity, 9)
        self.assertEqual(pos.weighted_average_cost, D("3.0000"))
        self.assertEqual(pos.total_investment_cost, D("27.0000"))
        self.assertEqual(self.db.query(Trade).count(), 3)

    def test_sell_everything_deletes_position(self):
        self.trade(TradeType.BUY, "2.0000", 4)
        create_sell_trade(self.db, name_id=AK, unit_price=D("3.0000"), quantity=4)

        self.assertIsNone(get_position(self.db, AK))
        self.assertEqual(get_current_quantity(self.db, AK), 0)
        self.assertEqual(self.db.query(Position).count(), 0)

    def test_type_accepts_string(self):
        trade = self.trade("buy", "1.5000", 2)
        self.assertEqual(trade.type, TradeType.BUY)
        self.assertEqual(trade.total_amount, D("3.0000"))

    def test_validation_runs_before_any_write(self):
        cases = [
            dict(name_id=None, type=TradeType.BUY, unit_price=D("1"), quantity=1),
            dict(name_id=AK, type=None, unit_price=D("1"), quantity=1),
            dict(name_id=AK, type="HOLD", unit_price=D("1"), quantity=1),
            dict(name_id=AK, type=TradeType.BUY, unit_price=D("0"), quantity=1),
            dict(name_id=AK, type=TradeType.BUY, unit_price=D("-1"), quantity=1),
            dict(name_id=AK, type=TradeType.BUY, unit_price=None, quantity=1),
            dict(name_id=AK, type=TradeType.BUY, unit_price=D("0.00001"), quantity=1),
            dict(name_id=AK, type=TradeType.BUY, unit_price=D("1.23456"), quantity=3),
            dict(name_id=AK, type=TradeType.BUY, unit_price=D("1"), quantity=0),
            dict(name_id=AK, type=TradeType.BUY, unit_price=D("1"), quantity=None),
        ]
        for kwargs in cases:
            with self.subTest(kwargs=kwargs):
                with self.assertRaises(TradeValidationError):
                    create_trade(self.db, **kwargs)
        self.assertEqual(self.db.query(Trade).count(), 0)

    def test_price_is_stored_at_four_places(self):
        trade = self.trade(TradeType.BUY, "1.5", 3)
        self.assertEqual(trade.unit_price.as_tuple().exponent, -4)
        self.assertEqual(trade.total_amount, D("4.5000"))
        pos = get_position(self.db, AK)
        self.assertEqual(pos.weighted_average_cost.as_tuple().exponent, -4)

    def test_sell_pre_check_uses_inventory_helper(self):
        self.trade(TradeType.BUY, "2.0000", 3)
        self.assertTrue(has_enough_inventory(self.db, AK, 3))
        self.assertFalse(has_enough_inventory(self.db, AK, 4))
        self.assertFalse(has_enough_inventory(self.db, AWP, 1))
        self.assertTrue(has_enough_inventory(self.db, AWP, 0))

    def test_unknown_item(self):
        with self.assertRaises(ItemNotFound):
            self.trade(TradeType.BUY, "1.0000", 1, name_id=999)
        self.assertEqual(self.db.query(Trade).count(), 0)

    def test_oversell_is_rejected_before_persisting(self):
        self.trade(TradeType.BUY, "2.0000", 3)
        with self.assertRaises(InsufficientInventory) as ctx:
            self.trade(TradeType.SELL, "2.0000", 5)
        self.assertIn("currently holding 3", str(ctx.exception))
        self.assertIn("requested 5", str(ctx.exception))
        self.assertEqual(self.db.query(Trade).count(), 1)
        self.assertEqual(get_current_quantity(self.db, AK), 3)

    def test_sell_without_position(self):
        with self.assertRaises(InsufficientInventory):
            self.trade(TradeType.SELL, "2.0000", 1)
        self.assertEqual(self.db.query(Trade).count(), 0)

    def test_accounting_failure_surfaces_inconsistent_state(self):
        self.trade(TradeType.BUY, "2.0000", 3)
        with patch("services.trade_service.process_trade", side_effect=InvalidTradeType("boom")):
            with self.assertRaises(InconsistentState) as ctx:
                self.trade(TradeType.BUY, "4.0000", 1)
        self.assertIsInstance(ctx.exception.__cause__, InvalidTradeType)

        # the transaction was rolled back: ledger and inventory still agree
        self.assertEqual(self.db.query(Trade).count(), 1)
        self.assertEqual(get_current_quantity(self.db, AK), 3)


class TestReverseTrade(LedgerDbTestCase):
    def test_reverse_buy(self):
        self.trade(TradeType.BUY, "2.0000", 10)
        second = self.trade(TradeType.BUY, "5.0000", 5)

        reverse_trade(self.db, second.id)

        pos = get_position(self.db, AK)
        self.assertEqual(pos.current_quantity, 10)
        self.assertEqual(pos.weighted_average_cost, D("2.0000"))
        self.assertEqual(self.db.query(Trade).count(), 1)

    def test_reverse_sell(self):
        self.trade(TradeType.BUY, "3.0000", 10)
        sale = self.trade(TradeType.SELL, "4.0000", 4)

        reverse_trade(self.db, sale.id)

        pos = get_position(self.db, AK)
        self.assertEqual(pos.current_quantity, 10)
        self.assertEqual(pos.total_investment_cost, D("30.0000"))

    def test_reverse_sell_of_liquidated_item(self):
        self.trade(TradeType.BUY, "3.0000", 2)
        sale = self.trade(TradeType.SELL, "4.0000", 2)

        with self.assertRaises(ReversalUnavailable):
            reverse_trade(self.db, sale.id)
        self.assertEqual(self.db.query(Trade).count(), 2)

    def test_unknown_trade(self):
        with self.assertRaises(TradeNotFound):
            reverse_trade(self.db, 404)


class TestReadModels(LedgerDbTestCase):
    def setUp(self):
        super().setUp()
        self.trade(TradeType.BUY, "10.0000", 2, occurred_at=at(1, 9))
        self.trade(TradeType.BUY, "1.0000", 5, name_id=AWP, occurred_at=at(1, 18))
        self.trade(TradeType.SELL, "12.0000", 1, occurred_at=at(3))

    def test_trades_with_item_names(self):
        rows = list_trades_with_item(self.db)
        self.assertEqual(len(rows), 3)
        self.assertEqual(rows[0].type, TradeType.SELL)
        self.assertEqual(rows[0].en_name, "AK-47 | Redline")
        self.assertEqual(rows[-1].cn_name, "AK-47 | 红线")

    def test_history_for_one_item(self):
        rows = get_trade_history_with_item(self.db, AWP)
        self.assertEqual([r.name_id for r in rows], [AWP])

    def test_date_range(self):
        rows = get_trades_by_date_range_with_item(self.db, at(1, 0), at(2, 0))
        self.assertEqual(len(rows), 2)
        with self.assertRaises(TradeValidationError):
            get_trades_by_date_range_with_item(self.db, at(2), at(1))

    def test_daily_summary(self):
        flows = daily_summary(self.db, at(1, 0), at(30, 0))
        self.assertEqual([f.day.isoformat() for f in flows], ["2026-05-01", "2026-05-03"])
        self.assertEqual(flows[0].total_buy, D("25.0000"))
        self.assertEqual(flows[0].total_sell, D("0"))
        self.assertEqual(flows[0].net, D("-25.0000"))
        self.assertEqual(flows[1].total_sell, D("12.0000"))
        self.assertEqual(flows[1].net, D("12.0000"))

    def test_daily_summary_empty_range(self):
        self.assertEqual(daily_summary(self.db, at(10), at(20)), [])

    def test_positions_with_item_names(self):
        rows = list_positions_with_item(self.db)
        by_id = {r.name_id: r for r in rows}
        self.assertEqual(by_id[AK].current_quantity, 1)
        self.assertEqual(by_id[AK].en_name, "AK-47 | Redline")
        self.assertEqual(by_id[AWP].total_investment_cost, D("5.0000"))


if __name__ == "__main__":
    unittest.main()
