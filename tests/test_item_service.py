import json
import os
import unittest

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import models  # noqa: F401
from database import Base, SessionLocal, engine
from models.item import Item
from services.errors import DuplicateItem, ImportFormatError
from services.item_service import (
    create_item,
    get_item_by_name_id,
    import_items_from_json,
    item_exists,
    search_items,
)

CATALOG = {
    "AK-47 | Redline (Field-Tested)": {"en_name": "AK-47 | Redline", "cn_name": "AK-47 | 红线", "name_id": 11},
    "AWP | Asiimov (Field-Tested)": {"en_name": "AWP | Asiimov", "cn_name": "AWP | 二西莫夫", "name_id": 12},
    "M4A1-S | Hyper Beast (Minimal Wear)": {"en_name": "M4A1-S | Hyper Beast", "cn_name": "M4A1-S | 暴怒野兽", "name_id": 13},
}


class TestItemService(unittest.TestCase):
    def setUp(self):
        Base.metadata.drop_all(bind=engine)
        Base.metadata.create_all(bind=engine)
        self.db = SessionLocal()

    def tearDown(self):
        self.db.close()

    def test_import_counts_and_lookup(self):
        result = import_items_from_json(self.db, json.dumps(CATALOG, ensure_ascii=False))
        self.assertEqual(result.imported_count, 3)
        self.assertEqual(result.skipped_count, 0)
        self.assertEqual(result.total_items, 3)
        self.assertTrue(item_exists(self.db, 12))
        self.assertEqual(get_item_by_name_id(self.db, 13).cn_name, "M4A1-S | 暴怒野兽")

    def test_import_is_idempotent(self):
        import_items_from_json(self.db, CATALOG)
        changed = dict(CATALOG)
        changed["AK-47 | Redline (Field-Tested)"] = {"en_name": "renamed", "cn_name": "renamed", "name_id": 11}

        result = import_items_from_json(self.db, changed)
        self.assertEqual(result.imported_count, 0)
        self.assertEqual(result.skipped_count, 3)
        self.assertIn("AK-47 | Redline (Field-Tested) (already exists)", result.skipped_items)
        self.assertEqual(get_item_by_name_id(self.db, 11).en_name, "AK-47 | Redline")
        self.assertEqual(self.db.query(Item).count(), 3)

    def test_duplicate_name_id_inside_document_is_skipped(self):
        doc = {
            "A": {"en_name": "A", "cn_name": "A", "name_id": 5},
            "B": {"en_name": "B", "cn_name": "B", "name_id": 5},
        }
        result = import_items_from_json(self.db, doc)
        self.assertEqual(result.imported_count, 1)
        self.assertEqual(result.skipped_items, ["B (already exists)"])

    def test_malformed_entries_are_reported(self):
        doc = {
            "good": {"en_name": "g", "cn_name": "g", "name_id": 1},
            "no id": {"en_name": "x", "cn_name": "x"},
            "not an object": "oops",
        }
        result = import_items_from_json(self.db, doc)
        self.assertEqual(result.imported_count, 1)
        self.assertEqual(result.skipped_count, 2)
        self.assertTrue(any(s.startswith("no id (invalid entry") for s in result.skipped_items))
        self.assertTrue(any(s.startswith("not an object (invalid entry") for s in result.skipped_items))

    def test_invalid_document(self):
        with self.assertRaises(ImportFormatError):
            import_items_from_json(self.db, "{not json")
        with self.assertRaises(ImportFormatError):
            import_items_from_json(self.db, "[1, 2, 3]")

    def test_create_item_rejects_duplicates(self):
        create_item(self.db, market_hash_name="X", en_name="X", cn_name="X", name_id=1)
        with self.assertRaises(DuplicateItem):
            create_item(self.db, market_hash_name="Y", en_name="Y", cn_name="Y", name_id=1)
        with self.assertRaises(DuplicateItem):
            create_item(self.db, market_hash_name="X", en_name="Z", cn_name="Z", name_id=2)

    def test_search(self):
        import_items_from_json(self.db, CATALOG)
        self.assertEqual([i.name_id for i in search_items(self.db, "asiimov")], [12])
        self.assertEqual([i.name_id for i in search_items(self.db, "红线")], [11])
        self.assertEqual(len(search_items(self.db, None, limit=2)), 2)
        self.assertEqual(len(search_items(self.db, "", limit=500)), 3)


if __name__ == "__main__":
    unittest.main()
