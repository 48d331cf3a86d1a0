# services/item_service.py
from __future__ import annotations

import json
import logging
from typing import Any, Dict, List

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models.item import Item
from schemas.item import ImportResult
from services.errors import DuplicateItem, ImportFormatError

logger = logging.getLogger(__name__)

SEARCH_LIMIT_MAX = 50
IMPORT_LOG_EVERY = 100


def list_items(db: Session) -> List[Item]:
    return db.query(Item).order_by(Item.id.asc()).all()


def get_item_by_name_id(db: Session, name_id: int) -> Item | None:
    return db.query(Item).filter(Item.name_id == name_id).first()


def item_exists(db: Session, name_id: int) -> bool:
    return db.query(Item.id).filter(Item.name_id == name_id).first() is not None


def search_items(db: Session, keyword: str | None, limit: int = 15) -> List[Item]:
    limit = max(1, min(limit, SEARCH_LIMIT_MAX))
    query = db.query(Item)
    kw = (keyword or "").strip()
    if kw:
        pattern = f"%{kw}%"
        query = query.filter(
            or_(
                Item.market_hash_name.ilike(pattern),
                Item.en_name.ilike(pattern),
                Item.cn_name.ilike(pattern),
            )
        )
    return query.order_by(Item.market_hash_name.asc()).limit(limit).all()


def _is_duplicate(db: Session, market_hash_name: str, name_id: int) -> bool:
    return (
        db.query(Item.id)
        .filter(or_(Item.market_hash_name == market_hash_name, Item.name_id == name_id))
        .first()
        is not None
    )


def create_item(
    db: Session,
    *,
    market_hash_name: str,
    en_name: str,
    cn_name: str,
    name_id: int,
) -> Item:
    if _is_duplicate(db, market_hash_name, name_id):
        raise DuplicateItem("Item with this market_hash_name or name_id already exists")

    item = Item(market_hash_name=market_hash_name, en_name=en_name, cn_name=cn_name, name_id=name_id)
    db.add(item)
    db.commit()
    db.refresh(item)
    return item


# -----------------------
# Bulk import
# -----------------------

def _parse_document(json_data: str | Dict[str, Any]) -> Dict[str, Any]:
    if isinstance(json_data, dict):
        return json_data
    try:
        doc = json.loads(json_data)
    except json.JSONDecodeError as exc:
        raise ImportFormatError(f"Invalid JSON: {exc.msg} (line {exc.lineno})") from exc
    if not isinstance(doc, dict):
        raise ImportFormatError("Import document must be a JSON object keyed by market hash name")
    return doc


def _entry_fields(data: Any) -> tuple[str, str, int]:
    if not isinstance(data, dict):
        raise ValueError("entry is not an object")
    en_name = data.get("en_name")
    cn_name = data.get("cn_name")
    name_id = data.get("name_id")
    if not isinstance(en_name, str) or not en_name.strip():
        raise ValueError("missing en_name")
    if not isinstance(cn_name, str) or not cn_name.strip():
        raise ValueError("missing cn_name")
    if isinstance(name_id, bool) or name_id is None:
        raise ValueError("missing name_id")
    return en_name.strip(), cn_name.strip(), int(name_id)


def _save_entry(db: Session, market_hash_name: str, en_name: str, cn_name: str, name_id: int) -> bool:
    """Save one item inside its own savepoint. False means skipped as a duplicate."""
    if _is_duplicate(db, market_hash_name, name_id):
        return False
    try:
        with db.begin_nested():
            db.add(Item(market_hash_name=market_hash_name, en_name=en_name, cn_name=cn_name, name_id=name_id))
    except IntegrityError as exc:
        logger.warning("item_import_integrity_error name=%s error=%s", market_hash_name, exc.orig)
        return False
    return True


def import_items_from_json(db: Session, json_data: str | Dict[str, Any]) -> ImportResult:
    """
    Import a document mapping market_hash_name -> {en_name, cn_name, name_id}.

    Existing items are skipped, never overwritten. Each entry is saved in its
    own savepoint so one bad row does not abort the batch.
    """
    doc = _parse_document(json_data)
    total = len(doc)
    imported = 0
    skipped: List[str] = []
    logger.info("item_import_started total=%d", total)

    for processed, (market_hash_name, data) in enumerate(doc.items(), start=1):
        try:
            en_name, cn_name, name_id = _entry_fields(data)
        except (TypeError, ValueError) as exc:
            skipped.append(f"{market_hash_name} (invalid entry: {exc})")
            continue

        if _save_entry(db, market_hash_name, en_name, cn_name, name_id):
            imported += 1
        else:
            skipped.append(f"{market_hash_name} (already exists)")

        if processed % IMPORT_LOG_EVERY == 0:
            logger.info("item_import_progress processed=%d total=%d imported=%d", processed, total, imported)

    db.commit()
    logger.info("item_import_finished total=%d imported=%d skipped=%d", total, imported, len(skipped))
    return ImportResult(
        imported_count=imported,
        skipped_count=len(skipped),
        skipped_items=skipped,
        total_items=total,
    )
