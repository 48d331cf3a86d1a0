# routers/item_routes.py
import logging
import os
from typing import List

from fastapi import APIRouter, Depends, File, HTTPException, Query, Request, UploadFile, status
from sqlalchemy.orm import Session

from database import get_db
from middleware.rate_limit import IMPORT_RATE_LIMIT, limiter
from schemas.item import ImportResult, ItemCreate, ItemImportRequest, ItemOut
from services.errors import LedgerError
from services.item_service import create_item, import_items_from_json, list_items, search_items

logger = logging.getLogger(__name__)
router = APIRouter(tags=["items"])

MAX_IMPORT_FILE_BYTES = int(os.getenv("MAX_IMPORT_FILE_BYTES", str(50 * 1024 * 1024)))


@router.get("/items", response_model=List[ItemOut])
def get_items(db: Session = Depends(get_db)):
    return list_items(db)


@router.get("/items/search", response_model=List[ItemOut])
def search(
    keyword: str | None = Query(None),
    limit: int = Query(15, ge=1),
    db: Session = Depends(get_db),
):
    return search_items(db, keyword, limit)


@router.post("/items", response_model=ItemOut, status_code=status.HTTP_201_CREATED)
def save_item(payload: ItemCreate, db: Session = Depends(get_db)):
    try:
        return create_item(
            db,
            market_hash_name=payload.market_hash_name,
            en_name=payload.en_name,
            cn_name=payload.cn_name,
            name_id=payload.name_id,
        )
    except LedgerError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc))


@router.post("/items/import", response_model=ImportResult)
@limiter.limit(IMPORT_RATE_LIMIT)
def import_items(request: Request, payload: ItemImportRequest, db: Session = Depends(get_db)):
    try:
        return import_items_from_json(db, payload.json_data)
    except LedgerError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc))


@router.post("/items/import-file", response_model=ImportResult)
@limiter.limit(IMPORT_RATE_LIMIT)
async def import_items_file(
    request: Request,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
):
    filename = (file.filename or "").lower()
    if not filename.endswith(".json"):
        raise HTTPException(status_code=400, detail="Only .json files are supported")

    content = await file.read(MAX_IMPORT_FILE_BYTES + 1)
    if not content:
        raise HTTPException(status_code=400, detail="File is empty")
    if len(content) > MAX_IMPORT_FILE_BYTES:
        raise HTTPException(status_code=413, detail="File exceeds the upload size limit")

    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail="File must be UTF-8 encoded")

    logger.info("item_import_file name=%s bytes=%d", file.filename, len(content))
    try:
        return import_items_from_json(db, text)
    except LedgerError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc))
