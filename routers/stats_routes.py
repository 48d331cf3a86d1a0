# routers/stats_routes.py
from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from database import get_db
from schemas.stats import InvestmentPoolStats, ManualValueRequest
from schemas.trade import DailyFlow
from services.errors import LedgerError
from services.investment_pool_service import (
    get_investment_pool_statistics,
    get_investment_pool_statistics_with_manual_value,
)
from services.trade_service import daily_summary

router = APIRouter(tags=["stats"])


@router.get("/stats/daily", response_model=List[DailyFlow])
def daily(
    start: datetime = Query(...),
    end: datetime = Query(...),
    db: Session = Depends(get_db),
):
    try:
        return daily_summary(db, start, end)
    except LedgerError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc))


@router.get("/stats/investment-pool", response_model=InvestmentPoolStats)
def investment_pool(db: Session = Depends(get_db)):
    return get_investment_pool_statistics(db)


@router.post("/stats/investment-pool/manual-value", response_model=InvestmentPoolStats)
def investment_pool_with_manual_value(payload: ManualValueRequest, db: Session = Depends(get_db)):
    return get_investment_pool_statistics_with_manual_value(db, payload.market_value)
