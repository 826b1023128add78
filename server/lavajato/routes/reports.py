"""Reporting endpoints."""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends
from lavajato.services.database import get_db
from lavajato.services.reports import build_dashboard
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter()


@router.get("/dashboard")
async def dashboard(
    start: Optional[date] = None,
    end: Optional[date] = None,
    year: Optional[int] = None,
    db: AsyncSession = Depends(get_db),
):
    return await build_dashboard(db, start=start, end=end, year=year)
