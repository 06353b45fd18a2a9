"""FastAPI dependencies."""

from __future__ import annotations

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from rehab_risk.config import Settings, get_settings
from rehab_risk.core.database import get_db
from rehab_risk.core.repository import SqlRiskDataStore
from rehab_risk.risk.store import RiskDataStore


async def get_store(db: AsyncSession = Depends(get_db)) -> RiskDataStore:
    """Record store bound to the request's database session."""
    return SqlRiskDataStore(db)


def get_app_settings() -> Settings:
    return get_settings()
