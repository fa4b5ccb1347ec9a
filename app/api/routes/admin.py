from typing import Optional

from fastapi import APIRouter, Header, Query

from app.api.dependencies import require_admin
from app.core.config import settings
from app.models.schemas import AdminNumbersResponse, ResetResponse, StatsResponse
from app.services import catalog, reset
from app.store.factory import get_store

router = APIRouter(tags=["admin"])


@router.post("/reset", response_model=ResetResponse)
def reset_numbers(x_admin_password: Optional[str] = Header(None)):
    require_admin(x_admin_password)
    return reset.reset_all(get_store())


@router.get("/stats", response_model=StatsResponse)
def stats(x_admin_password: Optional[str] = Header(None)):
    require_admin(x_admin_password)
    return catalog.stats(get_store(), settings.ticket_price)


@router.get("/admin/numbers", response_model=AdminNumbersResponse)
def admin_numbers(
    buyer: Optional[str] = Query(None, description="Exact buyer name"),
    sold: Optional[bool] = Query(None, description="Filter by sale state"),
    x_admin_password: Optional[str] = Header(None),
):
    require_admin(x_admin_password)
    return catalog.admin_numbers(get_store(), settings.ticket_price, buyer=buyer, sold=sold)
