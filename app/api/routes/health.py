from datetime import datetime, timezone

from fastapi import APIRouter

from app.core.config import settings
from app.core.errors import StoreUnavailable
from app.models.schemas import HealthResponse
from app.store.factory import get_store

router = APIRouter(tags=["meta"])


@router.get("/")
def root():
    return {"ok": True, "service": "Rifa Numbers API"}


@router.get("/health", response_model=HealthResponse)
def health():
    try:
        store = get_store()
    except StoreUnavailable:
        return {
            "status": "degraded",
            "time": datetime.now(timezone.utc),
            "store": {"backend": settings.store_backend, "reachable": False},
        }
    reachable = store.ping()
    return {
        "status": "ok" if reachable else "degraded",
        "time": datetime.now(timezone.utc),
        "store": {"backend": store.backend, "reachable": reachable},
    }


@router.get("/version")
def version():
    return {"version": "1.0.0"}
