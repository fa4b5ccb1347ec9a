from fastapi import APIRouter

from app.api.dependencies import require_purchase_password
from app.models.schemas import PurchaseRequest, PurchaseResponse
from app.services.allocation import purchase_numbers
from app.store.factory import get_store

router = APIRouter(tags=["purchases"])


@router.post("/purchase", response_model=PurchaseResponse)
def purchase(payload: PurchaseRequest):
    require_purchase_password(payload.password)
    return purchase_numbers(get_store(), payload.numbers, payload.buyer)
