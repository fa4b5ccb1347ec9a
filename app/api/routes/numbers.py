from fastapi import APIRouter

from app.models.schemas import TicketOut
from app.services import catalog
from app.store.factory import get_store

router = APIRouter(prefix="/numbers", tags=["numbers"])


@router.get("", response_model=list[TicketOut])
def list_numbers():
    return catalog.list_all(get_store())


@router.get("/sold", response_model=list[TicketOut])
def list_sold_numbers():
    return catalog.list_sold(get_store())


@router.get("/available", response_model=list[TicketOut])
def list_available_numbers():
    return catalog.list_available(get_store())
