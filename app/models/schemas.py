from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_serializer


class HealthStore(BaseModel):
    backend: str
    reachable: bool


class HealthResponse(BaseModel):
    status: str
    time: datetime
    store: HealthStore


class TicketOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    number: int
    sold: bool
    buyer: Optional[str] = None
    sold_at: Optional[datetime] = Field(None, alias="soldAt")


class PurchaseRequest(BaseModel):
    numbers: list[StrictInt]
    buyer: str = Field(..., max_length=120)
    password: str = Field(..., max_length=128)


class PurchaseResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    updated_numbers: list[int] = Field(..., alias="updatedNumbers")
    buyer: str
    sold_at: datetime = Field(..., alias="soldAt")


class ResetResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    reset_count: int = Field(..., alias="resetCount")


class StatsResponse(BaseModel):
    total: int
    sold: int
    available: int
    revenue: Decimal

    @field_serializer("revenue")
    def _revenue_as_number(self, revenue: Decimal):
        if revenue == revenue.to_integral_value():
            return int(revenue)
        return float(revenue)


class AdminNumbersResponse(BaseModel):
    numbers: list[TicketOut]
    stats: StatsResponse
