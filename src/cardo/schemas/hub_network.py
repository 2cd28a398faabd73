"""Hub network reporting schemas."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class DistrictRecordModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    request_id: str
    customer_name: str
    order_date: str
    total_amount: Optional[float] = None
    status: str


class DistrictSummaryModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    district: str
    request_count: int
    total_amount: float


class RebuildResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    rebuilt: bool
    request_count: int


class HubModel(BaseModel):
    name: str
    district: str
    state: str
