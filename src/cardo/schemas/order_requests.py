"""Order request API schemas."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..models.domain import HubResponse, OrderRequest, RequestStatus


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class HubResponseModel(_CamelModel):
    message: str
    responded_at: datetime
    responded_by: Optional[str] = None


class OrderRequestModel(_CamelModel):
    id: str
    customer_name: str
    customer_email: str
    customer_phone: str
    product_type: str
    grade: str
    quantity: float
    budget_min: float
    budget_max: float
    urgency: str
    preferred_hub: str
    description: str
    hub_district: Optional[str] = None
    status: RequestStatus
    hub_response: Optional[HubResponseModel] = None
    total_amount: Optional[float] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, request: OrderRequest) -> "OrderRequestModel":
        hub_response = None
        if request.hub_response is not None:
            hub_response = HubResponseModel(
                message=request.hub_response.message,
                responded_at=request.hub_response.responded_at,
                responded_by=request.hub_response.responded_by,
            )
        return cls(
            id=request.id,
            customer_name=request.customer_name,
            customer_email=request.customer_email,
            customer_phone=request.customer_phone,
            product_type=request.product_type,
            grade=request.grade,
            quantity=request.quantity,
            budget_min=request.budget_min,
            budget_max=request.budget_max,
            urgency=request.urgency,
            preferred_hub=request.preferred_hub,
            description=request.description,
            hub_district=request.hub_district,
            status=request.status,
            hub_response=hub_response,
            total_amount=request.total_amount,
            created_at=request.created_at,
            updated_at=request.updated_at,
        )

    def to_domain(self) -> OrderRequest:
        return OrderRequest(
            id=self.id,
            customer_name=self.customer_name,
            customer_email=self.customer_email,
            customer_phone=self.customer_phone,
            product_type=self.product_type,
            grade=self.grade,
            quantity=self.quantity,
            budget_min=self.budget_min,
            budget_max=self.budget_max,
            urgency=self.urgency,
            preferred_hub=self.preferred_hub,
            description=self.description,
            hub_district=self.hub_district,
            status=self.status,
            created_at=self.created_at,
            updated_at=self.updated_at,
            hub_response=HubResponse(
                message=self.hub_response.message,
                responded_at=self.hub_response.responded_at,
                responded_by=self.hub_response.responded_by,
            ) if self.hub_response else None,
            total_amount=self.total_amount,
        )


class OrderRequestListResponse(_CamelModel):
    items: List[OrderRequestModel]
    total: int
    counts_by_status: dict[str, int]
    page: int
    limit: int
    pages: int = 0


class StatusUpdateRequest(_CamelModel):
    status: str = Field(..., description="Target status: accepted, rejected or completed.")
    message: Optional[str] = Field(default=None, description="Reply shown to the customer.")
    responded_by: Optional[str] = Field(default=None, description="Reviewer identifier.")


class ValidationErrorDetail(BaseModel):
    message: str
    errors: dict[str, str]


class ValidationErrorResponse(BaseModel):
    """Body of a 400 response to an invalid submission."""

    detail: ValidationErrorDetail
