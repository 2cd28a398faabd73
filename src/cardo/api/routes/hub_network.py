"""Hub network reporting endpoints."""

from __future__ import annotations

from dataclasses import asdict
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Path, status
from fastapi.responses import Response

from ...data.hub_repository import get_hubs
from ...schemas.hub_network import DistrictRecordModel, DistrictSummaryModel, HubModel, RebuildResponse
from ...services.context import AppContext
from ...services.hub_network import export_workbook
from ..dependencies import get_context

router = APIRouter(tags=["hub-network"])

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@router.get("/hubs", response_model=list[HubModel], status_code=status.HTTP_200_OK)
def list_hubs() -> list[HubModel]:
    return [HubModel(**asdict(hub)) for hub in get_hubs()]


@router.get("/hub-network/districts", response_model=list[DistrictSummaryModel], status_code=status.HTTP_200_OK)
def list_district_summaries(context: AppContext = Depends(get_context)) -> list[DistrictSummaryModel]:
    return [DistrictSummaryModel.model_validate(item) for item in context.aggregator.list_district_summaries()]


@router.get(
    "/hub-network/districts/{district}",
    response_model=list[DistrictRecordModel],
    status_code=status.HTTP_200_OK,
)
def get_district_requests(
    district: str = Path(..., description="District name, e.g. Idukki"),
    context: AppContext = Depends(get_context),
) -> list[DistrictRecordModel]:
    return [DistrictRecordModel(**asdict(record)) for record in context.aggregator.get_by_district(district)]


@router.post("/hub-network/rebuild", response_model=RebuildResponse, status_code=status.HTTP_200_OK)
def rebuild_hub_network(context: AppContext = Depends(get_context)) -> RebuildResponse:
    count = context.aggregator.rebuild(context.store.all())
    return RebuildResponse(rebuilt=True, request_count=count)


@router.get("/hub-network/export", status_code=status.HTTP_200_OK)
def export_hub_network(context: AppContext = Depends(get_context)) -> Response:
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    file_name = f"hub_network_{timestamp}.xlsx"
    return Response(
        content=export_workbook(context.aggregator),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{file_name}"'},
    )
