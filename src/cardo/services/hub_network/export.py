"""Excel export of the hub network district index."""

from __future__ import annotations

import re
from io import BytesIO

from openpyxl import Workbook

from .aggregator import HubNetworkAggregator

SUMMARY_HEADERS = ["District", "Requests", "Total Amount"]
RECORD_HEADERS = ["Request ID", "Customer", "Order Date", "Total Amount", "Status"]
_INVALID_SHEET_CHARS = re.compile(r"[\[\]\*\?/\\:]")


def _sheet_title(name: str) -> str:
    # Excel limits sheet titles to 31 characters without []*?/\:
    return _INVALID_SHEET_CHARS.sub("_", name)[:31] or "District"


def export_workbook(aggregator: HubNetworkAggregator) -> bytes:
    """Render a summary sheet plus one sheet per district."""
    summaries = sorted(aggregator.list_district_summaries(), key=lambda item: item["district"].lower())

    workbook = Workbook()
    summary_sheet = workbook.active
    summary_sheet.title = "Summary"
    summary_sheet.append(SUMMARY_HEADERS)
    for summary in summaries:
        summary_sheet.append([summary["district"], summary["requestCount"], summary["totalAmount"]])

    for summary in summaries:
        sheet = workbook.create_sheet(_sheet_title(summary["district"]))
        sheet.append(RECORD_HEADERS)
        for record in aggregator.get_by_district(summary["district"]):
            sheet.append([
                record.request_id,
                record.customer_name,
                record.order_date,
                record.total_amount,
                record.status,
            ])

    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()
