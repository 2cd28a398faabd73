"""Hub network reporting services."""

from .aggregator import UNASSIGNED_DISTRICT, HubNetworkAggregator
from .export import export_workbook

__all__ = ["HubNetworkAggregator", "UNASSIGNED_DISTRICT", "export_workbook"]
