"""Truck load planning: greedy 3D placement of cargo into a truck body."""

from .fleet import DEFAULT_TRUCK, TRUCK_OPTIONS, get_truck
from .metrics import LoadMetrics, load_metrics
from .models import CargoItem, Container, Dimensions, LoadResult, Placement
from .packing_engine import InvalidContainerError, pack
from .workbook import build_template_workbook, items_from_frame, result_to_workbook

__all__ = [
    "CargoItem",
    "Container",
    "DEFAULT_TRUCK",
    "Dimensions",
    "InvalidContainerError",
    "LoadMetrics",
    "LoadResult",
    "Placement",
    "TRUCK_OPTIONS",
    "build_template_workbook",
    "get_truck",
    "items_from_frame",
    "load_metrics",
    "pack",
    "result_to_workbook",
]
