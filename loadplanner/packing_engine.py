from __future__ import annotations

import logging
import uuid
from typing import Iterable, Optional, Sequence

from .models import CargoItem, Container, LoadResult, Placement

logger = logging.getLogger(__name__)

Point = tuple[float, float, float]
# (length, height, width): extents along the engine x, y and z axes.
Extent = tuple[float, float, float]


class InvalidContainerError(ValueError):
    """Raised when the container is missing or has a non-positive dimension."""


def pack(container: Optional[Container], items: Optional[Iterable[CargoItem]]) -> LoadResult:
    """Greedily load ``items`` into ``container``.

    Units are placed largest volume first (taller first on ties) at the
    lowest, then backmost, then leftmost candidate anchor where they fit.
    Anchors are the container origin plus the right, top and front corners
    of every box already placed. A unit with no fitting anchor is reported
    as unplaced; there is no backtracking.
    """
    _validate_container(container)

    units = _expand_items(items or ())
    units.sort(key=lambda unit: (-unit.volume, -unit.dimensions.height))

    bounds: Extent = (float(container.length), float(container.height), float(container.width))
    placements: list[Placement] = []
    occupied: list[tuple[Point, Extent]] = []
    unplaced: list[CargoItem] = []
    anchors: set[Point] = {(0.0, 0.0, 0.0)}

    for unit in units:
        extent = _extent(unit)
        anchor = _find_anchor(extent, anchors, occupied, bounds)
        if anchor is None:
            unplaced.append(unit)
            continue

        placements.append(Placement(item=unit, position=anchor, uuid=uuid.uuid4().hex))
        occupied.append((anchor, extent))
        anchors.update(_derived_anchors(anchor, extent))

    placed_volume = sum(placement.volume for placement in placements)
    logger.debug(
        "Packed %d of %d units into %s (%d unplaced)",
        len(placements),
        len(units),
        container.id,
        len(unplaced),
    )
    return LoadResult(
        container_id=container.id,
        placements=placements,
        unplaced_items=unplaced,
        volume_utilization_percent=100.0 * placed_volume / container.volume,
    )


def boxes_overlap(first_origin: Point, first_extent: Extent, second_origin: Point, second_extent: Extent) -> bool:
    """Strict AABB intersection; boxes that only share a face do not overlap."""
    return all(
        first_origin[axis] < second_origin[axis] + second_extent[axis]
        and second_origin[axis] < first_origin[axis] + first_extent[axis]
        for axis in range(3)
    )


def fits_at(
    anchor: Point,
    extent: Extent,
    occupied: Sequence[tuple[Point, Extent]],
    bounds: Extent,
) -> bool:
    if any(anchor[axis] + extent[axis] > bounds[axis] for axis in range(3)):
        return False
    return not any(boxes_overlap(anchor, extent, origin, other) for origin, other in occupied)


def placement_extent(placement: Placement) -> Extent:
    return _extent(placement.item)


def _validate_container(container: Optional[Container]) -> None:
    if container is None:
        raise InvalidContainerError("A container is required for load planning.")
    for label in ("length", "width", "height"):
        value = getattr(container, label, None)
        if value is None or not value > 0:
            raise InvalidContainerError(f"Container `{label}` must be positive, got {value!r}.")


def _expand_items(items: Iterable[CargoItem]) -> list[CargoItem]:
    units: list[CargoItem] = []
    for item in items:
        if item.dimensions is None or not item.dimensions.is_positive():
            logger.warning("Skipping item %r with invalid dimensions: %r", item.name, item.dimensions)
            continue
        quantity = max(1, int(item.quantity or 1))
        unit = item.single_unit()
        units.extend(unit for _ in range(quantity))
    return units


def _extent(item: CargoItem) -> Extent:
    dimensions = item.dimensions
    return (float(dimensions.length), float(dimensions.height), float(dimensions.width))


def _find_anchor(
    extent: Extent,
    anchors: set[Point],
    occupied: list[tuple[Point, Extent]],
    bounds: Extent,
) -> Optional[Point]:
    # Bottom first, then back, then left.
    for anchor in sorted(anchors, key=lambda point: (point[1], point[2], point[0])):
        if fits_at(anchor, extent, occupied, bounds):
            return anchor
    return None


def _derived_anchors(anchor: Point, extent: Extent) -> list[Point]:
    x, y, z = anchor
    length, height, width = extent
    return [
        (x + length, y, z),
        (x, y + height, z),
        (x, y, z + width),
    ]
