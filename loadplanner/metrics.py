from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Iterable

from .models import CargoItem, Container, LoadResult

CUBIC_CM_PER_CUBIC_FOOT = 28316.8466


@dataclass(frozen=True)
class LoadMetrics:
    container_volume: float
    used_volume: float
    remaining_volume: float
    container_volume_cubic_feet: float
    used_volume_cubic_feet: float
    remaining_volume_cubic_feet: float
    total_items: int
    placed_count: int
    unplaced_count: int
    volume_utilization_percent: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def load_metrics(container: Container, items: Iterable[CargoItem], result: LoadResult) -> LoadMetrics:
    container_volume = container.volume
    used_volume = result.placed_volume
    remaining_volume = container_volume - used_volume
    # Requested units, including lines the packer skipped for bad dimensions.
    total_items = sum(max(1, int(item.quantity or 1)) for item in items)

    return LoadMetrics(
        container_volume=container_volume,
        used_volume=used_volume,
        remaining_volume=remaining_volume,
        container_volume_cubic_feet=container_volume / CUBIC_CM_PER_CUBIC_FOOT,
        used_volume_cubic_feet=used_volume / CUBIC_CM_PER_CUBIC_FOOT,
        remaining_volume_cubic_feet=remaining_volume / CUBIC_CM_PER_CUBIC_FOOT,
        total_items=total_items,
        placed_count=result.placed_count,
        unplaced_count=result.unplaced_count,
        volume_utilization_percent=result.volume_utilization_percent,
    )
