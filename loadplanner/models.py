"""Data model for truck load planning.

Coordinates follow the loading-bay convention used by the renderer: the
origin is one bottom corner of the cargo space, x runs along the truck
length, y along the height and z along the width. All lengths are in cm.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Optional


@dataclass(frozen=True)
class Dimensions:
    length: float
    width: float
    height: float

    @property
    def volume(self) -> float:
        return float(self.length * self.width * self.height)

    def is_positive(self) -> bool:
        return all(
            value is not None and value > 0
            for value in (self.length, self.width, self.height)
        )


@dataclass(frozen=True)
class Container:
    length: float
    width: float
    height: float
    id: str = "truck"
    name: str = ""
    max_weight: Optional[float] = None

    @property
    def volume(self) -> float:
        return float(self.length * self.width * self.height)


@dataclass(frozen=True)
class CargoItem:
    """A line of cargo: one item description repeated ``quantity`` times.

    ``weight``, ``is_fragile`` and ``is_stackable`` are carried through to the
    result untouched; the packer does not look at them.
    """

    id: str
    name: str
    dimensions: Optional[Dimensions]
    quantity: int = 1
    color: str = ""
    weight: Optional[float] = None
    is_fragile: bool = False
    is_stackable: bool = True

    @property
    def volume(self) -> float:
        return self.dimensions.volume if self.dimensions is not None else 0.0

    def single_unit(self) -> CargoItem:
        return replace(self, quantity=1)


@dataclass(frozen=True)
class Placement:
    item: CargoItem
    position: tuple[float, float, float]
    uuid: str
    rotation: tuple[float, float, float] = (0.0, 0.0, 0.0)

    @property
    def x(self) -> float:
        return self.position[0]

    @property
    def y(self) -> float:
        return self.position[1]

    @property
    def z(self) -> float:
        return self.position[2]

    @property
    def length(self) -> float:
        return self.item.dimensions.length

    @property
    def width(self) -> float:
        return self.item.dimensions.width

    @property
    def height(self) -> float:
        return self.item.dimensions.height

    @property
    def volume(self) -> float:
        return self.item.volume

    # Extents along the engine axes (x: length, y: height, z: width).
    @property
    def x_max(self) -> float:
        return self.x + self.length

    @property
    def y_max(self) -> float:
        return self.y + self.height

    @property
    def z_max(self) -> float:
        return self.z + self.width


@dataclass
class LoadResult:
    container_id: str
    placements: list[Placement] = field(default_factory=list)
    unplaced_items: list[CargoItem] = field(default_factory=list)
    volume_utilization_percent: float = 0.0

    @property
    def placed_volume(self) -> float:
        return sum(placement.volume for placement in self.placements)

    @property
    def placed_count(self) -> int:
        return len(self.placements)

    @property
    def unplaced_count(self) -> int:
        return len(self.unplaced_items)
