"""Standard truck bodies and the cargo colour palette."""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable

from .models import CargoItem, Container

# Internal cargo dimensions in cm, payload in kg.
TRUCK_OPTIONS: tuple[Container, ...] = (
    Container(id="default-truck-1", name="Tata LPT 1613 Container", length=600, width=240, height=240, max_weight=16000),
    Container(id="tata-1109", name="Tata 1109 Cabin Chassis", length=450, width=220, height=220, max_weight=11000),
    Container(id="eicher-12ft", name="Eicher 12 Ft Single Axle", length=360, width=180, height=180, max_weight=7500),
    Container(id="bharatbenz-1623r", name="BharatBenz 1623R Tipper", length=550, width=230, height=150, max_weight=16000),
    Container(id="ashok-1616", name="Ashok Leyland 1616 HD", length=650, width=240, height=240, max_weight=16000),
    Container(id="mahindra-blazo", name="Mahindra Blazo 25 HP Tipper", length=480, width=210, height=160, max_weight=25000),
    Container(id="tata-407", name="Tata 407 Gold SFC", length=320, width=170, height=170, max_weight=4000),
    Container(id="eicher-pro-2049", name="Eicher Pro 2049", length=580, width=230, height=230, max_weight=20000),
    Container(id="ashok-leyland-dost", name="Ashok Leyland Dost+", length=280, width=160, height=160, max_weight=1900),
    Container(id="mahindra-furio", name="Mahindra Furio 17", length=520, width=220, height=220, max_weight=17000),
    Container(id="tata-signa-4825", name="Tata Signa 4825.TK", length=700, width=250, height=250, max_weight=48000),
)

DEFAULT_TRUCK = TRUCK_OPTIONS[0]

ITEM_COLORS: tuple[str, ...] = (
    "#ef4444",
    "#f97316",
    "#f59e0b",
    "#84cc16",
    "#10b981",
    "#06b6d4",
    "#3b82f6",
    "#6366f1",
    "#8b5cf6",
    "#d946ef",
)


def get_truck(truck_id: str) -> Container:
    for truck in TRUCK_OPTIONS:
        if truck.id == truck_id:
            return truck
    known = ", ".join(truck.id for truck in TRUCK_OPTIONS)
    raise KeyError(f"Unknown truck `{truck_id}`. Known trucks: {known}.")


def merge_fleet(custom_trucks: Iterable[Container] = ()) -> list[Container]:
    """Presets first, replaced in place by custom trucks sharing their id."""
    fleet: dict[str, Container] = {truck.id: truck for truck in TRUCK_OPTIONS}
    for truck in custom_trucks:
        fleet[truck.id] = truck
    return list(fleet.values())


def assign_colors(items: Iterable[CargoItem]) -> list[CargoItem]:
    colored: list[CargoItem] = []
    for index, item in enumerate(items):
        if item.color:
            colored.append(item)
        else:
            colored.append(replace(item, color=ITEM_COLORS[index % len(ITEM_COLORS)]))
    return colored
