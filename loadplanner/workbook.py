from __future__ import annotations

import io
from typing import Any, Optional

import pandas as pd

from .fleet import DEFAULT_TRUCK
from .metrics import LoadMetrics
from .models import CargoItem, Container, Dimensions, LoadResult

ITEM_COLUMN_ALIASES: dict[str, tuple[str, ...]] = {
    "item": ("item", "item_id", "sku", "id"),
    "name": ("name", "description", "label"),
    "length": ("length", "l"),
    "width": ("width", "w"),
    "height": ("height", "h"),
    "weight": ("weight", "wt"),
    "quantity": ("quantity", "qty", "count"),
    "color": ("color", "colour"),
    "is_fragile": ("is_fragile", "fragile"),
    "is_stackable": ("is_stackable", "stackable"),
}

TRUCK_COLUMN_ALIASES: dict[str, tuple[str, ...]] = {
    "truck": ("truck", "truck_id", "id", "container"),
    "name": ("name", "model"),
    "length": ("length", "l"),
    "width": ("width", "w"),
    "height": ("height", "h"),
    "max_weight": ("max_weight", "weight_capacity", "payload"),
}

PLACEMENT_COLUMNS = [
    "uuid",
    "item_id",
    "name",
    "x",
    "y",
    "z",
    "length",
    "width",
    "height",
    "volume",
    "weight",
    "color",
    "is_fragile",
    "is_stackable",
]

UNPLACED_COLUMNS = ["item_id", "name", "length", "width", "height", "volume", "weight", "reason"]

EXCEL_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def read_excel_input(file_bytes: bytes) -> tuple[pd.DataFrame, pd.DataFrame]:
    workbook = pd.read_excel(io.BytesIO(file_bytes), sheet_name=None)
    sheet_lookup = {str(sheet_name).strip().lower(): sheet_name for sheet_name in workbook.keys()}
    missing = [name for name in ("items", "truck") if name not in sheet_lookup]
    if missing:
        raise ValueError(f"Missing required sheet(s): {', '.join(missing)}.")
    return workbook[sheet_lookup["items"]], workbook[sheet_lookup["truck"]]


def items_from_frame(items_df: pd.DataFrame) -> list[CargoItem]:
    items = _rename_columns(items_df.copy(), ITEM_COLUMN_ALIASES)
    _require_columns(items, ("item", "length", "width", "height"), entity_name="items")

    empty_ids = items["item"].isna() | (items["item"].astype(str).str.strip() == "")
    if empty_ids.any():
        raise ValueError("`items` sheet has empty item identifiers.")
    items["item"] = items["item"].astype(str).str.strip()

    for column in ("length", "width", "height"):
        items[column] = pd.to_numeric(items[column], errors="coerce")

    if "name" not in items.columns:
        items["name"] = items["item"]
    items["name"] = items["name"].fillna(items["item"]).astype(str)

    if "weight" in items.columns:
        items["weight"] = pd.to_numeric(items["weight"], errors="coerce")
    else:
        items["weight"] = float("nan")

    if "quantity" in items.columns:
        items["quantity"] = pd.to_numeric(items["quantity"], errors="coerce").fillna(1).astype(int)
    else:
        items["quantity"] = 1

    if "color" not in items.columns:
        items["color"] = ""
    items["color"] = items["color"].fillna("").astype(str).str.strip()

    for column, default in (("is_fragile", False), ("is_stackable", True)):
        if column not in items.columns:
            items[column] = default
        items[column] = items[column].apply(lambda value, fallback=default: _as_bool(value, fallback))

    return [_item_from_row(row) for row in items.to_dict(orient="records")]


def container_from_frame(truck_df: pd.DataFrame) -> Container:
    trucks = _rename_columns(truck_df.copy(), TRUCK_COLUMN_ALIASES)
    _require_columns(trucks, ("length", "width", "height"), entity_name="truck")
    if trucks.empty:
        raise ValueError("`truck` sheet has no usable rows.")

    for column in ("length", "width", "height"):
        trucks[column] = pd.to_numeric(trucks[column], errors="coerce")

    row = trucks.iloc[0].to_dict()
    truck_id = _optional_text(row.get("truck")) or "truck"
    return Container(
        id=truck_id,
        name=_optional_text(row.get("name")) or truck_id,
        length=float(row["length"]),
        width=float(row["width"]),
        height=float(row["height"]),
        max_weight=_optional_float(row.get("max_weight")),
    )


def result_to_frames(result: LoadResult) -> tuple[pd.DataFrame, pd.DataFrame]:
    placements = [
        {
            "uuid": placement.uuid,
            "item_id": placement.item.id,
            "name": placement.item.name,
            "x": placement.x,
            "y": placement.y,
            "z": placement.z,
            "length": placement.length,
            "width": placement.width,
            "height": placement.height,
            "volume": placement.volume,
            "weight": placement.item.weight,
            "color": placement.item.color,
            "is_fragile": placement.item.is_fragile,
            "is_stackable": placement.item.is_stackable,
        }
        for placement in result.placements
    ]
    unplaced = [
        {
            "item_id": item.id,
            "name": item.name,
            "length": item.dimensions.length,
            "width": item.dimensions.width,
            "height": item.dimensions.height,
            "volume": item.volume,
            "weight": item.weight,
            "reason": "No feasible position left in the truck.",
        }
        for item in result.unplaced_items
    ]
    return (
        pd.DataFrame(placements, columns=PLACEMENT_COLUMNS),
        pd.DataFrame(unplaced, columns=UNPLACED_COLUMNS),
    )


def build_template_workbook() -> bytes:
    items_template = pd.DataFrame(
        [
            {"item": "PAL-1", "name": "Euro pallet", "length": 120, "width": 80, "height": 150, "weight": 400, "quantity": 4, "color": "#3b82f6", "is_fragile": False, "is_stackable": False},
            {"item": "CRT-M", "name": "Medium carton", "length": 60, "width": 40, "height": 40, "weight": 12, "quantity": 20, "color": "#f59e0b", "is_fragile": False, "is_stackable": True},
            {"item": "TV-55", "name": "55in TV", "length": 140, "width": 20, "height": 90, "weight": 25, "quantity": 2, "color": "#ef4444", "is_fragile": True, "is_stackable": False},
        ]
    )
    truck_template = pd.DataFrame(
        [
            {
                "truck": DEFAULT_TRUCK.id,
                "name": DEFAULT_TRUCK.name,
                "length": DEFAULT_TRUCK.length,
                "width": DEFAULT_TRUCK.width,
                "height": DEFAULT_TRUCK.height,
                "max_weight": DEFAULT_TRUCK.max_weight,
            }
        ]
    )

    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        items_template.to_excel(writer, index=False, sheet_name="items")
        truck_template.to_excel(writer, index=False, sheet_name="truck")
    return buffer.getvalue()


def result_to_workbook(result: LoadResult, metrics: Optional[LoadMetrics] = None) -> bytes:
    placements_df, unplaced_df = result_to_frames(result)
    summary: dict[str, Any] = (
        metrics.to_dict()
        if metrics is not None
        else {
            "placed_count": result.placed_count,
            "unplaced_count": result.unplaced_count,
            "volume_utilization_percent": result.volume_utilization_percent,
        }
    )
    summary = {"container_id": result.container_id, **summary}

    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        placements_df.to_excel(writer, index=False, sheet_name="placements")
        unplaced_df.to_excel(writer, index=False, sheet_name="unplaced")
        pd.DataFrame([summary]).to_excel(writer, index=False, sheet_name="metrics")
    return buffer.getvalue()


def _item_from_row(row: dict[str, Any]) -> CargoItem:
    measures = (row["length"], row["width"], row["height"])
    dimensions = None if any(pd.isna(value) for value in measures) else Dimensions(*(float(value) for value in measures))
    return CargoItem(
        id=row["item"],
        name=row["name"],
        dimensions=dimensions,
        quantity=int(row["quantity"]),
        color=row["color"],
        weight=None if pd.isna(row["weight"]) else float(row["weight"]),
        is_fragile=bool(row["is_fragile"]),
        is_stackable=bool(row["is_stackable"]),
    )


def _rename_columns(df: pd.DataFrame, aliases: dict[str, tuple[str, ...]]) -> pd.DataFrame:
    normalized_map = {_normalize_column_name(column): column for column in df.columns}
    rename_map: dict[str, str] = {}
    for canonical_name, options in aliases.items():
        for alias in options:
            normalized_alias = _normalize_column_name(alias)
            if normalized_alias in normalized_map:
                rename_map[normalized_map[normalized_alias]] = canonical_name
                break
    return df.rename(columns=rename_map)


def _normalize_column_name(name: Any) -> str:
    return str(name).strip().lower().replace(" ", "_")


def _require_columns(df: pd.DataFrame, required: tuple[str, ...], entity_name: str) -> None:
    missing = [column for column in required if column not in df.columns]
    if missing:
        missing_names = ", ".join(missing)
        raise ValueError(f"`{entity_name}` is missing required column(s): {missing_names}.")


def _optional_text(value: Any) -> str:
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return ""
    return str(value).strip()


def _optional_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    number = pd.to_numeric(pd.Series([value]), errors="coerce").iloc[0]
    return None if pd.isna(number) else float(number)


def _as_bool(value: Any, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return default
    text = str(value).strip().lower()
    if text in {"0", "false", "f", "no", "n"}:
        return False
    if text in {"1", "true", "t", "yes", "y"}:
        return True
    return default
