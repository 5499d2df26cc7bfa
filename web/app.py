from __future__ import annotations

import sys
import time
from pathlib import Path

import pandas as pd
import plotly.graph_objects as go
import streamlit as st

# Ensure sibling package imports (e.g. `loadplanner.*`) work when Streamlit runs from `web/`.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from loadplanner.fleet import DEFAULT_TRUCK, ITEM_COLORS, assign_colors, merge_fleet
from loadplanner.metrics import LoadMetrics, load_metrics
from loadplanner.models import Container, LoadResult
from loadplanner.packing_engine import pack
from loadplanner.workbook import (
    EXCEL_MIME,
    build_template_workbook,
    container_from_frame,
    items_from_frame,
    read_excel_input,
    result_to_frames,
    result_to_workbook,
)


st.set_page_config(page_title="Truck Load Planner", layout="wide")


@st.cache_data(show_spinner=False)
def load_input(file_bytes: bytes) -> tuple[pd.DataFrame, pd.DataFrame]:
    return read_excel_input(file_bytes)


@st.cache_data(show_spinner=False)
def template_bytes() -> bytes:
    return build_template_workbook()


def build_box_mesh(
    x: float,
    y: float,
    z: float,
    length: float,
    width: float,
    height: float,
    color: str,
    hover_label: str,
) -> go.Mesh3d:
    vx = [x, x + length, x + length, x, x, x + length, x + length, x]
    vy = [y, y, y + width, y + width, y, y, y + width, y + width]
    vz = [z, z, z, z, z + height, z + height, z + height, z + height]

    return go.Mesh3d(
        x=vx,
        y=vy,
        z=vz,
        i=[0, 0, 4, 4, 0, 1, 2, 3, 0, 0, 1, 2],
        j=[1, 2, 5, 6, 1, 2, 3, 0, 4, 3, 5, 6],
        k=[2, 3, 6, 7, 5, 6, 7, 4, 5, 7, 6, 7],
        color=color,
        opacity=0.75,
        name=hover_label,
        hovertemplate=f"{hover_label}<extra></extra>",
        showscale=False,
        showlegend=False,
    )


def build_truck_wireframe(length: float, width: float, height: float) -> go.Scatter3d:
    corners = [
        (0, 0, 0),
        (length, 0, 0),
        (length, width, 0),
        (0, width, 0),
        (0, 0, height),
        (length, 0, height),
        (length, width, height),
        (0, width, height),
    ]
    edges = [
        (0, 1),
        (1, 2),
        (2, 3),
        (3, 0),
        (4, 5),
        (5, 6),
        (6, 7),
        (7, 4),
        (0, 4),
        (1, 5),
        (2, 6),
        (3, 7),
    ]

    x_values: list[float | None] = []
    y_values: list[float | None] = []
    z_values: list[float | None] = []
    for start, end in edges:
        x_values.extend([corners[start][0], corners[end][0], None])
        y_values.extend([corners[start][1], corners[end][1], None])
        z_values.extend([corners[start][2], corners[end][2], None])

    return go.Scatter3d(
        x=x_values,
        y=y_values,
        z=z_values,
        mode="lines",
        line={"color": "#111827", "width": 5},
        name="Truck",
        hoverinfo="skip",
        showlegend=False,
    )


def build_load_figure(truck: Container, result: LoadResult) -> go.Figure:
    fig = go.Figure()
    fig.add_trace(build_truck_wireframe(float(truck.length), float(truck.width), float(truck.height)))

    # Packer axes are x=length, y=height, z=width; the scene is z-up.
    for index, placement in enumerate(result.placements):
        hover_label = (
            f"{placement.item.name} ({placement.item.id})<br>"
            f"Pos: ({placement.x:.0f}, {placement.y:.0f}, {placement.z:.0f}) cm<br>"
            f"Dims: {placement.length:.0f} × {placement.width:.0f} × {placement.height:.0f} cm"
        )
        fig.add_trace(
            build_box_mesh(
                x=placement.x,
                y=placement.z,
                z=placement.y,
                length=placement.length,
                width=placement.width,
                height=placement.height,
                color=placement.item.color or ITEM_COLORS[index % len(ITEM_COLORS)],
                hover_label=hover_label,
            )
        )

    max_dimension = max(float(truck.length), float(truck.width), float(truck.height))
    fig.update_layout(
        margin={"l": 0, "r": 0, "t": 10, "b": 0},
        scene={
            "xaxis_title": "Length (cm)",
            "yaxis_title": "Width (cm)",
            "zaxis_title": "Height (cm)",
            "xaxis": {"range": [0, float(truck.length)]},
            "yaxis": {"range": [0, float(truck.width)]},
            "zaxis": {"range": [0, float(truck.height)]},
            "aspectmode": "manual",
            "aspectratio": {
                "x": float(truck.length) / max_dimension,
                "y": float(truck.width) / max_dimension,
                "z": float(truck.height) / max_dimension,
            },
            "camera": {"eye": {"x": 1.45, "y": 1.45, "z": 1.1}},
        },
    )
    return fig


def render_result(truck: Container, result: LoadResult, metrics: LoadMetrics, runtime_seconds: float) -> None:
    st.subheader("Results")
    metric_cols = st.columns(6)
    metric_cols[0].metric("Total Items", metrics.total_items)
    metric_cols[1].metric("Placed", metrics.placed_count)
    metric_cols[2].metric("Unplaced", metrics.unplaced_count)
    metric_cols[3].metric("Utilization", f"{metrics.volume_utilization_percent:.1f}%")
    metric_cols[4].metric("Free Space", f"{metrics.remaining_volume_cubic_feet:.1f} ft³")
    metric_cols[5].metric("Runtime (s)", f"{runtime_seconds:.2f}")

    placements_df, unplaced_df = result_to_frames(result)
    if result.placements:
        st.plotly_chart(build_load_figure(truck, result), use_container_width=True)
        st.markdown("**Placements**")
        st.dataframe(placements_df, use_container_width=True)
    else:
        st.warning("No items could be placed in the selected truck.")

    if not unplaced_df.empty:
        st.markdown("**Unplaced Items**")
        st.dataframe(unplaced_df, use_container_width=True)

    st.download_button(
        label="Download Load Plan (Excel)",
        data=result_to_workbook(result, metrics),
        file_name="load_plan.xlsx",
        mime=EXCEL_MIME,
    )


def main() -> None:
    st.title("Truck Load Planner")
    st.write(
        "Upload an `.xlsx` file with `items` and `truck` sheets, "
        "or pick one of the standard trucks. The planner places each unit and renders the load."
    )

    st.download_button(
        label="Download Input Template",
        data=template_bytes(),
        file_name="load_plan_template.xlsx",
        mime=EXCEL_MIME,
    )

    fleet = merge_fleet()
    fleet_ids = [truck.id for truck in fleet]
    selected_id = st.selectbox(
        "Select transport unit",
        fleet_ids,
        index=fleet_ids.index(DEFAULT_TRUCK.id),
        format_func=lambda truck_id: next(truck.name for truck in fleet if truck.id == truck_id),
    )
    truck = next(truck for truck in fleet if truck.id == selected_id)

    uploaded_file = st.file_uploader("Upload Excel file", type=["xlsx"])
    file_bytes = uploaded_file.getvalue() if uploaded_file is not None else template_bytes()
    try:
        items_df, truck_df = load_input(file_bytes)
        items = assign_colors(items_from_frame(items_df))
        if uploaded_file is not None and st.checkbox("Use truck from workbook", value=False):
            truck = container_from_frame(truck_df)
    except ValueError as error:
        st.error(str(error))
        return

    st.markdown("**Manifest Preview**")
    st.dataframe(items_df.head(15), use_container_width=True)

    if st.button("Optimize Load", type="primary"):
        start_time = time.perf_counter()
        try:
            result = pack(truck, items)
        except ValueError as error:
            st.error(str(error))
            return
        runtime_seconds = time.perf_counter() - start_time
        st.session_state["load_plan"] = (truck, result, load_metrics(truck, items, result))
        st.session_state["runtime_seconds"] = runtime_seconds

    cached_plan = st.session_state.get("load_plan")
    if cached_plan is not None:
        planned_truck, result, metrics = cached_plan
        render_result(planned_truck, result, metrics, float(st.session_state.get("runtime_seconds", 0.0)))


if __name__ == "__main__":
    main()
