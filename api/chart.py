"""
Chart API Endpoints

Per-session chart composition: selection, plotted series, derived series,
labels, the prepared chart payload, legend layout, CSV table and SVG export.
"""

import logging
import math
from typing import List, Optional

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, Field

from config import config, AXIS_COLORS
from processing import ChartPipeline, LegendItem, LegendMetrics, Series, SurfaceSnapshot, pivot_frame
from processing.normalizer import normalize_series
from processing.pivot import pivot_rows
from processing.series import DerivedSeries, json_amount
from processing.legend import layout_legend, render_legend_markup
from sources import source_manager
from state import ChartState, session_store

logger = logging.getLogger(__name__)

chart_router = APIRouter(prefix="/api/sessions/{session_id}")
tools_router = APIRouter(prefix="/api/chart")


# =============================================================================
# PYDANTIC MODELS
# =============================================================================

class SelectionRequest(BaseModel):
    """Filter selection; omitted lists are left unchanged."""
    country_codes: Optional[List[str]] = None
    variable_codes: Optional[List[str]] = None
    years: Optional[List[int]] = None


class PlottedRequest(BaseModel):
    keys: List[str]


class LabelRequest(BaseModel):
    """Blank label clears the override."""
    label: str = ''


class DeriveRequest(BaseModel):
    series_a: str
    series_b: str
    operation: str = 'divide'
    name: str = ''
    unit: str = ''


class ExportRequest(BaseModel):
    """The live chart surface as serialized by the browser."""
    markup: Optional[str] = None
    width: float = Field(gt=0)
    height: float = Field(gt=0)
    plot_left: float = 0.0
    plot_width: Optional[float] = None
    theme: Optional[str] = None


class YearValue(BaseModel):
    year: int
    amount: Optional[float] = None


class SeriesPayload(BaseModel):
    """A series posted directly, for the stateless helpers."""
    display_key: str
    display_label: str = ''
    unit_descriptor: str = ''
    values: List[YearValue] = []


class RowsRequest(BaseModel):
    series: List[SeriesPayload]


class LegendItemPayload(BaseModel):
    display_key: str
    label: str
    color: str = 'black'
    dash_pattern: Optional[str] = None


class LegendLayoutRequest(BaseModel):
    items: List[LegendItemPayload]
    width: Optional[float] = None
    height: Optional[float] = None
    theme: Optional[str] = None


# =============================================================================
# HELPERS
# =============================================================================

def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _state_or_error(session_id: str):
    try:
        return session_store.get(session_id), None
    except ValueError as e:
        return None, _error(400, str(e))


async def _build_pipeline(state: ChartState, snapshot: Optional[SurfaceSnapshot] = None) -> ChartPipeline:
    """Fetch raw records for the session's selection and wrap them in a pipeline."""
    records = await source_manager.fetch_records(
        state.selected_country_codes,
        state.selected_variable_codes,
        state.selected_years,
    )
    return ChartPipeline(
        state,
        records,
        snapshot_provider=(lambda: snapshot) if snapshot is not None else None,
    )


def _json_rows(rows: List[dict]) -> List[dict]:
    """NaN gap markers become null."""
    return [
        {key: (value if key == 'year' else json_amount(value)) for key, value in row.items()}
        for row in rows
    ]


def _limit(value: Optional[float]) -> float:
    return math.inf if value is None or value <= 0 else value


# =============================================================================
# SESSION STATE
# =============================================================================

@chart_router.get("")
async def get_session(session_id: str):
    state, err = _state_or_error(session_id)
    if err:
        return err
    return JSONResponse(state.to_dict())


@chart_router.delete("")
async def reset_session(session_id: str):
    state, err = _state_or_error(session_id)
    if err:
        return err
    return JSONResponse(session_store.reset(session_id).to_dict())


@chart_router.put("/selection")
async def set_selection(session_id: str, body: SelectionRequest):
    state, err = _state_or_error(session_id)
    if err:
        return err
    state.set_selection(body.country_codes, body.variable_codes, body.years)
    return JSONResponse(state.to_dict())


@chart_router.post("/plotted/{key}/toggle")
async def toggle_plotted(session_id: str, key: str):
    state, err = _state_or_error(session_id)
    if err:
        return err
    plotted = state.toggle_plotted(key)
    return JSONResponse({"key": key, "plotted": plotted, "plotted_keys": sorted(state.plotted_keys)})


@chart_router.put("/plotted")
async def set_plotted(session_id: str, body: PlottedRequest):
    state, err = _state_or_error(session_id)
    if err:
        return err
    state.set_plotted(body.keys)
    return JSONResponse({"plotted_keys": sorted(state.plotted_keys)})


@chart_router.put("/names/{key}")
async def set_series_name(session_id: str, key: str, body: LabelRequest):
    state, err = _state_or_error(session_id)
    if err:
        return err
    state.set_custom_series_name(key, body.label)
    return JSONResponse({"custom_series_names": state.custom_series_names})


@chart_router.put("/axis-labels/{axis_id}")
async def set_axis_label(session_id: str, axis_id: str, body: LabelRequest):
    state, err = _state_or_error(session_id)
    if err:
        return err
    state.set_custom_axis_label(axis_id, body.label)
    return JSONResponse({"custom_axis_labels": state.custom_axis_labels})


@chart_router.post("/dots/toggle")
async def toggle_dots(session_id: str):
    state, err = _state_or_error(session_id)
    if err:
        return err
    return JSONResponse({"show_dots": state.toggle_show_dots()})


# =============================================================================
# DERIVED SERIES
# =============================================================================

@chart_router.post("/derived")
async def create_derived(session_id: str, body: DeriveRequest):
    """Calculate A <op> B from two plotted series and plot the result."""
    state, err = _state_or_error(session_id)
    if err:
        return err

    pipeline = await _build_pipeline(state)
    try:
        series = pipeline.derive_series(body.series_a, body.series_b, body.operation, body.name, body.unit)
    except KeyError as e:
        return _error(404, str(e.args[0]) if e.args else "Series not found")
    except ValueError as e:
        return _error(400, str(e))

    return JSONResponse(series.to_dict(), status_code=201)


@chart_router.delete("/derived/{key}")
async def delete_derived(session_id: str, key: str):
    state, err = _state_or_error(session_id)
    if err:
        return err
    if not state.remove_derived(key):
        return _error(404, f"No derived series '{key}'")
    return JSONResponse({"status": "success", "removed": key})


@chart_router.delete("/derived")
async def clear_derived(session_id: str):
    state, err = _state_or_error(session_id)
    if err:
        return err
    state.clear_derived()
    return JSONResponse({"status": "success"})


# =============================================================================
# CHART PAYLOAD
# =============================================================================

@chart_router.get("/chart")
async def get_chart(
    session_id: str,
    width: Optional[float] = Query(None, description="Legend width available, px; remembered for export"),
    height: Optional[float] = Query(None, description="Legend height available, px; remembered for export"),
    theme: Optional[str] = None,
):
    """
    Everything the renderer needs for one chart.

    Returns plottable series (for the selector), the plotted keys, axes,
    per-series styles, pivoted rows and the legend layout.
    """
    state, err = _state_or_error(session_id)
    if err:
        return err

    pipeline = await _build_pipeline(state)
    plottable = pipeline.get_plottable_series()
    plotted = pipeline.get_plotted_series()
    axes = pipeline.get_axis_assignments(plotted)
    styles = pipeline.get_series_styles(plotted)
    rows = pipeline.get_pivot_rows(plotted)
    theme = theme or config.default_theme
    state.set_legend_size(width, height)
    legend = pipeline.layout_legend(pipeline.get_legend_items(plotted))

    return JSONResponse({
        "series": [s.to_dict() for s in plottable],
        "plotted_keys": [s.display_key for s in plotted],
        "axes": [a.to_dict() for a in axes],
        "styles": [s.to_dict() for s in styles],
        "rows": _json_rows(rows),
        "legend": legend.to_dict(),
        "legend_markup": render_legend_markup(legend, theme),
        "axis_color": AXIS_COLORS.get(theme, AXIS_COLORS["light"]),
        "show_dots": state.show_dots,
    })


@chart_router.get("/table.csv")
async def download_table(session_id: str):
    """Plotted series as a year x series CSV table."""
    state, err = _state_or_error(session_id)
    if err:
        return err

    pipeline = await _build_pipeline(state)
    frame = pivot_frame(pipeline.get_plotted_series(), use_labels=True)
    return Response(
        content=frame.to_csv(),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="chart-data.csv"'},
    )


@chart_router.post("/export")
async def export_chart(session_id: str, body: ExportRequest):
    """
    Flatten the posted live surface plus a fresh legend into a standalone SVG.

    Returns 409 with an error message when the surface is unavailable.
    """
    state, err = _state_or_error(session_id)
    if err:
        return err

    snapshot = None
    if body.markup:
        snapshot = SurfaceSnapshot(
            markup=body.markup,
            width=body.width,
            height=body.height,
            plot_left=body.plot_left,
            plot_width=body.plot_width,
        )

    pipeline = await _build_pipeline(state, snapshot)
    result = pipeline.export_flattened_document(body.theme)
    if not result.is_valid:
        logger.info(f"Export refused for session {session_id}: {result.error}")
        return _error(409, result.error or "Export failed")

    return Response(
        content=result.document,
        media_type="image/svg+xml",
        headers={"Content-Disposition": 'attachment; filename="chart.svg"'},
    )


# =============================================================================
# STATELESS HELPERS
# =============================================================================

def _payload_to_series(payloads: List[SeriesPayload]) -> List[Series]:
    """Posted series go through the same normalization as derived ones."""
    derived = [
        DerivedSeries(
            display_key=p.display_key,
            variable_name=p.display_label or p.display_key,
            unit_descriptor=p.unit_descriptor,
            country_code='',
            country_name='',
            values={v.year: v.amount for v in p.values},
        )
        for p in payloads
    ]
    return normalize_series([], derived)


@tools_router.post("/rows")
async def rows_for_series(body: RowsRequest):
    """Pivot posted series into year rows."""
    return JSONResponse({"rows": _json_rows(pivot_rows(_payload_to_series(body.series)))})


@tools_router.post("/legend/layout")
async def legend_layout(body: LegendLayoutRequest):
    """Lay out posted legend items with the default metrics."""
    items = [
        LegendItem(display_key=i.display_key, label=i.label, color=i.color, dash_pattern=i.dash_pattern)
        for i in body.items
    ]
    layout = layout_legend(items, _limit(body.width), _limit(body.height), LegendMetrics())
    result = layout.to_dict()
    result["markup"] = render_legend_markup(layout, body.theme or config.default_theme)
    return JSONResponse(result)
