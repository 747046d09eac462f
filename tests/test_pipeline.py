"""Tests for the pipeline operations that tie state, legend and export together."""

import xml.etree.ElementTree as ET

import pytest

from config import config
from processing import ChartPipeline, SurfaceSnapshot
from processing.legend import render_legend
from state import ChartState

from conftest import make_record


SURFACE = (
    '<svg xmlns="http://www.w3.org/2000/svg" width="900" height="400">'
    '<g class="recharts-legend-wrapper"/><path d="M0,0"/></svg>'
)


def _gdp_records(count=4):
    return [
        make_record(f'C{i}', 'GDP', {2020: float(i + 1)}, country_name=f'Country {i}',
                    variable_name='Gross domestic product at market prices')
        for i in range(count)
    ]


@pytest.fixture
def wide_state():
    state = ChartState()
    state.set_plotted([f'C{i}:GDP' for i in range(4)])
    return state


def _export_legend_transforms(document):
    root = ET.fromstring(document.split('\n', 1)[1])
    [legend] = [el for el in root.iter() if el.get('class') == 'export-legend']
    return [item.get('transform') for item in legend]


# ============================================================================
# Legend size
# ============================================================================

def test_legend_size_defaults_to_config(wide_state):
    pipeline = ChartPipeline(wide_state, _gdp_records())
    assert pipeline.legend_size() == (config.legend_width, config.legend_height)


def test_legend_size_uses_recorded_box(wide_state):
    wide_state.set_legend_size(500, 90)
    wide_state.set_legend_size(None, -1)

    assert ChartPipeline(wide_state).legend_size() == (500.0, 90.0)


def test_export_legend_matches_live_layout(wide_state):
    wide_state.set_legend_size(500, 60)
    snapshot = SurfaceSnapshot(markup=SURFACE, width=900, height=400, plot_left=40, plot_width=300)
    pipeline = ChartPipeline(wide_state, _gdp_records(), snapshot_provider=lambda: snapshot)

    live = pipeline.layout_legend()
    result = pipeline.export_flattened_document()

    assert result.is_valid
    assert len({p.y for p in live.placed}) > 1
    assert _export_legend_transforms(result.document) == [
        item.get('transform') for item in render_legend(live)
    ]


def test_explicit_box_overrides_recorded_size(wide_state):
    wide_state.set_legend_size(500, 60)
    pipeline = ChartPipeline(wide_state, _gdp_records())

    unbounded = pipeline.layout_legend(width=float('inf'), height=float('inf'))
    assert {p.y for p in unbounded.placed} == {10}
    assert unbounded.truncated_count == 0


# ============================================================================
# Derived series
# ============================================================================

def test_derived_values_survive_operand_changes(gdp_record, population_record):
    state = ChartState()
    state.set_plotted(['DEU:GDP', 'DEU:POP'])
    derived = ChartPipeline(state, [gdp_record, population_record]).derive_series(
        'DEU:GDP', 'DEU:POP', 'divide', timestamp=1.0,
    )

    revised = make_record('DEU', 'GDP', {2019: 1.0, 2020: 2.0, 2021: 3.0},
                          country_name='Germany', variable_name='Gross domestic product')
    state.toggle_plotted('DEU:GDP')
    later = ChartPipeline(state, [revised, population_record])

    assert later.find_series(derived.display_key).values == derived.values
    assert derived.display_key in [s.display_key for s in later.get_plotted_series()]
    assert derived.values[2019] == pytest.approx(3400.0 / 83.0)
