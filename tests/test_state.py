"""Tests for the per-session chart state and its store."""

import pytest

from processing.series import DerivedSeries
from state import ChartState


def _derived(key='CALC-1'):
    return DerivedSeries(
        display_key=key,
        variable_name='Ratio',
        unit_descriptor='Ratio (a/b)',
        country_code='DEU',
        country_name='Germany',
        values={2020: 1.0},
    )


# ============================================================================
# Selection
# ============================================================================

def test_toggles(chart_state):
    chart_state.toggle_country('DEU')
    chart_state.toggle_country('FRA')
    chart_state.toggle_country('DEU')
    chart_state.toggle_variable('GDP')
    chart_state.toggle_year(2021)
    chart_state.toggle_year(2019)

    assert chart_state.selected_country_codes == ['FRA']
    assert chart_state.selected_variable_codes == ['GDP']
    assert chart_state.selected_years == [2019, 2021]


def test_set_selection_partial_update(chart_state):
    chart_state.set_selection(['DEU', 'DEU', 'FRA'], ['GDP'], [2021, 2019, 2021])
    chart_state.set_selection(variable_codes=['POP'])

    assert chart_state.selected_country_codes == ['DEU', 'FRA']
    assert chart_state.selected_variable_codes == ['POP']
    assert chart_state.selected_years == [2019, 2021]


# ============================================================================
# Plotted keys and derived series
# ============================================================================

def test_toggle_plotted(chart_state):
    assert chart_state.toggle_plotted('DEU:GDP') is True
    assert chart_state.toggle_plotted('DEU:GDP') is False
    assert chart_state.plotted_keys == set()


def test_add_derived_plots_and_replaces(chart_state):
    chart_state.add_derived(_derived())
    replacement = _derived()
    replacement.variable_name = 'Updated'
    chart_state.add_derived(replacement)

    assert len(chart_state.derived_series) == 1
    assert chart_state.get_derived('CALC-1').variable_name == 'Updated'
    assert 'CALC-1' in chart_state.plotted_keys


def test_remove_derived_unplots(chart_state):
    chart_state.add_derived(_derived())
    assert chart_state.remove_derived('CALC-1') is True
    assert chart_state.remove_derived('CALC-1') is False
    assert chart_state.plotted_keys == set()


def test_clear_derived_keeps_fetched_plotted(chart_state):
    chart_state.set_plotted(['DEU:GDP'])
    chart_state.add_derived(_derived('CALC-1'))
    chart_state.add_derived(_derived('CALC-2'))
    chart_state.clear_derived()

    assert chart_state.derived_series == []
    assert chart_state.plotted_keys == {'DEU:GDP'}


# ============================================================================
# Labels and preferences
# ============================================================================

def test_custom_names_trim_and_clear(chart_state):
    chart_state.set_custom_series_name('DEU:GDP', '  German output ')
    assert chart_state.custom_series_names == {'DEU:GDP': 'German output'}

    chart_state.set_custom_series_name('DEU:GDP', '   ')
    assert chart_state.custom_series_names == {}


def test_custom_axis_labels(chart_state):
    chart_state.set_custom_axis_label('Currency', 'EUR bn')
    chart_state.set_custom_axis_label('Percentage', '')
    assert chart_state.custom_axis_labels == {'Currency': 'EUR bn'}


def test_reset_and_to_dict(chart_state):
    chart_state.set_selection(['DEU'], ['GDP'], [2020])
    chart_state.add_derived(_derived())
    assert chart_state.toggle_show_dots() is False

    data = chart_state.to_dict()
    assert data['derived_keys'] == ['CALC-1']
    assert data['plotted_keys'] == ['CALC-1']
    assert data['show_dots'] is False

    chart_state.reset()
    assert chart_state == ChartState()


def test_legend_size_keeps_last_positive_value(chart_state):
    chart_state.set_legend_size(640, 80)
    chart_state.set_legend_size(0, None)

    assert (chart_state.legend_width, chart_state.legend_height) == (640.0, 80.0)
    assert chart_state.to_dict()['legend_width'] == 640.0


# ============================================================================
# Session store
# ============================================================================

def test_store_returns_same_state(session_store):
    state = session_store.get('analyst-1')
    state.toggle_plotted('DEU:GDP')
    assert session_store.get('analyst-1').plotted_keys == {'DEU:GDP'}


def test_store_reset_and_delete(session_store):
    session_store.get('analyst-1').toggle_plotted('DEU:GDP')
    assert session_store.reset('analyst-1').plotted_keys == set()
    assert session_store.delete('analyst-1') is True
    assert session_store.delete('analyst-1') is False


@pytest.mark.parametrize("session_id", ['', 'has space', 'x' * 65, '../etc'])
def test_store_rejects_bad_ids(session_store, session_id):
    with pytest.raises(ValueError):
        session_store.get(session_id)
