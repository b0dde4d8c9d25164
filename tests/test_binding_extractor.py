"""
Tests for metric and dimension binding extraction
"""

import logging

from phantom_pbip.extractors import extract_dimension_bindings, extract_metric_bindings
from phantom_pbip.models import MetricBinding, VisualItem


def _item(item_id, visual_type, **props):
    return {'id': item_id, 'type': visual_type, 'layout': {'x': 0, 'y': 0, 'w': 4, 'h': 4}, 'props': props}


class TestMetricBindings:

    def test_duplicate_pairs_collapse(self):
        items = [
            _item('a', 'card', metric='revenue', operation='sum'),
            _item('b', 'bar', metric='revenue', operation='SUM', dimension='Category'),
            _item('c', 'card', metric='revenue', operation='avg'),
        ]
        bindings = extract_metric_bindings(items, 'Retail')
        assert [(b.metric, b.operation) for b in bindings] == [('revenue', 'sum'), ('revenue', 'avg')]
        assert bindings[0] == MetricBinding('revenue', 'sum', 'Sales', 'Revenue', True)

    def test_default_operation_is_sum(self):
        bindings = extract_metric_bindings([_item('a', 'card', metric='profit')], 'Retail')
        assert bindings[0].operation == 'sum'

    def test_legacy_value_prop(self):
        bindings = extract_metric_bindings([_item('a', 'card', value='quantity')], 'Retail')
        assert bindings[0].metric == 'quantity'

    def test_chart_specific_metrics_in_order(self):
        items = [
            _item('s', 'scatter', xMetric='revenue', yMetric='profit', sizeMetric='quantity'),
            _item('c', 'combo', barMetric='revenue', lineMetric='discount'),
        ]
        bindings = extract_metric_bindings(items, 'Retail')
        assert [b.metric for b in bindings] == ['revenue', 'profit', 'quantity', 'discount']

    def test_matrix_values_count_as_metric(self):
        bindings = extract_metric_bindings([_item('m', 'matrix', rows='Category', values='profit')], 'Retail')
        assert [b.metric for b in bindings] == ['profit']

    def test_items_without_metrics_are_skipped(self):
        assert extract_metric_bindings([_item('s', 'slicer', dimension='Region')], 'Retail') == []

    def test_unresolved_metric_passes_through(self, caplog):
        with caplog.at_level(logging.WARNING):
            bindings = extract_metric_bindings([_item('a', 'card', metric='footfall')], 'Retail')
        assert bindings == [MetricBinding('footfall', 'sum', 'Sales', 'Footfall', False)]
        assert 'footfall' in caplog.text

    def test_variance_companions_for_show_variance(self):
        bindings = extract_metric_bindings([_item('a', 'card', metric='revenue', showVariance=True)], 'Retail')
        assert [b.metric for b in bindings] == ['revenue', 'revenuePL', 'revenuePY']
        assert all(b.resolved and b.table == 'Sales' for b in bindings)

    def test_comparison_py_adds_only_prior_year(self):
        bindings = extract_metric_bindings(
            [_item('l', 'line', metric='profit', operation='avg', comparison='py')], 'Retail')
        assert [(b.metric, b.operation) for b in bindings] == [('profit', 'avg'), ('profitPY', 'avg')]

    def test_kpi_companions_require_columns(self):
        # Finance has no plan or prior-year columns
        bindings = extract_metric_bindings([_item('k', 'kpi', metric='amount')], 'Finance')
        assert [b.metric for b in bindings] == ['amount']

    def test_accepts_visual_items_without_mutating(self):
        item = VisualItem(id='a', type='card', props={'metric': 'revenue'})
        extract_metric_bindings([item], 'Retail')
        assert item.props == {'metric': 'revenue'}


class TestDimensionBindings:

    def test_dimension_sources(self):
        items = [
            _item('b', 'bar', metric='revenue', dimension='Category'),
            _item('m', 'matrix', rows='Store', columns='Month', values='revenue'),
            _item('t', 'table', columns=['Region', 'Revenue']),
            _item('b2', 'bar', metric='profit', dimension='Category'),
        ]
        dims = extract_dimension_bindings(items, 'Retail')
        assert [d.field for d in dims] == ['Category', 'Store', 'Month', 'Region']
        assert dims[0].table == 'Product' and dims[0].role == 'Category'
        assert (dims[2].table, dims[2].column) == ('DateTable', 'Month')
