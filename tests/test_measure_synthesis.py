"""
Tests for DAX measure synthesis
"""

import logging
import re
import unittest

import pytest

from phantom_pbip.dax import (
    KPI_CATALOG,
    deduplicate_measures,
    generate_all_measures,
    generate_base_measures,
    generate_kpi_measures,
    generate_variance_measures,
    generate_waterfall_measures,
    get_measure_name,
)
from phantom_pbip.dax.naming import build_aggregation, get_format_string
from phantom_pbip.models import DAXMeasure, MetricBinding, Scenario

KPI_NAMES = {
    'Retail': ['Margin %', 'YoY Growth', 'Revenue per Store', 'Avg Order Value'],
    'SaaS': ['Churn Rate', 'ARR', 'Customer Count', 'ARPU'],
    'HR': ['Headcount', 'Attrition Rate', 'Avg Performance Rating', 'Avg Tenure'],
    'Logistics': ['Total Shipments', 'On-Time Rate', 'Avg Shipment Cost',
                  'Delivered Count', 'In Transit Count', 'Delayed Count'],
    'Finance': ['Budget Variance %', 'Forecast Accuracy', 'Net Variance'],
    'Portfolio': ['Unique Entities', 'Above Threshold', 'Negative Changes', 'Avg Controversy Score',
                  'Total Market Value', 'Net Score Change', 'Positive Changes'],
    'Social': ['Avg Engagement Rate', 'Positive Sentiment %', 'Net Sentiment', 'Total Mentions'],
}


def _binding(metric, operation='sum', column=None):
    return MetricBinding(metric, operation, 'Sales', column or metric[:1].upper() + metric[1:])


class TestMeasureNaming(unittest.TestCase):

    def test_operation_labels(self):
        self.assertEqual(get_measure_name('revenue', 'sum'), 'Total revenue')
        self.assertEqual(get_measure_name('revenue', 'avg'), 'Avg revenue')
        self.assertEqual(get_measure_name('revenue', 'average'), 'Avg revenue')
        self.assertEqual(get_measure_name('orders', 'count'), 'Count of orders')
        self.assertEqual(get_measure_name('Cost', 'min'), 'Min Cost')
        self.assertEqual(get_measure_name('Cost', 'MAX'), 'Max Cost')
        self.assertEqual(get_measure_name('Cost', 'median'), 'Median Cost')

    def test_comparator_suffixes(self):
        self.assertEqual(get_measure_name('revenuePL'), 'Total revenue Plan')
        self.assertEqual(get_measure_name('revenuePY', 'avg'), 'Avg revenue PY')

    def test_aggregations(self):
        self.assertEqual(build_aggregation('sum', 'Sales', 'Revenue'), 'SUM(Sales[Revenue])')
        self.assertEqual(build_aggregation('avg', 'Sales', 'Revenue'), 'AVERAGE(Sales[Revenue])')
        self.assertEqual(build_aggregation('count', 'Sales', 'Revenue'), 'COUNTROWS(Sales)')
        self.assertEqual(build_aggregation('distinctcount', 'Sales', 'StoreID'), 'DISTINCTCOUNT(Sales[StoreID])')
        self.assertEqual(build_aggregation('median', 'Sales', 'Revenue'), 'SUM(Sales[Revenue])')

    def test_format_strings(self):
        self.assertEqual(get_format_string('churnRate'), '0.0%')
        self.assertEqual(get_format_string('revenue'), '$#,##0')
        self.assertEqual(get_format_string('MRR'), '$#,##0')
        self.assertEqual(get_format_string('quantity'), '#,##0')


class TestBaseAndVarianceMeasures:

    def test_base_measures_per_binding(self):
        measures = generate_base_measures([_binding('revenue'), _binding('revenue', 'avg')], 'Retail')
        assert [m.name for m in measures] == ['Total revenue', 'Avg revenue']
        assert measures[1].expression == 'AVERAGE(Sales[Revenue])'
        assert measures[0].format_string == '$#,##0'
        assert measures[0].table == 'Sales'

    def test_unresolved_binding_degrades_to_blank(self, caplog):
        binding = MetricBinding('footfall', 'sum', 'Sales', 'Footfall', resolved=False)
        with caplog.at_level(logging.WARNING):
            measures = generate_base_measures([binding], 'Retail')
        assert measures[0].name == 'Total footfall'
        assert measures[0].expression == 'BLANK()'
        assert 'Total footfall' in caplog.text

    def test_variance_references_matching_operation(self):
        bindings = [_binding('revenue'), _binding('revenue', 'avg'), _binding('revenuePY', 'avg')]
        measures = generate_variance_measures(bindings, 'Retail')

        assert [m.name for m in measures] == ['Revenue ΔPY', 'Revenue ΔPY%']
        for measure in measures:
            assert '[Avg Revenue]' in measure.expression
            assert '[Total Revenue]' not in measure.expression
            assert '[Avg Revenue PY]' in measure.expression

    def test_variance_falls_back_to_first_base(self):
        bindings = [_binding('revenue', 'max'), _binding('revenuePL', 'sum')]
        measures = generate_variance_measures(bindings, 'Retail')
        assert [m.name for m in measures] == ['Revenue ΔPL', 'Revenue ΔPL%']
        assert '[Max Revenue]' in measures[0].expression
        assert '[Total Revenue Plan]' in measures[0].expression

    def test_variance_percent_guards_zero(self):
        bindings = [_binding('revenue'), _binding('revenuePY')]
        percent = generate_variance_measures(bindings, 'Retail')[1]
        assert 'IF(_PY <> 0, DIVIDE(_AC - _PY, ABS(_PY)), BLANK())' in percent.expression
        assert percent.format_string == '0.0%'

    def test_no_base_binding_no_variance(self):
        assert generate_variance_measures([_binding('revenuePY')], 'Retail') == []

    def test_variance_labels_follow_operation(self):
        for op, label in [('sum', 'Total'), ('avg', 'Avg'), ('min', 'Min'), ('max', 'Max'), ('count', 'Count of')]:
            bindings = [_binding('profit', op), _binding('profitPY', op)]
            for measure in generate_variance_measures(bindings, 'Retail'):
                refs = re.findall(r'\[([^\]]+)\]', measure.expression)
                assert refs == [f'{label} Profit', f'{label} Profit PY']


class TestWaterfallMeasures:

    def test_single_waterfall_has_no_index(self):
        items = [{'id': 'w', 'type': 'waterfall', 'props': {'dimension': 'Region', 'metric': 'revenue'}}]
        measures = generate_waterfall_measures(items, 'Retail')
        assert [m.name for m in measures] == ['Waterfall Start', 'Waterfall Variance', 'Waterfall End',
                                              'Waterfall Running']
        assert 'ALLEXCEPT(Sales, Store[Region])' in measures[0].expression
        assert all(m.table == 'Sales' for m in measures)

    def test_multiple_waterfalls_are_numbered(self):
        items = [{'id': 'w1', 'type': 'waterfall', 'props': {}}, {'id': 'w2', 'type': 'waterfall', 'props': {}}]
        names = [m.name for m in generate_waterfall_measures(items, 'Retail')]
        assert names[0] == 'Waterfall 1 Start'
        assert names[-1] == 'Waterfall 2 Running'

    def test_invalid_waterfall_degrades(self, caplog):
        items = [{'id': 'w', 'type': 'waterfall', 'props': {'metric': 'amount', 'dimension': 'Region'}}]
        with caplog.at_level(logging.WARNING):
            measures = generate_waterfall_measures(items, 'Finance')
        assert {m.expression for m in measures} == {'BLANK()'}


class TestKpiCatalog:

    @pytest.mark.parametrize('scenario,names', sorted(KPI_NAMES.items()))
    def test_catalog_names(self, scenario, names):
        measures = generate_kpi_measures(scenario)
        assert [m.name for m in measures] == names
        fact = {'Retail': 'Sales', 'SaaS': 'Subscription', 'HR': 'Employee', 'Logistics': 'Shipment',
                'Finance': 'FinanceRecord', 'Portfolio': 'ControversyScore', 'Social': 'SocialPost'}[scenario]
        assert all(m.table == fact for m in measures)

    def test_every_scenario_has_a_catalog(self):
        assert set(KPI_CATALOG) == set(Scenario)

    def test_builders_return_fresh_measures(self):
        first = generate_kpi_measures('Retail')
        first[0].name = 'Changed'
        assert generate_kpi_measures('Retail')[0].name == 'Margin %'


class TestAllMeasures:

    def test_concrete_retail_dashboard(self):
        items = [
            {'id': 'a', 'type': 'card', 'props': {'metric': 'revenue', 'operation': 'sum'}},
            {'id': 'b', 'type': 'card', 'props': {'metric': 'revenue', 'operation': 'avg'}},
        ]
        names = [m.name for m in generate_all_measures(items, 'Retail')]
        assert names[:2] == ['Total revenue', 'Avg revenue']
        assert names[2:] == KPI_NAMES['Retail']

    def test_identical_pairs_yield_one_measure(self):
        items = [
            {'id': 'a', 'type': 'card', 'props': {'metric': 'profit'}},
            {'id': 'b', 'type': 'bar', 'props': {'metric': 'profit', 'operation': 'sum'}},
        ]
        names = [m.name for m in generate_all_measures(items, 'Retail')]
        assert names.count('Total profit') == 1

    @pytest.mark.parametrize('scenario', [s.value for s in Scenario])
    def test_names_unique_case_insensitively(self, scenario):
        items = [{'id': 'k', 'type': 'kpi', 'props': {'metric': m}} for m in ('mentions', 'revenue', 'cost')]
        names = [m.name.casefold() for m in generate_all_measures(items, scenario)]
        assert len(names) == len(set(names))

    def test_first_occurrence_wins_and_collision_is_logged(self, caplog):
        measures = [
            DAXMeasure('Total Mentions', 'SUM(SocialPost[Mentions])'),
            DAXMeasure('Total mentions', 'SUM(SocialPost[Mentions])'),
            DAXMeasure('TOTAL MENTIONS', 'COUNTROWS(SocialPost)'),
        ]
        with caplog.at_level(logging.WARNING):
            kept = deduplicate_measures(measures)
        assert [m.name for m in kept] == ['Total Mentions']
        assert 'COUNTROWS(SocialPost)' in caplog.text

    def test_unknown_scenario_raises(self):
        from phantom_pbip.exceptions import UnknownScenarioError
        with pytest.raises(UnknownScenarioError):
            generate_all_measures([], 'Healthcare')
