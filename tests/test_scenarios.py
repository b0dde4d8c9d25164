"""
Tests for the scenario catalog and binding recipes
"""

import pytest

from phantom_pbip.models import Scenario
from phantom_pbip.recipes import generate_smart_title, get_recipe_for_visual
from phantom_pbip.scenarios import (
    capitalize,
    get_default_table_columns,
    get_fact_table_for_scenario,
    get_primary_category,
    get_scenario_fields,
    get_schema_for_scenario,
    is_measure_field,
    map_field_to_pbi_column,
)

FACT_TABLES = {
    'Retail': 'Sales',
    'SaaS': 'Subscription',
    'HR': 'Employee',
    'Logistics': 'Shipment',
    'Portfolio': 'ControversyScore',
    'Finance': 'FinanceRecord',
    'Social': 'SocialPost',
}

PRIMARY_CATEGORIES = {
    'Retail': 'Category',
    'SaaS': 'Tier',
    'HR': 'Department',
    'Logistics': 'Status',
    'Finance': 'BusinessUnit',
    'Portfolio': 'Sector',
    'Social': 'Platform',
}


@pytest.mark.parametrize('scenario,fact_table', sorted(FACT_TABLES.items()))
def test_fact_table_per_scenario(scenario, fact_table):
    assert get_fact_table_for_scenario(scenario) == fact_table
    schema = get_schema_for_scenario(scenario)
    assert schema.fact_table == fact_table
    assert schema.get_table(fact_table) is not None


@pytest.mark.parametrize('scenario', [s.value for s in Scenario])
def test_relationships_reference_existing_columns(scenario):
    schema = get_schema_for_scenario(scenario)
    for rel in schema.relationships:
        assert schema.has_column(rel.from_table, rel.from_column), rel.name
        assert schema.has_column(rel.to_table, rel.to_column), rel.name


@pytest.mark.parametrize('scenario,category', sorted(PRIMARY_CATEGORIES.items()))
def test_bar_recipe_uses_primary_category(scenario, category):
    assert get_primary_category(scenario) == category
    assert get_recipe_for_visual('bar', scenario)['dimension'] == category


class TestFieldMapping:

    def test_scenario_mapping_wins(self):
        assert map_field_to_pbi_column('Retail', 'Store') == ('Store', 'StoreName')
        assert map_field_to_pbi_column('SaaS', 'Tier') == ('Customer', 'Tier')

    def test_date_mappings(self):
        assert map_field_to_pbi_column('Retail', 'Month') == ('DateTable', 'Month')
        assert map_field_to_pbi_column('HR', 'Year') == ('DateTable', 'Year')

    def test_fallback_capitalizes_on_fact_table(self):
        assert map_field_to_pbi_column('Retail', 'revenue') == ('Sales', 'Revenue')
        assert map_field_to_pbi_column('Retail', 'revenuePY') == ('Sales', 'RevenuePY')

    def test_capitalize_keeps_rest(self):
        assert capitalize('revenuePY') == 'RevenuePY'
        assert capitalize('') == ''


class TestScenarioFields:

    def test_fields_are_copies(self):
        fields = get_scenario_fields('Retail')
        fields[0]['name'] = 'Changed'
        assert get_scenario_fields('Retail')[0]['name'] == 'Date'

    def test_is_measure_field(self):
        assert is_measure_field('Retail', 'revenue')
        assert is_measure_field('Retail', 'RevenuePY')
        assert not is_measure_field('Retail', 'Store')

    def test_default_table_columns(self):
        assert get_default_table_columns('Retail') == ['Date', 'Revenue', 'Profit']


class TestRecipes:

    def test_line_recipe_compares_both(self):
        recipe = get_recipe_for_visual('line', 'Retail')
        assert recipe['dimension'] == 'Date'
        assert recipe['comparison'] == 'both'
        assert recipe['timeGrain'] == 'month'

    def test_pie_recipe_top_six(self):
        assert get_recipe_for_visual('pie', 'SaaS')['topN'] == 6

    def test_table_recipe_caps_rows(self):
        recipe = get_recipe_for_visual('table', 'Retail')
        assert recipe['maxRows'] == 25
        assert recipe['columns'][0] == 'Category'

    def test_unknown_type_has_no_recipe(self):
        assert get_recipe_for_visual('sparkline', 'Retail') == {}

    def test_smart_titles(self):
        bar = get_recipe_for_visual('bar', 'Retail')
        assert generate_smart_title('bar', bar, 'Retail') == 'Top 5 Category by Revenue'
        assert generate_smart_title('card', get_recipe_for_visual('card', 'Retail'), 'Retail') == 'Total Revenue'
        assert generate_smart_title('table', {}, 'HR') == 'HR Details'
        assert generate_smart_title('slicer', {}, 'HR') == 'Slicer'
