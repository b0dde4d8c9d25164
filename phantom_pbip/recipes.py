"""
Binding recipes: default bindings and smart titles for newly placed visuals.
"""
from typing import Any, Dict

from .models import Scenario
from .scenarios import (
    get_fields_by_role,
    get_first_field,
    get_primary_category,
    get_time_dimension,
)

BAR_FAMILY = ('bar', 'column', 'stackedBar', 'stackedColumn')
CARD_FAMILY = ('card', 'kpi', 'gauge', 'portfolioCard')


def get_recipe_for_visual(visual_type: str, scenario) -> Dict[str, Any]:
    """Get the default bindings for a visual type in a scenario

    Args:
        visual_type: Editor visual type (``bar``, ``line``, ``card`` ...)
        scenario: Scenario or scenario name

    Returns:
        Dictionary of props; empty for types without a recipe
    """
    scenario = Scenario.parse(scenario)

    measures = get_fields_by_role(scenario, 'Measure')
    primary_measure = measures[0] if measures else None
    secondary_measure = measures[1] if len(measures) > 1 else primary_measure
    tertiary_measure = measures[2] if len(measures) > 2 else secondary_measure

    primary_category = get_primary_category(scenario)
    time_dimension = get_time_dimension(scenario)

    if visual_type in BAR_FAMILY:
        return {
            'dimension': primary_category,
            'metric': primary_measure,
            'topN': 5,
            'sort': 'desc',
            'showOther': True,
        }

    if visual_type in ('line', 'area'):
        return {
            'dimension': time_dimension or primary_category,
            'metric': primary_measure,
            'comparison': 'both',
            'timeGrain': 'month',
        }

    if visual_type == 'stackedArea':
        return {'dimension': primary_category, 'metric': primary_measure, 'timeGrain': 'month'}

    if visual_type == 'combo':
        return {
            'dimension': primary_category,
            'barMetric': primary_measure,
            'lineMetric': secondary_measure,
            'topN': 5,
            'sort': 'desc',
        }

    if visual_type == 'map':
        return {
            'geoDimension': get_first_field(scenario, 'Geography') or primary_category,
            'metric': primary_measure,
            'mapType': 'us',
            'displayMode': 'choropleth',
        }

    if visual_type in ('pie', 'donut'):
        return {
            'dimension': primary_category,
            'metric': primary_measure,
            'topN': 6,
            'sort': 'desc',
            'showOther': True,
        }

    if visual_type in ('funnel', 'treemap'):
        return {'dimension': primary_category, 'metric': primary_measure, 'topN': 'All', 'sort': 'desc'}

    if visual_type == 'scatter':
        return {
            'xMetric': primary_measure,
            'yMetric': secondary_measure,
            'sizeMetric': tertiary_measure,
            'playAxis': time_dimension,
            'dimension': primary_category,
        }

    if visual_type in CARD_FAMILY:
        return {
            'metric': primary_measure,
            'operation': 'sum',
            'label': primary_measure,
            'goalText': 'vs prev',
        }

    if visual_type == 'multiRowCard':
        return {'fields': measures[:3]}

    if visual_type == 'table':
        columns = [primary_category] + measures[:3]
        return {'columns': [c for c in columns if c], 'maxRows': 25}

    if visual_type == 'matrix':
        return {'rows': primary_category, 'columns': time_dimension, 'values': primary_measure}

    if visual_type in ('waterfall', 'boxplot', 'violin', 'histogram'):
        return {'dimension': primary_category, 'metric': primary_measure}

    if visual_type == 'slicer':
        return {'dimension': primary_category}

    if visual_type == 'regressionScatter':
        return {'xMetric': primary_measure, 'yMetric': secondary_measure, 'dimension': primary_category}

    # Portfolio visuals
    if visual_type == 'controversyBar':
        return {'dimension': 'Group'}
    if visual_type in ('entityTable', 'controversyTable'):
        return {'maxRows': 10}

    return {}


def generate_smart_title(visual_type: str, recipe: Dict[str, Any], scenario) -> str:
    """Build a contextual title from a visual type and its bindings"""
    scenario = Scenario.parse(scenario)
    dim = recipe.get('dimension') or ''
    met = recipe.get('metric') or ''
    top_n = recipe.get('topN')

    if visual_type in BAR_FAMILY:
        prefix = f"Top {top_n} " if top_n and top_n != 'All' else ''
        return f"{prefix}{dim or 'Items'} by {met or 'Value'}"

    if visual_type in ('line', 'area'):
        return f"{met} Trend" if met else 'Trend'

    if visual_type == 'stackedArea':
        return f"{met} by {dim} Over Time" if met and dim else 'Stacked Area'

    if visual_type == 'combo':
        bar, line = recipe.get('barMetric'), recipe.get('lineMetric')
        return f"{bar} vs {line}" if bar and line else 'Combo Chart'

    if visual_type == 'map':
        geo = recipe.get('geoDimension')
        return f"{met} by {geo}" if met and geo else 'Map'

    if visual_type in ('pie', 'donut'):
        return f"{met} by {dim}" if met and dim else (met or 'Distribution')

    if visual_type in CARD_FAMILY:
        return f"Total {met}" if met else 'KPI'

    if visual_type == 'multiRowCard':
        return f"{scenario.value} KPIs"
    if visual_type == 'table':
        return f"{scenario.value} Details"
    if visual_type == 'matrix':
        return f"{scenario.value} Matrix"

    if visual_type in ('scatter', 'regressionScatter'):
        x, y = recipe.get('xMetric'), recipe.get('yMetric')
        if not (x and y):
            return 'Scatter' if visual_type == 'scatter' else 'Regression'
        suffix = ' (Regression)' if visual_type == 'regressionScatter' else ''
        return f"{x} vs {y}{suffix}"

    if visual_type in ('funnel', 'treemap', 'boxplot', 'violin'):
        fallback = visual_type[:1].upper() + visual_type[1:]
        return f"{met} by {dim}" if met and dim else fallback

    if visual_type == 'waterfall':
        return f"{met} Waterfall" if met else 'Waterfall'

    if visual_type == 'histogram':
        return f"{met} Distribution" if met else 'Histogram'

    if visual_type == 'slicer':
        return f"Filter by {dim}" if dim else 'Slicer'

    return visual_type[:1].upper() + visual_type[1:]
