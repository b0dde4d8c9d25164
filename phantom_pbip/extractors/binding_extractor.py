"""
Binding extractor: derives the unique metric and dimension bindings of a dashboard.
"""
import logging
from typing import Dict, List, Optional, Tuple

from ..models import DimensionBinding, MetricBinding, PBISchema, Scenario, VisualItem, coerce_items
from ..scenarios import (
    capitalize,
    get_fact_table_for_scenario,
    get_scenario_fields,
    get_schema_for_scenario,
    is_measure_field,
    map_field_to_pbi_column,
)

logger = logging.getLogger(__name__)

# Metric-bearing props, in inspection order
METRIC_PROPS = ('xMetric', 'yMetric', 'sizeMetric', 'barMetric', 'lineMetric')

COMPARISON_SUFFIXES = {
    'py': ('PY',),
    'pl': ('PL',),
    'both': ('PL', 'PY'),
}


def get_operation(props: Dict) -> str:
    """Operation of an item's bindings, lower-cased, defaulting to sum"""
    return str(props.get('operation') or 'sum').strip().lower()


def get_primary_metric(props: Dict) -> Optional[str]:
    """The item's main metric (``metric`` or the legacy ``value`` prop)"""
    metric = props.get('metric') or props.get('value')
    return metric if isinstance(metric, str) and metric else None


def _item_metrics(item: VisualItem) -> List[str]:
    props = item.props
    metrics = []
    primary = get_primary_metric(props)
    if primary:
        metrics.append(primary)
    for prop in METRIC_PROPS:
        value = props.get(prop)
        if isinstance(value, str) and value:
            metrics.append(value)
    if item.type == 'matrix':
        values = props.get('values')
        if isinstance(values, str) and values:
            metrics.append(values)
    return metrics


def _comparison_suffixes(item: VisualItem) -> Tuple[str, ...]:
    props = item.props
    if props.get('showVariance') or item.type == 'kpi':
        return ('PL', 'PY')
    comparison = str(props.get('comparison') or 'none').lower()
    return COMPARISON_SUFFIXES.get(comparison, ())


def _resolve(schema: PBISchema, scenario: Scenario, metric: str, operation: str) -> MetricBinding:
    table, column = map_field_to_pbi_column(scenario, metric)
    resolved = schema.has_column(table, column)
    if not resolved:
        logger.warning(f"Metric '{metric}' has no column {table}[{column}] in the {scenario} schema")
    return MetricBinding(metric=metric, operation=operation, table=table, column=column, resolved=resolved)


def extract_metric_bindings(items, scenario) -> List[MetricBinding]:
    """Extract the unique (metric, operation) bindings of a dashboard

    Args:
        items: Dashboard items (VisualItem objects or editor dicts)
        scenario: Scenario or scenario name

    Returns:
        Bindings in first-seen order; metrics missing from the scenario
        schema are kept with ``resolved=False``
    """
    scenario = Scenario.parse(scenario)
    schema = get_schema_for_scenario(scenario)
    fact_table = get_fact_table_for_scenario(scenario)
    bindings: Dict[Tuple[str, str], MetricBinding] = {}

    for item in coerce_items(items):
        operation = get_operation(item.props)

        for metric in _item_metrics(item):
            key = (metric, operation)
            if key not in bindings:
                bindings[key] = _resolve(schema, scenario, metric, operation)

        primary = get_primary_metric(item.props)
        if not primary:
            continue
        for suffix in _comparison_suffixes(item):
            key = (f"{primary}{suffix}", operation)
            column = f"{capitalize(primary)}{suffix}"
            if key in bindings or not schema.has_column(fact_table, column):
                continue
            bindings[key] = MetricBinding(
                metric=key[0],
                operation=operation,
                table=fact_table,
                column=column,
            )

    logger.debug(f"Extracted {len(bindings)} metric bindings for {scenario}")
    return list(bindings.values())


def _item_dimensions(item: VisualItem, scenario: Scenario) -> List[str]:
    props = item.props
    names = []
    for prop in ('dimension', 'rows', 'geoDimension'):
        value = props.get(prop)
        if isinstance(value, str) and value:
            names.append(value)

    columns = props.get('columns')
    if isinstance(columns, str) and columns:
        names.append(columns)
    elif isinstance(columns, list):
        names.extend(c for c in columns if isinstance(c, str) and c and not is_measure_field(scenario, c))
    return names


def extract_dimension_bindings(items, scenario) -> List[DimensionBinding]:
    """Extract the categorical and time fields the dashboard slices by

    Deduplicated by field name, first-seen order.
    """
    scenario = Scenario.parse(scenario)
    roles = {f['name']: f['role'] for f in get_scenario_fields(scenario)}
    dimensions: Dict[str, DimensionBinding] = {}

    for item in coerce_items(items):
        for field in _item_dimensions(item, scenario):
            if field in dimensions:
                continue
            table, column = map_field_to_pbi_column(scenario, field)
            dimensions[field] = DimensionBinding(field=field, table=table, column=column, role=roles.get(field))

    return list(dimensions.values())
