"""
Measure synthesizer: turns extracted bindings into a deduplicated DAX measure set.
"""
import logging
from typing import Dict, List, Optional

from ..extractors.binding_extractor import extract_metric_bindings
from ..models import DAXMeasure, MetricBinding, Scenario, coerce_items
from ..scenarios import (
    capitalize,
    get_fact_table_for_scenario,
    get_schema_for_scenario,
    map_field_to_pbi_column,
)
from ..validators.expression_validator import BLANK_EXPRESSION, collapse_expression
from .kpi_catalog import generate_kpi_measures
from .naming import (
    BASE_FOLDER,
    PERCENT_FORMAT,
    VARIANCE_FOLDER,
    WATERFALL_FOLDER,
    CURRENCY_FORMAT,
    build_aggregation,
    get_base_metric,
    get_format_string,
    get_measure_name,
    get_metric_label,
    get_operation_label,
)

logger = logging.getLogger(__name__)

# Comparator suffix -> (measure-name suffix, DAX variable, description)
COMPARATORS = (
    ('PY', 'PY', '_PY', 'Prior Year'),
    ('PL', 'Plan', '_PL', 'Plan'),
)


def generate_base_measures(bindings: List[MetricBinding], scenario) -> List[DAXMeasure]:
    """Generate one aggregation measure per binding

    Unresolved bindings produce a BLANK() measure so the visuals bound to
    them still have something to reference.
    """
    measures = []
    for binding in bindings:
        name = get_measure_name(binding.metric, binding.operation)
        label = get_operation_label(binding.operation)
        metric_label = get_metric_label(binding.metric)

        if binding.resolved:
            expression = build_aggregation(binding.operation, binding.table, binding.column)
            description = f"{label} of {metric_label} from {binding.table} table"
        else:
            logger.warning(f"Measure '{name}' degraded to {BLANK_EXPRESSION}: "
                           f"{binding.table}[{binding.column}] does not exist")
            expression = BLANK_EXPRESSION
            description = f"{label} of {metric_label} (unresolved: {binding.table}[{binding.column}])"

        measures.append(DAXMeasure(
            name=name,
            expression=expression,
            format_string=get_format_string(binding.metric),
            display_folder=BASE_FOLDER,
            description=description,
            table=binding.table,
        ))
    return measures


def _pick_base(base_bindings: List[MetricBinding], operation: str) -> MetricBinding:
    for binding in base_bindings:
        if binding.operation == operation:
            return binding
    return base_bindings[0]


def generate_variance_measures(bindings: List[MetricBinding], scenario) -> List[DAXMeasure]:
    """Generate ΔPY/ΔPY% and ΔPL/ΔPL% measures for metrics with comparators

    The base measure referenced is the one aggregated with the comparator's
    own operation when it exists, so an ``avg`` prior-year binding compares
    against ``[Avg <Metric>]`` rather than ``[Total <Metric>]``.
    """
    fact_table = get_fact_table_for_scenario(scenario)
    measures = []

    base_metrics: List[str] = []
    for binding in bindings:
        base = get_base_metric(binding.metric)
        if base not in base_metrics:
            base_metrics.append(base)

    for base_metric in base_metrics:
        base_bindings = [b for b in bindings if b.metric == base_metric]
        if not base_bindings:
            continue
        metric_label = capitalize(base_metric)
        value_format = get_format_string(base_metric)

        for suffix, name_suffix, var, description in COMPARATORS:
            comparators = [b for b in bindings if b.metric == f"{base_metric}{suffix}"]
            if not comparators:
                continue
            comparator = comparators[0]
            base = _pick_base(base_bindings, comparator.operation)
            ac_ref = f"[{get_operation_label(base.operation)} {metric_label}]"
            cmp_ref = f"[{get_operation_label(comparator.operation)} {metric_label} {name_suffix}]"

            measures.append(DAXMeasure(
                name=f"{metric_label} Δ{suffix}",
                expression=f"VAR _AC = {ac_ref}\nVAR {var} = {cmp_ref}\nRETURN\n_AC - {var}",
                format_string=value_format,
                display_folder=VARIANCE_FOLDER,
                description=f"{metric_label} variance vs {description} (AC - {suffix})",
                table=fact_table,
            ))
            measures.append(DAXMeasure(
                name=f"{metric_label} Δ{suffix}%",
                expression=(f"VAR _AC = {ac_ref}\nVAR {var} = {cmp_ref}\nRETURN\n"
                            f"IF({var} <> 0, DIVIDE(_AC - {var}, ABS({var})), BLANK())"),
                format_string=PERCENT_FORMAT,
                display_folder=VARIANCE_FOLDER,
                description=f"{metric_label} percentage variance vs {description}",
                table=fact_table,
            ))
    return measures


def generate_waterfall_measures(items, scenario) -> List[DAXMeasure]:
    """Generate Start/Variance/End/Running bridge measures per waterfall visual

    Measure names carry a 1-based index only when the dashboard has more
    than one waterfall.
    """
    scenario = Scenario.parse(scenario)
    schema = get_schema_for_scenario(scenario)
    fact = get_fact_table_for_scenario(scenario)
    waterfalls = [item for item in coerce_items(items) if item.type == 'waterfall']
    measures = []

    for index, item in enumerate(waterfalls):
        dimension = item.props.get('dimension') or 'Region'
        metric = item.props.get('metric') or 'revenue'
        metric_label = capitalize(metric)
        suffix = f" {index + 1}" if len(waterfalls) > 1 else ''
        dim_table, dim_column = map_field_to_pbi_column(scenario, dimension)
        dim_ref = f"{dim_table}[{dim_column}]"
        ac = f"SUM({fact}[{metric_label}])"
        py = f"SUM({fact}[{metric_label}PY])"

        valid = (schema.has_column(fact, metric_label)
                 and schema.has_column(fact, f"{metric_label}PY")
                 and schema.has_column(dim_table, dim_column))
        if not valid:
            logger.warning(f"Waterfall '{item.id}' cannot bridge {metric} by {dimension} in {scenario}; "
                           f"emitting {BLANK_EXPRESSION} measures")

        expressions = {
            'Start': f"VAR _PY = CALCULATE({py}, ALLEXCEPT({fact}, {dim_ref}))\nRETURN _PY",
            'Variance': f"VAR _AC = {ac}\nVAR _PY = {py}\nRETURN\n_AC - _PY",
            'End': f"VAR _AC = CALCULATE({ac}, ALLEXCEPT({fact}, {dim_ref}))\nRETURN _AC",
            'Running': (
                f"VAR _CurrentDim = SELECTEDVALUE({dim_ref})\n"
                f"VAR _AllDims = VALUES({dim_ref})\n"
                f"VAR _PYTotal = CALCULATE({py}, ALL({dim_table}))\n"
                f"VAR _RunningVariance =\n"
                f"    SUMX(\n"
                f"        FILTER(_AllDims, {dim_ref} <= _CurrentDim),\n"
                f"        VAR _DimVal = {dim_ref}\n"
                f"        RETURN CALCULATE({ac} - {py}, {dim_ref} = _DimVal)\n"
                f"    )\n"
                f"RETURN\n"
                f"_PYTotal + _RunningVariance"
            ),
        }
        descriptions = {
            'Start': f"Waterfall bridge starting point (PY total) by {dimension}",
            'Variance': f"Waterfall bridge variance contribution by {dimension}",
            'End': f"Waterfall bridge ending point (AC total) by {dimension}",
            'Running': f"Running total for waterfall chart positioning by {dimension}",
        }
        for part in ('Start', 'Variance', 'End', 'Running'):
            measures.append(DAXMeasure(
                name=f"Waterfall{suffix} {part}",
                expression=expressions[part] if valid else BLANK_EXPRESSION,
                format_string=CURRENCY_FORMAT,
                display_folder=WATERFALL_FOLDER,
                description=descriptions[part],
                table=fact,
            ))
    return measures


def deduplicate_measures(measures: List[DAXMeasure]) -> List[DAXMeasure]:
    """Keep the first measure of each name (DAX names are case-insensitive)"""
    kept: Dict[str, DAXMeasure] = {}
    for measure in measures:
        key = measure.name.casefold()
        existing = kept.get(key)
        if existing is None:
            kept[key] = measure
            continue
        if collapse_expression(existing.expression) != collapse_expression(measure.expression):
            logger.warning(f"Measure name collision on '{measure.name}': keeping "
                           f"'{existing.expression}' and dropping '{measure.expression}'")
        else:
            logger.debug(f"Dropped duplicate measure '{measure.name}'")
    return list(kept.values())


def generate_all_measures(items, scenario, bindings: Optional[List[MetricBinding]] = None) -> List[DAXMeasure]:
    """Generate the complete measure set of a dashboard

    Order: base, variance, waterfall, then the scenario KPI catalog;
    deduplicated by name with the first occurrence winning.
    """
    scenario = Scenario.parse(scenario)
    items = coerce_items(items)
    if bindings is None:
        bindings = extract_metric_bindings(items, scenario)

    measures = (
        generate_base_measures(bindings, scenario)
        + generate_variance_measures(bindings, scenario)
        + generate_waterfall_measures(items, scenario)
        + generate_kpi_measures(scenario)
    )
    result = deduplicate_measures(measures)
    logger.info(f"Generated {len(result)} measures for {scenario} "
                f"({len(measures) - len(result)} duplicates dropped)")
    return result
