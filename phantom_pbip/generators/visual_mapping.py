"""
Mapping of dashboard items to PBIR visual query state and formatting objects.
"""
import json
import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..dax.naming import get_measure_name
from ..extractors.binding_extractor import get_operation, get_primary_metric
from ..models import PBISchema, Scenario, VisualItem
from ..scenarios import (capitalize, get_default_table_columns, get_scenario_fields,
                         is_measure_field, map_field_to_pbi_column)

logger = logging.getLogger(__name__)

DATE_TABLE = 'DateTable'

AXIS_TYPES = ('bar', 'column', 'stackedBar', 'stackedColumn', 'line', 'area', 'stackedArea',
              'waterfall', 'scatter', 'controversyBar')
LEGEND_TYPES = ('pie', 'donut', 'stackedBar', 'stackedColumn', 'line', 'area', 'stackedArea')
CHART_TYPES = ('bar', 'column', 'line', 'area', 'combo', 'stackedBar', 'stackedColumn', 'stackedArea')

TEXT_PRIMARY = '#252423'
TEXT_SECONDARY = '#808080'
TEXT_AXIS = '#605E5C'
GRIDLINE = '#F3F2F1'
TITLE_ACCENT = '#342BC2'
SUCCESS = '#93BF35'
BACKGROUND = '#FFFFFF'
DEFAULT_PRIMARY = '#118DFF'

FONT_REGULAR = "'''Segoe UI'', wf_segoe-ui_normal, helvetica, arial, sans-serif'"
FONT_SEMIBOLD = "'''Segoe UI Semibold'', wf_segoe-ui_semibold, helvetica, arial, sans-serif'"
FONT_BOLD = "'''Segoe UI Bold'', wf_segoe-ui_bold, helvetica, arial, sans-serif'"

# Measure index: measure name -> home table
MeasureIndex = Mapping[str, str]
Ref = Tuple[str, str]


def build_query_projection(table: str, field: str, is_measure: bool, active: bool = False,
                           display_name: Optional[str] = None) -> Dict[str, Any]:
    """
    Build one query projection

    Args:
        table: Entity the field lives on
        field: Column or measure name
        is_measure: Whether ``field`` is a measure
        active: Mark the projection as the active (drill) field
        display_name: Optional display name override

    Returns:
        Projection dictionary with field, queryRef and nativeQueryRef
    """
    kind = 'Measure' if is_measure else 'Column'
    projection = {
        'field': {
            kind: {
                'Expression': {'SourceRef': {'Entity': table}},
                'Property': field,
            }
        },
        'queryRef': f"{table}.{field}",
        'nativeQueryRef': field,
    }
    if active:
        projection['active'] = True
    if display_name:
        projection['displayName'] = display_name
    return projection


def build_sort_definition(table: str, field: str, is_measure: bool = True,
                          direction: str = 'Descending') -> Dict[str, Any]:
    kind = 'Measure' if is_measure else 'Column'
    return {
        'sort': [{
            'field': {kind: {'Expression': {'SourceRef': {'Entity': table}}, 'Property': field}},
            'direction': direction,
        }],
        'isDefaultSort': True,
    }


def make_literal(value: str) -> Dict[str, Any]:
    return {'expr': {'Literal': {'Value': value}}}


def make_solid_color(color: str) -> Dict[str, Any]:
    return {'solid': {'color': make_literal(f"'{color}'")}}


def _quoted_text(text: str) -> Dict[str, Any]:
    return make_literal("'" + (text or '').replace("'", "''") + "'")


def _projections(*projections) -> Dict[str, Any]:
    return {'projections': list(projections)}


class _Resolver:
    """Resolves item fields to columns and metrics to routed measures"""

    def __init__(self, scenario: Scenario, measure_index: MeasureIndex):
        self.scenario = scenario
        # DAX measure names are case-insensitive
        self.measures = {name.casefold(): (table, name) for name, table in measure_index.items()}

    def column(self, field: Optional[str]) -> Optional[Ref]:
        if not field or not isinstance(field, str):
            return None
        return map_field_to_pbi_column(self.scenario, field)

    def named_measure(self, name: Optional[str]) -> Optional[Ref]:
        if not name:
            return None
        return self.measures.get(name.casefold())

    def measure(self, metric: Optional[str], operation: str) -> Optional[Ref]:
        if not metric or not isinstance(metric, str):
            return None
        return self.named_measure(get_measure_name(metric, operation))


def _default_fields(scenario: Scenario) -> Tuple[Optional[str], Optional[str]]:
    fields = get_scenario_fields(scenario)
    category = next((f['name'] for f in fields if f.get('role') in ('Category', 'Entity', 'Geography')), None)
    time = next((f['name'] for f in fields if f.get('role') == 'Time'), None)
    return category, time


def _variance_projections(resolver: _Resolver, metric: Optional[str], operation: str,
                          include_comparators: bool) -> List[Dict[str, Any]]:
    if not metric:
        return []
    label = capitalize(metric)
    names = []
    if include_comparators:
        names += [get_measure_name(f"{metric}PY", operation), get_measure_name(f"{metric}PL", operation)]
    names += [f"{label} ΔPY%", f"{label} ΔPL%"]
    refs = [resolver.named_measure(name) for name in names]
    return [build_query_projection(table, name, True) for table, name in (r for r in refs if r)]


def _bar_sort(props: Dict[str, Any], measure: Ref, dim: Optional[Ref]) -> Dict[str, Any]:
    sort = str(props.get('sort') or 'desc').lower()
    if sort == 'alpha' and dim:
        return build_sort_definition(dim[0], dim[1], is_measure=False, direction='Ascending')
    direction = 'Ascending' if sort == 'asc' else 'Descending'
    return build_sort_definition(measure[0], measure[1], direction=direction)


def _table_projections(resolver: _Resolver, columns: List[str], operation: str) -> List[Dict[str, Any]]:
    projections = []
    for name in columns:
        if not isinstance(name, str) or not name:
            continue
        if is_measure_field(resolver.scenario, name):
            measure = resolver.measure(name, operation)
            if measure:
                projections.append(build_query_projection(measure[0], measure[1], True))
                continue
        column = resolver.column(name)
        projections.append(build_query_projection(column[0], column[1], False))
    return projections


def map_query_state(item: VisualItem, scenario, measure_index: MeasureIndex,
                    schema: Optional[PBISchema] = None) -> Tuple[Dict[str, Any], Optional[Dict[str, Any]]]:
    """
    Map an item's bindings to a PBIR query state

    Args:
        item: Dashboard item
        scenario: Active scenario
        measure_index: Routed measures, name -> home table
        schema: Scenario schema (unused by the current mappings)

    Returns:
        Tuple of (queryState, sortDefinition or None). Bindings that do not
        resolve to a column or generated measure are left out.
    """
    scenario = Scenario.parse(scenario)
    props = item.props or {}
    operation = get_operation(props)
    metric_name = get_primary_metric(props)
    resolver = _Resolver(scenario, measure_index)
    default_category, default_time = _default_fields(scenario)
    state: Dict[str, Any] = {}
    sort_definition = None
    kind = item.type

    if kind == 'card' and scenario is Scenario.RETAIL:
        metric = resolver.measure(metric_name, operation)
        if metric:
            state['Values'] = _projections(
                build_query_projection(metric[0], metric[1], True),
                *_variance_projections(resolver, metric_name, operation, include_comparators=False))
        return state, None

    if kind in ('bar', 'column', 'stackedBar', 'stackedColumn'):
        dim = resolver.column(props.get('dimension') or default_category)
        metric = resolver.measure(metric_name, operation)
        if dim:
            state['Category'] = _projections(build_query_projection(dim[0], dim[1], False, active=True))
        if metric:
            state['Y'] = _projections(build_query_projection(metric[0], metric[1], True, display_name=metric[1]))
            sort_definition = _bar_sort(props, metric, dim)

    elif kind in ('line', 'area', 'stackedArea'):
        dim = resolver.column(props.get('dimension') or default_time)
        metric = resolver.measure(metric_name, operation)
        if dim:
            state['Category'] = _projections(build_query_projection(dim[0], dim[1], False, active=True))
        if metric:
            state['Y'] = _projections(build_query_projection(metric[0], metric[1], True))

    elif kind in ('pie', 'donut', 'treemap', 'funnel', 'waterfall', 'controversyBar'):
        dim = resolver.column(props.get('dimension') or default_category)
        metric = resolver.measure(metric_name, operation)
        active = kind in ('pie', 'donut', 'treemap', 'funnel')
        if dim:
            state['Category'] = _projections(build_query_projection(dim[0], dim[1], False, active=active))
        if metric:
            state['Y'] = _projections(build_query_projection(metric[0], metric[1], True))
            if kind == 'funnel':
                sort_definition = build_sort_definition(metric[0], metric[1])

    elif kind in ('card', 'gauge'):
        metric = resolver.measure(metric_name, operation)
        if metric:
            projections = [build_query_projection(metric[0], metric[1], True)]
            if scenario is Scenario.RETAIL:
                projections.extend(_variance_projections(resolver, metric_name, operation, include_comparators=True))
            state['Values'] = {'projections': projections}

    elif kind == 'kpi':
        metric = resolver.measure(metric_name, operation)
        if metric:
            state['Indicator'] = _projections(build_query_projection(metric[0], metric[1], True))
            goal = resolver.measure(f"{metric_name}PY", operation)
            if goal:
                state['Goal'] = _projections(build_query_projection(goal[0], goal[1], True))
            state['TrendLine'] = _projections(build_query_projection(DATE_TABLE, 'Month', False))

    elif kind in ('scatter', 'regressionScatter'):
        dim = resolver.column(props.get('dimension'))
        x = resolver.measure(props.get('xMetric'), operation)
        y = resolver.measure(props.get('yMetric'), operation)
        size = resolver.measure(props.get('sizeMetric'), operation)
        if dim:
            state['Category'] = _projections(build_query_projection(dim[0], dim[1], False, active=True))
            state['Series'] = _projections(build_query_projection(dim[0], dim[1], False))
        if size:
            state['Size'] = _projections(build_query_projection(size[0], size[1], True))
        if x:
            state['X'] = _projections(build_query_projection(x[0], x[1], True, active=True))
        if y:
            state['Y'] = _projections(build_query_projection(y[0], y[1], True))

    elif kind == 'combo':
        dim = resolver.column(props.get('dimension') or default_time)
        bars = resolver.measure(props.get('barMetric') or metric_name, operation)
        line = resolver.measure(props.get('lineMetric'), operation)
        if dim:
            state['Category'] = _projections(build_query_projection(dim[0], dim[1], False, active=True))
            sort_definition = build_sort_definition(dim[0], dim[1], is_measure=False, direction='Ascending')
        if bars:
            state['Y'] = _projections(build_query_projection(bars[0], bars[1], True, display_name='Bars'))
        if line:
            state['Y2'] = _projections(build_query_projection(line[0], line[1], True, display_name='Line'))

    elif kind in ('table', 'entityTable', 'controversyTable', 'controversyBottomPanel'):
        columns = props.get('columns')
        if not isinstance(columns, list) or not columns:
            columns = get_default_table_columns(scenario)
        projections = _table_projections(resolver, columns, operation)
        if projections:
            state['Values'] = {'projections': projections}

    elif kind == 'matrix':
        rows = resolver.column(props.get('rows'))
        cols = resolver.column(props.get('columns'))
        values = resolver.measure(props.get('values'), operation)
        if rows:
            state['Rows'] = _projections(build_query_projection(rows[0], rows[1], False, active=True))
        if cols:
            state['Columns'] = _projections(build_query_projection(cols[0], cols[1], False, active=True))
        if values:
            state['Values'] = _projections(build_query_projection(values[0], values[1], True))

    elif kind in ('slicer', 'dateRangePicker', 'justificationSearch'):
        field = props.get('dimension') or ('Date' if kind == 'dateRangePicker' else None)
        dim = resolver.column(field)
        if dim:
            state['Values'] = _projections(build_query_projection(dim[0], dim[1], False, active=True))

    elif kind in ('multiRowCard', 'portfolioCard', 'portfolioKPICards'):
        dim = resolver.column(props.get('dimension') or default_category)
        metric = resolver.measure(metric_name, operation)
        projections = []
        if dim:
            projections.append(build_query_projection(dim[0], dim[1], False))
        if metric:
            projections.append(build_query_projection(metric[0], metric[1], True))
        if scenario is Scenario.RETAIL:
            projections.extend(_variance_projections(resolver, metric_name, operation, include_comparators=True))
        if projections:
            state['Values'] = {'projections': projections}

    else:
        logger.debug(f"No query state for visual {item.id} of type {kind}")

    return state, sort_definition


def _title_object(title: str, color: str = TEXT_PRIMARY) -> List[Dict[str, Any]]:
    return [{'properties': {
        'show': make_literal('true'),
        'text': _quoted_text(title),
        'fontColor': make_solid_color(color),
        'fontSize': make_literal('12L'),
    }}]


def _textbox_objects(item: VisualItem) -> Dict[str, Any]:
    props = item.props or {}
    text = item.title or props.get('title') or props.get('text') or ''
    paragraphs = [{
        'textRuns': [{
            'value': text,
            'textStyle': {'fontFamily': 'Segoe UI', 'fontSize': '14px', 'fontWeight': 'bold'},
        }],
        'horizontalTextAlignment': 'left',
    }]
    return {'general': [{'properties': {'paragraphs': make_literal(json.dumps(paragraphs))}}]}


def _card_visual_objects() -> Dict[str, Any]:
    return {
        'calloutArea': [{'properties': {'size': make_literal('60D')}}],
        'calloutValue': [{'properties': {
            'fontFamily': make_literal(FONT_BOLD),
            'fontSize': make_literal('28D'),
            'fontColor': make_solid_color(TEXT_PRIMARY),
            'horizontalAlignment': make_literal("'center'"),
            'labelDisplayUnits': make_literal('1D'),
        }}],
        'calloutLabel': [{'properties': {
            'fontFamily': make_literal(FONT_REGULAR),
            'fontSize': make_literal('12D'),
            'fontColor': make_solid_color(TEXT_SECONDARY),
            'position': make_literal("'aboveValue'"),
            'show': make_literal('true'),
        }}],
        'referenceLabelsLayout': [{'properties': {
            'position': make_literal("'below'"),
            'layout': make_literal("'vertical'"),
            'spacing': make_literal('4D'),
        }}],
        'divider': [{'properties': {
            'show': make_literal('true'),
            'color': make_solid_color('#F0F0F0'),
            'width': make_literal('1D'),
        }}],
        'referenceLabelValue': [{'properties': {
            'fontFamily': make_literal(FONT_SEMIBOLD),
            'fontSize': make_literal('12D'),
            'labelDisplayUnits': make_literal('0D'),
        }}],
        'referenceLabelTitle': [{'properties': {
            'fontFamily': make_literal(FONT_REGULAR),
            'fontSize': make_literal('11D'),
            'fontColor': make_solid_color(TEXT_SECONDARY),
            'show': make_literal('true'),
        }}],
        'referenceLabelsBackground': [{'properties': {'show': make_literal('false')}}],
        'cardBackground': [{'properties': {
            'color': make_solid_color(BACKGROUND),
            'show': make_literal('true'),
        }}],
        'padding': [{'properties': {
            'top': make_literal('6D'),
            'bottom': make_literal('6D'),
            'left': make_literal('10D'),
            'right': make_literal('10D'),
        }}],
    }


def _kpi_objects(item: VisualItem) -> Dict[str, Any]:
    goal_text = str((item.props or {}).get('goalText') or 'vs prev')
    lowered = goal_text.lower()
    show_distance = 'vs' in lowered or 'prev' in lowered or lowered == 'py'
    return {
        'goals': [{'properties': {
            'goalText': _quoted_text(goal_text),
            'fontSize': make_literal('10D'),
            'goalFontFamily': make_literal(FONT_REGULAR),
            'goalFontColor': make_solid_color(TEXT_SECONDARY),
            'showGoal': make_literal('true'),
            'direction': make_literal("'High is good'"),
            'distanceLabel': make_literal("'Percent'"),
            'distanceFontColor': make_solid_color(SUCCESS),
            'distanceFontFamily': make_literal(FONT_SEMIBOLD),
            'showDistance': make_literal('true' if show_distance else 'false'),
        }}],
        'indicator': [{'properties': {
            'horizontalAlignment': make_literal("'left'"),
            'verticalAlignment': make_literal("'middle'"),
            'fontFamily': make_literal(FONT_BOLD),
            'fontSize': make_literal('18D'),
            'indicatorDisplayUnits': make_literal('1D'),
            'showIcon': make_literal('false'),
        }}],
        'trendline': [{'properties': {
            'transparency': make_literal('20D'),
            'show': make_literal('false'),
        }}],
        'status': [{'properties': {
            'direction': make_literal("'Negative'"),
            'goodColor': make_solid_color(TEXT_PRIMARY),
            'neutralColor': make_solid_color(TEXT_PRIMARY),
            'badColor': make_solid_color(TEXT_PRIMARY),
        }}],
        'lastDate': [{'properties': {'show': make_literal('false')}}],
    }


def _default_objects(item: VisualItem, pbi_type: str) -> Dict[str, Any]:
    objects = {'title': _title_object(item.title)}
    if item.type in AXIS_TYPES:
        objects['categoryAxis'] = [{'properties': {
            'fontSize': make_literal('9L'),
            'fontColor': make_solid_color(TEXT_AXIS),
        }}]
        objects['valueAxis'] = [{'properties': {
            'fontSize': make_literal('9L'),
            'fontColor': make_solid_color(TEXT_AXIS),
            'gridlineShow': make_literal('true'),
            'gridlineColor': make_solid_color(GRIDLINE),
        }}]
    if item.type in LEGEND_TYPES:
        objects['legend'] = [{'properties': {
            'show': make_literal('true'),
            'fontSize': make_literal('9L'),
            'fontColor': make_solid_color(TEXT_AXIS),
        }}]
    if pbi_type == 'slicer':
        objects['data'] = [{'properties': {'mode': make_literal("'Dropdown'")}}]
    if item.type in ('pie', 'donut'):
        objects['dataLabels'] = [{'properties': {'show': make_literal('false')}}]
    return objects


def map_visual_objects(item: VisualItem, pbi_type: str, scenario,
                       theme_colors: Optional[List[str]] = None) -> Dict[str, Any]:
    """
    Map an item to the ``visual.objects`` formatting block

    Textboxes carry their text as paragraphs. Retail cards, KPIs and slicers get
    the Retail report styling; everything else gets a title plus axis, legend
    and label defaults for its type.
    """
    scenario = Scenario.parse(scenario)
    if pbi_type == 'textbox':
        return _textbox_objects(item)
    if scenario is Scenario.RETAIL:
        if pbi_type == 'cardVisual':
            return _card_visual_objects()
        if pbi_type == 'kpi':
            return _kpi_objects(item)
    if pbi_type == 'kpi':
        objects = _kpi_objects(item)
        objects['title'] = _title_object(item.title)
        return objects
    return _default_objects(item, pbi_type)


def map_visual_container_objects(item: VisualItem, pbi_type: str, scenario,
                                 theme_colors: Optional[List[str]] = None) -> Optional[Dict[str, Any]]:
    """Container formatting (border, background, header) used by the Retail report style"""
    if Scenario.parse(scenario) is not Scenario.RETAIL:
        return None
    hidden = [{'properties': {'show': make_literal('false')}}]

    if pbi_type == 'cardVisual':
        colors = theme_colors or []
        color_index = (item.props or {}).get('colorIndex') or 0
        if not isinstance(color_index, int) or color_index < 0:
            color_index = 0
        accent = colors[color_index] if color_index < len(colors) else (colors[0] if colors else DEFAULT_PRIMARY)
        return {
            'title': hidden,
            'border': [{'properties': {
                'show': make_literal('true'),
                'color': make_solid_color(accent),
                'radius': make_literal('2D'),
                'width': make_literal('4D'),
                'topWidth': make_literal('0D'),
                'rightWidth': make_literal('0D'),
                'bottomWidth': make_literal('0D'),
                'leftWidth': make_literal('4D'),
            }}],
            'background': [{'properties': {
                'show': make_literal('true'),
                'color': make_solid_color(BACKGROUND),
                'transparency': make_literal('0D'),
            }}],
            'visualHeader': hidden,
        }
    if pbi_type == 'kpi':
        return {
            'title': [{'properties': {
                'show': make_literal('true'),
                'text': _quoted_text(item.title),
                'fontFamily': make_literal(FONT_SEMIBOLD),
                'fontSize': make_literal('12D'),
                'fontColor': make_solid_color(TITLE_ACCENT),
                'alignment': make_literal("'left'"),
            }}],
            'padding': [{'properties': {
                'top': make_literal('5D'),
                'bottom': make_literal('5D'),
                'left': make_literal('5D'),
            }}],
            'background': hidden,
        }
    if pbi_type == 'slicer':
        return {
            'padding': [{'properties': {side: make_literal('0D') for side in ('top', 'bottom', 'right', 'left')}}],
            'background': [{'properties': {'color': make_solid_color(BACKGROUND)}}],
        }
    if item.type in CHART_TYPES:
        return {
            'visualHeader': hidden,
            'visualTooltip': [{'properties': {'show': make_literal('true')}}],
            'border': hidden,
            'background': hidden,
        }
    return None
