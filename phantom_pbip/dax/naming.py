"""
Naming, aggregation and formatting rules for synthesized measures.
"""
import re

BASE_FOLDER = 'Base Measures'
VARIANCE_FOLDER = 'Variance Measures'
WATERFALL_FOLDER = 'Waterfall'

CURRENCY_FORMAT = '$#,##0'
PERCENT_FORMAT = '0.0%'
NUMBER_FORMAT = '#,##0'

AGGREGATIONS = {
    'sum': lambda table, column: f"SUM({table}[{column}])",
    'avg': lambda table, column: f"AVERAGE({table}[{column}])",
    'average': lambda table, column: f"AVERAGE({table}[{column}])",
    'count': lambda table, column: f"COUNTROWS({table})",
    'min': lambda table, column: f"MIN({table}[{column}])",
    'max': lambda table, column: f"MAX({table}[{column}])",
    'distinctcount': lambda table, column: f"DISTINCTCOUNT({table}[{column}])",
}

OPERATION_LABELS = {
    'sum': 'Total',
    'avg': 'Avg',
    'average': 'Avg',
    'count': 'Count of',
    'min': 'Min',
    'max': 'Max',
}

_PERCENT_HINTS = ('rate', 'percentage')
_CURRENCY_HINTS = ('revenue', 'profit', 'cost', 'salary', 'mrr', 'ltv')

_SUFFIX = re.compile(r'(PL|PY)$')
_SPACES = re.compile(r'\s+')


def get_operation_label(operation: str) -> str:
    """Display label of an aggregation (``sum`` -> ``Total``)"""
    op = (operation or 'sum').lower()
    if op in OPERATION_LABELS:
        return OPERATION_LABELS[op]
    return op[:1].upper() + op[1:]


def get_metric_label(metric: str) -> str:
    """Metric label with a trailing PL/PY spelled out"""
    if metric.endswith('PL'):
        return metric[:-2] + ' Plan'
    if metric.endswith('PY'):
        return metric[:-2] + ' PY'
    return metric


def get_measure_name(metric: str, operation: str = 'sum') -> str:
    """Deterministic base measure name for a (metric, operation) pair

    >>> get_measure_name('revenuePY', 'avg')
    'Avg revenue PY'
    """
    name = f"{get_operation_label(operation)} {get_metric_label(metric)}"
    return _SPACES.sub(' ', name).strip()


def get_base_metric(metric: str) -> str:
    """Metric with a trailing PL/PY removed"""
    return _SUFFIX.sub('', metric)


def build_aggregation(operation: str, table: str, column: str) -> str:
    """DAX aggregation for an operation; unknown operations aggregate with SUM"""
    pattern = AGGREGATIONS.get((operation or 'sum').lower(), AGGREGATIONS['sum'])
    return pattern(table, column)


def get_format_string(metric: str) -> str:
    lowered = metric.lower()
    if any(hint in lowered for hint in _PERCENT_HINTS):
        return PERCENT_FORMAT
    if any(hint in lowered for hint in _CURRENCY_HINTS):
        return CURRENCY_FORMAT
    return NUMBER_FORMAT
