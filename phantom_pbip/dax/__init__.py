"""DAX measure synthesis."""

from .kpi_catalog import KPI_CATALOG, generate_kpi_measures
from .measure_generator import (
    deduplicate_measures,
    generate_all_measures,
    generate_base_measures,
    generate_variance_measures,
    generate_waterfall_measures,
)
from .naming import get_measure_name, get_operation_label

__all__ = [
    'KPI_CATALOG',
    'generate_kpi_measures',
    'deduplicate_measures',
    'generate_all_measures',
    'generate_base_measures',
    'generate_variance_measures',
    'generate_waterfall_measures',
    'get_measure_name',
    'get_operation_label',
]
