"""Phantom PBIP Exporter

A Python package that turns a Phantom dashboard (typed visual items bound to
scenario metrics) into a zipped Power BI Project: report pages and visuals,
a semantic model with data-loaded tables and the DAX measures the visuals need.

Main Functions:
    create_pbip_package: Export items as a PBIP archive
    create_pbip_package_async: Same, with serialization off the event loop
    generate_all_measures: Synthesize the deduplicated measure set
    extract_metric_bindings: Derive (metric, operation) bindings from items

Example:
    import phantom_pbip

    package = phantom_pbip.create_pbip_package(
        items=[{"id": "rev", "type": "card", "title": "Revenue",
                "layout": {"x": 0, "y": 0, "w": 6, "h": 4},
                "props": {"metric": "revenue", "operation": "sum"}}],
        scenario="Retail",
        state={"data": {"Sales": [...]}, "themeColors": ["#342BC2"]},
    )
    with open(package.filename, "wb") as f:
        f.write(package.blob)
"""

__version__ = "1.0.0"
__author__ = "Phantom Team"

from .dax import generate_all_measures, get_measure_name
from .exceptions import OutputWriteError, PackageSerializationError, PhantomExportError, UnknownScenarioError
from .exporter import PBIPExporter, create_pbip_package, create_pbip_package_async
from .extractors import extract_dimension_bindings, extract_metric_bindings
from .generators import calculate_optimal_canvas, get_pbi_visual_type, grid_to_pixels, render_table
from .models import (
    DAXMeasure,
    DimensionBinding,
    ExportState,
    GridLayout,
    MetricBinding,
    PBIPPackage,
    PixelPosition,
    Scenario,
    VisualItem,
)
from .recipes import generate_smart_title, get_recipe_for_visual
from .scenarios import get_fact_table_for_scenario, get_schema_for_scenario, map_field_to_pbi_column

__all__ = [
    'create_pbip_package',
    'create_pbip_package_async',
    'PBIPExporter',
    'generate_all_measures',
    'get_measure_name',
    'extract_metric_bindings',
    'extract_dimension_bindings',
    'render_table',
    'grid_to_pixels',
    'calculate_optimal_canvas',
    'get_pbi_visual_type',
    'get_recipe_for_visual',
    'generate_smart_title',
    'get_schema_for_scenario',
    'get_fact_table_for_scenario',
    'map_field_to_pbi_column',
    'Scenario',
    'VisualItem',
    'GridLayout',
    'ExportState',
    'MetricBinding',
    'DimensionBinding',
    'DAXMeasure',
    'PixelPosition',
    'PBIPPackage',
    'PhantomExportError',
    'UnknownScenarioError',
    'PackageSerializationError',
    'OutputWriteError',
]
