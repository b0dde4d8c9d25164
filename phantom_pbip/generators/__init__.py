"""
PBIP file generators package
"""

from .template_engine import TemplateEngine

# Specialized generators
from .project_file_generator import ProjectFileGenerator
from .model_file_generator import ModelFileGenerator, render_table, route_measures
from .report_file_generator import ReportFileGenerator
from .documentation_generator import DocumentationGenerator
from .package_builder import PackageBuilder

# Layout and visual mapping
from .layout_converter import calculate_optimal_canvas, get_pbi_visual_type, grid_to_pixels

__all__ = [
    'TemplateEngine',
    'ProjectFileGenerator',
    'ModelFileGenerator',
    'ReportFileGenerator',
    'DocumentationGenerator',
    'PackageBuilder',
    'render_table',
    'route_measures',
    'calculate_optimal_canvas',
    'get_pbi_visual_type',
    'grid_to_pixels',
]
