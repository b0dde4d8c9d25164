"""
Layout conversion from the editor's 24-column grid to Power BI canvas pixels.
"""
import math
from typing import Dict, Iterable, Optional

from ..config import ExportConfig
from ..models import GridLayout, PixelPosition, Scenario, VisualItem

PBI_VISUAL_TYPES = {
    'bar': 'clusteredBarChart',
    'column': 'clusteredColumnChart',
    'stackedBar': 'stackedBarChart',
    'stackedColumn': 'stackedColumnChart',
    'line': 'lineChart',
    'area': 'areaChart',
    'stackedArea': 'stackedAreaChart',
    'combo': 'lineClusteredColumnComboChart',
    'scatter': 'scatterChart',
    'pie': 'pieChart',
    'donut': 'donutChart',
    'funnel': 'funnel',
    'treemap': 'treemap',
    'gauge': 'gauge',
    'card': 'card',
    'kpi': 'kpi',
    'multiRowCard': 'multiRowCard',
    'table': 'tableEx',
    'matrix': 'pivotTable',
    'waterfall': 'waterfallChart',
    'slicer': 'slicer',
    'map': 'map',
    # Portfolio visuals map to the closest built-in visual
    'controversyBar': 'clusteredBarChart',
    'entityTable': 'tableEx',
    'controversyTable': 'tableEx',
    'controversyBottomPanel': 'tableEx',
    'portfolioCard': 'card',
    'portfolioHeader': 'textbox',
    'portfolioHeaderBar': 'textbox',
    'dateRangePicker': 'slicer',
    'justificationSearch': 'slicer',
    'portfolioKPICards': 'multiRowCard',
}

DEFAULT_VISUAL_TYPE = 'card'


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def grid_to_pixels(layout, config: Optional[ExportConfig] = None) -> PixelPosition:
    """
    Convert a grid rectangle into an absolute canvas position

    Args:
        layout: GridLayout or a mapping with x, y, w, h
        config: Export configuration (canvas size, grid and minimum visual size)

    Returns:
        PixelPosition with x/y clamped to the canvas origin and minimum width/height applied
    """
    config = config or ExportConfig()
    if not isinstance(layout, GridLayout):
        layout = GridLayout.from_dict(layout)

    col_width = config.canvas_width / config.grid_columns
    row_height = config.canvas_height / config.grid_rows
    return PixelPosition(
        x=max(0, _round_half_up(layout.x * col_width)),
        y=max(0, _round_half_up(layout.y * row_height)),
        width=max(config.min_visual_width, _round_half_up(layout.w * col_width)),
        height=max(config.min_visual_height, _round_half_up(layout.h * row_height)),
    )


def calculate_optimal_canvas(items: Iterable[VisualItem], config: Optional[ExportConfig] = None) -> Dict[str, int]:
    """Canvas size that fits every item: fixed width, height grows with the lowest visual"""
    config = config or ExportConfig()
    max_y = 0
    for item in items:
        max_y = max(max_y, item.layout.y + item.layout.h)
    height = math.ceil(max_y / config.grid_rows * config.canvas_height)
    return {'width': config.canvas_width, 'height': max(config.canvas_height, height)}


def get_pbi_visual_type(visual_type: str) -> str:
    return PBI_VISUAL_TYPES.get(visual_type, DEFAULT_VISUAL_TYPE)


def resolve_visual_type(item: VisualItem, scenario) -> str:
    """Visual type written to visual.json; Retail cards use the newer card visual"""
    if Scenario.parse(scenario) is Scenario.RETAIL and item.type == 'card':
        return 'cardVisual'
    return get_pbi_visual_type(item.type)
