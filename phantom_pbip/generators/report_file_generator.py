"""
Report file generator for the PBIR report definition.
"""
import logging
from typing import Any, Dict, List, Optional, Tuple

from ..config import ExportConfig
from ..models import DAXMeasure, PBISchema, Scenario, VisualItem
from ..utils.identifiers import safe_path_segment
from ..utils.json_encoder import to_json
from .layout_converter import calculate_optimal_canvas, grid_to_pixels, resolve_visual_type
from .visual_mapping import (make_literal, map_query_state, map_visual_container_objects,
                             map_visual_objects)

SCHEMA_BASE = 'https://developer.microsoft.com/json-schemas/fabric/item/report/definition'
PAGE_NAME = 'page1'


class ReportFileGenerator:
    """Generator for the report pages, visuals and base theme"""

    def __init__(self, config: Optional[ExportConfig] = None):
        """
        Initialize the report file generator

        Args:
            config: Export configuration (canvas, grid and theme settings)
        """
        self.config = config or ExportConfig()
        self.logger = logging.getLogger(__name__)

    def build_report_json(self) -> Dict[str, Any]:
        theme = self.config.theme_name
        return {
            '$schema': f'{SCHEMA_BASE}/report/3.1.0/schema.json',
            'themeCollection': {
                'baseTheme': {
                    'name': theme,
                    'reportVersionAtImport': {'visual': '2.5.0', 'report': '3.1.0', 'page': '2.3.0'},
                    'type': 'SharedResources',
                },
            },
            'objects': {
                'section': [{'properties': {'verticalAlignment': make_literal("'Top'")}}],
            },
            'resourcePackages': [{
                'name': 'SharedResources',
                'type': 'SharedResources',
                'items': [{'name': theme, 'path': f'BaseThemes/{theme}.json', 'type': 'BaseTheme'}],
            }],
            'settings': {
                'useStylableVisualContainerHeader': True,
                'exportDataMode': 'AllowSummarized',
                'defaultDrillFilterOtherVisuals': True,
                'allowChangeFilterTypes': True,
                'useEnhancedTooltips': True,
                'useDefaultAggregateDisplayName': True,
            },
        }

    def build_version_json(self) -> Dict[str, Any]:
        return {'$schema': f'{SCHEMA_BASE}/versionMetadata/1.0.0/schema.json', 'version': '2.0.0'}

    def build_pages_json(self) -> Dict[str, Any]:
        return {
            '$schema': f'{SCHEMA_BASE}/pagesMetadata/1.0.0/schema.json',
            'pageOrder': [PAGE_NAME],
            'activePageName': PAGE_NAME,
        }

    def build_page_json(self, display_name: str, width: int, height: int) -> Dict[str, Any]:
        return {
            '$schema': f'{SCHEMA_BASE}/page/2.0.0/schema.json',
            'name': PAGE_NAME,
            'displayName': display_name,
            'displayOption': 'FitToPage',
            'height': height,
            'width': width,
        }

    def build_theme_json(self, theme_colors: Optional[List[str]] = None) -> Dict[str, Any]:
        """Base theme; falls back to the default palette when the state has no colors"""
        return {
            'version': '5.50',
            'name': self.config.theme_name,
            'textClasses': {
                'label': {'fontFace': 'Segoe UI', 'fontSize': 12},
                'title': {'fontFace': 'Segoe UI Semibold', 'fontSize': 16},
            },
            'dataColors': list(theme_colors) if theme_colors else list(self.config.default_theme_colors),
            'visualStyles': {},
        }

    def build_visual_json(self, item: VisualItem, index: int, scenario: Scenario,
                          measure_index: Dict[str, str], schema: Optional[PBISchema] = None,
                          theme_colors: Optional[List[str]] = None,
                          name: Optional[str] = None) -> Dict[str, Any]:
        """
        Build the visual container document of one item

        Args:
            item: Dashboard item
            index: Position of the item on the page (drives z-order and tab order)
            scenario: Active scenario
            measure_index: Routed measures, name -> home table
            schema: Scenario schema
            theme_colors: Theme colors of the dashboard
            name: Visual name; defaults to the item id

        Returns:
            visual.json content
        """
        position = grid_to_pixels(item.layout, self.config)
        pbi_type = resolve_visual_type(item, scenario)
        query_state, sort_definition = map_query_state(item, scenario, measure_index, schema)

        query: Dict[str, Any] = {'queryState': query_state}
        if sort_definition:
            query['sortDefinition'] = sort_definition

        visual: Dict[str, Any] = {
            'visualType': pbi_type,
            'query': query,
            'objects': map_visual_objects(item, pbi_type, scenario, theme_colors),
        }
        container_objects = map_visual_container_objects(item, pbi_type, scenario, theme_colors)
        if container_objects:
            visual['visualContainerObjects'] = container_objects
        visual['drillFilterOtherVisuals'] = True

        return {
            '$schema': f'{SCHEMA_BASE}/visualContainer/2.5.0/schema.json',
            'name': name or item.id,
            'position': {
                'x': position.x,
                'y': position.y,
                'z': index * 1000,
                'width': position.width,
                'height': position.height,
                'tabOrder': index,
            },
            'visual': visual,
        }

    def generate_report_files(self, items: List[VisualItem], scenario: Scenario, measures: List[DAXMeasure],
                              schema: PBISchema, page_display_name: str,
                              theme_colors: Optional[List[str]] = None) -> Tuple[Dict[str, str], List[str]]:
        """
        Generate the report definition files

        Args:
            items: Dashboard items in page order
            scenario: Active scenario
            measures: Routed measures
            schema: Scenario schema
            page_display_name: Display name of the single page
            theme_colors: Theme colors of the dashboard

        Returns:
            Tuple of (path relative to the .Report folder -> content, visual names in page order)
        """
        measure_index = {m.name: m.table for m in measures}
        canvas = calculate_optimal_canvas(items, self.config)
        theme = self.config.theme_name

        files = {
            'definition/report.json': to_json(self.build_report_json()),
            'definition/version.json': to_json(self.build_version_json()),
            'definition/pages/pages.json': to_json(self.build_pages_json()),
            f'definition/pages/{PAGE_NAME}/page.json': to_json(
                self.build_page_json(page_display_name, canvas['width'], canvas['height'])),
            f'StaticResources/SharedResources/BaseThemes/{theme}.json': to_json(self.build_theme_json(theme_colors)),
        }

        visual_names: List[str] = []
        for index, item in enumerate(items):
            name = self._unique_name(item.id, visual_names)
            visual_names.append(name)
            visual = self.build_visual_json(item, index, scenario, measure_index, schema, theme_colors, name)
            files[f'definition/pages/{PAGE_NAME}/visuals/{name}/visual.json'] = to_json(visual)

        self.logger.debug(f"Generated {len(visual_names)} visuals on {PAGE_NAME} ({canvas['width']}x{canvas['height']})")
        return files, visual_names

    def _unique_name(self, item_id: str, taken: List[str]) -> str:
        base = safe_path_segment(item_id)
        name = base
        suffix = 2
        while name in taken:
            name = f"{base}_{suffix}"
            suffix += 1
        if name != item_id:
            self.logger.warning(f"Visual id '{item_id}' written as '{name}'")
        return name
