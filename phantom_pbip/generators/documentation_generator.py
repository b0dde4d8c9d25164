"""
Documentation generator for the guide shipped next to the PBIP project.
"""
import logging
from typing import Any, Dict, List, Optional

from ..models import DAXMeasure, PBISchema, Scenario
from .template_engine import TemplateEngine


class DocumentationGenerator:
    """Generator for the ``<Project>_Guide.md`` file"""

    def __init__(self, template_engine: TemplateEngine):
        """
        Initialize the documentation generator

        Args:
            template_engine: Template engine for rendering templates
        """
        self.template_engine = template_engine
        self.logger = logging.getLogger(__name__)

    def generate_guide(self, scenario: Scenario, schema: PBISchema, measures: List[DAXMeasure],
                       pages: Dict[str, List[str]],
                       table_rows: Optional[Dict[str, List[Dict[str, Any]]]] = None,
                       filters: Optional[Dict[str, Any]] = None) -> str:
        """
        Render the guide

        Args:
            scenario: Active scenario
            schema: Scenario schema
            measures: Routed measures
            pages: Page name -> visual names
            table_rows: Rows embedded per table, used for the row counts
            filters: Dashboard filters active at export time

        Returns:
            Markdown text
        """
        row_counts = {name: len(rows) for name, rows in (table_rows or {}).items() if rows}
        context = {
            'scenario': str(scenario),
            'tables': schema.tables,
            'row_counts': row_counts,
            'measures': measures,
            'pages': pages,
            'filters': {k: v for k, v in (filters or {}).items() if v not in (None, '', [], {})},
        }
        content = self.template_engine.render('guide', context)
        self.logger.debug(f"Generated guide for {scenario} with {len(measures)} measures")
        return content
