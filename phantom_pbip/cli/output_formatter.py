"""
Output Formatter for CLI

Handles all CLI output formatting and display.
"""

import json
from typing import Any, Dict, List

from ..models import DAXMeasure, PBIPPackage
from ..utils.json_encoder import ModelJSONEncoder


class OutputFormatter:
    """Formats and displays CLI output"""

    @staticmethod
    def print_export_results(package: PBIPPackage, output_path: str):
        """Print export results"""
        print(f"\n=== Export Results ===")
        print(f"Project: {package.project_name}")
        print(f"Files: {len(package.files)}")
        print(f"Measures: {len(package.measures)}")
        for page, visuals in package.manifest.items():
            print(f"Page {page}: {len(visuals)} visuals")
        print(f"\n✓ Package saved to: {output_path}")

    @staticmethod
    def print_measures(measures: List[DAXMeasure], output_format: str = 'text'):
        """Print measures as text or JSON"""
        if output_format == 'json':
            print(json.dumps(measures, cls=ModelJSONEncoder, indent=2, ensure_ascii=False))
            return
        for measure in measures:
            folder = f" [{measure.display_folder}]" if measure.display_folder else ""
            print(f"{measure.table}.{measure.name}{folder}")
            print(f"    {measure.expression}")

    @staticmethod
    def print_recipe(visual_type: str, recipe: Dict[str, Any], title: str):
        """Print a binding recipe"""
        print(f"Visual: {visual_type}")
        print(f"Title: {title}")
        print(json.dumps(recipe, indent=2, ensure_ascii=False))
