"""
Project file generator for the PBIP manifest and artifact metadata files.
"""
import logging
from typing import Any, Dict

from ..utils.identifiers import stable_uuid
from ..utils.json_encoder import to_json

PLATFORM_SCHEMA = 'https://developer.microsoft.com/json-schemas/fabric/gitIntegration/platformProperties/2.0.0/schema.json'
ALL_TABLES = 'All tables'


class ProjectFileGenerator:
    """Generator for .pbip, .platform, definition.pbir/.pbism and editor files"""

    def __init__(self, project_name: str):
        """
        Initialize the project file generator

        Args:
            project_name: Project name, used for artifact folders and display names
        """
        self.project_name = project_name
        self.logger = logging.getLogger(__name__)

    @property
    def report_folder(self) -> str:
        return f"{self.project_name}.Report"

    @property
    def model_folder(self) -> str:
        return f"{self.project_name}.SemanticModel"

    def build_pbip_manifest(self) -> Dict[str, Any]:
        return {
            'version': '1.0',
            'artifacts': [{'report': {'path': self.report_folder}}],
            'settings': {'enableAutoRecovery': True},
        }

    def build_platform(self, artifact_type: str) -> Dict[str, Any]:
        """.platform file of the Report or SemanticModel artifact"""
        return {
            '$schema': PLATFORM_SCHEMA,
            'metadata': {'type': artifact_type, 'displayName': self.project_name},
            'config': {'version': '2.0', 'logicalId': stable_uuid(self.project_name, artifact_type)},
        }

    def build_pbir(self) -> Dict[str, Any]:
        return {'version': '4.0', 'datasetReference': {'byPath': {'path': f"../{self.model_folder}"}}}

    def build_pbism(self) -> Dict[str, Any]:
        return {'version': '4.2', 'settings': {}}

    def build_editor_settings(self) -> Dict[str, Any]:
        return {
            'version': '1.0',
            'autodetectRelationships': False,
            'parallelQueryLoading': True,
            'typeDetectionEnabled': True,
            'relationshipImportEnabled': True,
            'runBackgroundAnalysis': True,
            'shouldNotifyUserOfNameConflictResolution': True,
        }

    def build_diagram_layout(self) -> Dict[str, Any]:
        return {
            'version': '1.1.0',
            'diagrams': [{
                'ordinal': 0,
                'scrollPosition': {'x': 0, 'y': 0},
                'nodes': [],
                'name': ALL_TABLES,
                'zoomValue': 100,
                'pinKeyFieldsToTop': False,
                'showExtraHeaderInfo': False,
                'hideKeyFieldsWhenCollapsed': False,
                'tablesLocked': False,
            }],
            'selectedDiagram': ALL_TABLES,
            'defaultDiagram': ALL_TABLES,
        }

    def generate_report_metadata(self) -> Dict[str, str]:
        """Files of the .Report folder outside ``definition/``"""
        return {
            '.platform': to_json(self.build_platform('Report')),
            'definition.pbir': to_json(self.build_pbir()),
        }

    def generate_model_metadata(self) -> Dict[str, str]:
        """Files of the .SemanticModel folder outside ``definition/``"""
        return {
            '.platform': to_json(self.build_platform('SemanticModel')),
            '.pbi/editorSettings.json': to_json(self.build_editor_settings()),
            'definition.pbism': to_json(self.build_pbism()),
            'diagramLayout.json': to_json(self.build_diagram_layout()),
        }

    def generate_project_file(self) -> str:
        self.logger.debug(f"Generating project manifest for {self.project_name}")
        return to_json(self.build_pbip_manifest())
