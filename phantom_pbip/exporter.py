"""
PBIP exporter: orchestrates measure synthesis, file generation and packaging.
"""
import asyncio
import logging
from typing import Any, Dict, List, Optional, Tuple

from .config import ExportConfig
from .dax.measure_generator import generate_all_measures
from .extractors.binding_extractor import extract_metric_bindings
from .generators.documentation_generator import DocumentationGenerator
from .generators.model_file_generator import ModelFileGenerator, collect_table_rows, route_measures
from .generators.package_builder import PackageBuilder
from .generators.project_file_generator import ProjectFileGenerator
from .generators.report_file_generator import PAGE_NAME, ReportFileGenerator
from .generators.template_engine import TemplateEngine
from .models import ExportState, PBIPPackage, Scenario, VisualItem, coerce_items
from .scenarios import get_schema_for_scenario

logger = logging.getLogger(__name__)


def _prepare_items(items, scenario: Scenario) -> List[VisualItem]:
    """Copy the items; Retail cards always carry their ΔPY/ΔPL reference labels"""
    prepared = coerce_items(items)
    if scenario is Scenario.RETAIL:
        for item in prepared:
            if item.type == 'card':
                item.props['showVariance'] = True
    return prepared


class PBIPExporter:
    """Builds PBIP packages from dashboard items"""

    def __init__(self, config: Optional[ExportConfig] = None):
        """
        Initialize the exporter

        Args:
            config: Export configuration; defaults are used when omitted
        """
        self.config = config or ExportConfig()
        self.logger = logging.getLogger(__name__)
        self.template_engine = TemplateEngine(self.config.template_directory)
        self.report_file_generator = ReportFileGenerator(self.config)
        self.documentation_generator = DocumentationGenerator(self.template_engine)

    def project_name_for(self, scenario: Scenario) -> str:
        return f"{self.config.project_prefix}{scenario.value}"

    def assemble(self, items, scenario, state=None,
                 filename: Optional[str] = None) -> Tuple[PackageBuilder, Dict[str, Any]]:
        """
        Run the pipeline up to (not including) archive serialization

        Args:
            items: Dashboard items (VisualItem objects or editor dicts)
            scenario: Scenario or scenario name
            state: ExportState, store mapping or None
            filename: Archive filename override

        Returns:
            Tuple of (populated builder, PBIPPackage fields other than ``blob``)

        Raises:
            UnknownScenarioError: If the scenario is not in the catalog
        """
        scenario = Scenario.parse(scenario)
        state = ExportState.from_dict(state)
        items = _prepare_items(items, scenario)
        project_name = self.project_name_for(scenario)
        self.logger.info(f"Exporting {len(items)} visuals as {project_name}")

        schema = get_schema_for_scenario(scenario)
        bindings = extract_metric_bindings(items, scenario)
        measures = route_measures(generate_all_measures(items, scenario, bindings), schema)
        table_rows = collect_table_rows(schema, state.data)
        theme_colors = state.theme_colors or None
        page_display_name = state.dashboard_name or f"{scenario} Dashboard"

        project_generator = ProjectFileGenerator(project_name)
        model_generator = ModelFileGenerator(self.template_engine, self.config, lineage_seed=project_name)
        report_files, visual_names = self.report_file_generator.generate_report_files(
            items, scenario, measures, schema, page_display_name, theme_colors)
        model_files = model_generator.generate_model_files(schema, measures, table_rows)
        report_metadata = project_generator.generate_report_metadata()
        model_metadata = project_generator.generate_model_metadata()
        manifest = {PAGE_NAME: visual_names}
        documentation = self.documentation_generator.generate_guide(
            scenario, schema, measures, manifest, table_rows, state.filters)

        report_folder = project_generator.report_folder
        model_folder = project_generator.model_folder
        builder = PackageBuilder(project_name)
        builder.add(f"{project_name}.pbip", project_generator.generate_project_file())
        builder.add(f"{report_folder}/.platform", report_metadata['.platform'])
        builder.add_directory(f"{report_folder}/.pbi")
        builder.add(f"{report_folder}/definition.pbir", report_metadata['definition.pbir'])
        builder.add_files(report_folder, report_files)
        builder.add(f"{model_folder}/.platform", model_metadata['.platform'])
        builder.add(f"{model_folder}/.pbi/editorSettings.json", model_metadata['.pbi/editorSettings.json'])
        builder.add(f"{model_folder}/definition.pbism", model_metadata['definition.pbism'])
        builder.add_files(model_folder, model_files)
        builder.add(f"{model_folder}/diagramLayout.json", model_metadata['diagramLayout.json'])
        builder.add(f"{project_name}_Guide.md", documentation)

        fields = {
            'filename': filename or f"{project_name}.pbip.zip",
            'project_name': project_name,
            'documentation': documentation,
            'files': sorted(builder.paths),
            'measures': measures,
            'manifest': manifest,
        }
        return builder, fields

    def export(self, items, scenario, state=None, filename: Optional[str] = None) -> PBIPPackage:
        builder, fields = self.assemble(items, scenario, state, filename)
        blob = builder.to_zip(self.config.compression_level)
        self.logger.info(f"Created {fields['filename']} ({len(fields['files'])} files, {len(blob)} bytes)")
        return PBIPPackage(blob=blob, **fields)

    async def export_async(self, items, scenario, state=None, filename: Optional[str] = None) -> PBIPPackage:
        """Same as export, with archive serialization moved to a worker thread"""
        builder, fields = self.assemble(items, scenario, state, filename)
        blob = await asyncio.to_thread(builder.to_zip, self.config.compression_level)
        self.logger.info(f"Created {fields['filename']} ({len(fields['files'])} files, {len(blob)} bytes)")
        return PBIPPackage(blob=blob, **fields)


def create_pbip_package(items, scenario, state=None, filename: Optional[str] = None,
                        config: Optional[ExportConfig] = None) -> PBIPPackage:
    """
    Export a dashboard as a zipped Power BI Project

    Args:
        items: Dashboard items (VisualItem objects or editor dicts); never mutated
        scenario: Scenario or scenario name
        state: ExportState, store mapping or None; never mutated
        filename: Archive filename, defaults to ``<Project>.pbip.zip``
        config: Export configuration

    Returns:
        PBIPPackage with the archive bytes, guide, measures and page manifest

    Raises:
        UnknownScenarioError: If the scenario is not in the catalog
        PackageSerializationError: If the archive cannot be written
    """
    return PBIPExporter(config).export(items, scenario, state, filename)


async def create_pbip_package_async(items, scenario, state=None, filename: Optional[str] = None,
                                    config: Optional[ExportConfig] = None) -> PBIPPackage:
    return await PBIPExporter(config).export_async(items, scenario, state, filename)
