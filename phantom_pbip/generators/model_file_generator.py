"""
Semantic model file generator: TMDL tables, model, database and culture files.
"""
import dataclasses
import logging
import re
from typing import Any, Dict, List, Optional

from ..config import ExportConfig
from ..models import DAXMeasure, PBIColumn, PBISchema
from ..utils.identifiers import stable_uuid
from ..validators.expression_validator import sanitize_expression
from .m_query_generator import build_date_rows, build_table_source, get_cell
from .template_engine import TemplateEngine

logger = logging.getLogger(__name__)

DATE_TABLE = 'DateTable'

_PLAIN_NAME = re.compile(r'^[A-Za-z_][A-Za-z0-9_]*$')
_CURRENCY_COLUMNS = ('revenue', 'profit', 'cost', 'salary', 'mrr', 'ltv', 'amount', 'price', 'marketvalue')


def tmdl_name(name: str) -> str:
    """Quote a TMDL object name when it is not a plain identifier"""
    if _PLAIN_NAME.match(name):
        return name
    return quote_name(name)


def quote_name(name: str) -> str:
    return "'" + name.replace("'", "''") + "'"


def column_format_string(data_type: str, column_name: str) -> Optional[str]:
    lowered = column_name.lower()
    if data_type == 'dateTime':
        return 'General Date'
    if data_type == 'int64':
        return '0'
    if data_type == 'double':
        if any(hint in lowered for hint in _CURRENCY_COLUMNS):
            return '$#,0.00;($#,0.00);$#,0.00'
        return '0.00'
    return None


def _single_line(text: Optional[str]) -> Optional[str]:
    if not text:
        return None
    return ' '.join(text.split())


def route_measures(measures: List[DAXMeasure], schema: PBISchema) -> List[DAXMeasure]:
    """Assign every measure to the table it will be written to

    Measures keep their home table when the schema has it, otherwise they
    go to the fact table. A measure may not share its name with a column of
    its table, so such a measure moves to the first table without that column.
    """
    table_names = [t.name for t in schema.tables]
    routed = []
    for measure in measures:
        table = measure.table if measure.table in table_names else schema.fact_table
        if schema.has_column(table, measure.name):
            alternative = next((t.name for t in schema.tables if not t.has_column(measure.name)), None)
            if alternative:
                logger.debug(f"Measure '{measure.name}' clashes with column {table}[{measure.name}]; "
                             f"moved to {alternative}")
                table = alternative
        routed.append(dataclasses.replace(measure, table=table))
    return routed


def _find_rows(data: Dict[str, List[Dict[str, Any]]], table_name: str) -> List[Dict[str, Any]]:
    if table_name in data:
        return data[table_name] or []
    lowered = table_name.lower()
    for key, rows in data.items():
        if key.lower() == lowered:
            return rows or []
    return []


def collect_table_rows(schema: PBISchema, data: Optional[Dict[str, List[Dict[str, Any]]]]) -> Dict[str, List[Dict[str, Any]]]:
    """Rows per schema table taken from the export state

    When the state carries no calendar rows, DateTable is derived from the
    dates of the column related to it.
    """
    data = data or {}
    rows = {table.name: list(_find_rows(data, table.name)) for table in schema.tables}

    date_table = schema.get_table(DATE_TABLE)
    if date_table and not rows.get(DATE_TABLE):
        for rel in schema.relationships:
            if rel.to_table == DATE_TABLE and rel.is_active:
                values = [get_cell(row, rel.from_column) for row in rows.get(rel.from_table, [])]
                rows[DATE_TABLE] = build_date_rows(values, [c.name for c in date_table.columns])
                break
    return rows


class ModelFileGenerator:
    """Generator for semantic model TMDL files"""

    def __init__(self, template_engine: TemplateEngine, config: Optional[ExportConfig] = None,
                 lineage_seed: str = 'Phantom'):
        """
        Initialize the model file generator

        Args:
            template_engine: Template engine for rendering templates
            config: Export configuration
            lineage_seed: Seed for deterministic lineage tags (the project name)
        """
        self.template_engine = template_engine
        self.config = config or ExportConfig()
        self.lineage_seed = lineage_seed
        self.logger = logging.getLogger(__name__)

    def _lineage_tag(self, *parts) -> str:
        return stable_uuid(self.lineage_seed, *parts)

    def _measure_context(self, table_name: str, measure: DAXMeasure) -> Dict[str, Any]:
        properties = []
        if measure.format_string:
            properties.append(f"formatString: {measure.format_string}")
        if measure.display_folder:
            properties.append(f"displayFolder: {measure.display_folder}")
        properties.append(f"lineageTag: {self._lineage_tag(table_name, 'measure', measure.name)}")
        return {
            'quoted_name': quote_name(measure.name),
            'expression': sanitize_expression(measure.expression, measure.name),
            'description': _single_line(measure.description),
            'properties': properties,
        }

    def _column_context(self, table_name: str, column: PBIColumn) -> Dict[str, Any]:
        properties = [f"dataType: {column.data_type}"]
        format_string = column_format_string(column.data_type, column.name)
        if format_string:
            properties.append(f"formatString: {format_string}")
        if column.is_hidden:
            properties.append('isHidden')
        properties.append(f"lineageTag: {self._lineage_tag(table_name, 'column', column.name)}")
        properties.append(f"summarizeBy: {column.summarize_by or 'none'}")
        properties.append(f"sourceColumn: {tmdl_name(column.source_column or column.name)}")
        return {'quoted_name': tmdl_name(column.name), 'properties': properties}

    def render_table(self, table_name: str, columns: List[PBIColumn], measures: List[DAXMeasure],
                     rows: Optional[List[Dict[str, Any]]] = None, description: Optional[str] = None) -> str:
        """
        Render one table as TMDL

        Args:
            table_name: Name of the table
            columns: Columns of the table
            measures: Measures homed on the table
            rows: Optional rows embedded in the import partition
            description: Optional table description

        Returns:
            TMDL text: header, measures, columns, then the partition
        """
        context = {
            'quoted_name': tmdl_name(table_name),
            'lineage_tag': self._lineage_tag(table_name, 'table'),
            'description': _single_line(description),
            'measures': [self._measure_context(table_name, m) for m in measures],
            'columns': [self._column_context(table_name, c) for c in columns],
            'source': '\n'.join('\t\t\t' + line for line in build_table_source(columns, rows or [])),
        }
        return self.template_engine.render('table', context)

    def render_database(self) -> str:
        return self.template_engine.render('database', {
            'compatibility_level': self.config.compatibility_level,
        })

    def render_culture(self) -> str:
        return self.template_engine.render('culture', {'culture': self.config.culture})

    def render_model(self, schema: PBISchema) -> str:
        relationships = []
        for rel in schema.relationships:
            relationships.append({
                'id': self._lineage_tag('relationship', rel.name),
                'from_column': f"{tmdl_name(rel.from_table)}.{tmdl_name(rel.from_column)}",
                'to_column': f"{tmdl_name(rel.to_table)}.{tmdl_name(rel.to_column)}",
                'cross_filtering_behavior': rel.cross_filtering_behavior,
                'is_active': rel.is_active,
            })
        return self.template_engine.render('model', {
            'culture': self.config.culture,
            'tables': [tmdl_name(t.name) for t in schema.tables],
            'relationships': relationships,
        })

    def generate_model_files(self, schema: PBISchema, measures: List[DAXMeasure],
                             table_rows: Optional[Dict[str, List[Dict[str, Any]]]] = None) -> Dict[str, str]:
        """
        Generate the ``definition/`` files of the semantic model

        Args:
            schema: Scenario schema
            measures: Routed measures (see route_measures)
            table_rows: Rows per table

        Returns:
            Ordered mapping of path (relative to the .SemanticModel folder) to content
        """
        table_rows = table_rows or {}
        files = {
            'definition/database.tmdl': self.render_database(),
            f'definition/cultures/{self.config.culture}.tmdl': self.render_culture(),
        }
        for table in schema.tables:
            table_measures = [m for m in measures if m.table == table.name]
            files[f'definition/tables/{table.name}.tmdl'] = self.render_table(
                table.name, table.columns, table_measures, table_rows.get(table.name), table.description)
            self.logger.debug(f"Rendered table {table.name} with {len(table_measures)} measures")
        files['definition/model.tmdl'] = self.render_model(schema)
        return files


def render_table(table_name: str, columns: List[PBIColumn], measures: List[DAXMeasure],
                 rows: Optional[List[Dict[str, Any]]] = None) -> str:
    """Render a table with the packaged templates and default configuration"""
    config = ExportConfig()
    generator = ModelFileGenerator(TemplateEngine(config.template_directory), config)
    return generator.render_table(table_name, columns, measures, rows)
