"""
Scenario catalog: semantic fields, star schemas and field mappings per scenario.

The catalog is read once from ``config/scenarios.yaml`` and converted into
model objects on request, so callers always receive fresh instances they are
free to modify.
"""
import copy
import logging
from functools import lru_cache
from typing import Any, Dict, List, Optional, Tuple

from .config_loader import load_packaged_config
from .models import PBIColumn, PBIRelationship, PBISchema, PBITable, Scenario

logger = logging.getLogger(__name__)

CATALOG_FILE = 'scenarios.yaml'


@lru_cache(maxsize=1)
def _load_catalog() -> Dict[str, Any]:
    catalog = load_packaged_config(CATALOG_FILE)
    missing = [s.value for s in Scenario if s.value not in catalog.get('scenarios', {})]
    if missing:
        raise ValueError(f"Scenario catalog is missing: {', '.join(missing)}")
    logger.debug(f"Loaded scenario catalog with {len(catalog['scenarios'])} scenarios")
    return catalog


def _scenario_entry(scenario) -> Dict[str, Any]:
    return _load_catalog()['scenarios'][Scenario.parse(scenario).value]


def _build_table(data: Dict[str, Any]) -> PBITable:
    columns = [
        PBIColumn(
            name=col['name'],
            data_type=col.get('dataType', 'string'),
            source_column=col.get('sourceColumn', col['name']),
            is_hidden=bool(col.get('isHidden', False)),
            summarize_by=col.get('summarizeBy', 'none'),
        )
        for col in data.get('columns', [])
    ]
    return PBITable(
        name=data['name'],
        columns=columns,
        description=data.get('description'),
        is_hidden=bool(data.get('isHidden', False)),
    )


def _build_relationship(data: Dict[str, Any]) -> PBIRelationship:
    return PBIRelationship(
        name=data['name'],
        from_table=data['fromTable'],
        from_column=data['fromColumn'],
        to_table=data['toTable'],
        to_column=data['toColumn'],
        cross_filtering_behavior=data.get('crossFilteringBehavior', 'oneDirection'),
        is_active=bool(data.get('isActive', True)),
    )


def get_schema_for_scenario(scenario) -> PBISchema:
    """Get the star schema for a scenario

    Args:
        scenario: Scenario or scenario name

    Returns:
        PBISchema with tables, columns and relationships

    Raises:
        UnknownScenarioError: If the scenario is not part of the catalog
    """
    entry = _scenario_entry(scenario)
    return PBISchema(
        description=entry.get('description', ''),
        fact_table=entry['fact_table'],
        tables=[_build_table(t) for t in entry.get('tables', [])],
        relationships=[_build_relationship(r) for r in entry.get('relationships', [])],
    )


def get_fact_table_for_scenario(scenario) -> str:
    """Get the primary fact table name for a scenario"""
    return _scenario_entry(scenario)['fact_table']


def capitalize(value: str) -> str:
    """Upper-case the first character only, leaving the rest untouched"""
    return value[:1].upper() + value[1:]


def map_field_to_pbi_column(scenario, field: str) -> Tuple[str, str]:
    """Map a UI field name to a (table, column) pair

    Scenario mappings win over date mappings; anything else is assumed to
    live on the fact table under its capitalized name.
    """
    entry = _scenario_entry(scenario)
    mapping = entry.get('field_mappings', {}).get(field)
    if mapping:
        return mapping['table'], mapping['column']

    date_mapping = _load_catalog().get('DateMappings', {}).get(field)
    if date_mapping:
        return date_mapping['table'], date_mapping['column']

    return entry['fact_table'], capitalize(field)


def get_scenario_fields(scenario) -> List[Dict[str, str]]:
    """Get the semantic fields (name, role, type) of a scenario"""
    return copy.deepcopy(_scenario_entry(scenario).get('fields', []))


def get_fields_by_role(scenario, role: str) -> List[str]:
    return [f['name'] for f in _scenario_entry(scenario).get('fields', []) if f.get('role') == role]


def get_first_field(scenario, roles) -> Optional[str]:
    """First field whose role is in ``roles``, trying the roles in order"""
    if isinstance(roles, str):
        roles = [roles]
    for role in roles:
        names = get_fields_by_role(scenario, role)
        if names:
            return names[0]
    return None


def get_primary_category(scenario) -> Optional[str]:
    return get_first_field(scenario, ['Category', 'Entity', 'Geography'])


def get_time_dimension(scenario) -> Optional[str]:
    return get_first_field(scenario, 'Time')


def get_recommended_measures(scenario) -> List[str]:
    return list(_scenario_entry(scenario).get('recommended_measures', []))


def is_measure_field(scenario, name: str) -> bool:
    """True when ``name`` is a measure field or a recommended measure of the scenario"""
    lowered = name.lower()
    if any(m.lower() == lowered for m in get_fields_by_role(scenario, 'Measure')):
        return True
    return any(m.lower() == lowered for m in get_recommended_measures(scenario))


def get_default_table_columns(scenario) -> List[str]:
    """Default columns for a table visual: one dimension then two measures"""
    fields = _scenario_entry(scenario).get('fields', [])
    dimension = next((f['name'] for f in fields if f['role'] not in ('Measure', 'Identifier')), None)
    measures = [f['name'] for f in fields if f['role'] == 'Measure'][:2]
    return [name for name in [dimension] + measures if name]
