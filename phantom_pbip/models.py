"""Data models for the Phantom PBIP exporter."""

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Any, Mapping

from .exceptions import UnknownScenarioError

__all__ = [
    # Enums
    'Scenario',
    # Dashboard side
    'GridLayout', 'VisualItem', 'ExportState',
    # Bindings and measures
    'MetricBinding', 'DimensionBinding', 'DAXMeasure',
    # Semantic model
    'PBIColumn', 'PBITable', 'PBIRelationship', 'PBISchema',
    # Report / package
    'PixelPosition', 'PBIPPackage',
    'coerce_items'
]


class Scenario(Enum):
    """Demo-data domains the editor can switch between"""
    RETAIL = "Retail"
    SAAS = "SaaS"
    HR = "HR"
    LOGISTICS = "Logistics"
    FINANCE = "Finance"
    PORTFOLIO = "Portfolio"
    SOCIAL = "Social"

    @classmethod
    def parse(cls, value: Any) -> 'Scenario':
        """Accept a Scenario or its (case-insensitive) name"""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            lowered = value.strip().lower()
            for scenario in cls:
                if scenario.value.lower() == lowered:
                    return scenario
        raise UnknownScenarioError(value)

    def __str__(self) -> str:
        return self.value


@dataclass
class GridLayout:
    """Grid rectangle of a placed visual, in grid units"""
    x: int = 0
    y: int = 0
    w: int = 1
    h: int = 1

    def __post_init__(self):
        self.x = max(0, int(self.x))
        self.y = max(0, int(self.y))
        self.w = max(1, int(self.w))
        self.h = max(1, int(self.h))

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> 'GridLayout':
        data = data or {}
        return cls(
            x=data.get('x', 0),
            y=data.get('y', 0),
            w=data.get('w', 1),
            h=data.get('h', 1),
        )

    def to_dict(self) -> Dict[str, int]:
        return {'x': self.x, 'y': self.y, 'w': self.w, 'h': self.h}


@dataclass
class VisualItem:
    """One element placed on the dashboard canvas"""
    id: str
    type: str
    title: str = ""
    layout: GridLayout = field(default_factory=GridLayout)
    props: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'VisualItem':
        """Build an item from the editor's JSON shape"""
        layout = data.get('layout')
        return cls(
            id=str(data['id']),
            type=str(data.get('type', 'card')),
            title=data.get('title') or "",
            layout=layout if isinstance(layout, GridLayout) else GridLayout.from_dict(layout),
            props=copy.deepcopy(dict(data.get('props') or {})),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'type': self.type,
            'title': self.title,
            'layout': self.layout.to_dict(),
            'props': copy.deepcopy(self.props),
        }


@dataclass(frozen=True)
class MetricBinding:
    """A deduplicated (metric, operation) pair resolved against the scenario schema"""
    metric: str
    operation: str
    table: str
    column: str
    resolved: bool = True

    @property
    def key(self) -> str:
        return f"{self.metric}_{self.operation}"


@dataclass(frozen=True)
class DimensionBinding:
    """A categorical or time field a visual slices by"""
    field: str
    table: str
    column: str
    role: Optional[str] = None


@dataclass
class DAXMeasure:
    """A DAX measure destined for a semantic model table"""
    name: str
    expression: str
    format_string: Optional[str] = None
    display_folder: Optional[str] = None
    description: Optional[str] = None
    table: Optional[str] = None


@dataclass
class PBIColumn:
    """Column of a scenario table"""
    name: str
    data_type: str = "string"
    source_column: Optional[str] = None
    is_hidden: bool = False
    summarize_by: str = "none"


@dataclass
class PBITable:
    """Table of a scenario star schema"""
    name: str
    columns: List[PBIColumn] = field(default_factory=list)
    description: Optional[str] = None
    is_hidden: bool = False

    def has_column(self, column: str) -> bool:
        lowered = column.lower()
        return any(col.name.lower() == lowered for col in self.columns)


@dataclass
class PBIRelationship:
    """Foreign-key link between two scenario tables"""
    name: str
    from_table: str
    from_column: str
    to_table: str
    to_column: str
    cross_filtering_behavior: str = "oneDirection"
    is_active: bool = True


@dataclass
class PBISchema:
    """Star schema for one scenario"""
    description: str
    fact_table: str
    tables: List[PBITable] = field(default_factory=list)
    relationships: List[PBIRelationship] = field(default_factory=list)

    def get_table(self, name: str) -> Optional[PBITable]:
        for table in self.tables:
            if table.name == name:
                return table
        return None

    def has_column(self, table: str, column: str) -> bool:
        found = self.get_table(table)
        return bool(found and found.has_column(column))


@dataclass(frozen=True)
class PixelPosition:
    """Absolute position of a visual on the Power BI canvas"""
    x: int
    y: int
    width: int
    height: int

    def to_dict(self) -> Dict[str, int]:
        return {'x': self.x, 'y': self.y, 'width': self.width, 'height': self.height}


@dataclass(frozen=True)
class ExportState:
    """Immutable snapshot of the dashboard store taken at export time"""
    data: Dict[str, List[Dict[str, Any]]] = field(default_factory=dict)
    filters: Dict[str, Any] = field(default_factory=dict)
    theme_colors: List[str] = field(default_factory=list)
    dashboard_name: Optional[str] = None

    @classmethod
    def from_dict(cls, state: Optional[Mapping[str, Any]]) -> 'ExportState':
        """Snapshot a store mapping; the caller's objects are copied, never shared"""
        if state is None:
            return cls()
        if isinstance(state, cls):
            return state
        snapshot = copy.deepcopy(dict(state))
        return cls(
            data=dict(snapshot.get('data') or {}),
            filters=dict(snapshot.get('filters') or {}),
            theme_colors=list(snapshot.get('themeColors') or snapshot.get('theme_colors') or []),
            dashboard_name=snapshot.get('dashboardName') or snapshot.get('dashboard_name'),
        )


@dataclass
class PBIPPackage:
    """Result of one export call"""
    blob: bytes
    filename: str
    project_name: str
    documentation: str
    files: List[str] = field(default_factory=list)
    measures: List[DAXMeasure] = field(default_factory=list)
    manifest: Dict[str, List[str]] = field(default_factory=dict)


def coerce_items(items) -> List[VisualItem]:
    """Copy editor items (dicts or VisualItem) into fresh VisualItem objects"""
    result = []
    for item in items or []:
        if isinstance(item, VisualItem):
            result.append(copy.deepcopy(item))
        else:
            result.append(VisualItem.from_dict(item))
    return result
