"""
M (Power Query) partition sources for import-mode tables.

Every table is loaded from an inline ``#table(...)`` literal holding the
rows captured in the export state, so the model opens with data and needs
no external data source.
"""
import logging
import math
import re
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional

from ..models import PBIColumn

logger = logging.getLogger(__name__)

M_TYPES = {
    'string': 'Text.Type',
    'int64': 'Int64.Type',
    'double': 'Number.Type',
    'dateTime': 'DateTime.Type',
    'boolean': 'Logical.Type',
}

MONTH_NAMES = ['Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun', 'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec']
DAY_NAMES = ['Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday', 'Sunday']

_PLAIN_IDENTIFIER = re.compile(r'^[A-Za-z_][A-Za-z0-9_]*$')

_M_ESCAPES = (('\r', '#(cr)'), ('\n', '#(lf)'), ('\t', '#(tab)'))


def to_m_type(data_type: str) -> str:
    return M_TYPES.get(data_type, 'Text.Type')


def m_identifier(name: str) -> str:
    """Quote a field name for use inside ``type table [...]``"""
    if _PLAIN_IDENTIFIER.match(name):
        return name
    return '#"' + name.replace('"', '""') + '"'


def parse_datetime(value: Any) -> Optional[datetime]:
    """Parse an ISO date/datetime (or date object); None when unparseable"""
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str) or not value:
        return None
    text = value.strip()
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def _format_number(value: Any, data_type: str) -> str:
    if isinstance(value, bool):
        return '1' if value else '0'
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 'null'
    if math.isnan(number) or math.isinf(number):
        return 'null'
    if data_type == 'int64':
        return str(int(number))
    if isinstance(value, int):
        return str(value)
    return repr(number)


def escape_m_text(text: str) -> str:
    """Quote text as an M string literal, keeping it on one line"""
    text = text.replace('#(', '#(#)(')
    for char, escape in _M_ESCAPES:
        text = text.replace(char, escape)
    return '"' + text.replace('"', '""') + '"'


def format_m_value(value: Any, data_type: str) -> str:
    """Render one cell as an M literal"""
    if value is None:
        return 'null'
    if data_type == 'string':
        return escape_m_text(str(value))
    if data_type == 'dateTime':
        parsed = parse_datetime(value)
        if parsed is None:
            return 'null'
        return (f"#datetime({parsed.year}, {parsed.month}, {parsed.day}, "
                f"{parsed.hour}, {parsed.minute}, {parsed.second})")
    if data_type == 'boolean':
        return 'true' if value else 'false'
    return _format_number(value, data_type)


def get_cell(row: Dict[str, Any], name: str) -> Any:
    """Value of a column in a state row; keys match case-insensitively"""
    if name in row:
        return row[name]
    lowered = name.lower()
    for key, value in row.items():
        if str(key).lower() == lowered:
            return value
    return None


def build_table_source(columns: List[PBIColumn], rows: Iterable[Dict[str, Any]]) -> List[str]:
    """Build the lines of an M ``let`` expression returning the rows as a table"""
    type_fields = ', '.join(f"{m_identifier(col.name)} = {to_m_type(col.data_type)}" for col in columns)
    row_lines = []
    for row in rows or []:
        values = ', '.join(format_m_value(get_cell(row, col.name), col.data_type) for col in columns)
        row_lines.append(f"            {{{values}}}")

    lines = [
        'let',
        '    Source = #table(',
        f'        type table [{type_fields}],',
        '        {',
    ]
    for index, line in enumerate(row_lines):
        lines.append(line + (',' if index < len(row_lines) - 1 else ''))
    lines.extend([
        '        }',
        '    )',
        'in',
        '    Source',
    ])
    return lines


def build_date_rows(values: Iterable[Any], column_names: Iterable[str]) -> List[Dict[str, Any]]:
    """Derive calendar rows from the dates found in a fact table

    Only the calendar columns present in ``column_names`` are filled in.
    """
    wanted = set(column_names)
    days = sorted({parsed.date() for parsed in (parse_datetime(v) for v in values) if parsed is not None})
    rows = []
    for day in days:
        row = {
            'Date': datetime(day.year, day.month, day.day).isoformat(),
            'Year': day.year,
            'Month': MONTH_NAMES[day.month - 1],
            'Quarter': f"Q{(day.month - 1) // 3 + 1}",
            'MonthNum': day.month,
            'WeekNum': day.isocalendar()[1],
            'DayOfWeek': DAY_NAMES[day.weekday()],
        }
        rows.append({key: value for key, value in row.items() if key in wanted})
    return rows
