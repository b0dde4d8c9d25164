"""
Deterministic identifiers for lineage tags, logical ids and relationship names.
"""
import re
import uuid

# Fixed namespace so that identical inputs always yield identical ids
PHANTOM_NAMESPACE = uuid.UUID('6f1c2d4e-8a3b-5c7d-9e0f-1a2b3c4d5e6f')

_UNSAFE = re.compile(r'[^A-Za-z0-9_-]')


def stable_uuid(*parts) -> str:
    """UUIDv5 derived from the given parts"""
    return str(uuid.uuid5(PHANTOM_NAMESPACE, '/'.join(str(p) for p in parts)))


def safe_path_segment(value: str, fallback: str = 'visual') -> str:
    """Make a value usable as a single archive path segment and PBIR name"""
    cleaned = _UNSAFE.sub('_', str(value or '')).strip('_')
    return cleaned or fallback
