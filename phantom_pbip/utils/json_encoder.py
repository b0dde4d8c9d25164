"""
JSON encoder for model classes
"""
import dataclasses
import json
from datetime import date, datetime
from enum import Enum
from typing import Any


class ModelJSONEncoder(json.JSONEncoder):
    """JSON encoder that can handle model classes"""

    def default(self, obj: Any) -> Any:
        """Convert object to JSON serializable format"""
        if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
            return model_to_dict(obj)

        if isinstance(obj, Enum):
            return obj.value

        if isinstance(obj, (datetime, date)):
            return obj.isoformat()

        return super().default(obj)


def model_to_dict(obj: Any) -> Any:
    """Convert a model object to a dictionary recursively"""
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        result = {}
        for field in dataclasses.fields(obj):
            value = getattr(obj, field.name)
            if isinstance(value, bytes):
                continue
            result[field.name] = model_to_dict(value)
        return result
    elif isinstance(obj, (list, tuple)):
        return [model_to_dict(item) for item in obj]
    elif isinstance(obj, dict):
        return {key: model_to_dict(value) for key, value in obj.items()}
    elif isinstance(obj, Enum):
        return obj.value
    elif isinstance(obj, (datetime, date)):
        return obj.isoformat()
    else:
        return obj


def to_json(obj: Any) -> str:
    """Serialize a PBIP document the way Power BI Desktop writes them"""
    return json.dumps(obj, indent=2, ensure_ascii=False, cls=ModelJSONEncoder)
