"""
Shared utilities and helpers.
"""

import json
from enum import Enum
from typing import Any
from datetime import date, datetime


def serialize_for_json(obj: Any) -> Any:
    """Serialize objects that aren't JSON-serializable by default."""
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    elif isinstance(obj, Enum):
        return obj.value
    elif isinstance(obj, (set, frozenset)):
        return sorted(serialize_for_json(item) for item in obj)
    elif hasattr(obj, 'model_dump'):  # Pydantic model
        return obj.model_dump(mode="json")
    return str(obj)


def dict_to_json_string(data: Any) -> str:
    """Convert data to JSON string, handling non-serializable types."""
    return json.dumps(data, default=serialize_for_json, indent=2)
