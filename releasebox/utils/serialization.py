"""Utilities for data serialization and conversion."""

import json
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any


class ReleaseboxJSONEncoder(json.JSONEncoder):
    """Custom JSON encoder for Releasebox data.

    Handles datetime objects, paths, enums, sets, and objects with a
    ``to_dict`` method.

    Usage:
        json.dumps(data, cls=ReleaseboxJSONEncoder)
    """

    def default(self, obj: Any) -> Any:
        if isinstance(obj, datetime):
            return obj.isoformat()
        elif isinstance(obj, Path):
            return str(obj)
        elif isinstance(obj, Enum):
            return obj.value
        elif isinstance(obj, set | frozenset):
            return sorted(obj)
        elif hasattr(obj, "to_dict") and callable(obj.to_dict):
            return obj.to_dict()
        return super().default(obj)
