import copy
import logging
from dataclasses import asdict, is_dataclass
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Mapping
from uuid import UUID

logger = logging.getLogger(__name__)


def prepare_for_transport(data: Any) -> Any:
    """
    Recursively convert Pydantic models, dataclasses, and special types to
    JSON-compatible structures before they are placed in an argument tree.

    It handles:
    - Pydantic BaseModel instances (dumped in json mode with field aliases)
    - Python dataclasses
    - Dictionaries (processing values recursively)
    - Lists, tuples and sets (processing each item, sets become lists)
    - Enum members (replaced by their value)
    - dates, times, decimals and UUIDs (as strings, like pydantic json mode)

    Args:
        data: The data to convert

    Returns:
        The converted data
    """
    if data is None:
        return None

    if is_dataclass(data) and not isinstance(data, type):
        return prepare_for_transport(asdict(data))

    if hasattr(data, "model_dump") and callable(getattr(data, "model_dump")):
        return prepare_for_transport(data.model_dump(mode="json", by_alias=True))

    if isinstance(data, Enum):
        return data.value

    if isinstance(data, (datetime, date, time)):
        return data.isoformat()

    if isinstance(data, (Decimal, UUID)):
        return str(data)

    if isinstance(data, dict):
        return {k: prepare_for_transport(v) for k, v in data.items()}

    if isinstance(data, (list, tuple, set, frozenset)):
        return [prepare_for_transport(item) for item in data]

    return data


def undot(mapping: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Expand dotted keys into nested dictionaries.

    ``{"user.name": "bob"}`` becomes ``{"user": {"name": "bob"}}``.
    """
    result: Dict[str, Any] = {}
    for key, value in mapping.items():
        parts = key.split(".")
        curr = result
        for part in parts[:-1]:
            if part not in curr or not isinstance(curr[part], dict):
                curr[part] = {}
            curr = curr[part]
        curr[parts[-1]] = value
    return result


def deep_merge(base: Dict[str, Any], other: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Merge `other` into a copy of `base`, recursing into nested dictionaries.

    Values from `other` win on conflicts that are not both dictionaries.
    """
    merged = copy.deepcopy(base)
    for key, value in other.items():
        if isinstance(merged.get(key), dict) and isinstance(value, Mapping):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged
