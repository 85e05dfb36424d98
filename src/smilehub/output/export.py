"""Data export functionality."""

import json
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any


def export_json(
    data: Any,
    output_file: str | Path,
    pretty: bool = True,
) -> str:
    """
    Export data to JSON file.

    Args:
        data: Dict, list, or any object with ``to_dict``
        output_file: Output file path
        pretty: Pretty print JSON

    Returns:
        Path to output file
    """
    output_path = Path(output_file)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, "w") as f:
        json.dump(data, f, indent=2 if pretty else None, default=_json_serializer)

    return str(output_path)


def _json_serializer(obj: Any) -> Any:
    """Custom JSON serializer for special types."""
    if isinstance(obj, datetime):
        return obj.isoformat()
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, set):
        return sorted(obj)
    if hasattr(obj, "to_dict"):
        return obj.to_dict()
    raise TypeError(f"Object of type {type(obj)} is not JSON serializable")
