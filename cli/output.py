"""Helpers for printing command results."""

import json
from datetime import date
from decimal import Decimal


def to_jsonable(value):
    """Convert results, dates and Decimals into JSON-serializable values."""
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if isinstance(value, dict):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, date):
        return value.isoformat()
    return value


def print_json(value) -> None:
    """Print a result as indented JSON on stdout."""
    print(json.dumps(to_jsonable(value), ensure_ascii=False, indent=2))
