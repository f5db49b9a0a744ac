"""Row conversion shared by repositories."""

import json
import uuid
from datetime import datetime
from typing import Any


def row_to_dict(row: Any, json_columns: frozenset[str] = frozenset()) -> dict[str, Any]:
    """Convert a SQLAlchemy row to a dict of JSON-safe primitives.

    asyncpg returns UUID columns as uuid.UUID and TIMESTAMPTZ columns as
    datetime; both are converted to str. Columns named in ``json_columns``
    are decoded when the driver hands them back as text.
    """
    result: dict[str, Any] = {}
    for key, value in dict(row._mapping).items():
        if isinstance(value, uuid.UUID):
            result[key] = str(value)
        elif isinstance(value, datetime):
            result[key] = value.isoformat()
        elif key in json_columns and isinstance(value, str):
            result[key] = json.loads(value)
        else:
            result[key] = value
    return result
