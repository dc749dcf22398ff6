"""Display helpers: how entities and values appear in lists and forms."""

import json
from datetime import date, datetime, time
from enum import Enum
from typing import Any

from entity_admin.core.domain_types import ColumnKind
from entity_admin.core.entity_metadata import ColumnInfo, EntityMetadata

EMPTY_VALUE = "-"


def display_entity(entity: Any, metadata: EntityMetadata) -> str:
    """Human label for an entity: its own __str__ if the model defines one."""
    if type(entity).__str__ is not object.__str__:
        return str(entity)
    return f"{metadata.name} {metadata.primary_key_of(entity)}"


def format_value(value: Any) -> str:
    """Read-only rendering for change list cells."""
    if value is None:
        return EMPTY_VALUE
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, Enum):
        return value.name
    if isinstance(value, (datetime, date, time)):
        return value.isoformat(sep=" ") if isinstance(value, datetime) else value.isoformat()
    return str(value)


def input_value(entity: Any, column: ColumnInfo) -> str:
    """Prefill value for a form input; empty for new entities and None."""
    if entity is None:
        return ""
    value = getattr(entity, column.name, None)
    if value is None:
        return ""
    if isinstance(value, Enum):
        return value.name
    if column.kind is ColumnKind.DATETIME and isinstance(value, datetime):
        return value.replace(tzinfo=None).isoformat(timespec="seconds")
    if isinstance(value, (date, time)):
        return value.isoformat()
    if column.kind is ColumnKind.JSON:
        return json.dumps(value)
    return str(value)
