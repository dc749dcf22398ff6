"""Value Cleaning: turns raw form values into typed column values.

Invariants:
    - Only editable columns and many-to-many relations survive cleaning
    - Boolean columns and many-to-many relations use checkbox semantics:
      an absent key means False / empty selection
    - All field errors are collected before raising ValueCleaningError
    - Pure: no IO, no ORM access

Design Decisions:
    - Empty string on a nullable column is None; on a defaulted column the key
      is omitted so the database/ORM default applies
    - Empty or missing primary key values are always required
    - partial=True (updates) leaves missing keys untouched; otherwise a missing
      required column is a field error, not a database NOT NULL failure
    - Many-to-many ids are coerced here, resolved to entities by the repository
"""

import json
import uuid
from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping

from entity_admin.core.domain_types import ColumnKind
from entity_admin.core.entity_metadata import ColumnInfo, EntityMetadata
from entity_admin.core.errors import EntityNotFoundError, ValueCleaningError

TRUTHY_VALUES = frozenset({"on", "true", "1", "yes"})

REQUIRED_MESSAGE = "This field is required."


class _Omit:
    """Marker: leave the key out of the cleaned values."""


_OMIT = _Omit()


def clean_values(
    raw: Mapping[str, Any], metadata: EntityMetadata, partial: bool = False,
) -> dict[str, Any]:
    """Clean submitted values against entity metadata.

    With partial=True, columns missing from raw are left out of the result.

    Raises ValueCleaningError with one message per invalid field.
    """
    cleaned: dict[str, Any] = {}
    errors: dict[str, str] = {}

    for column in metadata.editable_columns:
        if column.kind is ColumnKind.BOOLEAN:
            cleaned[column.name] = clean_boolean(raw.get(column.name))
            continue
        if column.name not in raw:
            if partial or column.nullable or column.has_default:
                continue
            errors[column.name] = REQUIRED_MESSAGE
            continue
        try:
            value = clean_column_value(raw[column.name], column)
        except ValueError as e:
            errors[column.name] = str(e)
            continue
        if value is not _OMIT:
            cleaned[column.name] = value

    for relation in metadata.many_to_many:
        ids = raw.get(relation.name, [])
        if isinstance(ids, (str, int)):
            ids = [ids]
        try:
            cleaned[relation.name] = [
                coerce_scalar(i, relation.target_primary_key_kind)
                for i in ids if i != ""
            ]
        except ValueError as e:
            errors[relation.name] = str(e)

    if errors:
        raise ValueCleaningError(errors)
    return cleaned


def clean_boolean(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in TRUTHY_VALUES


def clean_column_value(value: Any, column: ColumnInfo) -> Any:
    """Clean one column value. Raises ValueError with a user-facing message."""
    if isinstance(value, str) and column.kind not in (ColumnKind.STRING, ColumnKind.TEXT):
        value = value.strip()
    if value == "" or value is None:
        if column.nullable:
            return None
        if column.primary_key:
            raise ValueError(REQUIRED_MESSAGE)
        if column.has_default:
            return _OMIT
        if column.kind in (ColumnKind.STRING, ColumnKind.TEXT):
            return ""
        raise ValueError(REQUIRED_MESSAGE)
    return coerce_scalar(value, column.kind, column)


def coerce_scalar(value: Any, kind: ColumnKind, column: ColumnInfo | None = None) -> Any:
    """Convert a raw value to the Python type of a column kind."""
    try:
        match kind:
            case ColumnKind.INTEGER:
                return int(value)
            case ColumnKind.FLOAT:
                return float(value)
            case ColumnKind.DECIMAL:
                return Decimal(str(value))
            case ColumnKind.BOOLEAN:
                return clean_boolean(value)
            case ColumnKind.DATE:
                return value if isinstance(value, date) else date.fromisoformat(value)
            case ColumnKind.DATETIME:
                return value if isinstance(value, datetime) else datetime.fromisoformat(value)
            case ColumnKind.TIME:
                return value if isinstance(value, time) else time.fromisoformat(value)
            case ColumnKind.UUID:
                return value if isinstance(value, uuid.UUID) else uuid.UUID(str(value))
            case ColumnKind.JSON:
                return json.loads(value) if isinstance(value, str) else value
            case ColumnKind.ENUM:
                return _coerce_enum(value, column)
            case _:
                return _coerce_string(value, column)
    except (TypeError, InvalidOperation, json.JSONDecodeError) as e:
        raise ValueError(f"Enter a valid {kind.value} value.") from e
    except ValueError as e:
        if str(e).startswith(("Select a valid", "Ensure this value")):
            raise
        raise ValueError(f"Enter a valid {kind.value} value.") from e


def _coerce_enum(value: Any, column: ColumnInfo | None) -> Any:
    if column is None:
        return value
    enum_class = column.enum_class
    if enum_class is not None and isinstance(value, enum_class):
        return value
    name = str(value)
    if column.choices and name not in column.choices:
        raise ValueError(f"Select a valid choice. '{name}' is not one of the available choices.")
    if enum_class is not None:
        return enum_class[name]
    return name


def _coerce_string(value: Any, column: ColumnInfo | None) -> str:
    text = str(value)
    if column is not None and column.length is not None and len(text) > column.length:
        raise ValueError(
            f"Ensure this value has at most {column.length} characters (it has {len(text)}).",
        )
    return text


def coerce_primary_key(raw: str, metadata: EntityMetadata) -> Any:
    """Convert a URL path segment to the primary key's type.

    A segment that cannot be converted can never match a row, so it is
    reported as EntityNotFoundError.
    """
    try:
        return coerce_scalar(raw, metadata.primary_key.kind)
    except ValueError:
        raise EntityNotFoundError(metadata.name, raw)
