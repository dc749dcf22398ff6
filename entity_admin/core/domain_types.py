"""Domain Types: enums that classify columns and relations for forms and cleaning.

Invariants:
    - Every SQLAlchemy column type maps onto exactly one ColumnKind
    - All valid states encoded as Enums, no raw string matching

Design Decisions:
    - str Enums: usable directly as template values and in JSON error payloads
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

SectionName = NewType("SectionName", str)
EntityName = NewType("EntityName", str)


# ─── Enums ───────────────────────────────────────────────────────

class ColumnKind(str, Enum):
    """Value kind of a mapped column; drives widget choice and cleaning."""
    STRING = "string"
    TEXT = "text"
    INTEGER = "integer"
    FLOAT = "float"
    DECIMAL = "decimal"
    BOOLEAN = "boolean"
    DATE = "date"
    DATETIME = "datetime"
    TIME = "time"
    UUID = "uuid"
    ENUM = "enum"
    JSON = "json"


class RelationKind(str, Enum):
    """Relationship cardinality as seen from the owning entity."""
    MANY_TO_ONE = "many-to-one"
    ONE_TO_MANY = "one-to-many"
    MANY_TO_MANY = "many-to-many"
    ONE_TO_ONE = "one-to-one"


# HTML input type per column kind (enum and foreign keys render as <select>)
INPUT_TYPES: dict[ColumnKind, str] = {
    ColumnKind.STRING: "text",
    ColumnKind.TEXT: "textarea",
    ColumnKind.INTEGER: "number",
    ColumnKind.FLOAT: "number",
    ColumnKind.DECIMAL: "number",
    ColumnKind.BOOLEAN: "checkbox",
    ColumnKind.DATE: "date",
    ColumnKind.DATETIME: "datetime-local",
    ColumnKind.TIME: "time",
    ColumnKind.UUID: "text",
    ColumnKind.ENUM: "select",
    ColumnKind.JSON: "textarea",
}
