"""Entity Metadata: ORM-independent description of an administered model.

Invariants:
    - Exactly one primary key column per entity
    - name is the model class name and is the entity segment in admin URLs
    - Column and relation order follows the mapper's declaration order

Design Decisions:
    - Frozen dataclasses: metadata is computed once at registration and shared
      across requests
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from entity_admin.core.domain_types import ColumnKind, EntityName, RelationKind, INPUT_TYPES


@dataclass(frozen=True)
class ColumnInfo:
    """One mapped column."""
    name: str
    kind: ColumnKind
    nullable: bool = True
    primary_key: bool = False
    generated: bool = False
    has_default: bool = False
    length: int | None = None
    choices: tuple[str, ...] = ()
    enum_class: type[Enum] | None = None
    foreign_key_target: str | None = None

    @property
    def editable(self) -> bool:
        return not self.generated

    @property
    def required(self) -> bool:
        return not self.nullable and not self.has_default and self.kind is not ColumnKind.BOOLEAN

    @property
    def input_type(self) -> str:
        if self.foreign_key_target:
            return "select"
        return INPUT_TYPES[self.kind]


@dataclass(frozen=True)
class RelationInfo:
    """One relationship() property."""
    name: str
    kind: RelationKind
    target: str
    target_primary_key: str = "id"
    target_primary_key_kind: ColumnKind = ColumnKind.INTEGER


@dataclass(frozen=True)
class EntityMetadata:
    """Everything the admin needs to list, render and clean one model."""
    name: EntityName
    table_name: str
    columns: tuple[ColumnInfo, ...]
    relations: tuple[RelationInfo, ...] = field(default=())

    @property
    def primary_key(self) -> ColumnInfo:
        return next(c for c in self.columns if c.primary_key)

    @property
    def editable_columns(self) -> tuple[ColumnInfo, ...]:
        return tuple(c for c in self.columns if c.editable)

    @property
    def many_to_many(self) -> tuple[RelationInfo, ...]:
        return tuple(r for r in self.relations if r.kind is RelationKind.MANY_TO_MANY)

    def find_column(self, name: str) -> ColumnInfo | None:
        return next((c for c in self.columns if c.name == name), None)

    def find_relation(self, name: str) -> RelationInfo | None:
        return next((r for r in self.relations if r.name == name), None)

    def primary_key_of(self, entity: Any) -> Any:
        return getattr(entity, self.primary_key.name)
