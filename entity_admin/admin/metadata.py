"""Metadata Extraction: builds EntityMetadata from a SQLAlchemy mapped class.

Invariants:
    - Called once per model at registration time
    - Composite primary keys raise UnsupportedEntityError
    - Type checks run most-specific first (Enum before String, Text before String)
"""

import logging
from functools import lru_cache

from sqlalchemy import (
    JSON, Boolean, Date, DateTime, Enum, Float, Integer, Numeric, String, Text,
    Time, Uuid, inspect,
)
from sqlalchemy.orm import Mapper, RelationshipDirection
from sqlalchemy.types import TypeEngine

from entity_admin.core.domain_types import ColumnKind, EntityName, RelationKind
from entity_admin.core.entity_metadata import ColumnInfo, EntityMetadata, RelationInfo
from entity_admin.core.errors import UnsupportedEntityError

logger = logging.getLogger(__name__)

_KIND_BY_TYPE: tuple[tuple[type[TypeEngine], ColumnKind], ...] = (
    (Boolean, ColumnKind.BOOLEAN),
    (Enum, ColumnKind.ENUM),
    (Integer, ColumnKind.INTEGER),
    (Float, ColumnKind.FLOAT),
    (Numeric, ColumnKind.DECIMAL),
    (DateTime, ColumnKind.DATETIME),
    (Date, ColumnKind.DATE),
    (Time, ColumnKind.TIME),
    (Uuid, ColumnKind.UUID),
    (JSON, ColumnKind.JSON),
    (Text, ColumnKind.TEXT),
    (String, ColumnKind.STRING),
)


def column_kind(type_: TypeEngine) -> ColumnKind:
    for sa_type, kind in _KIND_BY_TYPE:
        if isinstance(type_, sa_type):
            return kind
    return ColumnKind.STRING


def build_entity_metadata(model: type) -> EntityMetadata:
    """Inspect a mapped class into ORM-independent metadata."""
    mapper: Mapper = inspect(model)
    name = EntityName(model.__name__)
    if len(mapper.primary_key) != 1:
        raise UnsupportedEntityError(name, "exactly one primary key column is required")

    fk_targets = _foreign_key_targets(mapper)
    columns = tuple(
        _build_column(attr.key, attr.columns[0], fk_targets)
        for attr in mapper.column_attrs
    )
    relations = tuple(_build_relation(rel) for rel in mapper.relationships)
    logger.debug(
        f"Built metadata for {name}: {len(columns)} columns, {len(relations)} relations",
        extra={"entity": name},
    )
    return EntityMetadata(
        name=name,
        table_name=mapper.local_table.name,
        columns=columns,
        relations=relations,
    )


def _foreign_key_targets(mapper: Mapper) -> dict[str, str]:
    """Map FK column name -> target entity name via many-to-one relationships."""
    targets: dict[str, str] = {}
    for rel in mapper.relationships:
        if rel.direction is not RelationshipDirection.MANYTOONE:
            continue
        for column in rel.local_columns:
            targets[column.key] = rel.mapper.class_.__name__
    return targets


def _build_column(key: str, column, fk_targets: dict[str, str]) -> ColumnInfo:
    kind = column_kind(column.type)
    has_default = column.default is not None or column.server_default is not None
    generated = bool(column.primary_key) and (
        has_default
        or (kind is ColumnKind.INTEGER and column.autoincrement in ("auto", True))
    )
    enum_class = getattr(column.type, "enum_class", None) if kind is ColumnKind.ENUM else None
    choices = tuple(getattr(column.type, "enums", ())) if kind is ColumnKind.ENUM else ()
    length = getattr(column.type, "length", None) if kind is ColumnKind.STRING else None
    return ColumnInfo(
        name=key,
        kind=kind,
        nullable=bool(column.nullable),
        primary_key=bool(column.primary_key),
        generated=generated,
        has_default=has_default,
        length=length,
        choices=choices,
        enum_class=enum_class,
        foreign_key_target=fk_targets.get(column.key),
    )


def _build_relation(rel) -> RelationInfo:
    match rel.direction:
        case RelationshipDirection.MANYTOMANY:
            kind = RelationKind.MANY_TO_MANY
        case RelationshipDirection.MANYTOONE:
            kind = RelationKind.MANY_TO_ONE
        case _:
            kind = RelationKind.ONE_TO_MANY if rel.uselist else RelationKind.ONE_TO_ONE
    target_pk = rel.mapper.primary_key[0]
    return RelationInfo(
        name=rel.key,
        kind=kind,
        target=rel.mapper.class_.__name__,
        target_primary_key=rel.mapper.get_property_by_column(target_pk).key,
        target_primary_key_kind=column_kind(target_pk.type),
    )


@lru_cache(maxsize=None)
def metadata_for(model: type) -> EntityMetadata:
    """Cached build_entity_metadata, used for relationship targets."""
    return build_entity_metadata(model)
