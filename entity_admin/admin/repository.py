"""Entity Repository: async persistence for one administered model.

Invariants:
    - Lists are ordered by primary key so pagination windows are stable
    - find_one_or_fail loads every relationship (no lazy loads in templates);
      find_and_count loads columns only, the change list renders no relations
    - Many-to-many id lists are resolved to target rows before commit;
      unknown ids raise ValueCleaningError
    - IntegrityError on commit rolls back and raises IntegrityViolationError

Design Decisions:
    - Relationship targets are read from the mapper, not from the site registry,
      so related models need not be registered themselves
    - populate_existing on reload: the identity map copy is refreshed after writes
"""

import logging
from typing import Any

from sqlalchemy import func, inspect, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import RelationshipDirection, selectinload

from entity_admin.admin.metadata import metadata_for
from entity_admin.core.display import display_entity
from entity_admin.core.entity_metadata import EntityMetadata
from entity_admin.core.errors import (
    EntityNotFoundError, ErrorContext, IntegrityViolationError, ValueCleaningError,
)
from entity_admin.core.pagination import PaginationOptions

logger = logging.getLogger(__name__)

# Upper bound on rows offered in a single <select>
CHOICES_LIMIT = 500


class EntityRepository:
    """CRUD over one mapped model within a request-scoped AsyncSession."""

    def __init__(self, db: AsyncSession, model: type, metadata: EntityMetadata):
        self.db = db
        self.model = model
        self.metadata = metadata
        self._mapper = inspect(model)

    @property
    def _primary_key_column(self):
        return getattr(self.model, self.metadata.primary_key.name)

    def _relation_loaders(self) -> list:
        return [
            selectinload(getattr(self.model, relation.name))
            for relation in self.metadata.relations
        ]

    def _relation_target(self, relation_name: str) -> type:
        return self._mapper.relationships[relation_name].mapper.class_

    def _foreign_key_target(self, column_name: str) -> type | None:
        for rel in self._mapper.relationships:
            if rel.direction is not RelationshipDirection.MANYTOONE:
                continue
            if any(c.key == column_name for c in rel.local_columns):
                return rel.mapper.class_
        return None

    # ─── Reads ───────────────────────────────────────────────────

    async def find_and_count(self, options: PaginationOptions) -> tuple[list[Any], int]:
        """One page of entities plus the total row count."""
        count = await self.db.scalar(
            select(func.count()).select_from(self.model),
        )
        result = await self.db.execute(
            select(self.model)
            .order_by(self._primary_key_column)
            .offset(options.offset)
            .limit(options.limit),
        )
        return list(result.scalars().all()), count or 0

    async def find_one_or_fail(self, primary_key: Any) -> Any:
        """Entity with all relations loaded, or EntityNotFoundError."""
        result = await self.db.execute(
            select(self.model)
            .where(self._primary_key_column == primary_key)
            .options(*self._relation_loaders())
            .execution_options(populate_existing=True),
        )
        entity = result.scalar_one_or_none()
        if entity is None:
            raise EntityNotFoundError(self.metadata.name, primary_key)
        return entity

    async def relation_choices(self) -> dict[str, list[tuple[Any, str]]]:
        """(value, label) options for FK selects and many-to-many multi-selects."""
        choices: dict[str, list[tuple[Any, str]]] = {}
        for column in self.metadata.columns:
            if column.foreign_key_target is None:
                continue
            target = self._foreign_key_target(column.name)
            if target is not None:
                choices[column.name] = await self._options_for(target)
        for relation in self.metadata.many_to_many:
            choices[relation.name] = await self._options_for(
                self._relation_target(relation.name),
            )
        return choices

    async def _options_for(self, target: type) -> list[tuple[Any, str]]:
        target_metadata = metadata_for(target)
        result = await self.db.execute(
            select(target)
            .order_by(getattr(target, target_metadata.primary_key.name))
            .limit(CHOICES_LIMIT),
        )
        return [
            (target_metadata.primary_key_of(row), display_entity(row, target_metadata))
            for row in result.scalars().all()
        ]

    # ─── Writes ──────────────────────────────────────────────────

    async def create(self, values: dict[str, Any]) -> Any:
        """Insert a new entity from cleaned values; returns it reloaded."""
        column_values, relation_values = self._split(values)
        entity = self.model(**column_values)
        for name, ids in relation_values.items():
            setattr(entity, name, await self._resolve_targets(name, ids))
        self.db.add(entity)
        await self._commit()
        primary_key = self.metadata.primary_key_of(entity)
        logger.info(
            f"Created {self.metadata.name} {primary_key}",
            extra={"entity": self.metadata.name, "primary_key": str(primary_key)},
        )
        return await self.find_one_or_fail(primary_key)

    async def update(self, entity: Any, values: dict[str, Any]) -> Any:
        """Merge cleaned values onto a loaded entity; returns it reloaded."""
        column_values, relation_values = self._split(values)
        targets = {
            name: await self._resolve_targets(name, ids)
            for name, ids in relation_values.items()
        }
        for name, value in column_values.items():
            setattr(entity, name, value)
        for name, related in targets.items():
            setattr(entity, name, related)
        await self._commit()
        primary_key = self.metadata.primary_key_of(entity)
        logger.info(
            f"Updated {self.metadata.name} {primary_key}",
            extra={"entity": self.metadata.name, "primary_key": str(primary_key)},
        )
        return await self.find_one_or_fail(primary_key)

    async def remove(self, entity: Any) -> None:
        primary_key = self.metadata.primary_key_of(entity)
        await self.db.delete(entity)
        await self._commit()
        logger.info(
            f"Deleted {self.metadata.name} {primary_key}",
            extra={"entity": self.metadata.name, "primary_key": str(primary_key)},
        )

    def _split(self, values: dict[str, Any]) -> tuple[dict[str, Any], dict[str, list]]:
        """Separate column values from many-to-many id lists."""
        relation_names = {r.name for r in self.metadata.many_to_many}
        column_values = {k: v for k, v in values.items() if k not in relation_names}
        relation_values = {k: v for k, v in values.items() if k in relation_names}
        return column_values, relation_values

    async def _resolve_targets(self, relation_name: str, ids: list) -> list[Any]:
        if not ids:
            return []
        target = self._relation_target(relation_name)
        target_metadata = metadata_for(target)
        result = await self.db.execute(
            select(target).where(
                getattr(target, target_metadata.primary_key.name).in_(ids),
            ),
        )
        found = list(result.scalars().all())
        if len(found) != len(set(ids)):
            raise ValueCleaningError(
                {relation_name: "Select a valid choice. One or more selected items do not exist."},
                ErrorContext(entity=self.metadata.name),
            )
        return found

    async def _commit(self) -> None:
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning(
                f"Integrity error saving {self.metadata.name}: {e.orig}",
                extra={"entity": self.metadata.name},
            )
            raise IntegrityViolationError(self.metadata.name)
