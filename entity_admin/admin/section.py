"""Admin Section: a named grouping of administered models.

Invariants:
    - Entity names are unique within a section (model class name)
    - entities preserves registration order

Design Decisions:
    - Metadata built eagerly at registration so a bad model fails at startup,
      not on first request
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from entity_admin.admin.metadata import metadata_for
from entity_admin.admin.repository import EntityRepository
from entity_admin.core.domain_types import EntityName, SectionName
from entity_admin.core.entity_metadata import EntityMetadata
from entity_admin.core.errors import DuplicateRegistrationError, EntityNotRegisteredError

logger = logging.getLogger(__name__)


class AdminSection:
    """Wraps entity/repository pairs under one section name."""

    def __init__(self, name: SectionName):
        self.name = name
        self._models: dict[EntityName, type] = {}

    def __repr__(self) -> str:
        return f"AdminSection({self.name!r}, entities={list(self._models)})"

    def register(self, model: type) -> EntityMetadata:
        metadata = metadata_for(model)
        if metadata.name in self._models:
            raise DuplicateRegistrationError(self.name, metadata.name)
        self._models[metadata.name] = model
        logger.info(
            f"Registered {metadata.name} in section {self.name}",
            extra={"section": self.name, "entity": metadata.name},
        )
        return metadata

    @property
    def entities(self) -> list[EntityMetadata]:
        return [metadata_for(model) for model in self._models.values()]

    def get_entity(self, entity_name: EntityName) -> type:
        model = self._models.get(entity_name)
        if model is None:
            raise EntityNotRegisteredError(self.name, entity_name)
        return model

    def get_metadata(self, entity_name: EntityName) -> EntityMetadata:
        return metadata_for(self.get_entity(entity_name))

    def get_repository(self, entity_name: EntityName, db: AsyncSession) -> EntityRepository:
        model = self.get_entity(entity_name)
        return EntityRepository(db, model, metadata_for(model))
