"""Boundary Protocols: contracts between the routes and the persistence shell.

Invariants:
    - Routes receive an AsyncSession only to hand it to AdminSection.get_repository;
      every read and write goes through EntityRepositoryLike
    - All IO operations are async

Design Decisions:
    - Protocol over ABC: structural subtyping lets tests pass plain fakes
"""

from typing import Any, Protocol

from entity_admin.core.entity_metadata import EntityMetadata
from entity_admin.core.pagination import PaginationOptions


class EntityRepositoryLike(Protocol):
    """Persistence contract for one administered model."""
    metadata: EntityMetadata

    async def find_and_count(self, options: PaginationOptions) -> tuple[list[Any], int]: ...
    async def find_one_or_fail(self, primary_key: Any) -> Any: ...
    async def create(self, values: dict[str, Any]) -> Any: ...
    async def update(self, entity: Any, values: dict[str, Any]) -> Any: ...
    async def remove(self, entity: Any) -> None: ...
    async def relation_choices(self) -> dict[str, list[tuple[Any, str]]]: ...
