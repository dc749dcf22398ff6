"""Admin View Helpers: model resolution, form decoding and shared dependencies.

Invariants:
    - get_admin_models resolves only as far as the query provides
      (section -> repository/metadata -> entity)
    - Lookup failures raise 404-level AdminErrors; they are never swallowed here
    - Form decoding keeps every value for many-to-many keys, the last value otherwise

Design Decisions:
    - Site, settings and templates live on app.state and are injected with
      Depends, so tests can build apps around their own site
"""

from dataclasses import dataclass
from typing import Any

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import FormData

from entity_admin.admin.section import AdminSection
from entity_admin.admin.site import AdminSite
from entity_admin.config import Settings
from entity_admin.core.clean_values import coerce_primary_key
from entity_admin.core.domain_types import EntityName, SectionName
from entity_admin.core.entity_metadata import EntityMetadata
from entity_admin.core.errors import AdminError, ErrorContext
from entity_admin.core.repository_protocols import EntityRepositoryLike
from entity_admin.infrastructure.templates import AdminTemplates
from entity_admin.schemas.admin import AdminModelsQuery


@dataclass
class AdminModelsResult:
    section: AdminSection | None = None
    repository: EntityRepositoryLike | None = None
    metadata: EntityMetadata | None = None
    entity: Any = None


def get_admin_site(request: Request) -> AdminSite:
    return request.app.state.admin_site


def get_admin_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_templates(request: Request) -> AdminTemplates:
    return request.app.state.templates


async def get_admin_models(
    site: AdminSite, db: AsyncSession, query: AdminModelsQuery,
) -> AdminModelsResult:
    """Resolve section, repository, metadata and entity from path parameters."""
    result = AdminModelsResult()
    if not query.section_name:
        return result
    try:
        result.section = site.get_section(SectionName(query.section_name))
        if query.entity_name:
            result.repository = result.section.get_repository(EntityName(query.entity_name), db)
            result.metadata = result.repository.metadata
            if query.primary_key:
                primary_key = coerce_primary_key(query.primary_key, result.metadata)
                result.entity = await result.repository.find_one_or_fail(primary_key)
    except AdminError as e:
        e.context.section = query.section_name
        e.context.entity = e.context.entity or query.entity_name
        e.context.primary_key = e.context.primary_key or query.primary_key
        raise
    return result


def form_to_values(form: FormData, metadata: EntityMetadata) -> dict[str, Any]:
    """Flatten submitted form data into the shape clean_values expects."""
    many_to_many = {r.name for r in metadata.many_to_many}
    values: dict[str, Any] = {}
    for key in form.keys():
        if key in many_to_many:
            values[key] = [v for v in form.getlist(key) if isinstance(v, str)]
        else:
            value = form.getlist(key)[-1]
            if isinstance(value, str):
                values[key] = value
    return values


def error_context(query: AdminModelsQuery) -> ErrorContext:
    return ErrorContext(
        section=query.section_name,
        entity=query.entity_name,
        primary_key=query.primary_key,
    )
