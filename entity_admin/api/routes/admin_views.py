"""Admin Views: list, add, change and delete pages for every registered entity.

Invariants:
    - Every view resolves its models through get_admin_models before touching data
    - Change lists show results_per_page rows: offset = results_per_page * (page - 1)
    - Successful add/delete answer 303 See Other (POST -> GET)
    - Cleaning errors re-render the form with 400; integrity errors with 409
    - Successful change re-renders the change page with the reloaded entity

Design Decisions:
    - Router has no prefix of its own; main.py mounts it at settings.admin_prefix
    - Value cleaning goes through AdminSite.clean_values so host sites can override it
"""

import logging

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from entity_admin.admin.site import AdminSite
from entity_admin.api.routes.admin_helpers import (
    AdminModelsResult,
    error_context,
    form_to_values,
    get_admin_models,
    get_admin_settings,
    get_admin_site,
    get_templates,
)
from entity_admin.config import Settings
from entity_admin.core.errors import IntegrityViolationError, ValueCleaningError
from entity_admin.core.pagination import get_pagination_options, page_count
from entity_admin.infrastructure.database import get_db
from entity_admin.infrastructure.templates import AdminTemplates
from entity_admin.schemas.admin import AdminModelsQuery

logger = logging.getLogger(__name__)
router = APIRouter(tags=["admin"])


@router.get("", response_class=HTMLResponse)
@router.get("/", response_class=HTMLResponse, include_in_schema=False)
async def index(
    request: Request,
    site: AdminSite = Depends(get_admin_site),
    templates: AdminTemplates = Depends(get_templates),
):
    """List sections and their entities."""
    sections = site.get_section_list()
    return templates.render(request, "index.html", {"sections": sections})


@router.get("/{section_name}/{entity_name}", response_class=HTMLResponse)
async def change_list(
    request: Request,
    section_name: str,
    entity_name: str,
    page: int = Query(1, ge=1),
    db: AsyncSession = Depends(get_db),
    site: AdminSite = Depends(get_admin_site),
    settings: Settings = Depends(get_admin_settings),
    templates: AdminTemplates = Depends(get_templates),
):
    """Paginated list of one entity."""
    query = AdminModelsQuery(section_name=section_name, entity_name=entity_name)
    models = await get_admin_models(site, db, query)
    results_per_page = settings.results_per_page
    entities, count = await models.repository.find_and_count(
        get_pagination_options(page, results_per_page),
    )
    return templates.render(request, "changelist.html", {
        "section": models.section,
        "entities": entities,
        "count": count,
        "metadata": models.metadata,
        "page": page,
        "results_per_page": results_per_page,
        "page_count": page_count(count, results_per_page),
    })


@router.get("/{section_name}/{entity_name}/add", response_class=HTMLResponse)
async def add(
    request: Request,
    section_name: str,
    entity_name: str,
    db: AsyncSession = Depends(get_db),
    site: AdminSite = Depends(get_admin_site),
    templates: AdminTemplates = Depends(get_templates),
):
    """Empty creation form."""
    query = AdminModelsQuery(section_name=section_name, entity_name=entity_name)
    models = await get_admin_models(site, db, query)
    return await _render_form(request, templates, "add.html", models)


@router.post("/{section_name}/{entity_name}/add")
async def create(
    request: Request,
    section_name: str,
    entity_name: str,
    db: AsyncSession = Depends(get_db),
    site: AdminSite = Depends(get_admin_site),
    templates: AdminTemplates = Depends(get_templates),
):
    """Clean and save a new entity, then redirect to its change page."""
    query = AdminModelsQuery(section_name=section_name, entity_name=entity_name)
    models = await get_admin_models(site, db, query)
    values = form_to_values(await request.form(), models.metadata)
    try:
        cleaned = await site.clean_values(values, models.metadata)
        created = await models.repository.create(cleaned)
    except (ValueCleaningError, IntegrityViolationError) as e:
        _log_rejected(e, query)
        return await _render_form(
            request, templates, "add.html", models,
            values=values, error=e, status_code=e.http_status,
        )
    return RedirectResponse(
        templates.urls.change(models.section.name, models.metadata, created),
        status_code=status.HTTP_303_SEE_OTHER,
    )


@router.get(
    "/{section_name}/{entity_name}/{primary_key}/change",
    response_class=HTMLResponse,
)
async def change(
    request: Request,
    section_name: str,
    entity_name: str,
    primary_key: str,
    db: AsyncSession = Depends(get_db),
    site: AdminSite = Depends(get_admin_site),
    templates: AdminTemplates = Depends(get_templates),
):
    """Edit form for one entity."""
    query = AdminModelsQuery(
        section_name=section_name, entity_name=entity_name, primary_key=primary_key,
    )
    models = await get_admin_models(site, db, query)
    return await _render_form(request, templates, "change.html", models)


@router.post(
    "/{section_name}/{entity_name}/{primary_key}/change",
    response_class=HTMLResponse,
)
async def update(
    request: Request,
    section_name: str,
    entity_name: str,
    primary_key: str,
    db: AsyncSession = Depends(get_db),
    site: AdminSite = Depends(get_admin_site),
    templates: AdminTemplates = Depends(get_templates),
):
    """Clean and merge submitted values onto the entity, then re-render it."""
    query = AdminModelsQuery(
        section_name=section_name, entity_name=entity_name, primary_key=primary_key,
    )
    models = await get_admin_models(site, db, query)
    values = form_to_values(await request.form(), models.metadata)
    try:
        updated_values = await site.clean_values(values, models.metadata, partial=True)
        models.entity = await models.repository.update(models.entity, updated_values)
    except (ValueCleaningError, IntegrityViolationError) as e:
        _log_rejected(e, query)
        if isinstance(e, IntegrityViolationError):
            # Rolled back: reload so the form shows persisted state
            models = await get_admin_models(site, db, query)
        return await _render_form(
            request, templates, "change.html", models,
            values=values, error=e, status_code=e.http_status,
        )
    return await _render_form(
        request, templates, "change.html", models, saved=True,
    )


@router.post("/{section_name}/{entity_name}/{primary_key}/delete")
async def delete(
    section_name: str,
    entity_name: str,
    primary_key: str,
    db: AsyncSession = Depends(get_db),
    site: AdminSite = Depends(get_admin_site),
    templates: AdminTemplates = Depends(get_templates),
):
    """Delete one entity and return to the change list."""
    query = AdminModelsQuery(
        section_name=section_name, entity_name=entity_name, primary_key=primary_key,
    )
    models = await get_admin_models(site, db, query)
    await models.repository.remove(models.entity)
    return RedirectResponse(
        templates.urls.change_list(models.section.name, models.metadata),
        status_code=status.HTTP_303_SEE_OTHER,
    )


async def _render_form(
    request: Request,
    templates: AdminTemplates,
    template_name: str,
    models: AdminModelsResult,
    values: dict | None = None,
    error: ValueCleaningError | IntegrityViolationError | None = None,
    saved: bool = False,
    status_code: int = status.HTTP_200_OK,
) -> HTMLResponse:
    """Render add.html / change.html with select options and any errors."""
    choices = await models.repository.relation_choices()
    field_errors = error.field_errors if isinstance(error, ValueCleaningError) else {}
    return templates.render(request, template_name, {
        "section": models.section,
        "metadata": models.metadata,
        "entity": models.entity,
        "choices": choices,
        "submitted": values,
        "field_errors": field_errors,
        "form_error": error.message if error else None,
        "saved": saved,
    }, status_code=status_code)


def _log_rejected(error: ValueCleaningError | IntegrityViolationError, query: AdminModelsQuery) -> None:
    ctx = error_context(query)
    logger.warning(
        f"Rejected submission: {error.message}",
        extra={
            "error_code": error.code,
            "section": ctx.section,
            "entity": ctx.entity,
            "primary_key": ctx.primary_key,
        },
    )
