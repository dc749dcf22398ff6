"""Admin Templates: Jinja2 environment and rendering for admin pages.

Invariants:
    - Host template directories are searched before the packaged templates
    - Autoescaping is on for .html templates
    - Every render receives `request`, `urls` and `site_title` in its context

Design Decisions:
    - Jinja2Templates wraps a pre-built Environment so loaders and filters are
      configured in one place
"""

from pathlib import Path
from typing import Any

from fastapi import Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from jinja2 import ChoiceLoader, Environment, FileSystemLoader, select_autoescape

from entity_admin.core.display import display_entity, format_value, input_value
from entity_admin.core.pagination import page_window
from entity_admin.core.urls import AdminUrls

PACKAGE_TEMPLATES = Path(__file__).resolve().parent.parent / "templates"


def build_environment(template_dirs: list[str] | None = None) -> Environment:
    loaders = [FileSystemLoader(d) for d in template_dirs or []]
    loaders.append(FileSystemLoader(str(PACKAGE_TEMPLATES)))
    env = Environment(
        loader=ChoiceLoader(loaders),
        autoescape=select_autoescape(["html"]),
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["format_value"] = format_value
    env.globals["display_entity"] = display_entity
    env.globals["input_value"] = input_value
    env.globals["page_window"] = page_window
    return env


class AdminTemplates:
    """Renders admin pages with shared globals."""

    def __init__(
        self,
        urls: AdminUrls,
        site_title: str = "Administration",
        template_dirs: list[str] | None = None,
    ):
        self.urls = urls
        self.site_title = site_title
        self._templates = Jinja2Templates(env=build_environment(template_dirs))

    @property
    def env(self) -> Environment:
        return self._templates.env

    def render(
        self,
        request: Request,
        name: str,
        context: dict[str, Any] | None = None,
        status_code: int = 200,
    ) -> HTMLResponse:
        full_context = {"urls": self.urls, "site_title": self.site_title}
        full_context.update(context or {})
        return self._templates.TemplateResponse(
            request, name, full_context, status_code=status_code,
        )
