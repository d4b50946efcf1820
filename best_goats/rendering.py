"""Template registry shared by every request.

The registry is built once when the application is created and never mutated
afterwards, so handlers receive it by reference instead of reaching for a
lazily-initialized global.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from jinja2 import (
    Environment,
    FileSystemLoader,
    StrictUndefined,
    TemplateError,
    select_autoescape,
)
from starlette.responses import HTMLResponse

from best_goats.exceptions import RenderError
from best_goats.schemas.error import ErrorPage
from best_goats.schemas.pages import CatalogPage
from best_goats.settings import DEFAULT_SITE_TITLE, AppSettings

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"
ERROR_TEMPLATE = "error.html"


@dataclass(frozen=True)
class PageRenderer:
    """Renders page contexts through the Jinja2 templates."""

    environment: Environment
    site_title: str = DEFAULT_SITE_TITLE

    @classmethod
    def from_settings(
        cls, settings: AppSettings, template_dir: Path | None = None
    ) -> PageRenderer:
        environment = Environment(
            loader=FileSystemLoader(str(template_dir or TEMPLATE_DIR)),
            autoescape=select_autoescape(["html"]),
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        return cls(environment=environment, site_title=settings.site_title)

    def _render(self, template_name: str, context: dict[str, Any]) -> str:
        try:
            template = self.environment.get_template(template_name)
            return template.render(**context)
        except TemplateError as exc:
            logger.error("Failed to render template %s: %s", template_name, exc)
            raise RenderError() from exc

    def render_page(self, page: CatalogPage) -> str:
        return self._render(page.template_name, page.model_dump())

    def render_error(self, page: ErrorPage) -> str:
        return self._render(ERROR_TEMPLATE, page.model_dump())

    def page_response(self, page: CatalogPage) -> HTMLResponse:
        return HTMLResponse(self.render_page(page))


__all__ = ["ERROR_TEMPLATE", "PageRenderer", "TEMPLATE_DIR"]
