"""Template resolution with most-specific-first fallback."""

from functools import lru_cache
from pathlib import Path

import jinja2

from konform.config import get_settings

PACKAGE_TEMPLATE_DIR = Path(__file__).parent / "templates"


class Template:
    """Template resolver with fallback support.

    Resolves templates in order of specificity:
    - Template("element", "select") → tries element-select.html
    - Template("element", "select", "signup") → tries element-select-signup.html → element-select.html

    Template Directory Hierarchy:
    Templates are searched in the following order:
    1. template_dirs from settings
    2. ./templates/ (working directory) - User overrides
    3. konform/templates/ (package directory) - Default templates

    Users can override any element by creating a file with the same name in
    their project's ./templates/ directory, or for a single form by adding
    the form name, e.g. element-text-signup.html.
    """

    def __init__(self, template_type: str, *slugs: str):
        self.template_type = template_type
        self.slugs = slugs

    def _candidates(self) -> list[str]:
        """Build list of template names to try, from most to least specific."""
        candidates = []
        if self.slugs:
            for i in range(len(self.slugs), 0, -1):
                slug_part = "-".join(self.slugs[:i])
                candidates.append(f"{self.template_type}-{slug_part}.html")
        candidates.append(f"{self.template_type}.html")
        return candidates

    def try_render(self, template_engine, **context) -> str | None:
        """Attempt to render using the template hierarchy.

        Iterates candidates from most to least specific, using the template
        engine to render. Returns the rendered string, or None if no matching
        template exists.
        """
        for candidate in self._candidates():
            try:
                template = template_engine.get_template(candidate)
            except jinja2.TemplateNotFound:
                continue
            return template.render(**context)
        return None

    def __repr__(self) -> str:
        return f"Template({self.template_type!r}, {', '.join(repr(s) for s in self.slugs)})"


def get_template_directories() -> list[Path]:
    settings = get_settings()
    return [*settings.template_dirs, Path.cwd() / "templates", PACKAGE_TEMPLATE_DIR]


@lru_cache
def get_environment() -> jinja2.Environment:
    """Jinja environment over the template directory hierarchy, autoescaping on."""
    env = jinja2.Environment(
        loader=jinja2.FileSystemLoader([str(d) for d in get_template_directories()]),
        autoescape=True,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=False,
    )
    env.globals["option_attr"] = option_attr
    return env


def option_attr(item, key: str):
    """Read ``key`` from a select option, as a mapping key or an attribute."""
    try:
        return item[key]
    except (KeyError, TypeError, IndexError):
        return getattr(item, key, "")
