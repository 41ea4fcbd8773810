"""Per-type field elements rendered from Jinja templates."""

from __future__ import annotations

import logging
from typing import Any

from markupsafe import Markup

from konform.exceptions import ConfigurationError
from konform.template import Template, get_environment

logger = logging.getLogger(__name__)


class Element:
    """One rendered field: a bag of properties plus the template for its type.

    Properties are set as attributes or keywords and passed to the template
    ``element-<type>.html`` as its context:

        element = Element("text", name="email", label="Email")
        element.maxlength = 120
        element.render()
    """

    def __init__(self, element_type: str, form_name: str | None = None, **properties: Any):
        # Bypass __setattr__ so these stay out of the template context
        object.__setattr__(self, "element_type", element_type)
        object.__setattr__(self, "form_name", form_name)
        object.__setattr__(self, "properties", dict(properties))

    def __setattr__(self, name: str, value: Any) -> None:
        self.properties[name] = value

    def __getattr__(self, name: str) -> Any:
        try:
            return self.__dict__["properties"][name]
        except KeyError:
            raise AttributeError(name) from None

    def render(self) -> Markup:
        slugs = (self.element_type, self.form_name) if self.form_name else (self.element_type,)
        template = Template("element", *slugs)
        rendered = template.try_render(get_environment(), **self.properties)
        if rendered is None:
            raise ConfigurationError(f"No template for element type: {self.element_type}")
        logger.debug("Rendered %r for field %s", template, self.properties.get("name"))
        return Markup(rendered)

    def __html__(self) -> str:
        return str(self.render())

    def __repr__(self) -> str:
        return f"Element({self.element_type!r}, name={self.properties.get('name')!r})"
