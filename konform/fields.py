"""Field definitions and rule specs."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

from pydantic import BaseModel, ConfigDict, Field


class FieldType(str, Enum):
    TEXT = "text"
    PASSWORD = "password"
    TEXTAREA = "textarea"
    SELECT = "select"
    SUBMIT = "submit"


class FieldDefinition(BaseModel):
    """Options for a single form field.

    Nothing here is checked. Option types, a ``select`` without an
    ``option_source`` and a type with no element only fail when the form is
    rendered.

    Usage:
        form.add_field("colour", label="Favourite colour", type="select",
                       option_source="colours", rules=["not_empty"])
    """

    model_config = ConfigDict(extra="allow", arbitrary_types_allowed=True, populate_by_name=True)

    # Options are stored as given; Form.element checks their types
    label: Any = None
    type: Any = FieldType.TEXT.value
    rules: Any = []
    required: Any = False
    # CSS classes; "class" is accepted as an alias in mappings
    class_: Any = Field(default="", alias="class")

    # text / password
    maxlength: Any = None

    # textarea
    cols: Any = None
    rows: Any = None

    # select
    option_source: Any = None
    option_value: Any = None
    option_label: Any = None
    placeholder: Any = None

    def label_for(self, field_name: str) -> str:
        return self.label if self.label is not None else field_name


@dataclass(frozen=True)
class NamedRule:
    """A rule looked up by name in the global rule table at check time."""

    name: str
    params: tuple = ()

    @property
    def target(self) -> str:
        return self.name


@dataclass(frozen=True)
class InstanceMethodRule:
    """A rule bound to a method of the form instance."""

    name: str
    callback: Callable = field(compare=False)
    params: tuple = ()

    @property
    def target(self) -> Callable:
        return self.callback


def normalize_rule(spec: Any) -> tuple[Any, tuple]:
    """Split a rule spec into ``(identifier, params)``.

    A list or tuple takes its first element as the identifier and the rest as
    the parameters. Anything else is the identifier on its own.
    """
    if isinstance(spec, (list, tuple)):
        if not spec:
            raise ValueError("Empty rule spec")
        return spec[0], tuple(spec[1:])
    return spec, ()
