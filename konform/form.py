"""Form base class: field registry, data binding, validation and rendering."""

from __future__ import annotations

import logging
import re
from typing import Any, Callable, ClassVar, Iterator, Mapping

from markupsafe import Markup, escape

from konform.config import get_settings
from konform.elements import Element
from konform.exceptions import ConfigurationError
from konform.fields import FieldDefinition, FieldType, InstanceMethodRule, NamedRule, normalize_rule
from konform.hooks import FORM_INVALID, FORM_RENDERED, FORM_VALIDATED, hooks
from konform.validation import Validation

logger = logging.getLogger(__name__)

_form_registry: dict[str, type[Form]] = {}

RULE_MARKER = "_konform_rule"
OPTION_SOURCE_MARKER = "_konform_option_source"


def camel_to_kebab(name: str) -> str:
    """Convert CamelCase to kebab-case. ContactUs -> contact-us"""
    return re.sub(r"(?<=[a-z0-9])(?=[A-Z])", "-", name).lower()


def derive_form_name(cls: type) -> str:
    """Derive a form name from a class name, stripping 'Form' suffix."""
    name = cls.__name__
    if name.endswith("Form") and name != "Form":
        name = name[:-4]
    return camel_to_kebab(name)


def derive_message_namespace(cls: type) -> str:
    """Default message source for a form class. Konform.Contact -> konform/contact

    Classes defined inside a function drop the ``func.<locals>`` prefix.
    """
    qualname = cls.__qualname__.rsplit("<locals>.", 1)[-1]
    return qualname.lower().replace(".", "/")


def check_option(field_name: str, option: str, value: Any, *types: type) -> Any:
    """Return an option value if it is None or one of ``types``; bool never counts as int."""
    if value is None:
        return value
    if (isinstance(value, bool) and bool not in types) or not isinstance(value, types):
        raise ConfigurationError(f"Invalid {option} for {field_name}: {value!r}")
    return value


def get_form(name: str) -> type[Form]:
    """Look up a registered form class by name. Raises LookupError if not found."""
    try:
        return _form_registry[name]
    except KeyError:
        available = ", ".join(sorted(_form_registry)) or "(none)"
        raise LookupError(f"No form named '{name}'. Registered: {available}")


def rule(name: str | None = None) -> Callable[[Callable], Callable]:
    """Mark a form method as a validation rule usable in field ``rules``.

    Usage:
        class SignupForm(Form):
            def setup(self):
                self.add_field("username", rules=["not_empty", "username_available"])

            @rule()
            def username_available(self, value):
                return value not in self.taken
    """

    def decorator(func: Callable) -> Callable:
        setattr(func, RULE_MARKER, name or func.__name__)
        return func

    return decorator


def option_source(name: str | None = None) -> Callable[[Callable], Callable]:
    """Mark a form method as a source of ``select`` options.

    The method takes no arguments and returns a sequence of options, each a
    mapping or object carrying the field's ``option_value``/``option_label`` keys.
    """

    def decorator(func: Callable) -> Callable:
        setattr(func, OPTION_SOURCE_MARKER, name or func.__name__)
        return func

    return decorator


class Form:
    """Base class for declarative forms.

    Subclasses declare their fields in ``setup()``; the data passed to the
    constructor is filtered down to those fields.

    Usage:
        class ContactForm(Form, form_name="contact"):
            action = "/contact"

            def setup(self):
                self.add_field("name", label="Your name", rules=["not_empty"])
                self.add_field("message", type="textarea", rules=[("min_length", 10)])
                self.add_field("send", type="submit", label="Send")

        form = ContactForm(submitted)
        if not form.validate():
            return form.render()   # errors shown inline
    """

    form_name: ClassVar[str] = "form"
    message_namespace: ClassVar[str | None] = None

    # Per-instance overridable through the constructor
    method: str | None = None
    action: str = ""
    attributes: dict[str, str] = {}

    # name -> method name, collected from @rule / @option_source
    _rule_table: ClassVar[dict[str, str]] = {}
    _option_source_table: ClassVar[dict[str, str]] = {}

    def __init_subclass__(cls, form_name: str | None = None, **kwargs):
        super().__init_subclass__(**kwargs)

        cls.form_name = form_name or derive_form_name(cls)

        rules: dict[str, str] = {}
        sources: dict[str, str] = {}
        for klass in reversed(cls.__mro__):
            for attr, value in vars(klass).items():
                rule_name = getattr(value, RULE_MARKER, None)
                if rule_name:
                    rules[rule_name] = attr
                source_name = getattr(value, OPTION_SOURCE_MARKER, None)
                if source_name:
                    sources[source_name] = attr
        cls._rule_table = rules
        cls._option_source_table = sources

        existing = _form_registry.get(cls.form_name)
        if existing is not None and existing is not cls:
            logger.warning(
                "Form name %s re-registered by %s.%s, replacing %s.%s",
                cls.form_name, cls.__module__, cls.__qualname__, existing.__module__, existing.__qualname__,
            )
        _form_registry[cls.form_name] = cls

    def __init__(
        self,
        data: Mapping[str, Any] | None = None,
        *,
        action: str | None = None,
        method: str | None = None,
        attributes: dict[str, str] | None = None,
    ):
        self.method = method or type(self).method or get_settings().default_method
        self.action = action if action is not None else type(self).action
        self.attributes = dict(attributes if attributes is not None else type(self).attributes)

        self.fields: dict[str, FieldDefinition] = {}
        self.errors: dict[str, str] = {}
        self._data: dict[str, Any] = {}

        # Let subclasses declare their fields before data is bound
        self.setup()

        self.bind_data(data if data is not None else {})

    def setup(self) -> None:
        """Declare fields with add_field(). Called once from the constructor."""

    # -- Field registry --

    def add_field(self, name: str, definition: FieldDefinition | Mapping[str, Any] | None = None, **options) -> Form:
        """Add or replace a field. Replacing keeps the field's original position.

        Accepts a FieldDefinition, a mapping of options, or keyword options.
        Chainable.
        """
        if isinstance(definition, FieldDefinition):
            field = definition.model_copy(update=options) if options else definition
        else:
            field = FieldDefinition.model_validate({**(definition or {}), **options})

        self.fields[name] = field
        self._data.setdefault(name, None)
        return self

    def __contains__(self, name: str) -> bool:
        return name in self.fields

    def __iter__(self) -> Iterator[str]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    # -- Data binding --

    def bind_data(self, data: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Get or set the form data.

        Setting keeps only the keys that are fields; fields missing from
        ``data`` are set to None. Called without data, returns the current data.
        """
        if data is not None:
            dropped = [str(key) for key in data if key not in self.fields]
            if dropped:
                logger.debug("Form %s ignoring unexpected keys: %s", self.form_name, ", ".join(sorted(dropped)))
            self._data = {name: data.get(name) for name in self.fields}

        return dict(self._data)

    @property
    def data(self) -> dict[str, Any]:
        return dict(self._data)

    def value(self, name: str) -> Any:
        return self._data.get(name)

    def error(self, name: str) -> str | None:
        return self.errors.get(name)

    # -- Validation --

    def validate(self) -> bool:
        """Check the bound data against every field's rules.

        Returns True if valid. On failure, self.errors maps field names to messages.
        """
        validation = Validation(self._data)

        for field_name, field in self.fields.items():
            label = str(field.label_for(field_name))
            if not isinstance(field.rules, (list, tuple)):
                raise ConfigurationError(f"Invalid rules for {field_name}: {field.rules!r}")
            for spec in field.rules:
                resolved = self.resolve_rule(spec)
                validation.rule(field_name, resolved.target, resolved.params, name=resolved.name)
                validation.label(field_name, label)

        if validation.check():
            self.errors = {}
            hooks.do_action(FORM_VALIDATED, self)
            hooks.do_action(f"form_{self.form_name}_validated", self)
            return True

        self.errors = validation.errors(self.error_message_source())
        logger.debug("Form %s failed validation: %s", self.form_name, ", ".join(self.errors))
        hooks.do_action(FORM_INVALID, self, self.errors)
        return False

    def resolve_rule(self, spec: Any) -> NamedRule | InstanceMethodRule:
        """Resolve a rule spec to a global rule name or a method of this form."""
        identifier, params = normalize_rule(spec)

        if callable(identifier):
            return InstanceMethodRule(getattr(identifier, "__name__", repr(identifier)), identifier, params)

        method_name = self._rule_table.get(identifier)
        if method_name is not None:
            return InstanceMethodRule(identifier, getattr(self, method_name), params)

        return NamedRule(identifier, params)

    def error_message_source(self) -> str:
        """Message source for error text, read fresh on every validate()."""
        return self.message_namespace or derive_message_namespace(type(self))

    # -- Options --

    def get_option_source(self, name: str) -> list:
        """Call the option source registered as ``name`` and return its options."""
        method_name = self._option_source_table.get(name)
        if method_name is None:
            raise ConfigurationError(f"No option source named '{name}' on {type(self).__name__}")
        return list(getattr(self, method_name)())

    # -- Rendering --

    def render(self) -> Markup:
        """Render the whole form, with errors from the last validate() inline.

        Raises ConfigurationError for an unsupported field type, an option
        of the wrong type or a select
        without a usable option_source; nothing is returned in that case.
        """
        html = f'<form method="{escape(self.method)}" action="{escape(self.action)}"'
        for name, value in self.attributes.items():
            html += f' {name}="{escape(value)}"'
        html += ">\n"

        for field_name in self.fields:
            html += str(self.element(field_name).render()) + "\n"

        html += "</form>\n"
        return Markup(hooks.apply_filters(FORM_RENDERED, html, self))

    def element(self, field_name: str) -> Element:
        """Build the element for one field with its value, error and type options."""
        field = self.fields[field_name]
        field_type = field.type or FieldType.TEXT.value
        settings = get_settings()

        element = Element(field_type, self.form_name)
        element.name = field_name
        check_option(field_name, "label", field.label, str)
        element.label = field.label_for(field_name)
        element.required = bool(check_option(field_name, "required", field.required, bool))
        value = self._data.get(field_name)
        element.value = "" if value is None else value
        element.error = None

        css_class = check_option(field_name, "class", field.class_, str) or ""
        if field_name in self.errors:
            css_class += " error"
            element.error = self.errors[field_name]
        element.css_class = css_class.strip()

        if field_type == FieldType.SELECT.value:
            source = field.option_source
            if not isinstance(source, str) or not source:
                raise ConfigurationError(f"Invalid option_source for {field_name}")
            if source not in self._option_source_table:
                raise ConfigurationError(f"Invalid option_source for {field_name}: no option source named '{source}'")
            element.placeholder = check_option(field_name, "placeholder", field.placeholder, str)
            element.options = self.get_option_source(source)
            element.option_value = check_option(field_name, "option_value", field.option_value, str) or settings.option_value
            element.option_label = check_option(field_name, "option_label", field.option_label, str) or settings.option_label
            element.selected = self._data.get(field_name)

        elif field_type in (FieldType.TEXT.value, FieldType.PASSWORD.value):
            element.maxlength = check_option(field_name, "maxlength", field.maxlength, int)

        elif field_type == FieldType.TEXTAREA.value:
            cols = check_option(field_name, "cols", field.cols, int)
            rows = check_option(field_name, "rows", field.rows, int)
            element.cols = cols if cols is not None else settings.textarea_cols
            element.rows = rows if rows is not None else settings.textarea_rows

        elif field_type == FieldType.SUBMIT.value:
            pass

        else:
            raise ConfigurationError(f"Invalid element type: {field_type} (field {field_name})")

        return element

    def __html__(self) -> str:
        return str(self.render())

    def __repr__(self) -> str:
        return f"{type(self).__name__}(fields={list(self.fields)!r}, errors={self.errors!r})"
