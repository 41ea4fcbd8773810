"""Konform - declarative forms with rule validation and template rendering."""

from konform.elements import Element
from konform.exceptions import ConfigurationError, KonformError, UnknownRuleError
from konform.fields import FieldDefinition, FieldType, InstanceMethodRule, NamedRule
from konform.form import Form, get_form, option_source, rule
from konform.rules import register_rule
from konform.validation import Validation

__all__ = [
    "ConfigurationError",
    "Element",
    "FieldDefinition",
    "FieldType",
    "Form",
    "InstanceMethodRule",
    "KonformError",
    "NamedRule",
    "UnknownRuleError",
    "Validation",
    "get_form",
    "option_source",
    "register_rule",
    "rule",
]
