"""Validation engine: collects per-field rules and labels, checks data, builds error messages."""

from __future__ import annotations

import logging
import re
from collections import defaultdict
from typing import Any, Callable

from konform import messages
from konform.rules import EMPTY_RULES, get_rule, is_empty

logger = logging.getLogger(__name__)

# String params replaced with live values when a rule runs
DATA_PARAM = ":data"
FIELD_PARAM = ":field"
VALIDATION_PARAM = ":validation"

DEFAULT_SOURCE = "validation"

# {field}, {value}, {param1}... ; any other brace text is left alone
PLACEHOLDER = re.compile(r"\{(\w+)\}")


class Validation:
    """Runs rule chains against a data map.

    Usage:
        validation = Validation({"email": "bob"})
        validation.rule("email", "not_empty")
        validation.rule("email", "email")
        validation.label("email", "Email address")
        if not validation.check():
            validation.errors("contact")  # {"email": "Email address must be an email address"}
    """

    def __init__(self, data: dict[str, Any]):
        self.data = dict(data)
        self._rules: dict[str, list[tuple[str | Callable, tuple, str | None]]] = defaultdict(list)
        self._labels: dict[str, str] = {}
        self._errors: dict[str, tuple[str, tuple]] = {}

    def rule(
        self,
        field: str,
        rule: str | Callable,
        params: tuple | list | None = None,
        *,
        name: str | None = None,
    ) -> Validation:
        """Add a rule for a field.

        ``rule`` is a rule name or a callable. ``name`` overrides the name a
        callable is reported under in errors (defaults to its ``__name__``).
        """
        if field not in self._labels:
            self._labels[field] = field
        self._rules[field].append((rule, tuple(params or ()), name))
        return self

    def label(self, field: str, label: str) -> Validation:
        self._labels[field] = label
        return self

    def labels(self) -> dict[str, str]:
        return dict(self._labels)

    def check(self) -> bool:
        """Run every rule. Returns True if no field failed.

        Fields stop at their first failing rule. Empty values only go through
        the rules in EMPTY_RULES. Unknown rule names raise UnknownRuleError.
        """
        self._errors = {}

        for field, rules in self._rules.items():
            value = self.data.get(field)
            for rule, params, name in rules:
                callback, rule_name = self._resolve(rule)
                rule_name = name or rule_name

                if rule_name not in EMPTY_RULES and is_empty(value):
                    continue

                args = [self._bind_param(param, field) for param in params]
                if not callback(value, *args):
                    self._errors[field] = (rule_name, params)
                    break

        logger.debug("Validation checked %d fields, %d failed", len(self._rules), len(self._errors))
        return not self._errors

    def errors(self, source: str | None = None) -> dict[str, str]:
        """Error message per failed field.

        With no ``source`` the failing rule name is returned instead of a message.
        Otherwise the message is looked up, in order, as ``<field>.<rule>``,
        ``<field>.default`` and ``<rule>`` in ``source``, then ``<rule>`` in the
        default ``validation`` messages.
        """
        if source is None:
            return {field: rule_name for field, (rule_name, _) in self._errors.items()}

        result = {}
        for field, (rule_name, params) in self._errors.items():
            text = _first_message(
                (source, f"{field}.{rule_name}"),
                (source, f"{field}.default"),
                (source, rule_name),
                (DEFAULT_SOURCE, rule_name),
            )
            if text is None:
                result[field] = f"{source}.{field}.{rule_name}"
                continue
            result[field] = interpolate(text, self._message_values(field, params))
        return result

    # -- Internals --

    @staticmethod
    def _resolve(rule: str | Callable) -> tuple[Callable, str]:
        if callable(rule):
            return rule, getattr(rule, "__name__", repr(rule))
        return get_rule(rule), rule

    def _bind_param(self, param: Any, field: str) -> Any:
        if param == DATA_PARAM:
            return self.data
        if param == FIELD_PARAM:
            return field
        if param == VALIDATION_PARAM:
            return self
        return param

    def _message_values(self, field: str, params: tuple) -> dict[str, Any]:
        values = {"field": self._labels.get(field, field), "value": self.data.get(field, "")}
        for i, param in enumerate(params, start=1):
            if param == DATA_PARAM or param == VALIDATION_PARAM:
                continue
            if param == FIELD_PARAM:
                param = field
            # Field names used as params show as their labels
            if isinstance(param, str) and param in self._labels:
                param = self._labels[param]
            values[f"param{i}"] = param
        return values


def interpolate(text: str, values: dict[str, Any]) -> str:
    """Fill known placeholders in a message. Unknown ones and stray braces stay as written."""

    def replace(match: re.Match) -> str:
        key = match.group(1)
        return str(values[key]) if key in values else match.group(0)

    return PLACEHOLDER.sub(replace, text)


def _first_message(*lookups: tuple[str, str]) -> str | None:
    for source, path in lookups:
        text = messages.message(source, path)
        # A dict here is a per-field section, not a message
        if isinstance(text, str):
            return text
    return None
