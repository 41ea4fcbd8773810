"""Global validation rule table and the built-in rules.

Every rule is called as ``rule(value, *params)`` and returns a bool.

Usage:
    from konform.rules import register_rule

    @register_rule()
    def postcode(value):
        return bool(POSTCODE.fullmatch(value))
"""

from __future__ import annotations

import ipaddress
import re
from decimal import Decimal, InvalidOperation
from typing import Any, Callable
from urllib.parse import urlsplit

from konform.exceptions import UnknownRuleError

_rule_registry: dict[str, Callable[..., bool]] = {}

# Rules that still run when the value is empty; everything else is skipped.
EMPTY_RULES = frozenset({"not_empty", "matches"})

EMAIL_PATTERN = re.compile(
    r"^[-\w.'+*$^&%=~!?{}]+@(?:(?![-.])[-a-z0-9.]+(?<![-.])\.[a-z]{2,}|\d{1,3}(?:\.\d{1,3}){3})$",
    re.IGNORECASE,
)
COLOR_PATTERN = re.compile(r"^#?[0-9a-f]{3}(?:[0-9a-f]{3})?$", re.IGNORECASE)
ALPHA_DASH_PATTERN = re.compile(r"^[-\w]+$")


def register_rule(name: str | None = None) -> Callable[[Callable], Callable]:
    """Decorator adding a function to the global rule table."""

    def decorator(func: Callable) -> Callable:
        _rule_registry[name or func.__name__] = func
        return func

    return decorator


def get_rule(name: str) -> Callable[..., bool]:
    """Look up a rule by name. Raises UnknownRuleError if not found."""
    try:
        return _rule_registry[name]
    except KeyError:
        raise UnknownRuleError(name) from None


def rule_names() -> list[str]:
    return sorted(_rule_registry)


def is_empty(value: Any) -> bool:
    """None, False, empty string and empty containers are empty. 0 is not."""
    return value is None or value is False or value == "" or value == [] or value == {}


# -- Built-in rules --


@register_rule()
def not_empty(value: Any) -> bool:
    return not is_empty(value)


@register_rule()
def regex(value: Any, expression: str) -> bool:
    return re.search(expression, str(value)) is not None


@register_rule()
def min_length(value: Any, length: int) -> bool:
    return len(str(value)) >= int(length)


@register_rule()
def max_length(value: Any, length: int) -> bool:
    return len(str(value)) <= int(length)


@register_rule()
def exact_length(value: Any, *lengths: int) -> bool:
    """Value length must be one of the given lengths."""
    return len(str(value)) in {int(n) for n in lengths}


@register_rule()
def equals(value: Any, required: Any) -> bool:
    return value == required


@register_rule()
def email(value: Any) -> bool:
    value = str(value)
    if len(value) > 254:
        return False
    return EMAIL_PATTERN.match(value) is not None


@register_rule()
def url(value: Any) -> bool:
    parts = urlsplit(str(value))
    return parts.scheme in ("http", "https", "ftp") and bool(parts.netloc)


@register_rule()
def ip(value: Any, allow_private: bool = True) -> bool:
    try:
        address = ipaddress.ip_address(str(value))
    except ValueError:
        return False
    return allow_private or not address.is_private


@register_rule()
def alpha(value: Any) -> bool:
    return str(value).isalpha()


@register_rule()
def alpha_numeric(value: Any) -> bool:
    return str(value).isalnum()


@register_rule()
def alpha_dash(value: Any) -> bool:
    return ALPHA_DASH_PATTERN.match(str(value)) is not None


@register_rule()
def digit(value: Any) -> bool:
    return str(value).isdigit()


@register_rule()
def numeric(value: Any) -> bool:
    try:
        Decimal(str(value))
    except InvalidOperation:
        return False
    return True


@register_rule()
def decimal(value: Any, places: int = 2, digits: int | None = None) -> bool:
    """A decimal with exactly ``places`` fractional digits and, optionally, ``digits`` integer digits."""
    integer = r"\d+" if digits is None else rf"\d{{{int(digits)}}}"
    return re.fullmatch(rf"[+-]?{integer}\.\d{{{int(places)}}}", str(value)) is not None


@register_rule(name="range")
def in_range(value: Any, minimum: Any, maximum: Any) -> bool:
    try:
        number = Decimal(str(value))
    except InvalidOperation:
        return False
    return Decimal(str(minimum)) <= number <= Decimal(str(maximum))


@register_rule()
def color(value: Any) -> bool:
    return COLOR_PATTERN.match(str(value)) is not None


@register_rule()
def matches(value: Any, data: dict, match_field: str) -> bool:
    """Value must equal another field's value. Use as ``("matches", ":data", "password")``."""
    return value == data.get(match_field)
