"""Konform error taxonomy."""


class KonformError(Exception):
    """Base class for all Konform errors."""


class ConfigurationError(KonformError):
    """A form definition is wrong: unsupported field type, bad option source, missing template.

    These are mistakes by the form author, never by the user submitting data.
    """


class UnknownRuleError(KonformError, LookupError):
    """A rule name could not be resolved to a callable."""

    def __init__(self, rule_name: str):
        self.rule_name = rule_name
        super().__init__(f"Unknown validation rule '{rule_name}'")
