"""YAML message catalogs used for validation error text.

A message source ``konform/contact`` is read from ``konform/contact.yaml`` in
each message directory. Directories are searched in order:

1. ``message_dirs`` from settings
2. ``./messages/`` (working directory) - user overrides
3. ``konform/message_files/`` (package directory) - defaults

Every file found is merged, so a user file only needs the keys it changes.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from konform.config import get_settings

logger = logging.getLogger(__name__)

PACKAGE_MESSAGE_DIR = Path(__file__).parent / "message_files"

_cache: dict[str, dict] = {}


def get_message_directories() -> list[Path]:
    settings = get_settings()
    return [*settings.message_dirs, Path.cwd() / "messages", PACKAGE_MESSAGE_DIR]


def load_messages(source: str) -> dict:
    """Load and merge every ``<source>.yaml`` on the search path. Cached per source."""
    if source in _cache:
        return _cache[source]

    merged: dict = {}
    # Least specific first so earlier directories overwrite later ones
    for directory in reversed(get_message_directories()):
        path = directory / f"{source}.yaml"
        if not path.exists():
            continue
        logger.debug("Loading messages for %s from %s", source, path)
        with open(path, "r") as f:
            content = yaml.safe_load(f) or {}
        _deep_merge(merged, content)

    _cache[source] = merged
    return merged


def message(source: str, path: str, default: Any = None) -> Any:
    """Look up a dotted ``path`` in a message source.

    ``message("validation", "not_empty")`` or ``message("konform/contact", "email.regex")``.
    """
    node: Any = load_messages(source)
    for key in path.split("."):
        if not isinstance(node, dict) or key not in node:
            return default
        node = node[key]
    return node


def clear_cache() -> None:
    _cache.clear()


def _deep_merge(target: dict, overrides: dict) -> None:
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            _deep_merge(target[key], value)
        else:
            target[key] = value
