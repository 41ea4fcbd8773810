"""Shared pytest fixtures."""

import json
import sys

import pytest

from konform import messages
from konform.config import get_settings
from konform.form import _form_registry
from konform.hooks import hooks
from konform.template import get_environment


def _clear_caches():
    get_settings.cache_clear()
    get_environment.cache_clear()
    messages.clear_cache()


@pytest.fixture(autouse=True)
def clean_sys_path():
    """Ensure sys.path is restored after each test."""
    original_path = sys.path.copy()
    yield
    sys.path = original_path


@pytest.fixture(autouse=True)
def clean_caches():
    """Settings, the Jinja environment and message files are cached per process."""
    _clear_caches()
    yield
    _clear_caches()


@pytest.fixture
def clean_hooks():
    """Save and restore hooks state around a test."""
    original_filters = hooks._filters.copy()
    original_actions = hooks._actions.copy()
    hooks.clear()
    yield
    hooks._filters = original_filters
    hooks._actions = original_actions


@pytest.fixture
def clean_registry():
    """Save and restore the form registry around a test."""
    saved = _form_registry.copy()
    yield
    _form_registry.clear()
    _form_registry.update(saved)


@pytest.fixture
def message_dir(tmp_path, monkeypatch):
    """A message directory searched before the bundled messages.

    Returns a writer: ``message_dir("konform/contact", "email: ...")``.
    """
    directory = tmp_path / "messages"
    directory.mkdir()
    monkeypatch.setenv("KONFORM_MESSAGE_DIRS", json.dumps([str(directory)]))
    _clear_caches()

    def _write(source: str, content: str):
        path = directory / f"{source}.yaml"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        messages.clear_cache()
        return path

    return _write


@pytest.fixture
def template_dir(tmp_path, monkeypatch):
    """A template directory searched before the bundled templates.

    Returns a writer: ``template_dir("element-text.html", "...")``.
    """
    directory = tmp_path / "templates"
    directory.mkdir()
    monkeypatch.setenv("KONFORM_TEMPLATE_DIRS", json.dumps([str(directory)]))
    _clear_caches()

    def _write(name: str, content: str):
        path = directory / name
        path.write_text(content)
        get_environment.cache_clear()
        return path

    return _write
