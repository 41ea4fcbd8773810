"""Tests for YAML message catalogs in konform/messages.py."""

from konform import messages


class TestLookup:
    def test_bundled_validation_messages(self):
        assert messages.message("validation", "not_empty") == "{field} must not be empty"

    def test_missing_source_is_empty(self):
        assert messages.load_messages("no/such/source") == {}

    def test_missing_key_returns_default(self):
        assert messages.message("validation", "nope") is None
        assert messages.message("validation", "nope", "fallback") == "fallback"

    def test_dotted_path(self, message_dir):
        message_dir("contact", "email:\n  regex: 'Bad email'\n")
        assert messages.message("contact", "email.regex") == "Bad email"
        assert messages.message("contact", "email") == {"regex": "Bad email"}

    def test_path_through_a_string_is_missing(self, message_dir):
        message_dir("contact", "email: 'Bad email'\n")
        assert messages.message("contact", "email.regex") is None


class TestSearchPath:
    def test_user_file_overrides_bundled_keys(self, message_dir):
        message_dir("validation", "not_empty: 'Required'\n")
        assert messages.message("validation", "not_empty") == "Required"
        # Untouched keys still come from the bundled file
        assert messages.message("validation", "email") == "{field} must be an email address"

    def test_nested_sections_are_merged(self, message_dir, tmp_path, monkeypatch):
        second = tmp_path / "more"
        second.mkdir()
        (second / "contact.yaml").write_text("email:\n  regex: 'Later'\n  email: 'From later dir'\n")
        message_dir("contact", "email:\n  regex: 'Earlier'\n")
        monkeypatch.setenv("KONFORM_MESSAGE_DIRS", f'["{tmp_path / "messages"}", "{second}"]')
        from konform.config import get_settings

        get_settings.cache_clear()
        messages.clear_cache()

        assert messages.message("contact", "email.regex") == "Earlier"
        assert messages.message("contact", "email.email") == "From later dir"

    def test_working_directory_messages(self, tmp_path, monkeypatch):
        (tmp_path / "messages").mkdir()
        (tmp_path / "messages" / "local.yaml").write_text("greeting: 'hi'\n")
        monkeypatch.chdir(tmp_path)
        assert messages.message("local", "greeting") == "hi"

    def test_results_are_cached(self, message_dir):
        path = message_dir("contact", "greeting: 'first'\n")
        assert messages.message("contact", "greeting") == "first"
        path.write_text("greeting: 'second'\n")
        assert messages.message("contact", "greeting") == "first"
        messages.clear_cache()
        assert messages.message("contact", "greeting") == "second"
