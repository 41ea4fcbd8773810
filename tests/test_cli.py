"""Tests for the konform command-line interface."""

import pytest
import yaml
from click.testing import CliRunner

from konform.cli import cli, load_form_class, parse_data
from konform.form import Form, option_source


class CliContactForm(Form, form_name="cli-contact"):
    action = "/contact"

    def setup(self):
        self.add_field("name", rules=["not_empty"])
        self.add_field("email", rules=["not_empty", "email"])


class CliBrokenForm(Form, form_name="cli-broken"):
    def setup(self):
        self.add_field("pick", type="select")


class CliBadRuleForm(Form, form_name="cli-bad-rule"):
    def setup(self):
        self.add_field("name", rules=["no_such_rule"])


class CliSelectForm(Form, form_name="cli-select"):
    def setup(self):
        self.add_field("pick", type="select", option_source="choices")

    @option_source()
    def choices(self):
        return [{"pk": "a", "name": "Alpha"}]


@pytest.fixture
def runner():
    return CliRunner()


class TestHelpers:
    def test_parse_data(self):
        assert parse_data(("name=Bob", "note=a=b", "empty=")) == {"name": "Bob", "note": "a=b", "empty": ""}

    def test_parse_data_rejects_missing_equals(self):
        with pytest.raises(Exception, match="key=value"):
            parse_data(("name",))

    def test_load_by_registered_name(self):
        assert load_form_class("cli-contact") is CliContactForm

    def test_load_by_module_reference(self):
        assert load_form_class("test_cli:CliSelectForm") is CliSelectForm

    def test_load_rejects_non_form(self):
        with pytest.raises(Exception, match="not a Form subclass"):
            load_form_class("test_cli:parse_data")

    def test_load_unknown_name(self):
        with pytest.raises(Exception, match="No form named"):
            load_form_class("no-such-form")


class TestCommands:
    def test_rules_lists_builtins(self, runner):
        result = runner.invoke(cli, ["rules"])
        assert result.exit_code == 0
        assert "not_empty" in result.output.splitlines()

    def test_forms_lists_registered(self, runner):
        result = runner.invoke(cli, ["forms"])
        assert result.exit_code == 0
        assert "cli-contact\ttest_cli:CliContactForm" in result.output

    def test_render(self, runner):
        result = runner.invoke(cli, ["render", "cli-contact", "-d", "name=Bob"])
        assert result.exit_code == 0
        assert result.output.startswith('<form method="post" action="/contact">')
        assert 'value="Bob"' in result.output

    def test_render_with_validation_shows_errors(self, runner):
        result = runner.invoke(cli, ["render", "cli-contact", "-d", "name=Bob", "--validate"])
        assert result.exit_code == 0
        assert "email must not be empty" in result.output

    def test_render_select(self, runner):
        result = runner.invoke(cli, ["render", "cli-select", "-d", "pick=a"])
        assert '<option value="a" selected>Alpha</option>' in result.output

    def test_render_configuration_error(self, runner):
        result = runner.invoke(cli, ["render", "cli-broken"])
        assert result.exit_code == 1
        assert "Invalid option_source for pick" in result.output

    def test_validate_ok(self, runner):
        result = runner.invoke(cli, ["validate", "cli-contact", "-d", "name=Bob", "-d", "email=bob@example.com"])
        assert result.exit_code == 0
        assert result.output == "OK\n"

    def test_validate_failure_prints_errors(self, runner):
        result = runner.invoke(cli, ["validate", "cli-contact", "-d", "email=bob"])
        assert result.exit_code == 1
        assert yaml.safe_load(result.output) == {
            "name": "name must not be empty",
            "email": "email must be an email address",
        }

    def test_validate_unknown_rule(self, runner):
        result = runner.invoke(cli, ["validate", "cli-bad-rule", "-d", "name=Bob"])
        assert result.exit_code == 1
        assert "Unknown validation rule 'no_such_rule'" in result.output
        assert "Traceback" not in result.output

    def test_render_validate_unknown_rule(self, runner):
        result = runner.invoke(cli, ["render", "cli-bad-rule", "--validate"])
        assert result.exit_code == 1
        assert "Unknown validation rule 'no_such_rule'" in result.output

    def test_unknown_form(self, runner):
        result = runner.invoke(cli, ["validate", "nope"])
        assert result.exit_code == 2
        assert "No form named 'nope'" in result.output
