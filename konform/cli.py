"""CLI commands for Konform."""

import importlib
import logging
import sys

import click
import yaml

from konform.exceptions import KonformError
from konform.form import Form, _form_registry, get_form
from konform.rules import rule_names


def load_form_class(reference: str) -> type[Form]:
    """Resolve ``module:Class`` or a registered form name to a Form subclass."""
    if ":" in reference:
        module_name, _, class_name = reference.partition(":")
        module = importlib.import_module(module_name)
        try:
            form_class = getattr(module, class_name)
        except AttributeError:
            raise click.BadParameter(f"{module_name} has no attribute {class_name}")
        if not (isinstance(form_class, type) and issubclass(form_class, Form)):
            raise click.BadParameter(f"{reference} is not a Form subclass")
        return form_class

    try:
        return get_form(reference)
    except LookupError as e:
        raise click.BadParameter(str(e))


def parse_data(pairs: tuple[str, ...]) -> dict[str, str]:
    data = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep:
            raise click.BadParameter(f"Expected key=value, got '{pair}'", param_hint="--data")
        data[key] = value
    return data


def import_modules(modules: tuple[str, ...]) -> None:
    # Current directory on the path so local form modules import
    if "" not in sys.path:
        sys.path.insert(0, "")
    for module in modules:
        importlib.import_module(module)


@click.group()
@click.version_option(package_name="konform")
@click.option(
    "--log-level",
    default="warning",
    type=click.Choice(["debug", "info", "warning", "error"]),
    help="Logging level",
)
def cli(log_level):
    """Konform - declarative forms with validation and rendering."""
    logging.basicConfig(level=log_level.upper(), format="%(levelname)s %(name)s: %(message)s")


@cli.command()
@click.option("--import", "modules", multiple=True, help="Module to import before listing")
def forms(modules):
    """List registered form names."""
    import_modules(modules)
    for name in sorted(_form_registry):
        form_class = _form_registry[name]
        click.echo(f"{name}\t{form_class.__module__}:{form_class.__qualname__}")


@cli.command()
def rules():
    """List global validation rule names."""
    for name in rule_names():
        click.echo(name)


@cli.command()
@click.argument("form_ref")
@click.option("-d", "--data", "pairs", multiple=True, help="Field value as key=value")
@click.option("--validate", "run_validation", is_flag=True, help="Validate before rendering")
@click.option("--import", "modules", multiple=True, help="Module to import first")
def render(form_ref, pairs, run_validation, modules):
    """Render a form to HTML."""
    import_modules(modules)
    form = load_form_class(form_ref)(parse_data(pairs))
    try:
        if run_validation:
            form.validate()
        html = form.render()
    except KonformError as e:
        raise click.ClickException(str(e))
    click.echo(html, nl=False)


@cli.command()
@click.argument("form_ref")
@click.option("-d", "--data", "pairs", multiple=True, help="Field value as key=value")
@click.option("--import", "modules", multiple=True, help="Module to import first")
def validate(form_ref, pairs, modules):
    """Validate data against a form. Exits with status 1 on failure."""
    import_modules(modules)
    form = load_form_class(form_ref)(parse_data(pairs))
    try:
        valid = form.validate()
    except KonformError as e:
        raise click.ClickException(str(e))

    if valid:
        click.echo("OK")
        return

    click.echo(yaml.safe_dump(form.errors, sort_keys=False), nl=False)
    sys.exit(1)


if __name__ == "__main__":
    cli()
