"""zakat-engine methodologies / show — inspect the registered methodologies."""

from __future__ import annotations

import click
import yaml

from zakat_engine.core.exceptions import ZakatEngineError


@click.command()
@click.option("--config", "config_file", type=click.Path(exists=True, dir_okay=False), help="Engine settings file.")
def methodologies(config_file: str | None) -> None:
    """List the available methodologies."""
    from zakat_engine.core.cli.common import load_registry

    try:
        registry = load_registry(config_file)
    except ZakatEngineError as e:
        raise click.ClickException(str(e)) from e

    width = max(len(key) for key in registry.ids())
    for key, config in registry.items():
        marker = " (default)" if key == registry.default_id else ""
        click.echo(f"{key:<{width}}  {config.meta.name}{marker}")


@click.command()
@click.argument("methodology")
@click.option("--config", "config_file", type=click.Path(exists=True, dir_okay=False), help="Engine settings file.")
def show(methodology: str, config_file: str | None) -> None:
    """Print a methodology's full ruleset as YAML."""
    from zakat_engine.core.cli.common import load_registry

    try:
        config = load_registry(config_file).get(methodology)
    except ZakatEngineError as e:
        raise click.ClickException(str(e)) from e

    data = config.model_dump(mode="json", by_alias=True, exclude_none=True)
    click.echo(yaml.safe_dump(data, sort_keys=False, allow_unicode=True), nl=False)
