"""zakat-engine calculate / compare — run the engine on a snapshot file."""

from __future__ import annotations

import json

import click

from zakat_engine.core.exceptions import ZakatEngineError

_config_option = click.option(
    "--config", "config_file", type=click.Path(exists=True, dir_okay=False), help="Engine settings file."
)
_gold_option = click.option("--gold", "gold_price", type=float, required=True, help="Gold price per gram.")
_silver_option = click.option("--silver", "silver_price", type=float, required=True, help="Silver price per gram.")


def _print_report(report) -> None:
    from zakat_engine.core.cli.common import money

    currency = report.input.currency
    click.echo(f"Methodology: {report.methodology_name} ({report.methodology_id})")
    for warning in report.warnings:
        click.echo(f"  warning: {warning}")
    click.echo(f"Calendar:    {report.calendar_type} ({report.zakat_rate:.3%})")
    click.echo("")

    click.echo("Assets:")
    for category in report.breakdown.values():
        if not category.items:
            continue
        click.echo(
            f"  {category.label:<18} {money(category.gross_total):>15} -> {money(category.zakatable_amount):>15}"
            f"  {category.rule_label}"
        )
    click.echo(f"  {'Total zakatable':<18} {'':>15}    {money(report.total_assets):>15}")

    if report.liabilities.items:
        click.echo("")
        click.echo(f"Liabilities ({report.liabilities.method}):")
        for line in report.liabilities.items:
            click.echo(f"  {line.name:<18} {money(line.amount):>15} x{line.multiplier:<2} -> {money(line.deduction):>15}")
    click.echo(f"  {'Total deductible':<18} {'':>15}    {money(report.total_liabilities):>15}")

    click.echo("")
    status = "above" if report.is_above_nisab else "below"
    click.echo(f"Net zakatable:  {currency} {money(report.net_zakatable_wealth)}")
    click.echo(f"Nisab ({report.nisab_standard}): {currency} {money(report.nisab)} ({status})")
    for override in report.rate_overrides:
        click.echo(f"Rate override:  {override.label} {currency} {money(override.amount)} at {override.rate:.1%}")
    click.echo(f"Zakat due:      {currency} {money(report.zakat_due)}")

    if report.purification.total:
        click.echo(
            f"Purification:   {currency} {money(report.purification.total)} "
            f"(interest {money(report.purification.interest_to_purify)}, "
            f"dividends {money(report.purification.dividends_to_purify)})"
        )


@click.command()
@click.argument("snapshot_file", type=click.Path(exists=True, dir_okay=False))
@_gold_option
@_silver_option
@click.option("--methodology", "-m", help="Methodology id (overrides the snapshot file).")
@click.option("--calendar", type=click.Choice(["lunar", "solar"]), help="Zakat year calendar.")
@click.option("--nisab", "nisab_standard", type=click.Choice(["gold", "silver"]), help="Override the nisab standard.")
@click.option("--json", "as_json", is_flag=True, help="Print the full report as JSON.")
@_config_option
def calculate(
    snapshot_file: str,
    gold_price: float,
    silver_price: float,
    methodology: str | None,
    calendar: str | None,
    nisab_standard: str | None,
    as_json: bool,
    config_file: str | None,
) -> None:
    """Calculate zakat for a YAML or JSON snapshot file."""
    from zakat_engine.core.cli.common import load_registry, load_snapshot
    from zakat_engine.engine import calculate_zakat

    try:
        snapshot = load_snapshot(
            snapshot_file,
            config_file,
            methodology=methodology,
            calendar_type=calendar,
            nisab_standard=nisab_standard,
        )
        report = calculate_zakat(snapshot, gold_price, silver_price, registry=load_registry(config_file))
    except ZakatEngineError as e:
        raise click.ClickException(str(e)) from e

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
    else:
        _print_report(report)


@click.command()
@click.argument("snapshot_file", type=click.Path(exists=True, dir_okay=False))
@_gold_option
@_silver_option
@click.option("--methodology", "-m", "methodology_ids", multiple=True, help="Methodology id (repeatable; default all).")
@click.option("--calendar", type=click.Choice(["lunar", "solar"]), help="Zakat year calendar.")
@click.option("--json", "as_json", is_flag=True, help="Print the reports as JSON.")
@_config_option
def compare(
    snapshot_file: str,
    gold_price: float,
    silver_price: float,
    methodology_ids: tuple[str, ...],
    calendar: str | None,
    as_json: bool,
    config_file: str | None,
) -> None:
    """Compare zakat for one snapshot across methodologies."""
    from zakat_engine.core.cli.common import load_registry, load_snapshot, money
    from zakat_engine.engine import compare_methodologies

    try:
        snapshot = load_snapshot(snapshot_file, config_file, calendar_type=calendar)
        reports = compare_methodologies(
            snapshot,
            gold_price,
            silver_price,
            methodology_ids=methodology_ids or None,
            registry=load_registry(config_file),
        )
    except ZakatEngineError as e:
        raise click.ClickException(str(e)) from e

    if as_json:
        click.echo(json.dumps({key: report.to_dict() for key, report in reports.items()}, indent=2))
        return

    width = max(len("methodology"), *(len(key) for key in reports))
    click.echo(f"{'methodology':<{width}}  {'assets':>15}  {'liabilities':>15}  {'net':>15}  {'zakat due':>12}")
    for key, report in reports.items():
        click.echo(
            f"{key:<{width}}  {money(report.total_assets):>15}  {money(report.total_liabilities):>15}  "
            f"{money(report.net_zakatable_wealth):>15}  {money(report.zakat_due):>12}"
        )
