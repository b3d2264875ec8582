"""Click CLI group: scan, shims, and doctor commands."""

from __future__ import annotations

import asyncio
import json
import sys

import click

from allmind.config import get_settings
from allmind.logging import configure_logging
from allmind.repo_cache import build_snapshot_builder, snapshot_payload
from allmind.repo_cache.cache import ReconciliationCache
from allmind.shims.doctor import doctor_payload, run_shim_doctor
from allmind.shims.reconciler import reconcile_from_settings, report_payload


def _green(text: str) -> str:
    return click.style(text, fg="green")


def _red(text: str) -> str:
    return click.style(text, fg="red")


def _yellow(text: str) -> str:
    return click.style(text, fg="yellow")


@click.group()
@click.option("--log-level", default=None, help="Override LOG_LEVEL for this run.")
def cli(log_level: str | None) -> None:
    """AllMind operator dashboard CLI."""
    configure_logging(log_level or get_settings().log_level)


@cli.command()
@click.option("--json", "json_output", is_flag=True, help="Print the snapshot as JSON.")
def scan(json_output: bool) -> None:
    """Scan every registry entry once and print the result."""
    cache = ReconciliationCache(build_snapshot_builder())
    view = asyncio.run(cache.get_snapshot(force_refresh=True))
    if json_output:
        click.echo(json.dumps(snapshot_payload(view), indent=2))
        return
    snapshot = view.snapshot
    if snapshot.error:
        click.echo(_red(f"registry error: {snapshot.error}"))
    for record in snapshot.records:
        if not record.exists:
            click.echo(f"  {_red('missing')}  {record.name}  {record.path}")
            continue
        git = record.git
        if git.error:
            state = _yellow(git.error)
        else:
            drift = f" +{git.ahead}/-{git.behind}" if git.ahead or git.behind else ""
            label = f"{git.branch} {git.status}{drift}"
            state = _yellow(label) if git.dirty else _green(label)
        click.echo(f"  {record.name}: {state}")
    summary = snapshot.summary()
    click.echo(
        f"\n{summary.total} repos, {summary.present} present, {summary.missing} missing, "
        f"{summary.dirty} dirty ({snapshot.duration_ms}ms)"
    )


@cli.command()
@click.option("--json", "json_output", is_flag=True, help="Print the shim report as JSON.")
def shims(json_output: bool) -> None:
    """Report shim collisions and orphans."""
    report = reconcile_from_settings(get_settings())
    if json_output:
        click.echo(json.dumps(report_payload(report), indent=2))
        return
    if report.error:
        click.echo(_red(f"error: {report.error}"))
    click.echo(f"{len(report.artifacts)} shims on disk")
    for collision in report.collisions:
        click.echo(
            f"  {_red('collision')} {collision.shim}: owned by {collision.owners[0]}, "
            f"also claimed by {', '.join(collision.owners[1:])}"
        )
    for orphan in report.orphans:
        click.echo(f"  {_yellow('orphan')} {orphan}")
    if report.collisions:
        sys.exit(1)


@cli.command()
@click.option("--json", "json_output", is_flag=True, help="Print checks as JSON.")
def doctor(json_output: bool) -> None:
    """Run strap shim health checks."""
    checks = run_shim_doctor(get_settings())
    if json_output:
        click.echo(json.dumps(doctor_payload(checks), indent=2))
    else:
        for check in checks:
            icon = _green("✓") if check.passed else _red("✗")
            click.echo(f"  {icon} [{check.id}] {check.name} ({check.severity})")
        passed = sum(1 for check in checks if check.passed)
        click.echo(f"\n{passed}/{len(checks)} checks passed")
    if any(not check.passed and check.severity == "critical" for check in checks):
        sys.exit(1)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
