"""
awsenv CLI - .env files <-> AWS Parameter Store

Main entry point for the awsenv command-line tool.
"""

import asyncio
import logging
import sys
from pathlib import Path

import click
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .core.config import resolve_settings, write_example_config
from .core.confirm import ConsoleConfirmer
from .core.context import RunContext
from .core.errors import AwsEnvError, FatalError
from .core.exporter import fetch_parameters, render_exports
from .core.models import PurgeReport, SyncReport
from .core.purge import PurgeEngine
from .core.store import SsmParameterStore
from .core.syncer import SyncEngine


console = Console()
err_console = Console(stderr=True)

MASK_VISIBLE_CHARS = 4


def mask(value: str) -> str:
    """Hide all but the first few characters of a secret."""
    if len(value) <= MASK_VISIBLE_CHARS:
        return "*" * len(value)
    return value[:MASK_VISIBLE_CHARS] + "*" * min(len(value) - MASK_VISIBLE_CHARS, 12)


def run(coro):
    """
    Run an engine coroutine, turning awsenv errors into exit codes.

    Fatal errors print their remediation; every awsenv error exits with 1.
    """
    try:
        return asyncio.run(coro)
    except FatalError as e:
        body = f"[bold]{escape(str(e))}[/bold]"
        if e.remediation:
            body += f"\n\n{escape(e.remediation)}"
        err_console.print(Panel(body, title="[bold red]Error[/bold red]", border_style="red", box=box.ROUNDED))
        sys.exit(1)
    except AwsEnvError as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/red]")
        sys.exit(1)


def open_store(settings) -> SsmParameterStore:
    try:
        return SsmParameterStore(region=settings.region, profile=settings.profile)
    except AwsEnvError as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/red]")
        sys.exit(1)


def require_namespace_option(namespace):
    if namespace:
        return
    err_console.print("[red]Error: Namespace is required[/red]")
    err_console.print("[dim]Provide it via --namespace, the AWSENV_NAMESPACE environment "
                      "variable, or a namespace entry in .awsenv[/dim]")
    sys.exit(1)


def display_dry_run(report: SyncReport):
    """Show the records a sync would write."""
    table = Table(title=f"Dry run: {len(report.records)} parameters for {report.namespace}",
                  box=box.ROUNDED)
    table.add_column("Key", style="cyan", no_wrap=True)
    table.add_column("Type", style="magenta")
    table.add_column("Value", style="green")

    for record in report.records:
        value = mask(record.value) if record.is_secret else record.value
        table.add_row(record.key, record.parameter_type, escape(value))

    console.print(table)
    console.print("[dim]No changes were made.[/dim]")


def display_batch_summary(report, action: str, noun: str):
    """Print success/failure counts and every failure."""
    console.print()
    console.print(f"[bold]{action} completed:[/bold]")
    console.print(f"  [green]✓ {noun}: {report.succeeded} parameters[/green]")
    if report.failed:
        console.print(f"  [red]✗ Failed: {report.failed} parameters[/red]")
        err_console.print(f"\n[red]Failed to {action.lower()}:[/red]")
        for failure in report.failures:
            err_console.print(f"  - {escape(failure.parameter)}: {escape(failure.error or '')}",
                              highlight=False)


@click.group(invoke_without_command=True)
@click.option('--verbose', '-v', is_flag=True, help='Show configuration details and decisions')
@click.pass_context
def cli(ctx, verbose):
    """
    awsenv - Sync .env files with AWS Parameter Store
    """
    # Diagnostics reach the terminal through the run context, not log records
    logging.basicConfig(level=logging.WARNING, format="%(name)s: %(message)s")
    ctx.obj = RunContext(console=console, logger=logging.getLogger("awsenv"), verbose=verbose)

    if ctx.invoked_subcommand is None:
        console.print("[yellow]Use --help to see available commands[/yellow]")


def store_options(func):
    """Options shared by every command that talks to Parameter Store."""
    func = click.option('--profile', '-p', default=None,
                        help='AWS CLI profile (also selects the .awsenv section)')(func)
    func = click.option('--region', '-r', default=None,
                        help='AWS region, also set by $AWS_REGION')(func)
    func = click.option('--namespace', '-n', default=None,
                        help='Prefix for your parameters path, also set by $AWSENV_NAMESPACE')(func)
    return func


@cli.command()
@store_options
@click.option('--without-exporter', is_flag=True, help='Hide the export prefix')
@click.pass_obj
def fetch(context, namespace, region, profile, without_exporter):
    """
    Print the parameters under a namespace as export lines.
    """
    settings = resolve_settings(namespace=namespace, region=region, profile=profile,
                                without_exporter=without_exporter)
    require_namespace_option(settings.namespace)
    context.debug("Fetching %s in %s", settings.namespace, settings.region)

    store = open_store(settings)
    parameters = run(fetch_parameters(store, settings.namespace))
    click.echo(render_exports(parameters, without_exporter=settings.without_exporter))


@cli.command()
@click.argument('file', default='.env', type=click.Path(dir_okay=False, path_type=Path))
@store_options
@click.option('--stdin', 'from_stdin', is_flag=True, help='Read variables from standard input')
@click.option('--dry-run', is_flag=True, help='Show what would be synced without uploading')
@click.option('--force', '-f', is_flag=True, help='Overwrite parameters without confirmation')
@click.option('--encrypt', is_flag=True,
              help='Store all parameters as SecureString regardless of content')
@click.pass_obj
def sync(context, file, namespace, region, profile, from_stdin, dry_run, force, encrypt):
    """
    Sync a .env file to Parameter Store.

    Every variable becomes NAMESPACE/KEY. Variables whose name or value looks
    sensitive are stored as SecureString.
    """
    settings = resolve_settings(namespace=namespace, region=region, profile=profile,
                                encrypt=encrypt)
    require_namespace_option(settings.namespace)
    context.debug("Sync target %s in %s (encrypt all: %s)",
                  settings.namespace, settings.region, settings.encrypt)

    source = {'content': sys.stdin.read()} if from_stdin else {'path': file}

    store = open_store(settings)
    engine = SyncEngine(store, confirmer=ConsoleConfirmer(console), context=context)
    report = run(engine.sync(
        settings.namespace,
        force_all_secret=settings.encrypt,
        dry_run=dry_run,
        force=force,
        **source,
    ))

    if not report.records:
        console.print("[yellow]No environment variables found - nothing to sync[/yellow]")
        return

    if report.dry_run:
        display_dry_run(report)
        return

    if report.cancelled:
        console.print("[yellow]Sync cancelled by user[/yellow]")
        if from_stdin:
            console.print("[dim]Input was read from stdin; use --force to skip confirmation.[/dim]")
        return

    display_batch_summary(report, "Sync", "Synced")
    if not report.ok:
        sys.exit(1)


@cli.command()
@store_options
@click.option('--force', '-f', is_flag=True, help='Delete without confirmation')
@click.option('--paranoid', is_flag=True, help='Refuse to purge (safety lock)')
@click.pass_obj
def purge(context, namespace, region, profile, force, paranoid):
    """
    Delete every parameter under a namespace.

    Asks for "yes" and then the namespace itself unless --force is given.
    Refused outright when paranoid mode is on.
    """
    settings = resolve_settings(namespace=namespace, region=region, profile=profile,
                                paranoid=paranoid)
    if not settings.paranoid:
        require_namespace_option(settings.namespace)

    store = open_store(settings)
    engine = PurgeEngine(store, confirmer=ConsoleConfirmer(console), context=context)
    report: PurgeReport = run(engine.purge(settings.namespace, paranoid=settings.paranoid, force=force))

    if not report.names:
        console.print("\nNo parameters found in namespace:")
        console.print(f"  {escape(report.namespace)}\n", highlight=False)
        return

    if report.cancelled:
        console.print("\n[yellow]Purge cancelled.[/yellow]")
        return

    display_batch_summary(report, "Purge", "Deleted")
    if not report.ok:
        sys.exit(1)


@cli.command()
def init():
    """
    Create an example .awsenv configuration in this directory.
    """
    try:
        path = write_example_config(Path.cwd())
    except AwsEnvError as e:
        console.print(f"[yellow]{escape(str(e))}[/yellow]")
        return

    console.print(f"[green]✓ AWSENV configuration created at {escape(str(path))}[/green]")
    console.print("\nUsage:")
    console.print("  awsenv fetch --profile production")
    console.print("  awsenv sync .env --profile staging --dry-run")


def main():
    """Main entry point."""
    cli()


if __name__ == '__main__':
    main()
