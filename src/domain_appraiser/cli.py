"""CLI interface for domain appraiser."""

import asyncio
import csv
import json
import click
import logging
from pathlib import Path
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, TaskProgressColumn
from typing import List

from . import __version__
from .checkers import TldProber
from .config import DEFAULT_CONFIG_PATH, load_config
from .errors import AppraisalError
from .factory import build_service
from .scoring import BrandabilityScorer, calculate_fallback_price, radio_test
from .utils.cache import JsonFileCache
from .valuation.service import SORT_FIELDS


console = Console()

EXPORT_FIELDS = [
    'domain', 'source', 'status', 'liquidity_price', 'market_price', 'buy_now_price',
    'brand_label', 'brand_score', 'brand_multiplier', 'length', 'tld', 'word_count',
    'radio_flagged', 'cached', 'error',
]


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )
    # whois and dns are noisy on every failed lookup
    logging.getLogger("whois").setLevel(logging.CRITICAL)
    logging.getLogger("dns").setLevel(logging.CRITICAL)


def read_domains(path: str) -> List[str]:
    """Read domains from a JSON list or a newline-separated text file."""
    with open(path) as f:
        content = f.read()
    try:
        data = json.loads(content)
    except json.JSONDecodeError:
        return [line.strip() for line in content.splitlines() if line.strip() and not line.startswith('#')]
    if not isinstance(data, list):
        raise click.BadParameter(f"{path} must hold a JSON list of domains")
    return [str(d) for d in data]


def export_rows(rows: List[dict], output: str) -> None:
    output_path = Path(output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    if output_path.suffix.lower() == '.csv':
        with open(output_path, 'w', newline='') as f:
            writer = csv.DictWriter(f, fieldnames=EXPORT_FIELDS, restval='')
            writer.writeheader()
            writer.writerows(rows)
    else:
        with open(output_path, 'w') as f:
            json.dump(rows, f, indent=2)


def appraisal_table(rows: List[dict], title: str) -> Table:
    table = Table(title=title)
    table.add_column("Domain", style="cyan")
    table.add_column("Liquidity", justify="right")
    table.add_column("Market", justify="right", style="green")
    table.add_column("Buy now", justify="right")
    table.add_column("Brand", justify="right")
    table.add_column("Source", style="dim")
    table.add_column("Flags", style="yellow")

    for row in rows:
        flags = []
        if row.get('error'):
            flags.append(row['error'])
        if row['radio_flagged']:
            flags.append('radio')
        if row['cached']:
            flags.append('cached')
        table.add_row(
            row['domain'],
            f"${row['liquidity_price']:,}",
            f"${row['market_price']:,}",
            f"${row['buy_now_price']:,}",
            f"{row['brand_score']} {row['brand_label']}",
            row['source'] or '-',
            ", ".join(flags),
        )
    return table


async def _appraise(config, domains: List[str], sort_field: str) -> List[dict]:
    service = build_service(config)
    try:
        rows = await service.appraise_bulk(domains, sort_field=sort_field)
    finally:
        await service.aclose()
    return [row.to_dict() for row in rows]


@click.group()
@click.version_option(version=__version__)
@click.option('--config', '-c', 'config_path', default=DEFAULT_CONFIG_PATH, help='Path to config file')
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
@click.pass_context
def cli(ctx, config_path, verbose):
    """Domain Appraiser - Estimate what a domain name is worth."""
    setup_logging(verbose)
    ctx.obj = {'config_path': config_path}


def _config(ctx):
    try:
        return load_config(ctx.obj['config_path'])
    except AppraisalError as e:
        console.print(f"[red]{e.user_message}[/red]")
        ctx.exit(1)


@cli.command()
@click.argument('domain')
def score(domain):
    """Show the brandability score of a domain."""
    result = BrandabilityScorer().score(domain)
    radio = radio_test(domain)

    table = Table(title=f"Brandability: {result.domain}")
    table.add_column("Signal", style="cyan")
    table.add_column("Value", justify="right")

    for signal, value in result.breakdown.items():
        table.add_row(signal.replace('_', ' '), str(value))

    console.print(table)
    console.print(f"\n[bold]Score:[/bold] [green]{result.score}/100[/green] ({result.label})")
    if radio.flagged:
        console.print(f"[yellow]Radio test failed: {radio.reason}[/yellow]")


@cli.command()
@click.argument('domain')
def price(domain):
    """Show the local fallback price of a domain."""
    result = calculate_fallback_price(domain)
    signals = result.signals

    table = Table(title=f"Fallback price: {result.domain}")
    table.add_column("Signal", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("length", str(signals.length))
    table.add_row("tld", signals.tld or '-')
    table.add_row("keyword", signals.keyword_detected or '-')
    table.add_row("penalty", str(signals.penalty))
    table.add_row("pronounce bonus", str(signals.pronounce_bonus))
    table.add_row("structure bonus", str(signals.structure_bonus))

    console.print(table)
    console.print(f"\n[bold]Price:[/bold] [green]${result.fallback_price:,}[/green]")


@cli.command()
@click.argument('domains', nargs=-1, required=True)
@click.option('--output', '-o', default=None, help='Output file (JSON or CSV)')
@click.pass_context
def appraise(ctx, domains, output):
    """Appraise one or more domains."""
    config = _config(ctx)
    try:
        with console.status("[bold green]Appraising..."):
            rows = asyncio.run(_appraise(config, list(domains), config.sort_field))
    except AppraisalError as e:
        console.print(f"[red]{e.user_message}[/red]")
        ctx.exit(1)

    console.print(appraisal_table(rows, "Appraisals"))
    if output:
        export_rows(rows, output)
        console.print(f"[green]Saved to {output}[/green]")


@cli.command()
@click.argument('file', type=click.Path(exists=True, dir_okay=False))
@click.option('--sort', '-s', 'sort_field', type=click.Choice(SORT_FIELDS), default=None, help='Field to sort by (descending)')
@click.option('--export', '-e', 'export_path', default=None, help='Export file (.csv or .json)')
@click.option('--top', default=50, help='Rows to display')
@click.pass_context
def bulk(ctx, file, sort_field, export_path, top):
    """Appraise every domain listed in FILE."""
    config = _config(ctx)
    domains = read_domains(file)
    sort_field = sort_field or config.sort_field

    console.print(f"[bold]Appraising {len(domains)} domains...[/bold]")
    try:
        with console.status("[bold green]Waiting for valuations..."):
            rows = asyncio.run(_appraise(config, domains, sort_field))
    except AppraisalError as e:
        console.print(f"[red]{e.user_message}[/red]")
        ctx.exit(1)

    console.print(appraisal_table(rows[:top], f"Top {min(top, len(rows))} by {sort_field}"))

    failed = sum(1 for r in rows if r['status'] == 'error')
    fallback = sum(1 for r in rows if r['source'] == 'local')
    console.print(f"\n[bold]Summary:[/bold]")
    console.print(f"  Appraised: {len(rows) - failed}")
    console.print(f"  Local fallback: {fallback}")
    console.print(f"  Failed: {failed}")

    if export_path:
        export_rows(rows, export_path)
        console.print(f"\n[green]Results saved to {export_path}[/green]")


@cli.command()
@click.argument('domain')
@click.option('--tlds', '-t', default=None, help='TLDs to check (comma-separated)')
@click.option('--verify/--no-verify', default=True, help='Verify with WHOIS')
@click.option('--output', '-o', default=None, help='Output file (JSON)')
@click.pass_context
def tlds(ctx, domain, tlds, verify, output):
    """Check which extensions of a name are already registered."""
    config = _config(ctx)
    tld_list = [t.strip().lstrip('.') for t in tlds.split(',')] if tlds else config.tlds

    prober = TldProber(delay=config.tld_probe_delay, verify_with_whois=verify)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console
    ) as progress:
        task = progress.add_task("[blue]Probing TLDs...", total=len(tld_list))

        def update(current, total):
            progress.update(task, completed=current)

        result = prober.probe(domain, tlds=tld_list, progress_callback=update)

    table = Table(title=f"Extensions of {result.sld}")
    table.add_column("TLD", style="cyan")
    table.add_column("Status")
    for tld in tld_list:
        if tld in result.registered_tlds:
            table.add_row(f".{tld}", "[red]registered[/red]")
        elif tld in result.available_tlds:
            table.add_row(f".{tld}", "[green]available[/green]")
        else:
            table.add_row(f".{tld}", "[dim]unknown[/dim]")
    console.print(table)
    console.print(f"\n[bold]Registered:[/bold] {len(result.registered_tlds)}/{len(tld_list)}")

    if output:
        output_path = Path(output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, 'w') as f:
            json.dump(result.to_dict(), f, indent=2)
        console.print(f"[green]Saved to {output}[/green]")


@cli.command('cache-prune')
@click.pass_context
def cache_prune(ctx):
    """Remove expired entries from the file cache."""
    config = _config(ctx)
    if config.cache_backend != 'file':
        console.print(f"[yellow]Nothing to prune for cache backend '{config.cache_backend}'[/yellow]")
        return

    cache = JsonFileCache(cache_file=config.cache_file)
    try:
        removed = cache.clear_expired()
    except AppraisalError as e:
        console.print(f"[red]{e.user_message}[/red]")
        ctx.exit(1)
    stats = cache.stats()
    console.print(f"[green]Removed {removed} expired entries[/green]")
    console.print(f"[dim]{stats['live_entries']} live entries remain[/dim]")


def main():
    cli()


if __name__ == '__main__':
    main()
