"""waitly: command line access to a Waitly waitlist."""

import asyncio
import sys
from typing import Any, Awaitable, Callable, Dict, Iterable

import click
from rich.console import Console
from rich.markup import escape

from .client import WaitlyClient, create_waitly_client
from .config import get_settings
from .exceptions import BadInput, ConfigError, WaitlyError
from .logging_config import setup_logging
from .models import WaitlyEntry

console = Console()


def parse_pairs(values: Iterable[str], option: str) -> Dict[str, str]:
    """Parse repeated KEY=VALUE options into a dict."""
    pairs = {}
    for value in values:
        key, sep, item = value.partition("=")
        if not sep or not key.strip():
            raise click.BadParameter(f"expected KEY=VALUE, got {value!r}", param_hint=option)
        pairs[key.strip()] = item.strip()
    return pairs


def run_operation(ctx: click.Context, operation: Callable[[WaitlyClient], Awaitable[Any]]) -> Any:
    """Build a client from settings + CLI overrides and run one operation."""
    try:
        config = get_settings().to_config(**ctx.obj)
        client = create_waitly_client(config)
        return asyncio.run(_with_client(client, operation))
    except (ConfigError, BadInput, WaitlyError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        sys.exit(1)


async def _with_client(client: WaitlyClient, operation: Callable[[WaitlyClient], Awaitable[Any]]) -> Any:
    async with client:
        return await operation(client)


@click.group()
@click.option("--waitlist-id", help="Waitlist ID (default: $WAITLY_WAITLIST_ID)")
@click.option("--api-key", help="API key (default: $WAITLY_API_KEY)")
@click.option("--api-url", help="API base URL")
@click.option("--timeout-ms", type=int, help="Request timeout in milliseconds")
@click.option("--retries", type=click.IntRange(min=1), help="Total attempts per request")
@click.option("--header", "headers", multiple=True, help="Extra header as KEY=VALUE (repeatable)")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.option("--json-logs", is_flag=True, help="Emit logs as JSON")
@click.pass_context
def main(
    ctx,
    waitlist_id: str | None,
    api_key: str | None,
    api_url: str | None,
    timeout_ms: int | None,
    retries: int | None,
    headers: tuple[str, ...],
    verbose: bool,
    json_logs: bool,
):
    """
    Manage a Waitly waitlist from the command line.

    \b
    Examples:
        waitly join someone@example.com --referral FRIEND42
        waitly count
        waitly check someone@example.com
    """
    settings = get_settings()
    setup_logging(level="DEBUG" if verbose else settings.log_level, json_format=json_logs)

    ctx.obj = {
        "waitlist_id": waitlist_id,
        "api_key": api_key,
        "api_url": api_url,
        "timeout_ms": timeout_ms,
        "retry_attempts": retries,
        "headers": parse_pairs(headers, "--header") or None,
    }


@main.command()
@click.argument("email")
@click.option("--referral", help="Referral code of the person who invited this registrant")
@click.option("--utm", multiple=True, help="UTM parameter as KEY=VALUE (repeatable)")
@click.option("--meta", multiple=True, help="Metadata as KEY=VALUE (repeatable)")
@click.pass_context
def join(ctx, email: str, referral: str | None, utm: tuple[str, ...], meta: tuple[str, ...]):
    """Add EMAIL to the waitlist."""
    entry = WaitlyEntry(
        email=email,
        referred_by_code=referral,
        utm=parse_pairs(utm, "--utm") or None,
        metadata=parse_pairs(meta, "--meta") or None,
    )
    result = run_operation(ctx, lambda client: client.create_entry(entry))
    console.print(
        f"[green]✓[/green] Joined as {result.get('email', email)} (id: {result.get('id', '-')})"
    )


@main.command()
@click.pass_context
def count(ctx):
    """Show the number of entries in the waitlist."""
    total = run_operation(ctx, lambda client: client.get_entries_count())
    console.print(f"Entries: {total}")


@main.command()
@click.argument("email")
@click.pass_context
def check(ctx, email: str):
    """Check whether EMAIL is already registered."""
    exists = run_operation(ctx, lambda client: client.check_email_exists(email))
    if exists:
        console.print(f"[green]{escape(email)} is registered[/green]")
    else:
        console.print(f"[yellow]{escape(email)} is not registered[/yellow]")


if __name__ == "__main__":
    main()
