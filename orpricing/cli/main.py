"""or-pricing CLI entry point."""
from __future__ import annotations

import dataclasses
import functools
import json
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar

import click

from orpricing import __version__
from orpricing.cache import TimedCache, load_cache_settings
from orpricing.cli import format as fmt
from orpricing.config import default_config_path, read_agent_config
from orpricing.constants import DEFAULT_APP_URL
from orpricing.engine import ConfigError, PricingError
from orpricing.leaderboard.store import LeaderboardStore, resolve_target
from orpricing.logging import configure_logging
from orpricing.pricing.client import OpenRouterClient
from orpricing.pricing.models import CompareEntry
from orpricing.service import PricingService

F = TypeVar("F", bound=Callable[..., Any])

ALIASES = {
    "s": "search",
    "p": "price",
    "cmp": "compare",
    "cfg": "configured",
    "lb": "leaderboard",
}

EXIT_CODES = {
    "SUCCESS": 0,
    "GENERAL": 1,
    "NETWORK": 2,
    "NOT_FOUND": 3,
    "AMBIGUOUS": 4,
    "CONFIG": 5,
    "SCRAPE": 6,
    "INVALID_INPUT": 7,
}


class AliasedGroup(click.Group):
    """Group that also accepts the short command aliases."""

    def get_command(
        self, ctx: click.Context, cmd_name: str
    ) -> click.Command | None:
        return super().get_command(ctx, ALIASES.get(cmd_name, cmd_name))

    def resolve_command(
        self, ctx: click.Context, args: list[str]
    ) -> tuple[str | None, click.Command | None, list[str]]:
        _, cmd, remaining = super().resolve_command(ctx, args)
        return (cmd.name if cmd else None), cmd, remaining


def handle_errors(func: F) -> F:
    """Print domain errors to stderr and exit with their exit code."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        ctx = click.get_current_context()
        try:
            return func(*args, **kwargs)
        except PricingError as exc:
            logging.getLogger(__name__).info(
                "command_failed",
                extra={"event": "command_failed", "error_code": exc.code},
            )
            if kwargs.get("as_json"):
                click.echo(json.dumps(exc.to_dict(), indent=2), err=True)
            else:
                click.echo(f"error: {exc.message}", err=True)
            ctx.exit(exc.exit_code)

    return wrapper  # type: ignore[return-value]


def json_option(func: F) -> F:
    return click.option(
        "--json", "as_json", is_flag=True, help="Output structured JSON"
    )(func)


def _service(ctx: click.Context) -> PricingService:
    return ctx.obj["service"]


def _echo(ctx: click.Context, text: str) -> None:
    click.echo(text, color=ctx.obj.get("color"))


def _dump(payload: Any) -> str:
    return json.dumps(payload, indent=2)


def _compare_dict(entry: CompareEntry) -> dict[str, Any]:
    payload = dataclasses.asdict(entry)
    if payload["primary"] is None:
        del payload["primary"]
    return payload


def build_service() -> tuple[PricingService, OpenRouterClient]:
    """Wire the cache, HTTP client and leaderboard store once per process."""
    cache = TimedCache(load_cache_settings())
    client = OpenRouterClient(cache)
    store = LeaderboardStore(cache, client.fetch_page)
    return PricingService(client, store), client


@click.group(cls=AliasedGroup)
@click.version_option(__version__, prog_name="or-pricing")
@click.option("--no-color", is_flag=True, help="Disable colored output")
@click.option("--verbose", is_flag=True, help="Emit JSON logs at INFO level")
@click.pass_context
def cli(ctx: click.Context, no_color: bool, verbose: bool) -> None:
    """OpenRouter model pricing, weighted by provider uptime."""
    configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["color"] = False if no_color else None
    if "service" not in ctx.obj:
        service, client = build_service()
        ctx.with_resource(client)
        ctx.obj["service"] = service


@cli.command()
@click.argument("query")
@json_option
@click.pass_context
@handle_errors
def search(ctx: click.Context, query: str, as_json: bool) -> None:
    """Search models by name or ID."""
    results = _service(ctx).search(query)
    if as_json:
        click.echo(_dump([dataclasses.asdict(r) for r in results]))
    else:
        _echo(ctx, fmt.format_search(results, query))


@cli.command()
@click.argument("model")
@json_option
@click.pass_context
@handle_errors
def price(ctx: click.Context, model: str, as_json: bool) -> None:
    """Per-provider pricing plus the weighted expected price."""
    report = _service(ctx).price(model)
    if as_json:
        click.echo(_dump(report.to_dict()))
    else:
        _echo(ctx, fmt.format_price(report))


@cli.command()
@click.argument("models", nargs=-1)
@json_option
@click.pass_context
@handle_errors
def compare(
    ctx: click.Context, models: tuple[str, ...], as_json: bool
) -> None:
    """Side-by-side comparison of multiple models."""
    entries = _service(ctx).compare(list(models))
    if as_json:
        click.echo(_dump([_compare_dict(e) for e in entries]))
    else:
        _echo(ctx, fmt.format_compare(entries))


@cli.command()
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Agent config file (default: ~/.openclaw/openclaw.json)",
)
@json_option
@click.pass_context
@handle_errors
def configured(
    ctx: click.Context, config_path: Path | None, as_json: bool
) -> None:
    """Pricing for models configured in openclaw.json."""
    path = config_path or default_config_path()
    config = read_agent_config(path)
    if config is None:
        raise ConfigError(f"openclaw config not found at {path}")
    if not config.model_ids:
        raise ConfigError(f"no models configured in {path}")

    entries = _service(ctx).configured(config)
    if as_json:
        click.echo(_dump([_compare_dict(e) for e in entries]))
    else:
        _echo(ctx, fmt.format_configured(entries))


@cli.command()
@json_option
@click.option("--refresh", is_flag=True, help="Scrape fresh leaderboard data")
@click.option(
    "--update-cache",
    is_flag=True,
    help="Read JSON from stdin and write it to the cache",
)
@click.option(
    "--app",
    "app_url",
    is_flag=False,
    flag_value=DEFAULT_APP_URL,
    default=None,
    help=f"Leaderboard for a specific app (default: {DEFAULT_APP_URL})",
)
@click.pass_context
@handle_errors
def leaderboard(
    ctx: click.Context,
    as_json: bool,
    refresh: bool,
    update_cache: bool,
    app_url: str | None,
) -> None:
    """Top models on OpenRouter, from the scraped leaderboard cache."""
    service = _service(ctx)
    target = resolve_target(app_url)

    if update_cache:
        text = click.get_text_stream("stdin").read()
        count = service.seed_leaderboard(target, text)
        click.echo(f"Leaderboard cache updated ({count} entries)")
        return

    if refresh:
        click.echo(f"Fetching {target.title} leaderboard...", err=True)
    snapshot = service.leaderboard(target, refresh=refresh)
    if refresh and snapshot is not None:
        click.echo(
            f"Leaderboard refreshed ({len(snapshot.entries)} entries)",
            err=True,
        )

    if snapshot is None:
        suffix = f" --app {app_url}" if app_url else ""
        click.echo("No leaderboard cache found.\n")
        click.echo("To populate, run:")
        click.echo(f"  or-pricing leaderboard --refresh{suffix}\n")
        click.echo("Or pipe JSON:")
        click.echo(
            "  echo '{\"entries\":[...]}' | "
            f"or-pricing leaderboard --update-cache{suffix}"
        )
        return

    if as_json:
        click.echo(_dump(snapshot.to_dict()))
        return

    config = read_agent_config()
    aliases = config.aliases if config else []
    _echo(
        ctx,
        fmt.format_leaderboard(
            snapshot.entries,
            target.title,
            snapshot.cached_at or "unknown",
            aliases,
        ),
    )


@cli.command()
def schema() -> None:
    """Output JSON schemas for all commands (agent discovery)."""
    compare_output = {
        "id": "string",
        "name": "string",
        "context": "number",
        "headline_prompt": "number",
        "headline_completion": "number",
        "expected_prompt": "number | null",
        "expected_completion": "number | null",
        "providers": "number",
        "healthy": "number",
    }
    schemas = {
        "commands": {
            "price": {
                "args": "<model>",
                "flags": ["--json"],
                "output": {
                    "id": "string",
                    "name": "string",
                    "context_length": "number",
                    "headline": {
                        "prompt_per_m": "number",
                        "completion_per_m": "number",
                    },
                    "expected": {
                        "prompt_per_m": "number | null",
                        "completion_per_m": "number | null",
                    },
                    "providers": [
                        {
                            "provider": "string",
                            "quantization": "string",
                            "prompt_per_m": "number",
                            "completion_per_m": "number",
                            "discount": "number",
                            "status": "number",
                            "uptime": "number",
                        }
                    ],
                },
            },
            "search": {
                "args": "<query>",
                "flags": ["--json"],
                "output": [
                    {
                        "id": "string",
                        "name": "string",
                        "context": "number",
                        "prompt_per_m": "number",
                        "completion_per_m": "number",
                    }
                ],
            },
            "compare": {
                "args": "<models...>",
                "flags": ["--json"],
                "output": [compare_output],
            },
            "configured": {
                "args": "",
                "flags": ["--json", "--config <path>"],
                "output": [{**compare_output, "primary": "boolean"}],
            },
            "leaderboard": {
                "args": "",
                "flags": [
                    "--json",
                    "--refresh",
                    "--update-cache",
                    "--app [url]",
                ],
                "output": {
                    "entries": [
                        {
                            "rank": "number",
                            "model": "string",
                            "author": "string",
                            "tokens": "string",
                        }
                    ],
                    "cached_at": "string",
                    "source": "string",
                },
            },
        },
        "exit_codes": EXIT_CODES,
    }
    click.echo(_dump(schemas))


def main() -> None:
    cli(obj={})
