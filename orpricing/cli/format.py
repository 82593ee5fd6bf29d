"""Plain-text tables for terminal output."""

from __future__ import annotations

import click

from orpricing.constants import LEADERBOARD_DISPLAY_LIMIT, STATUS_DEGRADED
from orpricing.pricing.models import (
    CompareEntry,
    LeaderboardEntry,
    PriceReport,
    SearchEntry,
)

COMPARE_HEADER = (
    f"{'Model':<40}  {'Head P/M':<12}  {'Head C/M':<12}  "
    f"{'Exp P/M':<12}  {'Exp C/M':<12}  {'Providers':<10}  Context"
)


def fmt_price(value: float | None) -> str:
    if value is None:
        return "n/a"
    return f"${value:.2f}"


def fmt_context(tokens: int) -> str:
    return f"{tokens // 1024}K"


def status_text(status: int) -> str:
    if status >= 0:
        return click.style("ok", fg="green")
    if status == STATUS_DEGRADED:
        return click.style("degraded", fg="yellow")
    return click.style("DOWN", fg="red")


def _dim(text: str) -> str:
    return click.style(text, dim=True)


def _bold(text: str) -> str:
    return click.style(text, bold=True)


def format_search(results: list[SearchEntry], query: str) -> str:
    lines = [_bold(f"{len(results)} model(s) matching '{query}':"), ""]
    lines.append(
        "  "
        + _dim(f"{'Model ID':<45}  {'Prompt/M':<10}  {'Compl/M':<10}  Context")
    )
    for r in results:
        lines.append(
            f"  {r.id:<45}  ${r.prompt_per_m:<9g}  "
            f"${r.completion_per_m:<9g}  {fmt_context(r.context)}"
        )
    return "\n".join(lines)


def format_price(report: PriceReport) -> str:
    lines = ["", f"{_bold(report.name)}  {_dim(f'({report.id})')}"]
    lines.append(f"Context: {report.context_length:,} tokens")
    lines.append("")

    headline = (
        f"{fmt_price(report.headline_prompt)} / "
        f"{fmt_price(report.headline_completion)}"
    )
    lines.append(
        f"Headline:  {headline} per M tokens {_dim('(prompt/completion)')}"
    )
    expected = (
        f"{_bold(fmt_price(report.expected_prompt))} / "
        f"{_bold(fmt_price(report.expected_completion))}"
    )
    lines.append(
        f"Expected:  {expected} per M tokens "
        f"{_dim('(weighted by uptime, healthy only)')}"
    )

    lines.append("")
    lines.append(_bold("Provider Breakdown:"))
    lines.append(
        "  "
        + _dim(
            f"{'Provider':<18} {'Quant':<8} {'Prompt/M':<10} "
            f"{'Compl/M':<10} {'Uptime':<8} Status"
        )
    )

    for p in sorted(report.providers, key=lambda p: p.prompt_per_m):
        prompt = f"${p.prompt_per_m:.2f}"
        completion = f"${p.completion_per_m:.2f}"
        uptime = f"{p.uptime:.1f}%"
        lines.append(
            f"  {p.provider:<18} {p.quantization:<8} {prompt:<10} "
            f"{completion:<10} {uptime:<8} {status_text(p.status)}"
        )

    lines.append("")
    return "\n".join(lines)


def _compare_row(entry: CompareEntry) -> str:
    providers = f"{entry.healthy}/{entry.providers}"
    return (
        f"{entry.name:<40}  ${entry.headline_prompt:<11g}  "
        f"${entry.headline_completion:<11g}  "
        f"{fmt_price(entry.expected_prompt):<12}  "
        f"{fmt_price(entry.expected_completion):<12}  "
        f"{providers:<10}  {fmt_context(entry.context)}"
    )


def format_compare(entries: list[CompareEntry]) -> str:
    lines = ["", _bold("Model Comparison"), "", "  " + _dim(COMPARE_HEADER)]
    lines.extend(f"  {_compare_row(entry)}" for entry in entries)
    lines.append("")
    return "\n".join(lines)


def format_configured(entries: list[CompareEntry]) -> str:
    lines = [
        "",
        f"{_bold('Configured Models')} {_dim('(from openclaw.json)')}",
        "",
        "  " + _dim(f"{'':<3} {COMPARE_HEADER}"),
    ]
    for entry in entries:
        star = click.style("*", fg="cyan") if entry.primary else " "
        lines.append(f"  {star}   {_compare_row(entry)}")
    lines.append("")
    return "\n".join(lines)


def format_leaderboard(
    entries: list[LeaderboardEntry],
    title: str,
    cached_at: str,
    configured_aliases: list[str],
) -> str:
    lines = [
        "",
        f"{_bold(f'{title} Leaderboard')}  {_dim(f'(cached: {cached_at})')}",
        "",
        "  "
        + _dim(f"{'Rank':<5} {'':<3} {'Model':<30} {'Author':<20} Tokens"),
    ]

    for entry in entries[:LEADERBOARD_DISPLAY_LIMIT]:
        mark = " "
        model = entry.model.lower()
        if any(a and a.lower() in model for a in configured_aliases):
            mark = click.style("*", fg="cyan")
        rank = f"#{entry.rank}"
        lines.append(
            f"  {rank:<5} {mark}  {entry.model:<30} "
            f"{entry.author:<20} {entry.tokens}"
        )

    lines.append("")
    return "\n".join(lines)
