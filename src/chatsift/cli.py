"""CLI interface for chatsift."""

from __future__ import annotations

import json
import logging
import sys
from collections import Counter
from pathlib import Path

import click

from .config import AppInfo, build_dedup_options, build_project_options
from .detector import detect_platform, parse_export
from .exceptions import ChatsiftError
from .filters import FilterCriteria
from .pipeline import PipelineResult, load_export, run_pipeline

PLATFORMS = ("chatgpt", "claude", "gemini", "perplexity")
STRATEGIES = ("keep-all", "keep-latest", "keep-best", "merge-versions")


def _print_version(ctx: click.Context, param: click.Parameter, value: bool):
    if not value or ctx.resilient_parsing:
        return
    info = ctx.obj if isinstance(ctx.obj, AppInfo) else AppInfo.load()
    click.echo(f"{info.name}, version {info.version}")
    ctx.exit()


def _load(file: str):
    try:
        return load_export(file)
    except ChatsiftError as e:
        raise click.ClickException(str(e)) from e


@click.group()
@click.option(
    "--version",
    is_flag=True,
    expose_value=False,
    is_eager=True,
    callback=_print_version,
    help="Show the version and exit.",
)
@click.option("-v", "--verbose", is_flag=True, help="Show detailed processing information")
@click.pass_context
def cli(ctx: click.Context, verbose: bool):
    """chatsift: Normalize, deduplicate and group AI chat exports.

    Reads ChatGPT, Claude, Gemini and Perplexity exports, collapses repeated
    conversations, links iterative revisions into version chains, and groups
    related conversations into projects.
    """
    if not isinstance(ctx.obj, AppInfo):
        ctx.obj = AppInfo.load()
    # Logging to stderr only; stdout carries command output
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
def detect(file: str):
    """Detect the platform an export file came from."""
    result = detect_platform(_load(file))

    if not result.is_valid:
        click.echo(click.style("Platform: unknown", fg="red"))
        for issue in result.issues:
            click.echo(f"  - {issue}")
        raise click.exceptions.Exit(1)

    click.echo(click.style(f"Platform: {result.platform}", fg="green"))
    click.echo(f"  Confidence: {result.confidence:.1%}")
    for issue in result.issues:
        click.echo(f"  - {issue}")


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("-p", "--platform", type=click.Choice(PLATFORMS), help="Force platform type")
def info(file: str, platform: str | None):
    """Show statistics about an export file."""
    try:
        parsed = parse_export(_load(file), platform=platform)
    except ChatsiftError as e:
        raise click.ClickException(str(e)) from e

    meta = parsed.metadata
    roles = Counter(m.role for c in parsed.conversations for m in c.messages)
    total_messages = sum(roles.values())

    click.echo()
    click.echo(click.style("Export Statistics", bold=True))
    click.echo(f"  Platform:       {meta.platform}")
    click.echo(f"  Export version: {meta.export_version}")
    click.echo(f"  Conversations:  {meta.total_conversations:,}")
    if meta.skipped_conversations:
        click.echo(f"  Skipped:        {meta.skipped_conversations:,} (malformed or empty)")
    click.echo(f"  Messages:       {total_messages:,}")
    for role, count in roles.most_common():
        click.echo(f"    {role}: {count:,}")
    click.echo(f"  Date range:     {meta.date_range.earliest} → {meta.date_range.latest}")
    click.echo()


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("-p", "--platform", type=click.Choice(PLATFORMS), help="Force platform type")
@click.option(
    "--dedupe-strategy",
    type=click.Choice(STRATEGIES),
    default="keep-all",
    show_default=True,
    help="Deduplication strategy",
)
@click.option("--similarity-threshold", type=float, default=None, help="Similarity threshold for iterations (0-1)")
@click.option("--duplicate-threshold", type=float, default=None, help="Threshold for marking as duplicate (0-1)")
@click.option("--group-iterations", is_flag=True, help="Group related conversations into version chains")
@click.option(
    "--preserve-timeline/--no-preserve-timeline",
    default=True,
    help="Seed clusters in chronological rather than input order",
)
@click.option("--keyword-threshold", type=int, default=None, help="Shared keywords needed to join a project")
@click.option("--min-conversations", type=int, default=None, help="Smallest project size")
@click.option("--after", type=click.DateTime(formats=["%Y-%m-%d"]), help="Only conversations after this date")
@click.option("--before", type=click.DateTime(formats=["%Y-%m-%d"]), help="Only conversations before this date")
@click.option("--first", type=int, help="Only the first N conversations")
@click.option("--last", type=int, help="Only the last N conversations")
@click.option("--sample", type=int, help="A random sample of N conversations")
@click.option("--contains", help="Only conversations containing this text")
@click.option("--json-out", type=click.Path(dir_okay=False, writable=True), help="Write the result as JSON")
@click.pass_context
def organize(
    ctx: click.Context,
    file: str,
    platform: str | None,
    dedupe_strategy: str,
    similarity_threshold: float | None,
    duplicate_threshold: float | None,
    group_iterations: bool,
    preserve_timeline: bool,
    keyword_threshold: int | None,
    min_conversations: int | None,
    after,
    before,
    first: int | None,
    last: int | None,
    sample: int | None,
    contains: str | None,
    json_out: str | None,
):
    """Deduplicate an export and group it into version chains and projects.

    Example:
        chatsift organize conversations.json --dedupe-strategy keep-latest --group-iterations
    """
    verbose = bool(ctx.parent and ctx.parent.params.get("verbose"))
    dedup_values = {
        "strategy": dedupe_strategy,
        "group_iterations": group_iterations,
        "preserve_timeline": preserve_timeline,
        "verbose": verbose,
    }
    if similarity_threshold is not None:
        dedup_values["similarity_threshold"] = similarity_threshold
    if duplicate_threshold is not None:
        dedup_values["duplicate_threshold"] = duplicate_threshold
    project_values = {}
    if keyword_threshold is not None:
        project_values["keyword_threshold"] = keyword_threshold
    if min_conversations is not None:
        project_values["min_conversations"] = min_conversations

    try:
        criteria = FilterCriteria(
            after=after.date() if after else None,
            before=before.date() if before else None,
            contains=contains,
            first=first,
            last=last,
            sample=sample,
        )
        result = run_pipeline(
            _load(file),
            platform=platform,
            criteria=criteria,
            dedup_options=build_dedup_options(**dedup_values),
            project_options=build_project_options(**project_values),
        )
    except ChatsiftError as e:
        raise click.ClickException(str(e)) from e
    except ValueError as e:
        raise click.BadParameter(str(e)) from e

    _print_summary(result, dedupe_strategy)

    if json_out:
        Path(json_out).write_text(json.dumps(result.model_dump(mode="json"), indent=2), encoding="utf-8")
        click.echo(f"  Written:        {json_out}")
    click.echo()


def _print_summary(result: PipelineResult, strategy: str):
    dedup = result.deduplication
    projects = result.projects

    click.echo()
    click.echo(click.style("Organize complete!", fg="green", bold=True))
    click.echo(f"  Platform:       {result.metadata.platform}")
    click.echo(f"  Selected:       {result.selected_conversations:,} conversations")
    click.echo(f"  Strategy:       {strategy}")
    if dedup.duplicates_removed:
        click.echo(
            click.style(f"  Removed:        {dedup.duplicates_removed:,} duplicate/redundant", fg="yellow")
        )
    else:
        click.echo("  Removed:        none")
    click.echo(f"  Kept:           {len(dedup.kept_conversations):,}")
    if dedup.version_chains_created:
        click.echo(f"  Version chains: {dedup.version_chains_created}")
        for chain in dedup.version_chains:
            click.echo(f"    {chain.project_name}: {len(chain.versions)} versions")
    click.echo(f"  Projects:       {len(projects.projects)}")
    for project in projects.projects:
        click.echo(f"    {project.name}: {len(project.conversations)} conversations")
    if projects.unassigned:
        click.echo(f"  Unassigned:     {len(projects.unassigned):,}")


def main():
    info = AppInfo.load()
    cli.main(obj=info, prog_name=info.name)
