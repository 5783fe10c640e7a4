"""Click CLI interface definitions.

Defines the command-line interface structure and routes commands to the
runner.
"""

from __future__ import annotations

import json
from pathlib import Path

import click
from dotenv import load_dotenv

from EsQuery.cli.commands import ClauseOptions, GetCommand, ScrollCommand, SearchCommand
from EsQuery.cli.runner import CommandRunner
from EsQuery.config import DEFAULT_CONFIG_PATH, load_config, load_config_with_defaults


def _clause_options(func):
    options = [
        click.option("--term", "terms", multiple=True, metavar="FIELD=VALUE", help="Filter on an exact value."),
        click.option("--match", "matches", multiple=True, metavar="FIELD=VALUE", help="Full-text clause that must match."),
        click.option("--should", "shoulds", multiple=True, metavar="FIELD=VALUE", help="Full-text clause that should match."),
        click.option("--not", "excludes", multiple=True, metavar="FIELD=VALUE", help="Exclude an exact value."),
        click.option("--exists", "exists", multiple=True, metavar="FIELD", help="Require the field to exist."),
        click.option("--min-should", type=int, default=None, help="Minimum number of should clauses to match."),
        click.option("--sort", multiple=True, metavar="FIELD[:desc]", help="Sort key; repeat for tie-breaks."),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _clauses(terms, matches, shoulds, excludes, exists, min_should, sort) -> ClauseOptions:
    return ClauseOptions(
        terms=tuple(terms),
        matches=tuple(matches),
        shoulds=tuple(shoulds),
        excludes=tuple(excludes),
        exists=tuple(exists),
        min_should=min_should,
        sort=tuple(sort),
    )


@click.group(help="EsQuery: query and stream documents from Elasticsearch.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=DEFAULT_CONFIG_PATH,
    show_default=True,
    help="Path to YAML config file, merged onto the defaults.",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Path) -> None:
    """CLI entry group.

    Loads environment variables from .env file before processing config.
    """
    load_dotenv()

    if config_path != DEFAULT_CONFIG_PATH and DEFAULT_CONFIG_PATH.exists():
        cfg = load_config_with_defaults(config_path)
    else:
        cfg = load_config(config_path)
    ctx.obj = CommandRunner(cfg)


@cli.command("ping")
@click.pass_context
def ping_cmd(ctx: click.Context) -> None:
    """Print cluster health."""
    runner: CommandRunner = ctx.obj
    runner.run(ctx.command.name, lambda client: click.echo(json.dumps(client.health(), sort_keys=True)))


@cli.command("search")
@click.argument("index")
@_clause_options
@click.option("--page", type=int, default=None, help="1-based page number (default 1).")
@click.option("--size", type=int, default=None, help="Documents per page (default query.page_size).")
@click.pass_context
def search_cmd(ctx: click.Context, index: str, page: int | None, size: int | None, **clause_args) -> None:
    """Print one page of documents matching the clauses."""
    runner: CommandRunner = ctx.obj
    clauses = _clauses(**clause_args)
    runner.run(
        ctx.command.name,
        lambda client: SearchCommand(client=client, index=index, clauses=clauses, page=page, size=size).execute(),
    )


@cli.command("scroll")
@click.argument("index")
@_clause_options
@click.option("--batch-size", type=int, default=None, help="Hits per scroll batch.")
@click.option("--alive", default=None, help="Scroll cursor lifetime, e.g. 5m.")
@click.pass_context
def scroll_cmd(ctx: click.Context, index: str, batch_size: int | None, alive: str | None, **clause_args) -> None:
    """Stream every document matching the clauses."""
    runner: CommandRunner = ctx.obj
    clauses = _clauses(**clause_args)
    runner.run(
        ctx.command.name,
        lambda client: ScrollCommand(
            client=client, index=index, clauses=clauses, batch_size=batch_size, alive=alive
        ).execute(),
    )


@cli.command("get")
@click.argument("index")
@click.argument("doc_id")
@click.pass_context
def get_cmd(ctx: click.Context, index: str, doc_id: str) -> None:
    """Print one document by id."""
    runner: CommandRunner = ctx.obj
    runner.run(ctx.command.name, lambda client: GetCommand(client=client, index=index, doc_id=doc_id).execute())


@cli.command("create-index")
@click.argument("name")
@click.option(
    "--mapping",
    "mapping_path",
    type=click.Path(path_type=Path, dir_okay=False, exists=True),
    default=None,
    help="JSON file with index settings and mappings.",
)
@click.pass_context
def create_index_cmd(ctx: click.Context, name: str, mapping_path: Path | None) -> None:
    """Create an index."""
    runner: CommandRunner = ctx.obj
    mapping = mapping_path.read_text(encoding="utf-8") if mapping_path else None
    runner.run(ctx.command.name, lambda client: client.create_index(name, mapping))
    click.echo(f"created {name}")


@cli.command("delete-index")
@click.argument("name")
@click.pass_context
def delete_index_cmd(ctx: click.Context, name: str) -> None:
    """Delete one or more comma-separated indices."""
    runner: CommandRunner = ctx.obj
    runner.run(ctx.command.name, lambda client: client.delete_index(name))
    click.echo(f"deleted {name}")


@cli.command("index-exists")
@click.argument("name")
@click.pass_context
def index_exists_cmd(ctx: click.Context, name: str) -> None:
    """Print whether an index exists."""
    runner: CommandRunner = ctx.obj
    exists = runner.run(ctx.command.name, lambda client: client.index_exists(name))
    click.echo("true" if exists else "false")
