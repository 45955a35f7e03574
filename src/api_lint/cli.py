"""CLI entry point for api-lint."""

import json
import logging
from pathlib import Path

import click

from api_lint.config import RulesConfig, load_rules_config
from api_lint.context.factory import context_from_file
from api_lint.core.violation import Result
from api_lint.engine import RulesEngine, default_rules
from api_lint.errors import ApiLintError


def _format_result(doc_path: Path, result: Result) -> str:
    location = f"{doc_path}:{result.line}" if result.line is not None else str(doc_path)
    return f"{location} {result.pointer} [{result.rule_id}] {result.description}"


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def main(verbose: bool):
    """api-lint: check Swagger / OpenAPI descriptions against API guidelines."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.argument("doc_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-c", "--config", "config_path", default=None, type=click.Path(exists=True, dir_okay=False, path_type=Path), help="YAML rules configuration file.")
@click.option("--format", "fmt", default="text", type=click.Choice(["text", "json"]), help="Output format.")
def check(doc_path: Path, config_path: Path | None, fmt: str):
    """Check an API description and report guideline violations."""
    try:
        config = load_rules_config(config_path) if config_path else RulesConfig()
        context = context_from_file(doc_path)
    except ApiLintError as e:
        raise click.ClickException(str(e)) from e

    results = RulesEngine(default_rules(config)).evaluate(context)

    if fmt == "json":
        click.echo(json.dumps([r.model_dump() for r in results], indent=2))
        return

    for result in results:
        click.echo(_format_result(doc_path, result))
    click.echo(f"{len(results)} violation(s) found in {doc_path} ({context.dialect.value}).")


@main.command("list-rules")
def list_rules():
    """List the built-in rules."""
    for rule in default_rules():
        click.echo(f"{rule.rule_id}: {rule.title}")
