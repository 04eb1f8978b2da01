"""
Recall CLI

Inspection commands for query parsing, strategy selection and configuration.

    recall-cli parse "recent updates from Acme Corp"
    recall-cli strategy "who works with Jane"
    recall-cli config show --config retrieval.yaml
"""

import json
import logging

import click
import structlog

from recall import __version__
from recall.config import load_config
from recall.exceptions import ConfigError
from recall.query import QueryParser, suggest_strategy, apply_strategy


def configure_logging(verbose: bool) -> None:
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer()
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.DEBUG if verbose else logging.WARNING),
    )


def _load(config_path):
    try:
        return load_config(config_path)
    except ConfigError as e:
        raise click.ClickException(str(e))


@click.group()
@click.version_option(version=__version__, prog_name='recall-cli')
@click.option('--verbose', '-v', is_flag=True, help='Show debug logs')
def cli(verbose):
    """Recall - hybrid retrieval engine inspection tools."""
    configure_logging(verbose)


@cli.command('parse')
@click.argument('query')
def parse(query):
    """Parse QUERY and print the structured query as JSON.

    Example:
        recall-cli parse "what is the Falcon project"
    """
    structured = QueryParser().parse(query)
    click.echo(json.dumps(structured.to_dict(), indent=2))


@cli.command('strategy')
@click.argument('query')
@click.option('--config', 'config_path', type=click.Path(exists=True), help='YAML config file')
def strategy(query, config_path):
    """Print the effective retrieval weights for QUERY."""
    config = _load(config_path)
    structured = QueryParser().parse(query)
    suggestion = suggest_strategy(structured)
    weights = apply_strategy(config.weights, suggestion)

    click.echo(f"Query type:     {structured.query_type.value}")
    click.echo(f"Confidence:     {structured.confidence:.2f}")
    click.echo(f"Recency boost:  {'on' if suggestion.use_recency_boost else 'off'}")
    click.echo(json.dumps(weights.model_dump(), indent=2))


@cli.group()
def config():
    """Inspect retrieval configuration."""
    pass


@config.command('show')
@click.option('--config', 'config_path', type=click.Path(exists=True), help='YAML config file')
def config_show(config_path):
    """Print the loaded configuration as JSON."""
    click.echo(json.dumps(_load(config_path).model_dump(), indent=2))


if __name__ == '__main__':
    cli()
