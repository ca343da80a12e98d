"""CLI commands for Notion Feature Docs.

Provides the Click-based command group 'notion-docs' with subcommands
for publishing feature documentation, listing configured features and
estimating API cost.
"""

import logging
import sys
from typing import Optional

import click

from src import __version__
from src.generators.feature_analyzer import FeatureAnalyzer
from src.generators.llm_client import LLMClient
from src.generators.prompt_builder import PromptBuilder
from src.orchestrator import Orchestrator
from src.output.notion_publisher import NotionPublisher
from src.utils.config import AppConfig, FeatureConfig, load_config
from src.utils.logging import setup_logging

logger = logging.getLogger(__name__)

_config_option = click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to config.yaml.",
)


def _load(config_path: Optional[str]) -> AppConfig:
    """Load configuration and set up logging from it."""
    config = load_config(config_path)
    setup_logging(
        level=config.logging.level,
        log_format=config.logging.format,
        log_file=config.logging.file,
    )
    return config


def _select_features(
    config: AppConfig, names: tuple[str, ...]
) -> list[FeatureConfig]:
    """Filter configured features by name, keeping config order.

    Raises:
        click.BadParameter: If a requested name is not configured.
    """
    if not names:
        return list(config.features)

    known = {f.name for f in config.features}
    unknown = [n for n in names if n not in known]
    if unknown:
        raise click.BadParameter(
            f"Unknown feature(s): {', '.join(unknown)}", param_hint="--feature"
        )
    return [f for f in config.features if f.name in names]


def _build_prompt_builder(config: AppConfig) -> PromptBuilder:
    """Create a PromptBuilder using the collector limits from the config."""
    return PromptBuilder(
        max_file_chars=config.collector.max_file_chars,
        max_prompt_tokens=config.collector.max_prompt_tokens,
    )


def build_orchestrator(config: AppConfig) -> Orchestrator:
    """Wire the pipeline components from configuration.

    Args:
        config: Application configuration.

    Returns:
        A ready-to-run Orchestrator.
    """
    llm = LLMClient(config=config.api)
    analyzer = FeatureAnalyzer(llm, prompt_builder=_build_prompt_builder(config))
    publisher = NotionPublisher(config=config.notion)
    return Orchestrator(
        analyzer,
        publisher,
        collector=config.collector,
        pipeline=config.pipeline,
    )


@click.group()
@click.version_option(version=__version__, prog_name="notion-docs")
def docs() -> None:
    """Notion Feature Docs: document code features as Notion pages."""


@docs.command()
@_config_option
@click.option(
    "--feature",
    "feature_names",
    multiple=True,
    help="Only process the named feature. May be repeated.",
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Show which files would be sent without calling any service.",
)
def run(
    config_path: Optional[str], feature_names: tuple[str, ...], dry_run: bool
) -> None:
    """Generate documentation and publish it to Notion.

    Processes every configured feature in order. Exits with status 0
    when the run completes, even if some features failed.
    """
    config = _load(config_path)
    features = _select_features(config, feature_names)
    if not features:
        click.echo("No features configured.")
        return

    orchestrator = build_orchestrator(config)

    if dry_run:
        for feature in features:
            records = orchestrator.select_files(feature)
            click.echo(f"{feature.name}: {len(records)} files")
            for record in records:
                click.echo(f"  Would send: {record.name}")
        click.echo("Dry run complete. No API calls made.")
        return

    try:
        summary = orchestrator.run(features)
    except Exception:
        logger.exception("Documentation run aborted")
        sys.exit(1)

    click.echo(
        f"Published {len(summary.succeeded)} of {len(summary.outcomes)} features "
        f"(estimated cost: ~${summary.total_cost_usd:.2f})"
    )
    usage = summary.total_usage
    click.echo(
        f"Tokens used: {usage.total_tokens:,} "
        f"(input: {usage.input_tokens:,}, output: {usage.output_tokens:,})"
    )
    for outcome in summary.failed:
        click.echo(f"  Failed: {outcome.name}: {outcome.error}")


@docs.command()
@_config_option
def features(config_path: Optional[str]) -> None:
    """List the configured features."""
    config = _load(config_path)
    if not config.features:
        click.echo("No features configured.")
        return
    for feature in config.features:
        click.echo(f"{feature.name}  {feature.path}  (max {feature.max_files} files)")


@docs.command()
@_config_option
def estimate(config_path: Optional[str]) -> None:
    """Estimate API cost without generating documentation.

    Builds each feature's prompt and prices it against the configured
    model, assuming a reply of max_tokens.
    """
    config = _load(config_path)
    orchestrator = build_orchestrator(config)
    builder = PromptBuilder(
        max_file_chars=config.collector.max_file_chars, max_prompt_tokens=0
    )
    llm = LLMClient(config=config.api)

    total_input_tokens = 0
    total_cost = 0.0
    for feature in config.features:
        records = orchestrator.select_files(feature)
        prompt = builder.build(feature.name, records)
        est = llm.estimate_cost(prompt)
        total_input_tokens += est.input_tokens
        total_cost += est.total_cost_usd
        click.echo(
            f"{feature.name}: {len(records)} files, "
            f"~{est.input_tokens:,} input tokens, ${est.total_cost_usd:.4f}"
        )

    click.echo(f"Estimated input tokens: {total_input_tokens:,}")
    click.echo(f"Estimated cost: ${total_cost:.4f} USD")
    click.echo(f"Model: {config.api.model}")
