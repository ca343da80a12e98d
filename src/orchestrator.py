"""Sequential documentation run over the configured features.

Each feature goes through collect, prompt, model call, parse and publish
in order. A failure stops only the feature it happened in; the run then
moves on to the next one.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Optional

from src.generators.feature_analyzer import FeatureAnalyzer
from src.generators.llm_client import TokenUsage
from src.output.notion_publisher import NotionPublisher
from src.parsers.files import build_file_records, collect_code_files
from src.parsers.structure import FileRecord
from src.utils.config import CollectorConfig, FeatureConfig, PipelineConfig

logger = logging.getLogger(__name__)

_RULE = "=" * 60


@dataclass
class FeatureOutcome:
    """What happened to one feature during a run.

    Attributes:
        name: Feature name.
        files_processed: Number of files sent to the model.
        estimated_cost_usd: Flat per-file cost estimate.
        usage: Tokens consumed by the model call.
        page_id: Id of the published page, if publishing succeeded.
        error: Error message if the feature failed.
    """

    name: str
    files_processed: int = 0
    estimated_cost_usd: float = 0.0
    usage: TokenUsage = field(default_factory=TokenUsage)
    page_id: Optional[str] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        """Whether the feature was published without error."""
        return self.error is None


@dataclass
class RunSummary:
    """Outcomes of a run, in feature order."""

    outcomes: list[FeatureOutcome] = field(default_factory=list)

    @property
    def total_cost_usd(self) -> float:
        """Sum of the per-feature cost estimates."""
        return sum(o.estimated_cost_usd for o in self.outcomes)

    @property
    def total_usage(self) -> TokenUsage:
        """Token usage summed over all outcomes."""
        return TokenUsage(
            input_tokens=sum(o.usage.input_tokens for o in self.outcomes),
            output_tokens=sum(o.usage.output_tokens for o in self.outcomes),
        )

    @property
    def succeeded(self) -> list[FeatureOutcome]:
        """Outcomes without an error, in feature order."""
        return [o for o in self.outcomes if o.succeeded]

    @property
    def failed(self) -> list[FeatureOutcome]:
        """Outcomes with an error, in feature order."""
        return [o for o in self.outcomes if not o.succeeded]


class Orchestrator:
    """Runs the documentation pipeline for a list of features."""

    def __init__(
        self,
        analyzer: FeatureAnalyzer,
        publisher: NotionPublisher,
        collector: Optional[CollectorConfig] = None,
        pipeline: Optional[PipelineConfig] = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            analyzer: Turns a feature's files into documentation.
            publisher: Writes documentation pages to Notion.
            collector: File selection settings. Uses defaults if not provided.
            pipeline: Pacing and cost settings. Uses defaults if not provided.
        """
        self.analyzer = analyzer
        self.publisher = publisher
        self.collector = collector or CollectorConfig()
        self.pipeline = pipeline or PipelineConfig()

    def select_files(self, feature: FeatureConfig) -> list[FileRecord]:
        """Collect a feature's files and cap them at ``max_files``.

        Raises:
            OSError: If the feature directory cannot be read.
        """
        all_files = collect_code_files(
            feature.path, self.collector.extensions, self.collector.exclude_dirs
        )
        logger.info("Found %d code files", len(all_files))

        files = all_files[: feature.max_files]
        if len(all_files) > feature.max_files:
            logger.info(
                "Limiting to first %d files to avoid rate limits", feature.max_files
            )
        return build_file_records(feature.path, files)

    def process_feature(self, feature: FeatureConfig) -> FeatureOutcome:
        """Run the full pipeline for one feature.

        Args:
            feature: The feature to document.

        Returns:
            The successful outcome.

        Raises:
            Exception: Whatever the failing stage raised.
        """
        records = self.select_files(feature)
        result = self.analyzer.analyze(feature.name, records)

        file_paths = ", ".join(r.name for r in records)
        page_id = self.publisher.publish(feature.name, result.analysis, file_paths)

        cost = len(records) * self.pipeline.cost_per_file
        logger.info(
            "Tokens used: %d (input: %d, output: %d)",
            result.usage.total_tokens,
            result.usage.input_tokens,
            result.usage.output_tokens,
        )
        logger.info("Estimated cost for this feature: ~$%.2f", cost)
        return FeatureOutcome(
            name=feature.name,
            files_processed=len(records),
            estimated_cost_usd=cost,
            usage=result.usage,
            page_id=page_id,
        )

    def run(self, features: list[FeatureConfig]) -> RunSummary:
        """Document every feature in order.

        Errors in one feature are logged and recorded on its outcome.
        Filesystem errors are not isolated and end the run.

        Args:
            features: Features to document.

        Returns:
            A RunSummary with one outcome per feature.

        Raises:
            OSError: If a feature directory or file cannot be read.
        """
        logger.info(
            "🚀 Starting documentation generation for %d features...", len(features)
        )
        summary = RunSummary()

        for index, feature in enumerate(features):
            logger.info(_RULE)
            logger.info("Processing: %s", feature.name)
            logger.info("Path: %s", feature.path)
            logger.info(_RULE)

            try:
                outcome = self.process_feature(feature)
            except OSError:
                raise
            except Exception as e:
                logger.error("❌ Error processing %s: %s", feature.name, e)
                logger.debug("Traceback for %s", feature.name, exc_info=True)
                logger.info("Continuing with next feature...")
                outcome = FeatureOutcome(name=feature.name, error=str(e))
            summary.outcomes.append(outcome)

            if index < len(features) - 1 and self.pipeline.delay_seconds > 0:
                logger.info(
                    "Waiting %.0f seconds before next feature...",
                    self.pipeline.delay_seconds,
                )
                time.sleep(self.pipeline.delay_seconds)

        logger.info(_RULE)
        logger.info("✅ Documentation generation complete!")
        logger.info("📊 Total estimated cost: ~$%.2f", summary.total_cost_usd)
        total = summary.total_usage
        logger.info(
            "🔢 Total tokens: %d (input: %d, output: %d)",
            total.total_tokens,
            total.input_tokens,
            total.output_tokens,
        )
        logger.info(
            "📄 Published %d of %d documentation pages in Notion",
            len(summary.succeeded),
            len(features),
        )
        logger.info(_RULE)
        return summary
