"""Feature analysis pipeline using the LLM and templates.

Builds the analysis prompt for a feature, sends it to Claude and
parses the structured JSON documentation out of the reply.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from src.generators.llm_client import LLMClient, TokenUsage
from src.generators.prompt_builder import PromptBuilder
from src.parsers.response import ResponseParseError, parse_analysis
from src.parsers.structure import AnalysisResult, FileRecord

logger = logging.getLogger(__name__)


@dataclass
class FeatureAnalysis:
    """Result of analyzing one feature.

    Attributes:
        analysis: The parsed documentation.
        usage: Token usage of the model call.
    """

    analysis: AnalysisResult
    usage: TokenUsage


class FeatureAnalyzer:
    """Turns a feature's files into an AnalysisResult via the LLM."""

    def __init__(
        self,
        llm_client: LLMClient,
        prompt_builder: Optional[PromptBuilder] = None,
    ) -> None:
        """Initialize the analyzer.

        Args:
            llm_client: The LLM client for API calls.
            prompt_builder: Prompt builder. Creates a default instance
                if not provided.
        """
        self.llm = llm_client
        self.prompts = prompt_builder or PromptBuilder()

    def analyze(
        self, feature_name: str, records: list[FileRecord]
    ) -> FeatureAnalysis:
        """Analyze a feature.

        Args:
            feature_name: Name of the feature.
            records: Files belonging to the feature.

        Returns:
            The parsed analysis together with token usage.

        Raises:
            PromptTooLargeError: If the prompt exceeds the configured limit.
            anthropic.APIError: If the model call fails.
            ResponseParseError: If the reply is not the expected JSON.
        """
        logger.info("Analyzing %s with %d files...", feature_name, len(records))
        prompt = self.prompts.build(feature_name, records)
        result = self.llm.generate(prompt)

        try:
            analysis = parse_analysis(result.content)
        except ResponseParseError as e:
            logger.error("Failed to parse response for %s: %s", feature_name, e)
            logger.error("Response: %s", e.raw_text)
            raise

        return FeatureAnalysis(analysis=analysis, usage=result.usage)
