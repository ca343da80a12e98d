"""Prompt construction for feature analysis.

Reads a feature's files, truncates oversized ones, and renders the
analysis template around the bundled code.
"""

import logging
from typing import Iterable, Optional

from src.generators.llm_client import count_tokens
from src.generators.template_manager import TemplateManager
from src.parsers.structure import FileRecord

logger = logging.getLogger(__name__)

TRUNCATION_MARKER = "\n... (truncated)"


class PromptTooLargeError(ValueError):
    """Raised when a rendered prompt exceeds the aggregate token limit."""

    def __init__(self, feature_name: str, tokens: int, limit: int) -> None:
        """Initialize the error.

        Args:
            feature_name: Feature whose prompt is too large.
            tokens: Estimated prompt size in tokens.
            limit: Configured token limit.
        """
        super().__init__(
            f"Prompt for '{feature_name}' is ~{tokens} tokens, over the "
            f"limit of {limit}. Lower max_files or max_file_chars."
        )
        self.tokens = tokens
        self.limit = limit


def truncate_content(content: str, max_chars: int) -> str:
    """Cut content down to ``max_chars`` characters plus a marker.

    Args:
        content: File content.
        max_chars: Largest length passed through unchanged.

    Returns:
        The content itself when short enough, otherwise its first
        ``max_chars`` characters followed by the truncation marker.
    """
    if len(content) > max_chars:
        return content[:max_chars] + TRUNCATION_MARKER
    return content


def build_code_blob(records: Iterable[FileRecord], max_chars: int) -> str:
    """Concatenate files into one text block, each under a filename header.

    Args:
        records: Files to include, in prompt order.
        max_chars: Per-file truncation threshold.

    Returns:
        The concatenated code.

    Raises:
        OSError: If a file cannot be read.
    """
    parts = []
    for record in records:
        content = record.path.read_text(encoding="utf-8", errors="replace")
        parts.append(
            f"\n\n--- File: {record.name} ---\n{truncate_content(content, max_chars)}"
        )
    return "".join(parts)


class PromptBuilder:
    """Builds the analysis prompt for one feature."""

    def __init__(
        self,
        template_manager: Optional[TemplateManager] = None,
        max_file_chars: int = 5000,
        max_prompt_tokens: int = 0,
    ) -> None:
        """Initialize the prompt builder.

        Args:
            template_manager: Template manager for prompts. Creates
                a default instance if not provided.
            max_file_chars: Per-file truncation threshold.
            max_prompt_tokens: Estimated token ceiling for the whole
                prompt. 0 disables the check.
        """
        self.templates = template_manager or TemplateManager()
        self.max_file_chars = max_file_chars
        self.max_prompt_tokens = max_prompt_tokens

    def build(self, feature_name: str, records: list[FileRecord]) -> str:
        """Render the prompt for a feature.

        Args:
            feature_name: Name of the feature.
            records: Files to include.

        Returns:
            The complete prompt text.

        Raises:
            PromptTooLargeError: If the prompt exceeds ``max_prompt_tokens``.
            OSError: If a file cannot be read.
        """
        code = build_code_blob(records, self.max_file_chars)
        prompt = self.templates.render_feature_prompt(
            feature_name=feature_name,
            file_names=[r.name for r in records],
            code=code,
        )

        tokens = count_tokens(prompt)
        logger.debug("Prompt for %s is ~%d tokens", feature_name, tokens)
        if self.max_prompt_tokens and tokens > self.max_prompt_tokens:
            raise PromptTooLargeError(feature_name, tokens, self.max_prompt_tokens)
        return prompt
