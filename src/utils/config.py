"""Configuration loader and validator for the Notion feature docs pipeline.

Loads settings from configs/config.yaml and provides typed access
to all configuration sections via dataclasses. Secrets and the target
Notion database are read from the environment, never from the file.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

logger = logging.getLogger(__name__)

_DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "configs" / "config.yaml"

_DEFAULT_EXTENSIONS = [".js", ".jsx", ".ts", ".tsx", ".html", ".css"]
_DEFAULT_EXCLUDE_DIRS = [
    "node_modules",
    ".git",
    "dist",
    "build",
    "coverage",
    "__tests__",
    "test",
]
_DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass
class APIConfig:
    """Configuration for the Anthropic API client."""

    provider: str = "anthropic"
    model: str = "claude-sonnet-4-20250514"
    max_tokens: int = 3000
    temperature: float = 0.2
    retry_max_attempts: int = 3
    retry_base_delay: float = 1.0


@dataclass
class NotionConfig:
    """Configuration for the Notion publisher.

    ``api_key`` and ``database_id`` are filled from the NOTION_API_KEY
    and NOTION_DATABASE_ID environment variables by ``load_config``.
    """

    api_key: str = ""
    database_id: str = ""
    title_property: str = "Name"
    date_property: str = "Last Updated"
    files_property: str = "File Path"
    mermaid_base_url: str = "https://mermaid.ink/img/"


@dataclass
class CollectorConfig:
    """Configuration for source file collection and prompt sizing."""

    extensions: list[str] = field(default_factory=lambda: list(_DEFAULT_EXTENSIONS))
    exclude_dirs: list[str] = field(
        default_factory=lambda: list(_DEFAULT_EXCLUDE_DIRS)
    )
    max_file_chars: int = 5000
    max_prompt_tokens: int = 150000


@dataclass
class PipelineConfig:
    """Configuration for pacing and cost accounting between features."""

    delay_seconds: float = 3.0
    cost_per_file: float = 0.03


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "INFO"
    format: str = _DEFAULT_LOG_FORMAT
    file: Optional[str] = None


@dataclass(frozen=True)
class FeatureConfig:
    """A named part of the source tree documented as one Notion page.

    Attributes:
        name: Page title and feature name.
        path: Root directory of the feature's source files.
        max_files: Maximum number of files sent to the model.
    """

    name: str
    path: str
    max_files: int = 50


@dataclass
class AppConfig:
    """Top-level application configuration."""

    api: APIConfig = field(default_factory=APIConfig)
    notion: NotionConfig = field(default_factory=NotionConfig)
    collector: CollectorConfig = field(default_factory=CollectorConfig)
    pipeline: PipelineConfig = field(default_factory=PipelineConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    features: list[FeatureConfig] = field(default_factory=list)


def _build_features(data: list) -> list[FeatureConfig]:
    """Build the feature list from the raw ``features`` section.

    Args:
        data: List of mappings with name, path and optional max_files.

    Returns:
        A list of FeatureConfig instances in file order.

    Raises:
        ValueError: If an entry lacks a name or path, or its max_files
            is not a positive integer.
    """
    features = []
    for index, entry in enumerate(data):
        if not isinstance(entry, dict) or not (entry.get("name") and entry.get("path")):
            raise ValueError(
                f"Feature entry {index} must define both 'name' and 'path'"
            )
        max_files = entry.get("max_files", 50)
        # bool is an int subclass.
        if (
            not isinstance(max_files, int)
            or isinstance(max_files, bool)
            or max_files < 1
        ):
            raise ValueError(
                f"Feature entry {index} must set 'max_files' to a positive integer, "
                f"got {max_files!r}"
            )
        features.append(
            FeatureConfig(
                name=str(entry["name"]),
                path=str(entry["path"]),
                max_files=max_files,
            )
        )
    return features


def _build_notion_config(data: dict) -> NotionConfig:
    """Build a NotionConfig from a dictionary and the environment.

    Args:
        data: Dictionary with Notion settings.

    Returns:
        A configured NotionConfig instance.
    """
    api_key = os.getenv("NOTION_API_KEY", "")
    database_id = os.getenv("NOTION_DATABASE_ID", "")
    if not api_key:
        logger.warning("NOTION_API_KEY not set in environment")
    if not database_id:
        logger.warning("NOTION_DATABASE_ID not set in environment")

    return NotionConfig(
        api_key=api_key,
        database_id=database_id,
        title_property=data.get("title_property", "Name"),
        date_property=data.get("date_property", "Last Updated"),
        files_property=data.get("files_property", "File Path"),
        mermaid_base_url=data.get("mermaid_base_url", "https://mermaid.ink/img/"),
    )


def load_config(config_path: Optional[str] = None) -> AppConfig:
    """Load application configuration from a YAML file.

    Reads the YAML config file and constructs a fully typed AppConfig
    object. Falls back to defaults for any missing values. The API keys
    and the Notion database identifier are read from the environment,
    not from the config file.

    Args:
        config_path: Path to the YAML config file. If None, uses the
            default path at configs/config.yaml.

    Returns:
        A fully populated AppConfig instance.

    Raises:
        ValueError: If a feature entry is incomplete.
        yaml.YAMLError: If the config file contains invalid YAML.
    """
    path = Path(config_path) if config_path else _DEFAULT_CONFIG_PATH

    if not path.exists():
        logger.warning("Config file not found at %s, using defaults", path)
        return AppConfig(notion=_build_notion_config({}))

    with open(path) as f:
        raw = yaml.safe_load(f) or {}

    logger.info("Loaded configuration from %s", path)

    if not os.getenv("ANTHROPIC_API_KEY"):
        logger.warning("ANTHROPIC_API_KEY not set in environment")

    api_data = raw.get("api") or {}
    api_config = APIConfig(
        provider=api_data.get("provider", "anthropic"),
        model=api_data.get("model", "claude-sonnet-4-20250514"),
        max_tokens=api_data.get("max_tokens", 3000),
        temperature=api_data.get("temperature", 0.2),
        retry_max_attempts=api_data.get("retry_max_attempts", 3),
        retry_base_delay=api_data.get("retry_base_delay", 1.0),
    )

    collector_data = raw.get("collector") or {}
    collector_config = CollectorConfig(
        extensions=collector_data.get("extensions", list(_DEFAULT_EXTENSIONS)),
        exclude_dirs=collector_data.get("exclude_dirs", list(_DEFAULT_EXCLUDE_DIRS)),
        max_file_chars=collector_data.get("max_file_chars", 5000),
        max_prompt_tokens=collector_data.get("max_prompt_tokens", 150000),
    )

    pipeline_data = raw.get("pipeline") or {}
    pipeline_config = PipelineConfig(
        delay_seconds=pipeline_data.get("delay_seconds", 3.0),
        cost_per_file=pipeline_data.get("cost_per_file", 0.03),
    )

    logging_data = raw.get("logging") or {}
    logging_config = LoggingConfig(
        level=logging_data.get("level", "INFO"),
        format=logging_data.get("format", _DEFAULT_LOG_FORMAT),
        file=logging_data.get("file"),
    )

    return AppConfig(
        api=api_config,
        notion=_build_notion_config(raw.get("notion") or {}),
        collector=collector_config,
        pipeline=pipeline_config,
        logging=logging_config,
        features=_build_features(raw.get("features") or []),
    )
