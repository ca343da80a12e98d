"""Data models shared by the collector, analyzer and publisher.

Defines dataclasses for collected source files and for the structured
documentation the model returns for a feature. These models form the
shared vocabulary between the parsers, generators and Notion output.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


@dataclass(frozen=True)
class FileRecord:
    """A source file selected for a feature.

    Attributes:
        path: Path used to read the file.
        name: Path relative to the feature root, with forward slashes.
    """

    path: Path
    name: str


@dataclass
class ErrorEntry:
    """One documented error of a feature.

    Attributes:
        error_message: The exact error text as raised or displayed.
        explanation: What causes it and how to resolve it.
    """

    error_message: str
    explanation: str

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the camelCase shape the model produces.

        Returns:
            Dictionary representation of this error entry.
        """
        return {"errorMessage": self.error_message, "explanation": self.explanation}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ErrorEntry:
        """Deserialize from a dictionary.

        Args:
            data: Dictionary with ``errorMessage`` and ``explanation``.

        Returns:
            A new ErrorEntry instance.
        """
        return cls(
            error_message=data["errorMessage"],
            explanation=data["explanation"],
        )


@dataclass
class AnalysisResult:
    """Structured documentation of one feature.

    Attributes:
        feature_name: Descriptive name chosen by the model.
        plain_english: Non-technical summary.
        description: Technical description, paragraphs separated by blank lines.
        how_it_works: Architecture and flow, paragraphs separated by blank lines.
        technical_details: Bullet lines separated by newlines.
        error_handling: Documented error entries.
        flowchart: Mermaid diagram source.
    """

    feature_name: str
    plain_english: str
    description: str
    how_it_works: str
    technical_details: str
    error_handling: list[ErrorEntry] = field(default_factory=list)
    flowchart: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the camelCase shape the model produces.

        Returns:
            Dictionary representation of this analysis.
        """
        return {
            "featureName": self.feature_name,
            "plainEnglish": self.plain_english,
            "description": self.description,
            "howItWorks": self.how_it_works,
            "technicalDetails": self.technical_details,
            "errorHandling": [e.to_dict() for e in self.error_handling],
            "flowchart": self.flowchart,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AnalysisResult:
        """Deserialize from the model's JSON object.

        Args:
            data: Dictionary with every documented field present.

        Returns:
            A new AnalysisResult instance.

        Raises:
            KeyError: If a field is missing.
        """
        return cls(
            feature_name=data["featureName"],
            plain_english=data["plainEnglish"],
            description=data["description"],
            how_it_works=data["howItWorks"],
            technical_details=data["technicalDetails"],
            error_handling=[ErrorEntry.from_dict(e) for e in data["errorHandling"]],
            flowchart=data["flowchart"],
        )
