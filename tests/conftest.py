"""Shared fixtures: an in-memory Notion client and sample model replies."""

import json
from typing import Any

import pytest

from src.parsers.structure import AnalysisResult, ErrorEntry
from tests._fixtures.fake_notion import FakeNotion


@pytest.fixture
def fake_notion() -> FakeNotion:
    """Create an empty in-memory Notion workspace."""
    return FakeNotion()


SAMPLE_REPLY: dict[str, Any] = {
    "featureName": "Booking Flow",
    "plainEnglish": "Lets people pick a time and book a meeting.",
    "description": "Handles the booking form.\n\nValidates input before saving.",
    "howItWorks": "The form collects data.\n\nThe API stores it.\n\nA mail is sent.",
    "technicalDetails": (
        "• Uses React hooks\n• Calls the bookings API\n\n- Debounces input"
    ),
    "errorHandling": [
        {"errorMessage": "Slot unavailable", "explanation": "Booked by someone else."},
        {"errorMessage": "Invalid email", "explanation": "Check the address."},
    ],
    "flowchart": "graph TD\n  A[Open form] --> B[Submit]",
}


@pytest.fixture
def sample_reply() -> dict[str, Any]:
    """The decoded JSON object of a well-formed model reply."""
    return json.loads(json.dumps(SAMPLE_REPLY))


@pytest.fixture
def sample_reply_text(sample_reply: dict[str, Any]) -> str:
    """A well-formed model reply wrapped in markdown code fences."""
    return "```json\n" + json.dumps(sample_reply, indent=2) + "\n```"


@pytest.fixture
def sample_analysis() -> AnalysisResult:
    """An AnalysisResult matching ``SAMPLE_REPLY``."""
    return AnalysisResult(
        feature_name=SAMPLE_REPLY["featureName"],
        plain_english=SAMPLE_REPLY["plainEnglish"],
        description=SAMPLE_REPLY["description"],
        how_it_works=SAMPLE_REPLY["howItWorks"],
        technical_details=SAMPLE_REPLY["technicalDetails"],
        error_handling=[
            ErrorEntry.from_dict(e) for e in SAMPLE_REPLY["errorHandling"]
        ],
        flowchart=SAMPLE_REPLY["flowchart"],
    )
