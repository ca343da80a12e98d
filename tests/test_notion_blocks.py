"""Tests for Notion block construction."""

import base64

import pytest

from src.output.notion_blocks import (
    MAX_TEXT_LENGTH,
    MAX_URL_LENGTH,
    SECTION_TITLES,
    build_page_blocks,
    error_blocks,
    flowchart_blocks,
    mermaid_image_url,
    paragraph_blocks,
    rich_text,
    split_bullets,
    split_paragraphs,
)
from src.parsers.structure import AnalysisResult, ErrorEntry


def _plain_text(block: dict) -> str:
    body = block[block["type"]]
    return "".join(seg["text"]["content"] for seg in body["rich_text"])


def _section(blocks: list[dict], title: str) -> list[dict]:
    """Return the blocks between a section heading and the next divider."""
    start = next(
        i
        for i, b in enumerate(blocks)
        if b["type"] == "heading_2" and _plain_text(b) == title
    )
    section = []
    for block in blocks[start + 1 :]:
        if block["type"] == "divider":
            break
        section.append(block)
    return section


class TestSplitting:
    """Tests for paragraph and bullet splitting."""

    def test_paragraphs_in_order(self) -> None:
        assert split_paragraphs("P1\n\nP2\n\nP3") == ["P1", "P2", "P3"]

    def test_paragraph_blocks_count(self) -> None:
        blocks = paragraph_blocks("P1\n\nP2\n\nP3")
        assert [b["type"] for b in blocks] == ["paragraph"] * 3
        assert [_plain_text(b) for b in blocks] == ["P1", "P2", "P3"]

    def test_empty_paragraphs_dropped(self) -> None:
        assert split_paragraphs("\n\nP1\n\n\n\n  \n\nP2\n\n") == ["P1", "P2"]

    def test_single_newlines_kept_inside_paragraph(self) -> None:
        assert split_paragraphs("line one\nline two") == ["line one\nline two"]

    def test_bullets_glyphs_and_blank_lines(self) -> None:
        assert split_bullets("• A\n• B\n\nC") == ["A", "B", "C"]

    def test_bullets_hyphen_prefix(self) -> None:
        assert split_bullets("- first\n-second\n  • third  ") == [
            "first",
            "second",
            "third",
        ]

    def test_inner_hyphen_preserved(self) -> None:
        assert split_bullets("• Uses a read-through cache") == [
            "Uses a read-through cache"
        ]


class TestRichText:
    """Tests for rich text construction."""

    def test_short_text_single_segment(self) -> None:
        assert rich_text("hello") == [{"type": "text", "text": {"content": "hello"}}]

    def test_long_text_split_at_limit(self) -> None:
        segments = rich_text("a" * (MAX_TEXT_LENGTH * 2 + 5))
        assert [len(s["text"]["content"]) for s in segments] == [
            MAX_TEXT_LENGTH,
            MAX_TEXT_LENGTH,
            5,
        ]

    def test_annotations(self) -> None:
        (segment,) = rich_text("Err", code=True)
        assert segment["annotations"] == {"code": True}


class TestErrorBlocks:
    """Tests for error entry rendering."""

    def test_code_message_separator_explanation(self) -> None:
        (block,) = error_blocks([ErrorEntry("Slot taken", "Pick another time.")])
        assert block["type"] == "bulleted_list_item"
        segments = block["bulleted_list_item"]["rich_text"]
        assert [s["text"]["content"] for s in segments] == [
            "Slot taken",
            " - ",
            "Pick another time.",
        ]
        assert segments[0]["annotations"] == {"code": True}
        assert "annotations" not in segments[2]


class TestMermaidImageUrl:
    """Tests for the flowchart image URL."""

    def test_base64_of_source(self) -> None:
        source = "graph TD\n  A --> B"
        url = mermaid_image_url(source)
        encoded = url.removeprefix("https://mermaid.ink/img/")
        assert base64.b64decode(encoded).decode("utf-8") == source

    def test_custom_base_url(self) -> None:
        assert mermaid_image_url("graph TD", "https://render.local/img/").startswith(
            "https://render.local/img/"
        )

    def test_unicode_source(self) -> None:
        url = mermaid_image_url("graph TD\n  A[Café] --> B")
        encoded = url.removeprefix("https://mermaid.ink/img/")
        assert "Café" in base64.b64decode(encoded).decode("utf-8")


class TestFlowchartBlocks:
    """Tests for the flowchart image and source toggle."""

    def test_image_then_toggle(self) -> None:
        blocks = flowchart_blocks("graph TD\n  A --> B")
        assert [b["type"] for b in blocks] == ["image", "toggle"]
        (code,) = blocks[1]["toggle"]["children"]
        assert code["code"]["language"] == "mermaid"

    def test_oversized_url_keeps_only_source(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        source = "graph TD\n" + "\n".join(
            f"  N{i}[Step {i}] --> N{i + 1}[Step {i + 1}]" for i in range(100)
        )
        assert len(mermaid_image_url(source)) > MAX_URL_LENGTH

        with caplog.at_level("WARNING", logger="src"):
            blocks = flowchart_blocks(source)

        assert [b["type"] for b in blocks] == ["toggle"]
        (code,) = blocks[0]["toggle"]["children"]
        assert _plain_text(code) == source
        assert "publishing the Mermaid source only" in caplog.text

    def test_url_within_limit_kept(self) -> None:
        base = "https://r/"
        # Each 3 source bytes encode to 4 URL characters.
        source = "x" * ((MAX_URL_LENGTH - len(base)) // 4 * 3)
        url = mermaid_image_url(source, base)
        assert len(url) <= MAX_URL_LENGTH
        assert flowchart_blocks(source, base)[0]["type"] == "image"


class TestBuildPageBlocks:
    """Tests for the full page layout."""

    def test_layout_order(self, sample_analysis: AnalysisResult) -> None:
        blocks = build_page_blocks(sample_analysis)
        assert blocks[0]["type"] == "heading_1"
        assert _plain_text(blocks[0]) == "Booking Flow"

        headings = [_plain_text(b) for b in blocks if b["type"] == "heading_2"]
        assert headings == list(SECTION_TITLES.values())

        for i, block in enumerate(blocks):
            if block["type"] == "heading_2":
                assert blocks[i - 1]["type"] == "divider"

    def test_plain_english_callout(self, sample_analysis: AnalysisResult) -> None:
        blocks = build_page_blocks(sample_analysis)
        section = _section(blocks, SECTION_TITLES["plain_english"])
        assert [b["type"] for b in section] == ["callout"]
        assert section[0]["callout"]["icon"] == {"emoji": "💡"}
        assert _plain_text(section[0]) == sample_analysis.plain_english

    def test_paragraph_sections(self, sample_analysis: AnalysisResult) -> None:
        blocks = build_page_blocks(sample_analysis)
        description = _section(blocks, SECTION_TITLES["description"])
        how = _section(blocks, SECTION_TITLES["how_it_works"])
        assert [b["type"] for b in description] == ["paragraph", "paragraph"]
        assert [b["type"] for b in how] == ["paragraph"] * 3

    def test_bullet_sections(self, sample_analysis: AnalysisResult) -> None:
        blocks = build_page_blocks(sample_analysis)
        details = _section(blocks, SECTION_TITLES["technical_details"])
        errors = _section(blocks, SECTION_TITLES["error_handling"])
        assert [_plain_text(b) for b in details] == [
            "Uses React hooks",
            "Calls the bookings API",
            "Debounces input",
        ]
        assert len(errors) == len(sample_analysis.error_handling)
        assert all(b["type"] == "bulleted_list_item" for b in errors)

    def test_flowchart_section(self, sample_analysis: AnalysisResult) -> None:
        blocks = build_page_blocks(sample_analysis)
        image, toggle = _section(blocks, SECTION_TITLES["flowchart"])

        assert image["image"]["type"] == "external"
        assert image["image"]["external"]["url"] == mermaid_image_url(
            sample_analysis.flowchart
        )
        assert _plain_text(toggle) == "View Mermaid Code"
        (code,) = toggle["toggle"]["children"]
        assert code["code"]["language"] == "mermaid"
        assert _plain_text(code) == sample_analysis.flowchart
        assert blocks[-1] is toggle

    def test_blocks_are_notion_objects(self, sample_analysis: AnalysisResult) -> None:
        for block in build_page_blocks(sample_analysis):
            assert block["object"] == "block"
            assert block["type"] in block
