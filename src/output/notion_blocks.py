"""Notion block construction for feature documentation pages.

Maps an AnalysisResult onto the ordered list of Notion content blocks
that make up a documentation page: headings, dividers, a callout,
paragraphs, bulleted items, a rendered flowchart image and a toggle
holding the raw Mermaid source.
"""

import base64
import logging
import re
from typing import Any

from src.parsers.structure import AnalysisResult, ErrorEntry

logger = logging.getLogger(__name__)

Block = dict[str, Any]

DEFAULT_MERMAID_BASE_URL = "https://mermaid.ink/img/"

# Notion rejects rich text objects longer than this.
MAX_TEXT_LENGTH = 2000

# Notion rejects external URLs longer than this.
MAX_URL_LENGTH = 2000

_BULLET_PREFIX = re.compile(r"^[•\-]\s*")

SECTION_TITLES = {
    "plain_english": "💡 What This Does (Plain English)",
    "description": "📋 Description",
    "how_it_works": "⚙️ How It Works",
    "technical_details": "🔧 Technical Details",
    "error_handling": "⚠️ Error Handling",
    "flowchart": "📊 Visual Flowchart",
}


def rich_text(content: str, **annotations: bool) -> list[dict[str, Any]]:
    """Build a rich text array, splitting content at the length limit.

    Args:
        content: Plain text.
        **annotations: Notion annotations such as ``code=True``.

    Returns:
        One text object per chunk of at most MAX_TEXT_LENGTH characters.
    """
    chunks = [
        content[i : i + MAX_TEXT_LENGTH]
        for i in range(0, len(content), MAX_TEXT_LENGTH)
    ] or [""]
    segments = []
    for chunk in chunks:
        segment: dict[str, Any] = {"type": "text", "text": {"content": chunk}}
        if annotations:
            segment["annotations"] = dict(annotations)
        segments.append(segment)
    return segments


def _block(block_type: str, body: dict[str, Any]) -> Block:
    """Wrap a type-specific body in a Notion block object."""
    return {"object": "block", "type": block_type, block_type: body}


def heading(text: str, level: int = 2) -> Block:
    """Build a heading block.

    Args:
        text: Heading text.
        level: Heading level, 1 to 3.

    Returns:
        A ``heading_<level>`` block.
    """
    return _block(f"heading_{level}", {"rich_text": rich_text(text)})


def divider() -> Block:
    """Build a horizontal divider block."""
    return _block("divider", {})


def callout(text: str, emoji: str = "💡") -> Block:
    """Build a callout block with an emoji icon.

    Args:
        text: Callout text.
        emoji: Icon shown beside the text.

    Returns:
        A ``callout`` block.
    """
    return _block("callout", {"rich_text": rich_text(text), "icon": {"emoji": emoji}})


def paragraph(text: str) -> Block:
    """Build a paragraph block."""
    return _block("paragraph", {"rich_text": rich_text(text)})


def bulleted_item(segments: list[dict[str, Any]]) -> Block:
    """Build a bulleted list item from prepared rich text segments."""
    return _block("bulleted_list_item", {"rich_text": segments})


def split_paragraphs(text: str) -> list[str]:
    """Split text on blank-line separators, dropping empty segments.

    Args:
        text: Text whose paragraphs are separated by ``\\n\\n``.

    Returns:
        The stripped, non-empty paragraphs in order.
    """
    return [p.strip() for p in text.split("\n\n") if p.strip()]


def split_bullets(text: str) -> list[str]:
    """Split text into bullet entries.

    Blank lines are dropped and a leading ``•`` or ``-`` is removed
    from every remaining line.

    Args:
        text: One bullet per line.

    Returns:
        The bullet texts in order.
    """
    return [
        _BULLET_PREFIX.sub("", line.strip()).strip()
        for line in text.split("\n")
        if line.strip()
    ]


def paragraph_blocks(text: str) -> list[Block]:
    """Build one paragraph block per blank-line separated paragraph."""
    return [paragraph(p) for p in split_paragraphs(text)]


def bullet_blocks(text: str) -> list[Block]:
    """Build one bulleted list item per bullet line."""
    return [bulleted_item(rich_text(item)) for item in split_bullets(text)]


def error_blocks(errors: list[ErrorEntry]) -> list[Block]:
    """Render each error as ``<code>message</code> - explanation``."""
    return [
        bulleted_item(
            rich_text(error.error_message, code=True)
            + rich_text(" - ")
            + rich_text(error.explanation)
        )
        for error in errors
    ]


def mermaid_image_url(source: str, base_url: str = DEFAULT_MERMAID_BASE_URL) -> str:
    """Build the URL of a rendered Mermaid diagram.

    Args:
        source: Mermaid diagram source.
        base_url: Rendering service prefix.

    Returns:
        ``base_url`` followed by the base64 encoding of the UTF-8 source.
    """
    encoded = base64.b64encode(source.encode("utf-8")).decode("ascii")
    return f"{base_url}{encoded}"


def flowchart_blocks(
    source: str, base_url: str = DEFAULT_MERMAID_BASE_URL
) -> list[Block]:
    """Build the flowchart image and the collapsible source block.

    The image is left out when its URL exceeds MAX_URL_LENGTH, since
    Notion would reject the whole append. The source toggle is always
    kept.

    Args:
        source: Mermaid diagram source.
        base_url: Rendering service prefix.

    Returns:
        The image block (if the URL fits) followed by the toggle block.
    """
    blocks: list[Block] = []
    url = mermaid_image_url(source, base_url)
    if len(url) > MAX_URL_LENGTH:
        logger.warning(
            "Flowchart image URL is %d characters (limit %d); "
            "publishing the Mermaid source only",
            len(url),
            MAX_URL_LENGTH,
        )
    else:
        blocks.append(
            _block("image", {"type": "external", "external": {"url": url}})
        )
    code = _block("code", {"rich_text": rich_text(source), "language": "mermaid"})
    toggle = _block(
        "toggle",
        {"rich_text": rich_text("View Mermaid Code"), "children": [code]},
    )
    blocks.append(toggle)
    return blocks


def build_page_blocks(
    analysis: AnalysisResult,
    mermaid_base_url: str = DEFAULT_MERMAID_BASE_URL,
) -> list[Block]:
    """Build the full ordered block list of a documentation page.

    Args:
        analysis: Parsed documentation of the feature.
        mermaid_base_url: Rendering service prefix for the flowchart.

    Returns:
        The page's content blocks, top to bottom.
    """
    blocks: list[Block] = [heading(analysis.feature_name, level=1)]

    sections: list[tuple[str, list[Block]]] = [
        ("plain_english", [callout(analysis.plain_english)]),
        ("description", paragraph_blocks(analysis.description)),
        ("how_it_works", paragraph_blocks(analysis.how_it_works)),
        ("technical_details", bullet_blocks(analysis.technical_details)),
        ("error_handling", error_blocks(analysis.error_handling)),
        ("flowchart", flowchart_blocks(analysis.flowchart, mermaid_base_url)),
    ]
    for key, content in sections:
        blocks.append(divider())
        blocks.append(heading(SECTION_TITLES[key]))
        blocks.extend(content)

    return blocks
