"""Publishing of feature documentation to a Notion database.

Upserts one page per feature, keyed by exact title: an existing page
gets its properties refreshed and its content replaced, otherwise a
new page is created under the database.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from notion_client import Client
from notion_client.helpers import collect_paginated_api

from src.output.notion_blocks import Block, build_page_blocks, rich_text
from src.parsers.structure import AnalysisResult
from src.utils.config import NotionConfig

logger = logging.getLogger(__name__)

# Notion accepts at most this many children per append request.
APPEND_BATCH_SIZE = 100


class NotionPublisher:
    """Creates or replaces documentation pages in a Notion database."""

    def __init__(
        self,
        config: Optional[NotionConfig] = None,
        client: Optional[Client] = None,
    ) -> None:
        """Initialize the publisher.

        Args:
            config: Notion configuration. Uses defaults if not provided.
            client: Preconfigured Notion client. Created lazily from
                ``config.api_key`` if not provided.
        """
        self.config = config or NotionConfig()
        self._client = client

    @property
    def client(self) -> Client:
        """Lazily initialize the Notion client.

        Raises:
            ValueError: If no API key is configured.
        """
        if self._client is None:
            if not self.config.api_key:
                raise ValueError(
                    "NOTION_API_KEY environment variable is not set. "
                    "Set it before publishing pages."
                )
            self._client = Client(auth=self.config.api_key)
        return self._client

    @property
    def database_id(self) -> str:
        """The target database id.

        Raises:
            ValueError: If no database id is configured.
        """
        if not self.config.database_id:
            raise ValueError(
                "NOTION_DATABASE_ID environment variable is not set. "
                "Set it before publishing pages."
            )
        return self.config.database_id

    def publish(self, title: str, analysis: AnalysisResult, file_paths: str) -> str:
        """Create or replace the documentation page for a feature.

        Args:
            title: Page title used for lookup and as the title property.
            analysis: Parsed documentation to render.
            file_paths: Display string of the documented files.

        Returns:
            The id of the created or updated page.

        Raises:
            ValueError: If credentials or the database id are missing.
            notion_client.APIResponseError: If any Notion call fails.
        """
        existing_id = self.find_page(title)
        blocks = build_page_blocks(analysis, self.config.mermaid_base_url)
        properties = self._page_properties(title, file_paths)

        if existing_id:
            page_id = existing_id
            self.client.pages.update(page_id=page_id, properties=properties)
            self.clear_page(page_id)
            logger.info("✓ Updated: %s", title)
        else:
            page = self.client.pages.create(
                parent={"database_id": self.database_id},
                properties=properties,
            )
            page_id = page["id"]
            logger.info("✓ Created: %s", title)

        self.append_blocks(page_id, blocks)
        logger.info("  ✓ Added %d content blocks to page", len(blocks))
        return page_id

    def find_page(self, title: str) -> Optional[str]:
        """Return the id of the first page whose title equals ``title``."""
        response = self.client.databases.query(
            database_id=self.database_id,
            filter={
                "property": self.config.title_property,
                "title": {"equals": title},
            },
        )
        results = response.get("results", [])
        if len(results) > 1:
            logger.warning(
                "%d pages titled %r, updating the first", len(results), title
            )
        return results[0]["id"] if results else None

    def clear_page(self, page_id: str) -> int:
        """Delete every child block of a page, one request per block.

        Args:
            page_id: Page whose content is removed.

        Returns:
            Number of deleted blocks.
        """
        children = collect_paginated_api(
            self.client.blocks.children.list, block_id=page_id
        )
        for block in children:
            self.client.blocks.delete(block_id=block["id"])
        logger.debug("Deleted %d blocks from %s", len(children), page_id)
        return len(children)

    def append_blocks(self, page_id: str, blocks: list[Block]) -> None:
        """Append blocks to a page in batches Notion accepts."""
        for start in range(0, len(blocks), APPEND_BATCH_SIZE):
            self.client.blocks.children.append(
                block_id=page_id,
                children=blocks[start : start + APPEND_BATCH_SIZE],
            )

    def _page_properties(self, title: str, file_paths: str) -> dict[str, Any]:
        """Build the title, last-updated and file list properties.

        Args:
            title: Page title.
            file_paths: Display string of the documented files.

        Returns:
            A Notion properties mapping keyed by the configured names.
        """
        return {
            self.config.title_property: {"title": [{"text": {"content": title}}]},
            self.config.date_property: {
                "date": {"start": datetime.now(timezone.utc).isoformat()}
            },
            self.config.files_property: {"rich_text": rich_text(file_paths)},
        }
