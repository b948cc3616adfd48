import json
from typing import Any, Iterable, List, Optional

import httpx
from notion_client import AsyncClient
from notion_client.errors import HTTPResponseError, RequestTimeoutError
from pydantic import BaseModel, Field, ValidationError

from notion_errors import DecodeError, TransportError

from logging import getLogger
logger = getLogger(__name__)

NOTION_VERSION = "2022-06-28"
PAGE_SIZE = 100

# Block types whose payload exposes a "rich_text" array.
TEXT_BLOCK_KINDS = frozenset({
    "paragraph",
    "heading_1",
    "heading_2",
    "heading_3",
    "bulleted_list_item",
    "numbered_list_item",
    "to_do",
    "toggle",
    "quote",
    "callout",
    "code",
    "template",
})


class RichTextSpan(BaseModel):
    """Smallest run of text inside a block"""
    plain_text: str


class ContentBlock(BaseModel):
    """One child block of a page.

    Only kinds in ``TEXT_BLOCK_KINDS`` carry spans. Any other kind is kept
    with an empty ``rich_text`` so it contributes nothing to the context.
    """
    kind: str = Field(..., description="Notion block type, e.g. paragraph")
    rich_text: List[RichTextSpan] = Field(default_factory=list)

    @classmethod
    def from_api(cls, raw: Any) -> Optional["ContentBlock"]:
        """Decode a raw block object, returning ``None`` when it has no usable tag or payload."""
        if not isinstance(raw, dict):
            return None
        kind = raw.get("type")
        if not isinstance(kind, str) or not kind:
            return None
        payload = raw.get(kind)
        if not isinstance(payload, dict):
            return None
        if kind not in TEXT_BLOCK_KINDS:
            return cls(kind=kind)

        rich = payload.get("rich_text")
        if not isinstance(rich, list):
            return cls(kind=kind)
        spans = [
            RichTextSpan(plain_text=item["plain_text"])
            for item in rich
            if isinstance(item, dict) and isinstance(item.get("plain_text"), str)
        ]
        return cls(kind=kind, rich_text=spans)


class BlockListResponse(BaseModel):
    """Envelope returned by the block children endpoint."""
    results: List[Any]
    has_more: bool = False


def parse_blocks(raw_results: Iterable[Any]) -> List[ContentBlock]:
    """Decode every block that has a usable shape, silently dropping the rest."""
    blocks: List[ContentBlock] = []
    for raw in raw_results:
        block = ContentBlock.from_api(raw)
        if block is not None:
            blocks.append(block)
    return blocks


def flatten_blocks(blocks: Iterable[ContentBlock]) -> List[str]:
    """Return one line per span, in block order then span order."""
    lines: List[str] = []
    for block in blocks:
        for span in block.rich_text:
            lines.append(span.plain_text)
    return lines


async def fetch_page_blocks(notion: AsyncClient, page_id: str) -> BlockListResponse:
    """Return the first page of child blocks for ``page_id``.

    Only one request is made. If Notion reports more children than
    ``PAGE_SIZE`` the remainder is ignored and a warning is logged.
    """
    try:
        resp = await notion.blocks.children.list(block_id=page_id, page_size=PAGE_SIZE)
    except (HTTPResponseError, RequestTimeoutError, httpx.TransportError) as e:
        raise TransportError(f"Notion request failed: {e}") from e
    except json.JSONDecodeError as e:
        raise DecodeError(f"Notion response is not valid JSON: {e}") from e

    try:
        listing = BlockListResponse.model_validate(resp)
    except ValidationError as e:
        raise DecodeError(f"Unexpected Notion response shape: {e}") from e

    logger.info("Fetched %d blocks for page %s", len(listing.results), page_id)
    if listing.has_more:
        logger.warning(
            "Page %s has more than %d child blocks; only the first %d are used",
            page_id, PAGE_SIZE, PAGE_SIZE,
        )
    return listing


async def retrieve_context(
    page_id: str,
    credential: str,
    *,
    client: Optional[httpx.AsyncClient] = None,
) -> str:
    """Fetch a page's child blocks and flatten them into newline separated text.

    Args:
        page_id: Notion page (or block) id.
        credential: Notion integration token, sent as a bearer token.
        client: Optional ``httpx.AsyncClient`` for the Notion client to use.

    Returns:
        The context text. Empty when the page has no text; the caller decides
        what to do with that.
    """
    notion = AsyncClient(auth=credential, client=client, notion_version=NOTION_VERSION, retry=False)
    try:
        listing = await fetch_page_blocks(notion, page_id)
    finally:
        await notion.aclose()

    blocks = parse_blocks(listing.results)
    lines = flatten_blocks(blocks)
    logger.info("Extracted %d text lines from %d blocks", len(lines), len(blocks))
    return "\n".join(lines)
