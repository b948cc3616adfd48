"""Ask a question about a Notion page from the command line.

Reads OPENAI_API_KEY, NOTION_API_KEY and NOTION_PAGE_ID (from the
environment or a .env file), fetches the page text, prompts for one
question and prints the model's answer.
"""

import argparse
import asyncio
import logging
import sys
from typing import Callable, List, Optional

from notion_agent import request_answer
from notion_config import Settings, load_settings
from notion_errors import ConfigError, EmptyContentError, NotionQAError
from notion_tools import retrieve_context

LOG_FORMAT = '%(levelname)s: %(name)s: %(message)s'


async def ask(settings: Settings, read_question: Optional[Callable[[str], str]] = None) -> int:
    """Run one fetch / question / answer exchange and return the exit status."""
    print("📄 Fetching Notion content...")
    try:
        context = await retrieve_context(settings.notion_page_id, settings.notion_api_key)
        if not context:
            raise EmptyContentError("No content fetched.")
    except EmptyContentError:
        print("❌ No content fetched.")
        return 1
    except NotionQAError as e:
        print(f"❌ Error: {e}")
        return 1
    print("✅ Content fetched.")

    if read_question is None:
        read_question = input
    question = read_question("\n❓ Enter your question: ").strip()

    try:
        answer = await request_answer(question, context, settings.openai_api_key)
    except NotionQAError as e:
        print(f"❌ Error: {e}")
        return 1

    print("\n🤖 Answer:\n" + answer)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Answer a question about a Notion page using OpenAI"
    )
    parser.parse_args(argv)

    try:
        settings = load_settings()
    except ConfigError as e:
        print(f"❌ Error: {e}")
        return 1

    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)

    try:
        return asyncio.run(ask(settings))
    except (KeyboardInterrupt, EOFError):
        print("Cancelled by user.")
        return 1


def cli() -> None:
    sys.exit(main())


if __name__ == "__main__":
    cli()
