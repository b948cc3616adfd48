from typing import Optional

import httpx
import openai
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage
from langchain_core.prompts import PromptTemplate
from langchain_openai import ChatOpenAI

from notion_errors import DecodeError, EmptyAnswerError, TransportError

from logging import getLogger
logger = getLogger(__name__)

MODEL_NAME = "gpt-3.5-turbo"

QA_TEMPLATE = """You are a helpful assistant. Answer the user's question based on the following Notion content.

--- Notion Content ---
{context}
-----------------------

Question: {question}
Answer:
"""

prompt = PromptTemplate.from_template(QA_TEMPLATE)


def build_prompt(question: str, context: str) -> str:
    """Fill the QA template with the page text and the question.

    Both values are inserted as-is, so braces in page content are safe.
    """
    return prompt.format(context=context, question=question)


def build_llm(credential: str, *, http_async_client: Optional[httpx.AsyncClient] = None) -> ChatOpenAI:
    """Create the chat model used for answering.

    Generation parameters are left to the service defaults and the client
    does not retry.
    """
    return ChatOpenAI(
        model=MODEL_NAME,
        api_key=credential,
        max_retries=0,
        http_async_client=http_async_client,
    )


async def request_answer(
    question: str,
    context: str,
    credential: str,
    *,
    llm: Optional[BaseChatModel] = None,
) -> str:
    """Ask the chat model ``question`` using ``context`` as grounding.

    Returns:
        The first completion choice, stripped of surrounding whitespace.

    Raises:
        TransportError: The request did not complete or returned an error status.
        DecodeError: The response could not be read as a chat completion.
        EmptyAnswerError: The response had no choices.
    """
    if llm is None:
        llm = build_llm(credential)

    text = build_prompt(question, context)
    logger.info("Sending prompt of %d characters to %s", len(text), MODEL_NAME)

    try:
        result = await llm.agenerate([[HumanMessage(content=text)]])
    except (openai.APIConnectionError, openai.APIStatusError) as e:
        raise TransportError(f"OpenAI request failed: {e}") from e
    except (TypeError, KeyError) as e:
        # langchain-openai rejects a missing or null "choices" array before we see it
        if "choices" in str(e):
            raise EmptyAnswerError("no response from OpenAI") from e
        raise DecodeError(f"Unexpected OpenAI response: {e}") from e
    except (openai.APIResponseValidationError, ValueError) as e:
        raise DecodeError(f"Unexpected OpenAI response: {e}") from e

    generations = result.generations[0] if result.generations else []
    if not generations:
        raise EmptyAnswerError("no response from OpenAI")

    answer = generations[0].text.strip()
    logger.info("Received answer of %d characters", len(answer))
    return answer
