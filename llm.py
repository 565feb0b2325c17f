import logging
from functools import lru_cache
from typing import Dict, List, Optional

from openai import OpenAI, OpenAIError

from config import Settings

logger = logging.getLogger(__name__)


class LLMError(Exception):
    """The language model could not be reached or answered with an error"""


@lru_cache(maxsize=4)
def get_client(api_key: str, base_url: Optional[str], timeout: float) -> OpenAI:
    return OpenAI(api_key=api_key, base_url=base_url, timeout=timeout, max_retries=0)


def chat_completion(settings: Settings, messages: List[Dict[str, str]], max_tokens: int = 350,
                    temperature: float = 0.7) -> str:
    """Send one chat completion request and return the trimmed reply text.

    An empty string is returned when the response carries no message content.
    """
    if not settings.openai_api_key:
        raise LLMError("Missing OpenAI API key")
    client = get_client(settings.openai_api_key, settings.openai_base_url, settings.http_timeout)
    try:
        completion = client.chat.completions.create(
            model=settings.openai_model,
            messages=messages,
            max_tokens=max_tokens,
            temperature=temperature,
        )
    except OpenAIError as e:
        raise LLMError(f"Chat completion failed: {str(e)[:200]}") from e

    if not completion.choices:
        logger.warning("Chat completion response had no choices")
        return ""
    return (completion.choices[0].message.content or "").strip()
