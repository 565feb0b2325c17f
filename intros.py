import json
import logging

from config import Settings
from llm import LLMError, chat_completion

logger = logging.getLogger(__name__)

HOST_SYSTEM_PROMPT = "You are a witty movie club host."

INTRO_PROMPT = """You are a witty, funny movie club host. Write a very short, clever, and playful one-sentence intro (max 20 words) for this week's movie club pick, based on the following movie details. Make it extremely witty, surprising, and memorable. Use wordplay, puns, or clever references. Channel your inner late-night talk show host or stand-up comedian. The intro should make the recipient smile or laugh. Never be generic or bland. Reference the movie's genre, decade, or any notable details if possible. Do NOT mention the movie title in the intro.

Movie details: {details}

Intro:"""


def fallback_intro(movie: dict) -> str:
    genre = movie.get("genre")
    release_year = str(movie.get("release_year") or movie.get("year") or "")
    genre_part = f"a {str(genre).lower()} film" if genre else "a film"
    decade_part = f"from the {release_year[:3]}0s" if release_year else ""
    return (
        f'🎬 This week\'s pick is "{movie.get("title")}" ({release_year}) '
        f"— {genre_part} {decade_part}. Get ready for a wild ride!"
    )


def generate_witty_intro(settings: Settings, movie: dict) -> str:
    """One-line intro for the weekly pick; the template text if the model fails."""
    if not movie or not movie.get("title"):
        return ""
    messages = [
        {"role": "system", "content": HOST_SYSTEM_PROMPT},
        {"role": "user", "content": INTRO_PROMPT.format(details=json.dumps(movie, ensure_ascii=False))},
    ]
    try:
        return chat_completion(settings, messages, max_tokens=80, temperature=0.9)
    except LLMError as e:
        logger.warning("Witty intro fell back to template: %s", e)
        return fallback_intro(movie)
