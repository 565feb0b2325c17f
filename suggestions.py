"""
Movie suggestions from the language model.

The model is asked for a strict JSON object. Replies that are empty, not a
JSON object, or whose country is outside the requested region are dropped
and the model is asked again, up to ``max_suggestion_attempts`` times.
"""
import json
import logging
from typing import Dict, Optional

from pydantic import ValidationError

from catalog import BUDGET_RANGES, country_matches_region, fill_selections
from config import Settings
from llm import chat_completion
from posters import fetch_poster_url
from reviews import generate_movie_code
from schemas import MovieInfo, MovieSuggestion

logger = logging.getLogger(__name__)


class SuggestionError(Exception):
    """No acceptable suggestion within the attempt limit"""


def build_prompt(region: str, genre: str, decade: str, budget: str) -> str:
    return (
        "You are a helpful assistant that suggests a movie strictly based on:\n"
        f"- Region: {region}\n"
        f"- Genre: {genre}\n"
        f"- Decade: {decade}\n"
        f"- Budget: {BUDGET_RANGES[budget]}\n\n"
        "Reply with a JSON object containing:\n"
        "{\n"
        '  "title": string,\n'
        '  "year": string,\n'
        '  "country": string,\n'
        '  "director": string,\n'
        '  "description": string,\n'
        '  "watch_info": string\n'
        "}\n\n"
        "Return only valid JSON."
    )


def parse_suggestion(content: str) -> Optional[MovieSuggestion]:
    try:
        data = json.loads(content)
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None
    try:
        return MovieSuggestion.model_validate(data)
    except ValidationError:
        return None


def request_movie(settings: Settings, selections: Dict[str, str]) -> MovieSuggestion:
    """Ask the model until it names a movie from the selected region.

    Raises SuggestionError after ``settings.max_suggestion_attempts`` rejected
    replies. LLMError from the client is not caught here.
    """
    region = selections["region"]
    prompt = build_prompt(region, selections["genre"], selections["decade"], selections["budget"])
    messages = [{"role": "user", "content": prompt}]

    for attempt in range(1, settings.max_suggestion_attempts + 1):
        content = chat_completion(settings, messages, max_tokens=350, temperature=0.7)
        if not content:
            logger.warning("Attempt %d: empty reply", attempt)
            continue
        suggestion = parse_suggestion(content)
        if suggestion is None:
            logger.warning("Attempt %d: reply was not a movie JSON object", attempt)
            continue
        if not country_matches_region(suggestion.country, region):
            logger.warning("Attempt %d: %r is from %r, not %s", attempt, suggestion.title,
                           suggestion.country, region)
            continue
        logger.info("Suggested %r (%s) after %d attempt(s)", suggestion.title, suggestion.country, attempt)
        return suggestion

    raise SuggestionError(
        f"No movie from {region} after {settings.max_suggestion_attempts} attempts"
    )


def generate_movie(settings: Settings, selections: Optional[Dict[str, Optional[str]]] = None) -> MovieInfo:
    filled = fill_selections(selections)
    suggestion = request_movie(settings, filled)
    data = suggestion.model_dump()
    data.update(filled)
    data["release_year"] = suggestion.year
    data["poster_url"] = fetch_poster_url(settings, suggestion.title)
    data["code"] = generate_movie_code(suggestion.title, suggestion.year)
    return MovieInfo(**data)
