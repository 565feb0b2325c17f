"""
Weekly SMS blast.

Asks the running API for a random movie pick, writes an announcer intro for
it and texts every registered member.

Usage:
  python weekly_sms.py
"""
import logging
import sys
from typing import Optional

import requests

from config import Settings, get_settings
from database import REGISTRATIONS, DocumentStore, create_store
from intros import fallback_intro
from llm import LLMError, chat_completion
from notifications import NotificationError, send_sms

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

ANNOUNCER_PROMPT = """Create a short, engaging intro for a movie night SMS. Use a friendly tone and highlight genre, region, and vibe. Here are the details:
Title: {title}
Genre: {genre}
Region: {region}
Release Year: {release_year}"""


def request_movie_pick(settings: Settings) -> dict:
    resp = requests.post(f"{settings.movie_api_url}/api/generate-movie", json={},
                         timeout=settings.http_timeout * settings.max_suggestion_attempts)
    resp.raise_for_status()
    return resp.json()


def announcer_intro(settings: Settings, movie: dict) -> str:
    messages = [
        {"role": "system", "content": "You are a witty and creative movie club announcer."},
        {"role": "user", "content": ANNOUNCER_PROMPT.format(
            title=movie.get("title"),
            genre=movie.get("genre"),
            region=movie.get("region"),
            release_year=movie.get("release_year"),
        )},
    ]
    try:
        intro = chat_completion(settings, messages, max_tokens=150, temperature=0.7)
    except LLMError as e:
        logger.warning("Announcer intro fell back to template: %s", e)
        return fallback_intro(movie)
    return intro or fallback_intro(movie)


def send_weekly_sms(settings: Settings, store: Optional[DocumentStore] = None) -> int:
    """Returns a process exit code."""
    store = store or create_store(settings)
    registrations = store.get(REGISTRATIONS)
    if not registrations:
        logger.error("No registrations found. No SMS will be sent.")
        return 1

    try:
        movie = request_movie_pick(settings)
    except (requests.RequestException, ValueError) as e:
        logger.error("Error generating movie: %s", e)
        return 1

    intro = announcer_intro(settings, movie)
    body = f"{intro}\nWatch: {movie.get('watch_info', '')}"
    sent = 0
    for user in registrations:
        phone = user.get("phone")
        if not phone:
            continue
        try:
            send_sms(settings, phone, body, media_url=movie.get("poster_url"))
        except NotificationError as e:
            logger.error("Error sending to %s: %s", phone, e)
            continue
        sent += 1
        logger.info("Sent to %s (%s)", user.get("name"), phone)

    logger.info("Weekly pick %r sent to %d of %d member(s)", movie.get("title"), sent, len(registrations))
    return 0


def main() -> int:
    return send_weekly_sms(get_settings())


if __name__ == "__main__":
    sys.exit(main())
