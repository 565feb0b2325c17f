import logging

import requests

from config import Settings

logger = logging.getLogger(__name__)

OMDB_URL = "http://www.omdbapi.com/"


def fetch_poster_url(settings: Settings, title: str) -> str:
    """Look up a poster on OMDb by title; "" when unknown or on any failure."""
    if not settings.omdb_api_key or not title:
        return ""
    try:
        resp = requests.get(
            OMDB_URL,
            params={"t": title, "apikey": settings.omdb_api_key},
            timeout=min(settings.http_timeout, 10),
        )
        if resp.status_code != 200:
            logger.warning("OMDb returned %s for %r", resp.status_code, title)
            return ""
        data = resp.json()
    except (requests.RequestException, ValueError) as e:
        logger.warning("OMDb lookup failed for %r: %s", title, e)
        return ""
    poster = data.get("Poster") if isinstance(data, dict) else None
    if poster and poster != "N/A":
        return poster
    return ""
