"""
Review codes and SMS reviews.

Members reply to the club SMS with the weekly movie's 6-character code
followed by their review, e.g. "ABC123 Loved it!". Reviews are linked to a
movie only through that code.
"""
import random
import re
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from database import REVIEWS, DocumentStore
from schemas import Review

CODE_LENGTH = 6
CODE_FILLER = "X"

_CODE_AND_REVIEW = re.compile(r"^(\w{6})\s+(.*)$", re.ASCII | re.DOTALL)
_NON_ALNUM = re.compile(r"[^a-zA-Z0-9]")


def generate_movie_code(title: str, year: Optional[str], rng=random) -> str:
    """First 3 letters/digits of the title, last 2 of the year, a random digit."""
    clean = _NON_ALNUM.sub("", title or "").upper()
    year_part = _NON_ALNUM.sub("", str(year or "")).upper()[-2:]
    code = clean[:3] + year_part + str(rng.randint(0, 9))
    return code.ljust(CODE_LENGTH, CODE_FILLER)


def extract_code_and_review(body: str) -> Tuple[Optional[str], str]:
    text = body.strip()
    match = _CODE_AND_REVIEW.match(text)
    if match:
        return match.group(1).upper(), match.group(2).strip()
    return None, text


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def record_review(store: DocumentStore, sender: str, recipient: Optional[str], body: str) -> dict:
    code, review = extract_code_and_review(body)
    doc = Review(
        from_=sender,
        to=recipient,
        code=code,
        review=review,
        raw=body,
        timestamp=utc_timestamp(),
    ).model_dump(by_alias=True)
    store.append(REVIEWS, doc)
    return doc


def find_reviews(store: DocumentStore, code: str) -> List[dict]:
    wanted = code.upper()
    return [r for r in store.get(REVIEWS) if r.get("code") and str(r["code"]).upper() == wanted]
