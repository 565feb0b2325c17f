import base64
import binascii
import logging
import os
import time
from functools import lru_cache
from typing import Dict, Optional

from fastapi import BackgroundTasks, Depends, FastAPI, Form, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from pymongo.errors import PyMongoError

from catalog import BUDGET_RANGES, DECADES, GENRES, REGION_COUNTRIES, UnknownCategoryError
from config import Settings, get_settings
from database import REGISTRATIONS, WEEKLY_MOVIE, DocumentStore, StoreError, create_store
from intros import generate_witty_intro
from llm import LLMError
from notifications import dispatch_results, send_welcome_sms
from reviews import find_reviews, record_review, utc_timestamp
from schemas import CategorySelections, Registration, SendResultsRequest, WittyIntroRequest
from suggestions import SuggestionError, generate_movie

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

CONSENT_VALUES = {"yes", "on", "true", "1"}

app = FastAPI(title="Puddy Pictures API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@lru_cache()
def _store_for(settings: Settings) -> DocumentStore:
    return create_store(settings)


def get_store(settings: Settings = Depends(get_settings)) -> DocumentStore:
    return _store_for(settings)


def error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


# Simple in-process rate limiting (per IP per route)
RateKey = str
_rate_store: Dict[RateKey, Dict[str, float]] = {}

def check_rate_limit(request: Request, limit: int, window_seconds: int) -> bool:
    ip = request.client.host if request.client else "unknown"
    path = request.url.path
    key = f"{ip}:{path}:{window_seconds}"
    now = time.time()
    entry = _rate_store.get(key)
    if not entry or now > entry["reset"]:
        _rate_store[key] = {"count": 1, "reset": now + window_seconds}
        return True
    if entry["count"] >= limit:
        return False
    entry["count"] += 1
    return True

@app.middleware("http")
async def rate_limit_middleware(request: Request, call_next):
    limit = get_settings().rate_limit_per_minute
    if limit > 0 and not check_rate_limit(request, limit=limit, window_seconds=60):
        return JSONResponse(status_code=429, content={"detail": "Rate limit exceeded"})
    return await call_next(request)


@app.get("/")
def read_root():
    return {"message": "Puddy Pictures Backend Running"}

@app.get("/api/health")
def health():
    return {"status": "ok", "regions": list(REGION_COUNTRIES)}

@app.get("/api/categories")
def get_categories():
    return {
        "regions": list(REGION_COUNTRIES),
        "genres": GENRES,
        "decades": DECADES,
        "budgets": BUDGET_RANGES,
    }

@app.get("/test")
def test_storage(settings: Settings = Depends(get_settings), store: DocumentStore = Depends(get_store)):
    response = {
        "backend": "✅ Running",
        "storage": "❌ Not Available",
        "collections": [],
    }
    try:
        response["storage"] = f"✅ {store.name}"
        response["collections"] = store.list_collections()[:10]
    except Exception as e:
        response["storage"] = f"❌ Error: {str(e)[:50]}"
    response["openai"] = "✅ Set" if settings.openai_api_key else "❌ Not Set"
    response["omdb"] = "✅ Set" if settings.omdb_api_key else "❌ Not Set"
    response["twilio"] = "✅ Set" if settings.twilio_account_sid else "❌ Not Set"
    response["smtp"] = "✅ Set" if settings.smtp_host else "❌ Not Set"
    return response


# Movie generation
@app.post("/api/generate-movie")
def generate_movie_endpoint(payload: Optional[CategorySelections] = None,
                            settings: Settings = Depends(get_settings)):
    selections = payload.model_dump() if payload else {}
    try:
        movie = generate_movie(settings, selections)
    except UnknownCategoryError as e:
        return error(400, str(e))
    except (SuggestionError, LLMError) as e:
        logger.error("Movie generation failed: %s", e)
        return error(500, "Failed to generate movie")
    return movie.model_dump()


# Weekly pick
@app.get("/api/weekly-movie")
def get_weekly_movie(store: DocumentStore = Depends(get_store)):
    movie = store.get(WEEKLY_MOVIE)
    if not movie:
        return error(404, "No weekly movie set")
    return movie

@app.post("/api/weekly-movie")
async def publish_weekly_movie(request: Request, store: DocumentStore = Depends(get_store)):
    try:
        body = await request.json()
    except ValueError:
        return error(400, "Invalid JSON body")
    if not isinstance(body, dict) or not body.get("code") or not body.get("title"):
        return error(400, "Missing required fields")
    try:
        await run_in_threadpool(store.replace, WEEKLY_MOVIE, body)
    except (StoreError, PyMongoError) as e:
        logger.error("Could not publish weekly movie: %s", e)
        return error(500, "Server error")
    logger.info("Published weekly movie %r with code %s", body["title"], body["code"])
    return {"success": True}


# Reviews
@app.get("/api/get-reviews")
def get_reviews(code: Optional[str] = None, store: DocumentStore = Depends(get_store)):
    if not code:
        return error(400, "Missing code parameter")
    return find_reviews(store, code)

@app.post("/api/receive-review")
def receive_review(
    sender: Optional[str] = Form(None, alias="From"),
    body: Optional[str] = Form(None, alias="Body"),
    recipient: Optional[str] = Form(None, alias="To"),
    store: DocumentStore = Depends(get_store),
):
    if not sender or not body:
        return error(400, "Missing required fields")
    try:
        review = record_review(store, sender, recipient, body)
    except (StoreError, PyMongoError) as e:
        logger.error("Could not store review from %s: %s", sender, e)
        return error(500, "Server error")
    logger.info("Review received from %s (code=%s)", sender, review["code"])
    # Twilio expects a 200 with a plain body
    return PlainTextResponse("Review received. Thank you!")


# Registration
@app.post("/api/register-user")
def register_user(
    background_tasks: BackgroundTasks,
    name: Optional[str] = Form(None),
    phone: Optional[str] = Form(None),
    consent: Optional[str] = Form(None),
    store: DocumentStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    if not consent or consent.strip().lower() not in CONSENT_VALUES:
        return error(400, "Consent required to register.")
    if not name or not phone:
        return error(400, "Missing required fields.")
    registration = Registration(name=name, phone=phone, consent=True, date=utc_timestamp()).model_dump()
    try:
        store.append(REGISTRATIONS, registration)
    except (StoreError, PyMongoError) as e:
        logger.error("Could not store registration for %s: %s", phone, e)
        return error(500, "Server error")
    background_tasks.add_task(send_welcome_sms, settings, name, phone)
    return {"success": True}


# Announcements
@app.post("/api/ai-witty-intro")
def ai_witty_intro(payload: WittyIntroRequest, settings: Settings = Depends(get_settings)):
    return {"intro": generate_witty_intro(settings, payload.movie or {})}

@app.post("/api/send-results")
def send_results(payload: SendResultsRequest, settings: Settings = Depends(get_settings)):
    logger.info("Received send-results request with %d contact(s)", len(payload.contacts))
    encoded = payload.image.split(",", 1)[1] if "," in payload.image else payload.image
    try:
        image = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError):
        return error(400, "Invalid image data")
    return {"results": dispatch_results(settings, payload.contacts, image, payload.poster_url)}


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
