"""
Document storage.

Three collections are used: "reviews" and "registrations" hold lists of
documents, "weekly-movie" holds a single document. Two backends share the
same get/append/replace interface: JSON flat files (default) and MongoDB
when DATABASE_URL is configured.
"""
import json
import logging
import os
import tempfile
import threading
from typing import Any, List, Optional

from pymongo import MongoClient

from config import Settings

logger = logging.getLogger(__name__)

REVIEWS = "reviews"
REGISTRATIONS = "registrations"
WEEKLY_MOVIE = "weekly-movie"

LIST_COLLECTIONS = {REVIEWS, REGISTRATIONS}
COLLECTIONS = [REVIEWS, REGISTRATIONS, WEEKLY_MOVIE]


class StoreError(Exception):
    pass


def _empty(collection: str):
    return [] if collection in LIST_COLLECTIONS else None


class DocumentStore:
    name = "base"

    def get(self, collection: str):
        """List of documents for list collections, a dict or None otherwise."""
        raise NotImplementedError

    def append(self, collection: str, document: dict) -> None:
        raise NotImplementedError

    def replace(self, collection: str, document: Any) -> None:
        raise NotImplementedError

    def list_collections(self) -> List[str]:
        raise NotImplementedError


class JSONFileStore(DocumentStore):
    name = "json"

    def __init__(self, data_dir: str = "."):
        self.data_dir = data_dir
        self._lock = threading.Lock()

    def path_for(self, collection: str) -> str:
        return os.path.join(self.data_dir, f"{collection}.json")

    def _read(self, collection: str):
        path = self.path_for(collection)
        if not os.path.exists(path):
            return _empty(collection)
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Could not read %s, treating it as empty: %s", path, e)
            return _empty(collection)
        if collection in LIST_COLLECTIONS and not isinstance(data, list):
            logger.warning("%s does not hold a JSON array, treating it as empty", path)
            return []
        if collection in LIST_COLLECTIONS:
            documents = [d for d in data if isinstance(d, dict)]
            if len(documents) != len(data):
                logger.warning("Skipping %d malformed entries in %s", len(data) - len(documents), path)
            return documents
        if collection not in LIST_COLLECTIONS and not isinstance(data, dict):
            logger.warning("%s does not hold a JSON object, treating it as empty", path)
            return None
        return data

    def _write(self, collection: str, data) -> None:
        path = self.path_for(collection)
        tmp_path = None
        try:
            os.makedirs(self.data_dir, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.data_dir, prefix=f".{collection}.", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, path)
        except OSError as e:
            if tmp_path and os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise StoreError(f"Could not write {path}: {e}") from e

    def get(self, collection: str):
        with self._lock:
            return self._read(collection)

    def append(self, collection: str, document: dict) -> None:
        with self._lock:
            items = self._read(collection)
            items.append(document)
            self._write(collection, items)

    def replace(self, collection: str, document: Any) -> None:
        with self._lock:
            self._write(collection, document)

    def list_collections(self) -> List[str]:
        return [c for c in COLLECTIONS if os.path.exists(self.path_for(c))]


class MongoStore(DocumentStore):
    """List collections map to Mongo collections; the weekly pick is one document with a fixed _id."""

    name = "mongodb"
    SINGLE_ID = "current"

    def __init__(self, db):
        self.db = db

    @classmethod
    def from_url(cls, url: str, database_name: Optional[str] = None) -> "MongoStore":
        client = MongoClient(url)
        db = client[database_name] if database_name else client.get_default_database()
        return cls(db)

    @staticmethod
    def _collection_name(collection: str) -> str:
        return collection.replace("-", "_")

    def get(self, collection: str):
        coll = self.db[self._collection_name(collection)]
        if collection in LIST_COLLECTIONS:
            return list(coll.find({}, {"_id": 0}).sort("$natural", 1))
        return coll.find_one({"_id": self.SINGLE_ID}, {"_id": 0})

    def append(self, collection: str, document: dict) -> None:
        # insert_one mutates its argument with an _id
        self.db[self._collection_name(collection)].insert_one(dict(document))

    def replace(self, collection: str, document: Any) -> None:
        coll = self.db[self._collection_name(collection)]
        if collection in LIST_COLLECTIONS:
            coll.delete_many({})
            if document:
                coll.insert_many([dict(d) for d in document])
            return
        coll.replace_one({"_id": self.SINGLE_ID}, dict(document), upsert=True)

    def list_collections(self) -> List[str]:
        return self.db.list_collection_names()


def create_store(settings: Settings) -> DocumentStore:
    if settings.database_url:
        logger.info("Using MongoDB storage (database=%s)", settings.database_name or "default")
        return MongoStore.from_url(settings.database_url, settings.database_name)
    logger.info("Using JSON file storage in %s", os.path.abspath(settings.data_dir))
    return JSONFileStore(settings.data_dir)
