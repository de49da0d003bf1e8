"""
MongoDB history repository for journal entries.

This module provides the persistence collaborator:
- Storing scored entries (one document per user and timestamp)
- Retrieving a user's entries for a date range, oldest first
- An in-memory implementation with the same interface for tests and demos
"""

import os
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol

import pymongo
from pymongo import MongoClient
from pymongo.errors import OperationFailure, PyMongoError, ServerSelectionTimeoutError
import certifi

from moodlens.core.errors import InvalidInputError
from moodlens.core.models import HistoryRecord

logger = logging.getLogger(__name__)


# ============================================================================
# CONSTANTS
# ============================================================================

DATABASE_NAME = "moodlens"
ENTRIES_COLLECTION_NAME = "entries"

CONNECTION_TIMEOUT_MS = 10000


# ============================================================================
# EXCEPTIONS
# ============================================================================

class HistoryRepositoryError(Exception):
    """Raised when the history store cannot be reached or queried."""
    pass


# ============================================================================
# INTERFACE
# ============================================================================

class HistoryRepository(Protocol):
    """Source of a user's scored entries."""

    def fetch_entries(self, user_id: str, start: datetime, end: datetime) -> List[HistoryRecord]:
        ...

    def save_entry(self, user_id: str, record: HistoryRecord) -> None:
        ...


# ============================================================================
# DATABASE CONNECTION
# ============================================================================

class DatabaseConfig:
    """Encapsulates MongoDB connection configuration."""

    def __init__(self, uri: Optional[str] = None):
        """
        Args:
            uri: MongoDB connection URI (defaults to MONGODB_URI env var)

        Raises:
            HistoryRepositoryError: If URI not provided and env var not set
        """
        self.uri = uri or os.environ.get("MONGODB_URI")
        if not self.uri:
            raise HistoryRepositoryError("MONGODB_URI environment variable not set")

    def get_client(self) -> MongoClient:
        """
        Creates a MongoDB client with TLS verified against the certifi CA bundle.

        Raises:
            HistoryRepositoryError: If connection fails.
        """
        try:
            client = MongoClient(
                self.uri,
                tlsCAFile=certifi.where(),
                serverSelectionTimeoutMS=CONNECTION_TIMEOUT_MS,
                connectTimeoutMS=CONNECTION_TIMEOUT_MS
            )
            client.admin.command('ping')
            logger.info("[MONGO] Connected successfully")
            return client

        except ServerSelectionTimeoutError as e:
            logger.error("[MONGO] Connection timeout")
            raise HistoryRepositoryError("Connection timeout") from e
        except OperationFailure as e:
            logger.error(f"[MONGO] Authentication failed: {e}")
            raise HistoryRepositoryError(f"Authentication failed: {e}") from e
        except PyMongoError as e:
            logger.error(f"[MONGO] Connection failed: {e}")
            raise HistoryRepositoryError(str(e)) from e


# ============================================================================
# REPOSITORIES
# ============================================================================

def _document_to_record(document: Dict[str, Any]) -> HistoryRecord:
    document = {k: v for k, v in document.items() if k not in ("_id", "user_id")}
    return HistoryRecord.from_dict(document)


class MongoHistoryRepository:
    """
    Entries collection wrapper.

    Args:
        collection: Existing collection (tests pass a MagicMock here).
        uri: Connection URI, used when no collection is given.
        database: Database name.
    """

    def __init__(self, collection: Optional[pymongo.collection.Collection] = None,
                 uri: Optional[str] = None, database: str = DATABASE_NAME):
        self._client: Optional[MongoClient] = None
        if collection is None:
            self._client = DatabaseConfig(uri).get_client()
            collection = self._client[database][ENTRIES_COLLECTION_NAME]
        self.collection = collection

    def fetch_entries(self, user_id: str, start: datetime, end: datetime) -> List[HistoryRecord]:
        """
        Returns the user's entries with start <= date <= end, oldest first.

        Documents that cannot be parsed are skipped with a warning.

        Raises:
            HistoryRepositoryError: If the query fails.
        """
        try:
            cursor = self.collection.find(
                {"user_id": user_id, "date": {"$gte": start, "$lte": end}}
            ).sort("date", pymongo.ASCENDING)
            documents = list(cursor)
        except PyMongoError as e:
            logger.error(f"[MONGO] Failed to fetch entries for {user_id}: {e}")
            raise HistoryRepositoryError(f"Retrieval failed: {e}") from e

        records = []
        for document in documents:
            try:
                records.append(_document_to_record(document))
            except InvalidInputError as e:
                logger.warning(f"[MONGO] Skipping malformed entry {document.get('_id')}: {e}")

        logger.info(f"[MONGO] Retrieved {len(records)} entries for {user_id}")
        return records

    def save_entry(self, user_id: str, record: HistoryRecord) -> None:
        """
        Upserts an entry keyed by (user_id, date).

        Raises:
            HistoryRepositoryError: If the write fails.
        """
        document = record.to_dict()
        document["date"] = record.date
        document["user_id"] = user_id
        try:
            result = self.collection.replace_one(
                {"user_id": user_id, "date": record.date},
                document,
                upsert=True
            )
        except PyMongoError as e:
            logger.error(f"[MONGO] Failed to save entry: {e}")
            raise HistoryRepositoryError(f"Save failed: {e}") from e

        if result.upserted_id:
            logger.info(f"[MONGO] New entry inserted for {record.date:%Y-%m-%d %H:%M}")
        else:
            logger.info(f"[MONGO] Entry updated for {record.date:%Y-%m-%d %H:%M}")

    def close(self) -> None:
        if self._client:
            self._client.close()
            self._client = None
            logger.info("[MONGO] Connection closed")


class InMemoryHistoryRepository:
    """Dict-backed repository. Not shared between instances."""

    def __init__(self, entries: Optional[Dict[str, List[HistoryRecord]]] = None):
        self._entries: Dict[str, List[HistoryRecord]] = {
            user: list(records) for user, records in (entries or {}).items()
        }

    def fetch_entries(self, user_id: str, start: datetime, end: datetime) -> List[HistoryRecord]:
        records = [r for r in self._entries.get(user_id, []) if start <= r.date <= end]
        return sorted(records, key=lambda r: r.date)

    def save_entry(self, user_id: str, record: HistoryRecord) -> None:
        records = [r for r in self._entries.get(user_id, []) if r.date != record.date]
        records.append(record)
        self._entries[user_id] = records
