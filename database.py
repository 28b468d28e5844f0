"""
MongoDB access for the Project Tracker

The connection is configured from DATABASE_URL / DATABASE_NAME (a .env file
is honoured). When either is missing `db` stays None and every helper raises,
so the app still boots and reports the problem on /api/health.
"""
import logging
import os
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from bson import ObjectId
from dotenv import load_dotenv
from pydantic import BaseModel, ValidationError
from pymongo import MongoClient

from schemas import WorkLog

load_dotenv()

logger = logging.getLogger(__name__)

_client: Optional[MongoClient] = None
db = None

database_url = os.getenv("DATABASE_URL")
database_name = os.getenv("DATABASE_NAME")

if database_url and database_name:
    _client = MongoClient(database_url)
    db = _client[database_name]
    logger.info("Connected to MongoDB database %s", database_name)
else:
    logger.warning("DATABASE_URL/DATABASE_NAME not set; database unavailable")


class DatabaseUnavailable(Exception):
    pass


def _require_db():
    if db is None:
        raise DatabaseUnavailable("Database not available. Check DATABASE_URL and DATABASE_NAME.")
    return db


def utc_naive(value: datetime) -> datetime:
    """Mongo stores naive UTC with millisecond precision."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.replace(microsecond=(value.microsecond // 1000) * 1000)


def create_document(collection: str, data: Union[BaseModel, Dict[str, Any]]) -> str:
    """Insert a document, stamping created_at/updated_at. Returns the new id."""
    database = _require_db()
    if isinstance(data, BaseModel):
        data_dict = data.model_dump(mode="python")
    else:
        data_dict = dict(data)
    for key, value in list(data_dict.items()):
        if isinstance(value, Enum):
            data_dict[key] = value.value
        elif isinstance(value, datetime):
            data_dict[key] = utc_naive(value)
    now = utc_naive(datetime.now(timezone.utc))
    data_dict.setdefault("created_at", now)
    data_dict["updated_at"] = now
    result = database[collection].insert_one(data_dict)
    return str(result.inserted_id)


def get_documents(collection: str, filter_dict: Optional[Dict[str, Any]] = None,
                  limit: Optional[int] = None) -> List[Dict[str, Any]]:
    database = _require_db()
    cursor = database[collection].find(filter_dict or {})
    if limit:
        cursor = cursor.limit(limit)
    return list(cursor)


def insert_work_log(log: Union[WorkLog, Dict[str, Any]]) -> Dict[str, Any]:
    """Persist a work log; end_time must be strictly after start_time.

    Raises ValueError for a log that breaks the ordering, which mirrors the
    check constraint on the relational schema.
    """
    if not isinstance(log, WorkLog):
        try:
            log = WorkLog(**log)
        except ValidationError as e:
            raise ValueError("; ".join(err["msg"] for err in e.errors())) from e
    start, end = utc_naive(log.start_time), utc_naive(log.end_time)
    if end <= start:
        raise ValueError("end_time must be after start_time")
    doc = log.model_dump(mode="python")
    doc["user_id"] = ObjectId(log.user_id)
    doc["project_id"] = ObjectId(log.project_id)
    doc["task_id"] = ObjectId(log.task_id) if log.task_id else None
    new_id = create_document("work_log", doc)
    return _require_db()["work_log"].find_one({"_id": ObjectId(new_id)})
