"""
MongoDB access

One MongoClient per process; collections are named after the lowercased
schema class (owner, user, property).
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.database import Database
from pymongo.errors import PyMongoError

from config import Settings

logger = logging.getLogger(__name__)

OWNERS = "owner"
USERS = "user"
PROPERTIES = "property"


def connect(settings: Settings) -> MongoClient:
    client = MongoClient(settings.mongodb_uri, tz_aware=True)
    logger.info("MongoDB client created for database %s", settings.database_name)
    return client


def get_database(client: MongoClient, settings: Settings) -> Database:
    return client[settings.database_name]


def ensure_indexes(db: Database) -> None:
    try:
        db[OWNERS].create_index("phone", unique=True)
        db[USERS].create_index("phone", unique=True)
        db[PROPERTIES].create_index([("type", ASCENDING), ("date", DESCENDING)])
    except PyMongoError:
        logger.exception("Index creation failed")


def object_id(value: str) -> Optional[ObjectId]:
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


def serialize_document(doc: Dict[str, Any]) -> Dict[str, Any]:
    out = {}
    for key, value in doc.items():
        if isinstance(value, ObjectId):
            value = str(value)
        elif isinstance(value, datetime):
            value = value.isoformat()
        out[key] = value
    return out
