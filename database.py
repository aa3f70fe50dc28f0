"""
MongoDB access for the Shop API

Connection settings come from the environment. The client is lazy: building
it never blocks, so the service starts even when MongoDB is down and each
request fails on its own until the server becomes reachable.
"""
import logging
import os
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

import structlog
from bson.objectid import ObjectId
from pydantic import BaseModel
from pymongo import ASCENDING, MongoClient
from pymongo.database import Database
from pymongo.errors import PyMongoError

logger = structlog.get_logger(__name__)

logging.getLogger("pymongo").setLevel(logging.WARNING)

DATABASE_URL = os.getenv("DATABASE_URL") or os.getenv("MONGOURI") or "mongodb://localhost:27017/"
DATABASE_NAME = os.getenv("DATABASE_NAME", "shop")

USERS = "users"
PRODUCTS = "products"
ORDERS = "orders"

# collection -> field that must be unique within it
UNIQUE_FIELDS = {USERS: "email", PRODUCTS: "name"}


def get_client(url: str = DATABASE_URL) -> MongoClient:
    return MongoClient(url, serverSelectionTimeoutMS=5000)


def get_database(client: Optional[MongoClient] = None, name: str = DATABASE_NAME) -> Database:
    client = client or get_client()
    return client[name]


def check_connection(db: Database) -> bool:
    """Ping the server. Failures are logged, never raised."""
    try:
        db.client.admin.command("ping")
    except PyMongoError as e:
        logger.error("Connection error", database=db.name, error=str(e))
        return False
    logger.info("Connected to MongoDB", database=db.name)
    return True


def ensure_indexes(db: Database) -> None:
    for collection, field in UNIQUE_FIELDS.items():
        try:
            db[collection].create_index([(field, ASCENDING)], unique=True)
        except PyMongoError as e:
            logger.warning("Index creation failed", collection=collection, field=field, error=str(e))


def prepare_database(db: Database) -> None:
    if check_connection(db):
        ensure_indexes(db)


def to_object_id(value: str) -> Optional[ObjectId]:
    if not ObjectId.is_valid(value):
        return None
    return ObjectId(value)


def serialize_doc(doc):
    if not doc:
        return doc
    doc = dict(doc)
    _id = doc.pop("_id", None)
    if _id is not None:
        doc["id"] = str(_id)
    # convert datetimes
    for k, v in list(doc.items()):
        if isinstance(v, datetime):
            doc[k] = v.isoformat()
    return doc


def create_document(db: Database, collection_name: str, data: Union[BaseModel, Dict[str, Any]]) -> Dict[str, Any]:
    """Insert a document and return it as stored, with its new id."""
    if isinstance(data, BaseModel):
        data = data.model_dump(mode="json")
    doc = dict(data)
    result = db[collection_name].insert_one(doc)
    doc["_id"] = result.inserted_id
    return serialize_doc(doc)


def get_documents(db: Database, collection_name: str, filter_dict: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
    return [serialize_doc(d) for d in db[collection_name].find(filter_dict or {})]
