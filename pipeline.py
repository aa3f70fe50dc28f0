"""
Request pipeline shared by every resource: lookup, mutate, respond.

Validation happens earlier, when FastAPI parses the request into its schema.
Each stage here returns either a document or a ``Failure``; nothing is raised
for business outcomes. ``unwrap`` turns a failure into an HTTP error at the
route boundary.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Union

import structlog
from bson.errors import BSONError
from fastapi import HTTPException
from pymongo import ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError, PyMongoError

from database import create_document, get_documents, serialize_doc, to_object_id

logger = structlog.get_logger(__name__)


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    DUPLICATE = "duplicate"
    STORAGE = "storage"


STATUS_FOR_KIND = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.NOT_FOUND: 400,
    ErrorKind.DUPLICATE: 400,
    ErrorKind.STORAGE: 400,
}

# Returned to callers in place of the driver's own message.
STORAGE_FAILURE_MESSAGE = "storage failure"

# Driver and encoder errors, e.g. an int too large for BSON.
STORAGE_ERRORS = (PyMongoError, BSONError, OverflowError)


@dataclass(frozen=True)
class Failure:
    kind: ErrorKind
    message: str

    @property
    def status_code(self) -> int:
        return STATUS_FOR_KIND[self.kind]


Document = Dict[str, Any]
Result = Union[Document, Failure]


def unwrap(result: Result) -> Document:
    if isinstance(result, Failure):
        raise HTTPException(status_code=result.status_code, detail=result.message)
    return result


class Resource:
    """CRUD operations over one collection.

    ``label`` names the resource in messages ("user not present").
    ``unique_field``, when set, is checked before create and update.
    """

    def __init__(self, db: Database, collection_name: str, label: str, unique_field: Optional[str] = None):
        self.db = db
        self.collection = db[collection_name]
        self.label = label
        self.unique_field = unique_field

    def _not_present(self) -> Failure:
        return Failure(ErrorKind.NOT_FOUND, f"{self.label} not present")

    def _already_present(self) -> Failure:
        return Failure(ErrorKind.DUPLICATE, f"{self.label} already present")

    def _storage_failure(self, operation: str, error: Exception) -> Failure:
        logger.error(
            "Persistence failure",
            collection=self.collection.name,
            operation=operation,
            error=str(error),
        )
        return Failure(ErrorKind.STORAGE, STORAGE_FAILURE_MESSAGE)

    def _taken(self, data: Document, exclude_id=None) -> bool:
        if not self.unique_field or self.unique_field not in data:
            return False
        query = {self.unique_field: data[self.unique_field]}
        if exclude_id is not None:
            query["_id"] = {"$ne": exclude_id}
        return self.collection.find_one(query) is not None

    def list(self) -> Union[List[Document], Failure]:
        try:
            return get_documents(self.db, self.collection.name)
        except STORAGE_ERRORS as e:
            return self._storage_failure("list", e)

    def create(self, data: Document) -> Result:
        try:
            if self._taken(data):
                return self._already_present()
            stored = create_document(self.db, self.collection.name, data)
        except DuplicateKeyError:
            return self._already_present()
        except STORAGE_ERRORS as e:
            return self._storage_failure("create", e)
        logger.info("Document created", collection=self.collection.name, id=stored["id"])
        return stored

    def update(self, identifier: str, changes: Document) -> Result:
        oid = to_object_id(identifier)
        if oid is None:
            return self._not_present()
        try:
            existing = self.collection.find_one({"_id": oid})
            if existing is None:
                return self._not_present()
            if not changes:
                return serialize_doc(existing)
            if self._taken(changes, exclude_id=oid):
                return self._already_present()
            updated = self.collection.find_one_and_update(
                {"_id": oid},
                {"$set": changes},
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError:
            return self._already_present()
        except STORAGE_ERRORS as e:
            return self._storage_failure("update", e)
        # removed between lookup and write
        if updated is None:
            return self._not_present()
        logger.info("Document updated", collection=self.collection.name, id=identifier)
        return serialize_doc(updated)

    def delete(self, identifier: str) -> Result:
        oid = to_object_id(identifier)
        if oid is None:
            return self._not_present()
        try:
            result = self.collection.delete_one({"_id": oid})
        except STORAGE_ERRORS as e:
            return self._storage_failure("delete", e)
        if result.deleted_count == 0:
            return self._not_present()
        logger.info("Document deleted", collection=self.collection.name, id=identifier)
        return {"message": "deleted successfully"}
