import logging
from typing import Any, Dict, List, Optional

from bson import ObjectId
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from restapi.core.domain.user import User, UserStorage
from restapi.core.errors import (
    EncodingError,
    InvalidArgument,
    NotFound,
    PersistenceError,
)

# Stored field names; `_id` is never writable through an update.
USERNAME = "username"
PASSWORD_HASH = "passwordHash"
EMAIL = "email"
UPDATABLE_FIELDS = {
    "username": USERNAME,
    "password_hash": PASSWORD_HASH,
    "email": EMAIL,
}


def _parse_id(user_id: str) -> ObjectId:
    if not isinstance(user_id, str) or not ObjectId.is_valid(user_id):
        raise InvalidArgument(
            f"failed to convert hex to ObjectID. HEX: {user_id!r}",
            message="malformed user id",
        )
    return ObjectId(user_id)


def _user_to_doc(user: User) -> Dict[str, Any]:
    return {
        USERNAME: user.username,
        PASSWORD_HASH: user.password_hash,
        EMAIL: user.email,
    }


def _string_field(doc, name: str) -> str:
    value = doc.get(name)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise TypeError(f"field {name!r} must be a string, got {type(value).__name__}")
    return value


def _doc_to_user(doc) -> User:
    raw_id = doc.get("_id")
    if raw_id is None:
        raise ValueError("document has no _id")
    return User(
        id=str(raw_id),
        username=_string_field(doc, USERNAME),
        password_hash=_string_field(doc, PASSWORD_HASH),
        email=_string_field(doc, EMAIL),
    )


class MongoUserStorage(UserStorage):
    def __init__(self, collection: Collection, logger: Optional[logging.Logger] = None):
        self.collection = collection
        self.logger = logger or logging.getLogger("user_storage")

    def create(self, user: User) -> str:
        self.logger.debug("create user")
        try:
            result = self.collection.insert_one(_user_to_doc(user))
        except PyMongoError as exc:
            raise PersistenceError(f"failed to create user due to error: {exc}") from exc

        oid = result.inserted_id
        if not isinstance(oid, ObjectId):
            raise EncodingError(f"failed to convert object to hex. oid: {oid!r}")
        return str(oid)

    def find_one(self, user_id: str) -> User:
        oid = _parse_id(user_id)
        self.logger.debug("find user", extra={"user_id": user_id})
        try:
            doc = self.collection.find_one({"_id": oid})
        except PyMongoError as exc:
            raise PersistenceError(
                f"failed to find user by ID: {user_id} due to error {exc}"
            ) from exc
        if doc is None:
            raise NotFound(f"user {user_id} not found", message="user not found")
        try:
            return _doc_to_user(doc)
        except (KeyError, TypeError, ValueError) as exc:
            raise PersistenceError(
                f"failed to decode user (ID: {user_id}) from DB due to error {exc}"
            ) from exc

    def find_all(self) -> List[User]:
        self.logger.debug("find all users")
        try:
            docs = list(self.collection.find({}))
        except PyMongoError as exc:
            raise PersistenceError(f"failed to find all users due to error: {exc}") from exc
        try:
            return [_doc_to_user(doc) for doc in docs]
        except (KeyError, TypeError, ValueError) as exc:
            raise PersistenceError(
                f"failed to read all documents from result: {exc}"
            ) from exc

    def update(self, user: User) -> None:
        oid = _parse_id(user.id)
        self.logger.debug("update user", extra={"user_id": user.id})
        self._set(user.id, oid, _user_to_doc(user))

    def partial_update(self, user_id: str, fields: Dict[str, Any]) -> None:
        oid = _parse_id(user_id)
        update = {
            UPDATABLE_FIELDS[k]: v for k, v in fields.items() if k in UPDATABLE_FIELDS
        }
        self.logger.debug(
            "partially update user",
            extra={"user_id": user_id, "fields": sorted(update)},
        )
        if not update:
            # Nothing to write, but a missing user is still a 404.
            self.find_one(user_id)
            return
        self._set(user_id, oid, update)

    def _set(self, user_id: str, oid: ObjectId, update: Dict[str, Any]) -> None:
        try:
            result = self.collection.update_one({"_id": oid}, {"$set": update})
        except PyMongoError as exc:
            raise PersistenceError(f"failed to execute update query. error: {exc}") from exc
        if result.matched_count == 0:
            raise NotFound(f"user {user_id} not found", message="user not found")
        self.logger.debug(
            "Matched %d documents and Modified documents: %d",
            result.matched_count,
            result.modified_count,
        )

    def delete(self, user_id: str) -> None:
        oid = _parse_id(user_id)
        self.logger.debug("delete user", extra={"user_id": user_id})
        try:
            result = self.collection.delete_one({"_id": oid})
        except PyMongoError as exc:
            raise PersistenceError(f"failed to delete document due to error: {exc}") from exc
        if result.deleted_count == 0:
            raise NotFound(f"user {user_id} not found", message="user not found")
        self.logger.debug("Deleted %d documents", result.deleted_count)
