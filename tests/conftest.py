"""Pytest configuration and fixtures"""
import copy
import os
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import bson
import pytest
from bson import ObjectId
from fastapi.testclient import TestClient
from pymongo.errors import DuplicateKeyError

# Set test environment variables before the app reads its settings
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from app.core.config import Settings, get_settings
from app.db.mongo import get_users_collection
from app.main import app
from app.services.email_service import get_email_service


_MISSING = object()


def _resolve(value: Any, parts: List[str]) -> List[Any]:
    """Values at a dotted path, fanning out over arrays like MongoDB does."""
    if not parts:
        return [value]
    head, rest = parts[0], parts[1:]
    if isinstance(value, dict):
        if head not in value:
            return []
        return _resolve(value[head], rest)
    if isinstance(value, list):
        if head.isdigit():
            index = int(head)
            return _resolve(value[index], rest) if index < len(value) else []
        found = []
        for item in value:
            found.extend(_resolve(item, parts))
        return found
    return []


def _expand(values: List[Any]) -> List[Any]:
    expanded = []
    for value in values:
        expanded.append(value)
        if isinstance(value, list):
            expanded.extend(value)
    return expanded


def _is_operator_doc(cond: Any) -> bool:
    return isinstance(cond, dict) and bool(cond) and all(key.startswith("$") for key in cond)


def _match_condition(values: List[Any], cond: Any) -> bool:
    if not _is_operator_doc(cond):
        if cond is None and not values:
            return True
        return any(value == cond for value in _expand(values))

    for op, arg in cond.items():
        if op == "$in":
            ok = any(value in arg for value in _expand(values)) or (None in arg and not values)
        elif op == "$nin":
            ok = not any(value in arg for value in _expand(values))
        elif op == "$ne":
            ok = not _match_condition(values, arg)
        elif op == "$not":
            ok = not _match_condition(values, arg)
        elif op == "$elemMatch":
            ok = any(
                matches(element, arg) if isinstance(element, dict) else _match_condition([element], arg)
                for value in values if isinstance(value, list)
                for element in value
            )
        elif op == "$gt":
            ok = any(value is not None and value > arg for value in _expand(values))
        elif op == "$exists":
            ok = bool(values) == bool(arg)
        else:
            raise NotImplementedError(op)
        if not ok:
            return False
    return True


def matches(doc: Dict[str, Any], query: Dict[str, Any]) -> bool:
    for key, cond in query.items():
        if key == "$or":
            if not any(matches(doc, sub) for sub in cond):
                return False
        elif key == "$and":
            if not all(matches(doc, sub) for sub in cond):
                return False
        elif not _match_condition(_resolve(doc, key.split(".")), cond):
            return False
    return True


def _set_path(doc: Dict[str, Any], path: str, value: Any):
    parts = path.split(".")
    target = doc
    for part in parts[:-1]:
        if isinstance(target, list):
            target = target[int(part)]
        else:
            target = target.setdefault(part, {})
    if isinstance(target, list):
        target[int(parts[-1])] = value
    else:
        target[parts[-1]] = value


def _project(doc: Dict[str, Any], projection: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    doc = copy.deepcopy(doc)
    if not projection:
        return doc
    keep = {key for key, flag in projection.items() if flag}
    keep.add("_id")
    return {key: value for key, value in doc.items() if key in keep}


class FakeUsersCollection:
    """
    In-memory stand-in for the Motor users collection.

    Supports the calls and query operators the services issue, plus a
    unique constraint on email.
    """

    def __init__(self):
        self.docs: List[Dict[str, Any]] = []
        self.calls: List[str] = []
        self.indexes: Dict[str, Dict[str, Any]] = {"_id_": {"key": [("_id", 1)]}}

    def _first(self, query):
        # Raises like the driver for values BSON cannot hold (e.g. ints over 8 bytes)
        bson.encode(query)
        for doc in self.docs:
            if matches(doc, query):
                return doc
        return None

    def _positional_index(self, doc, query) -> Optional[int]:
        for key, cond in query.items():
            if isinstance(cond, dict) and "$elemMatch" in cond and isinstance(doc.get(key), list):
                for index, element in enumerate(doc[key]):
                    if isinstance(element, dict) and matches(element, cond["$elemMatch"]):
                        return index
        return None

    def _apply(self, doc, update, query, inserting=False):
        bson.encode(update)
        position = self._positional_index(doc, query)
        for op, fields in update.items():
            for path, value in fields.items():
                if "$" in path.split("."):
                    path = path.replace(".$", f".{position}")
                if op == "$set":
                    _set_path(doc, path, copy.deepcopy(value))
                elif op == "$setOnInsert":
                    if inserting:
                        _set_path(doc, path, copy.deepcopy(value))
                elif op == "$unset":
                    doc.pop(path, None)
                elif op == "$push":
                    doc.setdefault(path, []).append(copy.deepcopy(value))
                elif op == "$pull":
                    current = doc.get(path, [])
                    if _is_operator_doc(value) or isinstance(value, dict):
                        doc[path] = [
                            element for element in current
                            if not (isinstance(element, dict) and matches(element, value))
                        ]
                    else:
                        doc[path] = [element for element in current if element != value]
                else:
                    raise NotImplementedError(op)

    def _check_unique(self, doc):
        for other in self.docs:
            if other is not doc and other.get("email") == doc.get("email"):
                raise DuplicateKeyError("E11000 duplicate key error: email")

    async def find_one(self, query, projection=None):
        self.calls.append("find_one")
        doc = self._first(query)
        return _project(doc, projection) if doc is not None else None

    async def insert_one(self, document):
        self.calls.append("insert_one")
        bson.encode(document)
        document = copy.deepcopy(document)
        document.setdefault("_id", ObjectId())
        self._check_unique(document)
        self.docs.append(document)
        return SimpleNamespace(inserted_id=document["_id"])

    async def update_one(self, query, update, upsert=False):
        self.calls.append("update_one")
        doc = self._first(query)
        if doc is None:
            if not upsert:
                return SimpleNamespace(matched_count=0, modified_count=0, upserted_id=None)
            doc = {
                key: value for key, value in query.items()
                if not key.startswith("$") and not _is_operator_doc(value)
            }
            doc["_id"] = ObjectId()
            self._apply(doc, update, query, inserting=True)
            self._check_unique(doc)
            self.docs.append(doc)
            return SimpleNamespace(matched_count=0, modified_count=0, upserted_id=doc["_id"])

        before = copy.deepcopy(doc)
        self._apply(doc, update, query)
        return SimpleNamespace(
            matched_count=1,
            modified_count=int(before != doc),
            upserted_id=None,
        )

    async def find_one_and_update(self, query, update, projection=None, return_document=False, upsert=False):
        self.calls.append("find_one_and_update")
        doc = self._first(query)
        if doc is None:
            return None
        before = copy.deepcopy(doc)
        self._apply(doc, update, query)
        return _project(doc if return_document else before, projection)

    async def create_index(self, keys, unique=False, name=None, **kwargs):
        self.calls.append("create_index")
        if isinstance(keys, str):
            keys = [(keys, 1)]
        name = name or "_".join(f"{field}_{direction}" for field, direction in keys)
        self.indexes[name] = {"key": list(keys), "unique": unique}
        return name

    async def index_information(self):
        return dict(self.indexes)

    def get(self, email: str) -> Optional[Dict[str, Any]]:
        """Direct read for assertions; not recorded as a store call."""
        for doc in self.docs:
            if doc.get("email") == email:
                return doc
        return None


class FakeNotifier:
    """Records login codes instead of emailing them."""

    def __init__(self):
        self.sent: List[Dict[str, str]] = []
        self.fail = False

    def is_configured(self) -> bool:
        return True

    async def send_otp(self, to_email: str, otp: str) -> Dict[str, Any]:
        self.sent.append({"email": to_email, "otp": otp})
        if self.fail:
            return {"success": False, "transport": "smtp", "error": "SMTP connection refused"}
        return {"success": True, "transport": "smtp"}

    def last_code(self, email: str) -> str:
        for message in reversed(self.sent):
            if message["email"] == email:
                return message["otp"]
        raise AssertionError(f"No code sent to {email}")


@pytest.fixture
def test_settings():
    """Settings used by the app under test"""
    return Settings(
        ENVIRONMENT="development",
        JWT_SECRET="test-secret",
        SESSION_TOKEN_EXPIRY_DAYS=7,
        OTP_EXPIRY_MINUTES=5,
    )


@pytest.fixture
def users():
    """Empty in-memory users collection"""
    return FakeUsersCollection()


@pytest.fixture
def notifier():
    """Notifier that records codes"""
    return FakeNotifier()


@pytest.fixture
def client(users, notifier, test_settings):
    """TestClient with the store, notifier and settings overridden"""
    app.dependency_overrides[get_users_collection] = lambda: users
    app.dependency_overrides[get_email_service] = lambda: notifier
    app.dependency_overrides[get_settings] = lambda: test_settings
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def login(client, notifier):
    """Runs the login + verify flow and returns auth headers"""
    def _login(email: str = "a@x.com") -> Dict[str, str]:
        response = client.post("/login", json={"email": email})
        assert response.status_code == 200, response.text
        code = notifier.last_code(email)
        response = client.post("/verify-otp", json={"email": email, "otp": code})
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['token']}"}

    return _login
