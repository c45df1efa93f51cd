"""
backend/tests/fake_mongo.py

Purpose:
    In-memory stand-in for the motor collections used by the repositories.
    Supports the query subset the service issues: equality (including
    array membership), $in, $nin, $ne, $gt/$gte/$lt/$lte, $exists, $and, $or;
    $set, $inc and $setOnInsert updates; upserts; unique indexes.

    Every method runs without yielding to the event loop, so each call is
    atomic with respect to other coroutines, like a single Mongo operation.
"""

from __future__ import annotations

import copy
from types import SimpleNamespace
from typing import Any, Iterable, Optional

from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

_MISSING = object()


def _compare(actual: Any, op: str, arg: Any) -> bool:
    if actual is _MISSING or actual is None:
        return False
    if op == "$gt":
        return actual > arg
    if op == "$gte":
        return actual >= arg
    if op == "$lt":
        return actual < arg
    return actual <= arg


def _apply_op(actual: Any, op: str, arg: Any) -> bool:
    if op == "$in":
        if isinstance(actual, list):
            return any(item in arg for item in actual)
        return actual is not _MISSING and actual in arg
    if op == "$nin":
        return not _apply_op(actual, "$in", arg)
    if op == "$ne":
        return not _match_value(actual, arg)
    if op in ("$gt", "$gte", "$lt", "$lte"):
        return _compare(actual, op, arg)
    if op == "$exists":
        return (actual is not _MISSING) == bool(arg)
    raise NotImplementedError(f"fake_mongo does not support {op}")


def _is_operator_doc(cond: Any) -> bool:
    return isinstance(cond, dict) and bool(cond) and all(str(k).startswith("$") for k in cond)


def _match_value(actual: Any, cond: Any) -> bool:
    if _is_operator_doc(cond):
        return all(_apply_op(actual, op, arg) for op, arg in cond.items())
    if actual is _MISSING:
        return cond is None
    if isinstance(actual, list) and not isinstance(cond, list):
        return cond in actual
    return actual == cond


def matches(doc: dict, query: dict) -> bool:
    for key, cond in query.items():
        if key == "$and":
            if not all(matches(doc, sub) for sub in cond):
                return False
            continue
        if key == "$or":
            if not any(matches(doc, sub) for sub in cond):
                return False
            continue
        if not _match_value(doc.get(key, _MISSING), cond):
            return False
    return True


def _sort_key(field: str):
    def key(doc: dict):
        value = doc.get(field)
        return (value is not None, value)
    return key


class FakeCursor:
    def __init__(self, docs: list[dict]):
        self._docs = docs
        self._limit: Optional[int] = None

    def sort(self, key, direction: int = 1):
        specs = key if isinstance(key, list) else [(key, direction)]
        # Stable sorts applied last-key-first give a compound ordering.
        for field, order in reversed(specs):
            self._docs = sorted(self._docs, key=_sort_key(field), reverse=order < 0)
        return self

    def limit(self, value: int):
        self._limit = value or None
        return self

    def _window(self, length: Optional[int] = None) -> list[dict]:
        docs = self._docs
        if self._limit is not None:
            docs = docs[: self._limit]
        if length is not None:
            docs = docs[:length]
        return [copy.deepcopy(d) for d in docs]

    async def to_list(self, length: Optional[int] = None):
        return self._window(length)

    def __aiter__(self):
        async def _gen():
            for doc in self._window():
                yield doc
        return _gen()


class FakeCollection:
    def __init__(self, name: str):
        self.name = name
        self.docs: list[dict] = []
        self._unique: list[tuple[str, ...]] = []

    # Sync helper for arranging test data.
    def add(self, *docs: dict) -> None:
        for doc in docs:
            self._insert(doc)

    def _insert(self, doc: dict) -> dict:
        doc = copy.deepcopy(doc)
        doc.setdefault("_id", ObjectId())
        for fields in self._unique + [("_id",)]:
            if all(f not in doc for f in fields):
                continue
            key = tuple(doc.get(f) for f in fields)
            for existing in self.docs:
                if tuple(existing.get(f) for f in fields) == key:
                    raise DuplicateKeyError(f"E11000 duplicate key error collection: {self.name}")
        self.docs.append(doc)
        return doc

    async def create_index(self, keys, unique: bool = False, **_kwargs) -> str:
        fields = (keys,) if isinstance(keys, str) else tuple(k for k, _ in keys)
        if unique and fields not in self._unique:
            self._unique.append(fields)
        return "_".join(fields)

    def find(self, query: Optional[dict] = None, projection: Optional[dict] = None) -> FakeCursor:
        query = query or {}
        return FakeCursor([d for d in self.docs if matches(d, query)])

    async def find_one(self, query: Optional[dict] = None, projection: Optional[dict] = None):
        query = query or {}
        for doc in self.docs:
            if matches(doc, query):
                return copy.deepcopy(doc)
        return None

    async def count_documents(self, query: dict) -> int:
        return sum(1 for d in self.docs if matches(d, query))

    async def insert_one(self, doc: dict):
        stored = self._insert(doc)
        return SimpleNamespace(inserted_id=stored["_id"])

    @staticmethod
    def _apply_update(doc: dict, update: dict, inserting: bool = False) -> None:
        for key, value in (update.get("$set") or {}).items():
            doc[key] = copy.deepcopy(value)
        for key, value in (update.get("$inc") or {}).items():
            doc[key] = doc.get(key, 0) + value
        if inserting:
            for key, value in (update.get("$setOnInsert") or {}).items():
                doc[key] = copy.deepcopy(value)

    async def update_one(self, query: dict, update: dict, upsert: bool = False):
        for doc in self.docs:
            if matches(doc, query):
                self._apply_update(doc, update)
                return SimpleNamespace(matched_count=1, modified_count=1, upserted_id=None)
        if upsert:
            stored = self._upsert(query, update)
            return SimpleNamespace(matched_count=0, modified_count=0, upserted_id=stored["_id"])
        return SimpleNamespace(matched_count=0, modified_count=0, upserted_id=None)

    def _upsert(self, query: dict, update: dict) -> dict:
        seed = {k: v for k, v in query.items() if not k.startswith("$") and not _is_operator_doc(v)}
        self._apply_update(seed, update, inserting=True)
        return self._insert(seed)

    async def find_one_and_update(
        self,
        query: dict,
        update: dict,
        upsert: bool = False,
        return_document=ReturnDocument.BEFORE,
        **_kwargs,
    ):
        for doc in self.docs:
            if matches(doc, query):
                before = copy.deepcopy(doc)
                self._apply_update(doc, update)
                return copy.deepcopy(doc) if return_document == ReturnDocument.AFTER else before
        if upsert:
            stored = self._upsert(query, update)
            return copy.deepcopy(stored) if return_document == ReturnDocument.AFTER else None
        return None


class FakeDatabase:
    def __init__(self, name: str = "lotato_test"):
        self.name = name
        self._collections: dict[str, FakeCollection] = {}

    def __getitem__(self, name: str) -> FakeCollection:
        if name not in self._collections:
            self._collections[name] = FakeCollection(name)
        return self._collections[name]

    def __getattr__(self, name: str) -> FakeCollection:
        if name.startswith("_"):
            raise AttributeError(name)
        return self[name]

    async def command(self, name: str):
        return {"ok": 1.0}

    def collection_names(self) -> Iterable[str]:
        return list(self._collections)
